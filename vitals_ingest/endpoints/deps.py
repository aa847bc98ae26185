"""Dependencias compartidas por los routers."""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from ..engine import PerformanceEngine


def get_engine(request: Request) -> PerformanceEngine:
    return request.app.state.engine


def resolve_range(request: Request, time_range_ms: Optional[float]) -> Optional[float]:
    """Acota `timeRange` al máximo configurado para evitar escaneos sin límite."""
    if time_range_ms is None:
        return None
    max_range = request.app.state.settings.max_range_ms
    if time_range_ms > max_range:
        raise HTTPException(
            status_code=400,
            detail=f"timeRange must be <= {int(max_range)} ms",
        )
    return time_range_ms
