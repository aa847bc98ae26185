"""Endpoints de lectura para el dashboard de rendimiento."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..engine import PerformanceEngine
from ..rate_limiter import rate_limit
from .deps import get_engine, resolve_range

router = APIRouter(prefix="/api/analytics", tags=["dashboard"])
logger = logging.getLogger(__name__)


@router.get("/dashboard", dependencies=[Depends(rate_limit("dashboard"))])
def get_dashboard(
    request: Request,
    time_range: Optional[float] = Query(None, alias="timeRange", gt=0, description="Rango en ms (default 1h)"),
    engine: PerformanceEngine = Depends(get_engine),
):
    """Snapshot del dashboard para [now - timeRange, now].

    Example response:
    ```json
    {
        "success": true,
        "data": {
            "totalMetrics": 42,
            "timeRange": {"start": 1760000000000, "end": 1760003600000},
            "byName": {"LCP": {"name": "LCP", "count": 20, "p75": 2600, ...}},
            "overallRating": {"good": 30, "needs-improvement": 8, "poor": 4},
            "alerts": [...],
            "timestamp": 1760003600000
        }
    }
    ```
    """
    snapshot = engine.snapshot(resolve_range(request, time_range))
    return {"success": True, "data": snapshot.to_dict()}


@router.get("/metrics/{name}", dependencies=[Depends(rate_limit("dashboard"))])
def get_metric_summary(
    name: str,
    request: Request,
    time_range: Optional[float] = Query(None, alias="timeRange", gt=0),
    engine: PerformanceEngine = Depends(get_engine),
):
    """Análisis de una sola métrica; 404 si no hay datos en la ventana."""
    analysis = engine.metric_summary(name, resolve_range(request, time_range))
    if analysis is None:
        raise HTTPException(status_code=404, detail=f"No {name} measurements in range")
    return {"success": True, "data": analysis.to_dict()}
