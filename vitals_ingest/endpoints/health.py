"""Health, Prometheus y diagnóstico del motor."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..engine import PerformanceEngine
from ..schemas import CleanupResult
from .deps import get_engine

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: ok mientras el proceso esté vivo."""
    return {"status": "ok"}


@router.get("/metrics")
def metrics():
    """Métricas Prometheus del proceso."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/api/analytics/diagnostics")
def diagnostics(request: Request, engine: PerformanceEngine = Depends(get_engine)):
    """Estado del motor: mediciones retenidas, ingestas, rechazos, alertas.

    ISO 27001: solo agregados, sin URLs ni user agents.
    """
    result = engine.stats()
    worker = getattr(request.app.state, "retention_worker", None)
    result["retention_worker"] = worker.stats if worker is not None else None
    return result


@router.post("/api/analytics/cleanup", response_model=CleanupResult)
def cleanup(
    max_age: Optional[float] = Query(None, alias="maxAge", ge=0, description="Edad máxima en ms (default: retención configurada)"),
    engine: PerformanceEngine = Depends(get_engine),
):
    """Elimina mediciones y alertas más antiguas que maxAge."""
    return CleanupResult(**engine.cleanup(max_age).to_dict())
