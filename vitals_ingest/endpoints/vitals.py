"""Endpoints de ingesta, exportación e importación de Web Vitals."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from ..engine import PerformanceEngine
from ..rate_limiter import rate_limit
from ..schemas import (
    AlertOut,
    BatchIngestResult,
    ExportResponse,
    IngestResult,
    MetricsBatchIn,
)
from .deps import get_engine, resolve_range

router = APIRouter(prefix="/api/analytics", tags=["web-vitals"])
logger = logging.getLogger(__name__)


@router.post(
    "/web-vitals",
    response_model=IngestResult,
    dependencies=[Depends(rate_limit("ingest"))],
)
def ingest_web_vital(
    payload: Any = Body(...),
    engine: PerformanceEngine = Depends(get_engine),
):
    """Ingesta de una medición del colector del navegador.

    Formato: {name, value, delta?, navigationType?, timestamp?, url?, userAgent?}
    400 si name/value falta o value no es numérico.
    """
    report = engine.ingest_batch([payload])
    if report.rejected:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid metric data: {report.rejected[0].reason}",
        )

    measurement = report.accepted[0]
    return IngestResult(
        id=measurement.id,
        rating=measurement.rating.value,
        alerts=[AlertOut.from_alert(a) for a in report.alerts],
    )


@router.post(
    "/web-vitals/batch",
    response_model=BatchIngestResult,
    dependencies=[Depends(rate_limit("ingest"))],
)
def ingest_web_vitals_batch(
    payload: MetricsBatchIn,
    engine: PerformanceEngine = Depends(get_engine),
):
    """Ingesta en lote; los rechazos se reportan por índice."""
    return BatchIngestResult.from_report(engine.ingest_batch(payload.metrics))


@router.get(
    "/export",
    response_model=ExportResponse,
    dependencies=[Depends(rate_limit("dashboard"))],
)
def export_metrics(
    request: Request,
    time_range: Optional[float] = Query(None, alias="timeRange", gt=0),
    engine: PerformanceEngine = Depends(get_engine),
):
    """Exporta mediciones retenidas para archivo externo."""
    items = engine.export_measurements(resolve_range(request, time_range))
    return ExportResponse(count=len(items), metrics=[m.to_dict() for m in items])


@router.post(
    "/import",
    response_model=BatchIngestResult,
    dependencies=[Depends(rate_limit("ingest"))],
)
def import_metrics(
    payload: MetricsBatchIn,
    engine: PerformanceEngine = Depends(get_engine),
):
    """Importa mediciones exportadas previamente (mismo camino que la ingesta)."""
    return BatchIngestResult.from_report(engine.import_measurements(payload.metrics))
