"""Endpoint de consulta de alertas de rendimiento."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..alerts.models import AlertSeverity
from ..engine import PerformanceEngine
from ..rate_limiter import rate_limit
from ..schemas import AlertOut, AlertsResponse
from .deps import get_engine

router = APIRouter(prefix="/api/analytics", tags=["alerts"])


@router.get(
    "/alerts",
    response_model=AlertsResponse,
    dependencies=[Depends(rate_limit("alerts"))],
)
def get_alerts(
    response: Response,
    severity: Optional[AlertSeverity] = Query(None, description="critical | warning | info"),
    metric: Optional[str] = Query(None, description="Substring del nombre de métrica"),
    limit: int = Query(50, ge=1, le=100),
    engine: PerformanceEngine = Depends(get_engine),
):
    """Alertas retenidas, más nuevas primero."""
    alerts = engine.alerts(severity=severity, metric=metric, limit=limit)

    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["X-Alert-Count"] = str(len(alerts))

    return AlertsResponse(
        data=[AlertOut.from_alert(a) for a in alerts],
        count=len(alerts),
        timestamp=engine.now(),
    )
