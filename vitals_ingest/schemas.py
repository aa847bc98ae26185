from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .alerts.models import Alert
from .engine import IngestReport


class MetricsBatchIn(BaseModel):
    """Lote de mediciones crudas.

    Cada elemento se valida de forma individual en el normalizador, así un
    registro mal formado solo se rechaza a sí mismo.
    """

    metrics: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "metrics": [
                    {"name": "LCP", "value": 2310.5, "delta": 120.0, "navigationType": "navigate"},
                    {"name": "CLS", "value": 0.04, "url": "https://example.com/"},
                ]
            }
        }
    )


class AlertOut(BaseModel):
    id: str
    type: str
    metric: str
    message: str
    value: float
    threshold: float
    timestamp: float

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertOut":
        return cls(**alert.to_dict())


class IngestResult(BaseModel):
    success: bool = True
    id: str
    rating: str
    alerts: List[AlertOut] = Field(default_factory=list)


class RejectionOut(BaseModel):
    index: int
    reason: str


class BatchIngestResult(BaseModel):
    accepted: int = Field(..., description="Mediciones aceptadas")
    rejected: int = Field(default=0, description="Mediciones rechazadas")
    errors: List[RejectionOut] = Field(default_factory=list)
    alerts: List[AlertOut] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: IngestReport) -> "BatchIngestResult":
        return cls(
            accepted=len(report.accepted),
            rejected=len(report.rejected),
            errors=[RejectionOut(**r.to_dict()) for r in report.rejected],
            alerts=[AlertOut.from_alert(a) for a in report.alerts],
        )


class AlertsResponse(BaseModel):
    success: bool = True
    data: List[AlertOut]
    count: int
    timestamp: float


class CleanupResult(BaseModel):
    measurements_removed: int
    alerts_removed: int


class ExportResponse(BaseModel):
    count: int
    metrics: List[Dict[str, Any]]
