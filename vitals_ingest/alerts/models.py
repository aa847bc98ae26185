"""Modelos de alertas de rendimiento."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Alert:
    """Alerta emitida por el motor. Nunca se modifica tras crearse."""

    id: str
    type: AlertSeverity
    metric: str
    message: str
    value: float
    threshold: float
    timestamp: float  # epoch ms

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "metric": self.metric,
            "message": self.message,
            "value": self.value,
            "threshold": self.threshold,
            "timestamp": self.timestamp,
        }
