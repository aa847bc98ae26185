"""Reglas de negocio para alertas de rendimiento.

Porcentajes y multiplicadores configurables (defaults documentados):
- CRITICAL: > 50% de mediciones recientes calificadas poor
- WARNING: > 25% de mediciones recientes calificadas poor
- Valor extremo: cualquier valor > 2 × umbral poor (alerta CRITICAL adicional)
- Ventana de evaluación: últimos 5 minutos
- Retención de alertas: 1 hora

Variables de entorno:
- VITALS_ALERT_CRITICAL_PCT (default: 50)
- VITALS_ALERT_WARNING_PCT (default: 25)
- VITALS_ALERT_EXTREME_MULTIPLIER (default: 2)
- VITALS_ALERT_RECENT_WINDOW_MS (default: 300000)
- VITALS_ALERT_RETENTION_MS (default: 3600000)
- VITALS_ALERT_MAX_RETAINED (default: sin tope, solo retención por antigüedad)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .models import AlertSeverity


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return int(raw)


@dataclass(frozen=True)
class AlertRulesConfig:
    """Configuración de reglas de alerta."""

    critical_poor_pct: float = 50.0
    warning_poor_pct: float = 25.0
    extreme_multiplier: float = 2.0
    recent_window_ms: float = 5 * 60 * 1000
    retention_ms: float = 60 * 60 * 1000
    max_retained: Optional[int] = None

    def __post_init__(self):
        if self.warning_poor_pct > self.critical_poor_pct:
            raise ValueError(
                f"warning_poor_pct={self.warning_poor_pct} exceeds "
                f"critical_poor_pct={self.critical_poor_pct}"
            )
        if self.recent_window_ms <= 0 or self.retention_ms <= 0:
            raise ValueError("alert windows must be positive")
        if self.max_retained is not None and self.max_retained < 1:
            raise ValueError("max_retained must be >= 1")

    @classmethod
    def from_env(cls) -> "AlertRulesConfig":
        return cls(
            critical_poor_pct=float(os.getenv("VITALS_ALERT_CRITICAL_PCT", "50")),
            warning_poor_pct=float(os.getenv("VITALS_ALERT_WARNING_PCT", "25")),
            extreme_multiplier=float(os.getenv("VITALS_ALERT_EXTREME_MULTIPLIER", "2")),
            recent_window_ms=float(os.getenv("VITALS_ALERT_RECENT_WINDOW_MS", "300000")),
            retention_ms=float(os.getenv("VITALS_ALERT_RETENTION_MS", "3600000")),
            max_retained=_optional_int(os.getenv("VITALS_ALERT_MAX_RETAINED")),
        )


class AlertRules:
    """Reglas puras de clasificación de severidad."""

    def __init__(self, config: AlertRulesConfig):
        self.config = config

    def severity_for_poor_pct(self, poor_pct: float) -> Optional[tuple[AlertSeverity, float]]:
        """Severidad y umbral cruzado, o None si no hay alerta.

        Regla: CRITICAL tiene prioridad, WARNING solo si no es CRITICAL.
        """
        if poor_pct > self.config.critical_poor_pct:
            return AlertSeverity.CRITICAL, self.config.critical_poor_pct
        if poor_pct > self.config.warning_poor_pct:
            return AlertSeverity.WARNING, self.config.warning_poor_pct
        return None

    def extreme_limit(self, poor_threshold: float) -> float:
        return poor_threshold * self.config.extreme_multiplier

    def is_recent(self, timestamp: float, now: float) -> bool:
        return now - timestamp < self.config.recent_window_ms
