"""Alertas de rendimiento: reglas, motor y modelos."""

from .models import Alert, AlertSeverity
from .alert_rules import AlertRules, AlertRulesConfig
from .alert_engine import AlertEngine

__all__ = [
    "Alert",
    "AlertSeverity",
    "AlertRules",
    "AlertRulesConfig",
    "AlertEngine",
]
