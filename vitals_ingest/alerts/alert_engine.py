"""Motor de alertas de rendimiento.

Evalúa las mediciones recientes agrupadas por métrica y emite alertas
clasificadas por severidad. Mantiene la lista de alertas retenidas
(orden de creación) y la poda por antigüedad en cada evaluación.

No deduplica: dos evaluaciones sobre la misma ventana pueden emitir la
misma alerta dos veces. El despacho a canales externos (Slack/email) lo
hace quien llama, con la lista devuelta por `evaluate`.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Iterable, List, Optional

from ..classification.models import Measurement, Rating
from ..classification.normalizer import now_ms
from ..classification.thresholds import ThresholdTable
from ..metrics.aggregator import group_by_name
from ..observability import ALERTS_RAISED
from .alert_rules import AlertRules, AlertRulesConfig
from .models import Alert, AlertSeverity

logger = logging.getLogger(__name__)


class AlertEngine:
    """Genera y retiene alertas. Thread-safe."""

    def __init__(
        self,
        thresholds: ThresholdTable,
        config: Optional[AlertRulesConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._thresholds = thresholds
        self._rules = AlertRules(config or AlertRulesConfig())
        self._clock = clock or now_ms
        self._alerts: List[Alert] = []
        self._lock = threading.Lock()
        self._seq = itertools.count(1)

    @property
    def config(self) -> AlertRulesConfig:
        return self._rules.config

    def _new_alert(
        self,
        kind: str,
        severity: AlertSeverity,
        metric: str,
        message: str,
        value: float,
        threshold: float,
        now: float,
    ) -> Alert:
        return Alert(
            id=f"{kind}-{metric}-{int(now)}-{next(self._seq)}",
            type=severity,
            metric=metric,
            message=message,
            value=value,
            threshold=threshold,
            timestamp=now,
        )

    def _evaluate_metric(self, name: str, items: List[Measurement], now: float) -> List[Alert]:
        th = self._thresholds.get(name)
        if th is None:
            # sin umbral todo es good: nada que alertar
            return []

        raised: List[Alert] = []
        poor = sum(1 for m in items if m.rating is Rating.POOR)
        poor_pct = poor / len(items) * 100

        hit = self._rules.severity_for_poor_pct(poor_pct)
        if hit is not None:
            severity, limit = hit
            if severity is AlertSeverity.CRITICAL:
                message = f"Critical performance issue: {poor_pct:.1f}% of {name} metrics are poor"
            else:
                message = f"Performance warning: {poor_pct:.1f}% of {name} metrics are poor"
            raised.append(
                self._new_alert(severity.value, severity, name, message, poor_pct, limit, now)
            )

        extreme_limit = self._rules.extreme_limit(th.poor)
        extreme = [m.value for m in items if m.value > extreme_limit]
        if extreme:
            raised.append(
                self._new_alert(
                    "extreme",
                    AlertSeverity.CRITICAL,
                    name,
                    f"Extreme {name} values detected: {len(extreme)} metrics exceed {extreme_limit:g}",
                    max(extreme),
                    extreme_limit,
                    now,
                )
            )
        return raised

    def evaluate(self, measurements: Iterable[Measurement], now: Optional[float] = None) -> List[Alert]:
        """Evalúa mediciones dentro de la ventana reciente y retiene las alertas nuevas.

        Returns:
            Alertas emitidas en esta pasada (en orden de creación)
        """
        now = self._clock() if now is None else now
        recent = [m for m in measurements if self._rules.is_recent(m.timestamp, now)]

        raised: List[Alert] = []
        for name, items in group_by_name(recent).items():
            raised.extend(self._evaluate_metric(name, items, now))

        for alert in raised:
            ALERTS_RAISED.labels(type=alert.type.value).inc()
            logger.warning(
                "ALERT_RAISED type=%s metric=%s value=%.3f threshold=%.3f",
                alert.type.value, alert.metric, alert.value, alert.threshold,
            )

        with self._lock:
            self._alerts.extend(raised)
            self._evict_locked(now, self.config.retention_ms)

        return raised

    def _evict_locked(self, now: float, max_age_ms: float) -> int:
        before = len(self._alerts)
        kept = [a for a in self._alerts if now - a.timestamp < max_age_ms]
        cap = self.config.max_retained
        if cap is not None and len(kept) > cap:
            kept = kept[-cap:]
        self._alerts = kept
        return before - len(kept)

    def evict(self, max_age_ms: Optional[float] = None, now: Optional[float] = None) -> int:
        """Elimina alertas más antiguas que `max_age_ms` (default: retención configurada)."""
        now = self._clock() if now is None else now
        max_age_ms = self.config.retention_ms if max_age_ms is None else max_age_ms
        with self._lock:
            removed = self._evict_locked(now, max_age_ms)
        if removed:
            logger.info("ALERTS_EVICTED removed=%d", removed)
        return removed

    def alerts(self) -> List[Alert]:
        """Copia de las alertas retenidas, más antigua primero."""
        with self._lock:
            return list(self._alerts)

    def recent(self, count: int = 10) -> List[Alert]:
        """Las `count` alertas retenidas más recientes (orden de creación)."""
        if count <= 0:
            return []
        with self._lock:
            return self._alerts[-count:]

    def query(
        self,
        severity: Optional[AlertSeverity] = None,
        metric: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Alert]:
        """Filtra alertas retenidas, más nueva primero.

        `metric` se compara como substring sin distinguir mayúsculas.
        """
        result = self.alerts()
        if severity is not None:
            result = [a for a in result if a.type is AlertSeverity(severity)]
        if metric:
            needle = metric.lower()
            result = [a for a in result if needle in a.metric.lower()]
        result.reverse()
        result.sort(key=lambda a: a.timestamp, reverse=True)
        if limit is not None:
            result = result[:limit]
        return result
