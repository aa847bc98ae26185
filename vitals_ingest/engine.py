"""Motor de telemetría de rendimiento (Web Vitals).

Compone normalizador, Rolling Store, agregador, analizador de tendencia,
motor de alertas y ensamblador de dashboard. Se construye explícitamente
en la raíz de composición (ver `main.create_app`) y se inyecta; no hay
instancia global.

Flujo:
    raw → MetricNormalizer → RollingStore
        → AlertEngine.evaluate(lote recién aceptado)
    lectura → DashboardAssembler (MetricAggregator + TrendAnalyzer + alertas)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from common.config import Settings

from .alerts import Alert, AlertEngine, AlertRulesConfig, AlertSeverity
from .classification import Measurement, MetricNormalizer, Rating, ThresholdTable, now_ms
from .dashboard import DEFAULT_RANGE_MS, DashboardAssembler, DashboardData
from .errors import EmptyWindow, InvalidMeasurement, InvalidRange
from .metrics import MetricAggregator, MetricAnalysis, TrendAnalyzer
from .observability import MEASUREMENTS_INGESTED, MEASUREMENTS_REJECTED, STORE_SIZE
from .store import RollingStore

logger = logging.getLogger(__name__)

DEFAULT_METRICS_RETENTION_MS = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class EngineConfig:
    """Configuración estática del motor (se fija al arrancar)."""

    thresholds: ThresholdTable = field(default_factory=ThresholdTable)
    alert_rules: AlertRulesConfig = field(default_factory=AlertRulesConfig)
    trend_stable_pct: float = 5.0
    metrics_retention_ms: float = DEFAULT_METRICS_RETENTION_MS
    default_range_ms: float = DEFAULT_RANGE_MS

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineConfig":
        thresholds = (
            ThresholdTable.from_json_file(settings.thresholds_file)
            if settings.thresholds_file
            else ThresholdTable()
        )
        return cls(
            thresholds=thresholds,
            alert_rules=AlertRulesConfig.from_env(),
            trend_stable_pct=TrendAnalyzer.from_env().stable_pct,
            metrics_retention_ms=settings.metrics_retention_ms,
            default_range_ms=settings.default_range_ms,
        )


@dataclass
class RejectedMeasurement:
    index: int
    reason: str

    def to_dict(self) -> dict:
        return {"index": self.index, "reason": self.reason}


@dataclass
class IngestReport:
    """Resultado de una ingesta en lote (o importación)."""

    accepted: List[Measurement] = field(default_factory=list)
    rejected: List[RejectedMeasurement] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)


@dataclass
class CleanupReport:
    measurements_removed: int
    alerts_removed: int

    def to_dict(self) -> dict:
        return {
            "measurements_removed": self.measurements_removed,
            "alerts_removed": self.alerts_removed,
        }


class PerformanceEngine:
    """Fachada pública del motor. Thread-safe."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or EngineConfig()
        self._clock = clock or now_ms

        self.normalizer = MetricNormalizer(self.config.thresholds, clock=self._clock)
        self.store = RollingStore(clock=self._clock)
        self.aggregator = MetricAggregator(TrendAnalyzer(self.config.trend_stable_pct))
        self.alert_engine = AlertEngine(
            self.config.thresholds, self.config.alert_rules, clock=self._clock
        )
        self.dashboard = DashboardAssembler(
            self.store, self.aggregator, self.alert_engine, clock=self._clock
        )

        self._started_at = time.time()
        self._ingested = 0
        self._rejected = 0
        self._stats_lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    # ------------------------------------------------------------------
    # Ingesta
    # ------------------------------------------------------------------

    def _accept(self, measurement: Measurement) -> None:
        self.store.append(measurement)
        with self._stats_lock:
            self._ingested += 1
        MEASUREMENTS_INGESTED.labels(rating=measurement.rating.value).inc()
        if measurement.rating is Rating.POOR:
            logger.warning(
                "POOR_MEASUREMENT name=%s value=%s url=%s",
                measurement.name, measurement.value, measurement.source_url or "-",
            )

    def _reject(self, index: int, err: InvalidMeasurement, report: IngestReport) -> None:
        with self._stats_lock:
            self._rejected += 1
        MEASUREMENTS_REJECTED.inc()
        report.rejected.append(RejectedMeasurement(index=index, reason=err.reason))
        logger.warning("INVALID_MEASUREMENT index=%d reason=%s", index, err.reason)

    def _ingest_many(
        self,
        records: Iterable[Any],
        convert: Callable[[Any], Measurement],
    ) -> IngestReport:
        report = IngestReport()
        for index, raw in enumerate(records):
            try:
                measurement = convert(raw)
            except InvalidMeasurement as e:
                self._reject(index, e, report)
                continue
            self._accept(measurement)
            report.accepted.append(measurement)

        if report.accepted:
            report.alerts = self.alert_engine.evaluate(report.accepted)
        STORE_SIZE.set(len(self.store))
        return report

    def ingest(self, raw: Any) -> Measurement:
        """Ingesta una medición cruda.

        Raises:
            InvalidMeasurement si la medición se rechaza (no se almacena)
        """
        report = self.ingest_batch([raw])
        if report.rejected:
            raise InvalidMeasurement(report.rejected[0].reason)
        return report.accepted[0]

    def ingest_batch(self, records: Iterable[Any]) -> IngestReport:
        """Ingesta un lote; un registro inválido no afecta a los demás."""
        return self._ingest_many(records, self.normalizer.normalize)

    def import_measurements(self, records: Iterable[Any]) -> IngestReport:
        """Restaura mediciones exportadas por el mismo camino que la ingesta."""
        report = self._ingest_many(records, self.normalizer.restore)
        logger.info(
            "IMPORT_DONE accepted=%d rejected=%d", len(report.accepted), len(report.rejected)
        )
        return report

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    def snapshot(self, time_range_ms: Optional[float] = None) -> DashboardData:
        return self.dashboard.snapshot(
            self.config.default_range_ms if time_range_ms is None else time_range_ms
        )

    def metric_summary(
        self, name: str, time_range_ms: Optional[float] = None
    ) -> Optional[MetricAnalysis]:
        """Análisis de una sola métrica, o None si no hay datos en la ventana."""
        range_ms = self.config.default_range_ms if time_range_ms is None else time_range_ms
        if range_ms <= 0:
            raise InvalidRange(f"time_range_ms must be positive, got {range_ms}")
        now = self._clock()
        try:
            return self.aggregator.analyze(self.store.query(now - range_ms, now), name)
        except EmptyWindow:
            return None

    def alerts(
        self,
        severity: Optional[AlertSeverity] = None,
        metric: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Alert]:
        return self.alert_engine.query(severity=severity, metric=metric, limit=limit)

    def export_measurements(self, time_range_ms: Optional[float] = None) -> List[Measurement]:
        """Mediciones retenidas (todas, o con timestamp >= now - time_range_ms)."""
        items = self.store.snapshot()
        if time_range_ms is None:
            return items
        if time_range_ms <= 0:
            raise InvalidRange(f"time_range_ms must be positive, got {time_range_ms}")
        cutoff = self._clock() - time_range_ms
        return [m for m in items if m.timestamp >= cutoff]

    # ------------------------------------------------------------------
    # Mantenimiento
    # ------------------------------------------------------------------

    def cleanup(self, max_age_ms: Optional[float] = None) -> CleanupReport:
        """Elimina mediciones y alertas más antiguas que `max_age_ms`."""
        max_age_ms = self.config.metrics_retention_ms if max_age_ms is None else max_age_ms
        now = self._clock()
        report = CleanupReport(
            measurements_removed=self.store.evict_older_than(max_age_ms, now=now),
            alerts_removed=self.alert_engine.evict(max_age_ms, now=now),
        )
        STORE_SIZE.set(len(self.store))
        return report

    def stats(self) -> dict:
        """Diagnóstico del motor para el endpoint de observabilidad."""
        with self._stats_lock:
            ingested, rejected = self._ingested, self._rejected
        return {
            "uptime_seconds": round(time.time() - self._started_at, 2),
            "stored_measurements": len(self.store),
            "total_ingested": ingested,
            "total_rejected": rejected,
            "retained_alerts": len(self.alert_engine.alerts()),
            "thresholds": self.config.thresholds.to_dict(),
        }
