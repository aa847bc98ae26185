"""Ensamblador del snapshot de dashboard.

Une Rolling Store + Aggregator (+ tendencia) + alertas retenidas en un
único `DashboardData` para un rango temporal.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from ..alerts.alert_engine import AlertEngine
from ..classification.normalizer import now_ms
from ..errors import InvalidRange
from ..metrics.aggregator import MetricAggregator, group_by_name
from ..metrics.models import MetricAnalysis, RatingCounts
from ..store.rolling_store import RollingStore
from .models import DashboardData

logger = logging.getLogger(__name__)

DEFAULT_RANGE_MS = 60 * 60 * 1000
SNAPSHOT_ALERTS = 10


class DashboardAssembler:
    def __init__(
        self,
        store: RollingStore,
        aggregator: MetricAggregator,
        alert_engine: AlertEngine,
        clock: Optional[Callable[[], float]] = None,
        alerts_in_snapshot: int = SNAPSHOT_ALERTS,
    ):
        self._store = store
        self._aggregator = aggregator
        self._alert_engine = alert_engine
        self._clock = clock or now_ms
        self._alerts_in_snapshot = alerts_in_snapshot

    def snapshot(self, time_range_ms: float = DEFAULT_RANGE_MS) -> DashboardData:
        """Snapshot de [now - time_range_ms, now].

        Raises:
            InvalidRange si time_range_ms <= 0
        """
        if time_range_ms <= 0:
            raise InvalidRange(f"time_range_ms must be positive, got {time_range_ms}")

        now = self._clock()
        start = now - time_range_ms
        window = self._store.query(start, now)

        by_name: Dict[str, MetricAnalysis] = {}
        overall = RatingCounts()
        for name, items in group_by_name(window).items():
            analysis = self._aggregator.analyze(items, name)
            by_name[name] = analysis
            overall = overall + analysis.ratings

        logger.debug(
            "DASHBOARD_SNAPSHOT range_ms=%.0f measurements=%d metrics=%d",
            time_range_ms, len(window), len(by_name),
        )

        return DashboardData(
            total_metrics=len(window),
            start=start,
            end=now,
            by_name=by_name,
            overall_rating=overall,
            alerts=tuple(self._alert_engine.recent(self._alerts_in_snapshot)),
            timestamp=now,
        )
