"""Modelo del snapshot del dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from ..alerts.models import Alert
from ..metrics.models import MetricAnalysis, RatingCounts


@dataclass(frozen=True)
class DashboardData:
    """Snapshot inmutable, calculado de forma independiente en cada petición."""

    total_metrics: int
    start: float
    end: float
    by_name: Mapping[str, MetricAnalysis]
    overall_rating: RatingCounts
    alerts: Tuple[Alert, ...]
    timestamp: float

    def __post_init__(self):
        if not isinstance(self.by_name, MappingProxyType):
            object.__setattr__(self, "by_name", MappingProxyType(dict(self.by_name)))

    def to_dict(self) -> dict:
        return {
            "totalMetrics": self.total_metrics,
            "timeRange": {"start": self.start, "end": self.end},
            "byName": {name: a.to_dict() for name, a in self.by_name.items()},
            "overallRating": self.overall_rating.to_dict(),
            "alerts": [a.to_dict() for a in self.alerts],
            "timestamp": self.timestamp,
        }
