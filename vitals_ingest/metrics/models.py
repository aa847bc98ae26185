"""Data models for metric analysis.

Derived on every read, never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable

from ..classification.models import Rating


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DEGRADING = "degrading"
    STABLE = "stable"


@dataclass(frozen=True)
class TrendResult:
    direction: TrendDirection
    percentage: float

    def to_dict(self) -> dict:
        return {"direction": self.direction.value, "percentage": self.percentage}


STABLE_TREND = TrendResult(TrendDirection.STABLE, 0.0)


@dataclass(frozen=True)
class RatingCounts:
    """Distribution of good / needs-improvement / poor."""

    good: int = 0
    needs_improvement: int = 0
    poor: int = 0

    @classmethod
    def from_ratings(cls, ratings: Iterable[Rating]) -> "RatingCounts":
        counts: Dict[Rating, int] = {r: 0 for r in Rating}
        for r in ratings:
            counts[r] += 1
        return cls(
            good=counts[Rating.GOOD],
            needs_improvement=counts[Rating.NEEDS_IMPROVEMENT],
            poor=counts[Rating.POOR],
        )

    def __add__(self, other: "RatingCounts") -> "RatingCounts":
        return RatingCounts(
            good=self.good + other.good,
            needs_improvement=self.needs_improvement + other.needs_improvement,
            poor=self.poor + other.poor,
        )

    def to_dict(self) -> dict:
        return {
            Rating.GOOD.value: self.good,
            Rating.NEEDS_IMPROVEMENT.value: self.needs_improvement,
            Rating.POOR.value: self.poor,
        }


@dataclass(frozen=True)
class MetricAnalysis:
    """Statistics for one metric name over a window."""

    name: str
    count: int
    avg_value: float
    min_value: float
    max_value: float
    p50: float
    p75: float
    p90: float
    p95: float
    ratings: RatingCounts
    trend: TrendResult

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "count": self.count,
            "avgValue": self.avg_value,
            "minValue": self.min_value,
            "maxValue": self.max_value,
            "p50": self.p50,
            "p75": self.p75,
            "p90": self.p90,
            "p95": self.p95,
            "ratings": self.ratings.to_dict(),
            "trend": self.trend.to_dict(),
        }
