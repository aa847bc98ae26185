"""Metrics module: per-metric statistics and trend detection."""

from .models import MetricAnalysis, RatingCounts, TrendDirection, TrendResult
from .aggregator import MetricAggregator, group_by_name, nearest_rank
from .trend import TrendAnalyzer

__all__ = [
    "MetricAnalysis",
    "RatingCounts",
    "TrendDirection",
    "TrendResult",
    "MetricAggregator",
    "TrendAnalyzer",
    "group_by_name",
    "nearest_rank",
]
