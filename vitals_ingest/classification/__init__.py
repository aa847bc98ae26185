"""Clasificación de mediciones: modelos, umbrales y normalizador."""

from .models import Measurement, Rating, ThresholdRange
from .thresholds import DEFAULT_THRESHOLDS, ThresholdTable
from .normalizer import MetricNormalizer, now_ms

__all__ = [
    "Measurement",
    "Rating",
    "ThresholdRange",
    "DEFAULT_THRESHOLDS",
    "ThresholdTable",
    "MetricNormalizer",
    "now_ms",
]
