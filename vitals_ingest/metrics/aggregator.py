"""Agregador de estadísticas por métrica.

Calcula count / mean / min / max / percentiles / distribución de ratings
sobre un conjunto de mediciones ya filtrado por ventana temporal.
"""

from __future__ import annotations

import math
from collections import OrderedDict
from statistics import fmean
from typing import Dict, Iterable, List, Optional, Sequence

from ..classification.models import Measurement
from ..errors import EmptyWindow
from .models import MetricAnalysis, RatingCounts
from .trend import TrendAnalyzer

PERCENTILES = (50, 75, 90, 95)


def nearest_rank(sorted_values: Sequence[float], p: float) -> float:
    """Percentil por rango más cercano, sin interpolación.

    index = ceil(p/100 * n) - 1, acotado a [0, n-1].
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("nearest_rank requires at least one value")
    index = math.ceil(p / 100 * n) - 1
    return sorted_values[min(max(index, 0), n - 1)]


def group_by_name(measurements: Iterable[Measurement]) -> Dict[str, List[Measurement]]:
    """Agrupa por nombre conservando el orden de primera aparición y de llegada."""
    groups: Dict[str, List[Measurement]] = OrderedDict()
    for m in measurements:
        groups.setdefault(m.name, []).append(m)
    return groups


class MetricAggregator:
    """Construye `MetricAnalysis` para un nombre de métrica."""

    def __init__(self, trend_analyzer: Optional[TrendAnalyzer] = None):
        self._trend = trend_analyzer or TrendAnalyzer()

    def analyze(self, measurements: Iterable[Measurement], name: str) -> MetricAnalysis:
        """Analiza las mediciones de `name`.

        Raises:
            EmptyWindow si no hay ninguna medición con ese nombre
        """
        selected = [m for m in measurements if m.name == name]
        if not selected:
            raise EmptyWindow(name)

        values = [m.value for m in selected]
        ordered = sorted(values)
        p50, p75, p90, p95 = (nearest_rank(ordered, p) for p in PERCENTILES)

        return MetricAnalysis(
            name=name,
            count=len(selected),
            avg_value=fmean(values),
            min_value=ordered[0],
            max_value=ordered[-1],
            p50=p50,
            p75=p75,
            p90=p90,
            p95=p95,
            # rating almacenado en la ingesta, no recalculado
            ratings=RatingCounts.from_ratings(m.rating for m in selected),
            trend=self._trend.trend(values),
        )
