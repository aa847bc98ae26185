"""Detección de tendencia por división de ventana.

Compara la media de la primera mitad (orden de llegada) con la de la
segunda. En estas métricas un valor menor es mejor, así que bajar es
`improving`.
"""

from __future__ import annotations

import os
from statistics import fmean
from typing import Sequence

from .models import STABLE_TREND, TrendDirection, TrendResult

DEFAULT_STABLE_PCT = 5.0


class TrendAnalyzer:
    """Calcula {direction, percentage} para una serie de valores."""

    def __init__(self, stable_pct: float = DEFAULT_STABLE_PCT):
        self.stable_pct = float(stable_pct)

    @classmethod
    def from_env(cls) -> "TrendAnalyzer":
        return cls(stable_pct=float(os.getenv("VITALS_TREND_STABLE_PCT", str(DEFAULT_STABLE_PCT))))

    def trend(self, values: Sequence[float]) -> TrendResult:
        if len(values) < 2:
            return STABLE_TREND

        midpoint = len(values) // 2
        first_avg = fmean(values[:midpoint])
        second_avg = fmean(values[midpoint:])

        # media inicial 0: el cambio relativo no está definido
        if first_avg == 0:
            return STABLE_TREND

        percentage = abs(second_avg - first_avg) / abs(first_avg) * 100
        if percentage < self.stable_pct:
            return TrendResult(TrendDirection.STABLE, percentage)

        direction = TrendDirection.IMPROVING if second_avg < first_avg else TrendDirection.DEGRADING
        return TrendResult(direction, percentage)
