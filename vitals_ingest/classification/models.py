"""Modelos de datos para clasificación de mediciones.

Dataclasses que representan una medición ya normalizada y los
umbrales contra los que se califica.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Rating(str, Enum):
    """Calificación de salud de una medición."""

    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


@dataclass(frozen=True)
class ThresholdRange:
    """Umbrales good/poor de una métrica (límites inclusivos)."""

    good: float
    poor: float

    def rate(self, value: float) -> Rating:
        if value <= self.good:
            return Rating.GOOD
        if value <= self.poor:
            return Rating.NEEDS_IMPROVEMENT
        return Rating.POOR


@dataclass(frozen=True)
class Measurement:
    """Medición normalizada, inmutable una vez creada.

    `rating` se calcula en la ingesta y no se recalcula aunque cambien
    los umbrales después.
    """

    id: str
    name: str
    value: float
    rating: Rating
    timestamp: float  # epoch ms
    delta: float = 0.0
    navigation_type: str = ""
    source_url: str = ""
    client_context: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Formato de cable (camelCase), el mismo que acepta la ingesta."""
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "delta": self.delta,
            "rating": self.rating.value,
            "navigationType": self.navigation_type,
            "timestamp": self.timestamp,
            "url": self.source_url,
            "userAgent": self.client_context,
        }
