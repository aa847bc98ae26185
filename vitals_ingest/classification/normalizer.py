"""Normalizador de mediciones entrantes.

Valida y califica una medición cruda (dict JSON del colector del navegador)
y la convierte al formato interno `Measurement`.

Reglas:
- `name` (string no vacío) y `value` (numérico finito) son obligatorios.
- Campos opcionales mal formados caen a su default, nunca fallan.
- Acepta tanto camelCase como snake_case.
"""

from __future__ import annotations

import logging
import math
import time
import uuid
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

from ..errors import InvalidMeasurement
from .models import Measurement, Rating
from .thresholds import ThresholdTable

logger = logging.getLogger(__name__)

# campo interno -> claves aceptadas (camelCase primero)
_ALIASES = {
    "navigation_type": ("navigationType", "navigation_type"),
    "source_url": ("url", "sourceUrl", "source_url"),
    "client_context": ("userAgent", "clientContext", "client_context", "user_agent"),
}


def now_ms() -> float:
    return time.time() * 1000


def _is_number(v: Any) -> bool:
    if not isinstance(v, (int, float)) or isinstance(v, bool):
        return False
    try:
        return math.isfinite(v)
    except OverflowError:
        # int JSON fuera del rango de float
        return False


def _pick(raw: Mapping[str, Any], field: str) -> Any:
    for key in _ALIASES[field]:
        if key in raw:
            return raw[key]
    return None


def _as_text(v: Any) -> str:
    return v if isinstance(v, str) else ""


class MetricNormalizer:
    """Convierte mediciones crudas en `Measurement` calificadas."""

    def __init__(
        self,
        thresholds: ThresholdTable,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._thresholds = thresholds
        self._clock = clock or now_ms

    def _validate_required(self, raw: Any) -> tuple[str, float]:
        if not isinstance(raw, Mapping):
            raise InvalidMeasurement("measurement must be an object")

        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidMeasurement("name is required")

        value = raw.get("value")
        if value is None:
            raise InvalidMeasurement("value is required")
        if not _is_number(value):
            raise InvalidMeasurement(f"value must be a finite number, got {type(value).__name__}")

        return name.strip(), float(value)

    def normalize(self, raw: Any) -> Measurement:
        """Valida y califica una medición recién recibida.

        Raises:
            InvalidMeasurement si name/value falta o value no es numérico
        """
        name, value = self._validate_required(raw)

        ts = raw.get("timestamp")
        delta = raw.get("delta")
        mid = raw.get("id")

        return Measurement(
            id=mid if isinstance(mid, str) and mid else uuid.uuid4().hex,
            name=name,
            value=value,
            rating=self._thresholds.rate(name, value),
            timestamp=float(ts) if _is_number(ts) else self._clock(),
            delta=float(delta) if _is_number(delta) else 0.0,
            navigation_type=_as_text(_pick(raw, "navigation_type")),
            source_url=_as_text(_pick(raw, "source_url")),
            client_context=_as_text(_pick(raw, "client_context")),
        )

    def restore(self, raw: Any) -> Measurement:
        """Variante de importación: misma validación, conserva el rating histórico.

        Si el registro trae un `rating` válido se respeta (no se recalcula
        con los umbrales actuales); si no, se califica como en `normalize`.
        """
        if isinstance(raw, Measurement):
            return raw

        measurement = self.normalize(raw)
        stored = raw.get("rating")
        try:
            rating = Rating(stored)
        except (ValueError, TypeError):
            return measurement
        return replace(measurement, rating=rating)
