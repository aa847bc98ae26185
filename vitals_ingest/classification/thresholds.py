"""Tabla de umbrales para calificar mediciones.

La tabla se construye una vez al arrancar el motor (defaults + archivo
JSON opcional) y no cambia en runtime.

Métricas sin entrada en la tabla se califican como `good`: es la
política documentada para no generar falsas alarmas con métricas nuevas.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from .models import Rating, ThresholdRange

logger = logging.getLogger(__name__)


# Core Web Vitals + métricas de navegación (ms, CLS sin unidad)
DEFAULT_THRESHOLDS: Dict[str, ThresholdRange] = {
    "LCP": ThresholdRange(good=2500, poor=4000),
    "FID": ThresholdRange(good=100, poor=300),
    "INP": ThresholdRange(good=200, poor=500),
    "CLS": ThresholdRange(good=0.1, poor=0.25),
    "FCP": ThresholdRange(good=1800, poor=3000),
    "TTFB": ThresholdRange(good=800, poor=1800),
    "DOM_CONTENT_LOADED": ThresholdRange(good=2000, poor=4000),
    "LOAD_COMPLETE": ThresholdRange(good=3000, poor=6000),
    "SLOW_RESOURCE": ThresholdRange(good=1000, poor=3000),
}


def _parse_range(name: str, raw: Any) -> ThresholdRange:
    if isinstance(raw, ThresholdRange):
        return raw
    if not isinstance(raw, Mapping):
        raise ValueError(f"Threshold for {name!r} must be an object with good/poor")
    try:
        good = float(raw["good"])
        poor = float(raw["poor"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Threshold for {name!r} needs numeric good/poor: {e}") from e
    if good > poor:
        raise ValueError(f"Threshold for {name!r} has good={good} > poor={poor}")
    return ThresholdRange(good=good, poor=poor)


class ThresholdTable(Mapping[str, ThresholdRange]):
    """Mapping inmutable name -> ThresholdRange."""

    def __init__(self, thresholds: Optional[Mapping[str, Any]] = None):
        source = DEFAULT_THRESHOLDS if thresholds is None else thresholds
        parsed = {str(name): _parse_range(str(name), raw) for name, raw in source.items()}
        self._thresholds: Mapping[str, ThresholdRange] = MappingProxyType(parsed)

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, Any]) -> "ThresholdTable":
        """Defaults con entradas sobreescritas o añadidas."""
        merged: Dict[str, Any] = dict(DEFAULT_THRESHOLDS)
        merged.update(overrides)
        return cls(merged)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "ThresholdTable":
        """Carga `{"LCP": {"good": 2500, "poor": 4000}, ...}` sobre los defaults."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Thresholds file {path} must contain a JSON object")
        table = cls.with_overrides(data)
        logger.info("THRESHOLDS_LOADED path=%s metrics=%d", path, len(table))
        return table

    def __getitem__(self, name: str) -> ThresholdRange:
        return self._thresholds[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._thresholds)

    def __len__(self) -> int:
        return len(self._thresholds)

    def rate(self, name: str, value: float) -> Rating:
        th = self._thresholds.get(name)
        if th is None:
            return Rating.GOOD
        return th.rate(value)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {name: {"good": th.good, "poor": th.poor} for name, th in self._thresholds.items()}
