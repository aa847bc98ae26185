"""Fixtures compartidas: reloj determinista y fábrica de mediciones."""

from typing import Any, Dict

import pytest

from vitals_ingest.classification import Measurement, Rating, ThresholdTable


# Epoch ms fijo: 2026-01-01T00:00:00Z
T0 = 1767225600000.0


class FakeClock:
    """Reloj manual en epoch ms."""

    def __init__(self, start: float = T0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def thresholds() -> ThresholdTable:
    return ThresholdTable()


def make_measurement(
    name: str = "LCP",
    value: float = 1000.0,
    timestamp: float = T0,
    rating: Rating = None,
    **kwargs: Any,
) -> Measurement:
    if rating is None:
        rating = ThresholdTable().rate(name, value)
    return Measurement(
        id=kwargs.pop("id", f"{name}-{value}-{timestamp}"),
        name=name,
        value=value,
        rating=rating,
        timestamp=timestamp,
        **kwargs,
    )


def raw(name: str = "LCP", value: Any = 1000.0, **extra: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"name": name, "value": value}
    payload.update(extra)
    return payload
