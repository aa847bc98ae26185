"""Almacén en memoria de mediciones con retención por antigüedad.

- Orden de llegada (no se reordena por timestamp; llegadas fuera de orden
  son normales entre clientes distintos).
- Append serializado con un lock.
- Lecturas copian la lista bajo el lock y filtran fuera de él, así una
  consulta larga no bloquea la ingesta.
- Solo `evict_older_than` elimina mediciones.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from ..classification.models import Measurement
from ..classification.normalizer import now_ms
from ..errors import InvalidRange

logger = logging.getLogger(__name__)


class RollingStore:
    """Secuencia append-only de `Measurement` indexada por tiempo."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or now_ms
        self._items: List[Measurement] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def append(self, measurement: Measurement) -> None:
        with self._lock:
            self._items.append(measurement)

    def snapshot(self) -> List[Measurement]:
        """Copia de todo lo retenido, en orden de llegada."""
        with self._lock:
            return list(self._items)

    def query(self, since: float, until: float) -> List[Measurement]:
        """Mediciones con `since <= timestamp <= until`, en orden de llegada.

        Raises:
            InvalidRange si since > until
        """
        if since > until:
            raise InvalidRange(f"since={since} is after until={until}")
        return [m for m in self.snapshot() if since <= m.timestamp <= until]

    def evict_older_than(self, max_age_ms: float, now: Optional[float] = None) -> int:
        """Elimina mediciones con timestamp < now - max_age_ms.

        Returns:
            Número de mediciones eliminadas
        """
        if max_age_ms < 0:
            raise InvalidRange(f"max_age_ms must be >= 0, got {max_age_ms}")

        cutoff = (self._clock() if now is None else now) - max_age_ms
        with self._lock:
            kept = [m for m in self._items if m.timestamp >= cutoff]
            removed = len(self._items) - len(kept)
            self._items = kept
            remaining = len(kept)

        if removed:
            logger.info("STORE_EVICTED removed=%d remaining=%d cutoff=%.0f", removed, remaining, cutoff)
        return removed
