"""Worker de retención: limpieza periódica de mediciones y alertas.

Thread daemon que llama a `engine.cleanup()` cada `interval_sec`.
Arranca y para con el ciclo de vida de la app.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .engine import PerformanceEngine

logger = logging.getLogger(__name__)


class RetentionWorker:
    """Ejecuta la limpieza por antigüedad en segundo plano."""

    def __init__(
        self,
        engine: PerformanceEngine,
        interval_sec: float = 300.0,
        max_age_ms: Optional[float] = None,
    ):
        self._engine = engine
        self._interval = interval_sec
        self._max_age_ms = max_age_ms
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._runs = 0
        self._failures = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Inicia el thread de limpieza periódica."""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="vitals-retention", daemon=True)
        self._thread.start()
        logger.info("RETENTION_WORKER started interval_sec=%.1f", self._interval)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        logger.info("RETENTION_WORKER stopped runs=%d failures=%d", self._runs, self._failures)

    def run_once(self) -> None:
        report = self._engine.cleanup(self._max_age_ms)
        self._runs += 1
        logger.debug(
            "RETENTION_RUN measurements_removed=%d alerts_removed=%d",
            report.measurements_removed, report.alerts_removed,
        )

    def _loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self.run_once()
            except Exception:
                # el worker sigue vivo; el siguiente ciclo reintenta
                self._failures += 1
                logger.exception("RETENTION_RUN_FAILED")

    @property
    def stats(self) -> dict:
        return {"running": self.running, "runs": self._runs, "failures": self._failures}
