"""Rate Limiter para la API de analítica de rendimiento.

Límite por IP de cliente y por grupo de endpoints:
- ingest: POST de mediciones (web-vitals, batch, import)
- alerts: consulta de alertas
- dashboard: dashboard, resumen por métrica, export

Configuración via env vars:
- RATE_LIMIT_INGEST_PER_MIN (default: 1000)
- RATE_LIMIT_ALERTS_PER_MIN (default: 60)
- RATE_LIMIT_DASHBOARD_PER_MIN (default: 30)
- RATE_LIMIT_ENABLED (default: 1)
"""

from __future__ import annotations

import os
import time
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from fastapi import HTTPException, Request


logger = logging.getLogger(__name__)

SCOPES = ("ingest", "alerts", "dashboard")


@dataclass
class RateLimitConfig:
    """Configuración de rate limiting."""
    ingest_per_min: int = 1000     # POST de mediciones por IP por minuto
    alerts_per_min: int = 60       # Consultas de alertas por IP por minuto
    dashboard_per_min: int = 30    # Consultas de dashboard por IP por minuto
    enabled: bool = True

    @classmethod
    def from_env(cls) -> "RateLimitConfig":
        return cls(
            ingest_per_min=int(os.getenv("RATE_LIMIT_INGEST_PER_MIN", "1000")),
            alerts_per_min=int(os.getenv("RATE_LIMIT_ALERTS_PER_MIN", "60")),
            dashboard_per_min=int(os.getenv("RATE_LIMIT_DASHBOARD_PER_MIN", "30")),
            enabled=os.getenv("RATE_LIMIT_ENABLED", "1").strip() in ("1", "true", "yes"),
        )

    def limit_for(self, scope: str) -> int:
        return {
            "ingest": self.ingest_per_min,
            "alerts": self.alerts_per_min,
            "dashboard": self.dashboard_per_min,
        }[scope]


@dataclass
class _WindowState:
    start: float
    current: int = 0
    previous: int = 0


class SlidingWindowCounter:
    """Contador de ventana deslizante aproximada por clave.

    Guarda el conteo de la ventana fija actual y de la anterior; el conteo
    efectivo pondera la anterior por la fracción de ventana que aún solapa.
    """

    def __init__(self, window_seconds: int = 60, clock: Callable[[], float] = time.time):
        self._window = window_seconds
        self._clock = clock
        self._lock = Lock()
        self._states: Dict[str, _WindowState] = {}

    def _roll(self, state: _WindowState, window_start: float) -> None:
        if state.start >= window_start:
            return
        adjacent = state.start == window_start - self._window
        state.previous = state.current if adjacent else 0
        state.current = 0
        state.start = window_start

    def increment_and_check(self, key: str, limit: int) -> Tuple[bool, int]:
        """Cuenta una petición para `key`.

        Returns:
            (allowed, approx_count)
        """
        now = self._clock()
        window_start = now - (now % self._window)

        with self._lock:
            state = self._states.setdefault(key, _WindowState(start=window_start))
            self._roll(state, window_start)
            state.current += 1

            overlap = 1 - (now - window_start) / self._window
            approx = int(state.previous * overlap) + state.current

        allowed = approx <= limit
        if not allowed:
            logger.warning("RATE_LIMIT_EXCEEDED key=%s approx_count=%d limit=%d", key, approx, limit)
        return allowed, approx

    def cleanup_old_entries(self, max_age_seconds: int = 300) -> int:
        """Descarta claves sin actividad reciente. Devuelve cuántas eliminó."""
        cutoff = self._clock() - max_age_seconds
        with self._lock:
            stale = [k for k, s in self._states.items() if s.start < cutoff]
            for k in stale:
                del self._states[k]
        return len(stale)


class AnalyticsRateLimiter:
    """Rate limiter por IP y grupo de endpoints."""

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or RateLimitConfig.from_env()
        self._clock = clock
        self._counter = SlidingWindowCounter(window_seconds=60, clock=clock)
        self._last_cleanup = clock()
        self._cleanup_interval = 60

    def _maybe_cleanup(self) -> None:
        now = self._clock()
        if now - self._last_cleanup > self._cleanup_interval:
            cleaned = self._counter.cleanup_old_entries()
            if cleaned > 0:
                logger.debug("RATE_LIMIT_CLEANUP removed=%d entries", cleaned)
            self._last_cleanup = now

    def check(self, scope: str, ip: str) -> None:
        """Verifica el límite del grupo para la IP.

        Raises:
            HTTPException(429) si se excede el límite
        """
        if not self.config.enabled:
            return

        self._maybe_cleanup()
        limit = self.config.limit_for(scope)
        allowed, _ = self._counter.increment_and_check(f"{scope}:{ip}", limit)
        if not allowed:
            raise HTTPException(
                status_code=429,
                detail="Rate limit exceeded. Please try again later.",
                headers={"Retry-After": "60", "X-RateLimit-Limit": str(limit)},
            )


def get_client_ip(request: Request) -> str:
    """Obtiene la IP del cliente, considerando proxies."""
    # X-Forwarded-For puede tener múltiples IPs: "client, proxy1, proxy2"
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def rate_limit(scope: str) -> Callable[[Request], None]:
    """Dependencia FastAPI que aplica el límite del grupo `scope`."""
    if scope not in SCOPES:
        raise ValueError(f"Unknown rate limit scope {scope!r}")

    def _dependency(request: Request) -> None:
        limiter: AnalyticsRateLimiter = request.app.state.rate_limiter
        limiter.check(scope, get_client_ip(request))

    return _dependency
