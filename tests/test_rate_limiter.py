"""Tests del rate limiter por IP y grupo de endpoints."""

import os
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from vitals_ingest.rate_limiter import (
    AnalyticsRateLimiter,
    RateLimitConfig,
    SlidingWindowCounter,
    rate_limit,
)


class ManualClock:
    def __init__(self, start: float = 1_000_020.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


# =============================================================================
# CONTADOR
# =============================================================================

class TestSlidingWindowCounter:

    def test_allows_up_to_limit(self):
        counter = SlidingWindowCounter(clock=ManualClock())
        results = [counter.increment_and_check("k", 3)[0] for _ in range(4)]
        assert results == [True, True, True, False]

    def test_previous_window_is_weighted(self):
        # ventana [1_000_020, 1_000_080); a mitad de la siguiente pesa 50%
        clock = ManualClock(1_000_020.0)
        counter = SlidingWindowCounter(clock=clock)
        for _ in range(10):
            counter.increment_and_check("k", 100)

        clock.now = 1_000_110.0
        _, approx = counter.increment_and_check("k", 100)

        assert approx == 5 + 1

    def test_old_window_is_forgotten(self):
        clock = ManualClock()
        counter = SlidingWindowCounter(clock=clock)
        for _ in range(5):
            counter.increment_and_check("k", 5)

        clock.now += 600
        assert counter.increment_and_check("k", 5) == (True, 1)

    def test_cleanup_old_entries(self):
        clock = ManualClock()
        counter = SlidingWindowCounter(clock=clock)
        counter.increment_and_check("a", 1)
        clock.now += 600
        assert counter.cleanup_old_entries(max_age_seconds=300) == 1


# =============================================================================
# LIMITER
# =============================================================================

class TestAnalyticsRateLimiter:

    def test_scopes_are_independent(self):
        limiter = AnalyticsRateLimiter(RateLimitConfig(alerts_per_min=1, dashboard_per_min=1), clock=ManualClock())

        limiter.check("alerts", "1.2.3.4")
        limiter.check("dashboard", "1.2.3.4")
        with pytest.raises(HTTPException) as exc_info:
            limiter.check("alerts", "1.2.3.4")

        assert exc_info.value.status_code == 429
        assert exc_info.value.headers["X-RateLimit-Limit"] == "1"

    def test_disabled_never_raises(self):
        limiter = AnalyticsRateLimiter(RateLimitConfig(alerts_per_min=1, enabled=False), clock=ManualClock())
        for _ in range(10):
            limiter.check("alerts", "1.2.3.4")

    def test_config_from_env(self):
        env = {"RATE_LIMIT_INGEST_PER_MIN": "5", "RATE_LIMIT_ENABLED": "0"}
        with patch.dict(os.environ, env):
            cfg = RateLimitConfig.from_env()
        assert cfg.limit_for("ingest") == 5
        assert cfg.limit_for("dashboard") == 30
        assert cfg.enabled is False

    def test_unknown_scope_rejected(self):
        with pytest.raises(ValueError):
            rate_limit("export")
