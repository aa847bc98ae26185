"""Tests de la API HTTP (FastAPI TestClient).

Ejecutar:
    pytest tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from common.config import Settings
from vitals_ingest.engine import EngineConfig, PerformanceEngine
from vitals_ingest.main import create_app
from vitals_ingest.rate_limiter import AnalyticsRateLimiter, RateLimitConfig

from conftest import T0, raw

HOUR = 60 * 60 * 1000


def make_settings(**overrides) -> Settings:
    values = dict(
        host="127.0.0.1",
        port=8002,
        log_level="INFO",
        thresholds_file=None,
        metrics_retention_ms=24 * HOUR,
        cleanup_interval_sec=0,
        default_range_ms=HOUR,
        max_range_ms=7 * 24 * HOUR,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def engine(clock) -> PerformanceEngine:
    return PerformanceEngine(EngineConfig(), clock=clock)


@pytest.fixture
def client(engine) -> TestClient:
    app = create_app(
        engine=engine,
        settings=make_settings(),
        rate_limiter=AnalyticsRateLimiter(RateLimitConfig(enabled=False)),
    )
    return TestClient(app)


# =============================================================================
# INGESTA
# =============================================================================

class TestIngestEndpoints:

    def test_post_single_measurement(self, client, engine):
        resp = client.post("/api/analytics/web-vitals", json=raw("LCP", 4500, url="https://a.test/"))

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["rating"] == "poor"
        assert len(engine.store) == 1

    def test_post_invalid_measurement(self, client, engine):
        resp = client.post("/api/analytics/web-vitals", json={"name": "LCP", "value": "slow"})

        assert resp.status_code == 400
        assert "Invalid metric data" in resp.json()["detail"]
        assert len(engine.store) == 0

    def test_post_batch_reports_rejections(self, client):
        payload = {"metrics": [raw("LCP", 1000), {"name": "FID"}, raw("CLS", 0.01)]}

        resp = client.post("/api/analytics/web-vitals/batch", json=payload)

        assert resp.status_code == 200
        body = resp.json()
        assert body["accepted"] == 2
        assert body["rejected"] == 1
        assert body["errors"][0]["index"] == 1

    def test_batch_rejects_oversized_integer(self, client, engine):
        payload = {"metrics": [raw("LCP", 1000), raw("LCP", 10 ** 400), raw("FID", 50)]}

        resp = client.post("/api/analytics/web-vitals/batch", json=payload)

        assert resp.status_code == 200
        assert resp.json()["accepted"] == 2
        assert resp.json()["errors"][0]["index"] == 1
        assert len(engine.store) == 2

    def test_batch_returns_raised_alerts(self, client):
        payload = {"metrics": [raw("FID", 350)] * 6 + [raw("FID", 50)] * 4}

        body = client.post("/api/analytics/web-vitals/batch", json=payload).json()

        assert [a["type"] for a in body["alerts"]] == ["critical"]
        assert body["alerts"][0]["value"] == pytest.approx(60.0)


# =============================================================================
# LECTURA
# =============================================================================

class TestReadEndpoints:

    def test_dashboard(self, client):
        client.post("/api/analytics/web-vitals/batch", json={"metrics": [raw("LCP", v) for v in (100, 200, 300, 400, 500)]})

        body = client.get("/api/analytics/dashboard").json()

        lcp = body["data"]["byName"]["LCP"]
        assert lcp["p50"] == 300
        assert lcp["p90"] == 500
        assert body["data"]["totalMetrics"] == 5

    def test_dashboard_range_bounds(self, client):
        assert client.get("/api/analytics/dashboard", params={"timeRange": 0}).status_code == 422
        too_big = 8 * 24 * HOUR
        assert client.get("/api/analytics/dashboard", params={"timeRange": too_big}).status_code == 400

    def test_metric_summary(self, client):
        client.post("/api/analytics/web-vitals", json=raw("INP", 250))

        assert client.get("/api/analytics/metrics/INP").json()["data"]["ratings"]["needs-improvement"] == 1
        assert client.get("/api/analytics/metrics/LCP").status_code == 404

    def test_alerts_filters(self, client):
        client.post("/api/analytics/web-vitals/batch", json={"metrics": [raw("FID", 350)] * 3})
        client.post("/api/analytics/web-vitals/batch", json={"metrics": [raw("LCP", 9000)]})

        resp = client.get("/api/analytics/alerts", params={"metric": "fid"})
        assert resp.status_code == 200
        assert resp.headers["X-Alert-Count"] == "1"
        assert resp.json()["data"][0]["metric"] == "FID"

        critical = client.get("/api/analytics/alerts", params={"severity": "critical"}).json()
        assert critical["count"] == 3

        assert client.get("/api/analytics/alerts", params={"limit": 1}).json()["count"] == 1

    @pytest.mark.parametrize("params", [{"severity": "fatal"}, {"limit": 0}, {"limit": 101}])
    def test_alerts_invalid_params(self, client, params):
        assert client.get("/api/analytics/alerts", params=params).status_code == 422


# =============================================================================
# EXPORT / IMPORT / MANTENIMIENTO
# =============================================================================

class TestMaintenanceEndpoints:

    def test_export_then_import(self, client, clock):
        client.post("/api/analytics/web-vitals/batch", json={"metrics": [raw("LCP", 1000), raw("CLS", 0.2)]})
        exported = client.get("/api/analytics/export").json()
        assert exported["count"] == 2

        other = PerformanceEngine(EngineConfig(), clock=clock)
        other_client = TestClient(create_app(
            engine=other,
            settings=make_settings(),
            rate_limiter=AnalyticsRateLimiter(RateLimitConfig(enabled=False)),
        ))
        body = other_client.post("/api/analytics/import", json={"metrics": exported["metrics"]}).json()

        assert body["accepted"] == 2
        assert sorted(m.id for m in other.store.snapshot()) == sorted(m["id"] for m in exported["metrics"])

    def test_cleanup(self, client, engine):
        client.post("/api/analytics/web-vitals", json=raw("LCP", 1000, timestamp=T0 - 2 * HOUR))

        body = client.post("/api/analytics/cleanup", params={"maxAge": HOUR}).json()

        assert body["measurements_removed"] == 1
        assert len(engine.store) == 0

    def test_health_and_diagnostics(self, client):
        assert client.get("/health").json() == {"status": "ok"}
        diag = client.get("/api/analytics/diagnostics").json()
        assert diag["stored_measurements"] == 0
        assert diag["retention_worker"] is None
        assert diag["thresholds"]["INP"] == {"good": 200, "poor": 500}

    def test_prometheus_metrics(self, client):
        client.post("/api/analytics/web-vitals", json=raw("LCP", 1000))
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "vitals_measurements_ingested_total" in resp.text


# =============================================================================
# RATE LIMITING
# =============================================================================

class TestRateLimiting:

    def test_dashboard_limit_returns_429(self, engine):
        limiter = AnalyticsRateLimiter(RateLimitConfig(dashboard_per_min=2))
        client = TestClient(create_app(engine=engine, settings=make_settings(), rate_limiter=limiter))

        codes = [client.get("/api/analytics/dashboard").status_code for _ in range(3)]

        assert codes[:2] == [200, 200]
        assert codes[2] == 429

    def test_limits_are_per_client_ip(self, engine):
        limiter = AnalyticsRateLimiter(RateLimitConfig(alerts_per_min=1))
        client = TestClient(create_app(engine=engine, settings=make_settings(), rate_limiter=limiter))

        first = client.get("/api/analytics/alerts", headers={"X-Forwarded-For": "10.0.0.1"})
        second = client.get("/api/analytics/alerts", headers={"X-Forwarded-For": "10.0.0.2"})

        assert first.status_code == 200
        assert second.status_code == 200


# =============================================================================
# COMPOSICIÓN
# =============================================================================

class TestComposition:

    def test_importing_main_builds_no_app(self):
        import vitals_ingest.main as main_module

        assert not hasattr(main_module, "app")
        assert callable(main_module.create_app)
