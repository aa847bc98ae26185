"""Métricas Prometheus del motor de Web Vitals."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

MEASUREMENTS_INGESTED = Counter(
    "vitals_measurements_ingested_total",
    "Total measurements accepted into the rolling store",
    ["rating"],  # good, needs-improvement, poor
)
MEASUREMENTS_REJECTED = Counter(
    "vitals_measurements_rejected_total",
    "Total measurements rejected at ingestion",
)
ALERTS_RAISED = Counter(
    "vitals_alerts_raised_total",
    "Total performance alerts raised",
    ["type"],  # critical, warning, info
)
STORE_SIZE = Gauge(
    "vitals_store_size",
    "Measurements currently retained in the rolling store",
)
