"""Web Vitals telemetry aggregation and alerting service."""

from .engine import EngineConfig, IngestReport, PerformanceEngine

__all__ = ["EngineConfig", "IngestReport", "PerformanceEngine"]
