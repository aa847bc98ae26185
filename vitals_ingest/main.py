"""Servicio HTTP de analítica de rendimiento (Web Vitals).

Raíz de composición: aquí se construyen el motor, el rate limiter y el
worker de retención, y se cuelgan de `app.state`.

Ejecutar:
    uvicorn --factory vitals_ingest.main:create_app --port 8002
    vitals-ingest
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from common.config import Settings, get_settings

from .endpoints import alerts_router, dashboard_router, health_router, vitals_router
from .engine import EngineConfig, PerformanceEngine
from .errors import InvalidMeasurement, InvalidRange
from .rate_limiter import AnalyticsRateLimiter
from .retention import RetentionWorker

logger = logging.getLogger(__name__)


def create_app(
    engine: Optional[PerformanceEngine] = None,
    settings: Optional[Settings] = None,
    rate_limiter: Optional[AnalyticsRateLimiter] = None,
) -> FastAPI:
    settings = settings or get_settings()
    engine = engine or PerformanceEngine(EngineConfig.from_settings(settings))
    worker = (
        RetentionWorker(engine, settings.cleanup_interval_sec, settings.metrics_retention_ms)
        if settings.cleanup_interval_sec > 0
        else None
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if worker is not None:
            worker.start()
        try:
            yield
        finally:
            if worker is not None:
                worker.stop()

    app = FastAPI(title="Web Vitals Analytics Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.rate_limiter = rate_limiter or AnalyticsRateLimiter()
    app.state.retention_worker = worker

    @app.exception_handler(InvalidMeasurement)
    async def _invalid_measurement(request: Request, exc: InvalidMeasurement):
        return JSONResponse(status_code=400, content={"detail": f"Invalid metric data: {exc.reason}"})

    @app.exception_handler(InvalidRange)
    async def _invalid_range(request: Request, exc: InvalidRange):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    app.include_router(health_router)
    app.include_router(vitals_router)
    app.include_router(dashboard_router)
    app.include_router(alerts_router)

    logger.info(
        "VITALS_APP_INIT metrics=%d retention_ms=%.0f cleanup_interval_sec=%.1f",
        len(engine.config.thresholds), settings.metrics_retention_ms, settings.cleanup_interval_sec,
    )
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
