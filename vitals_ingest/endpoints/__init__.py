"""Módulo de endpoints HTTP.

Contiene todos los endpoints de la API de analítica organizados por función.
"""

from .health import router as health_router
from .vitals import router as vitals_router
from .dashboard import router as dashboard_router
from .alerts import router as alerts_router

__all__ = [
    "health_router",
    "vitals_router",
    "dashboard_router",
    "alerts_router",
]
