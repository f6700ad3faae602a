"""
API Routes Module
"""
from .health import router as health_router
from .analytics import router as analytics_router, functions_router
from .sources import router as sources_router
from .reports import router as reports_router

__all__ = [
    "health_router",
    "analytics_router",
    "functions_router",
    "sources_router",
    "reports_router",
]
