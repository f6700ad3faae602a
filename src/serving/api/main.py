"""
FastAPI Application Factory

Creates and configures the API application: middleware, routers and
exception handlers. Startup and shutdown of backing services are left to the
caller's lifespan (see ``src.main``).
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from src.config import get_settings
from src.serving.api.errors import register_exception_handlers
from src.serving.api.middleware import (
    RequestLoggingMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from src.serving.api.routes import (
    health_router,
    analytics_router,
    functions_router,
    sources_router,
    reports_router,
)


def create_api_app(lifespan=None, rate_limit: Optional[bool] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Optional lifespan context manager
        rate_limit: Force the rate limiter on or off (defaults to on outside tests)

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Web Analytics Dashboard API",
        description="Multi-tenant GA4 dashboard backend: sources, saved reports and report data",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    if rate_limit is None:
        rate_limit = settings.app_env != "testing"
    if rate_limit:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=settings.security.rate_limit_requests,
            window_seconds=settings.security.rate_limit_window_seconds,
        )

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])
    app.include_router(sources_router, prefix="/api/v1/sources", tags=["Sources"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(functions_router, prefix="/functions/v1", tags=["Analytics"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Web Analytics Dashboard API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app
