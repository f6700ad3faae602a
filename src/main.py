"""
FastAPI Production Application

Main entry point for the Web Analytics Dashboard API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from src.config import get_settings
from src.config.logging import configure_logging
from src.database.connection import init_database, close_database
from src.serving.api.main import create_api_app
from src.serving.cache import init_redis, close_redis

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Web Analytics Dashboard API", environment=settings.app_env)

    await init_database(create_tables=settings.is_development)

    # the cache is optional; without it reports are read from the database
    if settings.redis.enabled:
        try:
            await init_redis()
        except Exception as e:
            logger.warning("Redis unavailable, continuing without cache", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_redis()
    await close_database()


app = create_api_app(lifespan=lifespan)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
