"""
Request-scoped dependencies for the API routes
"""

import random
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.analytics.engine import SyntheticMetricsEngine
from src.analytics.service import AnalyticsService
from src.config import get_settings
from src.database.connection import get_db_dependency
from src.database.repositories import SqlReportStore, SqlSourceStore


def get_source_store(db: AsyncSession = Depends(get_db_dependency)) -> SqlSourceStore:
    return SqlSourceStore(db)


def get_report_store(db: AsyncSession = Depends(get_db_dependency)) -> SqlReportStore:
    return SqlReportStore(db)


@lru_cache()
def get_metrics_engine() -> SyntheticMetricsEngine:
    """Process-wide engine, seeded when ANALYTICS_RANDOM_SEED is set."""
    seed = get_settings().analytics.random_seed
    return SyntheticMetricsEngine(random.Random(seed))


def get_analytics_service(
    source_store: SqlSourceStore = Depends(get_source_store),
    report_store: SqlReportStore = Depends(get_report_store),
    engine: SyntheticMetricsEngine = Depends(get_metrics_engine),
) -> AnalyticsService:
    return AnalyticsService(source_store, report_store, engine=engine)
