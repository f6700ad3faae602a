"""
Test Suite Configuration
"""
import random
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.analytics.engine import SyntheticMetricsEngine
from src.analytics.schemas import ReportRecord, SourceRecord
from src.analytics.service import AnalyticsService
from src.config import Settings, get_settings
from src.config.settings import AnalyticsSettings
from src.database.connection import get_db_dependency
from src.database.models import Base
from src.serving.api.dependencies import get_metrics_engine
from src.serving.api.main import create_api_app


SERVICE_ACCOUNT = {
    "type": "service_account",
    "project_id": "demo-analytics",
    "private_key_id": "abc123",
    "client_email": "reporter@demo-analytics.iam.gserviceaccount.com",
}


# =============================================================================
# IN-MEMORY STORES
# =============================================================================

class InMemorySourceStore:
    """Source store backed by a dict; records every last-synced write"""

    def __init__(self, sources: List[SourceRecord]):
        self.sources: Dict[str, SourceRecord] = {s.id: s for s in sources}
        self.synced: List[tuple] = []
        self.fail_updates = False

    async def get_by_id(self, source_id: str) -> Optional[SourceRecord]:
        return self.sources.get(source_id)

    async def update_last_synced(self, source_id: str, timestamp: datetime) -> None:
        if self.fail_updates:
            raise RuntimeError("connection reset by peer")
        self.synced.append((source_id, timestamp))
        self.sources[source_id] = self.sources[source_id].model_copy(update={"last_synced": timestamp})


class InMemoryReportStore:
    def __init__(self, reports: List[ReportRecord]):
        self.reports: Dict[str, ReportRecord] = {r.id: r for r in reports}
        self.lookups = 0

    async def get_by_id(self, report_id: str) -> Optional[ReportRecord]:
        self.lookups += 1
        return self.reports.get(report_id)


class FixedRandom(random.Random):
    """random() always returns ``value``; choice() still works from the seeded state"""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings(store_timeout_seconds=1.0)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def metrics_engine() -> SyntheticMetricsEngine:
    return SyntheticMetricsEngine(random.Random(1234))


@pytest.fixture
def source_store() -> InMemorySourceStore:
    return InMemorySourceStore([
        SourceRecord(id="s1", user_id="u1", name="example.com", property_id="123456789", credentials=SERVICE_ACCOUNT),
        SourceRecord(id="s2", user_id="u2", name="other.org", property_id="987654321", credentials=SERVICE_ACCOUNT),
        SourceRecord(id="s3", user_id="u1", name="no-creds.net", property_id="555555555", credentials={}),
    ])


@pytest.fixture
def report_store() -> InMemoryReportStore:
    return InMemoryReportStore([
        ReportRecord(
            id="r1",
            user_id="u1",
            source_id="s1",
            name="Devices last week",
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 7),
            metrics=["sessions", "bounceRate"],
            dimensions=["device"],
            filters={"country": "France"},
        ),
        ReportRecord(
            id="r2",
            user_id="u2",
            source_id="s2",
            name="Someone else's report",
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 2),
            metrics=["activeUsers"],
            dimensions=["date"],
        ),
    ])


@pytest.fixture
def analytics_service(source_store, report_store, metrics_engine, analytics_settings) -> AnalyticsService:
    return AnalyticsService(
        source_store,
        report_store,
        engine=metrics_engine,
        settings=analytics_settings,
    )


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine with the schema created"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_token():
    """Mint bearer tokens the way the auth provider would"""
    secret = get_settings().security.jwt_secret_key.get_secret_value()
    algorithm = get_settings().security.jwt_algorithm

    def _make(user_id: str, expires_in: timedelta = timedelta(hours=1), **claims) -> str:
        payload = {
            "sub": user_id,
            "exp": datetime.now(timezone.utc) + expires_in,
            **claims,
        }
        return jwt.encode(payload, secret, algorithm=algorithm)

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def app(session_factory):
    """API wired to the SQLite test database and a seeded engine"""
    api = create_api_app(rate_limit=False)

    async def override_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    api.dependency_overrides[get_db_dependency] = override_db
    api.dependency_overrides[get_metrics_engine] = lambda: SyntheticMetricsEngine(random.Random(99))
    return api


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
