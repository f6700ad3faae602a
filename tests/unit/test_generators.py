"""
Unit Tests - Demo Data and Cache Helpers
"""
from datetime import date

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.analytics.catalog import METRIC_SPECS
from src.data.generators import REPORT_TEMPLATES, DemoWorkspaceGenerator
from src.serving import cache
from src.serving.cache import CacheManager


class TestDemoWorkspaceGenerator:
    """Tests for DemoWorkspaceGenerator"""

    def test_sources_have_service_account_credentials(self):
        sources = DemoWorkspaceGenerator(seed=42).generate_sources(3)

        assert len(sources) == 3
        for source in sources:
            assert source.credentials["type"] == "service_account"
            assert source.credentials["client_email"].endswith(".iam.gserviceaccount.com")
            assert len(source.property_id) == 9

    def test_seeded_output_is_reproducible(self):
        first = DemoWorkspaceGenerator(seed=7).generate_sources(2)
        second = DemoWorkspaceGenerator(seed=7).generate_sources(2)

        assert first == second

    def test_reports_end_yesterday(self):
        today = date(2024, 5, 15)

        reports = DemoWorkspaceGenerator(seed=1).generate_reports(["a", "b"], today=today, per_source=2)

        assert len(reports) == 4
        assert {r.source_id for r in reports} == {"a", "b"}
        for report in reports:
            assert report.end_date == date(2024, 5, 14)
            assert report.start_date < report.end_date
            assert all(m in METRIC_SPECS for m in report.metrics)

    def test_per_source_capped_by_templates(self):
        reports = DemoWorkspaceGenerator(seed=1).generate_reports(["a"], per_source=100)

        assert len(reports) == len(REPORT_TEMPLATES)


class FakeRedis:
    """Minimal async stand-in for redis.asyncio.Redis"""

    def __init__(self, fail=False):
        self.store = {}
        self.ttls = {}
        self.fail = fail

    async def get(self, key):
        if self.fail:
            raise RedisConnectionError("down")
        return self.store.get(key)

    async def set(self, key, value):
        self.store[key] = value

    async def setex(self, key, ttl, value):
        if self.fail:
            raise RedisConnectionError("down")
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


class TestCacheManager:
    """Tests for the optional Redis cache"""

    async def test_disabled_cache_is_noop(self, monkeypatch):
        monkeypatch.setattr(cache, "_redis_client", None)
        manager = CacheManager("reports")

        assert cache.is_cache_available() is False
        assert await manager.set("r1", {"id": "r1"}) is False
        assert await manager.get("r1") is None
        assert await manager.delete("r1") is False

    async def test_namespaced_round_trip(self, monkeypatch):
        client = FakeRedis()
        monkeypatch.setattr(cache, "_redis_client", client)
        manager = CacheManager("reports", default_ttl=600)

        assert await manager.set("r1", {"id": "r1", "metrics": ["sessions"]}) is True

        assert "reports:r1" in client.store
        assert client.ttls["reports:r1"] == 600
        assert await manager.get("r1") == {"id": "r1", "metrics": ["sessions"]}
        assert await manager.delete("r1") is True
        assert await manager.get("r1") is None

    async def test_redis_errors_degrade_to_misses(self, monkeypatch):
        monkeypatch.setattr(cache, "_redis_client", FakeRedis(fail=True))
        manager = CacheManager("reports")

        assert await manager.get("r1") is None
        assert await manager.set("r1", {"id": "r1"}) is False

    @pytest.mark.parametrize("ttl", [30, None])
    async def test_explicit_ttl_wins(self, monkeypatch, ttl):
        client = FakeRedis()
        monkeypatch.setattr(cache, "_redis_client", client)

        await CacheManager("reports", default_ttl=600).set("r1", {"id": "r1"}, ttl=ttl)

        assert client.ttls["reports:r1"] == (ttl or 600)
