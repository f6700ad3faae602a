"""
Unit Tests - Query Resolution and Source Authorization
"""
import asyncio
from datetime import date

import pytest

from src.analytics.authorization import SourceAuthorizer
from src.analytics.errors import (
    MalformedRequest,
    MissingCredentials,
    MissingSource,
    NotFoundOrForbidden,
    StoreTimeout,
)
from src.analytics.resolver import QueryResolver
from src.analytics.schemas import AnalyticsRequest


class SlowStore:
    """Store whose lookups never finish within the test timeout"""

    async def get_by_id(self, record_id):
        await asyncio.sleep(5)


class TestQueryResolver:
    """Tests for QueryResolver"""

    async def test_ad_hoc_parameters(self, report_store):
        resolver = QueryResolver(report_store)
        request = AnalyticsRequest(
            source_id="s1",
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 3),
            metrics=["pageviews"],
            dimensions=["date"],
            filters={"device": "mobile"},
        )

        params = await resolver.resolve(request, "u1")

        assert params.source_id == "s1"
        assert params.day_count == 3
        assert params.metrics == ["pageviews"]
        assert params.filters == {"device": "mobile"}
        assert report_store.lookups == 0

    async def test_defaults_for_metrics_and_dimensions(self, report_store):
        """Absent metrics and dimensions fall back to activeUsers by date"""
        request = AnalyticsRequest(
            source_id="s1",
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 1),
        )

        params = await QueryResolver(report_store).resolve(request, "u1")

        assert params.metrics == ["activeUsers"]
        assert params.dimensions == ["date"]
        assert params.filters == {}

    async def test_report_overrides_ad_hoc_values(self, report_store):
        """Every stored report parameter wins over the request body"""
        request = AnalyticsRequest(
            report_id="r1",
            source_id="s3",
            start_date=date(2023, 1, 1),
            end_date=date(2023, 12, 31),
            metrics=["pageviews"],
            dimensions=["date"],
        )

        params = await QueryResolver(report_store).resolve(request, "u1")

        assert params.source_id == "s1"
        assert params.start_date == date(2024, 2, 1)
        assert params.end_date == date(2024, 2, 7)
        assert params.metrics == ["sessions", "bounceRate"]
        assert params.dimensions == ["device"]
        assert params.filters == {"country": "France"}

    async def test_report_of_another_user(self, report_store):
        request = AnalyticsRequest(report_id="r2")

        with pytest.raises(NotFoundOrForbidden) as exc:
            await QueryResolver(report_store).resolve(request, "u1")

        assert exc.value.status_code == 404
        assert exc.value.message == "Report not found or access denied"

    async def test_missing_report_looks_like_foreign_report(self, report_store):
        resolver = QueryResolver(report_store)

        with pytest.raises(NotFoundOrForbidden) as missing:
            await resolver.resolve(AnalyticsRequest(report_id="nope"), "u1")
        with pytest.raises(NotFoundOrForbidden) as foreign:
            await resolver.resolve(AnalyticsRequest(report_id="r2"), "u1")

        assert missing.value.message == foreign.value.message

    async def test_missing_source(self, report_store):
        request = AnalyticsRequest(start_date=date(2024, 1, 1), end_date=date(2024, 1, 2))

        with pytest.raises(MissingSource) as exc:
            await QueryResolver(report_store).resolve(request, "u1")

        assert exc.value.status_code == 400
        assert exc.value.message == "No analytics source selected"

    async def test_missing_dates(self, report_store):
        request = AnalyticsRequest(source_id="s1", start_date=date(2024, 1, 1))

        with pytest.raises(MalformedRequest):
            await QueryResolver(report_store).resolve(request, "u1")

    async def test_end_before_start(self, report_store):
        request = AnalyticsRequest(
            source_id="s1",
            start_date=date(2024, 1, 5),
            end_date=date(2024, 1, 1),
        )

        with pytest.raises(MalformedRequest) as exc:
            await QueryResolver(report_store).resolve(request, "u1")

        assert exc.value.status_code == 400

    async def test_slow_report_store_times_out(self):
        resolver = QueryResolver(SlowStore(), timeout=0.05)

        with pytest.raises(StoreTimeout) as exc:
            await resolver.resolve(AnalyticsRequest(report_id="r1"), "u1")

        assert exc.value.status_code == 500
        assert exc.value.message == "Internal server error"


class TestAnalyticsRequest:
    """Tests for the inbound payload model"""

    def test_camel_case_aliases(self):
        request = AnalyticsRequest.model_validate({
            "sourceId": "s1",
            "startDate": "2024-03-01",
            "endDate": "2024-03-03",
            "reportId": "r1",
        })

        assert request.source_id == "s1"
        assert request.start_date == date(2024, 3, 1)
        assert request.report_id == "r1"

    def test_empty_metric_list_rejected(self):
        with pytest.raises(ValueError):
            AnalyticsRequest.model_validate({"sourceId": "s1", "metrics": []})


class TestSourceAuthorizer:
    """Tests for SourceAuthorizer"""

    async def test_owned_source(self, source_store):
        source = await SourceAuthorizer(source_store).authorize("s1", "u1")

        assert source.id == "s1"
        assert source.credentials["client_email"].startswith("reporter@")

    async def test_absent_and_foreign_are_indistinguishable(self, source_store):
        """Callers cannot tell a missing source from someone else's"""
        authorizer = SourceAuthorizer(source_store)

        with pytest.raises(NotFoundOrForbidden) as missing:
            await authorizer.authorize("does-not-exist", "u1")
        with pytest.raises(NotFoundOrForbidden) as foreign:
            await authorizer.authorize("s2", "u1")

        assert missing.value.status_code == foreign.value.status_code == 404
        assert missing.value.message == foreign.value.message == "Source not found or access denied"

    async def test_source_without_credentials(self, source_store):
        with pytest.raises(MissingCredentials) as exc:
            await SourceAuthorizer(source_store).authorize("s3", "u1")

        assert exc.value.status_code == 400

    async def test_ownership_checked_before_credentials(self, source_store):
        """A foreign source without credentials still reports not found"""
        source_store.sources["s2"] = source_store.sources["s2"].model_copy(update={"credentials": None})

        with pytest.raises(NotFoundOrForbidden):
            await SourceAuthorizer(source_store).authorize("s2", "u1")

    async def test_slow_source_store_times_out(self):
        with pytest.raises(StoreTimeout):
            await SourceAuthorizer(SlowStore(), timeout=0.05).authorize("s1", "u1")
