"""
Analytics Service

Request orchestration: resolve the query, authorize the source, generate the
table, then record the sync time on the source.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from src.analytics.authorization import SourceAuthorizer
from src.analytics.credentials import build_assertion
from src.analytics.engine import SyntheticMetricsEngine
from src.analytics.resolver import QueryResolver
from src.analytics.schemas import (
    AnalyticsRequest,
    QueryParameters,
    RunReportResponse,
    SourceRecord,
    SummaryResponse,
)
from src.analytics.stores import ReportStore, SourceStore, bounded
from src.analytics.summary import previous_period, summarize
from src.config import get_settings
from src.config.settings import AnalyticsSettings

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsService:
    """Fetch analytics tables for authenticated callers"""

    def __init__(
        self,
        source_store: SourceStore,
        report_store: ReportStore,
        engine: Optional[SyntheticMetricsEngine] = None,
        settings: Optional[AnalyticsSettings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings or get_settings().analytics
        self.source_store = source_store
        self.engine = engine or SyntheticMetricsEngine()
        self.clock = clock
        self.resolver = QueryResolver(report_store, timeout=self.settings.store_timeout_seconds)
        self.authorizer = SourceAuthorizer(source_store, timeout=self.settings.store_timeout_seconds)

    async def fetch(self, request: AnalyticsRequest, caller_id: str) -> RunReportResponse:
        """
        Resolve, authorize and generate a report table.

        Raises:
            AnalyticsError: Any request-terminating condition
        """
        params, source = await self._prepare(request, caller_id)

        table = self.engine.generate(params)
        logger.info(
            "Analytics data generated",
            source_id=source.id,
            property_id=source.property_id,
            rows=table.row_count,
            metrics=params.metrics,
            dimensions=params.dimensions,
        )

        await self._touch(source)
        return table

    async def summarize(self, request: AnalyticsRequest, caller_id: str) -> SummaryResponse:
        """Headline values for the period, compared with the previous one."""
        params, source = await self._prepare(request, caller_id)
        prior = previous_period(params)

        current_table = self.engine.generate(params)
        previous_table = self.engine.generate(prior)

        await self._touch(source)
        return SummaryResponse(
            start_date=params.start_date,
            end_date=params.end_date,
            previous_start_date=prior.start_date,
            previous_end_date=prior.end_date,
            metrics=summarize(current_table, previous_table),
        )

    async def _prepare(self, request: AnalyticsRequest, caller_id: str):
        params: QueryParameters = await self.resolver.resolve(request, caller_id)
        source = await self.authorizer.authorize(params.source_id, caller_id)

        assertion = build_assertion(
            source.credentials,
            scope=self.settings.token_scope,
            audience=self.settings.token_audience,
        )
        # placeholder: the assertion is never signed nor exchanged
        logger.debug(
            "Service account assertion prepared",
            source_id=source.id,
            issuer=assertion.issuer,
            key_id=assertion.header.get("kid"),
            filters=params.filters,
        )
        return params, source

    async def _touch(self, source: SourceRecord) -> None:
        """Record the sync time; failures are logged and do not fail the request."""
        synced_at = self.clock()
        try:
            await bounded(
                self.source_store.update_last_synced(source.id, synced_at),
                self.settings.store_timeout_seconds,
                operation="source.update_last_synced",
            )
        except Exception as e:
            logger.warning(
                "Failed to update source last synced timestamp",
                source_id=source.id,
                error=str(e),
                error_type=type(e).__name__,
            )
