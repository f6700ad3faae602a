"""
Query Resolver

Turns an inbound request into the effective query parameters. A referenced
report supplies every parameter; ad hoc values are only used when no report
is referenced.
"""

from typing import Optional

import structlog

from src.analytics.catalog import DEFAULT_DIMENSION, DEFAULT_METRIC
from src.analytics.errors import MalformedRequest, MissingSource, NotFoundOrForbidden
from src.analytics.schemas import AnalyticsRequest, QueryParameters, ReportRecord
from src.analytics.stores import ReportStore, bounded

logger = structlog.get_logger(__name__)


class QueryResolver:
    """Resolve effective query parameters for a caller"""

    def __init__(self, report_store: ReportStore, timeout: float = 10.0):
        self.report_store = report_store
        self.timeout = timeout

    async def resolve(self, request: AnalyticsRequest, caller_id: str) -> QueryParameters:
        """
        Resolve the parameters the engine will run with.

        Raises:
            NotFoundOrForbidden: Referenced report is absent or not owned by the caller
            MissingSource: No source id after resolution
            MalformedRequest: Dates absent or end before start
        """
        if request.report_id:
            report = await self._load_report(request.report_id, caller_id)
            logger.debug("Query resolved from report", report_id=report.id, source_id=report.source_id)
            return self._build(
                source_id=report.source_id,
                start_date=report.start_date,
                end_date=report.end_date,
                metrics=report.metrics,
                dimensions=report.dimensions,
                filters=report.filters,
            )

        return self._build(
            source_id=request.source_id,
            start_date=request.start_date,
            end_date=request.end_date,
            metrics=request.metrics or [DEFAULT_METRIC],
            dimensions=request.dimensions or [DEFAULT_DIMENSION],
            filters=request.filters,
        )

    async def _load_report(self, report_id: str, caller_id: str) -> ReportRecord:
        report: Optional[ReportRecord] = await bounded(
            self.report_store.get_by_id(report_id),
            self.timeout,
            operation="report.get_by_id",
        )
        if report is None or report.user_id != caller_id:
            raise NotFoundOrForbidden("report")
        return report

    @staticmethod
    def _build(source_id, start_date, end_date, metrics, dimensions, filters) -> QueryParameters:
        if not source_id:
            raise MissingSource()
        if start_date is None or end_date is None:
            raise MalformedRequest("startDate and endDate are required")
        if end_date < start_date:
            raise MalformedRequest("endDate must not be before startDate")
        if not metrics or not dimensions:
            raise MalformedRequest("metrics and dimensions must not be empty")

        return QueryParameters(
            source_id=source_id,
            start_date=start_date,
            end_date=end_date,
            metrics=list(metrics),
            dimensions=list(dimensions),
            filters=dict(filters or {}),
        )
