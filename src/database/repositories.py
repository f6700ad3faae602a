"""
Source and Report Repositories

SQLAlchemy-backed stores used by the API. They satisfy the analytics store
interfaces and add the owner-scoped management operations.
"""

from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.analytics.schemas import ReportCreate, ReportRecord, SourceCreate, SourceRecord
from src.database.models import AnalyticsReport, AnalyticsSource
from src.serving.cache import CacheManager, reports_cache

logger = structlog.get_logger(__name__)


class SqlSourceStore:
    """Analytics sources in the relational database"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, source_id: str) -> Optional[SourceRecord]:
        source = await self.session.get(AnalyticsSource, source_id)
        return SourceRecord.model_validate(source) if source else None

    async def update_last_synced(self, source_id: str, timestamp: datetime) -> None:
        """Set ``last_synced`` and commit right away, independent of the request outcome."""
        try:
            await self.session.execute(
                update(AnalyticsSource)
                .where(AnalyticsSource.id == source_id)
                .values(last_synced=timestamp)
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def create(self, user_id: str, data: SourceCreate, credentials: dict) -> SourceRecord:
        source = AnalyticsSource(
            user_id=user_id,
            name=data.name,
            property_id=data.property_id,
            view_id=data.view_id or None,
            sync_frequency=data.sync_frequency,
            credentials=credentials,
        )
        self.session.add(source)
        await self.session.flush()
        await self.session.refresh(source)
        logger.info("Analytics source created", source_id=source.id, user_id=user_id)
        return SourceRecord.model_validate(source)

    async def list_for_user(self, user_id: str) -> List[SourceRecord]:
        result = await self.session.execute(
            select(AnalyticsSource)
            .where(AnalyticsSource.user_id == user_id)
            .order_by(AnalyticsSource.created_at.desc())
        )
        return [SourceRecord.model_validate(s) for s in result.scalars().all()]

    async def delete(self, source_id: str, user_id: str) -> bool:
        """Delete an owned source and its reports. Returns False when nothing matched."""
        report_ids = (
            await self.session.execute(
                select(AnalyticsReport.id).where(AnalyticsReport.source_id == source_id)
            )
        ).scalars().all()

        result = await self.session.execute(
            delete(AnalyticsSource).where(
                AnalyticsSource.id == source_id,
                AnalyticsSource.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            return False

        # SQLite does not enforce ON DELETE CASCADE by default
        await self.session.execute(
            delete(AnalyticsReport).where(AnalyticsReport.source_id == source_id)
        )
        # Cached definitions go only once the delete is durable
        await self.session.commit()
        for report_id in report_ids:
            await reports_cache.delete(report_id)

        logger.info("Analytics source deleted", source_id=source_id, user_id=user_id)
        return True


class SqlReportStore:
    """Saved reports, with definitions cached by id"""

    def __init__(self, session: AsyncSession, cache: CacheManager = reports_cache):
        self.session = session
        self.cache = cache

    async def get_by_id(self, report_id: str) -> Optional[ReportRecord]:
        cached = await self.cache.get(report_id)
        if cached:
            return ReportRecord.model_validate(cached)

        result = await self.session.execute(
            select(AnalyticsReport, AnalyticsSource.name)
            .outerjoin(AnalyticsSource, AnalyticsReport.source_id == AnalyticsSource.id)
            .where(AnalyticsReport.id == report_id)
        )
        row = result.first()
        if row is None:
            return None

        record = self._to_record(*row)
        await self.cache.set(report_id, record.model_dump(mode="json"))
        return record

    async def create(self, user_id: str, data: ReportCreate, source_name: Optional[str] = None) -> ReportRecord:
        report = AnalyticsReport(
            user_id=user_id,
            source_id=data.source_id,
            name=data.name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            metrics=list(data.metrics),
            dimensions=list(data.dimensions),
            filters=dict(data.filters),
        )
        self.session.add(report)
        await self.session.flush()
        await self.session.refresh(report)
        logger.info("Analytics report created", report_id=report.id, user_id=user_id)
        return self._to_record(report, source_name)

    async def list_for_user(self, user_id: str) -> List[ReportRecord]:
        """Caller's reports, newest first, each joined with its source name."""
        result = await self.session.execute(
            select(AnalyticsReport, AnalyticsSource.name)
            .outerjoin(AnalyticsSource, AnalyticsReport.source_id == AnalyticsSource.id)
            .where(AnalyticsReport.user_id == user_id)
            .order_by(AnalyticsReport.created_at.desc())
        )
        return [self._to_record(report, name) for report, name in result.all()]

    async def delete(self, report_id: str, user_id: str) -> bool:
        result = await self.session.execute(
            delete(AnalyticsReport).where(
                AnalyticsReport.id == report_id,
                AnalyticsReport.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            return False

        await self.session.commit()
        await self.cache.delete(report_id)
        logger.info("Analytics report deleted", report_id=report_id, user_id=user_id)
        return True

    @staticmethod
    def _to_record(report: AnalyticsReport, source_name: Optional[str]) -> ReportRecord:
        record = ReportRecord.model_validate(report)
        return record.model_copy(update={"source_name": source_name})
