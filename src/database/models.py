"""
Database Models

Relational mapping for the two records the dashboard persists:

- AnalyticsSource: a connected GA4 property and its service-account payload
- AnalyticsReport: a saved query definition against one source

Both are owner scoped through ``user_id``; users themselves live in the
external authentication provider and are referenced by id only.
"""

from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# ENUMERATIONS
# =============================================================================

class SyncFrequency(str, Enum):
    """How often a source is expected to be refreshed"""
    MANUAL = "manual"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# =============================================================================
# TABLES
# =============================================================================

class AnalyticsSource(Base):
    """
    Connected analytics property.

    ``credentials`` holds the service-account JSON exactly as uploaded by the
    owner. It is never returned by the API.
    """
    __tablename__ = "analytics_sources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    property_id: Mapped[str] = mapped_column(String(100), nullable=False)
    view_id: Mapped[Optional[str]] = mapped_column(String(100))
    sync_frequency: Mapped[SyncFrequency] = mapped_column(
        SQLEnum(SyncFrequency, values_callable=lambda e: [m.value for m in e]),
        default=SyncFrequency.DAILY,
        nullable=False,
    )
    credentials: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    last_synced: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    reports: Mapped[List["AnalyticsReport"]] = relationship(
        back_populates="source",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_analytics_sources_user", "user_id"),
    )


class AnalyticsReport(Base):
    """Saved report definition"""
    __tablename__ = "analytics_reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    source_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("analytics_sources.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    metrics: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    dimensions: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    filters: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    source: Mapped["AnalyticsSource"] = relationship(back_populates="reports")

    __table_args__ = (
        Index("ix_analytics_reports_user", "user_id"),
        Index("ix_analytics_reports_source", "source_id"),
    )
