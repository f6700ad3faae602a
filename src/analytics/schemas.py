"""
Analytics Schemas

Pydantic models for records read from the stores, the inbound query payload
and the GA4-shaped report response.
"""

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.analytics.catalog import RECOGNIZED_FILTER_KEYS, MetricType
from src.database.models import SyncFrequency


# =============================================================================
# RECORDS
# =============================================================================

class SourceRecord(BaseModel):
    """Connected analytics source as read from the source store"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    property_id: str
    view_id: Optional[str] = None
    sync_frequency: SyncFrequency = SyncFrequency.DAILY
    credentials: Optional[Dict[str, Any]] = None
    last_synced: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ReportRecord(BaseModel):
    """Saved report as read from the report store"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    source_id: str
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    metrics: List[str]
    dimensions: List[str]
    filters: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    source_name: Optional[str] = None


# =============================================================================
# QUERY
# =============================================================================

class QueryFilters(BaseModel):
    """Filters with a documented effect on synthetic values; other keys are ignored"""
    model_config = ConfigDict(extra="ignore")

    country: Optional[str] = None
    device: Optional[str] = None

    @classmethod
    def from_mapping(cls, filters: Optional[Dict[str, Any]]) -> "QueryFilters":
        if not filters:
            return cls()
        recognized = {
            key: value for key, value in filters.items()
            if key in RECOGNIZED_FILTER_KEYS and isinstance(value, str)
        }
        return cls(**recognized)


class AnalyticsRequest(BaseModel):
    """
    Inbound fetch payload.

    Either ad hoc query parameters, a ``reportId``, or both. When a report is
    referenced its stored parameters win.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    metrics: Optional[Annotated[List[str], Field(min_length=1)]] = None
    dimensions: Optional[Annotated[List[str], Field(min_length=1)]] = None
    filters: Optional[Dict[str, Any]] = None
    report_id: Optional[str] = None


class QueryParameters(BaseModel):
    """Resolved input of the synthetic metrics engine"""
    model_config = ConfigDict(frozen=True)

    source_id: str
    start_date: date
    end_date: date
    metrics: List[str]
    dimensions: List[str]
    filters: Dict[str, Any] = Field(default_factory=dict)

    @property
    def day_count(self) -> int:
        """Inclusive number of days in the range"""
        return (self.end_date - self.start_date).days + 1


# =============================================================================
# RESPONSE (GA4 runReport shape)
# =============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DimensionHeader(_CamelModel):
    name: str


class MetricHeader(_CamelModel):
    name: str
    type: MetricType


class DimensionValue(_CamelModel):
    value: str


class MetricValue(_CamelModel):
    value: str


class ReportRow(_CamelModel):
    dimension_values: List[DimensionValue]
    metric_values: List[MetricValue]


class RunReportResponse(_CamelModel):
    """Tabular result, positionally aligned to the headers"""
    dimension_headers: List[DimensionHeader]
    metric_headers: List[MetricHeader]
    rows: List[ReportRow] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


# =============================================================================
# SUMMARY CARDS
# =============================================================================

class MetricSummary(_CamelModel):
    """Headline value of one metric with its change versus the previous period"""
    name: str
    type: MetricType
    value: Optional[float]
    previous_value: Optional[float] = None
    change: Optional[float] = None


class SummaryResponse(_CamelModel):
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    metrics: List[MetricSummary]


# =============================================================================
# SOURCE AND REPORT MANAGEMENT
# =============================================================================

class SourceCreate(BaseModel):
    """Payload for connecting a new analytics source"""
    name: str = Field(min_length=2, max_length=200)
    property_id: str = Field(min_length=2, max_length=100)
    view_id: Optional[str] = None
    sync_frequency: SyncFrequency = SyncFrequency.DAILY
    credentials: Optional[Dict[str, Any]] = None
    service_account_json: Optional[str] = None


class SourceResponse(BaseModel):
    """Source as exposed to its owner; the credential payload is never echoed"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    property_id: str
    view_id: Optional[str] = None
    sync_frequency: SyncFrequency
    has_credentials: bool
    last_synced: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: SourceRecord) -> "SourceResponse":
        return cls(
            id=record.id,
            name=record.name,
            property_id=record.property_id,
            view_id=record.view_id,
            sync_frequency=record.sync_frequency,
            has_credentials=bool(record.credentials),
            last_synced=record.last_synced,
            created_at=record.created_at,
        )


class ReportCreate(BaseModel):
    """Payload for saving a report definition"""
    source_id: str
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: date
    end_date: date
    metrics: List[str] = Field(min_length=1)
    dimensions: List[str] = Field(min_length=1)
    filters: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_date_range(self) -> "ReportCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self
