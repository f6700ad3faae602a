"""
Analytics API Endpoints

Report data for the dashboard charts, in the GA4 runReport shape.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
import structlog

from src.analytics.catalog import DIMENSION_LABELS, METRIC_SPECS, MetricType
from src.analytics.schemas import AnalyticsRequest, RunReportResponse, SummaryResponse
from src.analytics.service import AnalyticsService
from src.serving.api.auth import get_current_user_id
from src.serving.api.dependencies import get_analytics_service

router = APIRouter()

# Path the dashboard frontend has always called
functions_router = APIRouter()

logger = structlog.get_logger(__name__)


class CatalogEntry(BaseModel):
    value: str
    label: str


class MetricCatalogEntry(CatalogEntry):
    type: MetricType


class CatalogResponse(BaseModel):
    metrics: List[MetricCatalogEntry]
    dimensions: List[CatalogEntry]


@router.post("/fetch", response_model=RunReportResponse)
async def fetch_analytics(
    request: AnalyticsRequest,
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
) -> RunReportResponse:
    """
    Fetch a report table for an ad hoc query or a saved report.
    """
    logger.info(
        "fetch_analytics called",
        user_id=user_id,
        source_id=request.source_id,
        report_id=request.report_id,
    )
    return await service.fetch(request, user_id)


@router.post("/summary", response_model=SummaryResponse)
async def get_summary(
    request: AnalyticsRequest,
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
) -> SummaryResponse:
    """
    Headline value per metric with its change versus the previous period.
    """
    return await service.summarize(request, user_id)


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog() -> CatalogResponse:
    """Metrics and dimensions a report can be built from."""
    return CatalogResponse(
        metrics=[
            MetricCatalogEntry(value=spec.name, label=spec.label, type=spec.metric_type)
            for spec in METRIC_SPECS.values()
        ],
        dimensions=[
            CatalogEntry(value=value, label=label) for value, label in DIMENSION_LABELS.items()
        ],
    )


functions_router.add_api_route(
    "/fetch-analytics",
    fetch_analytics,
    methods=["POST"],
    response_model=RunReportResponse,
)
