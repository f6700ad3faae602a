"""
Saved Report Endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from src.analytics.errors import NotFoundOrForbidden
from src.analytics.schemas import ReportCreate, ReportRecord
from src.database.repositories import SqlReportStore, SqlSourceStore
from src.serving.api.auth import get_current_user_id
from src.serving.api.dependencies import get_report_store, get_source_store

router = APIRouter()


@router.post("", response_model=ReportRecord, status_code=status.HTTP_201_CREATED)
async def create_report(
    data: ReportCreate,
    user_id: str = Depends(get_current_user_id),
    sources: SqlSourceStore = Depends(get_source_store),
    reports: SqlReportStore = Depends(get_report_store),
) -> ReportRecord:
    """Save a report definition against one of the caller's sources."""
    source = await sources.get_by_id(data.source_id)
    if source is None or source.user_id != user_id:
        raise NotFoundOrForbidden("source")
    return await reports.create(user_id, data, source_name=source.name)


@router.get("", response_model=List[ReportRecord])
async def list_reports(
    user_id: str = Depends(get_current_user_id),
    reports: SqlReportStore = Depends(get_report_store),
) -> List[ReportRecord]:
    """List the caller's reports with their source names."""
    return await reports.list_for_user(user_id)


@router.get("/{report_id}", response_model=ReportRecord)
async def get_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    reports: SqlReportStore = Depends(get_report_store),
) -> ReportRecord:
    report = await reports.get_by_id(report_id)
    if report is None or report.user_id != user_id:
        raise NotFoundOrForbidden("report")
    return report


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    reports: SqlReportStore = Depends(get_report_store),
) -> Response:
    if not await reports.delete(report_id, user_id):
        raise NotFoundOrForbidden("report")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
