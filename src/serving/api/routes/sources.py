"""
Analytics Source Endpoints

Owner-scoped management of connected GA4 properties.
"""

import json
from typing import List

from fastapi import APIRouter, Depends, Response, status

from src.analytics.errors import MalformedRequest, NotFoundOrForbidden
from src.analytics.schemas import SourceCreate, SourceResponse
from src.database.repositories import SqlSourceStore
from src.serving.api.auth import get_current_user_id
from src.serving.api.dependencies import get_source_store

router = APIRouter()


def parse_credentials(data: SourceCreate) -> dict:
    """
    Credential payload from either ``credentials`` or the raw
    ``service_account_json`` text pasted by the user.
    """
    credentials = data.credentials
    if credentials is None and data.service_account_json is not None:
        try:
            credentials = json.loads(data.service_account_json)
        except json.JSONDecodeError as e:
            raise MalformedRequest("Invalid service account JSON") from e

    if not isinstance(credentials, dict) or not credentials:
        raise MalformedRequest("Service account credentials are required")
    return credentials


@router.post("", response_model=SourceResponse, status_code=status.HTTP_201_CREATED)
async def create_source(
    data: SourceCreate,
    user_id: str = Depends(get_current_user_id),
    store: SqlSourceStore = Depends(get_source_store),
) -> SourceResponse:
    """Connect a new analytics source."""
    credentials = parse_credentials(data)
    record = await store.create(user_id, data, credentials)
    return SourceResponse.from_record(record)


@router.get("", response_model=List[SourceResponse])
async def list_sources(
    user_id: str = Depends(get_current_user_id),
    store: SqlSourceStore = Depends(get_source_store),
) -> List[SourceResponse]:
    """List the caller's sources, newest first."""
    return [SourceResponse.from_record(r) for r in await store.list_for_user(user_id)]


@router.get("/{source_id}", response_model=SourceResponse)
async def get_source(
    source_id: str,
    user_id: str = Depends(get_current_user_id),
    store: SqlSourceStore = Depends(get_source_store),
) -> SourceResponse:
    record = await store.get_by_id(source_id)
    if record is None or record.user_id != user_id:
        raise NotFoundOrForbidden("source")
    return SourceResponse.from_record(record)


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_source(
    source_id: str,
    user_id: str = Depends(get_current_user_id),
    store: SqlSourceStore = Depends(get_source_store),
) -> Response:
    """Remove a source together with its saved reports."""
    if not await store.delete(source_id, user_id):
        raise NotFoundOrForbidden("source")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
