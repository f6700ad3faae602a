"""
Store Interfaces

The analytics core only needs a handful of lookups from the persistence
layer. Any object providing these coroutines can back it: the SQLAlchemy
repositories in production, plain in-memory stores in tests.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Optional, Protocol, TypeVar

import structlog

from src.analytics.errors import StoreTimeout
from src.analytics.schemas import ReportRecord, SourceRecord

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SourceStore(Protocol):
    async def get_by_id(self, source_id: str) -> Optional[SourceRecord]: ...

    async def update_last_synced(self, source_id: str, timestamp: datetime) -> None: ...


class ReportStore(Protocol):
    async def get_by_id(self, report_id: str) -> Optional[ReportRecord]: ...


async def bounded(call: Awaitable[T], timeout: float, operation: str) -> T:
    """
    Await a store call, failing the request if it takes longer than ``timeout``.

    Raises:
        StoreTimeout: The call did not complete in time
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("Store call timed out", operation=operation, timeout_seconds=timeout)
        raise StoreTimeout() from e
