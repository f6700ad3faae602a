"""
Source Authorization
"""

import structlog

from src.analytics.errors import MissingCredentials, NotFoundOrForbidden
from src.analytics.schemas import SourceRecord
from src.analytics.stores import SourceStore, bounded

logger = structlog.get_logger(__name__)


class SourceAuthorizer:
    """Look up a source on behalf of a caller"""

    def __init__(self, source_store: SourceStore, timeout: float = 10.0):
        self.source_store = source_store
        self.timeout = timeout

    async def authorize(self, source_id: str, caller_id: str) -> SourceRecord:
        """
        Return the caller's source.

        Raises:
            NotFoundOrForbidden: Source absent or owned by another user
            MissingCredentials: Source has no credential payload
        """
        source = await bounded(
            self.source_store.get_by_id(source_id),
            self.timeout,
            operation="source.get_by_id",
        )

        # absent and foreign look the same to the caller
        if source is None or source.user_id != caller_id:
            logger.info("Source lookup denied", source_id=source_id, caller_id=caller_id)
            raise NotFoundOrForbidden("source")

        if not source.credentials:
            raise MissingCredentials()

        return source
