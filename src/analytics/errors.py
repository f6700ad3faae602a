"""
Analytics Error Taxonomy

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. The API layer renders them as ``{"error": message}``.
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base class for request-terminating analytics errors"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AnalyticsError):
    """No bearer credential, or one that does not verify"""
    status_code = 401
    default_message = "Unauthorized"


class NotFoundOrForbidden(AnalyticsError):
    """
    Record absent or owned by someone else.

    Both cases produce the same status and message so that callers cannot
    discover other users' records.
    """
    status_code = 404

    def __init__(self, resource: str = "source"):
        self.resource = resource
        super().__init__(f"{resource.capitalize()} not found or access denied")


class MissingSource(AnalyticsError):
    """No source id after resolving the query"""
    status_code = 400
    default_message = "No analytics source selected"


class MissingCredentials(AnalyticsError):
    """Source exists but has no usable credential payload"""
    status_code = 400
    default_message = "Missing source credentials"


class MalformedRequest(AnalyticsError):
    """Required fields absent or inconsistent"""
    status_code = 400
    default_message = "Malformed request"


class UpstreamFailure(AnalyticsError):
    """Reserved for a real external analytics API call"""
    status_code = 502
    default_message = "Upstream analytics provider failed"


class StoreTimeout(AnalyticsError):
    """A source or report store call exceeded its time limit"""
    status_code = 500
    default_message = "Internal server error"
