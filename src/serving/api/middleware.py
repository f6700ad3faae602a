"""
API Middleware

- Request logging with a request id bound into the structlog context
- In-memory rate limiting per client
- Security headers
"""

import time
import uuid
from typing import Callable, Dict, List, Optional
import asyncio

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its duration and tag all log lines with the request id"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limiter keyed by client address.

    State is per process; behind several workers the effective limit is
    multiplied by the worker count.
    """


    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: Dict[str, List[float]] = {}
        self._last_sweep = 0.0
        self._lock = asyncio.Lock()

    def _sweep(self, now: float) -> None:
        """Forget clients whose most recent request has left the window."""
        stale = [
            client for client, times in self._requests.items()
            if not times or now - times[-1] >= self.window_seconds
        ]
        for client in stale:
            del self._requests[client]
        self._last_sweep = now

    def _record(self, client_id: str, now: float) -> Optional[int]:
        """
        Count a request against ``client_id``.

        Returns:
            Remaining requests in the window, or None when the limit is reached
        """
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        recent = [t for t in self._requests.get(client_id, ()) if now - t < self.window_seconds]
        if len(recent) >= self.max_requests:
            self._requests[client_id] = recent
            return None

        recent.append(now)
        self._requests[client_id] = recent
        return self.max_requests - len(recent)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_id = request.client.host if request.client else "unknown"

        async with self._lock:
            remaining = self._record(client_id, time.time())

        if remaining is None:
            logger.warning("Rate limit exceeded", client=client_id, limit=self.max_requests)
            return Response(
                content='{"error": "Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to API responses"""

    # Swagger UI loads its assets from a CDN
    DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not request.url.path.startswith(self.DOCS_PATHS):
            response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        return response
