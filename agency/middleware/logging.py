"""
Access Logging Middleware

Logs every API request with its duration; requests slower than
SLOW_REQUEST_THRESHOLD are logged at the slow level.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from agency.core.config import settings
from agency.logging import get_logger

logger = get_logger("agency.access")

SKIP_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log API access.

    Adds an X-Request-ID header so log lines can be correlated with
    client-side reports.
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_threshold: float = None):
        super().__init__(app)
        self.enabled = enabled
        self.slow_threshold = slow_threshold if slow_threshold is not None else settings.SLOW_REQUEST_THRESHOLD

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.url.path in SKIP_PATHS:
            return await call_next(request)

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            duration = round(time.time() - start_time, 3)
            logger.error(
                "Unhandled error while processing request",
                exc_info=True,
                method=request.method,
                path=request.url.path,
                duration=duration,
                request_id=request_id,
            )
            raise

        duration = round(time.time() - start_time, 3)
        response.headers["X-Request-ID"] = request_id

        if duration > self.slow_threshold:
            logger.slow(
                "Slow request",
                duration=duration,
                threshold=self.slow_threshold,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
        else:
            logger.request(
                "API request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration=duration,
                request_id=request_id,
            )

        return response
