"""
Request Desk - HTTP middleware.
Request/response logging, timing and request-id propagation.
"""
import logging
import time
from typing import Callable, Set

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging_config import generate_request_id, set_request_id

logger = logging.getLogger(__name__)

# Paths that should skip logging (health checks, docs)
SKIP_LOGGING_PATHS: Set[str] = {
    "/",
    "/health",
    "/favicon.ico",
    "/docs",
    "/redoc",
}


def should_skip_logging(path: str) -> bool:
    return path in SKIP_LOGGING_PATHS or path.endswith("/openapi.json")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration of every call and tags the
    response with ``X-Request-ID`` (taken from the caller when supplied).
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        path = request.url.path
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if not should_skip_logging(path):
            status_code = response.status_code
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log("%s %s -> %d (%.1fms)", request.method, path, status_code, duration_ms)

        return response
