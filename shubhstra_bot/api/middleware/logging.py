"""
Request logging middleware.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware

from ...utils.logging import get_logger

logger = get_logger("shubhstra.http")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        try:
            resp = await call_next(request)
        except Exception:
            logger.exception(f"{request.method} {request.url.path} failed")
            raise
        logger.info({
            "event": "http_request",
            "method": request.method,
            "path": request.url.path,
            "status": resp.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        })
        return resp
