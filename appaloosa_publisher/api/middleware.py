"""Custom middleware for the API."""

import re
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

PROJECT_PATH = re.compile(r"^/v1/projects/(?P<project>[^/]+)")


def request_context(request: Request, request_id: str) -> dict[str, str]:
    """Log fields bound for the lifetime of one request."""
    context = {"request_id": request_id}
    match = PROJECT_PATH.match(request.url.path)
    if match:
        context["project"] = match.group("project")
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag every log line of a request with its id and the project it targets.

    Build log lines emitted while a publisher runs inherit these fields, so
    one request's upload attempts can be followed across loggers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**request_context(request, request_id))
        logger.info("request.started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request.completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response
