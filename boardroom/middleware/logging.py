"""Request logging middleware using structlog."""

import logging
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from boardroom.config.settings import settings

logger = structlog.get_logger()


def configure_logging() -> None:
    """Configure structlog for structured JSON logging."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request with its caller, status and duration.

    Uploaded media served from disk is logged at debug level only; chat
    clients fetch every attachment in a conversation when it is opened.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = request.url.path
        is_media = path.startswith(f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/")
        started = time.perf_counter()

        if not is_media:
            logger.info(
                "Request started",
                method=request.method,
                path=path,
                client=request.client.host if request.client else None,
            )

        response = await call_next(request)

        # Set by AuthMiddleware, which runs inside this one
        user_id = getattr(request.state, "user_id", None)
        fields = {
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "user_id": user_id,
        }
        if is_media:
            logger.debug("Media served", **fields)
        elif response.status_code >= 400:
            logger.warning("Request completed", **fields)
        else:
            logger.info("Request completed", **fields)

        response.headers["X-Request-ID"] = request_id
        return response
