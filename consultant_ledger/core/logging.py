"""Logging setup and request logging middleware."""

from __future__ import annotations

import logging
import logging.config
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from consultant_ledger.core.config import Settings

request_logger = logging.getLogger("consultant_ledger.requests")


def configure_logging(settings: Settings) -> None:
    """Install console logging for the application loggers."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                },
            },
            "loggers": {
                "consultant_ledger": {
                    "handlers": ["console"],
                    "level": settings.log_level,
                    "propagate": False,
                },
            },
        }
    )


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log method, path, status and duration of every request."""

    started = time.perf_counter()
    request_logger.debug("Request started: %s %s", request.method, request.url.path)
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    request_logger.info(
        "Request completed: %s %s - %s in %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
