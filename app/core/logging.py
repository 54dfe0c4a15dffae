"""
Logging setup - stdlib logging, configured once at startup.
"""

import logging
import time

from fastapi import Request

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

request_logger = logging.getLogger("app.requests")


def setup_logging(settings: Settings) -> None:
    """Configure the root logger from settings.log_level."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # pymongo is chatty at DEBUG
    logging.getLogger("pymongo").setLevel(max(level, logging.INFO))


async def log_requests(request: Request, call_next):
    """HTTP middleware: one line per request with status and latency."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    request_logger.info(
        "%s %s %s %.1fms",
        request.method, request.url.path, response.status_code, elapsed_ms
    )
    return response
