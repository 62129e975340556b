# helpdesk/core/logging.py
import logging
import sys
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Attach one stdout handler to the ``helpdesk`` logger tree."""
    root = logging.getLogger("helpdesk")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every request except health checks."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        method = request.method
        path = request.url.path
        start_time = time.perf_counter()
        logger.info(f"-> {method} {path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(f"x {method} {path} ERROR ({duration_ms}ms): {e}", exc_info=True)
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(f"<- {method} {path} {response.status_code} ({duration_ms}ms)")
        response.headers["X-Process-Time"] = str(duration_ms)
        return response
