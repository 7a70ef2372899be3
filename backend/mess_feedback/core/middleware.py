"""
CORS and request logging middleware.
"""

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from mess_feedback.config import settings

log = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a generated request id and its duration."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            log.exception(
                "%s %s failed [%s] after %.4fs",
                request.method, request.url.path, request_id, time.perf_counter() - start,
            )
            raise

        elapsed = time.perf_counter() - start
        log.info(
            "%s %s -> %d [%s] %.4fs",
            request.method, request.url.path, response.status_code, request_id, elapsed,
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


def setup_middleware(app: FastAPI) -> None:
    """Configure CORS and request logging."""
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
