"""
FastAPI middleware for request tracing.

Every request gets a short request id that is bound into the structlog
context, so pipeline stage logs emitted while serving it can be joined
back to the request. Probe endpoints are traced but not logged.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/health", "/live", "/ready"})


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Bind request_id / method / path for the duration of a request.

    An incoming X-Request-ID header is reused, otherwise one is generated;
    either way it is echoed on the response.

    Usage:
        app = FastAPI()
        app.add_middleware(RequestTracingMiddleware)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        path = request.url.path
        quiet = path in QUIET_PATHS

        bind_context(request_id=request_id, method=request.method, path=path)
        start = time.perf_counter()
        if not quiet:
            logger.info("Request started")

        try:
            response = await call_next(request)
            if not quiet:
                logger.info(
                    "Request completed",
                    status_code=response.status_code,
                    duration_ms=_elapsed_ms(start),
                )
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(start),
            )
            raise
        finally:
            clear_context()
