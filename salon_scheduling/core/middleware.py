# salon_scheduling/core/middleware.py
"""Request tracing and access logging"""
import re
import time
import uuid
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Reschedule tokens are bearer secrets and travel in the path
_TOKEN_IN_PATH = re.compile(r"(/reschedule/links/)[^/?]+")


def redact_path(path: str) -> str:
    return _TOKEN_IN_PATH.sub(r"\1<token>", path)


async def correlation_id_middleware(request: Request, call_next):
    """Reuse the caller's correlation ID or mint one, and echo it back"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """One line per request with status and timing; 5xx responses log as errors"""
    started = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    path = redact_path(request.url.path)

    response = await call_next(request)

    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    log = logger.error if response.status_code >= 500 else logger.info
    log(
        f"{request.method} {path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "correlation_id": correlation_id,
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "client": request.client.host if request.client else "unknown",
        }
    )

    return response
