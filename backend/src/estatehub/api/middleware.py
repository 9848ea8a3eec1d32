"""Request correlation and access logging."""

import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATH_PREFIXES = ("/api/health",)

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_var.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and echo it back in ``X-Request-ID``.

    An incoming header is reused so IDs survive across proxies.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


def _account_label(request: Request) -> str:
    account = getattr(request.state, "account", None)
    return account.id if account is not None else "anonymous"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status, duration and the acting account."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(QUIET_PATH_PREFIXES):
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception(f"{request.method} {request.url.path} failed after {elapsed:.1f}ms")
            raise

        elapsed = (time.perf_counter() - start) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} {response.status_code} "
            f"{elapsed:.1f}ms account={_account_label(request)}",
            extra={"status_code": response.status_code, "duration_ms": elapsed},
        )
        return response


class RequestContextFilter(logging.Filter):
    """Adds ``request_id`` to every record so formatters can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True
