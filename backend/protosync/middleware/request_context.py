"""
Request context middleware.

WHAT: Assigns every request an id and logs its start and completion with
the elapsed time.

WHY: Error logs from the DAO layer and the exception handlers are only
useful if they can be tied back to a request. The request id is returned
in the ``X-Request-ID`` header so clients can report it.

HOW: Stores the context on ``request.state`` and in a ContextVar, so
services and DAOs can read it without receiving the request object.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """
    Container for request-scoped context data.

    Fields:
    - request_id: Unique identifier for the request (for log correlation)
    - path: Request path
    - method: HTTP method (GET, POST, etc.)
    """

    request_id: str
    path: str
    method: str


# Each async request gets its own isolated context
_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """
    Get the current request context.

    Returns:
        RequestContext if within a request, None otherwise
    """
    return _request_context.get()


def current_request_id() -> str:
    """Request id of the request being handled, or "-" outside a request."""
    context = _request_context.get()
    return context.request_id if context else "-"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that captures request context and logs request timing.

    Example:
        @router.get("/example")
        async def example(request: Request):
            ctx = request.state.context
            # or
            ctx = get_request_context()
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and add context.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response with request ID header added
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        context = RequestContext(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)

        logger.info(f"→ {context.method} {context.path} [{request_id}]")
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(f"← {context.method} {context.path} - {duration_ms:.0f}ms - ERROR [{request_id}]")
            raise
        finally:
            _request_context.reset(token)

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"← {context.method} {context.path} {response.status_code} - {duration_ms:.0f}ms [{request_id}]"
        )
        response.headers["X-Request-ID"] = request_id
        return response
