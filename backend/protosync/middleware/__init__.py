"""
Middleware package.

WHY: Middleware provides cross-cutting concerns (request context, access
logging) that apply to all requests.
"""

from protosync.middleware.request_context import (
    RequestContext,
    RequestContextMiddleware,
    current_request_id,
    get_request_context,
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_context",
    "current_request_id",
    "RequestContext",
]
