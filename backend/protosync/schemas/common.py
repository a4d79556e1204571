"""
Response envelope schemas.

WHAT: The uniform wrapper every JSON response is rendered in.

WHY: Clients read ``success`` first, then either ``data`` or ``errors``,
and every response carries request metadata for correlation.

HOW: Routes build ApiResponse / PaginatedResponse instances; the exception
handlers build the error variant with error_envelope().
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from starlette.requests import Request

T = TypeVar("T")


class ResponseMeta(BaseModel):
    """Request metadata attached to every response."""

    timestamp: str = Field(..., description="ISO-8601 time the response was built")
    path: str = Field(..., description="Request path")
    method: str = Field(..., description="HTTP method")

    @classmethod
    def from_request(cls, request: Request) -> "ResponseMeta":
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            path=request.url.path,
            method=request.method,
        )


class ApiResponse(BaseModel, Generic[T]):
    """Successful response envelope."""

    # Keeps the plain and paginated envelopes distinguishable in a Union
    model_config = {"extra": "forbid"}

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    meta: ResponseMeta


class PaginationInfo(BaseModel):
    """Pagination block of a paginated list response."""

    model_config = {"populate_by_name": True}

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")


class PaginatedResponse(ApiResponse[List[T]], Generic[T]):
    """List response envelope carrying pagination details."""

    pagination: PaginationInfo


def error_envelope(
    request: Request,
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Build the error variant of the envelope.

    Args:
        request: The request being answered
        message: Safe, client-facing message
        errors: Field-level error entries

    Returns:
        JSON-serializable envelope dict
    """
    return {
        "success": False,
        "message": message,
        # Field values may be arbitrary input objects
        "errors": jsonable_encoder(errors or []),
        "meta": ResponseMeta.from_request(request).model_dump(),
    }
