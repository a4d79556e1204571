"""
FastAPI exception handlers.

WHY: Every error, whether raised by the DAO layer, by request validation,
by routing, or by a bug, leaves the API in the same envelope:
``{success: false, message, errors, meta}``. Internal details (tracebacks,
driver messages) are logged, never returned.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from protosync.core.exceptions import AppException, ErrorKind, InternalServerError
from protosync.schemas.common import error_envelope

logger = logging.getLogger(__name__)


def _log_error(request: Request, status_code: int, message: str) -> None:
    # Set by RequestContextMiddleware; absent when the middleware is not installed
    context = getattr(request.state, "context", None)
    request_id = context.request_id if context else "-"
    logger.error(
        f"HTTP {status_code} Error: {request.method} {request.url.path} - {message} [{request_id}]"
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle AppException and its subclasses.

    Args:
        request: The FastAPI request object
        exc: The application exception instance

    Returns:
        JSONResponse with the error envelope
    """
    if exc.kind in (ErrorKind.DATABASE_OPERATION, ErrorKind.INTERNAL_SERVER_ERROR):
        logger.error(f"{exc.kind.value}: {exc.to_dict()}")
    _log_error(request, exc.status_code, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, exc.message, exc.errors),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic request validation errors.

    WHY: Body, path and query validation failures are reported with the
    same field entries the DAO layer produces ({field, message, value}).
    """
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        location = [str(loc) for loc in error["loc"][1:]] or [str(loc) for loc in error["loc"]]
        errors.append(
            {
                "field": ".".join(location),
                "message": error["msg"],
                "value": error.get("input"),
            }
        )

    _log_error(request, 400, "Validation failed")
    return JSONResponse(
        status_code=400,
        content=error_envelope(request, "Validation failed", errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions.

    WHY: Unknown routes (404) and wrong methods (405) are raised before
    reaching our routes; this keeps them in the envelope format.
    """
    _log_error(request, exc.status_code, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    WHY: Logs the full traceback and returns a generic message so no
    implementation detail reaches the client.
    """
    logger.error(f"Unexpected error occurred: {exc}", exc_info=exc)

    error = InternalServerError()
    _log_error(request, error.status_code, error.message)
    return JSONResponse(
        status_code=error.status_code,
        content=error_envelope(request, error.message),
    )

