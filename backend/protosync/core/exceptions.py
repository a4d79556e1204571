"""
Application exceptions for structured error handling.

WHY: Every failure raised by the data-access layer carries an error kind,
an HTTP status code and a safe message, so the boundary handlers can render
one consistent envelope without inspecting driver internals.

IMPORTANT: NEVER raise the base Exception class from application code.
Raise one of the exceptions below so the error kind is preserved.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    """Tag identifying the category of an application error."""

    VALIDATION = "validation"
    DUPLICATE_RESOURCE = "duplicate_resource"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE_OPERATION = "database_operation"
    INTERNAL_SERVER_ERROR = "internal_server_error"


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: Handlers dispatch on ``kind`` and ``status_code`` rather than on the
    concrete class, so every subclass only needs to set those two attributes
    and a default message.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_SERVER_ERROR
    status_code: int = 500
    default_message: str = "Internal server error occurred. Please try again later."

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        **context: Any,
    ):
        """
        Initialize exception with message, field errors and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            errors: Field-level error entries ({field, message, value})
            **context: Additional context for logging
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging and responses.

        Returns:
            Dictionary with error details
        """
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
            "errors": self.errors,
            "details": self.context or None,
        }


class ValidationError(AppException):
    """
    Raised when input or an identifier is malformed.

    HTTP Status: 400 Bad Request
    """

    kind = ErrorKind.VALIDATION
    status_code = 400
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str, value: Any = None) -> "ValidationError":
        """Build a validation error carrying a single field entry."""
        return cls(errors=[{"field": field, "message": message, "value": value}])


class DuplicateResourceError(AppException):
    """
    Raised when a uniqueness conflict is detected.

    HTTP Status: 409 Conflict
    """

    kind = ErrorKind.DUPLICATE_RESOURCE
    status_code = 409
    default_message = "Duplicate resource"

    def __init__(self, resource: str, field: str, value: Any, **context: Any):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            resource=resource,
            field=field,
            **context,
        )
        self.resource = resource
        self.field = field
        self.value = value


class ResourceNotFoundError(AppException):
    """
    Raised when no record matches the requested identifier.

    HTTP Status: 404 Not Found
    """

    kind = ErrorKind.RESOURCE_NOT_FOUND
    status_code = 404
    default_message = "Resource not found"

    def __init__(self, resource: str, identifier: Any, **context: Any):
        super().__init__(
            message=f"{resource} with ID '{identifier}' not found",
            resource=resource,
            identifier=identifier,
            **context,
        )
        self.resource = resource
        self.identifier = identifier


class DatabaseOperationError(AppException):
    """
    Raised when a store operation fails for an unclassified reason.

    WHY: Driver errors are converted here so no SQL or driver message
    reaches the client.

    HTTP Status: 500 Internal Server Error
    """

    kind = ErrorKind.DATABASE_OPERATION
    status_code = 500
    default_message = "Database operation failed"


class InternalServerError(AppException):
    """
    Raised (or synthesized by the catch-all handler) for anything uncaught.

    HTTP Status: 500 Internal Server Error
    """

    kind = ErrorKind.INTERNAL_SERVER_ERROR
    status_code = 500
