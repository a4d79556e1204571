"""
Base model class for all SQLAlchemy models.

WHY: Centralizing common model functionality (timestamps, ID, store-level
validation errors) in one module keeps every table consistent.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    WHY: DeclarativeBase provides the foundation for SQLAlchemy 2.0 models
    with improved type hints and async support.
    """

    pass


class RecordValidationError(ValueError):
    """
    Raised by model validators when a value violates the stored schema.

    WHY: Model-level validation runs on every write, including writes that
    never went through an HTTP schema. The DAO layer translates this into
    an application ValidationError.
    """

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")


def generate_id() -> str:
    """Generate an opaque string identifier for a new record."""
    return str(uuid.uuid4())


def normalize_id(value: Any) -> Optional[str]:
    """
    Return the canonical form of a record identifier.

    Uppercase, unhyphenated and braced UUIDs map to the lower-case hyphenated
    form that is stored. Returns None when ``value`` is malformed.
    """
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.

    WHY: Timestamps are server-assigned; callers never set them.
    """

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PrimaryKeyMixin:
    """
    Mixin to add an opaque string primary key to models.

    WHY: Identifiers are exposed to clients as strings and validated for
    shape before any query is issued.
    """

    id = Column(String(36), primary_key=True, default=generate_id)
