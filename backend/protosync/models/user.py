"""
User model.

WHY: Users are the only managed entity. Email uniqueness is enforced by a
unique index; the model validators re-check field constraints on every write.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, JSON, String
from sqlalchemy.orm import validates

from protosync.models.base import Base, PrimaryKeyMixin, RecordValidationError, TimestampMixin


NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
AGE_MIN = 0
AGE_MAX = 120


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """User record stored in the ``users`` table."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(f"age >= {AGE_MIN} AND age <= {AGE_MAX}", name="ck_users_age_range"),
    )

    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    # Stored lower-cased so the unique index is case-insensitive
    email = Column(String(255), unique=True, index=True, nullable=False)
    age = Column(Integer, nullable=False)

    # WHY: is_active allows soft-deletion without losing the record
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    tags = Column(JSON, default=list, nullable=False)

    @validates("name")
    def validate_name(self, key, value):
        if not isinstance(value, str):
            raise RecordValidationError(key, "Name must be a string", value)
        value = value.strip()
        if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
            raise RecordValidationError(
                key,
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
                value,
            )
        return value

    @validates("email")
    def validate_email(self, key, value):
        if not isinstance(value, str) or "@" not in value:
            raise RecordValidationError(key, "Please provide a valid email address", value)
        return value.strip().lower()

    @validates("age")
    def validate_age(self, key, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise RecordValidationError(key, "Age must be a valid number", value)
        if not AGE_MIN <= value <= AGE_MAX:
            raise RecordValidationError(
                key, f"Age must be between {AGE_MIN} and {AGE_MAX}", value
            )
        return value

    @validates("tags")
    def validate_tags(self, key, value):
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise RecordValidationError(key, "Each tag must be a string", value)
        return list(value)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, is_active={self.is_active})>"
