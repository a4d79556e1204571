"""SQLAlchemy models"""

from protosync.models.base import Base, RecordValidationError, normalize_id
from protosync.models.user import User

__all__ = ["Base", "RecordValidationError", "normalize_id", "User"]
