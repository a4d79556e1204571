"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from protosync.dao.base import BaseDAO
from protosync.dao.user import UserDAO

__all__ = ["BaseDAO", "UserDAO"]
