"""
User Data Access Object.

WHY: UserDAO binds BaseDAO to the User model and the "User" resource name,
and adds the email lookups the user service needs.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from protosync.dao.base import BaseDAO
from protosync.models.user import User


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session, resource_name="User")

    async def find_active_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve an active user by email address.

        WHY: Emails are stored lower-cased, so the lookup value is
        normalized the same way before querying.

        Args:
            email: User's email address (any casing)

        Returns:
            User instance if an active user has this email, None otherwise
        """
        return await self.find_one({"email": normalize_email(email), "is_active": True})


def normalize_email(email: str) -> str:
    """Normalize an email address the way the users table stores it."""
    return email.strip().lower()
