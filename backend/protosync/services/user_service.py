"""
User Service.

WHAT: Business policy for user records.

WHY: The service layer decides which duplicate checks run, which records
count as visible (active only), and how pages are assembled. It never talks
to the driver directly; every store call goes through UserDAO so errors are
already normalized when they reach the routes.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from protosync.dao.user import UserDAO, normalize_email
from protosync.models.user import User

logger = logging.getLogger(__name__)

# Upper bound applied to the unpaginated listing
ALL_USERS_LIMIT = 1000


class UserService:
    """
    Service for user operations.

    HOW: Thin policy layer over UserDAO. Errors raised by the DAO
    propagate unchanged.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize UserService.

        Args:
            session: Async database session
        """
        self.session = session
        self.user_dao = UserDAO(session)

    async def create_user(self, data: Mapping[str, Any]) -> User:
        """
        Create a user after checking the email is not taken.

        Raises:
            DuplicateResourceError: If the email already exists
        """
        data = dict(data)
        data["email"] = normalize_email(data["email"])

        user = await self.user_dao.create(
            data,
            check_duplicates=[("email", data["email"])],
        )
        logger.info(f"Created user {user.id}")
        return user

    async def get_all_users(self) -> List[User]:
        """Return active users, newest first, capped at ALL_USERS_LIMIT."""
        users, _ = await self.user_dao.find_all(
            {"is_active": True},
            limit=ALL_USERS_LIMIT,
        )
        return users

    async def get_users_paginated(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """
        Return one page of active users, newest first.

        Returns:
            Dict with data, page, limit, total and total_pages
        """
        users, total = await self.user_dao.find_all(
            {"is_active": True},
            page=page,
            limit=limit,
            sort={"created_at": -1},
        )
        return {
            "data": users,
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        }

    async def get_user_by_id(self, user_id: str) -> User:
        return await self.user_dao.find_by_id(user_id)

    async def update_user(self, user_id: str, data: Mapping[str, Any]) -> User:
        """
        Apply a partial update.

        WHY: The email duplicate check only runs when the patch carries an
        email; the user's own record is excluded so re-sending the current
        email succeeds.
        """
        data = dict(data)
        check_duplicates = []
        if data.get("email") is not None:
            data["email"] = normalize_email(data["email"])
            check_duplicates.append(("email", data["email"]))

        return await self.user_dao.update(user_id, data, check_duplicates=check_duplicates)

    async def delete_user(self, user_id: str) -> None:
        await self.user_dao.delete(user_id)
        logger.info(f"Deleted user {user_id}")

    async def soft_delete_user(self, user_id: str) -> User:
        user = await self.user_dao.soft_delete(user_id)
        logger.info(f"Deactivated user {user_id}")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Return the active user with this email, or None."""
        return await self.user_dao.find_active_by_email(email)
