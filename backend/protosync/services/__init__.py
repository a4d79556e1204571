"""
Services package.

WHY: Services hold business policy and coordinate DAOs, keeping routes thin.
"""

from protosync.services.user_service import UserService

__all__ = ["UserService"]
