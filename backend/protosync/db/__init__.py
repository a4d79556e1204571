"""Database package"""

from protosync.db.session import AsyncSessionLocal, engine, get_db
from protosync.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
