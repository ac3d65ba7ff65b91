"""
User management: data models, storage abstraction with its SQLite
implementation and the business service. Routers live in ``endpoints``,
``stream_endpoints`` and ``external`` and are mounted by the application.
"""

from .models import User, UserCreate, UserUpdate, UserInDB, UserList, PageMeta
from .storage_interfaces import AbstractUserStore, DuplicateUserError
from .sqlite_user_store import SQLiteUserStore
from .service import UserService

__all__ = [
    "User",
    "UserCreate",
    "UserUpdate",
    "UserInDB",
    "UserList",
    "PageMeta",
    "AbstractUserStore",
    "DuplicateUserError",
    "SQLiteUserStore",
    "UserService",
]
