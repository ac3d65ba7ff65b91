# admin_panel/users/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .models import UserCreate, UserInDB, UserUpdate


class DuplicateUserError(ValueError):
    """A user with the same unique field already exists."""

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"A user with {field_name} '{value}' already exists.")


class AbstractUserStore(ABC):
    """
    Persistence interface for users.

    Lookups return None when a record is absent; uniqueness violations raise
    DuplicateUserError. Translation into API errors happens in UserService.
    """

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def teardown(self) -> None:
        pass

    @abstractmethod
    async def create_user(self, user_create: UserCreate) -> UserInDB:
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        pass

    @abstractmethod
    async def list_users(self, skip: int = 0, limit: int = 100) -> Tuple[List[UserInDB], int]:
        """Return one page of users (newest first) and the total user count."""
        pass

    @abstractmethod
    async def update_user(self, user_id: int, user_update: UserUpdate) -> Optional[UserInDB]:
        pass

    @abstractmethod
    async def delete_user(self, user_id: int) -> bool:
        pass
