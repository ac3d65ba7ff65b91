# admin_panel/users/service.py
import logging
import math

from .models import User, UserCreate, UserInDB, UserList, UserUpdate, PageMeta
from .storage_interfaces import AbstractUserStore, DuplicateUserError
from ..errors import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class UserService:
    """
    Business operations on users.

    Storage reports absence with None and uniqueness violations with
    DuplicateUserError; this layer turns both into API errors so routes stay
    thin.
    """

    def __init__(self, user_store: AbstractUserStore):
        self.user_store = user_store

    async def create_user(self, user_create: UserCreate) -> UserInDB:
        logger.info(f"Service: Attempting to create user with email: {user_create.email}")
        try:
            return await self.user_store.create_user(user_create)
        except DuplicateUserError as e:
            logger.warning(f"Service: User creation failed for '{user_create.email}': {e}")
            raise ConflictError("Record already exists") from e

    async def get_user(self, user_id: int) -> UserInDB:
        user = await self.user_store.get_user(user_id)
        if user is None:
            raise NotFoundError("Record not found")
        return user

    async def list_users(self, page: int = 1, limit: int = 10) -> UserList:
        if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
            raise BadRequestError(f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}")
        logger.info(f"Service: Listing users page={page} limit={limit}")
        users, total = await self.user_store.list_users(skip=(page - 1) * limit, limit=limit)
        return UserList(
            data=[User.from_db(u) for u in users],
            meta=PageMeta(
                total=total,
                page=page,
                limit=limit,
                totalPages=math.ceil(total / limit) if total else 0,
            ),
        )

    async def update_user(self, user_id: int, user_update: UserUpdate) -> UserInDB:
        if not user_update.model_dump(exclude_unset=True):
            raise BadRequestError("No fields to update")
        logger.info(f"Service: Updating user {user_id}")
        try:
            updated = await self.user_store.update_user(user_id, user_update)
        except DuplicateUserError as e:
            raise ConflictError("Record already exists") from e
        if updated is None:
            raise NotFoundError("Record not found")
        return updated

    async def delete_user(self, user_id: int) -> None:
        logger.info(f"Service: Deleting user {user_id}")
        if not await self.user_store.delete_user(user_id):
            raise NotFoundError("Record not found")
