# admin_panel/users/external/service.py
import logging
from typing import Any, Dict, List, Optional

from .clients import EXAMPLE_API
from .models import CreateExternalUser, ExternalUser, UpdateExternalUser
from ...http_client import ClientDescriptor, HttpClientError, HttpClientFactory

logger = logging.getLogger(__name__)


class UserExternalService:
    """Reads and writes users on the example third-party API."""

    def __init__(self, factory: HttpClientFactory, descriptor: Optional[ClientDescriptor] = None):
        self.client = factory.build(descriptor or EXAMPLE_API)

    async def get_external_users(self) -> List[ExternalUser]:
        try:
            users = await self.client.get_users()
        except HttpClientError as e:
            logger.error(f"Fetching external users failed: {e}")
            raise
        logger.info(f"Fetched {len(users)} external users")
        return [ExternalUser.model_validate(u) for u in users]

    async def get_external_user(self, user_id: int) -> ExternalUser:
        try:
            user = await self.client.get_user(user_id)
        except HttpClientError as e:
            logger.error(f"Fetching external user {user_id} failed: {e}")
            raise
        return ExternalUser.model_validate(user)

    async def search_external_users(self, name: Optional[str] = None, email: Optional[str] = None) -> List[ExternalUser]:
        try:
            users = await self.client.search_users(name, email)
        except HttpClientError as e:
            logger.error(f"Searching external users failed: {e}")
            raise
        logger.info(f"External search matched {len(users)} users")
        return [ExternalUser.model_validate(u) for u in users]

    async def create_external_user(self, data: CreateExternalUser) -> ExternalUser:
        try:
            user = await self.client.create_user(data)
        except HttpClientError as e:
            logger.error(f"Creating external user failed: {e}")
            raise
        logger.info(f"Created external user '{data.name}'")
        # The demo API echoes only what was sent plus an id
        return ExternalUser.model_validate({**data.model_dump(), **user})

    async def update_external_user(self, user_id: int, data: UpdateExternalUser) -> Dict[str, Any]:
        """Returns the remote echo, which only carries the fields that were sent."""
        try:
            user = await self.client.update_user(user_id, data.model_dump(exclude_unset=True))
        except HttpClientError as e:
            logger.error(f"Updating external user {user_id} failed: {e}")
            raise
        return user

    async def delete_external_user(self, user_id: int) -> None:
        try:
            await self.client.delete_user(user_id)
        except HttpClientError as e:
            logger.error(f"Deleting external user {user_id} failed: {e}")
            raise
        logger.info(f"Deleted external user {user_id}")

    async def get_external_user_with_auth(self, user_id: int, authorization: str) -> ExternalUser:
        try:
            user = await self.client.get_user_with_auth(user_id, authorization)
        except HttpClientError as e:
            logger.error(f"Authenticated fetch of external user {user_id} failed: {e}")
            raise
        return ExternalUser.model_validate(user)
