# admin_panel/users/endpoints.py
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from .models import User, UserCreate, UserList, UserUpdate
from .service import UserService
from .storage_interfaces import AbstractUserStore
from ..auth.access import AccessGuard, require_auth, require_roles
from ..dependencies import get_user_store
from ..responses import EnvelopeRoute
from ..sessions import UserIdentity

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# Every route here needs a logged-in user; writes that add or remove
# accounts additionally need the admin role.
users_router = APIRouter(
    prefix="/users",
    tags=["Users"],
    route_class=EnvelopeRoute,
    dependencies=[Depends(AccessGuard(require_auth()))],
)


async def get_user_service(
    user_store: Annotated[AbstractUserStore, Depends(get_user_store)]
) -> UserService:
    return UserService(user_store)


@users_router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(AccessGuard(require_roles(ADMIN_ROLE)))],
)
async def create_user_endpoint(
    user_create: UserCreate,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Create a user. Returns 409 if the email is already registered."""
    logger.info(f"API: Received request to create user: {user_create.email}")
    created = await service.create_user(user_create)
    return User.from_db(created)


@users_router.get("", response_model=UserList)
async def list_users_endpoint(
    service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[int, Query(ge=1, description="1-based page number.")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Page size.")] = 10,
):
    return await service.list_users(page=page, limit=limit)


@users_router.get("/{user_id}", response_model=User)
async def get_user_endpoint(
    user_id: Annotated[int, Path(ge=1, description="The ID of the user to retrieve")],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return User.from_db(await service.get_user(user_id))


@users_router.put("/{user_id}", response_model=User)
async def update_user_endpoint(
    user_id: Annotated[int, Path(ge=1, description="The ID of the user to update")],
    user_update: UserUpdate,
    service: Annotated[UserService, Depends(get_user_service)],
    identity: Annotated[Optional[UserIdentity], Depends(AccessGuard(require_auth()))],
):
    """Update a user. Returns 404 if the user does not exist."""
    logger.info(f"API: User {identity.id} updating user {user_id}")
    return User.from_db(await service.update_user(user_id, user_update))


@users_router.delete(
    "/{user_id}",
    dependencies=[Depends(AccessGuard(require_roles(ADMIN_ROLE)))],
)
async def delete_user_endpoint(
    user_id: Annotated[int, Path(ge=1, description="The ID of the user to delete")],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Delete a user. Returns 404 if the user does not exist."""
    await service.delete_user(user_id)
    return {"message": "User deleted"}
