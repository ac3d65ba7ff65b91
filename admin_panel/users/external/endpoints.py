# admin_panel/users/external/endpoints.py
import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query

from .models import CreateExternalUser, ExternalUser, UpdateExternalUser
from .service import UserExternalService
from ...dependencies import get_http_client_factory
from ...http_client import HttpClientFactory
from ...responses import EnvelopeRoute

logger = logging.getLogger(__name__)

external_users_router = APIRouter(
    prefix="/users/external",
    tags=["Users - External API"],
    route_class=EnvelopeRoute,
)


async def get_user_external_service(
    factory: Annotated[HttpClientFactory, Depends(get_http_client_factory)]
) -> UserExternalService:
    return UserExternalService(factory)


@external_users_router.get("", response_model=List[ExternalUser])
async def list_external_users(service: Annotated[UserExternalService, Depends(get_user_external_service)]):
    return await service.get_external_users()


# Registered before "/{user_id}" so "search" is not parsed as an id
@external_users_router.get("/search", response_model=List[ExternalUser])
async def search_external_users(
    service: Annotated[UserExternalService, Depends(get_user_external_service)],
    name: Annotated[Optional[str], Query()] = None,
    email: Annotated[Optional[str], Query()] = None,
):
    return await service.search_external_users(name, email)


@external_users_router.get("/{user_id}", response_model=ExternalUser)
async def get_external_user(
    user_id: Annotated[int, Path(ge=1)],
    service: Annotated[UserExternalService, Depends(get_user_external_service)],
):
    return await service.get_external_user(user_id)


@external_users_router.post("", response_model=ExternalUser, status_code=201)
async def create_external_user(
    data: CreateExternalUser,
    service: Annotated[UserExternalService, Depends(get_user_external_service)],
):
    return await service.create_external_user(data)


@external_users_router.put("/{user_id}")
async def update_external_user(
    user_id: Annotated[int, Path(ge=1)],
    data: UpdateExternalUser,
    service: Annotated[UserExternalService, Depends(get_user_external_service)],
) -> Dict[str, Any]:
    return await service.update_external_user(user_id, data)


@external_users_router.delete("/{user_id}")
async def delete_external_user(
    user_id: Annotated[int, Path(ge=1)],
    service: Annotated[UserExternalService, Depends(get_user_external_service)],
) -> Dict[str, str]:
    await service.delete_external_user(user_id)
    return {"message": "Deleted successfully"}
