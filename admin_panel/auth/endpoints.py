# admin_panel/auth/endpoints.py
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request

from .access import AccessGuard, get_current_user, require_auth
from .credentials import CredentialVerifier
from .models import LoginRequest, LoginResponse, LogoutResponse, RefreshResponse
from ..dependencies import get_credential_verifier, get_session_manager, get_user_store
from ..errors import UnauthorizedError
from ..responses import EnvelopeRoute
from ..sessions import SessionManager, UserIdentity
from ..users.storage_interfaces import AbstractUserStore

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"], route_class=EnvelopeRoute)


@auth_router.post("/login", response_model=LoginResponse)
async def login(
    login_request: LoginRequest,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    user_store: Annotated[AbstractUserStore, Depends(get_user_store)],
    verifier: Annotated[CredentialVerifier, Depends(get_credential_verifier)],
):
    """
    Exchange credentials for a session token.

    Unknown emails and wrong passwords get the same 401 so the response
    does not reveal which accounts exist. StoreUnavailableError from the
    session store propagates and is rendered as 503.
    """
    logger.info(f"Login attempt for '{login_request.email}'.")
    user = await user_store.get_user_by_email(login_request.email)
    if user is None or not verifier.verify(user, login_request.password):
        logger.warning(f"Login failed for '{login_request.email}'.")
        raise UnauthorizedError("Invalid email or password")

    identity = UserIdentity(id=user.id, email=user.email, name=user.name, roles=user.roles)
    token = await session_manager.create_session(identity)
    logger.info(f"Login succeeded for user {user.id}.")
    return LoginResponse(token=token, user=identity)


@auth_router.get("/me", response_model=Optional[UserIdentity])
async def me(identity: Annotated[Optional[UserIdentity], Depends(get_current_user)]):
    """Identity attached to this request, or null for anonymous callers."""
    return identity


@auth_router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    token = getattr(request.state, "token", None)
    if token:
        await session_manager.destroy_session(token)
    return LogoutResponse(message="Logged out successfully")


@auth_router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    _: Annotated[Optional[UserIdentity], Depends(AccessGuard(require_auth()))],
):
    refreshed = await session_manager.refresh_session(request.state.token)
    return RefreshResponse(refreshed=refreshed)
