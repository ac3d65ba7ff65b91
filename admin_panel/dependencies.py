# admin_panel/dependencies.py
"""
FastAPI dependency providers for the process-wide components.

Everything is created once by the application lifespan and kept on
``app.state``; these functions only hand it out.
"""
import logging

from fastapi import HTTPException, Request, status

from .auth.credentials import CredentialVerifier
from .http_client import HttpClientFactory, HttpClientService
from .sessions import SessionManager
from .users.storage_interfaces import AbstractUserStore

logger = logging.getLogger(__name__)


def _component(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        logger.error(f"Component '{name}' requested before application startup completed.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up.",
        )
    return component


async def get_session_manager(request: Request) -> SessionManager:
    return _component(request, "session_manager")


async def get_http_client_service(request: Request) -> HttpClientService:
    return _component(request, "http_client_service")


async def get_http_client_factory(request: Request) -> HttpClientFactory:
    return _component(request, "http_client_factory")


async def get_user_store(request: Request) -> AbstractUserStore:
    return _component(request, "user_store")


async def get_credential_verifier(request: Request) -> CredentialVerifier:
    return _component(request, "credential_verifier")
