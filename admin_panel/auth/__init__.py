from .access import (
    AccessGuard,
    AccessRequirement,
    PUBLIC,
    check_access,
    current_user_field,
    get_current_user,
    get_request_identity,
    require_auth,
    require_roles,
)
from .authenticator import TokenAuthenticationMiddleware, extract_token
from .credentials import CredentialVerifier, SharedSecretCredentialVerifier

__all__ = [
    "AccessGuard",
    "AccessRequirement",
    "PUBLIC",
    "check_access",
    "current_user_field",
    "get_current_user",
    "get_request_identity",
    "require_auth",
    "require_roles",
    "TokenAuthenticationMiddleware",
    "extract_token",
    "CredentialVerifier",
    "SharedSecretCredentialVerifier",
]
