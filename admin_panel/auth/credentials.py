# admin_panel/auth/credentials.py
import logging
import secrets
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import HTTPException, status

from ..users.models import UserInDB

logger = logging.getLogger(__name__)


class CredentialVerifier(ABC):
    """Decides whether a login password is acceptable for a user."""

    @abstractmethod
    def verify(self, user: UserInDB, password: str) -> bool:
        pass


class SharedSecretCredentialVerifier(CredentialVerifier):
    """
    Accepts the single configured login secret for any existing user.

    Uses constant-time comparison. With no secret configured, login is
    reported as unavailable rather than silently open.
    """

    def __init__(self, shared_secret: Optional[str]):
        self.shared_secret = shared_secret

    def verify(self, user: UserInDB, password: str) -> bool:
        if not self.shared_secret:
            logger.error("LOGIN_SHARED_SECRET is not configured on the server. Login is disabled.")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Login is not configured on the server.",
            )
        return secrets.compare_digest(password.encode("utf-8"), self.shared_secret.encode("utf-8"))
