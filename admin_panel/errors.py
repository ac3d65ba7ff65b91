# admin_panel/errors.py
from typing import Dict, Optional

from fastapi import HTTPException, status


class AdminPanelError(HTTPException):
    """Base class for business errors surfaced to API clients.

    Inherits from FastAPI's HTTPException so routes, dependencies and the
    exception handlers all treat it the same way.
    """

    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class BadRequestError(AdminPanelError):
    """Raised when a request fails validation or violates a business rule."""

    def __init__(self, detail: str = "Invalid data provided"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(AdminPanelError):
    """Raised when a route needs an identity and none is attached to the request."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AdminPanelError):
    """Raised when an identity is present but lacks a required role."""

    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(AdminPanelError):
    def __init__(self, detail: str = "Record not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(AdminPanelError):
    def __init__(self, detail: str = "Record already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class StoreUnavailableError(Exception):
    """Raised by the session store when its backing server cannot be reached.

    The request authenticator treats it as a cache miss; routes that must
    write a session (login) turn it into a 503.
    """

    def __init__(self, message: str = "Session store unavailable"):
        super().__init__(message)
