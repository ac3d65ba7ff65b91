# admin_panel/auth/access.py
"""
Per-route access decisions.

The policy is default-allow: a route is open unless it opts in with
``require_auth()`` and, optionally, ``require_roles(...)``. Identities are
attached beforehand by TokenAuthenticationMiddleware; this module only reads
them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional

from fastapi import Request

from ..errors import ForbiddenError, UnauthorizedError
from ..sessions import UserIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessRequirement:
    requires_auth: bool = False
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def __add__(self, other: "AccessRequirement") -> "AccessRequirement":
        return AccessRequirement(
            requires_auth=self.requires_auth or other.requires_auth,
            roles=self.roles | other.roles,
        )


PUBLIC = AccessRequirement()


def require_auth() -> AccessRequirement:
    return AccessRequirement(requires_auth=True)


def require_roles(*roles: str) -> AccessRequirement:
    """Role requirement; implies authentication. Any one of ``roles`` suffices."""
    return AccessRequirement(requires_auth=True, roles=frozenset(roles))


def check_access(requirement: AccessRequirement, identity: Optional[UserIdentity]) -> None:
    """Raise UnauthorizedError or ForbiddenError unless ``identity`` satisfies ``requirement``."""
    if not requirement.requires_auth:
        return
    if identity is None:
        raise UnauthorizedError("Please log in first")
    if requirement.roles and not identity.has_any_role(requirement.roles):
        logger.warning(
            f"Access denied for user {identity.id}: needs one of {sorted(requirement.roles)}, "
            f"has {identity.roles}"
        )
        raise ForbiddenError("Insufficient permissions")


def get_request_identity(request: Request) -> Optional[UserIdentity]:
    return getattr(request.state, "user", None)


class AccessGuard:
    """
    FastAPI dependency enforcing an AccessRequirement on a route.

    Usage: ``Depends(AccessGuard(require_roles("admin")))``. Resolves to the
    identity (or None on open routes).
    """

    def __init__(self, *requirements: AccessRequirement):
        combined = PUBLIC
        for requirement in requirements:
            combined = combined + requirement
        self.requirement = combined

    async def __call__(self, request: Request) -> Optional[UserIdentity]:
        identity = get_request_identity(request)
        check_access(self.requirement, identity)
        return identity


async def get_current_user(request: Request) -> Optional[UserIdentity]:
    """Identity attached to the request, or None. Never raises."""
    return get_request_identity(request)


def current_user_field(name: str):
    """Dependency factory returning one attribute of the current identity (None when anonymous)."""

    async def _field(request: Request) -> Any:
        identity = get_request_identity(request)
        return getattr(identity, name, None) if identity is not None else None

    return _field

