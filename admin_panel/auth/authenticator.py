# admin_panel/auth/authenticator.py
import logging
from typing import Any, Callable, Dict, Optional

from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Receive, Scope, Send

from ..sessions import SessionManager

logger = logging.getLogger(__name__)

TOKEN_COOKIE_NAME = "token"
TOKEN_QUERY_PARAM = "token"
BEARER_PREFIX = "Bearer "


def extract_token(connection: HTTPConnection) -> Optional[str]:
    """
    Pull the session token out of a request, first match wins:

    1. ``Authorization`` header, with a leading ``Bearer `` stripped if present
    2. ``token`` cookie
    3. ``token`` query parameter (discouraged, kept for links and downloads)
    """
    authorization = connection.headers.get("Authorization")
    if authorization:
        if authorization.startswith(BEARER_PREFIX):
            return authorization[len(BEARER_PREFIX):]
        return authorization

    cookie_token = connection.cookies.get(TOKEN_COOKIE_NAME)
    if cookie_token:
        return cookie_token

    query_token = connection.query_params.get(TOKEN_QUERY_PARAM)
    if query_token:
        return query_token

    return None


def _session_manager_from_app(scope: Scope) -> Optional[SessionManager]:
    app = scope.get("app")
    state = getattr(app, "state", None)
    return getattr(state, "session_manager", None)


class TokenAuthenticationMiddleware:
    """
    Annotates every HTTP request with the identity behind its token.

    On success ``request.state.user`` holds the UserIdentity and
    ``request.state.token`` the raw token. This middleware never rejects a
    request: a missing, unknown or expired token, or a failing session store,
    simply leaves the request unauthenticated.
    """

    def __init__(
        self,
        app: ASGIApp,
        session_manager_provider: Optional[Callable[[Scope], Optional[SessionManager]]] = None,
    ):
        self.app = app
        self.session_manager_provider = session_manager_provider or _session_manager_from_app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        state: Dict[str, Any] = scope.setdefault("state", {})
        state["user"] = None
        state["token"] = None

        token = extract_token(HTTPConnection(scope))
        if token:
            await self._resolve(scope, state, token)

        await self.app(scope, receive, send)

    async def _resolve(self, scope: Scope, state: Dict[str, Any], token: str) -> None:
        session_manager = self.session_manager_provider(scope)
        if session_manager is None:
            logger.warning("Token present but no SessionManager is configured; request stays unauthenticated.")
            return
        try:
            identity = await session_manager.get_user_info(token)
        except Exception as e:
            logger.error(f"Token lookup failed, continuing unauthenticated: {e}", exc_info=True)
            return

        if identity is None:
            logger.debug("Token invalid or expired.")
            return
        state["user"] = identity
        state["token"] = token
        logger.debug(f"Token resolved: user {identity.id} - {identity.email}")
