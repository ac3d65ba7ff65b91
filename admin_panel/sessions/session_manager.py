# admin_panel/sessions/session_manager.py
import logging
import secrets
from typing import Optional

from pydantic import ValidationError

from .session_data import UserIdentity
from .session_store import AbstractKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 7 * 24 * 3600
TOKEN_BYTES_LENGTH = 32


class SessionManager:
    """Issues opaque tokens and validates, refreshes and destroys their sessions.

    A token is valid exactly when a non-expired record exists for it in the
    store. No identity is cached here: every lookup goes back to the store.
    """

    def __init__(
        self,
        store: AbstractKeyValueStore,
        default_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        key_prefix: str = "auth:token:",
    ):
        if not isinstance(store, AbstractKeyValueStore):
            raise TypeError("SessionManager requires an instance of AbstractKeyValueStore.")
        self.store = store
        self.default_ttl_seconds = default_ttl_seconds
        self.key_prefix = key_prefix
        logger.info(
            f"SessionManager initialized with store: {type(store).__name__}, "
            f"default TTL: {default_ttl_seconds}s"
        )

    def generate_token(self) -> str:
        """32 random bytes, hex-encoded (64 characters)."""
        return secrets.token_hex(TOKEN_BYTES_LENGTH)

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    def _resolve_ttl(self, ttl_seconds: Optional[int]) -> int:
        """None means the default TTL. A session always expires, so zero or less is refused."""
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError(f"Session TTL must be a positive number of seconds, got {ttl}.")
        return ttl

    async def create_session(self, identity: UserIdentity, ttl_seconds: Optional[int] = None) -> str:
        """
        Store ``identity`` under a freshly generated token and return the token.

        Propagates StoreUnavailableError. Against a degraded store the
        returned token maps to nothing. Raises ValueError for a TTL of zero or less.
        """
        token = self.generate_token()
        ttl = self._resolve_ttl(ttl_seconds)
        await self.store.set(self._key(token), identity.model_dump(mode="json"), ttl)
        logger.info(f"create_session: session created for user {identity.id} (ttl={ttl}s)")
        return token

    async def get_user_info(self, token: str) -> Optional[UserIdentity]:
        """Single store read. None when the token is absent, expired or malformed."""
        if not token:
            return None
        raw = await self.store.get(self._key(token))
        if raw is None:
            return None
        try:
            return UserIdentity.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"get_user_info: stored session failed validation, treating as miss: {e}")
            return None

    async def refresh_session(self, token: str, ttl_seconds: Optional[int] = None) -> bool:
        """
        Rewrite the current identity under the same token with a new TTL.

        This is a read followed by a write, not an atomic TTL extension: a
        delete landing between the two will be undone by the rewrite.
        """
        ttl = self._resolve_ttl(ttl_seconds)
        identity = await self.get_user_info(token)
        if identity is None:
            logger.debug("refresh_session: no session to refresh.")
            return False
        await self.store.set(self._key(token), identity.model_dump(mode="json"), ttl)
        logger.info(f"refresh_session: session for user {identity.id} extended (ttl={ttl}s)")
        return True

    async def destroy_session(self, token: str) -> bool:
        deleted_count = await self.store.delete(self._key(token))
        if deleted_count > 0:
            logger.info("destroy_session: session deleted.")
        else:
            logger.debug("destroy_session: no session found to delete.")
        return deleted_count > 0

    async def validate_token(self, token: str) -> bool:
        return await self.get_user_info(token) is not None
