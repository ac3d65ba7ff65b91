# admin_panel/sessions/session_store.py
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ..errors import StoreUnavailableError
from ..settings import Settings, settings as global_settings

logger = logging.getLogger(__name__)


def serialize_value(value: Any) -> str:
    """Strings are stored verbatim; everything else is JSON-encoded."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def deserialize_value(raw: Any) -> Any:
    """Decode a stored value as JSON, falling back to the raw string."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


class AbstractKeyValueStore(ABC):
    """
    Interface of the key-value store behind the session layer.

    Individual operations are atomic on the backing server; multi-step
    sequences built on top of them are not.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections to the backing server."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Release connections to the backing server."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value stored under ``key`` or None when absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Store ``value`` under ``key``, optionally expiring after ``ttl_seconds``."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> int:
        """Delete ``key`` and return how many records were removed."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Health check against the backing server."""
        pass


class RedisKeyValueStore(AbstractKeyValueStore):
    """
    Redis implementation of the key-value store.

    Connection or protocol failures are logged and re-raised as
    StoreUnavailableError so callers never see redis-specific exceptions.
    """

    def __init__(self, client: Optional[aioredis.Redis] = None, settings: Optional[Settings] = None):
        self._redis_client: Optional[aioredis.Redis] = client
        self._owns_client = client is None
        self._settings = settings or global_settings

    async def initialize(self) -> None:
        """
        Connects to Redis using the configured settings and pings the server.
        Skips initialization if a client was injected or already exists.
        """
        if self._redis_client is None:
            connection_params = {
                "host": self._settings.redis_host,
                "port": self._settings.redis_port,
                "db": self._settings.redis_db,
                "decode_responses": False,
            }
            if self._settings.redis_password:
                connection_params["password"] = self._settings.redis_password

            logger.info(
                f"Connecting to Redis at {connection_params['host']}:"
                f"{connection_params['port']}, DB: {connection_params['db']}"
            )
            self._redis_client = aioredis.Redis(**connection_params)
            self._owns_client = True

        try:
            await self._redis_client.ping()
            logger.info("Successfully connected to Redis and pinged.")
        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            raise StoreUnavailableError(f"Redis unreachable: {e}") from e

    async def teardown(self) -> None:
        if self._redis_client is not None and self._owns_client:
            logger.info("Closing Redis connection.")
            await self._redis_client.aclose()
            logger.info("Redis connection closed.")
        self._redis_client = None

    def _get_client(self) -> aioredis.Redis:
        if self._redis_client is None:
            logger.error("Redis client not initialized. Call initialize() first.")
            raise StoreUnavailableError("RedisKeyValueStore not initialized.")
        return self._redis_client

    async def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        try:
            raw = await client.get(key)
        except (RedisError, OSError) as e:
            logger.error(f"Error reading key '{key}' from Redis: {e}", exc_info=True)
            raise StoreUnavailableError(str(e)) from e
        if raw is None:
            return None
        return deserialize_value(raw)

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        client = self._get_client()
        payload = serialize_value(value).encode("utf-8")
        try:
            if ttl_seconds:
                result = await client.set(key, payload, ex=ttl_seconds)
            else:
                result = await client.set(key, payload)
        except (RedisError, OSError) as e:
            logger.error(f"Error writing key '{key}' to Redis: {e}", exc_info=True)
            raise StoreUnavailableError(str(e)) from e
        logger.debug(f"SET '{key}' (ttl={ttl_seconds}) -> {result}")
        return bool(result)

    async def delete(self, key: str) -> int:
        client = self._get_client()
        try:
            deleted_count = await client.delete(key)
        except (RedisError, OSError) as e:
            logger.error(f"Error deleting key '{key}' from Redis: {e}", exc_info=True)
            raise StoreUnavailableError(str(e)) from e
        logger.debug(f"DEL '{key}' -> {deleted_count}")
        return int(deleted_count)

    async def ping(self) -> bool:
        client = self._get_client()
        try:
            return bool(await client.ping())
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(str(e)) from e


class NullKeyValueStore(AbstractKeyValueStore):
    """
    Degraded-mode store used when Redis is disabled or unreachable.

    Reads always miss, writes are acknowledged and dropped, so the auth layer
    keeps serving requests as unauthenticated.
    """

    async def initialize(self) -> None:
        logger.warning("NullKeyValueStore active: sessions are not persisted.")

    async def teardown(self) -> None:
        pass

    async def get(self, key: str) -> Optional[Any]:
        return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        logger.debug(f"NullKeyValueStore dropped write for key '{key}'.")
        return True

    async def delete(self, key: str) -> int:
        return 0

    async def ping(self) -> bool:
        return False
