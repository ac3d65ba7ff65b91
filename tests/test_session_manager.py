import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from admin_panel.errors import StoreUnavailableError
from admin_panel.sessions import NullKeyValueStore, SessionManager, UserIdentity

ALICE = UserIdentity(id=1, email="alice@example.com", name="Alice", roles=["admin"])


async def test_create_session_returns_64_char_hex_token(session_manager):
    token = await session_manager.create_session(ALICE)
    assert len(token) == 64
    int(token, 16)


async def test_tokens_are_unique(session_manager):
    tokens = {await session_manager.create_session(ALICE) for _ in range(20)}
    assert len(tokens) == 20


async def test_session_roundtrips_identity(session_manager):
    token = await session_manager.create_session(ALICE)
    assert await session_manager.get_user_info(token) == ALICE
    assert await session_manager.validate_token(token) is True


async def test_session_is_stored_under_prefixed_key_with_ttl(session_manager, fake_redis):
    token = await session_manager.create_session(ALICE, ttl_seconds=120)
    key = f"auth:token:{token}"
    assert key in fake_redis.data
    assert fake_redis.ttls[key] == 120
    stored = json.loads(fake_redis.data[key][0])
    assert stored["email"] == "alice@example.com"


async def test_default_ttl_is_used_when_none_given(session_manager, fake_redis):
    token = await session_manager.create_session(ALICE)
    assert fake_redis.ttls[f"auth:token:{token}"] == 3600


async def test_unknown_and_empty_tokens_are_misses(session_manager):
    assert await session_manager.get_user_info("deadbeef") is None
    assert await session_manager.get_user_info("") is None
    assert await session_manager.validate_token("deadbeef") is False


async def test_malformed_session_record_is_a_miss(session_manager, fake_redis):
    await fake_redis.set("auth:token:broken", json.dumps({"name": "no id or email"}))
    assert await session_manager.get_user_info("broken") is None


async def test_destroy_session(session_manager):
    token = await session_manager.create_session(ALICE)
    assert await session_manager.destroy_session(token) is True
    assert await session_manager.get_user_info(token) is None
    assert await session_manager.destroy_session(token) is False


async def test_refresh_rewrites_with_new_ttl(session_manager, fake_redis):
    token = await session_manager.create_session(ALICE, ttl_seconds=10)
    assert await session_manager.refresh_session(token, ttl_seconds=900) is True
    assert fake_redis.ttls[f"auth:token:{token}"] == 900
    assert await session_manager.get_user_info(token) == ALICE


async def test_refresh_of_missing_session_writes_nothing(session_manager, fake_redis):
    assert await session_manager.refresh_session("missing") is False
    assert "auth:token:missing" not in fake_redis.data


async def test_store_failure_propagates(session_manager, fake_redis):
    fake_redis.fail_with = RedisConnectionError("connection refused")
    with pytest.raises(StoreUnavailableError):
        await session_manager.create_session(ALICE)
    with pytest.raises(StoreUnavailableError):
        await session_manager.get_user_info("anything")


async def test_degraded_store_accepts_writes_but_never_resolves():
    manager = SessionManager(NullKeyValueStore())
    token = await manager.create_session(ALICE)
    assert await manager.get_user_info(token) is None
    assert await manager.destroy_session(token) is False


def test_session_manager_requires_a_key_value_store():
    with pytest.raises(TypeError):
        SessionManager(store=object())


async def test_non_positive_ttl_is_rejected(session_manager, fake_redis):
    with pytest.raises(ValueError):
        await session_manager.create_session(ALICE, ttl_seconds=0)
    with pytest.raises(ValueError):
        await session_manager.create_session(ALICE, ttl_seconds=-5)
    assert fake_redis.data == {}

    token = await session_manager.create_session(ALICE)
    with pytest.raises(ValueError):
        await session_manager.refresh_session(token, ttl_seconds=0)
    assert fake_redis.ttls[f"auth:token:{token}"] == 3600


async def test_explicit_ttl_overrides_default_on_refresh(session_manager, fake_redis):
    token = await session_manager.create_session(ALICE)
    assert await session_manager.refresh_session(token, ttl_seconds=1) is True
    assert fake_redis.ttls[f"auth:token:{token}"] == 1
