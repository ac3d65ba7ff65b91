import time
from typing import Any, Dict, Optional, Tuple

import httpx
import pytest

from admin_panel.main import create_app
from admin_panel.sessions import RedisKeyValueStore, SessionManager
from admin_panel.settings import Settings
from admin_panel.users.models import UserCreate

LOGIN_SECRET = "let-me-in"


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering the calls the store makes."""

    def __init__(self):
        self.data: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.fail_with: Optional[BaseException] = None
        self.closed = False

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> Optional[bytes]:
        self._check()
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self.data[key]
            return None
        return value

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self._check()
        if isinstance(value, str):
            value = value.encode("utf-8")
        self.data[key] = (value, time.monotonic() + ex if ex else None)
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def redis_store(fake_redis) -> RedisKeyValueStore:
    store = RedisKeyValueStore(client=fake_redis)
    await store.initialize()
    return store


@pytest.fixture
def session_manager(redis_store) -> SessionManager:
    return SessionManager(redis_store, default_ttl_seconds=3600)


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        sqlite_db_path=str(tmp_path / "admin_panel_test.sqlite3"),
        redis_enabled=True,
        login_shared_secret=LOGIN_SECRET,
        session_ttl_seconds=600,
        http_client_retry_delay=0.0,
    )


@pytest.fixture
async def app(app_settings, fake_redis):
    application = create_app(app_settings, key_value_store=RedisKeyValueStore(client=fake_redis))
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture
async def seeded_users(app):
    store = app.state.user_store
    admin = await store.create_user(UserCreate(email="admin@example.com", name="Admin", roles=["admin"]))
    member = await store.create_user(UserCreate(email="member@example.com", name="Member", roles=["user"]))
    return {"admin": admin, "member": member}


async def login(http_client: httpx.AsyncClient, email: str, password: str = LOGIN_SECRET) -> str:
    response = await http_client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]
