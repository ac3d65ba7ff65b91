import logging

import httpx
from redis.exceptions import ConnectionError as RedisConnectionError

from admin_panel.main import create_app
from admin_panel.sessions import NullKeyValueStore, RedisKeyValueStore
from admin_panel.users.models import UserCreate

from conftest import LOGIN_SECRET, login


async def test_root_reports_name_version_environment(client, app_settings):
    response = await client.get("/")
    body = response.json()
    assert response.status_code == 200
    assert body["statusCode"] == 200
    assert body["message"] == "OK"
    assert body["data"] == {
        "name": app_settings.app_name,
        "version": app_settings.app_version,
        "environment": app_settings.environment,
    }
    assert "timestamp" in body


async def test_health(client):
    body = (await client.get("/health")).json()["data"]
    assert body["status"] == "healthy"
    assert body["details"]["session_store"] == "healthy"


async def test_login_me_logout_flow(client, seeded_users, fake_redis):
    token = await login(client, "admin@example.com")
    assert f"auth:token:{token}" in fake_redis.data
    auth = {"Authorization": f"Bearer {token}"}

    me = (await client.get("/auth/me", headers=auth)).json()["data"]
    assert me["email"] == "admin@example.com"
    assert me["roles"] == ["admin"]

    logout = await client.post("/auth/logout", headers=auth)
    assert logout.status_code == 200
    assert f"auth:token:{token}" not in fake_redis.data
    assert (await client.get("/auth/me", headers=auth)).json()["data"] is None


async def test_token_accepted_from_cookie_and_query(client, seeded_users):
    token = await login(client, "member@example.com")
    via_query = (await client.get("/auth/me", params={"token": token})).json()["data"]
    assert via_query["email"] == "member@example.com"
    via_cookie = (await client.get("/auth/me", headers={"Cookie": f"token={token}"})).json()["data"]
    assert via_cookie["email"] == "member@example.com"


async def test_refresh_requires_a_session(client, seeded_users, fake_redis):
    response = await client.post("/auth/refresh")
    assert response.status_code == 401

    token = await login(client, "member@example.com")
    response = await client.post("/auth/refresh", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["data"] == {"refreshed": True}
    assert fake_redis.ttls[f"auth:token:{token}"] == 600


async def test_wrong_password_and_unknown_user_get_same_401(client, seeded_users):
    wrong = await client.post("/auth/login", json={"email": "admin@example.com", "password": "nope"})
    unknown = await client.post("/auth/login", json={"email": "ghost@example.com", "password": LOGIN_SECRET})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"] == "Invalid email or password"
    assert wrong.headers["WWW-Authenticate"] == "Bearer"


async def test_error_body_shape(client):
    response = await client.get("/users/1")
    body = response.json()
    assert response.status_code == 401
    assert set(body) == {"statusCode", "timestamp", "path", "message"}
    assert body["statusCode"] == 401
    assert body["path"] == "/users/1"
    assert body["message"] == "Please log in first"


async def test_invalid_body_is_400(client):
    response = await client.post("/auth/login", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid data provided"


async def test_users_crud_with_roles(client, seeded_users):
    admin = {"Authorization": f"Bearer {await login(client, 'admin@example.com')}"}
    member = {"Authorization": f"Bearer {await login(client, 'member@example.com')}"}

    forbidden = await client.post("/users", json={"email": "new@example.com"}, headers=member)
    assert forbidden.status_code == 403

    created = await client.post("/users", json={"email": "new@example.com", "name": "New"}, headers=admin)
    assert created.status_code == 201
    new_user = created.json()["data"]
    assert new_user["email"] == "new@example.com"

    duplicate = await client.post("/users", json={"email": "new@example.com"}, headers=admin)
    assert duplicate.status_code == 409

    listing = (await client.get("/users", params={"page": 1, "limit": 2}, headers=member)).json()["data"]
    assert listing["meta"] == {"total": 3, "page": 1, "limit": 2, "totalPages": 2}
    assert len(listing["data"]) == 2

    updated = await client.put(f"/users/{new_user['id']}", json={"name": "Renamed"}, headers=member)
    assert updated.json()["data"]["name"] == "Renamed"

    assert (await client.delete(f"/users/{new_user['id']}", headers=member)).status_code == 403
    assert (await client.delete(f"/users/{new_user['id']}", headers=admin)).status_code == 200
    missing = await client.get(f"/users/{new_user['id']}", headers=admin)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Record not found"


async def test_skip_envelope_and_streams(client):
    raw = await client.get("/users/stream/raw/abc")
    assert raw.json() == {"userId": "abc", "customFormat": True, "data": "Raw payload, not wrapped"}

    ndjson = await client.get("/users/stream/stream-json", params={"count": 3})
    assert ndjson.headers["content-type"].startswith("application/x-ndjson")
    assert [line for line in ndjson.text.splitlines()] == [
        '{"id": 0, "name": "User 0"}',
        '{"id": 1, "name": "User 1"}',
        '{"id": 2, "name": "User 2"}',
    ]

    events = await client.get("/users/stream/events", params={"count": 2, "interval": 0})
    assert events.headers["content-type"].startswith("text/event-stream")
    assert events.text.count("data: ") == 2

    download = await client.get("/users/stream/download/report.txt")
    assert download.headers["content-disposition"] == 'attachment; filename="example.txt"'
    assert download.text.startswith("line 1 of report.txt")


async def test_degraded_mode_when_redis_is_down(app_settings, fake_redis):
    fake_redis.fail_with = RedisConnectionError("down")
    app = create_app(app_settings, key_value_store=RedisKeyValueStore(client=fake_redis))
    async with app.router.lifespan_context(app):
        assert isinstance(app.state.key_value_store, NullKeyValueStore)
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
            health = (await http_client.get("/health")).json()["data"]
            assert health["status"] == "degraded"

            response = await http_client.get("/auth/me", headers={"Authorization": "Bearer whatever"})
            assert response.status_code == 200
            assert response.json()["data"] is None


async def test_redis_failure_after_startup_is_503_on_login(client, seeded_users, fake_redis):
    fake_redis.fail_with = RedisConnectionError("gone")
    response = await client.post("/auth/login", json={"email": "admin@example.com", "password": LOGIN_SECRET})
    assert response.status_code == 503
    assert response.json()["message"] == "Session store unavailable"


async def test_login_disabled_without_shared_secret(app_settings, fake_redis):
    app_settings.login_shared_secret = None
    app = create_app(app_settings, key_value_store=RedisKeyValueStore(client=fake_redis))
    async with app.router.lifespan_context(app):
        await app.state.user_store.create_user(UserCreate(email="admin@example.com"))
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
            response = await http_client.post("/auth/login", json={"email": "admin@example.com", "password": "x"})
            assert response.status_code == 503


async def test_unexpected_errors_are_not_echoed(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret internals")

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        response = await http_client.get("/boom")
    assert response.status_code == 500
    assert response.json()["message"] == "Internal server error"
    assert "secret" not in response.text


async def test_login_with_redis_disabled_issues_token_that_never_resolves(app_settings):
    app_settings.redis_enabled = False
    app = create_app(app_settings)
    async with app.router.lifespan_context(app):
        assert isinstance(app.state.key_value_store, NullKeyValueStore)
        await app.state.user_store.create_user(UserCreate(email="admin@example.com", roles=["admin"]))
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
            token = await login(http_client, "admin@example.com")
            me = await http_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
            assert me.json()["data"] is None


async def test_auth_routes_are_enveloped(client, seeded_users):
    response = await client.post("/auth/login", json={"email": "admin@example.com", "password": LOGIN_SECRET})
    body = response.json()
    assert set(body) == {"data", "statusCode", "message", "timestamp"}
    assert body["statusCode"] == 200
    assert body["message"] == "OK"
    assert body["data"]["user"]["email"] == "admin@example.com"

    me = (await client.get("/auth/me", headers={"Authorization": f"Bearer {body['data']['token']}"})).json()
    assert me["statusCode"] == 200
    assert me["data"]["email"] == "admin@example.com"


async def test_update_with_null_email_is_400(client, seeded_users):
    admin = {"Authorization": f"Bearer {await login(client, 'admin@example.com')}"}
    member_id = seeded_users["member"].id

    response = await client.put(f"/users/{member_id}", json={"email": None}, headers=admin)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid data provided"

    unchanged = (await client.get(f"/users/{member_id}", headers=admin)).json()["data"]
    assert unchanged["email"] == "member@example.com"


def test_debug_mode_lowers_root_log_level(app_settings):
    root = logging.getLogger()
    app_logger = logging.getLogger("admin_panel.main")
    previous = root.level, app_logger.level
    try:
        app_settings.debug_mode = True
        create_app(app_settings)
        assert root.level == logging.DEBUG

        app_settings.debug_mode = False
        app_settings.log_level = "warning"
        create_app(app_settings)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous[0])
        app_logger.setLevel(previous[1])
