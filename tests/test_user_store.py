import sqlite3

import pytest

from admin_panel.errors import BadRequestError, ConflictError, NotFoundError
from admin_panel.storage.sqlite_base import close_sqlite_db_connection, configure_sqlite_db_path
from admin_panel.users import DuplicateUserError, SQLiteUserStore, UserCreate, UserService, UserUpdate


@pytest.fixture
async def user_store(tmp_path):
    configure_sqlite_db_path(str(tmp_path / "users.sqlite3"))
    store = SQLiteUserStore()
    await store.initialize()
    yield store
    await store.teardown()
    await close_sqlite_db_connection()
    configure_sqlite_db_path(None)


async def test_create_and_fetch(user_store):
    created = await user_store.create_user(UserCreate(email="a@example.com", name="A", roles=["admin"]))
    assert created.id > 0
    assert created.roles == ["admin"]
    assert (await user_store.get_user(created.id)).email == "a@example.com"
    assert (await user_store.get_user_by_email("a@example.com")).id == created.id
    assert await user_store.get_user(9999) is None


async def test_duplicate_email_is_rejected(user_store):
    await user_store.create_user(UserCreate(email="a@example.com"))
    with pytest.raises(DuplicateUserError):
        await user_store.create_user(UserCreate(email="a@example.com"))


async def test_list_returns_page_and_total(user_store):
    for i in range(5):
        await user_store.create_user(UserCreate(email=f"u{i}@example.com"))
    page, total = await user_store.list_users(skip=0, limit=2)
    assert total == 5
    assert [u.email for u in page] == ["u4@example.com", "u3@example.com"]


async def test_partial_update(user_store):
    created = await user_store.create_user(UserCreate(email="a@example.com", name="A"))
    updated = await user_store.update_user(created.id, UserUpdate(roles=["editor"]))
    assert updated.name == "A"
    assert updated.roles == ["editor"]
    assert updated.updated_at >= created.updated_at
    assert await user_store.update_user(9999, UserUpdate(name="x")) is None


async def test_delete(user_store):
    created = await user_store.create_user(UserCreate(email="a@example.com"))
    assert await user_store.delete_user(created.id) is True
    assert await user_store.delete_user(created.id) is False


async def test_service_translates_storage_outcomes(user_store):
    service = UserService(user_store)
    created = await service.create_user(UserCreate(email="a@example.com"))

    with pytest.raises(ConflictError):
        await service.create_user(UserCreate(email="a@example.com"))
    with pytest.raises(NotFoundError):
        await service.get_user(9999)
    with pytest.raises(NotFoundError):
        await service.delete_user(9999)
    with pytest.raises(BadRequestError):
        await service.update_user(created.id, UserUpdate())

    listing = await service.list_users(page=1, limit=10)
    assert listing.meta.total == 1
    assert listing.meta.totalPages == 1


def test_update_rejects_explicit_null_email():
    with pytest.raises(ValueError, match="email cannot be null"):
        UserUpdate(email=None)
    assert UserUpdate(name="x").model_dump(exclude_unset=True) == {"name": "x"}


async def test_not_null_violation_is_not_reported_as_duplicate(user_store):
    created = await user_store.create_user(UserCreate(email="a@example.com"))
    unvalidated = UserUpdate.model_construct(email=None)
    with pytest.raises(sqlite3.IntegrityError):
        await user_store.update_user(created.id, unvalidated)
    assert (await user_store.get_user(created.id)).email == "a@example.com"
