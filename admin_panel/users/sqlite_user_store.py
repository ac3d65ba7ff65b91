# admin_panel/users/sqlite_user_store.py
import sqlite3
import logging
import json
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime, timezone

from .storage_interfaces import AbstractUserStore, DuplicateUserError
from .models import UserInDB, UserCreate, UserUpdate
from ..storage.sqlite_base import get_sqlite_db_connection

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, name, roles_json, created_at, updated_at"


def _is_unique_violation(error: sqlite3.IntegrityError) -> bool:
    # NOT NULL and CHECK failures are IntegrityErrors as well
    return "UNIQUE constraint failed" in str(error)


class SQLiteUserStore(AbstractUserStore):
    """SQLite implementation of the user storage interface."""

    async def initialize(self) -> None:
        await get_sqlite_db_connection()
        logger.info("SQLiteUserStore initialized.")

    async def teardown(self) -> None:
        logger.info("SQLiteUserStore teardown (connection managed globally).")

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """
        Execute a SQL query, rolling back on failure when writing.

        Raises:
            sqlite3.Error: If query execution fails
        """
        conn = await get_sqlite_db_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                conn.commit()
        except sqlite3.IntegrityError:
            if commit:
                conn.rollback()
            raise
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query}': {e}", exc_info=True)
            if commit:
                conn.rollback()
            raise
        return cursor

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchone()

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchall()

    def _row_to_user_in_db(self, row: Optional[sqlite3.Row]) -> Optional[UserInDB]:
        if not row:
            return None

        try:
            return UserInDB(
                id=row["id"],
                email=row["email"],
                name=row["name"],
                roles=json.loads(row["roles_json"]) if row["roles_json"] else [],
                created_at=datetime.fromisoformat(row["created_at"].replace("Z", "+00:00")),
                updated_at=datetime.fromisoformat(row["updated_at"].replace("Z", "+00:00")),
            )
        except (ValueError, TypeError) as e:
            logger.error(f"Error converting row to UserInDB: {dict(row)}. Error: {e}", exc_info=True)
            return None

    async def create_user(self, user_create: UserCreate) -> UserInDB:
        """
        Insert a new user.

        Raises:
            DuplicateUserError: If the email is already registered
        """
        now_iso = datetime.now(timezone.utc).isoformat()
        query = """
            INSERT INTO users (email, name, roles_json, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """
        params = (
            user_create.email,
            user_create.name,
            json.dumps(user_create.roles or []),
            now_iso,
            now_iso,
        )

        try:
            cursor = await self._execute_query(query, params)
        except sqlite3.IntegrityError as e:
            if not _is_unique_violation(e):
                raise
            logger.warning(f"Rejected duplicate user email '{user_create.email}': {e}")
            raise DuplicateUserError("email", user_create.email) from e

        created = await self.get_user(cursor.lastrowid)
        if created is None:
            raise sqlite3.DatabaseError(f"User {cursor.lastrowid} vanished right after insert.")
        logger.info(f"Created user {created.id} ({created.email}).")
        return created

    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?"
        row = await self._fetchone(query, (user_id,))
        return self._row_to_user_in_db(row)

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?"
        row = await self._fetchone(query, (email,))
        return self._row_to_user_in_db(row)

    async def list_users(self, skip: int = 0, limit: int = 100) -> Tuple[List[UserInDB], int]:
        query = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
        """
        rows = await self._fetchall(query, (limit, skip))
        total_row = await self._fetchone("SELECT COUNT(*) AS total FROM users")
        total = total_row["total"] if total_row else 0

        users = [
            user for row in rows
            if (user := self._row_to_user_in_db(row)) is not None
        ]
        return users, total

    async def update_user(self, user_id: int, user_update: UserUpdate) -> Optional[UserInDB]:
        """
        Apply a partial update. Returns None if the user does not exist.

        Raises:
            DuplicateUserError: If the new email belongs to another user
        """
        current_user = await self.get_user(user_id)
        if not current_user:
            return None

        update_fields: Dict[str, Any] = user_update.model_dump(exclude_unset=True)
        if not update_fields:
            return current_user

        set_clauses = []
        params: List[Any] = []
        for key, value in update_fields.items():
            if key == "roles":
                set_clauses.append("roles_json = ?")
                params.append(json.dumps(value or []))
            else:
                set_clauses.append(f"{key} = ?")
                params.append(value)
        set_clauses.append("updated_at = ?")
        params.append(datetime.now(timezone.utc).isoformat())

        query = f"UPDATE users SET {', '.join(set_clauses)} WHERE id = ?"
        params.append(user_id)

        try:
            await self._execute_query(query, tuple(params))
        except sqlite3.IntegrityError as e:
            if not _is_unique_violation(e):
                raise
            raise DuplicateUserError("email", str(update_fields.get("email"))) from e
        return await self.get_user(user_id)

    async def delete_user(self, user_id: int) -> bool:
        query = "DELETE FROM users WHERE id = ?"
        cursor = await self._execute_query(query, (user_id,))
        return cursor.rowcount > 0
