# admin_panel/storage/sqlite_base.py
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..settings import settings

logger = logging.getLogger(__name__)

# One connection per application lifecycle
_db_connection: Optional[sqlite3.Connection] = None
_db_path_override: Optional[str] = None


def configure_sqlite_db_path(db_path: Optional[str]) -> None:
    """
    Point the module at a different database file (":memory:" allowed).

    Must be called before the first connection is opened; tests use it to
    get an isolated database.
    """
    global _db_path_override
    _db_path_override = db_path


def _resolve_db_path() -> str:
    db_path = _db_path_override or settings.sqlite_db_path
    if db_path == ":memory:":
        return db_path
    resolved = Path(db_path).resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


async def get_sqlite_db_connection() -> sqlite3.Connection:
    """
    Get or create the SQLite connection and make sure the schema exists.

    Raises:
        sqlite3.Error: If the database cannot be opened
    """
    global _db_connection
    if _db_connection is None:
        db_path = _resolve_db_path()
        try:
            logger.info(f"Attempting to connect to SQLite DB at: {db_path}")
            # Shared across the event loop's threadpool workers
            _db_connection = sqlite3.connect(db_path, check_same_thread=False)
            _db_connection.row_factory = sqlite3.Row
            logger.info(f"Successfully connected to SQLite DB: {db_path}")
            await init_sqlite_db(_db_connection)
        except sqlite3.Error as e:
            logger.error(f"Error connecting to SQLite database at {db_path}: {e}", exc_info=True)
            _db_connection = None
            raise
    return _db_connection


async def init_sqlite_db(conn: Optional[sqlite3.Connection] = None):
    """Create the tables if they do not exist yet."""
    db_conn = conn or await get_sqlite_db_connection()
    cursor = db_conn.cursor()

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        name TEXT,
        roles_json TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    ''')
    logger.info("Ensured 'users' table exists.")

    db_conn.commit()
    logger.info("SQLite database schema initialized/verified.")


async def close_sqlite_db_connection():
    global _db_connection
    if _db_connection is not None:
        logger.info("Closing SQLite DB connection.")
        _db_connection.close()
        _db_connection = None
        logger.info("SQLite DB connection closed.")
