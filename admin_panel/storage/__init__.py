from .sqlite_base import (
    configure_sqlite_db_path,
    get_sqlite_db_connection,
    init_sqlite_db,
    close_sqlite_db_connection,
)

__all__ = [
    "configure_sqlite_db_path",
    "get_sqlite_db_connection",
    "init_sqlite_db",
    "close_sqlite_db_connection",
]
