"""
Session management for the admin panel.

Opaque-token sessions stored in a key-value store, with the identity record
validated on every read.
"""

from .session_data import UserIdentity
from .session_store import AbstractKeyValueStore, RedisKeyValueStore, NullKeyValueStore
from .session_manager import SessionManager

__all__ = [
    "UserIdentity",
    "AbstractKeyValueStore",
    "RedisKeyValueStore",
    "NullKeyValueStore",
    "SessionManager",
]
