"""Durable key/value storage backing the persisted session."""
from .engine import DB_PATH, get_engine, init_db, make_session_factory
from .models import Base, StorageEntry
from .repository import get_item, remove_item, set_item

__all__ = [
    "DB_PATH",
    "get_engine",
    "init_db",
    "make_session_factory",
    "Base",
    "StorageEntry",
    "get_item",
    "set_item",
    "remove_item",
]
