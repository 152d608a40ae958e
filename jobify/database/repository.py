"""Thin repository helpers for the key/value storage table.

Each helper commits on its own, so a multi-key write is a sequence of
independent writes rather than one transaction.
"""
from typing import Optional

from sqlalchemy.orm import Session

from .models import StorageEntry


def get_item(session: Session, key: str) -> Optional[str]:
    entry = session.get(StorageEntry, key)
    return entry.value if entry is not None else None


def set_item(session: Session, key: str, value: str) -> StorageEntry:
    """Insert or update a storage row.

    Returns the persisted StorageEntry instance.
    """
    entry = session.get(StorageEntry, key)
    if entry is None:
        entry = StorageEntry(key=key, value=value)
        session.add(entry)
    else:
        entry.value = value

    session.commit()
    return entry


def remove_item(session: Session, key: str) -> bool:
    """Delete a storage row. Returns False when the key was not present."""
    entry = session.get(StorageEntry, key)
    if entry is None:
        return False
    session.delete(entry)
    session.commit()
    return True
