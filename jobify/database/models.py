from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StorageEntry(Base):
    """One durable string value, keyed like browser local storage.

    The session lives in three rows: `user` (JSON blob), `token` and
    `location`.
    """

    __tablename__ = "storage_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover - repr utility
        return f"StorageEntry(key={self.key})"
