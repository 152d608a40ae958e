"""Database engine and session helpers.

Both the app and tests build engines here; building one touches no files.
The session store defaults to `data/session.db` under the project root;
`sqlite:///:memory:` is supported for throwaway stores and keeps one shared
connection so every session sees the same tables.
"""

import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

PROJECT_ROOT = os.path.abspath(
    os.path.join(os.path.dirname(__file__), os.pardir, os.pardir)
)
DB_PATH = os.path.join(PROJECT_ROOT, "data", "session.db")


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Build an engine for `database_url`. The file is not opened yet."""
    url = make_url(database_url or f"sqlite:///{DB_PATH}")
    if url.get_backend_name() != "sqlite":
        return create_engine(url, future=True)

    database = url.database or ""
    if database in ("", ":memory:"):
        return create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, future=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(engine: Engine) -> None:
    """Create the storage table if it does not exist. There are no migrations.

    The SQLite directory is created here rather than in `get_engine()`, so an
    unwritable location surfaces as `OSError` on first use.
    """
    database = engine.url.database or ""
    if engine.url.get_backend_name() == "sqlite" and database not in ("", ":memory:"):
        os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)
    Base.metadata.create_all(engine)
