"""
Session Storage - durable copy of the signed-in user, token and location.

The session is kept as three independent string entries (`user` as JSON,
`token`, `location`), written together after every successful login,
registration or profile update and removed together on logout. Reading it
back never crashes: anything missing or corrupt means "logged out".
"""
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .database import get_engine, get_item, init_db, make_session_factory, remove_item, set_item
from .models.schemas import SessionPayload, User
from .utils.logger import get_logger

logger = get_logger(__name__)

USER_KEY = "user"
TOKEN_KEY = "token"
LOCATION_KEY = "location"
SESSION_KEYS = (USER_KEY, TOKEN_KEY, LOCATION_KEY)

# An unwritable data directory fails like a broken database
STORAGE_ERRORS = (SQLAlchemyError, OSError)


class SessionStorage:
    """
    Key/value persistence for the session.

    Handles:
    - Writing the session after auth operations
    - Removing it on logout
    - Reading it back at process start (fail-open)
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Initialize the storage.

        Args:
            database_url: SQLAlchemy URL (defaults to settings.storage_url)
            engine: Pre-built engine, mostly for tests
        """
        self.engine = engine or get_engine(database_url or get_settings().storage_url)
        self._session_factory = make_session_factory(self.engine)
        self._ready = False

    def _open(self):
        if not self._ready:
            init_db(self.engine)
            self._ready = True
        return self._session_factory()

    def add_user_to_storage(self, payload: SessionPayload) -> bool:
        """Write the three session entries. Returns False if storage failed."""
        try:
            db = self._open()
            try:
                set_item(db, USER_KEY, payload.user.model_dump_json(by_alias=True))
                set_item(db, TOKEN_KEY, payload.token)
                set_item(db, LOCATION_KEY, payload.location)
            finally:
                db.close()
        except STORAGE_ERRORS as exc:
            logger.error("Could not persist session: %s", exc)
            return False
        logger.info("💾 Saved session for user %s", payload.user.id)
        return True

    def remove_user_from_storage(self) -> bool:
        """Remove the three session entries. Returns False if storage failed."""
        try:
            db = self._open()
            try:
                for key in SESSION_KEYS:
                    remove_item(db, key)
            finally:
                db.close()
        except STORAGE_ERRORS as exc:
            logger.error("Could not clear stored session: %s", exc)
            return False
        logger.info("🗑️ Cleared stored session")
        return True

    def load_session(self) -> Optional[SessionPayload]:
        """Rebuild the stored session, or return None when logged out."""
        try:
            db = self._open()
            try:
                raw_user = get_item(db, USER_KEY)
                token = get_item(db, TOKEN_KEY)
                location = get_item(db, LOCATION_KEY)
            finally:
                db.close()
        except STORAGE_ERRORS as exc:
            logger.warning("Could not read stored session: %s", exc)
            return None

        if raw_user is None and token is None:
            return None
        if not raw_user or not token:
            logger.warning("Stored session is incomplete, starting logged out")
            self.remove_user_from_storage()
            return None

        try:
            return SessionPayload(
                user=User.model_validate_json(raw_user),
                token=token,
                location=location,
            )
        except ValidationError as exc:
            logger.warning(
                "Stored session is corrupt (%d errors), starting logged out",
                exc.error_count(),
            )
            self.remove_user_from_storage()
            return None
