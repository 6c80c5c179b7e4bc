import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Engine

from studytimer.database import make_session_factory
from studytimer.models.stored_value import StoredValue

logger = logging.getLogger(__name__)

SESSIONS_KEY = "study_sessions_state"
STATS_KEY = "study_stats_state"
LAST_RESET_DATE_KEY = "last_study_reset_date"


class PersistentStore(ABC):
    """Durable key-value storage that survives process restarts."""

    @abstractmethod
    def load(self, key: str) -> Any | None:
        """Return the value stored under key, or None."""
        ...

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value under key, replacing any previous one."""
        ...


class KeyValueStore(PersistentStore):
    """PersistentStore backed by the stored_values table.

    Every call runs in its own short transaction, so writes are durable
    as soon as save() returns.
    """

    def __init__(self, engine: Engine):
        self._session_factory = make_session_factory(engine)

    def load(self, key: str) -> Any | None:
        with self._session_factory() as db:
            row = db.get(StoredValue, key)
            if row is None:
                return None
            try:
                return json.loads(row.value)
            except ValueError:
                logger.warning("Ignoring unreadable value stored under %s", key)
                return None

    def save(self, key: str, value: Any) -> None:
        body = json.dumps(value, default=str)
        with self._session_factory.begin() as db:
            db.merge(
                StoredValue(key=key, value=body, updated_at=datetime.now(timezone.utc))
            )
