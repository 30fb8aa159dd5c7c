"""Persistent key-value medium shared by the token store, saved-items cache
and conversation store.

Values are JSON text and every write replaces the whole value for a key; there
are no partial patches and no cross-key transactions.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from lato_travel.storage.models import KeyValueEntry
from lato_travel.storage.sessions import get_session, init_db
from lato_travel.utils import utcnow

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A read or write against the durable medium failed."""


class KeyValueStore(ABC):
    """Base interface for the durable medium: string values under string keys."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the raw text stored under key, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the value under key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; missing keys are ignored."""

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode the JSON value under key.

        Malformed JSON is treated as an empty slot: it is logged and
        ``default`` is returned, never raised to the caller.
        """
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Discarding corrupt value stored under %r", key)
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Encode value as JSON and store it under key."""
        self.set(key, json.dumps(value, default=str))


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store, used by tests and short-lived tools."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SqlKeyValueStore(KeyValueStore):
    """Key-value store backed by the ``kv_entry`` table."""

    def __init__(self, engine: Engine, *, create_tables: bool = True) -> None:
        self._engine = engine
        if create_tables:
            init_db(engine)

    def get(self, key: str) -> str | None:
        try:
            with get_session(self._engine) as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read {key!r}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with get_session(self._engine) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    entry = KeyValueEntry(key=key, value=value)
                else:
                    entry.value = value
                    entry.updated_at = utcnow()
                session.add(entry)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write {key!r}") from exc

    def delete(self, key: str) -> None:
        try:
            with get_session(self._engine) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is not None:
                    session.delete(entry)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete {key!r}") from exc
