"""Persistent saved-items cache (saved tours, saved companies).

Two keys per cache in the durable medium: a lightweight list of identifiers
and a list of snapshot records. The two are kept in lockstep: every
identifier has exactly one snapshot and every snapshot has an identifier.

The medium has no transactions. A mutation computes both new lists, writes
both, and only then replaces the in-memory state. A crash between the two
writes leaves at most one key partially applied; the reconciliation done on
load (drop orphan snapshots, backfill missing ones) is the recovery path.
"""
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from lato_travel.saved.models import SavedItemRecord
from lato_travel.storage import KeyValueStore

logger = logging.getLogger(__name__)

SAVED_TOURS_KEY = "lato_saved_tours"
SAVED_TOURS_DATA_KEY = "lato_saved_tours_data"
SAVED_COMPANIES_KEY = "lato_saved_companies"
SAVED_COMPANIES_DATA_KEY = "lato_saved_companies_data"


def _normalize_identifier(value: Any) -> str | None:
    """Legacy numeric ids become strings; empty or unusable values are dropped."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, str)):
        text = str(int(value)) if isinstance(value, float) and value.is_integer() else str(value)
        return text.strip() or None
    return None


def _snapshot_identifier(raw: dict[str, Any]) -> str | None:
    """Stable key of a stored snapshot: identifier, else uuid, else legacy id."""
    for field in ("identifier", "uuid", "id"):
        ident = _normalize_identifier(raw.get(field))
        if ident is not None:
            return ident
    return None


class SavedItemsCache:
    """The user's saved set, keyed by a stable string identifier."""

    def __init__(self, store: KeyValueStore, ids_key: str, snapshots_key: str) -> None:
        self._store = store
        self._ids_key = ids_key
        self._snapshots_key = snapshots_key
        self._ids: list[str] = []
        self._snapshots: dict[str, SavedItemRecord] = {}
        self._load()

    # --- Loading, migration and recovery ---

    def _load(self) -> None:
        raw_ids = self._store.get_json(self._ids_key, default=[])
        raw_snapshots = self._store.get_json(self._snapshots_key, default=[])
        dirty = False

        if not isinstance(raw_ids, list):
            logger.warning("Saved index %r is not a list; starting empty", self._ids_key)
            raw_ids, dirty = [], True
        if not isinstance(raw_snapshots, list):
            logger.warning("Snapshot list %r is not a list; starting empty", self._snapshots_key)
            raw_snapshots, dirty = [], True

        ids: list[str] = []
        for value in raw_ids:
            ident = _normalize_identifier(value)
            if ident is None or ident in ids:
                dirty = True
                continue
            if ident != value:
                dirty = True
            ids.append(ident)

        snapshots: dict[str, SavedItemRecord] = {}
        for raw in raw_snapshots:
            ident = _snapshot_identifier(raw) if isinstance(raw, dict) else None
            if ident is None or ident not in ids or ident in snapshots:
                dirty = True
                continue
            if raw.get("identifier") != ident:
                dirty = True
            try:
                snapshots[ident] = SavedItemRecord.from_snapshot(ident, raw)
            except ValidationError:
                logger.warning("Dropping unreadable snapshot for %s", ident)
                snapshots[ident] = SavedItemRecord(identifier=ident)
                dirty = True

        for ident in ids:
            if ident not in snapshots:
                snapshots[ident] = SavedItemRecord(identifier=ident)
                dirty = True

        self._ids = ids
        self._snapshots = snapshots
        if dirty:
            logger.info("Migrated saved items under %r (%d entries)", self._ids_key, len(ids))
            self._persist(ids, snapshots)

    def _persist(self, ids: list[str], snapshots: dict[str, SavedItemRecord]) -> None:
        self._store.set_json(self._ids_key, ids)
        self._store.set_json(
            self._snapshots_key, [snapshots[ident].to_storage() for ident in ids]
        )

    def _commit(self, ids: list[str], snapshots: dict[str, SavedItemRecord]) -> None:
        self._persist(ids, snapshots)
        self._ids = ids
        self._snapshots = snapshots

    # --- Operations ---

    def toggle_saved(self, identifier: Any, snapshot: dict[str, Any] | None = None) -> bool:
        """Save identifier if absent, unsave it if present.

        Returns:
            True when the item is saved after the call.

        Raises:
            ValueError: identifier is empty or not a string/number.
        """
        ident = _normalize_identifier(identifier)
        if ident is None:
            raise ValueError(f"Invalid saved item identifier: {identifier!r}")

        if ident in self._snapshots:
            ids = [i for i in self._ids if i != ident]
            snapshots = {i: rec for i, rec in self._snapshots.items() if i != ident}
            self._commit(ids, snapshots)
            return False

        ids = [*self._ids, ident]
        snapshots = {**self._snapshots, ident: SavedItemRecord.from_snapshot(ident, snapshot)}
        self._commit(ids, snapshots)
        return True

    def is_saved(self, identifier: Any) -> bool:
        """Membership check against memory; no I/O."""
        ident = _normalize_identifier(identifier)
        return ident is not None and ident in self._snapshots

    def cleanup_stale(
        self,
        valid_identifiers: Iterable[Any],
        *,
        catalog_complete: bool = True,
    ) -> list[str]:
        """Drop saved items whose identifier is not in valid_identifiers.

        valid_identifiers must describe the whole catalog. A page or a filtered
        listing would make every item outside it look stale, so callers pass
        ``catalog_complete=False`` for partial fetches and nothing is removed.

        Returns:
            The removed identifiers. Nothing is written when the list is empty.
        """
        if not catalog_complete:
            logger.debug("Skipping saved-items cleanup for a partial catalog")
            return []
        valid = {i for i in map(_normalize_identifier, valid_identifiers) if i is not None}
        removed = [i for i in self._ids if i not in valid]
        if not removed:
            return []
        ids = [i for i in self._ids if i in valid]
        snapshots = {i: self._snapshots[i] for i in ids}
        self._commit(ids, snapshots)
        logger.info("Removed %d stale saved items from %r", len(removed), self._ids_key)
        return removed

    def clear(self) -> None:
        if self._ids:
            self._commit([], {})

    # --- Views ---

    @property
    def identifiers(self) -> list[str]:
        return list(self._ids)

    @property
    def snapshots(self) -> list[SavedItemRecord]:
        return [self._snapshots[i] for i in self._ids]

    def get_snapshot(self, identifier: Any) -> SavedItemRecord | None:
        ident = _normalize_identifier(identifier)
        return self._snapshots.get(ident) if ident is not None else None

    @property
    def count(self) -> int:
        return len(self._ids)

    def __contains__(self, identifier: Any) -> bool:
        return self.is_saved(identifier)

    def __len__(self) -> int:
        return len(self._ids)


def saved_tours_cache(store: KeyValueStore) -> SavedItemsCache:
    return SavedItemsCache(store, SAVED_TOURS_KEY, SAVED_TOURS_DATA_KEY)


def saved_companies_cache(store: KeyValueStore) -> SavedItemsCache:
    return SavedItemsCache(store, SAVED_COMPANIES_KEY, SAVED_COMPANIES_DATA_KEY)
