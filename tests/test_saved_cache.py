"""Tests for SavedItemsCache: lockstep index/snapshots, migration and cleanup."""

from __future__ import annotations

import json

import pytest

from lato_travel.saved import saved_companies_cache, saved_tours_cache
from lato_travel.saved.cache import (SAVED_COMPANIES_KEY, SAVED_TOURS_DATA_KEY,
                                     SAVED_TOURS_KEY)


def _stored(store, key):
    return json.loads(store.get(key))


# ── Toggle ────────────────────────────────────────────────────────────────────


class TestToggleSaved:
    def test_save_then_unsave(self, kv_store):
        cache = saved_tours_cache(kv_store)

        assert cache.toggle_saved("tour-123", {"title": "Alps Hike", "price": 120}) is True
        assert cache.is_saved("tour-123")
        assert _stored(kv_store, SAVED_TOURS_KEY) == ["tour-123"]
        assert _stored(kv_store, SAVED_TOURS_DATA_KEY) == [
            {"identifier": "tour-123", "title": "Alps Hike", "price": 120.0, "images": []}
        ]

        assert cache.toggle_saved("tour-123") is False
        assert not cache.is_saved("tour-123")
        assert _stored(kv_store, SAVED_TOURS_KEY) == []
        assert _stored(kv_store, SAVED_TOURS_DATA_KEY) == []

    def test_save_without_snapshot_still_creates_a_record(self, kv_store):
        cache = saved_tours_cache(kv_store)
        cache.toggle_saved("tour-1")
        assert cache.get_snapshot("tour-1").identifier == "tour-1"
        assert cache.count == 1

    def test_numeric_identifier_is_normalized(self, kv_store):
        cache = saved_tours_cache(kv_store)
        cache.toggle_saved(42)
        assert cache.is_saved("42")
        assert 42 in cache

    def test_snapshot_id_fields_do_not_override_identifier(self, kv_store):
        cache = saved_tours_cache(kv_store)
        cache.toggle_saved("tour-1", {"id": 99, "uuid": "other", "title": "Lagoon"})
        assert cache.get_snapshot("tour-1").identifier == "tour-1"
        assert cache.identifiers == ["tour-1"]

    @pytest.mark.parametrize("bad", ["", "   ", None, True, {"id": 1}])
    def test_invalid_identifier_rejected(self, kv_store, bad):
        cache = saved_tours_cache(kv_store)
        with pytest.raises(ValueError):
            cache.toggle_saved(bad)
        assert kv_store.keys() == []

    def test_extra_snapshot_fields_are_kept(self, kv_store):
        cache = saved_tours_cache(kv_store)
        cache.toggle_saved("tour-1", {"title": "Lagoon", "duration": "3 days"})
        reopened = saved_tours_cache(kv_store)
        assert reopened.get_snapshot("tour-1").model_extra == {"duration": "3 days"}

    def test_tours_and_companies_are_independent(self, kv_store):
        tours = saved_tours_cache(kv_store)
        companies = saved_companies_cache(kv_store)
        tours.toggle_saved("x")
        assert not companies.is_saved("x")
        assert kv_store.get(SAVED_COMPANIES_KEY) is None


class TestLockstep:
    def test_ids_and_snapshots_always_match(self, kv_store):
        cache = saved_tours_cache(kv_store)
        for ident in ["a", "b", "c", "b", "d", "a"]:
            cache.toggle_saved(ident, {"title": ident.upper()})
            ids = _stored(kv_store, SAVED_TOURS_KEY)
            snapshot_ids = [s["identifier"] for s in _stored(kv_store, SAVED_TOURS_DATA_KEY)]
            assert ids == snapshot_ids == cache.identifiers
        assert cache.identifiers == ["c", "d"]


# ── Load, migration and recovery ──────────────────────────────────────────────


class TestLoad:
    def test_legacy_numeric_ids_migrated_once(self, counting_store):
        counting_store.set(SAVED_TOURS_KEY, json.dumps([1, 2, 2]))
        counting_store.set(
            SAVED_TOURS_DATA_KEY, json.dumps([{"id": 1, "title": "One"}, {"id": 2, "title": "Two"}])
        )
        counting_store.writes.clear()

        cache = saved_tours_cache(counting_store)
        assert cache.identifiers == ["1", "2"]
        assert cache.get_snapshot("1").title == "One"
        assert sorted(counting_store.writes) == [SAVED_TOURS_KEY, SAVED_TOURS_DATA_KEY]

        counting_store.writes.clear()
        saved_tours_cache(counting_store)
        assert counting_store.writes == []

    def test_corrupt_json_starts_empty(self, kv_store):
        kv_store.set(SAVED_TOURS_KEY, "{not json")
        cache = saved_tours_cache(kv_store)
        assert cache.identifiers == []
        cache.toggle_saved("tour-1")
        assert cache.identifiers == ["tour-1"]

    def test_non_list_index_starts_empty(self, kv_store):
        kv_store.set(SAVED_TOURS_KEY, json.dumps({"tour-1": True}))
        cache = saved_tours_cache(kv_store)
        assert cache.identifiers == []
        assert _stored(kv_store, SAVED_TOURS_KEY) == []

    def test_orphan_snapshots_dropped(self, kv_store):
        kv_store.set(SAVED_TOURS_KEY, json.dumps(["a"]))
        kv_store.set(
            SAVED_TOURS_DATA_KEY,
            json.dumps([{"identifier": "a", "title": "A"}, {"identifier": "ghost", "title": "G"}]),
        )
        cache = saved_tours_cache(kv_store)
        assert [s.identifier for s in cache.snapshots] == ["a"]
        assert [s["identifier"] for s in _stored(kv_store, SAVED_TOURS_DATA_KEY)] == ["a"]

    def test_missing_snapshots_backfilled(self, kv_store):
        kv_store.set(SAVED_TOURS_KEY, json.dumps(["a", "b"]))
        kv_store.set(SAVED_TOURS_DATA_KEY, json.dumps([{"identifier": "a", "title": "A"}]))
        cache = saved_tours_cache(kv_store)
        assert [s.identifier for s in cache.snapshots] == ["a", "b"]
        assert cache.get_snapshot("b").title is None

    def test_snapshot_keyed_by_uuid(self, kv_store):
        kv_store.set(SAVED_TOURS_KEY, json.dumps(["u-1"]))
        kv_store.set(SAVED_TOURS_DATA_KEY, json.dumps([{"uuid": "u-1", "id": 7, "title": "U"}]))
        cache = saved_tours_cache(kv_store)
        assert cache.get_snapshot("u-1").title == "U"


# ── Cleanup ───────────────────────────────────────────────────────────────────


class TestCleanupStale:
    def test_removes_missing_items(self, kv_store):
        cache = saved_tours_cache(kv_store)
        for ident in ["a", "b", "c"]:
            cache.toggle_saved(ident)

        removed = cache.cleanup_stale(["a", "c", "z"])

        assert removed == ["b"]
        assert cache.identifiers == ["a", "c"]
        assert [s["identifier"] for s in _stored(kv_store, SAVED_TOURS_DATA_KEY)] == ["a", "c"]

    def test_no_write_when_nothing_is_stale(self, counting_store):
        cache = saved_tours_cache(counting_store)
        cache.toggle_saved("a")
        cache.toggle_saved("b")
        counting_store.writes.clear()

        assert cache.cleanup_stale(["a", "b", "c"]) == []
        assert counting_store.writes == []

    def test_partial_catalog_removes_nothing(self, counting_store):
        cache = saved_tours_cache(counting_store)
        cache.toggle_saved("a")
        counting_store.writes.clear()

        assert cache.cleanup_stale([], catalog_complete=False) == []
        assert cache.identifiers == ["a"]
        assert counting_store.writes == []

    def test_clear(self, kv_store):
        cache = saved_tours_cache(kv_store)
        cache.toggle_saved("a")
        cache.clear()
        assert len(cache) == 0
        assert _stored(kv_store, SAVED_TOURS_KEY) == []
