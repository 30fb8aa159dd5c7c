"""Shared fixtures: in-memory stores, a controllable clock, token stores."""

from __future__ import annotations

import httpx
import pytest

from lato_travel.client import TokenStore
from lato_travel.storage import HttpxCookieChannel, MemoryKeyValueStore


class FakeClock:
    """Wall clock in seconds that only moves when a test advances it."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingStore(MemoryKeyValueStore):
    """MemoryKeyValueStore that records every write."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set(key, value)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def counting_store():
    return CountingStore()


@pytest.fixture
def cookie_jar():
    return httpx.Cookies()


@pytest.fixture
def cookies(cookie_jar, clock):
    return HttpxCookieChannel(cookie_jar, clock=clock)


@pytest.fixture
def token_store(kv_store, cookies, clock):
    return TokenStore(kv_store, cookies, clock=clock)
