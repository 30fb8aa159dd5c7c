"""Presence feeds for conversation counterparties.

The store consumes any ``PresenceSource``; production code plugs in a push
feed (``WebSocketPresenceSource``) and demos use the simulated poller.
"""
import asyncio
import json
import logging
import random
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from typing import Protocol

import websockets
from pydantic import ValidationError

from lato_travel.messages.models import PresenceUpdate
from lato_travel.utils import utcnow

logger = logging.getLogger(__name__)


class PresenceSource(Protocol):
    """Anything that yields presence updates until stop_event is set."""

    def updates(
        self, stop_event: asyncio.Event | None = None
    ) -> AsyncIterator[PresenceUpdate]: ...


class PresenceSink(Protocol):
    """Anything that accepts presence updates (the conversation store)."""

    def apply_presence(self, update: PresenceUpdate) -> None: ...


async def poll_updates(
    fetch: Callable[[], list[PresenceUpdate]],
    interval_seconds: float,
    stop_event: asyncio.Event | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncIterator[PresenceUpdate]:
    """Call fetch() every interval and yield what it returns.

    Runs until stop_event is set; with no stop_event it runs until the
    consumer stops iterating.
    """
    while stop_event is None or not stop_event.is_set():
        await sleep(interval_seconds)
        if stop_event is not None and stop_event.is_set():
            return
        for update in fetch():
            yield update


class SimulatedPresenceSource:
    """Randomly flips counterparties online/offline on a fixed interval.

    Stand-in for a real feed; no correctness guarantees beyond producing
    well-formed updates.
    """

    def __init__(
        self,
        snapshot: Callable[[], dict[str, bool]],
        *,
        interval_seconds: float = 30.0,
        toggle_probability: float = 0.2,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._snapshot = snapshot
        self._interval = interval_seconds
        self._probability = toggle_probability
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock

    def _flips(self) -> list[PresenceUpdate]:
        updates = []
        for conversation_id, is_online in self._snapshot().items():
            if self._rng.random() < self._probability:
                updates.append(
                    PresenceUpdate(
                        conversation_id=conversation_id,
                        is_online=not is_online,
                        last_seen=self._clock() if is_online else None,
                    )
                )
        return updates

    async def updates(
        self, stop_event: asyncio.Event | None = None
    ) -> AsyncIterator[PresenceUpdate]:
        async for update in poll_updates(
            self._flips, self._interval, stop_event, sleep=self._sleep
        ):
            yield update


class WebSocketPresenceSource:
    """Push feed of presence events over a WebSocket.

    Expects JSON messages like
    ``{"conversationId": "conv-1", "isOnline": false, "lastSeen": "..."}``.
    Malformed messages are logged and skipped.
    """

    def __init__(self, url: str, *, ping_interval_seconds: float = 30.0) -> None:
        self._url = url
        self._ping_interval = ping_interval_seconds

    @staticmethod
    def _parse(raw: str | bytes) -> PresenceUpdate | None:
        try:
            data = json.loads(raw)
            return PresenceUpdate(
                conversation_id=data["conversationId"],
                is_online=data["isOnline"],
                last_seen=data.get("lastSeen"),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError):
            logger.warning("Ignoring malformed presence message: %r", raw)
            return None

    async def updates(
        self, stop_event: asyncio.Event | None = None
    ) -> AsyncIterator[PresenceUpdate]:
        try:
            async with websockets.connect(self._url) as ws:
                while stop_event is None or not stop_event.is_set():
                    try:
                        raw = await asyncio.wait_for(ws.recv(), timeout=self._ping_interval)
                    except asyncio.TimeoutError:
                        # Keep the connection alive between events
                        await ws.ping()
                        continue
                    update = self._parse(raw)
                    if update is not None:
                        yield update
        except websockets.ConnectionClosed:
            logger.info("Presence feed %s closed", self._url)


async def follow_presence(
    store: PresenceSink,
    source: PresenceSource,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Feed every update from source into store until the source ends."""
    async for update in source.updates(stop_event):
        store.apply_presence(update)
