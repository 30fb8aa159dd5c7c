"""Factories that build the client-side core from Settings."""
from collections.abc import Iterable

import httpx

from lato_travel.client import ApiClient, TokenStore
from lato_travel.config import Settings
from lato_travel.messages import (Conversation, ConversationStore,
                                  SimulatedPresenceSource, default_conversations)
from lato_travel.storage import (HttpxCookieChannel, KeyValueStore,
                                 SqlKeyValueStore, create_store_engine)


def create_key_value_store(settings: Settings) -> SqlKeyValueStore:
    """Durable store on ``DATABASE_URL``; tables are created if missing."""
    return SqlKeyValueStore(create_store_engine(settings.database_url))


def create_api_client(
    settings: Settings,
    store: KeyValueStore,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ApiClient:
    """ApiClient on ``LATO_API_URL`` whose cookie channel is its own cookie jar.

    Args:
        settings: Application settings.
        store: Durable medium for the access token.
        transport: Optional transport (tests pass an httpx.MockTransport).

    Returns:
        An ApiClient that closes its HTTP client on ``close()``.
    """
    http = httpx.AsyncClient(base_url=settings.client_api_url, transport=transport)
    tokens = TokenStore(store, HttpxCookieChannel(http.cookies))
    return ApiClient(settings.client_api_url, tokens, http_client=http, owns_client=True)


def create_conversation_store(
    store: KeyValueStore, seed: Iterable[Conversation] | None = None
) -> ConversationStore:
    return ConversationStore(store, default_conversations() if seed is None else seed)


def create_presence_source(
    settings: Settings, conversations: ConversationStore
) -> SimulatedPresenceSource:
    """Simulated presence polling every ``PRESENCE_POLL_SECONDS``."""
    return SimulatedPresenceSource(
        conversations.presence_snapshot,
        interval_seconds=settings.presence_poll_seconds,
    )
