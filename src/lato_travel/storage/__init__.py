"""Storage package: durable key-value medium and the cookie channel."""
from lato_travel.storage.cookies import CookieChannel, HttpxCookieChannel
from lato_travel.storage.kv_store import (KeyValueStore, MemoryKeyValueStore,
                                          SqlKeyValueStore, StorageError)
from lato_travel.storage.sessions import create_store_engine, get_session, init_db

__all__ = [
    "CookieChannel",
    "HttpxCookieChannel",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqlKeyValueStore",
    "StorageError",
    "create_store_engine",
    "get_session",
    "init_db",
]
