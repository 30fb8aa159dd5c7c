"""Database models for the durable key-value medium.

Only client-side state is persisted here (tokens, saved items, message
state), each under one key holding a JSON document.
"""
from datetime import datetime

from sqlmodel import Field, SQLModel

from lato_travel.utils import utcnow


class KeyValueEntry(SQLModel, table=True):
    """One persisted key; ``value`` is JSON text replaced whole on every write."""

    __tablename__ = "kv_entry"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=utcnow)
