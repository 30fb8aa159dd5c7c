"""Models for conversations, messages and persisted message state."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from lato_travel.utils import utcnow


class Sender(str, Enum):
    """Who wrote a message; the counterparty is the tour company."""

    USER = "user"
    COUNTERPARTY = "company"

    @classmethod
    def _missing_(cls, value):
        # "counterparty" is accepted as input; "company" is the stored value
        if isinstance(value, str) and value.lower() == "counterparty":
            return cls.COUNTERPARTY
        return None


class MessageKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    TOUR = "tour"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PENDING = "pending"


class ConversationFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    ACTIVE = "active"
    COMPLETED = "completed"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Participant(_CamelModel):
    """Counterparty summary shown in the conversation header."""

    id: str
    name: str
    avatar: str | None = None
    verified: bool = False
    rating: float | None = None
    response_time: str | None = Field(default=None, alias="responseTime")
    is_online: bool = Field(default=False, alias="isOnline")
    last_seen: datetime | None = Field(default=None, alias="lastSeen")
    timezone: str | None = None


class TourReference(_CamelModel):
    """The tour a conversation is about (also the payload of tour messages)."""

    id: str
    title: str
    price: float | None = None
    duration: str | None = None
    group_size: str | None = Field(default=None, alias="groupSize")
    image: str | None = None


class Message(_CamelModel):
    """One entry in a conversation log. Never edited after creation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: int = Field(ge=1)
    sender: Sender
    text: str
    timestamp: datetime = Field(default_factory=utcnow)
    kind: MessageKind = Field(default=MessageKind.TEXT, alias="type")
    tour_data: TourReference | None = Field(default=None, alias="tourData")


class LastMessage(_CamelModel):
    text: str
    timestamp: datetime
    sender: Sender


class Conversation(_CamelModel):
    """A chat with one counterparty about one tour.

    ``unread_count`` is a denormalized counter of unseen counterparty
    messages; ``deleted`` is a soft delete that hides the conversation from
    listings until it is restored or permanently deleted.
    """

    id: str
    company: Participant
    tour: TourReference
    last_message: LastMessage | None = Field(default=None, alias="lastMessage")
    unread_count: int = Field(default=0, ge=0, alias="unreadCount")
    status: ConversationStatus = ConversationStatus.ACTIVE
    messages: list[Message] = Field(default_factory=list)
    deleted: bool = False
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")


class PresenceUpdate(BaseModel):
    """Online/offline change for the counterparty of one conversation."""

    conversation_id: str
    is_online: bool
    last_seen: datetime | None = None


class MessagesState(_CamelModel):
    """What is persisted on top of the seed conversations."""

    unread_counts: dict[str, int] = Field(default_factory=dict, alias="unreadCounts")
    deleted_conversations: list[str] = Field(default_factory=list, alias="deletedConversations")
    removed_conversations: list[str] = Field(default_factory=list, alias="removedConversations")
    appended_messages: dict[str, list[Message]] = Field(
        default_factory=dict, alias="appendedMessages"
    )
    last_sync: datetime | None = Field(default=None, alias="lastSync")
