"""Conversations with tour companies: read state, soft delete, message logs
and counterparty presence."""
from lato_travel.messages.fixtures import default_conversations
from lato_travel.messages.models import (Conversation, ConversationFilter,
                                         ConversationStatus, LastMessage,
                                         Message, MessageKind, MessagesState,
                                         Participant, PresenceUpdate, Sender,
                                         TourReference)
from lato_travel.messages.presence import (PresenceSource,
                                           SimulatedPresenceSource,
                                           WebSocketPresenceSource,
                                           follow_presence)
from lato_travel.messages.store import (MESSAGES_STATE_KEY,
                                        ConversationNotFoundError,
                                        ConversationStore)

__all__ = [
    "MESSAGES_STATE_KEY",
    "Conversation",
    "ConversationFilter",
    "ConversationNotFoundError",
    "ConversationStatus",
    "ConversationStore",
    "LastMessage",
    "Message",
    "MessageKind",
    "MessagesState",
    "Participant",
    "PresenceSource",
    "PresenceUpdate",
    "Sender",
    "SimulatedPresenceSource",
    "TourReference",
    "WebSocketPresenceSource",
    "default_conversations",
    "follow_presence",
]
