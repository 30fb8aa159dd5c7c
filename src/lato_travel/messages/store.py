"""Conversation store: read state, soft delete and append-only message logs.

Conversations are seeded from a fixture or remote source; what the user does
to them (reads, deletes, new messages) is persisted as a ``MessagesState``
overlay under one key and re-applied to the seed on load.
"""
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from pydantic import ValidationError

from lato_travel.messages.models import (Conversation, ConversationFilter,
                                         ConversationStatus, LastMessage,
                                         Message, MessageKind, MessagesState,
                                         PresenceUpdate, Sender, TourReference)
from lato_travel.storage import KeyValueStore
from lato_travel.utils import utcnow

logger = logging.getLogger(__name__)

MESSAGES_STATE_KEY = "lato_messages_state"


class ConversationNotFoundError(KeyError):
    """No live conversation with the given id."""


class ConversationStore:
    """In-memory conversations backed by the durable key-value medium.

    Message ids come from a per-conversation counter owned by the store,
    starting after the highest id already in the log. Writers are assumed to
    be a single actor per conversation; concurrent writers from separate
    processes are last-write-wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        seed: Iterable[Conversation],
        *,
        state_key: str = MESSAGES_STATE_KEY,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._state_key = state_key
        self._clock = clock
        self._conversations: dict[str, Conversation] = {}
        self._appended: dict[str, list[Message]] = {}
        self._removed: set[str] = set()
        self._next_ids: dict[str, int] = {}
        self._load(seed)

    # --- Loading and persistence ---

    def _read_state(self) -> MessagesState:
        raw = self._store.get_json(self._state_key)
        if raw is None:
            return MessagesState()
        try:
            return MessagesState.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding unreadable messages state under %r", self._state_key)
            return MessagesState()

    def _load(self, seed: Iterable[Conversation]) -> None:
        state = self._read_state()
        self._removed = set(state.removed_conversations)
        deleted = set(state.deleted_conversations)

        for conv in seed:
            if conv.id in self._removed:
                continue
            seed_max = max((m.id for m in conv.messages), default=0)
            appended = sorted(
                (m for m in state.appended_messages.get(conv.id, []) if m.id > seed_max),
                key=lambda m: m.id,
            )
            # Saved flag wins over the seed for conversations known at the last save
            if conv.id in state.unread_counts:
                deleted_flag = conv.id in deleted
            else:
                deleted_flag = conv.deleted
            messages = [*conv.messages, *appended]
            update: dict = {
                "messages": messages,
                "deleted": deleted_flag,
                "unread_count": max(state.unread_counts.get(conv.id, conv.unread_count), 0),
            }
            if appended:
                last = appended[-1]
                update["last_message"] = LastMessage(
                    text=last.text, timestamp=last.timestamp, sender=last.sender
                )
                update["updated_at"] = last.timestamp
                self._appended[conv.id] = appended
            self._conversations[conv.id] = conv.model_copy(update=update)
            self._next_ids[conv.id] = max((m.id for m in messages), default=0) + 1

    def _save(
        self,
        conversations: dict[str, Conversation],
        appended: dict[str, list[Message]],
        removed: set[str],
    ) -> None:
        state = MessagesState(
            unread_counts={cid: c.unread_count for cid, c in conversations.items()},
            deleted_conversations=[cid for cid, c in conversations.items() if c.deleted],
            removed_conversations=sorted(removed),
            appended_messages=appended,
            last_sync=self._clock(),
        )
        self._store.set_json(self._state_key, state.model_dump(mode="json", by_alias=True))

    def _replace(self, conversation: Conversation, appended: list[Message] | None = None) -> None:
        """Persist the state with one conversation swapped in, then commit it."""
        conversations = {**self._conversations, conversation.id: conversation}
        appended_map = self._appended
        if appended is not None:
            appended_map = {**self._appended, conversation.id: appended}
        self._save(conversations, appended_map, self._removed)
        self._conversations = conversations
        self._appended = appended_map

    def _require(self, conversation_id: str) -> Conversation:
        try:
            return self._conversations[conversation_id]
        except KeyError:
            raise ConversationNotFoundError(conversation_id) from None

    # --- Read state ---

    def mark_as_read(self, conversation_id: str) -> None:
        conv = self._require(conversation_id)
        self._replace(conv.model_copy(update={"unread_count": 0}))

    def mark_as_unread(self, conversation_id: str) -> None:
        conv = self._require(conversation_id)
        self._replace(conv.model_copy(update={"unread_count": max(conv.unread_count, 1)}))

    def total_unread(self) -> int:
        """Unread messages across conversations that are not soft-deleted."""
        return sum(c.unread_count for c in self._conversations.values() if not c.deleted)

    # --- Deletion ---

    def delete_conversation(self, conversation_id: str) -> None:
        """Soft delete: hidden from listings, messages untouched."""
        conv = self._require(conversation_id)
        self._replace(conv.model_copy(update={"deleted": True}))

    def restore(self, conversation_id: str) -> None:
        conv = self._require(conversation_id)
        self._replace(conv.model_copy(update={"deleted": False}))

    def permanently_delete(self, conversation_id: str) -> None:
        """Remove the conversation for good; it will not come back from the seed."""
        self._require(conversation_id)
        conversations = {cid: c for cid, c in self._conversations.items() if cid != conversation_id}
        appended = {cid: m for cid, m in self._appended.items() if cid != conversation_id}
        removed = self._removed | {conversation_id}
        self._save(conversations, appended, removed)
        self._conversations = conversations
        self._appended = appended
        self._removed = removed
        self._next_ids.pop(conversation_id, None)

    # --- Messages ---

    def add_message(
        self,
        conversation_id: str,
        text: str,
        sender: Sender | str,
        *,
        kind: MessageKind | str = MessageKind.TEXT,
        tour_data: TourReference | None = None,
    ) -> Message:
        """Append a message and update the summary fields.

        Only counterparty messages increase ``unread_count``, by exactly one.

        Raises:
            ConversationNotFoundError: Unknown conversation.
            ValueError: Empty text message, unknown sender or kind, or a tour
                message without tour_data.
        """
        conv = self._require(conversation_id)
        sender = Sender(sender)
        kind = MessageKind(kind)
        if kind is MessageKind.TEXT and not text.strip():
            raise ValueError("Message text is required")
        if kind is MessageKind.TOUR and tour_data is None:
            raise ValueError("Tour messages require tour_data")

        now = self._clock()
        message = Message(
            id=self._next_ids[conversation_id],
            sender=sender,
            text=text,
            timestamp=now,
            kind=kind,
            tour_data=tour_data,
        )
        unread = conv.unread_count + 1 if sender is Sender.COUNTERPARTY else conv.unread_count
        updated = conv.model_copy(
            update={
                "messages": [*conv.messages, message],
                "last_message": LastMessage(text=text, timestamp=now, sender=sender),
                "updated_at": now,
                "unread_count": unread,
            }
        )
        self._replace(updated, appended=[*self._appended.get(conversation_id, []), message])
        self._next_ids[conversation_id] = message.id + 1
        return message

    # --- Presence ---

    def apply_presence(self, update: PresenceUpdate) -> None:
        """Update the online indicator; presence is not persisted."""
        conv = self._conversations.get(update.conversation_id)
        if conv is None:
            logger.debug("Presence update for unknown conversation %s", update.conversation_id)
            return
        company = conv.company
        last_seen = company.last_seen
        if update.last_seen is not None:
            last_seen = update.last_seen
        elif company.is_online and not update.is_online:
            last_seen = self._clock()
        self._conversations[conv.id] = conv.model_copy(
            update={
                "company": company.model_copy(
                    update={"is_online": update.is_online, "last_seen": last_seen}
                )
            }
        )

    def presence_snapshot(self) -> dict[str, bool]:
        """Current online flag per conversation id."""
        return {cid: c.company.is_online for cid, c in self._conversations.items()}

    # --- Views ---

    def get_filtered(
        self,
        filter: ConversationFilter | str = ConversationFilter.ALL,  # pylint: disable=redefined-builtin
        search_query: str = "",
    ) -> list[Conversation]:
        """Visible conversations matching the filter and search query.

        Soft-deleted conversations are never returned. The query is a
        case-insensitive substring match on the counterparty name and the tour
        title. Pure function of the current state.
        """
        filter = ConversationFilter(filter)
        query = search_query.strip().lower()
        return [
            conv
            for conv in self._conversations.values()
            if not conv.deleted
            and _matches_search(conv, query)
            and _matches_filter(conv, filter)
        ]

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        conv = self._conversations.get(conversation_id)
        return conv if conv is not None and not conv.deleted else None

    def deleted_conversations(self) -> list[Conversation]:
        """Soft-deleted conversations, for a trash view with restore."""
        return [c for c in self._conversations.values() if c.deleted]

    @property
    def conversations(self) -> list[Conversation]:
        return list(self._conversations.values())


def _matches_search(conv: Conversation, query: str) -> bool:
    if not query:
        return True
    return query in conv.company.name.lower() or query in conv.tour.title.lower()


def _matches_filter(conv: Conversation, filter: ConversationFilter) -> bool:  # pylint: disable=redefined-builtin
    if filter is ConversationFilter.UNREAD:
        return conv.unread_count > 0
    if filter is ConversationFilter.ACTIVE:
        return conv.status is ConversationStatus.ACTIVE
    if filter is ConversationFilter.COMPLETED:
        return conv.status is ConversationStatus.COMPLETED
    return True
