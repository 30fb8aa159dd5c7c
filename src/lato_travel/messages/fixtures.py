"""Seed conversations used until a remote conversation source is wired in."""
from collections.abc import Callable
from datetime import datetime, timedelta

from lato_travel.messages.models import (Conversation, ConversationStatus,
                                         LastMessage, Message, Participant,
                                         Sender, TourReference)
from lato_travel.utils import utcnow

_U = Sender.USER
_C = Sender.COUNTERPARTY


def _log(now: datetime, entries: list[tuple[Sender, str, float]]) -> list[Message]:
    return [
        Message(id=i, sender=sender, text=text, timestamp=now - timedelta(hours=hours_ago))
        for i, (sender, text, hours_ago) in enumerate(entries, start=1)
    ]


def _conversation(
    now: datetime,
    conv_id: str,
    company: Participant,
    tour: TourReference,
    messages: list[Message],
    *,
    unread: int,
    status: ConversationStatus,
    age_days: int,
) -> Conversation:
    last = messages[-1]
    return Conversation(
        id=conv_id,
        company=company,
        tour=tour,
        last_message=LastMessage(text=last.text, timestamp=last.timestamp, sender=last.sender),
        unread_count=unread,
        status=status,
        messages=messages,
        created_at=now - timedelta(days=age_days),
        updated_at=last.timestamp,
    )


def default_conversations(clock: Callable[[], datetime] = utcnow) -> list[Conversation]:
    """Three sample conversations with timestamps relative to now."""
    now = clock()
    return [
        _conversation(
            now,
            "conv-1",
            Participant(
                id="bali-explorer",
                name="Bali Explorer Co.",
                verified=True,
                rating=4.8,
                response_time="Usually responds within 1 hour",
                is_online=True,
                last_seen=now,
                timezone="Asia/Makassar",
            ),
            TourReference(
                id="1",
                title="Bali Temple & Rice Terrace Adventure",
                price=89,
                duration="8 hours",
                group_size="2-12 people",
            ),
            _log(now, [
                (_U, "Hi! I'm interested in your Bali temple tour. Is it available next week?", 10),
                (_C, "Hello! Yes, we have availability next week. What dates were you thinking?", 9),
                (_U, "Tuesday or Wednesday. How many people can join?", 8),
                (_C, "Both days work. We can accommodate 2-12 people.", 2),
            ]),
            unread=0,
            status=ConversationStatus.ACTIVE,
            age_days=7,
        ),
        _conversation(
            now,
            "conv-2",
            Participant(
                id="tokyo-taste",
                name="Tokyo Taste Tours",
                verified=True,
                rating=4.9,
                response_time="Usually responds within 30 minutes",
                is_online=False,
                last_seen=now - timedelta(hours=3),
                timezone="Asia/Tokyo",
            ),
            TourReference(
                id="2",
                title="Tokyo Street Food & Culture Walk",
                price=65,
                duration="4 hours",
            ),
            _log(now, [
                (_U, "Do you run the street food walk on Sundays?", 30),
                (_C, "We do! It starts at 6pm near Shinjuku station.", 26),
                (_C, "Hi! Thanks for your interest. What dates are you looking at?", 24),
            ]),
            unread=2,
            status=ConversationStatus.ACTIVE,
            age_days=3,
        ),
        _conversation(
            now,
            "conv-3",
            Participant(
                id="greek-island",
                name="Greek Island Adventures",
                verified=True,
                rating=4.7,
                is_online=False,
                last_seen=now - timedelta(days=1),
                timezone="Europe/Athens",
            ),
            TourReference(id="3", title="Santorini Sunset Photography Tour", price=120),
            _log(now, [
                (_C, "Your photos from the tour are ready to download.", 80),
                (_U, "Thank you for the amazing tour! The photos came out incredible.", 72),
            ]),
            unread=0,
            status=ConversationStatus.COMPLETED,
            age_days=14,
        ),
    ]
