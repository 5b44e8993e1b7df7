"""Notification side effects of booking and moderation events.

The engine only decides WHEN an event fires and WHO receives it. Sinks decide
what happens next: the database sink stores an in-app notification that the
web client shows (and may relay by email); the recording sink keeps events in
memory.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.domain.cancellation_policy import utc_today
from rentshare.models import Booking, Item, Notification, Review

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    """Notification types."""

    BOOKING_REQUESTED = "booking_requested"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_PAID = "booking_paid"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_REFUNDED = "booking_refunded"
    ITEM_APPROVED = "item_approved"
    ITEM_REJECTED = "item_rejected"
    REVIEW_DUE = "review_due"


@dataclass(frozen=True)
class NotificationEvent:
    """Abstract event handed to a sink."""

    kind: str
    recipient_id: UUID
    payload: dict[str, Any] = field(default_factory=dict)


class NotificationSink(ABC):
    """Receiver of notification events."""

    @abstractmethod
    async def emit(self, event: NotificationEvent) -> None:
        """Deliver one event."""


class DatabaseNotificationSink(NotificationSink):
    """Persist events as in-app notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def to_notification(self, event: NotificationEvent) -> Notification:
        return Notification(user_id=event.recipient_id, type=event.kind, data=event.payload)

    async def emit(self, event: NotificationEvent) -> None:
        # A failed insert only rolls back its own savepoint
        async with self.db.begin_nested():
            self.db.add(self.to_notification(event))
            await self.db.flush()


class RecordingNotificationSink(NotificationSink):
    """Keep emitted events in memory."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    async def emit(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def kinds_for(self, recipient_id: UUID) -> list[str]:
        return [e.kind for e in self.events if e.recipient_id == recipient_id]


class NotificationDispatcher:
    """Builds events for transitions and forwards them to a sink.

    Sink failures are logged and dropped: a notification must never undo or
    block the transition that triggered it.
    """

    def __init__(self, sink: NotificationSink):
        self.sink = sink

    async def dispatch(self, kind: NotificationKind | str, recipient_id: UUID, **payload: Any) -> None:
        kind = NotificationKind(kind).value
        event = NotificationEvent(kind=kind, recipient_id=recipient_id, payload=_jsonable(payload))
        try:
            await self.sink.emit(event)
        except Exception:
            logger.exception(f"Failed to emit {kind} notification for user {recipient_id}")

    async def booking_event(self, kind: NotificationKind | str, booking: Booking, recipient_id: UUID, **extra: Any) -> None:
        await self.dispatch(
            kind,
            recipient_id,
            booking_id=booking.id,
            item_id=booking.item_id,
            start_date=booking.start_date,
            end_date=booking.end_date,
            **extra,
        )

    async def item_moderated(self, item: Item, approved: bool) -> None:
        kind = NotificationKind.ITEM_APPROVED if approved else NotificationKind.ITEM_REJECTED
        await self.dispatch(kind, item.owner_id, item_id=item.id, item_title=item.title)


def _jsonable(payload: dict[str, Any]) -> dict[str, Any]:
    """Render ids and dates as strings so any sink can store the payload."""
    rendered: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, (UUID, date)):
            rendered[key] = str(value) if isinstance(value, UUID) else value.isoformat()
        elif value is None or isinstance(value, (str, int, float, bool)):
            rendered[key] = value
        else:
            rendered[key] = str(value)
    return rendered


async def ensure_review_due(
    db: AsyncSession,
    dispatcher: NotificationDispatcher,
    user_id: UUID,
    today: date | None = None,
) -> int:
    """Emit ``review_due`` for finished paid rentals the user has not reviewed.

    Computed on demand when the user opens their notifications; the same call
    can be run per user from a periodic sweep. Returns the number of events
    emitted.
    """
    today = today or utc_today()

    result = await db.execute(
        select(Booking).where(
            (Booking.renter_id == user_id) | (Booking.owner_id == user_id),
            Booking.status == "paid",
            Booking.end_date < today,
        )
    )
    due = list(result.scalars().all())
    if not due:
        return 0

    due_ids = [b.id for b in due]
    reviewed_result = await db.execute(
        select(Review.booking_id).where(
            Review.booking_id.in_(due_ids),
            Review.reviewer_id == user_id,
        )
    )
    reviewed = set(reviewed_result.scalars().all())

    notified_result = await db.execute(
        select(Notification.data).where(
            Notification.user_id == user_id,
            Notification.type == NotificationKind.REVIEW_DUE.value,
        )
    )
    already_notified = {str((data or {}).get("booking_id")) for data in notified_result.scalars().all()}

    item_ids = {b.item_id for b in due}
    items_result = await db.execute(select(Item.id, Item.title).where(Item.id.in_(item_ids)))
    titles = {item_id: title for item_id, title in items_result.all()}

    emitted = 0
    for booking in due:
        if booking.id in reviewed or str(booking.id) in already_notified:
            continue
        await dispatcher.dispatch(
            NotificationKind.REVIEW_DUE,
            user_id,
            booking_id=booking.id,
            item_title=titles.get(booking.item_id),
            role="owner" if booking.owner_id == user_id else "renter",
        )
        emitted += 1

    if emitted:
        logger.info(f"Emitted {emitted} review_due notifications for user {user_id}")
    return emitted
