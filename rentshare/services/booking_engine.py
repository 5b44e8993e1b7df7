"""Booking lifecycle and availability-conflict resolution.

Every write to a booking row goes through ``BookingEngine``. Transitions are
conditional writes on the source status (and on ``paid_at IS NULL`` for
payment confirmation), so two requests racing on one booking cannot both
succeed: the loser gets ``InvalidBookingStatus``.

Cascades on other bookings of the same item are recomputed from stored state
on every call and are safe to re-run:

* payment confirmed: overlapping ``pending`` requests become ``rejected``;
* booking cancelled: overlapping ``rejected`` requests become ``pending``.

Competitors are NOT rejected when a booking is merely approved. Until a
renter actually pays, other requests for the same dates stay pending.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from rentshare.core.exceptions import (
    AuthorizationError,
    DatesNotAvailable,
    ExternalServiceError,
    InvalidBookingStatus,
    ItemNotAvailable,
    NotFoundError,
    PaymentError,
    ValidationError,
)
from rentshare.database import utcnow
from rentshare.domain.booking_state import (
    CANCELLABLE_STATUSES,
    CONFIRMED_STATUSES,
    BookingStatus,
    assert_booking_transition,
)
from rentshare.domain.cancellation_policy import RefundQuote, quote_refund
from rentshare.domain.date_range import day_count, parse_iso_date, ranges_overlap
from rentshare.domain.pricing import calculate_total_price
from rentshare.gateways.base import PaymentGateway
from rentshare.models import Booking, Item
from rentshare.repositories.booking_repository import BookingRepository
from rentshare.services.notification_service import NotificationDispatcher, NotificationKind

logger = logging.getLogger(__name__)


@dataclass
class ApprovalResult:
    booking: Booking
    # Overlapping requests still waiting for the owner
    pending_overlaps: int


@dataclass
class PaymentConfirmation:
    booking: Booking
    # False when the booking was already paid (duplicate delivery)
    applied: bool
    rejected_ids: list[UUID] = field(default_factory=list)


@dataclass
class CancellationResult:
    booking: Booking
    refund: RefundQuote
    reopened_ids: list[UUID] = field(default_factory=list)


class BookingEngine:
    """State machine for rental bookings."""

    def __init__(
        self,
        repository: BookingRepository,
        notifier: NotificationDispatcher,
        gateway: PaymentGateway | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.notifier = notifier
        self.gateway = gateway
        self.clock = clock

    def today(self) -> date:
        return self.clock().date()

    # ==================== QUERIES ====================

    async def get_booking(self, booking_id: UUID, viewer_id: UUID | None = None) -> Booking:
        """Get a booking, optionally checking the viewer takes part in it."""
        booking = await self.repository.get(booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if viewer_id is not None and viewer_id not in (booking.renter_id, booking.owner_id):
            raise AuthorizationError("You don't have permission to access this booking")
        return booking

    async def get_item(self, item_id: UUID) -> Item:
        item = await self.repository.get_item(item_id)
        if not item:
            raise NotFoundError("Item", str(item_id))
        return item

    async def list_for_renter(self, renter_id: UUID, statuses: list[str] | None = None) -> list[Booking]:
        return await self.repository.query(renter_id=renter_id, statuses=statuses)

    async def list_for_owner(self, owner_id: UUID, statuses: list[str] | None = None) -> list[Booking]:
        return await self.repository.query(owner_id=owner_id, statuses=statuses)

    async def confirmed_ranges(self, item_id: UUID) -> list[Booking]:
        """Approved and paid bookings of an item, i.e. the dates already taken."""
        return await self.repository.query(item_id=item_id, statuses=CONFIRMED_STATUSES)

    async def is_available(self, item_id: UUID, start: date, end: date) -> bool:
        """True when no approved or paid booking holds any of the dates."""
        return not await self._confirmed_overlaps(item_id, start, end)

    async def count_pending_overlaps(self, booking: Booking) -> int:
        return await self.repository.count_overlapping(
            booking.item_id,
            BookingStatus.PENDING.value,
            booking.start_date,
            booking.end_date,
            exclude_id=booking.id,
        )

    async def find_confirmed_conflicts(self, item_id: UUID) -> list[tuple[Booking, Booking]]:
        """Pairs of confirmed bookings that overlap. Always empty when healthy."""
        confirmed = await self.confirmed_ranges(item_id)
        conflicts = []
        for i, first in enumerate(confirmed):
            for second in confirmed[i + 1:]:
                if ranges_overlap(first.start_date, first.end_date, second.start_date, second.end_date):
                    conflicts.append((first, second))
        return conflicts

    async def _confirmed_overlaps(self, item_id: UUID, start: date, end: date, exclude_id: UUID | None = None) -> list[Booking]:
        return await self.repository.query(
            item_id=item_id,
            statuses=CONFIRMED_STATUSES,
            overlaps=(start, end),
            exclude_id=exclude_id,
        )

    # ==================== TRANSITIONS ====================

    async def create_booking(
        self,
        item_id: UUID,
        renter_id: UUID,
        start_date: date | str,
        end_date: date | str,
    ) -> Booking:
        """Create a pending rental request priced from the item's rates."""
        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)
        days = day_count(start, end)

        item = await self.get_item(item_id)
        if not item.is_active or item.status != "approved":
            raise ItemNotAvailable()
        if item.owner_id == renter_id:
            raise ValidationError("You cannot rent your own item")

        # Early answer for the renter; approval and payment re-check
        if await self._confirmed_overlaps(item.id, start, end):
            raise DatesNotAvailable()

        booking = Booking(
            item_id=item.id,
            renter_id=renter_id,
            owner_id=item.owner_id,
            start_date=start,
            end_date=end,
            total_price=calculate_total_price(days, item.price_per_day, item.price_3_days, item.price_7_days),
            status=BookingStatus.PENDING.value,
        )
        await self.repository.insert(booking)
        logger.info(
            f"Booking {booking.id} requested for item {item.id} "
            f"({start} → {end}, {days} days, total {booking.total_price})"
        )

        await self.notifier.booking_event(
            NotificationKind.BOOKING_REQUESTED, booking, booking.owner_id, renter_id=renter_id
        )
        return booking

    async def _transition(self, booking: Booking, target: str, **patch) -> Booking:
        """Move ``booking`` to ``target`` only if nobody changed its status meanwhile."""
        source = booking.status
        assert_booking_transition(source, target)

        changed = await self.repository.update(
            booking.id,
            {"status": target, **patch},
            precondition={"status": source},
        )
        if not changed:
            await self.repository.refresh(booking)
            raise InvalidBookingStatus(
                f"Booking {booking.id} changed to {booking.status} while moving {source} → {target}"
            )
        await self.repository.refresh(booking)
        logger.info(f"Booking {booking.id}: {source} → {target}")
        return booking

    async def approve_booking(self, booking_id: UUID, owner_id: UUID) -> ApprovalResult:
        """Owner accepts a pending request."""
        booking = await self.get_booking(booking_id)
        if booking.owner_id != owner_id:
            raise AuthorizationError("Only the item owner can approve this booking")
        assert_booking_transition(booking.status, BookingStatus.APPROVED.value)

        if await self._confirmed_overlaps(booking.item_id, booking.start_date, booking.end_date, exclude_id=booking.id):
            raise DatesNotAvailable("Another confirmed booking already holds these dates")

        await self._transition(booking, BookingStatus.APPROVED.value)
        await self.notifier.booking_event(NotificationKind.BOOKING_APPROVED, booking, booking.renter_id)

        return ApprovalResult(booking=booking, pending_overlaps=await self.count_pending_overlaps(booking))

    async def reject_booking(self, booking_id: UUID, owner_id: UUID) -> Booking:
        """Owner declines a pending request."""
        booking = await self.get_booking(booking_id)
        if booking.owner_id != owner_id:
            raise AuthorizationError("Only the item owner can reject this booking")

        await self._transition(booking, BookingStatus.REJECTED.value)
        await self.notifier.booking_event(NotificationKind.BOOKING_REJECTED, booking, booking.renter_id)
        return booking

    async def confirm_payment(
        self,
        booking_id: UUID,
        payment_reference: str | None = None,
        checkout_session_id: str | None = None,
    ) -> PaymentConfirmation:
        """Mark an approved booking paid, at most once.

        The write is guarded on ``paid_at IS NULL``; a repeated confirmation
        for a booking that is already paid changes nothing.
        """
        booking = await self.get_booking(booking_id)
        if booking.paid_at is not None or booking.status == BookingStatus.PAID.value:
            logger.info(f"Booking {booking.id} already paid, ignoring duplicate confirmation")
            return PaymentConfirmation(booking=booking, applied=False)

        assert_booking_transition(booking.status, BookingStatus.PAID.value)

        if await self._confirmed_overlaps(booking.item_id, booking.start_date, booking.end_date, exclude_id=booking.id):
            raise DatesNotAvailable(
                f"Booking {booking.id} was paid but its dates are held by another confirmed booking"
            )

        patch = {"status": BookingStatus.PAID.value, "paid_at": self.clock()}
        if payment_reference:
            patch["payment_reference"] = payment_reference
        if checkout_session_id:
            patch["checkout_session_id"] = checkout_session_id

        changed = await self.repository.update(
            booking.id,
            patch,
            precondition={"paid_at": None, "status": BookingStatus.APPROVED.value},
        )
        await self.repository.refresh(booking)
        if not changed:
            if booking.was_paid:
                logger.info(f"Booking {booking.id} paid by a concurrent confirmation")
                return PaymentConfirmation(booking=booking, applied=False)
            raise InvalidBookingStatus(
                f"Booking {booking.id} changed to {booking.status} before payment was recorded"
            )

        logger.info(f"Booking {booking.id}: approved → paid (reference {payment_reference})")
        rejected = await self._reject_pending_competitors(booking)

        for recipient in (booking.owner_id, booking.renter_id):
            await self.notifier.booking_event(
                NotificationKind.BOOKING_PAID, booking, recipient, total_price=booking.total_price
            )
        return PaymentConfirmation(booking=booking, applied=True, rejected_ids=[b.id for b in rejected])

    async def _reject_pending_competitors(self, winner: Booking) -> list[Booking]:
        competitors = await self.repository.query(
            item_id=winner.item_id,
            statuses=[BookingStatus.PENDING.value],
            overlaps=(winner.start_date, winner.end_date),
            exclude_id=winner.id,
        )
        for competitor in competitors:
            competitor.status = BookingStatus.REJECTED.value
        await self.repository.flush()

        for competitor in competitors:
            logger.info(f"Booking {competitor.id}: pending → rejected (dates taken by {winner.id})")
            await self.notifier.booking_event(
                NotificationKind.BOOKING_REJECTED, competitor, competitor.renter_id, reason="dates_taken"
            )
        return competitors

    async def _reopen_rejected_competitors(self, released: Booking) -> list[Booking]:
        competitors = await self.repository.query(
            item_id=released.item_id,
            statuses=[BookingStatus.REJECTED.value],
            overlaps=(released.start_date, released.end_date),
            exclude_id=released.id,
        )
        for competitor in competitors:
            competitor.status = BookingStatus.PENDING.value
        await self.repository.flush()

        for competitor in competitors:
            logger.info(f"Booking {competitor.id}: rejected → pending (dates released by {released.id})")
        return competitors

    async def cancel_booking(
        self,
        booking_id: UUID,
        actor_id: UUID,
        paid_override: bool = False,
    ) -> CancellationResult:
        """Cancel a booking and release its dates.

        ``paid_override`` lets the client report a payment the webhook has not
        recorded yet, so the refund figure is still shown.
        """
        booking = await self.get_booking(booking_id)
        if actor_id not in (booking.renter_id, booking.owner_id):
            raise AuthorizationError("Only the renter or the owner can cancel this booking")

        was_paid = booking.was_paid
        if booking.status != BookingStatus.CANCELLED.value:
            if booking.status not in CANCELLABLE_STATUSES:
                raise InvalidBookingStatus(f"A {booking.status} booking cannot be cancelled")
            await self._transition(booking, BookingStatus.CANCELLED.value, cancelled_at=self.clock())

        reopened = await self._reopen_rejected_competitors(booking)

        item = await self.get_item(booking.item_id)
        refund = quote_refund(
            item.cancellation_policy,
            booking.start_date,
            booking.total_price,
            was_paid=was_paid or paid_override,
            today=self.today(),
        )

        counterparty = booking.owner_id if actor_id == booking.renter_id else booking.renter_id
        await self.notifier.booking_event(
            NotificationKind.BOOKING_CANCELLED,
            booking,
            counterparty,
            cancelled_by="renter" if actor_id == booking.renter_id else "owner",
            refund_percent=refund.percent,
        )
        return CancellationResult(booking=booking, refund=refund, reopened_ids=[b.id for b in reopened])

    async def refund_booking(self, booking_id: UUID, amount: Decimal | None = None) -> Booking:
        """Refund a paid booking through the payment provider.

        Nothing changes locally unless the provider accepted the refund. The
        call is not retried; the caller re-invokes after a failure.
        """
        booking = await self.get_booking(booking_id)
        refundable = booking.status == BookingStatus.PAID.value or (
            booking.status == BookingStatus.CANCELLED.value and booking.paid_at is not None
        )
        if not refundable:
            raise InvalidBookingStatus(f"A {booking.status} booking cannot be refunded")
        if not booking.payment_reference:
            raise InvalidBookingStatus("Booking has no payment reference to refund")
        if self.gateway is None:
            raise ExternalServiceError("payment provider", "not configured")

        result = await self.gateway.process_refund(booking.payment_reference, amount)
        if not result.success:
            logger.error(f"Refund for booking {booking.id} failed: {result.error_message}")
            raise PaymentError(result.error_message or "Refund failed")

        await self._transition(booking, BookingStatus.REFUNDED.value, refunded_at=self.clock())
        await self.notifier.booking_event(
            NotificationKind.BOOKING_REFUNDED,
            booking,
            booking.renter_id,
            amount=amount if amount is not None else booking.total_price,
            refund_id=result.refund_id,
        )
        return booking

    async def attach_checkout_session(self, booking: Booking, session_id: str) -> Booking:
        changed = await self.repository.update(
            booking.id,
            {"checkout_session_id": session_id},
            precondition={"status": BookingStatus.APPROVED.value, "paid_at": None},
        )
        await self.repository.refresh(booking)
        if not changed:
            raise InvalidBookingStatus(f"Booking {booking.id} changed to {booking.status} during checkout")
        return booking

    async def reconcile_item(self, item_id: UUID) -> list[UUID]:
        """Re-apply the paid cascade for every paid booking of an item.

        Repairs pending requests left behind by an interrupted confirmation.
        Returns the ids that were rejected.
        """
        rejected: list[UUID] = []
        for booking in await self.repository.query(item_id=item_id, statuses=[BookingStatus.PAID.value]):
            rejected.extend(b.id for b in await self._reject_pending_competitors(booking))
        if rejected:
            logger.warning(f"Reconciled item {item_id}: rejected {len(rejected)} stale pending bookings")
        return rejected
