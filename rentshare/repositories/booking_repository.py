"""Booking repository - database operations for items and bookings.

The engine receives a repository instance bound to one session instead of
reaching for a module-level client.
"""

from collections.abc import Iterable
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.models import Booking, Item


def overlapping(start: date, end: date) -> ColumnElement[bool]:
    """SQL form of ``ranges_overlap`` against the stored booking range."""
    return and_(Booking.start_date < end, Booking.end_date > start)


class BookingRepository:
    """Repository for booking database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== ITEMS ====================

    async def get_item(self, item_id: UUID) -> Item | None:
        return await self.db.get(Item, item_id)

    # ==================== BOOKINGS ====================

    async def get(self, booking_id: UUID) -> Booking | None:
        """Get a booking by ID, always reading current stored state."""
        return await self.db.get(Booking, booking_id, populate_existing=True)

    async def insert(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def update(
        self,
        booking_id: UUID,
        patch: dict[str, Any],
        precondition: dict[str, Any] | None = None,
    ) -> int:
        """Apply ``patch`` if every ``precondition`` field matches.

        A precondition value of None means "column IS NULL". Returns the number
        of rows changed, so 0 tells the caller another writer got there first.
        """
        criteria = [Booking.id == booking_id]
        for field, expected in (precondition or {}).items():
            column = getattr(Booking, field)
            criteria.append(column.is_(None) if expected is None else column == expected)

        result = await self.db.execute(
            update(Booking)
            .where(*criteria)
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        await self.db.flush()
        return result.rowcount

    async def flush(self) -> None:
        """Write attribute changes made on loaded rows."""
        await self.db.flush()

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def refresh(self, booking: Booking) -> Booking:
        await self.db.refresh(booking)
        return booking

    async def query(
        self,
        *,
        item_id: UUID | None = None,
        statuses: Iterable[str] | None = None,
        overlaps: tuple[date, date] | None = None,
        exclude_id: UUID | None = None,
        renter_id: UUID | None = None,
        owner_id: UUID | None = None,
        participant_id: UUID | None = None,
        ended_before: date | None = None,
    ) -> list[Booking]:
        """Query bookings by the filters the engine needs."""
        query = select(Booking)
        if item_id is not None:
            query = query.where(Booking.item_id == item_id)
        if statuses is not None:
            query = query.where(Booking.status.in_(list(statuses)))
        if overlaps is not None:
            query = query.where(overlapping(*overlaps))
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)
        if renter_id is not None:
            query = query.where(Booking.renter_id == renter_id)
        if owner_id is not None:
            query = query.where(Booking.owner_id == owner_id)
        if participant_id is not None:
            query = query.where(
                (Booking.renter_id == participant_id) | (Booking.owner_id == participant_id)
            )
        if ended_before is not None:
            query = query.where(Booking.end_date < ended_before)

        query = query.order_by(Booking.start_date.asc(), Booking.created_at.asc())
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def count_overlapping(
        self,
        item_id: UUID,
        status: str,
        start: date,
        end: date,
        exclude_id: UUID | None = None,
    ) -> int:
        query = select(func.count()).select_from(Booking).where(
            Booking.item_id == item_id,
            Booking.status == status,
            overlapping(start, end),
        )
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar() or 0
