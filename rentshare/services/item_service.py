"""Item listing and moderation."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from rentshare.models import Item
from rentshare.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

# Fields an owner may change after submission
EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "category",
    "city",
    "neighborhood",
    "price_per_day",
    "price_3_days",
    "price_7_days",
    "cancellation_policy",
})


class ItemService:
    """Service layer for items."""

    def __init__(self, db: AsyncSession, notifier: NotificationDispatcher):
        self.db = db
        self.notifier = notifier

    async def get_item(self, item_id: UUID) -> Item:
        item = await self.db.get(Item, item_id)
        if not item:
            raise NotFoundError("Item", str(item_id))
        return item

    async def list_active(self, city: str | None = None, category: str | None = None) -> list[Item]:
        query = select(Item).where(Item.is_active.is_(True))
        if city:
            query = query.where(Item.city == city)
        if category:
            query = query.where(Item.category == category)
        result = await self.db.execute(query.order_by(Item.created_at.desc()))
        return list(result.scalars().all())

    async def list_for_moderation(self) -> list[Item]:
        result = await self.db.execute(
            select(Item).where(Item.status == "pending").order_by(Item.created_at.asc())
        )
        return list(result.scalars().all())

    async def create_item(self, owner_id: UUID, **fields: Any) -> Item:
        """Submit a listing. It stays hidden until an admin approves it."""
        item = Item(owner_id=owner_id, is_active=False, status="pending", **fields)
        self.db.add(item)
        await self.db.flush()
        logger.info(f"Item {item.id} submitted by {owner_id}, awaiting moderation")
        return item

    async def update_item(self, item_id: UUID, owner_id: UUID, **updates: Any) -> Item:
        """Owner edit. Existing bookings keep the price they were created with."""
        item = await self.get_item(item_id)
        if item.owner_id != owner_id:
            raise AuthorizationError("Only the owner can edit this item")

        for key, value in updates.items():
            if key in EDITABLE_FIELDS:
                setattr(item, key, value)
        await self.db.flush()
        return item

    async def moderate(self, item_id: UUID, approve: bool) -> Item:
        """Admin decision on a listing."""
        item = await self.get_item(item_id)
        target = "approved" if approve else "rejected"
        if item.status == target:
            raise ConflictError(f"Item is already {target}")

        item.status = target
        item.is_active = approve
        await self.db.flush()
        logger.info(f"Item {item.id} {target} by moderation")

        await self.notifier.item_moderated(item, approved=approve)
        return item
