"""Admin endpoints: listing moderation and booking reconciliation."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from rentshare.api.deps import (
    CurrentUser,
    get_booking_engine,
    get_current_admin,
    get_item_service,
)
from rentshare.models import Item
from rentshare.schemas.item import ItemResponse
from rentshare.services.booking_engine import BookingEngine
from rentshare.services.item_service import ItemService

router = APIRouter()


@router.get("/items/pending", response_model=list[ItemResponse])
async def list_pending_items(
    _: Annotated[CurrentUser, Depends(get_current_admin)],
    items: Annotated[ItemService, Depends(get_item_service)],
) -> list[Item]:
    """Items awaiting moderation."""
    return await items.list_for_moderation()


@router.post("/items/{item_id}/approve", response_model=ItemResponse)
async def approve_item(
    item_id: UUID,
    _: Annotated[CurrentUser, Depends(get_current_admin)],
    items: Annotated[ItemService, Depends(get_item_service)],
) -> Item:
    """Publish an item."""
    return await items.moderate(item_id, approve=True)


@router.post("/items/{item_id}/reject", response_model=ItemResponse)
async def reject_item(
    item_id: UUID,
    _: Annotated[CurrentUser, Depends(get_current_admin)],
    items: Annotated[ItemService, Depends(get_item_service)],
) -> Item:
    """Hide an item."""
    return await items.moderate(item_id, approve=False)


@router.post("/items/{item_id}/reconcile")
async def reconcile_item_bookings(
    item_id: UUID,
    _: Annotated[CurrentUser, Depends(get_current_admin)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> dict:
    """Reject pending requests still overlapping a paid booking."""
    await engine.get_item(item_id)
    rejected = await engine.reconcile_item(item_id)
    conflicts = await engine.find_confirmed_conflicts(item_id)
    return {
        "rejected_booking_ids": [str(booking_id) for booking_id in rejected],
        "confirmed_conflicts": [[str(a.id), str(b.id)] for a, b in conflicts],
    }
