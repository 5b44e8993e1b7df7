"""Item endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rentshare.api.deps import (
    CurrentUser,
    get_booking_engine,
    get_current_user,
    get_item_service,
)
from rentshare.core.exceptions import NotFoundError
from rentshare.models import Item
from rentshare.schemas.booking import DateRange
from rentshare.schemas.item import ItemCreate, ItemResponse, ItemUpdate
from rentshare.services.booking_engine import BookingEngine
from rentshare.services.item_service import ItemService

router = APIRouter()


@router.post("/", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: ItemCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    items: Annotated[ItemService, Depends(get_item_service)],
) -> Item:
    """Submit an item for moderation."""
    return await items.create_item(current_user.id, **item_data.model_dump())


@router.get("/", response_model=list[ItemResponse])
async def list_items(
    items: Annotated[ItemService, Depends(get_item_service)],
    city: str | None = Query(default=None),
    category: str | None = Query(default=None),
) -> list[Item]:
    """Active items."""
    return await items.list_active(city=city, category=category)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: UUID,
    items: Annotated[ItemService, Depends(get_item_service)],
) -> Item:
    """Get an active item by ID."""
    item = await items.get_item(item_id)
    if not item.is_active:
        raise NotFoundError("Item", str(item_id))
    return item


@router.patch("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: UUID,
    item_data: ItemUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    items: Annotated[ItemService, Depends(get_item_service)],
) -> Item:
    """Edit an item (owner only)."""
    return await items.update_item(item_id, current_user.id, **item_data.model_dump(exclude_unset=True))


@router.get("/{item_id}/availability", response_model=list[DateRange])
async def get_availability(
    item_id: UUID,
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> list[DateRange]:
    """Date ranges already held by approved or paid bookings."""
    await engine.get_item(item_id)
    return [
        DateRange(start_date=b.start_date, end_date=b.end_date)
        for b in await engine.confirmed_ranges(item_id)
    ]
