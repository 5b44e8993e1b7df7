"""Notification endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.api.deps import CurrentUser, get_current_user, get_notifier
from rentshare.core.exceptions import NotFoundError
from rentshare.database import get_db, utcnow
from rentshare.models import Notification
from rentshare.schemas.notification import NotificationListResponse, NotificationResponse
from rentshare.services.notification_service import NotificationDispatcher, ensure_review_due

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def get_notifications(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
    limit: int = Query(default=100, ge=1, le=100),
) -> NotificationListResponse:
    """Latest notifications, adding review reminders that became due."""
    await ensure_review_due(db, notifier, current_user.id)

    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    notifications = list(result.scalars().all())

    unread_result = await db.execute(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == current_user.id,
            Notification.read_at.is_(None),
        )
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_result.scalar() or 0,
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Notification:
    """Mark one notification as read."""
    notification = await db.get(Notification, notification_id)
    if not notification or notification.user_id != current_user.id:
        raise NotFoundError("Notification", str(notification_id))
    if notification.read_at is None:
        notification.read_at = utcnow()
        await db.flush()
    return notification


@router.post("/read-all")
async def mark_all_read(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Mark every notification as read."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id, Notification.read_at.is_(None))
        .values(read_at=utcnow())
    )
    return {"updated": result.rowcount}
