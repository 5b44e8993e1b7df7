"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from rentshare.api.v1 import (
    admin,
    bookings,
    items,
    notifications,
    payments,
    reviews,
    webhooks,
)

api_router = APIRouter()

# Items
api_router.include_router(items.router, prefix="/items", tags=["Items"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Reviews
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
