"""Database models."""

from rentshare.models.booking import Booking
from rentshare.models.item import Item
from rentshare.models.notification import Notification
from rentshare.models.review import Review

__all__ = [
    "Item",
    "Booking",
    "Review",
    "Notification",
]
