"""Record store access for the booking engine."""

from rentshare.repositories.booking_repository import BookingRepository

__all__ = ["BookingRepository"]
