"""
Booking Backend: abstract interface for the playgrounds REST service.

Every method resolves to a result dict instead of raising:
    {"success": True, "data": ...}  or  {"success": False, "error": str}
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playgrounds.core.submission import Submission


class BookingBackend(ABC):
    """Base class for booking service adapters."""

    @abstractmethod
    async def fetch_slots(self, venue_id: str, date: str, duration_minutes: int) -> dict:
        """
        Fetch bookable time slots.

        Returns:
            {"success": True, "data": [slot dicts]} or {"success": False, "error": str}
        """

    @abstractmethod
    async def create_booking(self, submission: Submission, idempotency_key: str | None = None) -> dict:
        """
        Create a booking from an encoded submission (JSON or multipart).

        Returns:
            {"success": True, "data": {"id": ..., ...}} or {"success": False, "error": str}
        """

    @abstractmethod
    async def get_venue(self, venue_id: str) -> dict:
        """Fetch venue configuration (pricing, player bounds, payment flags, durations)."""

    @abstractmethod
    async def list_bookings(self, user_id: str) -> dict:
        """Fetch the user's bookings."""
