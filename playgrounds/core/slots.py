"""
Slot Availability Fetcher: dependent fetch of bookable slots for (venue, date, duration).

Requests can overlap when the user changes the date or duration quickly.
Each fetch takes a generation token; only the response whose token is still
current when it resolves is applied. Superseded responses are dropped, even
if they arrive last.
"""

from __future__ import annotations

import logging

from playgrounds.core.draft import BookingDraftStore
from playgrounds.core.schemas import Slot
from playgrounds.integrations.base import BookingBackend

logger = logging.getLogger(__name__)

SLOTS_ERROR = "Unable to load slots. Please try another date."


class SlotAvailabilityFetcher:
    def __init__(self, backend: BookingBackend, store: BookingDraftStore):
        self.backend = backend
        self.store = store
        self.loading = False
        self.error: str | None = None
        self._generation = 0
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, token: int) -> bool:
        return not self._closed and token == self._generation

    def invalidate(self) -> None:
        """Supersede any in-flight request without issuing a new one."""
        self._generation += 1
        self.loading = False

    def close(self) -> None:
        """Stop pending responses from touching state (wizard teardown)."""
        self._closed = True
        self._generation += 1
        self.loading = False

    async def fetch(self, venue_id: str, date: str, duration_minutes: int) -> bool:
        """
        Fetch slots and apply them if this request is still current.

        Returns:
            True if the response was applied, False if it was discarded.
        """
        if self._closed:
            return False

        self._generation += 1
        token = self._generation
        self.loading = True
        self.error = None

        try:
            result = await self.backend.fetch_slots(venue_id, date, duration_minutes)
        except Exception as e:
            logger.error("Slot fetch failed for venue %s on %s: %s", venue_id, date, e)
            result = {"success": False, "error": str(e)}

        if not self.is_current(token):
            logger.debug(
                "Discarding stale slot response: venue=%s date=%s minutes=%s token=%s current=%s",
                venue_id, date, duration_minutes, token, self._generation,
            )
            return False

        self.loading = False
        if result and result.get("success"):
            raw = result.get("data") or []
            slots = [Slot.from_api(s) for s in raw if isinstance(s, dict)]
            self.store.replace_slots(slots)
            logger.info("Loaded %d slots for venue %s on %s (%s min)", len(slots), venue_id, date, duration_minutes)
        else:
            self.store.clear_slots()
            self.error = SLOTS_ERROR
            logger.warning(
                "Slot fetch unsuccessful for venue %s on %s: %s",
                venue_id, date, (result or {}).get("error"),
            )
        return True
