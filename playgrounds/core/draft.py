"""
Booking draft: the reservation in progress and its single owner.

All mutations go through BookingDraftStore._apply(), which re-runs the
downstream invalidation rules in one place:

    date / duration changed   -> slot list superseded, selection cleared
    slot list replaced        -> selection cleared unless still present and available
    payment moved off CliQ    -> receipt cleared
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as date_type
from pathlib import Path
from typing import Any

from playgrounds.core.exceptions import BookingError, PaymentTypeNotAllowed, SlotNotSelectable
from playgrounds.core.pricing import compute_total_price
from playgrounds.core.schemas import Duration, PaymentType, ReceiptAsset, Slot, VenueConfig

logger = logging.getLogger(__name__)

DEFAULT_PLAYERS = 2


@dataclass
class BookingDraft:
    venue_id: str
    duration: Duration | None = None
    date: str = ""
    selected_slot: Slot | None = None
    players: int | str = DEFAULT_PLAYERS
    payment_type: PaymentType | None = None
    cliq_receipt: ReceiptAsset | None = None


class BookingDraftStore:
    """
    Holds the draft plus the slot list it was picked from.

    Usage:
        store = BookingDraftStore(venue)
        store.set_duration("d60")
        store.set_date("2026-03-01")
        store.replace_slots(fetched)
        store.select_slot(fetched[0])
    """

    def __init__(self, venue: VenueConfig, default_players: int = DEFAULT_PLAYERS):
        self.venue = venue
        self.draft = BookingDraft(
            venue_id=venue.id,
            players=min(venue.max_players, max(venue.min_players, default_players)),
        )
        self.slots: list[Slot] = []

    # --- derived values

    @property
    def total_price(self) -> float:
        return compute_total_price(self.draft.duration, self.venue.price_per_hour)

    @property
    def schedule_key(self) -> tuple[str, int] | None:
        """The (date, minutes) pair the slot list depends on, or None if incomplete."""
        if not self.draft.date or self.draft.duration is None or not self.draft.duration.minutes:
            return None
        return self.draft.date, self.draft.duration.minutes

    # --- setters

    def set_duration(self, duration: Duration | str | None) -> bool:
        """Select a duration. Returns True when the slot list must be refetched."""
        if isinstance(duration, str):
            match = self.venue.find_duration(duration)
            if match is None:
                raise BookingError(f"Unknown duration: {duration}")
            duration = match
        return "schedule" in self._apply(duration=duration)

    def set_date(self, value: str | date_type | None) -> bool:
        """Select a calendar date. Returns True when the slot list must be refetched."""
        if isinstance(value, date_type):
            value = value.isoformat()
        return "schedule" in self._apply(date=(value or "").strip())

    def select_slot(self, slot: Slot | str | None) -> None:
        if slot is None:
            self._apply(selected_slot=None)
            return

        key = slot if isinstance(slot, str) else slot.key
        match = next((s for s in self.slots if s.key == key or s.start_time == key), None)
        if match is None:
            raise SlotNotSelectable(f"Slot {key!r} is not in the current slot list")
        if not match.is_available:
            raise SlotNotSelectable(f"Slot {key!r} is not available")
        self._apply(selected_slot=match)

    def set_players(self, value: int | str) -> None:
        if isinstance(value, str):
            value = value.strip()
        self._apply(players=value)

    def increment_players(self) -> None:
        current = parse_players(self.draft.players) or 0
        self._apply(players=min(self.venue.max_players, current + 1))

    def decrement_players(self) -> None:
        current = parse_players(self.draft.players) or self.venue.min_players
        self._apply(players=max(self.venue.min_players, current - 1))

    def set_payment_type(self, value: PaymentType | str | None) -> None:
        if value is None:
            self._apply(payment_type=None)
            return

        try:
            payment_type = PaymentType(value)
        except ValueError as e:
            raise PaymentTypeNotAllowed(f"Unknown payment type: {value}") from e

        if payment_type not in self.venue.allowed_payment_types():
            raise PaymentTypeNotAllowed(f"Payment type {payment_type.value} is not enabled for this venue")
        self._apply(payment_type=payment_type)

    def attach_receipt(self, asset: ReceiptAsset | str | Path) -> None:
        if not isinstance(asset, ReceiptAsset):
            asset = ReceiptAsset(path=Path(asset))
        self._apply(cliq_receipt=asset)

    def clear_receipt(self) -> None:
        self._apply(cliq_receipt=None)

    def replace_slots(self, slots: list[Slot]) -> None:
        """Replace the slot list wholesale (never merged)."""
        self._apply(slots=list(slots))

    def clear_slots(self) -> None:
        self._apply(slots=[])

    # --- snapshot

    def snapshot(self) -> dict[str, Any]:
        """Serializable user choices. Receipts are local files and are not included."""
        d = self.draft
        slot = d.selected_slot
        return {
            "duration_id": d.duration.id if d.duration else None,
            "booking_date": d.date or None,
            "players": d.players,
            "selected_slot": slot.model_dump() if slot else None,
            "payment_type": d.payment_type.value if d.payment_type else None,
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Restore a snapshot, falling back for values the venue no longer accepts."""
        duration_id = data.get("duration_id")
        duration = self.venue.find_duration(duration_id) if duration_id else None

        raw_slot = data.get("selected_slot")
        slot = Slot(**raw_slot) if isinstance(raw_slot, dict) else None

        allowed = self.venue.allowed_payment_types()
        payment_type: PaymentType | None = None
        raw_payment = data.get("payment_type")
        if raw_payment:
            try:
                payment_type = PaymentType(raw_payment)
            except ValueError:
                payment_type = None
            if payment_type is not None and payment_type not in allowed:
                fallback = allowed[0] if allowed else None
                logger.info(
                    "Restored payment type %s not allowed for venue %s, falling back to %s",
                    payment_type.value, self.venue.id, fallback.value if fallback else None,
                )
                payment_type = fallback

        players = data.get("players")
        self._apply(
            duration=duration,
            date=str(data.get("booking_date") or ""),
            players=players if players is not None else self.draft.players,
            payment_type=payment_type,
        )
        # A restored slot comes from a list we no longer hold; it is reconciled
        # against the next fetched list.
        if slot is not None and self.schedule_key is not None:
            self.draft.selected_slot = slot

    # --- reducer

    def _apply(self, **changes: Any) -> set[str]:
        """
        Apply field changes and run the invalidation rules.

        Returns the set of change markers: field names that actually changed,
        plus "schedule" when the (date, duration) pair changed.
        """
        d = self.draft
        before_key = self.schedule_key
        before_payment = d.payment_type
        changed: set[str] = set()

        for name, value in changes.items():
            if name == "slots":
                self.slots = value
                changed.add("slots")
                continue
            if getattr(d, name) != value:
                setattr(d, name, value)
                changed.add(name)

        after_key = self.schedule_key
        if after_key != before_key:
            changed.add("schedule")
            # The list belonged to the previous pair.
            if "slots" not in changes:
                self.slots = []
            if d.selected_slot is not None:
                d.selected_slot = None
                changed.add("selected_slot")

        if "slots" in changed and d.selected_slot is not None:
            current = next((s for s in self.slots if s.key == d.selected_slot.key), None)
            if current is None or not current.is_available:
                logger.debug("Selected slot %s no longer offered, clearing", d.selected_slot.key)
                d.selected_slot = None
                changed.add("selected_slot")
            else:
                d.selected_slot = current

        if before_payment == PaymentType.CLIQ and d.payment_type != PaymentType.CLIQ and d.cliq_receipt:
            d.cliq_receipt = None
            changed.add("cliq_receipt")

        return changed


def parse_players(value: Any) -> int | None:
    """Integer player count, or None when the input is not a whole number."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
