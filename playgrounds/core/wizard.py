"""
Booking Wizard Controller: the reservation state machine.

    Schedule(0) -> Players(1) -> Payment(2) -> Review(3) -> Success(4)

Forward moves are gated by StepValidator; a move off Review submits the
booking, and Success is reachable only from a successful submission.
Backward moves go one step at a time and never leave Success.

Async work (slot refetch, submission) never raises to the caller: failures
end up in state (`slots_error`, `error`) and the wizard stays usable.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import date as date_type
from enum import IntEnum
from pathlib import Path
from typing import Any

from playgrounds.core.draft import BookingDraft, BookingDraftStore, parse_players
from playgrounds.core.draft_storage import DraftStorage
from playgrounds.core.exceptions import BookingError
from playgrounds.core.schemas import BookingSummary, Duration, PaymentType, ReceiptAsset, Slot, VenueConfig
from playgrounds.core.slots import SlotAvailabilityFetcher
from playgrounds.core.state_contract import normalize_step
from playgrounds.core.submission import build_submission
from playgrounds.core.validators import StepValidator
from playgrounds.integrations.base import BookingBackend

logger = logging.getLogger(__name__)

SUBMIT_ERROR = "Booking failed. Please try again."
INCOMPLETE_ERROR = "Complete all steps before confirming."


class WizardStep(IntEnum):
    SCHEDULE = 0
    PLAYERS = 1
    PAYMENT = 2
    REVIEW = 3
    SUCCESS = 4


@dataclass
class WizardState:
    step: WizardStep
    draft: BookingDraft
    validation_visible: bool = False
    submitting: bool = False
    error: str | None = None
    success_result: BookingSummary | None = None


class BookingWizardController:
    """
    Owns the draft, the current step and the in-flight flags for one venue.

    Dependencies are passed in explicitly:
        venue     - read-only venue configuration
        backend   - BookingBackend used for slots and booking creation
        user_id   - booking user's identity, if known
        storage   - optional DraftStorage for resume support
    """

    def __init__(
        self,
        venue: VenueConfig,
        backend: BookingBackend,
        *,
        user_id: str | None = None,
        validator: StepValidator | None = None,
        storage: DraftStorage | None = None,
        strict_player_bounds: bool = True,
    ):
        self.venue = venue
        self.backend = backend
        self.user_id = user_id
        self.validator = validator or StepValidator.for_venue(venue, strict_bounds=strict_player_bounds)
        self.storage = storage

        self.store = BookingDraftStore(venue)
        self.slots_fetcher = SlotAvailabilityFetcher(backend, self.store)
        self.state = WizardState(step=WizardStep.SCHEDULE, draft=self.store.draft)

        self._idempotency_key: str | None = None
        self._slot_tasks: set[asyncio.Task] = set()
        self._closed = False

    # --- read-only view

    @property
    def step(self) -> WizardStep:
        return self.state.step

    @property
    def draft(self) -> BookingDraft:
        return self.store.draft

    @property
    def total_price(self) -> float:
        return self.store.total_price

    @property
    def slots(self) -> list[Slot]:
        return self.store.slots

    @property
    def slots_loading(self) -> bool:
        return self.slots_fetcher.loading

    @property
    def slots_error(self) -> str | None:
        return self.slots_fetcher.error

    @property
    def available_payment_types(self) -> list[PaymentType]:
        return self.venue.allowed_payment_types()

    @property
    def can_advance(self) -> bool:
        return self.validator.is_ready(self.state.step, self.store.draft)

    @property
    def validation_message(self) -> str | None:
        """Hint for the current step, only once the user has tried to advance."""
        if not self.state.validation_visible:
            return None
        return self.validator.message(self.state.step, self.store.draft)

    # --- lifecycle

    async def start(self) -> None:
        """Resume a stored draft for this venue, then load slots if the schedule is set."""
        saved = self.storage.load(self.venue.id) if self.storage else None
        if saved:
            self.store.restore(saved)
            logger.info("Restored booking draft for venue %s", self.venue.id)

        if self.store.schedule_key is not None:
            await self.refresh_slots()

        if saved:
            step = normalize_step(saved.get("step"))
            first_invalid = self.validator.first_invalid_step(self.store.draft)
            if first_invalid is not None:
                step = min(step, first_invalid)
            self.state.step = WizardStep(step)

    def restart(self) -> None:
        """Discard the draft and begin a fresh booking for the same venue."""
        self._cancel_slot_tasks()
        self.slots_fetcher.close()
        self.store = BookingDraftStore(self.venue)
        self.slots_fetcher = SlotAvailabilityFetcher(self.backend, self.store)
        self.state = WizardState(step=WizardStep.SCHEDULE, draft=self.store.draft)
        self._idempotency_key = None
        if self.storage:
            self.storage.clear()

    def close(self) -> None:
        """Teardown: pending slot or submit responses no longer mutate state."""
        self._closed = True
        self._cancel_slot_tasks()
        self.slots_fetcher.close()

    # --- draft mutations

    def select_duration(self, duration: Duration | str | None) -> asyncio.Task | None:
        self._ensure_editable()
        changed = self.store.set_duration(duration)
        self._persist()
        return self._on_schedule_changed() if changed else None

    def select_date(self, value: str | date_type | None) -> asyncio.Task | None:
        self._ensure_editable()
        changed = self.store.set_date(value)
        self._persist()
        return self._on_schedule_changed() if changed else None

    def select_slot(self, slot: Slot | str | None) -> None:
        self._ensure_editable()
        self.store.select_slot(slot)
        self._persist()

    def set_players(self, value: int | str) -> None:
        self._ensure_editable()
        self.store.set_players(value)
        self._persist()

    def increment_players(self) -> None:
        self._ensure_editable()
        self.store.increment_players()
        self._persist()

    def decrement_players(self) -> None:
        self._ensure_editable()
        self.store.decrement_players()
        self._persist()

    def set_payment_type(self, value: PaymentType | str | None) -> None:
        self._ensure_editable()
        self.store.set_payment_type(value)
        self._persist()

    def attach_receipt(self, asset: ReceiptAsset | str | Path) -> None:
        self._ensure_editable()
        self.store.attach_receipt(asset)

    def clear_receipt(self) -> None:
        self._ensure_editable()
        self.store.clear_receipt()

    # --- slots

    async def refresh_slots(self) -> bool:
        """Fetch slots for the current (date, duration). Returns True if the result was applied."""
        key = self.store.schedule_key
        if key is None or self._closed:
            return False

        booking_date, minutes = key
        applied = await self.slots_fetcher.fetch(self.venue.id, booking_date, minutes)
        if applied:
            self._persist()
        return applied

    def _on_schedule_changed(self) -> asyncio.Task | None:
        if self._closed:
            return None
        if self.store.schedule_key is None:
            self.slots_fetcher.invalidate()
            return None
        task = asyncio.get_running_loop().create_task(self.refresh_slots())
        self._slot_tasks.add(task)
        task.add_done_callback(self._slot_tasks.discard)
        return task

    def _cancel_slot_tasks(self) -> None:
        for task in list(self._slot_tasks):
            task.cancel()
        self._slot_tasks.clear()

    # --- navigation

    async def advance(self) -> bool:
        """
        Move forward one step.

        Returns:
            True if the step changed (including a successful submission on Review).
        """
        step = self.state.step
        if step == WizardStep.SUCCESS:
            return False

        if not self.validator.is_ready(step, self.store.draft):
            self.state.validation_visible = True
            logger.debug("Advance blocked at step %s: %s", step.name, self.validator.message(step, self.store.draft))
            return False

        if step == WizardStep.REVIEW:
            return await self.submit()

        self.state.step = WizardStep(step + 1)
        self.state.validation_visible = False
        self._persist()
        return True

    def retreat(self) -> None:
        if self.state.step == WizardStep.SUCCESS or self.state.submitting:
            return
        self.state.step = WizardStep(max(0, self.state.step - 1))
        self.state.validation_visible = False
        self._persist()

    # --- submission

    async def submit(self) -> bool:
        """
        Submit the booking from Review.

        A second call while one is in flight is a no-op; meanwhile retreat()
        is ignored and draft edits raise BookingError. Failures set `error`
        and leave the step and the draft untouched.
        """
        if self.state.submitting:
            logger.debug("Submit ignored: a submission is already in flight")
            return False
        if self.state.step == WizardStep.SUCCESS:
            return False

        draft = self.store.draft
        if self.state.step != WizardStep.REVIEW or not self.validator.all_ready(draft):
            self.state.error = INCOMPLETE_ERROR
            return False

        self.state.submitting = True
        self.state.error = None
        if self._idempotency_key is None:
            self._idempotency_key = uuid.uuid4().hex

        try:
            submission = build_submission(draft, self.venue, user_id=self.user_id)
            result = await self.backend.create_booking(submission, idempotency_key=self._idempotency_key)

            if self._closed:
                return False

            if not result or not result.get("success"):
                logger.warning("Booking rejected for venue %s: %s", self.venue.id, (result or {}).get("error"))
                self.state.error = SUBMIT_ERROR
                return False

            summary = self._build_summary(result.get("data"))
            self.state.success_result = summary
            self.state.step = WizardStep.SUCCESS
            self.state.validation_visible = False
            self._idempotency_key = None
            if self.storage:
                self.storage.clear()
            logger.info("Booking created for venue %s: booking_id=%s", self.venue.id, summary.booking_id)
            return True

        except Exception:
            logger.exception("Booking submission failed for venue %s", self.venue.id)
            if not self._closed:
                self.state.error = SUBMIT_ERROR
            return False

        finally:
            self.state.submitting = False

    def _build_summary(self, data: Any) -> BookingSummary:
        """Summary from the response, falling back to what the wizard already knows."""
        data = data if isinstance(data, dict) else {}
        booking = data.get("booking") if isinstance(data.get("booking"), dict) else data
        draft = self.store.draft

        venue_raw = booking.get("venue") if isinstance(booking.get("venue"), dict) else {}
        venue_name = venue_raw.get("name") or booking.get("venue_name") or self.venue.name

        booking_id = booking.get("booking_id") or booking.get("bookingId") or booking.get("id")

        if isinstance(booking.get("slot"), dict):
            slot_label = Slot.from_api(booking["slot"]).display_label
        else:
            slot_label = booking.get("slot_label") or (draft.selected_slot.display_label if draft.selected_slot else "")

        total = booking.get("total_price") if booking.get("total_price") is not None else booking.get("total")
        try:
            total_price = float(total) if total is not None else self.store.total_price
        except (TypeError, ValueError):
            total_price = self.store.total_price

        players = parse_players(booking.get("number_of_players"))
        if players is None:
            players = parse_players(draft.players)

        payment_type = booking.get("payment_type") or (draft.payment_type.value if draft.payment_type else None)
        status = booking.get("status")

        return BookingSummary(
            booking_id=str(booking_id) if booking_id is not None else None,
            venue_name=str(venue_name or ""),
            date=str(booking.get("booking_date") or booking.get("date") or draft.date),
            slot_label=str(slot_label),
            players=players,
            payment_type=str(payment_type) if payment_type is not None else None,
            total_price=total_price,
            currency=str(booking.get("currency") or self.venue.currency),
            status=str(status) if status is not None else None,
        )

    # --- helpers

    def _ensure_editable(self) -> None:
        if self.state.step == WizardStep.SUCCESS:
            raise BookingError("Booking already submitted; restart to book again")
        if self.state.submitting:
            raise BookingError("Booking is being submitted")

    def _persist(self) -> None:
        if not self.storage or self._closed or self.state.step == WizardStep.SUCCESS:
            return
        snapshot = self.store.snapshot()
        snapshot["step"] = int(self.state.step)
        self.storage.save(self.venue.id, snapshot)
