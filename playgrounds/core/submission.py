"""
Submission Encoder: builds the booking-creation request body.

The backend dispatches on content type, so one logical submission has two
encodings:
    to_json()       -> dict for an application/json body
    to_multipart()  -> form fields + the CliQ receipt file part

`encoding` says which one applies for the chosen payment method.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from playgrounds.core.draft import BookingDraft, parse_players
from playgrounds.core.exceptions import IncompleteDraft
from playgrounds.core.schemas import PaymentType, ReceiptAsset, VenueConfig

CLIQ_RECEIPT_FIELD = "cliq_image"
CLIQ_RECEIPT_FILENAME = "cliq-receipt.jpg"
CLIQ_RECEIPT_MIME = "image/jpeg"

ENCODING_JSON = "json"
ENCODING_MULTIPART = "multipart"


@dataclass
class MultipartBody:
    fields: dict[str, str]
    files: dict[str, tuple[str, bytes, str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Submission:
    venue_id: str
    booking_date: str
    duration_minutes: int
    duration_id: str
    slot_id: str | None
    start_time: str
    number_of_players: int
    payment_type: str
    cash_payment_on_date: bool = False
    academy_profile_id: str | None = None
    activity_id: str | None = None
    user_id: str | None = None
    receipt: ReceiptAsset | None = None

    @property
    def encoding(self) -> str:
        if self.payment_type == PaymentType.CLIQ.value and self.receipt is not None:
            return ENCODING_MULTIPART
        return ENCODING_JSON

    def fields(self) -> dict[str, Any]:
        """Base fields, optional identifiers included only when known."""
        data: dict[str, Any] = {
            "venue_id": self.venue_id,
            "booking_date": self.booking_date,
            "duration_minutes": self.duration_minutes,
            "duration_id": self.duration_id,
            "slot_id": self.slot_id,
            "start_time": self.start_time,
            "number_of_players": self.number_of_players,
            "payment_type": self.payment_type,
            "cash_payment_on_date": self.cash_payment_on_date,
        }
        for name in ("academy_profile_id", "activity_id", "user_id"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    def to_json(self) -> dict[str, Any]:
        return self.fields()

    def to_multipart(self) -> MultipartBody:
        """Every field stringified as its own form part, plus the receipt file part."""
        form: dict[str, str] = {}
        for name, value in self.fields().items():
            if value is None:
                continue
            if isinstance(value, bool):
                form[name] = "true" if value else "false"
            else:
                form[name] = str(value)

        files: dict[str, tuple[str, bytes, str]] = {}
        if self.receipt is not None:
            files[CLIQ_RECEIPT_FIELD] = (CLIQ_RECEIPT_FILENAME, self.receipt.read_bytes(), CLIQ_RECEIPT_MIME)
        return MultipartBody(fields=form, files=files)


def build_submission(draft: BookingDraft, venue: VenueConfig, user_id: str | None = None) -> Submission:
    """
    Build a Submission from a validated draft.

    Raises:
        IncompleteDraft: if duration, date, slot, players or payment type is missing.
    """
    missing = []
    if draft.duration is None:
        missing.append("duration")
    if not draft.date:
        missing.append("date")
    if draft.selected_slot is None:
        missing.append("slot")
    if draft.payment_type is None:
        missing.append("payment_type")
    players = parse_players(draft.players)
    if players is None or players <= 0:
        missing.append("players")
    if missing:
        raise IncompleteDraft(f"Draft is incomplete: {', '.join(missing)}")

    payment = draft.payment_type
    # Pay-on-date travels as a cash booking with the on-date flag set.
    wire_payment = PaymentType.CASH.value if payment == PaymentType.CASH_ON_DATE else payment.value
    slot = draft.selected_slot

    return Submission(
        venue_id=str(draft.venue_id),
        booking_date=draft.date,
        duration_minutes=draft.duration.minutes,
        duration_id=draft.duration.id,
        slot_id=slot.id,
        start_time=slot.start_time or slot.label,
        number_of_players=players,
        payment_type=wire_payment,
        cash_payment_on_date=payment == PaymentType.CASH_ON_DATE,
        academy_profile_id=venue.academy_profile_id,
        activity_id=venue.activity_id,
        user_id=str(user_id) if user_id is not None else None,
        receipt=draft.cliq_receipt if payment == PaymentType.CLIQ else None,
    )
