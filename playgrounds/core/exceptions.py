from __future__ import annotations


class BookingError(ValueError):
    """Base class for rejected booking-draft operations."""


class SlotNotSelectable(BookingError):
    pass


class PaymentTypeNotAllowed(BookingError):
    pass


class IncompleteDraft(BookingError):
    pass
