"""
Step Validator: per-step readiness predicates for the booking wizard.

Usage:
    validator = StepValidator(min_players=1, max_players=14)
    if not validator.is_ready(step, draft):
        print(validator.message(step, draft))
"""

from __future__ import annotations

from dataclasses import dataclass, field

from playgrounds.core.draft import BookingDraft, parse_players
from playgrounds.core.schemas import PaymentType, VenueConfig

SCHEDULE, PLAYERS, PAYMENT, REVIEW, SUCCESS = range(5)

MSG_SCHEDULE = "Select a duration, date, and slot to continue."
MSG_PLAYERS = "Enter the number of players."
MSG_PLAYERS_RANGE = "Players must be between {min} and {max}."
MSG_PAYMENT = "Choose a payment method."
MSG_CLIQ_RECEIPT = "Upload your CliQ receipt to continue."


@dataclass
class ValidationResult:
    ok: bool
    violations: list[str] = field(default_factory=list)


class StepValidator:
    """
    Pure predicates, one per wizard step.

    Nothing is cached: each call reads the draft as it is right now.
    """

    def __init__(self, min_players: int = 1, max_players: int = 99, strict_bounds: bool = True):
        self.min_players = min_players
        self.max_players = max_players
        self.strict_bounds = strict_bounds

    @classmethod
    def for_venue(cls, venue: VenueConfig, strict_bounds: bool = True) -> "StepValidator":
        return cls(venue.min_players, venue.max_players, strict_bounds=strict_bounds)

    def validate(self, step: int, draft: BookingDraft) -> ValidationResult:
        violations: list[str] = []

        if step == SCHEDULE:
            if draft.duration is None:
                violations.append("missing:duration")
            if not draft.date:
                violations.append("missing:date")
            if draft.selected_slot is None:
                violations.append("missing:slot")
        elif step == PLAYERS:
            players = parse_players(draft.players)
            if players is None or players <= 0:
                violations.append("invalid:players")
            elif self.strict_bounds and not (self.min_players <= players <= self.max_players):
                violations.append(f"out_of_range:players:{players}")
        elif step == PAYMENT:
            if draft.payment_type is None:
                violations.append("missing:payment_type")
            elif draft.payment_type == PaymentType.CLIQ and draft.cliq_receipt is None:
                violations.append("missing:cliq_receipt")
        elif step == REVIEW:
            pass
        else:
            # Success is terminal; nothing moves forward from it.
            violations.append(f"terminal_step:{step}")

        return ValidationResult(ok=len(violations) == 0, violations=violations)

    def is_ready(self, step: int, draft: BookingDraft) -> bool:
        return self.validate(step, draft).ok

    def all_ready(self, draft: BookingDraft) -> bool:
        """True when every step before Review passes."""
        return all(self.is_ready(step, draft) for step in (SCHEDULE, PLAYERS, PAYMENT))

    def first_invalid_step(self, draft: BookingDraft) -> int | None:
        for step in (SCHEDULE, PLAYERS, PAYMENT):
            if not self.is_ready(step, draft):
                return step
        return None

    def message(self, step: int, draft: BookingDraft) -> str | None:
        """User-facing hint for an incomplete step, or None when the step is ready."""
        result = self.validate(step, draft)
        if result.ok:
            return None

        if step == SCHEDULE:
            return MSG_SCHEDULE
        if step == PLAYERS:
            if any(v.startswith("out_of_range") for v in result.violations):
                return MSG_PLAYERS_RANGE.format(min=self.min_players, max=self.max_players)
            return MSG_PLAYERS
        if step == PAYMENT:
            if "missing:cliq_receipt" in result.violations:
                return MSG_CLIQ_RECEIPT
            return MSG_PAYMENT
        return None
