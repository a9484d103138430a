"""State contract for the booking wizard.

A small, explicit set of invariants that the controller, the draft restore
path and tests share to keep wizard state predictable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from playgrounds.core.schemas import PaymentType

if TYPE_CHECKING:
    from playgrounds.core.wizard import WizardState

STEPS = range(5)
REVIEW_STEP = 3
SUCCESS_STEP = 4
# Steps a restored draft may resume at; Success is only reachable by submitting.
RESUMABLE_STEPS = range(SUCCESS_STEP)


def validate_wizard_state(state: WizardState) -> list[str]:
    """Return contract violations for a wizard state.

    Empty list means the state is valid.
    """
    errs: list[str] = []
    step = int(state.step)

    if step not in STEPS:
        errs.append(f"invalid_step:{step}")

    if state.success_result is not None and step != SUCCESS_STEP:
        errs.append("success_result_requires_success_step")
    if step == SUCCESS_STEP and state.success_result is None:
        errs.append("success_step_requires_result")

    if state.submitting and step != REVIEW_STEP:
        errs.append("submitting_outside_review")

    draft = state.draft
    if step > 2 and step != SUCCESS_STEP:
        if draft.payment_type == PaymentType.CLIQ and draft.cliq_receipt is None:
            errs.append("cliq_requires_receipt_past_payment")

    if draft.selected_slot is not None and (not draft.date or draft.duration is None):
        errs.append("slot_requires_schedule")

    return errs


def normalize_step(value: Any) -> int:
    """Clamp a persisted step into the resumable range."""
    try:
        step = int(value)
    except (TypeError, ValueError):
        return 0
    return min(max(step, RESUMABLE_STEPS.start), RESUMABLE_STEPS.stop - 1)
