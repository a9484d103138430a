from pathlib import Path

from playgrounds.core.draft import BookingDraft
from playgrounds.core.schemas import BookingSummary, Duration, PaymentType, ReceiptAsset, Slot
from playgrounds.core.state_contract import normalize_step, validate_wizard_state
from playgrounds.core.wizard import WizardState, WizardStep


def _draft(**kwargs) -> BookingDraft:
    data = {
        "venue_id": "v1",
        "duration": Duration(id="d60", minutes=60),
        "date": "2026-03-01",
        "selected_slot": Slot(id="s1", start_time="18:00"),
        "players": 4,
        "payment_type": PaymentType.CASH,
    }
    data.update(kwargs)
    return BookingDraft(**data)


def test_validate_happy_path_review() -> None:
    state = WizardState(step=WizardStep.REVIEW, draft=_draft())
    assert validate_wizard_state(state) == []


def test_validate_happy_path_success() -> None:
    state = WizardState(
        step=WizardStep.SUCCESS,
        draft=_draft(),
        success_result=BookingSummary(booking_id="1", venue_name="Court 1"),
    )
    assert validate_wizard_state(state) == []


def test_validate_rejects_result_before_success() -> None:
    state = WizardState(step=WizardStep.REVIEW, draft=_draft(), success_result=BookingSummary())
    assert "success_result_requires_success_step" in validate_wizard_state(state)


def test_validate_rejects_success_without_result() -> None:
    state = WizardState(step=WizardStep.SUCCESS, draft=_draft())
    assert "success_step_requires_result" in validate_wizard_state(state)


def test_validate_rejects_submitting_outside_review() -> None:
    state = WizardState(step=WizardStep.PAYMENT, draft=_draft(), submitting=True)
    assert "submitting_outside_review" in validate_wizard_state(state)


def test_validate_rejects_cliq_without_receipt_on_review() -> None:
    state = WizardState(step=WizardStep.REVIEW, draft=_draft(payment_type=PaymentType.CLIQ))
    assert "cliq_requires_receipt_past_payment" in validate_wizard_state(state)

    with_receipt = WizardState(
        step=WizardStep.REVIEW,
        draft=_draft(payment_type=PaymentType.CLIQ, cliq_receipt=ReceiptAsset(path=Path("r.jpg"))),
    )
    assert validate_wizard_state(with_receipt) == []


def test_validate_cliq_without_receipt_allowed_on_payment_step() -> None:
    state = WizardState(step=WizardStep.PAYMENT, draft=_draft(payment_type=PaymentType.CLIQ))
    assert validate_wizard_state(state) == []


def test_validate_rejects_slot_without_schedule() -> None:
    state = WizardState(step=WizardStep.SCHEDULE, draft=_draft(date=""))
    assert "slot_requires_schedule" in validate_wizard_state(state)


def test_validate_rejects_invalid_step() -> None:
    state = WizardState(step=7, draft=_draft())  # type: ignore[arg-type]
    assert "invalid_step:7" in validate_wizard_state(state)


def test_normalize_step_clamps_to_resumable_range() -> None:
    assert normalize_step(2) == 2
    assert normalize_step("3") == 3
    assert normalize_step(4) == 3
    assert normalize_step(-1) == 0
    assert normalize_step(None) == 0
    assert normalize_step("review") == 0
