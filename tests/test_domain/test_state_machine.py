"""Tests for the lifecycle state machine guards.

These tests verify that:
    1. All valid transitions are allowed.
    2. All invalid transitions are blocked.
    3. next_deal_status is a total function over every (current, target) pair.
    4. Terminal states never transition further.
"""

from __future__ import annotations

import itertools

import pytest
from statemachine.exceptions import TransitionNotAllowed

from geodomain.domain.enums import DealStatus, DomainStatus
from geodomain.domain.exceptions import InvalidTransitionError
from geodomain.domain.state_machine import (
    DealStateMachine,
    DomainStateMachine,
    InquiryStateMachine,
    MessageStateMachine,
    PaymentStateMachine,
    WholesaleDomainStateMachine,
    WholesaleSaleStateMachine,
    fire_transition,
    next_deal_status,
)

# (current, target) pairs a deal may take; everything else must raise.
DEAL_TRANSITIONS = {
    (DealStatus.NEGOTIATING, DealStatus.AGREED),
    (DealStatus.NEGOTIATING, DealStatus.DISPUTED),
    (DealStatus.AGREED, DealStatus.PAYMENT_PENDING),
    (DealStatus.AGREED, DealStatus.DISPUTED),
    (DealStatus.PAYMENT_PENDING, DealStatus.PAYMENT_CONFIRMED),
    (DealStatus.PAYMENT_PENDING, DealStatus.DISPUTED),
    (DealStatus.PAYMENT_CONFIRMED, DealStatus.TRANSFER_INITIATED),
    (DealStatus.PAYMENT_CONFIRMED, DealStatus.DISPUTED),
    (DealStatus.TRANSFER_INITIATED, DealStatus.COMPLETED),
    (DealStatus.TRANSFER_INITIATED, DealStatus.DISPUTED),
}


class TestDomainLifecycle:
    def test_full_lifecycle(self) -> None:
        sm = DomainStateMachine("DRAFT")
        sm.submit()
        assert sm.status == "PENDING_VERIFICATION"

        sm.approve()
        assert sm.status == "VERIFIED"

        sm.publish()
        assert sm.status == "PUBLISHED"

        sm.pause()
        assert sm.status == "PAUSED"

        sm.resume()
        assert sm.status == "PUBLISHED"

        sm.mark_sold()
        assert sm.status == "SOLD"

    def test_rejection_and_resubmission(self) -> None:
        sm = DomainStateMachine("PENDING_VERIFICATION")
        sm.reject()
        assert sm.status == "REJECTED"

        sm.resubmit()
        assert sm.status == "DRAFT"

    def test_verified_can_pause_or_sell_directly(self) -> None:
        assert fire_transition(DomainStateMachine, "VERIFIED", "pause") == "PAUSED"
        assert fire_transition(DomainStateMachine, "VERIFIED", "mark_sold") == "SOLD"

    @pytest.mark.parametrize("status", [s for s in DomainStatus if s != DomainStatus.DRAFT])
    def test_submit_only_from_draft(self, status: DomainStatus) -> None:
        with pytest.raises(InvalidTransitionError):
            fire_transition(DomainStateMachine, status, "submit")

    def test_sold_is_final(self) -> None:
        sm = DomainStateMachine("SOLD")
        assert sm.get_allowed_events() == []


class TestDealTransitionTable:
    @pytest.mark.parametrize(
        ("current", "target"), sorted(itertools.product(DealStatus, DealStatus))
    )
    def test_every_pair(self, current: DealStatus, target: DealStatus) -> None:
        if (current, target) in DEAL_TRANSITIONS:
            assert next_deal_status(current, target) == target
        else:
            with pytest.raises(InvalidTransitionError):
                next_deal_status(current, target)

    @pytest.mark.parametrize("terminal", [DealStatus.COMPLETED, DealStatus.DISPUTED])
    def test_terminal_states_have_no_events(self, terminal: DealStatus) -> None:
        assert DealStateMachine(terminal).get_allowed_events() == []

    def test_skipping_payment_is_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_deal_status(DealStatus.AGREED, DealStatus.TRANSFER_INITIATED)
        assert exc_info.value.code == "INVALID_TRANSITION"

    def test_raw_machine_blocks_illegal_event(self) -> None:
        sm = DealStateMachine("AGREED")
        with pytest.raises(TransitionNotAllowed):
            sm.complete()

    def test_allowed_events_from_negotiating(self) -> None:
        assert set(DealStateMachine("NEGOTIATING").get_allowed_events()) == {"agree", "dispute"}


class TestModerationMachines:
    def test_request_changes_never_approves(self) -> None:
        assert (
            fire_transition(InquiryStateMachine, "PENDING_REVIEW", "request_changes")
            == "CHANGES_REQUESTED"
        )
        with pytest.raises(InvalidTransitionError):
            fire_transition(InquiryStateMachine, "CHANGES_REQUESTED", "approve")

    def test_resubmitted_inquiry_returns_to_review(self) -> None:
        assert (
            fire_transition(InquiryStateMachine, "CHANGES_REQUESTED", "resubmit")
            == "PENDING_REVIEW"
        )

    def test_only_approved_inquiry_converts(self) -> None:
        assert fire_transition(InquiryStateMachine, "APPROVED", "convert") == "CONVERTED_TO_DEAL"
        with pytest.raises(InvalidTransitionError):
            fire_transition(InquiryStateMachine, "PENDING_REVIEW", "convert")

    def test_message_moderated_once(self) -> None:
        assert fire_transition(MessageStateMachine, "PENDING", "approve") == "APPROVED"
        with pytest.raises(InvalidTransitionError):
            fire_transition(MessageStateMachine, "APPROVED", "reject")

    def test_payment_resolved_once(self) -> None:
        assert fire_transition(PaymentStateMachine, "PENDING", "fail") == "FAILED"
        with pytest.raises(InvalidTransitionError):
            fire_transition(PaymentStateMachine, "FAILED", "confirm")


class TestWholesaleMachines:
    def test_pool_lifecycle(self) -> None:
        sm = WholesaleDomainStateMachine("PENDING_APPROVAL")
        sm.approve()
        sm.sell()
        assert sm.status == "SOLD"

    def test_cannot_sell_before_approval(self) -> None:
        with pytest.raises(InvalidTransitionError):
            fire_transition(WholesaleDomainStateMachine, "PENDING_APPROVAL", "sell")

    def test_sold_entry_cannot_be_removed(self) -> None:
        with pytest.raises(InvalidTransitionError):
            fire_transition(WholesaleDomainStateMachine, "SOLD", "remove")

    def test_sale_paid_once(self) -> None:
        assert fire_transition(WholesaleSaleStateMachine, "PENDING", "mark_paid") == "PAID"
        with pytest.raises(InvalidTransitionError):
            fire_transition(WholesaleSaleStateMachine, "PAID", "mark_paid")


class TestEdgeCases:
    def test_invalid_initial_state(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            DealStateMachine("NONEXISTENT")

    def test_unknown_event(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            fire_transition(DomainStateMachine, "DRAFT", "teleport")
