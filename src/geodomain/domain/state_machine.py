"""Lifecycle State Machine Guards.

Uses python-statemachine to enforce legal status transitions at the domain
level. No matter what the API layer does, an illegal transition (e.g.
AGREED -> TRANSFER_INITIATED) raises before the ORM status field is touched.

A machine is instantiated per record at the record's current status, the
event is fired, and the resulting status is written back by the service.

Deal transition table:
    NEGOTIATING        -> AGREED              (agree)
    AGREED             -> PAYMENT_PENDING     (request_payment)
    PAYMENT_PENDING    -> PAYMENT_CONFIRMED   (confirm_payment)
    PAYMENT_CONFIRMED  -> TRANSFER_INITIATED  (initiate_transfer)
    TRANSFER_INITIATED -> COMPLETED           (complete)
    any non-terminal   -> DISPUTED            (dispute)

Domain transition table:
    DRAFT                -> PENDING_VERIFICATION  (submit)
    PENDING_VERIFICATION -> VERIFIED              (approve)
    PENDING_VERIFICATION -> REJECTED              (reject)
    REJECTED             -> DRAFT                 (resubmit)
    VERIFIED             -> PUBLISHED             (publish)
    VERIFIED, PUBLISHED  -> PAUSED                (pause)
    PAUSED               -> PUBLISHED             (resume)
    VERIFIED, PUBLISHED, PAUSED -> SOLD           (mark_sold)
"""

from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from geodomain.domain.enums import DealStatus
from geodomain.domain.exceptions import InvalidTransitionError


class StatusGuardMixin:
    """Shared constructor and helpers for the lifecycle machines.

    Usage:
        sm = DealStateMachine(current_status="AGREED")
        sm.request_payment()  # transitions to PAYMENT_PENDING
        sm.status             # "PAYMENT_PENDING"
    """

    def __init__(self, current_status: str) -> None:
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=str(current_status))

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches the status enum)."""
        return str(self.current_state.value)

    def get_allowed_events(self) -> list[str]:
        """Return the event names that can fire from the current state."""
        return [str(event.id) for event in self.allowed_events]


class DomainStateMachine(StatusGuardMixin, StateMachine):
    """Guards the listing + ownership-verification lifecycle of a Domain."""

    # --- States ---
    DRAFT = State("DRAFT", initial=True)
    PENDING_VERIFICATION = State("PENDING_VERIFICATION")
    VERIFIED = State("VERIFIED")
    REJECTED = State("REJECTED")
    PUBLISHED = State("PUBLISHED")
    PAUSED = State("PAUSED")
    SOLD = State("SOLD", final=True)

    # --- Verification ---
    submit = DRAFT.to(PENDING_VERIFICATION)
    approve = PENDING_VERIFICATION.to(VERIFIED)
    reject = PENDING_VERIFICATION.to(REJECTED)
    resubmit = REJECTED.to(DRAFT)

    # --- Listing ---
    publish = VERIFIED.to(PUBLISHED)
    pause = VERIFIED.to(PAUSED) | PUBLISHED.to(PAUSED)
    resume = PAUSED.to(PUBLISHED)
    mark_sold = VERIFIED.to(SOLD) | PUBLISHED.to(SOLD) | PAUSED.to(SOLD)


class DealStateMachine(StatusGuardMixin, StateMachine):
    """Guards the negotiated deal lifecycle. COMPLETED and DISPUTED are terminal."""

    NEGOTIATING = State("NEGOTIATING", initial=True)
    AGREED = State("AGREED")
    PAYMENT_PENDING = State("PAYMENT_PENDING")
    PAYMENT_CONFIRMED = State("PAYMENT_CONFIRMED")
    TRANSFER_INITIATED = State("TRANSFER_INITIATED")
    COMPLETED = State("COMPLETED", final=True)
    DISPUTED = State("DISPUTED", final=True)

    # Happy path
    agree = NEGOTIATING.to(AGREED)
    request_payment = AGREED.to(PAYMENT_PENDING)
    confirm_payment = PAYMENT_PENDING.to(PAYMENT_CONFIRMED)
    initiate_transfer = PAYMENT_CONFIRMED.to(TRANSFER_INITIATED)
    complete = TRANSFER_INITIATED.to(COMPLETED)

    # Side state
    dispute = (
        NEGOTIATING.to(DISPUTED)
        | AGREED.to(DISPUTED)
        | PAYMENT_PENDING.to(DISPUTED)
        | PAYMENT_CONFIRMED.to(DISPUTED)
        | TRANSFER_INITIATED.to(DISPUTED)
    )


class PaymentStateMachine(StatusGuardMixin, StateMachine):
    """Admin review of an uploaded payment proof."""

    PENDING = State("PENDING", initial=True)
    CONFIRMED = State("CONFIRMED", final=True)
    FAILED = State("FAILED", final=True)

    confirm = PENDING.to(CONFIRMED)
    fail = PENDING.to(FAILED)


class InquiryStateMachine(StatusGuardMixin, StateMachine):
    """Moderation of a buyer inquiry before the seller sees it."""

    PENDING_REVIEW = State("PENDING_REVIEW", initial=True)
    APPROVED = State("APPROVED")
    REJECTED = State("REJECTED", final=True)
    CHANGES_REQUESTED = State("CHANGES_REQUESTED")
    CONVERTED_TO_DEAL = State("CONVERTED_TO_DEAL", final=True)

    approve = PENDING_REVIEW.to(APPROVED)
    reject = PENDING_REVIEW.to(REJECTED)
    request_changes = PENDING_REVIEW.to(CHANGES_REQUESTED)
    resubmit = CHANGES_REQUESTED.to(PENDING_REVIEW)
    convert = APPROVED.to(CONVERTED_TO_DEAL)


class MessageStateMachine(StatusGuardMixin, StateMachine):
    """Moderation of a message between buyer and seller."""

    PENDING = State("PENDING", initial=True)
    APPROVED = State("APPROVED", final=True)
    REJECTED = State("REJECTED", final=True)

    approve = PENDING.to(APPROVED)
    reject = PENDING.to(REJECTED)


class WholesaleDomainStateMachine(StatusGuardMixin, StateMachine):
    """A domain placed into the fixed-price wholesale pool."""

    PENDING_APPROVAL = State("PENDING_APPROVAL", initial=True)
    ACTIVE = State("ACTIVE")
    SOLD = State("SOLD", final=True)
    REMOVED = State("REMOVED", final=True)

    approve = PENDING_APPROVAL.to(ACTIVE)
    sell = ACTIVE.to(SOLD)
    remove = PENDING_APPROVAL.to(REMOVED) | ACTIVE.to(REMOVED)


class WholesaleSaleStateMachine(StatusGuardMixin, StateMachine):
    PENDING = State("PENDING", initial=True)
    PAID = State("PAID", final=True)

    mark_paid = PENDING.to(PAID)


def fire_transition(
    machine_cls: type[StatusGuardMixin], current_status: str, event_name: str
) -> str:
    """Validate a transition and return the new status.

    Creates a throwaway machine at current_status, fires event_name and
    returns the resulting status string.

    Raises:
        InvalidTransitionError: If the event cannot fire from current_status.
        ValueError: If the status or event name is unknown to the machine.
    """
    sm = machine_cls(current_status=current_status)

    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_status}: {sm.get_allowed_events()}"
        )

    try:
        event_method()
    except TransitionNotAllowed as err:
        raise InvalidTransitionError(str(current_status), event_name) from err
    return sm.status


DEAL_EVENT_BY_TARGET: dict[DealStatus, str] = {
    DealStatus.AGREED: "agree",
    DealStatus.PAYMENT_PENDING: "request_payment",
    DealStatus.PAYMENT_CONFIRMED: "confirm_payment",
    DealStatus.TRANSFER_INITIATED: "initiate_transfer",
    DealStatus.COMPLETED: "complete",
    DealStatus.DISPUTED: "dispute",
}


def next_deal_status(current: str, target: str) -> DealStatus:
    """Total function (current, target) -> target | InvalidTransitionError.

    Every pair of DealStatus values either yields the target status or
    raises; nothing else can happen.
    """
    event_name = DEAL_EVENT_BY_TARGET.get(DealStatus(target))
    if event_name is None:
        raise InvalidTransitionError(str(current), str(target))
    try:
        return DealStatus(fire_transition(DealStateMachine, current, event_name))
    except InvalidTransitionError as err:
        raise InvalidTransitionError(str(current), str(target)) from err
