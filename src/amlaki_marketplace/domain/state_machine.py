"""Lifecycle state machine guards.

Uses python-statemachine to enforce legal state transitions at the domain
level. Aggregates never assign a lifecycle status directly: they fire the
named event on a machine positioned at the current status and store the
resulting state. An illegal move raises InvalidStateTransitionError before
the aggregate is touched.

Agent transition table:
    Onboarding  -> Active        (activate, reactivate)
    Suspended   -> Active        (activate, reactivate)
    Active      -> Active        (reactivate)
    Onboarding  -> Suspended     (suspend)
    Active      -> Suspended     (suspend)
    Suspended   -> Suspended     (suspend)
    *           -> Deactivated   (deactivate)

Listing (workflow axis) transition table:
    Draft       -> Published     (publish)
    Published   -> Draft         (unpublish)
    Published   -> Closed        (mark_sold)

Deal transition table:
    Initiated          -> OfferProposed      (propose_offer)
    OfferRejected      -> OfferProposed      (propose_offer)
    OfferProposed      -> OfferAccepted      (accept_offer)
    OfferProposed      -> OfferRejected      (reject_offer)
    OfferAccepted      -> ContractSigned     (sign_contract)
    ContractSigned     -> PaymentInProgress  (payment_shortfall)
    PaymentInProgress  -> PaymentInProgress  (payment_shortfall)
    ContractSigned     -> Completed          (complete)
    PaymentInProgress  -> Completed          (complete)
    *                  -> Canceled           (cancel)
"""

from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from amlaki_marketplace.domain.enums import AgentStatus, DealStatus, TransactionStatus
from amlaki_marketplace.domain.exceptions import InvalidStateTransitionError


class _PositionedMachine:
    """Mixin that starts a machine at an arbitrary stored status."""

    def __init__(self, current_status: str) -> None:
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches the status enum)."""
        return str(self.current_state.value)

    def get_allowed_events(self) -> list[str]:
        """Return a list of event names that can fire from the current state."""
        return [getattr(event, "id", event.name) for event in self.allowed_events]


class AgentStateMachine(_PositionedMachine, StateMachine):
    """Guards the agent lifecycle: Onboarding -> Active <-> Suspended -> Deactivated."""

    ONBOARDING = State("Onboarding", value=AgentStatus.ONBOARDING.value, initial=True)
    ACTIVE = State("Active", value=AgentStatus.ACTIVE.value)
    SUSPENDED = State("Suspended", value=AgentStatus.SUSPENDED.value)
    DEACTIVATED = State("Deactivated", value=AgentStatus.DEACTIVATED.value, final=True)

    activate = ONBOARDING.to(ACTIVE) | SUSPENDED.to(ACTIVE)
    reactivate = ONBOARDING.to(ACTIVE) | SUSPENDED.to(ACTIVE) | ACTIVE.to.itself()
    suspend = ONBOARDING.to(SUSPENDED) | ACTIVE.to(SUSPENDED) | SUSPENDED.to.itself()
    deactivate = (
        ONBOARDING.to(DEACTIVATED) | ACTIVE.to(DEACTIVATED) | SUSPENDED.to(DEACTIVATED)
    )


class ListingStateMachine(_PositionedMachine, StateMachine):
    """Guards the listing workflow axis: Draft -> Published -> Closed."""

    DRAFT = State("Draft", value=TransactionStatus.DRAFT.value, initial=True)
    PUBLISHED = State("Published", value=TransactionStatus.PUBLISHED.value)
    CLOSED = State("Closed", value=TransactionStatus.CLOSED.value, final=True)

    publish = DRAFT.to(PUBLISHED)
    unpublish = PUBLISHED.to(DRAFT)
    mark_sold = PUBLISHED.to(CLOSED)


class DealStateMachine(_PositionedMachine, StateMachine):
    """Guards the deal lifecycle, including the offer re-proposal loop."""

    INITIATED = State("Initiated", value=DealStatus.INITIATED.value, initial=True)
    OFFER_PROPOSED = State("OfferProposed", value=DealStatus.OFFER_PROPOSED.value)
    OFFER_ACCEPTED = State("OfferAccepted", value=DealStatus.OFFER_ACCEPTED.value)
    OFFER_REJECTED = State("OfferRejected", value=DealStatus.OFFER_REJECTED.value)
    CONTRACT_SIGNED = State("ContractSigned", value=DealStatus.CONTRACT_SIGNED.value)
    PAYMENT_IN_PROGRESS = State(
        "PaymentInProgress", value=DealStatus.PAYMENT_IN_PROGRESS.value
    )
    COMPLETED = State("Completed", value=DealStatus.COMPLETED.value, final=True)
    CANCELED = State("Canceled", value=DealStatus.CANCELED.value, final=True)

    # Offer loop
    propose_offer = INITIATED.to(OFFER_PROPOSED) | OFFER_REJECTED.to(OFFER_PROPOSED)
    accept_offer = OFFER_PROPOSED.to(OFFER_ACCEPTED)
    reject_offer = OFFER_PROPOSED.to(OFFER_REJECTED)

    # Contract
    sign_contract = OFFER_ACCEPTED.to(CONTRACT_SIGNED)

    # Settlement
    payment_shortfall = (
        CONTRACT_SIGNED.to(PAYMENT_IN_PROGRESS) | PAYMENT_IN_PROGRESS.to.itself()
    )
    complete = CONTRACT_SIGNED.to(COMPLETED) | PAYMENT_IN_PROGRESS.to(COMPLETED)

    # Cancellation
    cancel = (
        INITIATED.to(CANCELED)
        | OFFER_PROPOSED.to(CANCELED)
        | OFFER_ACCEPTED.to(CANCELED)
        | OFFER_REJECTED.to(CANCELED)
        | CONTRACT_SIGNED.to(CANCELED)
        | PAYMENT_IN_PROGRESS.to(CANCELED)
    )


def advance(
    machine_cls: type[_PositionedMachine],
    current_status: str,
    event_name: str,
    reason: str | None = None,
) -> str:
    """Validate a transition and return the new status.

    Creates a temporary machine at ``current_status``, fires ``event_name``
    and returns the resulting status string. Nothing outside the temporary
    machine is changed, so callers can guard before mutating.

    Args:
        machine_cls: One of the lifecycle machine classes.
        current_status: Current status value.
        event_name: The event to fire (e.g., "accept_offer").
        reason: Human-readable message used if the transition is refused.

    Returns:
        The new status string after the transition.

    Raises:
        InvalidStateTransitionError: If the transition is illegal.
        ValueError: If the status or event name is unknown.
    """
    sm = machine_cls(current_status=str(current_status))

    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_status}: {sm.get_allowed_events()}"
        )

    try:
        event_method()
    except TransitionNotAllowed as err:
        raise InvalidStateTransitionError(str(current_status), event_name, reason) from err
    return sm.status


def allowed_events(machine_cls: type[_PositionedMachine], current_status: str) -> list[str]:
    """Return the events that can fire from ``current_status``."""
    return machine_cls(current_status=str(current_status)).get_allowed_events()
