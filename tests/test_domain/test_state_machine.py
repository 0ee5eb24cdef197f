"""Tests for the lifecycle state machine guards.

These tests verify that:
    1. All valid transitions are allowed.
    2. All invalid transitions are blocked.
    3. The advance() helper translates refusals into domain errors.
    4. Terminal states allow no events.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from amlaki_marketplace.domain.exceptions import InvalidStateTransitionError
from amlaki_marketplace.domain.state_machine import (
    AgentStateMachine,
    DealStateMachine,
    ListingStateMachine,
    advance,
    allowed_events,
)


class TestDealHappyPath:
    """Test the full happy-path lifecycle: Initiated -> Completed."""

    def test_full_lifecycle(self) -> None:
        sm = DealStateMachine("Initiated")
        assert sm.status == "Initiated"

        sm.propose_offer()
        assert sm.status == "OfferProposed"

        sm.accept_offer()
        assert sm.status == "OfferAccepted"

        sm.sign_contract()
        assert sm.status == "ContractSigned"

        sm.payment_shortfall()
        assert sm.status == "PaymentInProgress"

        sm.complete()
        assert sm.status == "Completed"

    def test_complete_straight_from_contract(self) -> None:
        sm = DealStateMachine("ContractSigned")
        sm.complete()
        assert sm.status == "Completed"


class TestDealOfferLoop:
    """Test the re-offer flow: OfferProposed -> OfferRejected -> OfferProposed."""

    def test_reject_then_propose_again(self) -> None:
        sm = DealStateMachine("OfferProposed")
        sm.reject_offer()
        assert sm.status == "OfferRejected"

        sm.propose_offer()
        assert sm.status == "OfferProposed"

    def test_repeated_shortfall_stays_in_progress(self) -> None:
        sm = DealStateMachine("PaymentInProgress")
        sm.payment_shortfall()
        assert sm.status == "PaymentInProgress"


class TestDealCancellation:
    @pytest.mark.parametrize(
        "status",
        [
            "Initiated",
            "OfferProposed",
            "OfferAccepted",
            "OfferRejected",
            "ContractSigned",
            "PaymentInProgress",
        ],
    )
    def test_cancel_from_any_open_state(self, status: str) -> None:
        sm = DealStateMachine(status)
        sm.cancel()
        assert sm.status == "Canceled"

    def test_completed_is_final(self) -> None:
        sm = DealStateMachine("Completed")
        assert sm.get_allowed_events() == []

    def test_canceled_is_final(self) -> None:
        sm = DealStateMachine("Canceled")
        assert sm.get_allowed_events() == []


class TestIllegalTransitions:
    """Verify that illegal transitions raise TransitionNotAllowed."""

    def test_initiated_to_completed(self) -> None:
        sm = DealStateMachine("Initiated")
        with pytest.raises(TransitionNotAllowed):
            sm.complete()

    def test_contract_before_acceptance(self) -> None:
        sm = DealStateMachine("OfferProposed")
        with pytest.raises(TransitionNotAllowed):
            sm.sign_contract()

    def test_accept_twice(self) -> None:
        sm = DealStateMachine("OfferAccepted")
        with pytest.raises(TransitionNotAllowed):
            sm.accept_offer()

    def test_closed_listing_cannot_unpublish(self) -> None:
        sm = ListingStateMachine("Closed")
        with pytest.raises(TransitionNotAllowed):
            sm.unpublish()

    def test_deactivated_agent_cannot_reactivate(self) -> None:
        sm = AgentStateMachine("Deactivated")
        with pytest.raises(TransitionNotAllowed):
            sm.reactivate()


class TestAgentMachine:
    def test_onboarding_allowed(self) -> None:
        allowed = AgentStateMachine("Onboarding").get_allowed_events()
        assert set(allowed) == {"activate", "reactivate", "suspend", "deactivate"}

    def test_active_cannot_activate_again(self) -> None:
        allowed = AgentStateMachine("Active").get_allowed_events()
        assert "activate" not in allowed
        assert "suspend" in allowed

    def test_deactivated_is_final(self) -> None:
        assert AgentStateMachine("Deactivated").get_allowed_events() == []


class TestListingMachine:
    def test_publish_cycle(self) -> None:
        sm = ListingStateMachine("Draft")
        sm.publish()
        assert sm.status == "Published"
        sm.unpublish()
        assert sm.status == "Draft"

    def test_sold_from_published(self) -> None:
        sm = ListingStateMachine("Published")
        sm.mark_sold()
        assert sm.status == "Closed"

    def test_closed_is_final(self) -> None:
        assert allowed_events(ListingStateMachine, "Closed") == []


class TestAdvanceFunction:
    """Test the convenience function."""

    def test_valid_transition(self) -> None:
        assert advance(DealStateMachine, "OfferProposed", "accept_offer") == "OfferAccepted"

    def test_refused_transition_raises_domain_error(self) -> None:
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            advance(DealStateMachine, "Completed", "cancel")
        assert exc_info.value.current_state == "Completed"
        assert exc_info.value.attempted_event == "cancel"
        assert exc_info.value.code == "INVALID_STATE_TRANSITION"

    def test_refusal_uses_given_reason(self) -> None:
        with pytest.raises(InvalidStateTransitionError, match="already closed"):
            advance(ListingStateMachine, "Closed", "publish", "Listing already closed.")

    def test_invalid_event_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            advance(DealStateMachine, "Initiated", "nonexistent_event")

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            DealStateMachine("INVALID_STATUS")
