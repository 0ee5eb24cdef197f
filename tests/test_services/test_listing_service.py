"""Tests for ListingService orchestration."""

from __future__ import annotations

import uuid

import pytest

from amlaki_marketplace.domain.enums import (
    EventType,
    ModerationStatus,
    PropertyStatus,
    TransactionStatus,
    UserRole,
)
from amlaki_marketplace.domain.exceptions import AggregateNotFoundError, BusinessRuleViolation
from amlaki_marketplace.domain.value_objects import ListingCode, Money, Price, RoleGrants


@pytest.fixture
def active_agent(make_agent, agent_repo):
    agent = make_agent()
    agent.activate()
    agent_repo.add(agent)
    return agent


class TestCreateListing:
    def test_create_draft(self, listing_service, listing_kwargs, listing_repo, event_log) -> None:
        listing = listing_service.create_listing(**listing_kwargs)

        assert listing_repo.get_by_code("teh-0042") is listing
        assert listing.transaction_status == TransactionStatus.DRAFT
        assert [e.event_type for e in event_log.for_aggregate(listing.id)] == [
            EventType.LISTING_CREATED
        ]

    def test_duplicate_code_rejected(self, listing_service, listing_kwargs) -> None:
        listing_service.create_listing(**listing_kwargs)
        with pytest.raises(BusinessRuleViolation, match="already in use"):
            listing_service.create_listing(
                **{**listing_kwargs, "code": ListingCode.create("TEH-0042")}
            )

    def test_active_agent_can_list(self, listing_service, listing_kwargs, active_agent) -> None:
        listing = listing_service.create_listing(**listing_kwargs, agent_id=active_agent.id)
        assert listing.listed_by == active_agent.id

    def test_onboarding_agent_cannot_list(
        self, listing_service, listing_kwargs, make_agent, agent_repo, listing_repo
    ) -> None:
        agent = agent_repo.add(make_agent())
        with pytest.raises(BusinessRuleViolation, match="Agent must be active"):
            listing_service.create_listing(**listing_kwargs, agent_id=agent.id)
        assert listing_repo.get_by_code("TEH-0042") is None

    def test_unknown_agent(self, listing_service, listing_kwargs) -> None:
        with pytest.raises(AggregateNotFoundError) as exc_info:
            listing_service.create_listing(**listing_kwargs, agent_id=uuid.uuid4())
        assert exc_info.value.code == "AGENT_NOT_FOUND"


class TestModeration:
    def test_moderator_approves_then_publish(
        self, listing_service, listing_kwargs, moderator
    ) -> None:
        listing = listing_service.create_listing(**listing_kwargs)

        listing_service.approve(listing.id, moderator)
        listing_service.publish(listing.id)

        summary = listing_service.describe(listing.id)
        assert summary["status"] == "Available"
        assert summary["transaction_status"] == "Published"
        assert summary["moderation"] == "Approved"

    def test_admin_may_moderate(self, listing_service, listing_kwargs) -> None:
        listing = listing_service.create_listing(**listing_kwargs)
        listing_service.approve(listing.id, RoleGrants.of(UserRole.ADMIN))
        assert listing.moderation == ModerationStatus.APPROVED

    def test_agent_cannot_moderate(self, listing_service, listing_kwargs) -> None:
        listing = listing_service.create_listing(**listing_kwargs)
        with pytest.raises(BusinessRuleViolation, match="Only moderators"):
            listing_service.approve(listing.id, RoleGrants.of(UserRole.USER, UserRole.AGENT))
        assert listing.moderation == ModerationStatus.PENDING_REVIEW

    def test_reject_unpublishes(self, listing_service, listing_kwargs, moderator) -> None:
        listing = listing_service.create_listing(**listing_kwargs)
        listing_service.approve(listing.id, moderator)
        listing_service.publish(listing.id)

        listing_service.reject(listing.id, moderator)

        assert listing.status == PropertyStatus.OFF_MARKET
        assert listing.transaction_status == TransactionStatus.DRAFT


class TestWorkflow:
    @pytest.fixture
    def published(self, listing_service, listing_kwargs, moderator):
        listing = listing_service.create_listing(**listing_kwargs)
        listing_service.approve(listing.id, moderator)
        listing_service.publish(listing.id)
        return listing

    def test_hold_release_and_sell(self, listing_service, published, buyer_id) -> None:
        listing_service.mark_pending(published.id)
        assert published.status == PropertyStatus.PENDING
        listing_service.release_pending(published.id)
        assert published.status == PropertyStatus.AVAILABLE

        listing_service.mark_as_sold(published.id, buyer_id)

        assert published.status == PropertyStatus.SOLD
        assert listing_service.describe(published.id)["allowed_events"] == []

    def test_negative_price_rejected(self, listing_service, published) -> None:
        with pytest.raises(BusinessRuleViolation, match="Price cannot be negative"):
            listing_service.change_price(published.id, Money(-5))
        assert published.price == Price.of(100)

    def test_price_and_tags(self, listing_service, published, event_log) -> None:
        listing_service.change_price(published.id, Price.of(120))
        listing_service.add_tag(published.id, "Sea-View")
        listing_service.remove_tag(published.id, "sea-view")

        assert published.price.amount == 120
        assert published.tags == frozenset()
        updates = [
            e for e in event_log.for_aggregate(published.id)
            if e.event_type == EventType.LISTING_UPDATED
        ]
        assert len(updates) == 3

    def test_unpublish(self, listing_service, published) -> None:
        listing_service.unpublish(published.id)
        assert published.transaction_status == TransactionStatus.DRAFT

    def test_unknown_listing(self, listing_service) -> None:
        with pytest.raises(AggregateNotFoundError) as exc_info:
            listing_service.publish(uuid.uuid4())
        assert exc_info.value.code == "PROPERTY_NOT_FOUND"
