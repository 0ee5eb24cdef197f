"""Shared test fixtures for the marketplace lifecycle test suite.

Provides:
    - A fixed clock so license expiry and stamping are deterministic
    - Valid compliance inputs for enrolling an agent
    - Factory fixtures for agents, listings and deals
    - Services wired to in-memory repositories and one shared event log
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from amlaki_marketplace.config import get_settings
from amlaki_marketplace.domain.aggregates import Agent, Deal, Property
from amlaki_marketplace.domain.clock import FixedClock
from amlaki_marketplace.domain.enums import (
    DocumentType,
    MediaType,
    PropertyType,
    TransactionType,
    UserRole,
)
from amlaki_marketplace.domain.value_objects import (
    Address,
    AgentDocument,
    AgentDocuments,
    AgentLicense,
    Amenities,
    AreaInfo,
    CommissionSplit,
    GeoLocation,
    Interior,
    ListingCode,
    ListingCommission,
    MediaCollection,
    MediaItem,
    Money,
    Notes,
    Price,
    RoleGrants,
    ServiceAreas,
    VerificationSnapshot,
)
from amlaki_marketplace.repositories import (
    InMemoryAgentRepository,
    InMemoryDealRepository,
    InMemoryEventLog,
    InMemoryPropertyRepository,
)
from amlaki_marketplace.services import AgentService, DealService, ListingService

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Make every test read settings from a clean cache."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


# ---------------------------------------------------------------------------
# Agent inputs
# ---------------------------------------------------------------------------


@pytest.fixture
def verified() -> VerificationSnapshot:
    return VerificationSnapshot(email_verified=True, phone_verified=True, kyc_approved=True)


@pytest.fixture
def valid_license() -> AgentLicense:
    return AgentLicense(
        number="LIC-1001",
        issuing_authority="Tehran Realtors Union",
        issued_at=NOW - timedelta(days=365),
        expires_at=NOW + timedelta(days=365),
    )


@pytest.fixture
def expired_license() -> AgentLicense:
    return AgentLicense(
        number="LIC-0999",
        issuing_authority="Tehran Realtors Union",
        issued_at=NOW - timedelta(days=730),
        expires_at=NOW - timedelta(days=1),
    )


@pytest.fixture
def split() -> CommissionSplit:
    return CommissionSplit(Decimal("70"), Decimal("20"), Decimal("10"))


@pytest.fixture
def required_documents() -> AgentDocuments:
    return AgentDocuments(
        (
            AgentDocument(DocumentType.LICENSE, "https://files.example/license.pdf", NOW),
            AgentDocument(DocumentType.ID_PROOF, "https://files.example/id.pdf", NOW),
            AgentDocument(DocumentType.PROFILE_PHOTO, "https://files.example/me.jpg", NOW),
        )
    )


@pytest.fixture
def make_agent(clock, verified, valid_license, split, required_documents):
    """Return a factory that enrolls an agent ready to activate."""

    def _make(**overrides) -> Agent:
        kwargs = {
            "user_id": uuid.uuid4(),
            "verification": verified,
            "license": valid_license,
            "commission": split,
            "service_areas": ServiceAreas.of("Tehran"),
            "documents": required_documents,
        }
        kwargs.update(overrides)
        return Agent.enroll(**kwargs, clock=clock)

    return _make


# ---------------------------------------------------------------------------
# Listing inputs
# ---------------------------------------------------------------------------


@pytest.fixture
def photo() -> MediaItem:
    return MediaItem("https://cdn.example/p/1.jpg", MediaType.PHOTO)


@pytest.fixture
def address() -> Address:
    return Address(
        city="Tehran",
        neighborhood="Niavaran",
        line="12 Bahonar St.",
        postal_code="1937933111",
        location=GeoLocation(35.81, 51.47),
    )


@pytest.fixture
def listing_kwargs(address, photo) -> dict:
    return {
        "code": ListingCode.create("teh-0042"),
        "transaction_type": TransactionType.SALE,
        "seller_id": uuid.uuid4(),
        "property_type": PropertyType.APARTMENT,
        "price": Price.of(100),
        "area": AreaInfo(Decimal("0"), Decimal("120"), 3),
        "address": address,
        "interior": Interior(bedrooms=2, bathrooms=1, parking=1),
        "amenities": Amenities(elevator=True),
        "media": MediaCollection((photo,)),
        "notes": Notes("Sunny apartment", None),
        "commission": ListingCommission(Money(5)),
    }


@pytest.fixture
def make_listing(clock, listing_kwargs):
    """Return a factory that creates a draft listing."""

    def _make(**overrides) -> Property:
        kwargs = {**listing_kwargs, **overrides}
        return Property.create(**kwargs, clock=clock)

    return _make


@pytest.fixture
def make_published_listing(make_listing):
    def _make(**overrides) -> Property:
        listing = make_listing(**overrides)
        listing.approve_moderation()
        listing.publish()
        return listing

    return _make


# ---------------------------------------------------------------------------
# Deal inputs
# ---------------------------------------------------------------------------


@pytest.fixture
def make_deal(clock):
    """Return a factory that starts a deal: 1000 + 50 + 50 = 1100 due."""

    def _make(**overrides) -> Deal:
        kwargs = {
            "property_id": uuid.uuid4(),
            "seller_id": uuid.uuid4(),
            "type": TransactionType.SALE,
            "tentative_price": Price.of(1000),
            "agent_commission": Money(50),
            "amlaki_commission": Money(50),
        }
        kwargs.update(overrides)
        return Deal.start(**kwargs, clock=clock)

    return _make


@pytest.fixture
def buyer_id() -> uuid.UUID:
    return uuid.UUID("12345678-1234-5678-1234-567812345678")


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def event_log() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture
def agent_repo() -> InMemoryAgentRepository:
    return InMemoryAgentRepository()


@pytest.fixture
def listing_repo() -> InMemoryPropertyRepository:
    return InMemoryPropertyRepository()


@pytest.fixture
def deal_repo() -> InMemoryDealRepository:
    return InMemoryDealRepository()


@pytest.fixture
def agent_service(agent_repo, event_log, clock) -> AgentService:
    return AgentService(agent_repo, event_log, clock)


@pytest.fixture
def listing_service(listing_repo, agent_repo, event_log, clock) -> ListingService:
    return ListingService(listing_repo, agent_repo, event_log, clock)


@pytest.fixture
def deal_service(deal_repo, listing_repo, event_log, clock) -> DealService:
    return DealService(deal_repo, listing_repo, event_log, clock)


@pytest.fixture
def moderator() -> RoleGrants:
    return RoleGrants.of(UserRole.USER, UserRole.MODERATOR)
