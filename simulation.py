#!/usr/bin/env python3
"""Amlaki Marketplace: End-to-End Simulation.

Runs three scenarios against the in-memory repositories:

    Scenario 1: Agent Onboarding
        - User enrolls as an agent with an expired license -> activation refused
        - License renewed -> activation succeeds, agent may list

    Scenario 2: Listing to Sale
        - Agent lists an apartment, moderator approves, listing is published
        - Buyer offers, contract signed, partial payment -> completion refused
        - Balance paid -> deal completed, listing closed as sold

    Scenario 3: Offer Loop and Cancellation
        - First offer rejected, second offer proposed
        - Buyer's financing fails -> deal canceled with a recorded reason

Usage:
    python simulation.py
    python simulation.py --scenario 2
    AMLAKI_JSON_LOGS=true python simulation.py
"""

from __future__ import annotations

import argparse
import uuid
from datetime import timedelta
from decimal import Decimal

# ---------------------------------------------------------------------------
# Configure structured logging BEFORE importing app modules
# ---------------------------------------------------------------------------
from amlaki_marketplace.logging_config import get_logger, setup_logging_from_settings

setup_logging_from_settings()
logger = get_logger("simulation")

from amlaki_marketplace.domain.clock import SYSTEM_CLOCK  # noqa: E402
from amlaki_marketplace.domain.enums import (  # noqa: E402
    CancellationReason,
    DocumentType,
    MediaType,
    PaymentMethod,
    PropertyType,
    TransactionType,
    UserRole,
)
from amlaki_marketplace.domain.exceptions import (  # noqa: E402
    ActivationGateError,
    OutstandingBalanceError,
)
from amlaki_marketplace.domain.value_objects import (  # noqa: E402
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
from amlaki_marketplace.repositories import (  # noqa: E402
    InMemoryAgentRepository,
    InMemoryDealRepository,
    InMemoryEventLog,
    InMemoryPropertyRepository,
)
from amlaki_marketplace.services import AgentService, DealService, ListingService  # noqa: E402


class Marketplace:
    """The three services wired to one set of in-memory repositories."""

    def __init__(self) -> None:
        self.events = InMemoryEventLog()
        agents = InMemoryAgentRepository()
        listings = InMemoryPropertyRepository()
        self.agents = AgentService(agents, self.events)
        self.listings = ListingService(listings, agents, self.events)
        self.deals = DealService(InMemoryDealRepository(), listings, self.events)


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    """Print a prominent banner."""
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    """Print a section header."""
    print(f"\n--- {text} ---\n")


def print_summary(summary: dict) -> None:
    for key, value in summary.items():
        print(f"  {key}: {value}")


def print_audit_trail(market: Marketplace, aggregate_id: uuid.UUID) -> None:
    """Print the recorded lifecycle events for one aggregate."""
    print("\n  Audit Trail:")
    for i, evt in enumerate(market.events.for_aggregate(aggregate_id), 1):
        old = evt.old_status or "-"
        print(f"    {i}. [{evt.event_type}] {old} -> {evt.new_status}")
    print()


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------
def _license(valid: bool = True) -> AgentLicense:
    now = SYSTEM_CLOCK.now()
    expires_at = now + timedelta(days=365) if valid else now - timedelta(days=1)
    return AgentLicense("LIC-2041", "Tehran Realtors Union", now - timedelta(days=400), expires_at)


def _documents() -> AgentDocuments:
    now = SYSTEM_CLOCK.now()
    return AgentDocuments(
        tuple(
            AgentDocument(doc_type, f"https://files.example/{doc_type.value.lower()}", now)
            for doc_type in (DocumentType.LICENSE, DocumentType.ID_PROOF, DocumentType.PROFILE_PHOTO)
        )
    )


def _onboard_agent(market: Marketplace) -> uuid.UUID:
    agent = market.agents.enroll(
        uuid.uuid4(),
        VerificationSnapshot(email_verified=True, phone_verified=True, kyc_approved=True),
        _license(),
        CommissionSplit(Decimal("70"), Decimal("20"), Decimal("10")),
        ServiceAreas.of("Tehran"),
        _documents(),
    )
    market.agents.activate(agent.id)
    return agent.id


def _publish_listing(market: Marketplace, agent_id: uuid.UUID, code: str) -> uuid.UUID:
    listing = market.listings.create_listing(
        code=ListingCode.create(code),
        transaction_type=TransactionType.SALE,
        seller_id=uuid.uuid4(),
        property_type=PropertyType.APARTMENT,
        price=Price.of(1000),
        area=AreaInfo(Decimal("0"), Decimal("110"), 4),
        address=Address(
            "Tehran", "Niavaran", "12 Bahonar St.", "1937933111", GeoLocation(35.81, 51.47)
        ),
        interior=Interior(bedrooms=2, bathrooms=1, parking=1),
        amenities=Amenities(elevator=True, balcony=True),
        media=MediaCollection((MediaItem("https://cdn.example/1.jpg", MediaType.PHOTO),)),
        notes=Notes("Bright apartment near the park"),
        commission=ListingCommission(Money(50)),
        agent_id=agent_id,
    )
    market.listings.approve(listing.id, RoleGrants.of(UserRole.MODERATOR))
    market.listings.publish(listing.id)
    return listing.id


# ===========================================================================
# Scenario 1: Agent Onboarding
# ===========================================================================
def scenario_1_agent_onboarding() -> None:
    banner("SCENARIO 1: Agent Onboarding")
    market = Marketplace()

    section("Enroll with an expired license")
    agent = market.agents.enroll(
        uuid.uuid4(),
        VerificationSnapshot(email_verified=True, phone_verified=True, kyc_approved=True),
        _license(valid=False),
        CommissionSplit(Decimal("70"), Decimal("20"), Decimal("10")),
        ServiceAreas.of("Tehran", "Karaj"),
        _documents(),
    )
    try:
        market.agents.activate(agent.id)
    except ActivationGateError as err:
        print(f"  Activation refused ({err.gate}): {err.message}")

    section("Renew the license and activate")
    market.agents.renew_license(agent.id, SYSTEM_CLOCK.now() + timedelta(days=365))
    market.agents.activate(agent.id)
    print_summary(market.agents.describe(agent.id))
    print_audit_trail(market, agent.id)


# ===========================================================================
# Scenario 2: Listing to Sale
# ===========================================================================
def scenario_2_listing_to_sale() -> None:
    banner("SCENARIO 2: Listing to Sale")
    market = Marketplace()
    agent_id = _onboard_agent(market)
    listing_id = _publish_listing(market, agent_id, "TEH-0042")
    buyer_id = uuid.uuid4()

    section("Offer, contract and partial payment")
    deal = market.deals.start_deal(listing_id, Money(50), Money(50))
    market.deals.propose_offer(deal.id, buyer_id, Price.of(1000))
    market.deals.accept_offer(deal.id)
    market.deals.sign_contract(deal.id, "C-2025-0042")
    market.deals.record_payment(deal.id, Money(600), PaymentMethod.BANK_TRANSFER, "TX-1")
    try:
        market.deals.complete(deal.id)
    except OutstandingBalanceError as err:
        print(f"  Completion refused: shortfall {err.shortfall} {err.currency}")

    section("Pay the balance and complete")
    market.deals.record_payment(deal.id, Money(500), PaymentMethod.BANK_TRANSFER, "TX-2")
    market.deals.complete(deal.id)
    print_summary(market.deals.describe(deal.id))
    print_summary(market.listings.describe(listing_id))
    print_audit_trail(market, deal.id)
    print_audit_trail(market, listing_id)


# ===========================================================================
# Scenario 3: Offer Loop and Cancellation
# ===========================================================================
def scenario_3_offer_loop() -> None:
    banner("SCENARIO 3: Offer Loop and Cancellation")
    market = Marketplace()
    agent_id = _onboard_agent(market)
    listing_id = _publish_listing(market, agent_id, "TEH-0077")
    buyer_id = uuid.uuid4()

    deal = market.deals.start_deal(listing_id, Money(50), Money(50))
    market.deals.propose_offer(deal.id, buyer_id, Price.of(800))
    market.deals.reject_offer(deal.id)
    market.deals.propose_offer(deal.id, buyer_id, Price.of(950))
    market.deals.cancel(deal.id, CancellationReason.FINANCING_FAILED, "Mortgage declined")

    print_summary(market.deals.describe(deal.id))
    print_summary(market.listings.describe(listing_id))
    print_audit_trail(market, deal.id)


# ===========================================================================
# Main
# ===========================================================================
SCENARIOS = {
    1: scenario_1_agent_onboarding,
    2: scenario_2_listing_to_sale,
    3: scenario_3_offer_loop,
}


def run_all() -> None:
    """Run all scenarios sequentially."""
    for num, scenario in SCENARIOS.items():
        logger.info("simulation.scenario_started", scenario=num)
        scenario()
    print("\n" + "=" * 70)
    print("  ALL SCENARIOS COMPLETED SUCCESSFULLY")
    print("=" * 70 + "\n")


def run_scenario(num: int) -> None:
    """Run a specific scenario."""
    if num not in SCENARIOS:
        print(f"Unknown scenario {num}. Available: 1, 2, 3")
        return
    SCENARIOS[num]()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Amlaki Marketplace Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1, 2, or 3). Default: run all.",
    )
    args = parser.parse_args()

    if args.scenario == 0:
        run_all()
    else:
        run_scenario(args.scenario)
