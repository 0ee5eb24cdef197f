"""Deal Service: orchestrates offers, contracts, payments and completion.

A deal is opened against a published listing and inherits its seller and
asking price. When a sale deal completes, the listing is closed as sold to
the deal's buyer. Both updates are made here, one aggregate at a time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from amlaki_marketplace.domain.aggregates import Deal
from amlaki_marketplace.domain.clock import SYSTEM_CLOCK
from amlaki_marketplace.domain.enums import DealStatus, TransactionStatus, TransactionType
from amlaki_marketplace.domain.exceptions import (
    AggregateNotFoundError,
    BusinessRuleViolation,
    OutstandingBalanceError,
)
from amlaki_marketplace.logging_config import bind_aggregate, get_logger

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable

    from amlaki_marketplace.domain.aggregates import Property
    from amlaki_marketplace.domain.clock import Clock
    from amlaki_marketplace.domain.enums import CancellationReason, PaymentMethod
    from amlaki_marketplace.domain.value_objects import Money, Price
    from amlaki_marketplace.repositories import DealRepository, EventLog, PropertyRepository

logger = get_logger(__name__)


class DealService:
    """Manages the deal lifecycle."""

    def __init__(
        self,
        deals: DealRepository,
        listings: PropertyRepository,
        events: EventLog,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        self._deals = deals
        self._listings = listings
        self._events = events
        self._clock = clock

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    def start_deal(
        self,
        property_id: uuid.UUID,
        agent_commission: Money,
        amlaki_commission: Money,
        tentative_price: Price | None = None,
    ) -> Deal:
        """Open a deal on a published listing, at its asking price by default."""
        listing = self._get_listing_or_raise(property_id)
        if listing.transaction_status != TransactionStatus.PUBLISHED:
            raise BusinessRuleViolation("Deals can only be opened on published listings.")

        deal = Deal.start(
            listing.id,
            listing.seller_id,
            listing.transaction_type,
            tentative_price or listing.price,
            agent_commission,
            amlaki_commission,
            clock=self._clock,
        )
        self._deals.add(deal)
        self._flush(deal)
        logger.info(
            "deal.started",
            deal_id=str(deal.id),
            property_id=str(property_id),
            price=str(deal.agreed_price),
            total_due=str(deal.total_due),
        )
        return deal

    # ------------------------------------------------------------------
    # Offers & contract
    # ------------------------------------------------------------------

    def propose_offer(self, deal_id: uuid.UUID, buyer_id: uuid.UUID, price: Price) -> Deal:
        return self._apply(
            deal_id,
            "deal.offer_proposed",
            lambda d: d.propose_offer(buyer_id, price),
            buyer_id=str(buyer_id),
            price=str(price),
        )

    def accept_offer(self, deal_id: uuid.UUID) -> Deal:
        return self._apply(deal_id, "deal.offer_accepted", lambda d: d.accept_offer())

    def reject_offer(self, deal_id: uuid.UUID) -> Deal:
        return self._apply(deal_id, "deal.offer_rejected", lambda d: d.reject_offer())

    def sign_contract(
        self,
        deal_id: uuid.UUID,
        contract_number: str,
        document_url: str | None = None,
    ) -> Deal:
        return self._apply(
            deal_id,
            "deal.contract_signed",
            lambda d: d.sign_contract(contract_number, document_url),
            contract_number=contract_number,
        )

    # ------------------------------------------------------------------
    # Payments & settlement
    # ------------------------------------------------------------------

    def record_payment(
        self,
        deal_id: uuid.UUID,
        amount: Money,
        method: PaymentMethod,
        reference: str | None = None,
    ) -> Deal:
        return self._apply(
            deal_id,
            "deal.payment_recorded",
            lambda d: d.record_payment(amount, method, reference),
            amount=str(amount),
            method=str(method),
        )

    def complete(self, deal_id: uuid.UUID) -> Deal:
        """Complete a fully paid deal and close a sold listing.

        A shortfall still moves the deal to PaymentInProgress; that state is
        saved before OutstandingBalanceError propagates.
        """
        deal = self._get_deal_or_raise(deal_id)
        with bind_aggregate(deal_id=deal_id):
            try:
                deal.mark_completed()
            except OutstandingBalanceError as err:
                self._deals.save(deal)
                self._flush(deal)
                logger.warning(
                    "deal.completion_shortfall",
                    status=deal.status,
                    total_due=str(err.total_due),
                    total_paid=str(err.total_paid),
                    shortfall=str(err.shortfall),
                )
                raise

            self._deals.save(deal)
            self._flush(deal)
            logger.info("deal.completed", total_paid=str(deal.payments.total_paid))

            if deal.type == TransactionType.SALE and deal.buyer_id is not None:
                self._close_listing(deal)
        return deal

    def cancel(
        self,
        deal_id: uuid.UUID,
        reason: CancellationReason,
        note: str | None = None,
    ) -> Deal:
        return self._apply(
            deal_id, "deal.canceled", lambda d: d.cancel(reason, note), reason=str(reason)
        )

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_deal(self, deal_id: uuid.UUID) -> Deal:
        return self._get_deal_or_raise(deal_id)

    def describe(self, deal_id: uuid.UUID) -> dict:
        """Get deal status with balances and allowed events."""
        deal = self._get_deal_or_raise(deal_id)
        return {
            "deal_id": str(deal.id),
            "status": str(deal.status),
            "agreed_price": str(deal.agreed_price),
            "total_due": str(deal.total_due),
            "total_paid": str(deal.payments.total_paid),
            "balance_due": str(deal.balance_due),
            "allowed_events": deal.allowed_events(),
        }

    def open_deals_for(self, property_id: uuid.UUID) -> list[Deal]:
        terminal = {DealStatus.COMPLETED, DealStatus.CANCELED}
        return [d for d in self._deals.get_by_property(property_id) if d.status not in terminal]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _close_listing(self, deal: Deal) -> None:
        listing = self._get_listing_or_raise(deal.property_id)
        if listing.transaction_status != TransactionStatus.PUBLISHED:
            logger.warning(
                "listing.not_closed_after_sale",
                listing_id=listing.id,
                transaction_status=listing.transaction_status,
            )
            return
        listing.mark_as_sold(deal.buyer_id)
        self._listings.save(listing)
        self._events.append(listing.pull_events())
        logger.info("listing.sold", listing_id=listing.id, buyer_id=deal.buyer_id)

    def _get_deal_or_raise(self, deal_id: uuid.UUID) -> Deal:
        deal = self._deals.get_by_id(deal_id)
        if deal is None:
            raise AggregateNotFoundError("Deal", str(deal_id))
        return deal

    def _get_listing_or_raise(self, property_id: uuid.UUID) -> Property:
        listing = self._listings.get_by_id(property_id)
        if listing is None:
            raise AggregateNotFoundError("Property", str(property_id))
        return listing

    def _apply(
        self,
        deal_id: uuid.UUID,
        log_event: str,
        action: Callable[[Deal], object],
        **log_fields: object,
    ) -> Deal:
        deal = self._get_deal_or_raise(deal_id)
        with bind_aggregate(deal_id=deal_id):
            try:
                action(deal)
            except BusinessRuleViolation as err:
                logger.warning(
                    "deal.rule_violation", attempted=log_event, code=err.code, error=err.message
                )
                raise
            self._deals.save(deal)
            self._flush(deal)
            logger.info(log_event, status=deal.status, **log_fields)
        return deal

    def _flush(self, deal: Deal) -> None:
        self._events.append(deal.pull_events())
