"""Deal (transaction) aggregate: offers, contract, payments, completion.

    Initiated -> OfferProposed -> OfferAccepted -> ContractSigned
              -> PaymentInProgress -> Completed
    OfferProposed -> OfferRejected -> OfferProposed   (re-offer loop)
    any non-terminal state -> Canceled

A deal completes only when the ledger covers
``agreed_price + agent_commission + amlaki_commission``. A completion
attempt that falls short moves the deal to PaymentInProgress *and* raises
OutstandingBalanceError: callers must not assume a failed
``mark_completed`` left the deal untouched.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from amlaki_marketplace.domain.clock import SYSTEM_CLOCK
from amlaki_marketplace.domain.enums import DealStatus, EventType, TransactionType
from amlaki_marketplace.domain.events import AggregateRoot, DomainEvent
from amlaki_marketplace.domain.exceptions import (
    BusinessRuleViolation,
    CurrencyMismatchError,
    OutstandingBalanceError,
)
from amlaki_marketplace.domain.guards import optional_text, require_id
from amlaki_marketplace.domain.state_machine import DealStateMachine, advance, allowed_events
from amlaki_marketplace.domain.value_objects.money import Money, Price
from amlaki_marketplace.domain.value_objects.payments import (
    ContractInfo,
    PaymentEntry,
    PaymentLedger,
)

if TYPE_CHECKING:
    from datetime import datetime

    from amlaki_marketplace.domain.clock import Clock
    from amlaki_marketplace.domain.enums import CancellationReason, PaymentMethod

_TERMINAL = frozenset({DealStatus.COMPLETED, DealStatus.CANCELED})


@dataclass
class Deal(AggregateRoot):
    """A sale, rent, lease or auction deal on one property."""

    property_id: uuid.UUID
    seller_id: uuid.UUID
    type: TransactionType
    agreed_price: Price
    agent_commission: Money
    amlaki_commission: Money
    buyer_id: uuid.UUID | None = None
    status: DealStatus = DealStatus.INITIATED
    contract: ContractInfo = field(default_factory=ContractInfo.empty)
    payments: PaymentLedger = field(default_factory=PaymentLedger.empty)
    cancellation_reason: CancellationReason | None = None
    cancellation_note: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    clock: Clock = field(default=SYSTEM_CLOCK, compare=False, repr=False)
    _events: list[DomainEvent] = field(
        default_factory=list, init=False, compare=False, repr=False
    )

    @classmethod
    def start(
        cls,
        property_id: uuid.UUID,
        seller_id: uuid.UUID,
        type: TransactionType,
        tentative_price: Price,
        agent_commission: Money,
        amlaki_commission: Money,
        *,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Deal:
        """Open a deal at the asking price. Commissions are fixed from here on."""
        require_id(property_id, "PropertyId")
        require_id(seller_id, "SellerId")
        if agent_commission.is_negative:
            raise BusinessRuleViolation("Agent commission cannot be negative.")
        if amlaki_commission.is_negative:
            raise BusinessRuleViolation("Amlaki commission cannot be negative.")
        for commission in (agent_commission, amlaki_commission):
            if commission.currency != tentative_price.currency:
                raise CurrencyMismatchError(tentative_price.currency, commission.currency)

        now = clock.now()
        deal = cls(
            property_id=property_id,
            seller_id=seller_id,
            type=type,
            agreed_price=tentative_price,
            agent_commission=agent_commission,
            amlaki_commission=amlaki_commission,
            created_at=now,
            updated_at=now,
            clock=clock,
        )
        deal._record(
            EventType.DEAL_STARTED,
            None,
            deal.status,
            property_id=str(property_id),
            price=str(tentative_price),
        )
        return deal

    # ------------------------------------------------------------------
    # Derived amounts
    # ------------------------------------------------------------------

    @property
    def currency(self) -> str:
        return self.agreed_price.currency

    @property
    def total_due(self) -> Money:
        return self.agreed_price.value + self.agent_commission + self.amlaki_commission

    @property
    def balance_due(self) -> Money:
        return self.payments.outstanding(self.total_due)

    @property
    def is_terminal(self) -> bool:
        return self.status in _TERMINAL

    # ------------------------------------------------------------------
    # Offers
    # ------------------------------------------------------------------

    def propose_offer(self, buyer_id: uuid.UUID, offer_price: Price) -> None:
        """Propose (or re-propose after rejection) an offer at ``offer_price``."""
        new_status = self._transition(
            "propose_offer", "Offer can only be proposed from Initiated or after rejection."
        )
        require_id(buyer_id, "BuyerId")
        if offer_price.currency != self.currency:
            raise CurrencyMismatchError(self.currency, offer_price.currency)

        self.buyer_id = buyer_id
        self.agreed_price = offer_price
        self._move_to(
            new_status,
            EventType.OFFER_PROPOSED,
            buyer_id=str(buyer_id),
            price=str(offer_price),
        )

    def accept_offer(self) -> None:
        new_status = self._transition("accept_offer", "Only a proposed offer can be accepted.")
        self._move_to(new_status, EventType.OFFER_ACCEPTED, price=str(self.agreed_price))

    def reject_offer(self) -> None:
        """Reject the proposal. The buyer id is kept for the audit trail."""
        new_status = self._transition("reject_offer", "Only a proposed offer can be rejected.")
        self._move_to(new_status, EventType.OFFER_REJECTED, price=str(self.agreed_price))

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def sign_contract(
        self,
        contract_number: str,
        document_url: str | None = None,
        now: datetime | None = None,
    ) -> None:
        new_status = self._transition(
            "sign_contract", "Contract can be signed only after the offer is accepted."
        )
        now = now or self._now()
        contract = ContractInfo.signed(contract_number, document_url, now)

        self.contract = contract
        self._move_to(
            new_status, EventType.CONTRACT_SIGNED, now, contract_number=contract.contract_number
        )

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(
        self,
        amount: Money,
        method: PaymentMethod,
        reference: str | None = None,
        now: datetime | None = None,
    ) -> PaymentEntry:
        """Append a payment to the ledger. Does not change the deal status."""
        if self.is_terminal:
            raise BusinessRuleViolation(
                "Cannot record payments on canceled or completed transactions."
            )
        if amount.is_negative:
            raise BusinessRuleViolation("Payment amount cannot be negative.")
        if self.buyer_id is None:
            raise BusinessRuleViolation("BuyerId must be set before payments.")
        if amount.currency != self.currency:
            raise CurrencyMismatchError(self.currency, amount.currency)

        now = now or self._now()
        entry = PaymentEntry(amount, method, now, reference)
        self.payments = self.payments.add(entry)
        self._touch(now)
        self._record(
            EventType.PAYMENT_RECORDED,
            self.status,
            self.status,
            amount=str(amount),
            method=str(method),
            reference=entry.reference,
            total_paid=str(self.payments.total_paid),
        )
        return entry

    # ------------------------------------------------------------------
    # Completion & cancellation
    # ------------------------------------------------------------------

    def mark_completed(self) -> None:
        """Complete the deal if fully paid.

        Raises:
            InvalidStateTransitionError: If no contract has been signed yet
                or the deal is already terminal. Nothing changes.
            OutstandingBalanceError: If payments fall short of the total due.
                The deal has been moved to PaymentInProgress.
        """
        completed = self._transition(
            "complete",
            "Deal must have a signed contract or ongoing payments to complete.",
        )

        total_due = self.total_due
        total_paid = self.payments.total_paid
        if total_paid.amount < total_due.amount:
            self._move_to(
                self._transition("payment_shortfall"),
                EventType.PAYMENT_SHORTFALL,
                total_due=str(total_due),
                total_paid=str(total_paid),
            )
            raise OutstandingBalanceError(total_due.amount, total_paid.amount, total_due.currency)

        self._move_to(completed, EventType.DEAL_COMPLETED, total_paid=str(total_paid))

    def cancel(self, reason: CancellationReason, note: str | None = None) -> None:
        new_status = self._transition("cancel", "Deal is already completed or canceled.")

        self.cancellation_reason = reason
        self.cancellation_note = optional_text(note)
        self._move_to(
            new_status,
            EventType.DEAL_CANCELED,
            reason=str(reason),
            note=self.cancellation_note,
        )

    def allowed_events(self) -> list[str]:
        return allowed_events(DealStateMachine, self.status)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _transition(self, event_name: str, reason: str | None = None) -> DealStatus:
        return DealStatus(advance(DealStateMachine, self.status, event_name, reason))

    def _move_to(
        self,
        new_status: DealStatus,
        event_type: EventType,
        now: datetime | None = None,
        **metadata: object,
    ) -> None:
        old_status = self.status
        self.status = new_status
        self._touch(now)
        self._record(event_type, old_status, new_status, **metadata)
