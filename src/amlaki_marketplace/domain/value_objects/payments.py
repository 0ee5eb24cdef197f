"""Deal value objects: contract details, payment entries and the ledger."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from amlaki_marketplace.domain.clock import as_utc
from amlaki_marketplace.domain.exceptions import CurrencyMismatchError
from amlaki_marketplace.domain.guards import ensure, optional_text, require_text
from amlaki_marketplace.domain.value_objects.money import Money

if TYPE_CHECKING:
    from datetime import datetime

    from amlaki_marketplace.domain.enums import PaymentMethod


@dataclass(frozen=True)
class ContractInfo:
    """The signed sale/lease contract, or nothing until it is signed."""

    contract_number: str | None = None
    document_url: str | None = None
    signed_at: datetime | None = None

    @classmethod
    def empty(cls) -> ContractInfo:
        return cls()

    @classmethod
    def signed(cls, number: str, document_url: str | None, at: datetime) -> ContractInfo:
        return cls(require_text(number, "Contract number"), optional_text(document_url), as_utc(at))

    @property
    def is_signed(self) -> bool:
        return self.signed_at is not None


@dataclass(frozen=True)
class PaymentEntry:
    amount: Money
    method: PaymentMethod
    paid_at: datetime
    reference: str | None = None

    def __post_init__(self) -> None:
        ensure(not self.amount.is_negative, "Payment amount cannot be negative.")
        object.__setattr__(self, "paid_at", as_utc(self.paid_at))
        object.__setattr__(self, "reference", optional_text(self.reference))


@dataclass(frozen=True)
class PaymentLedger:
    """Append-only record of payments on a deal.

    The ledger's currency is fixed by its first entry; later entries in any
    other currency are refused. ``total_paid`` is always the sum of the
    entries.
    """

    entries: tuple[PaymentEntry, ...] = ()

    def __post_init__(self) -> None:
        for entry in self.entries[1:]:
            if entry.amount.currency != self.currency:
                raise CurrencyMismatchError(self.currency, entry.amount.currency)

    @classmethod
    def empty(cls) -> PaymentLedger:
        return cls()

    @property
    def currency(self) -> str | None:
        return self.entries[0].amount.currency if self.entries else None

    @property
    def total_paid(self) -> Money:
        total = sum((e.amount.amount for e in self.entries), Decimal("0"))
        return Money(total, self.currency)

    def add(self, entry: PaymentEntry) -> PaymentLedger:
        return PaymentLedger((*self.entries, entry))

    def outstanding(self, total_due: Money) -> Money:
        """Return how much of ``total_due`` is still unpaid (never negative)."""
        paid = self.total_paid.amount
        return total_due.with_amount(max(total_due.amount - paid, Decimal("0")))

    def __len__(self) -> int:
        return len(self.entries)
