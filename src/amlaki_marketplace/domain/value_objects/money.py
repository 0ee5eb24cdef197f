"""Monetary value objects.

Money is an arithmetic type and may carry a negative amount (the result of
a subtraction, for instance). Anything that *holds* money on behalf of an
aggregate (a price, a commission, a payment) rejects negative amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from amlaki_marketplace.config import get_settings
from amlaki_marketplace.domain.exceptions import CurrencyMismatchError
from amlaki_marketplace.domain.guards import ensure, require_text


def _to_decimal(value: Decimal | int | str | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Money:
    """An amount in a single currency.

    The currency is trimmed and upper-cased; it defaults to the configured
    market currency.
    """

    amount: Decimal
    currency: str | None = None

    def __post_init__(self) -> None:
        currency = self.currency if self.currency is not None else get_settings().default_currency
        currency = require_text(currency, "Currency").upper()
        object.__setattr__(self, "amount", _to_decimal(self.amount))
        object.__setattr__(self, "currency", currency)

    @classmethod
    def zero(cls, currency: str | None = None) -> Money:
        return cls(Decimal("0"), currency)

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def with_amount(self, amount: Decimal | int | str) -> Money:
        return Money(_to_decimal(amount), self.currency)

    def _check_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __str__(self) -> str:
        return f"{self.amount.normalize():f} {self.currency}"


@dataclass(frozen=True)
class Price:
    """A non-negative asking or agreed price."""

    value: Money

    def __post_init__(self) -> None:
        ensure(not self.value.is_negative, "Price cannot be negative.")

    @classmethod
    def of(cls, amount: Decimal | int | str, currency: str | None = None) -> Price:
        return cls(Money(_to_decimal(amount), currency))

    @property
    def amount(self) -> Decimal:
        return self.value.amount

    @property
    def currency(self) -> str:
        return self.value.currency

    def change_amount(self, amount: Decimal | int | str) -> Price:
        return Price(self.value.with_amount(amount))

    def __str__(self) -> str:
        return str(self.value)
