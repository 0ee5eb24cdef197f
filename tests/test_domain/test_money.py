"""Tests for money, price and the payment ledger."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from amlaki_marketplace.domain.enums import PaymentMethod
from amlaki_marketplace.domain.exceptions import BusinessRuleViolation, CurrencyMismatchError
from amlaki_marketplace.domain.value_objects import (
    ContractInfo,
    Money,
    PaymentEntry,
    PaymentLedger,
    Price,
)

PAID_AT = datetime(2025, 3, 1, tzinfo=UTC)


def _entry(amount: int | str, currency: str = "IRR") -> PaymentEntry:
    return PaymentEntry(Money(Decimal(amount), currency), PaymentMethod.BANK_TRANSFER, PAID_AT)


class TestMoney:
    def test_default_currency(self) -> None:
        assert Money(10).currency == "IRR"

    def test_default_currency_from_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("AMLAKI_DEFAULT_CURRENCY", "usd")
        assert Money(10).currency == "USD"

    def test_currency_normalized(self) -> None:
        assert Money(10, " usd ").currency == "USD"

    def test_blank_currency_rejected(self) -> None:
        with pytest.raises(BusinessRuleViolation, match="Currency is required"):
            Money(10, "  ")

    def test_value_equality(self) -> None:
        assert Money(Decimal("100.00")) == Money(100)
        assert hash(Money(Decimal("100.00"))) == hash(Money(100))

    def test_arithmetic(self) -> None:
        assert Money(600) + Money(500) == Money(1100)
        assert (Money(600) - Money(700)).is_negative

    def test_arithmetic_currency_mismatch(self) -> None:
        with pytest.raises(CurrencyMismatchError):
            Money(1, "IRR") + Money(1, "USD")

    def test_str(self) -> None:
        assert str(Money(1000)) == "1000 IRR"
        assert str(Money(Decimal("12.50"), "USD")) == "12.5 USD"


class TestPrice:
    def test_negative_rejected(self) -> None:
        with pytest.raises(BusinessRuleViolation, match="Price cannot be negative"):
            Price(Money(-5))

    def test_zero_allowed(self) -> None:
        assert Price.of(0).amount == 0

    def test_change_amount_keeps_currency(self) -> None:
        price = Price.of(100, "USD").change_amount(250)
        assert price == Price(Money(250, "USD"))


class TestPaymentEntry:
    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(BusinessRuleViolation):
            _entry(-1)

    def test_blank_reference_cleared(self) -> None:
        entry = PaymentEntry(Money(1), PaymentMethod.CASH, PAID_AT, "   ")
        assert entry.reference is None


class TestPaymentLedger:
    def test_empty_ledger(self) -> None:
        ledger = PaymentLedger.empty()
        assert ledger.currency is None
        assert ledger.total_paid == Money(0)
        assert len(ledger) == 0

    def test_add_updates_running_total(self) -> None:
        ledger = PaymentLedger.empty().add(_entry(600))
        previous = ledger.total_paid

        updated = ledger.add(_entry(500))

        assert updated.total_paid.amount == previous.amount + 500
        assert len(updated) == 2

    def test_add_returns_new_ledger(self) -> None:
        ledger = PaymentLedger.empty()
        updated = ledger.add(_entry(1))
        assert len(ledger) == 0
        assert updated is not ledger

    def test_first_entry_fixes_currency(self) -> None:
        ledger = PaymentLedger.empty().add(_entry(10, "USD"))
        assert ledger.currency == "USD"
        assert ledger.total_paid == Money(10, "USD")

    def test_currency_mismatch_rejected(self) -> None:
        ledger = PaymentLedger.empty().add(_entry(10, "USD"))
        with pytest.raises(CurrencyMismatchError) as exc_info:
            ledger.add(_entry(10, "IRR"))
        assert exc_info.value.expected == "USD"
        assert exc_info.value.actual == "IRR"

    def test_mixed_currency_entries_rejected(self) -> None:
        with pytest.raises(CurrencyMismatchError) as exc_info:
            PaymentLedger((_entry(10, "IRR"), _entry(10, "USD")))
        assert exc_info.value.expected == "IRR"
        assert exc_info.value.actual == "USD"

    def test_rebuilt_ledger_keeps_total(self) -> None:
        ledger = PaymentLedger((_entry(600), _entry(500)))
        assert ledger.total_paid == Money(1100)

    def test_outstanding(self) -> None:
        ledger = PaymentLedger.empty().add(_entry(600))
        assert ledger.outstanding(Money(1100)) == Money(500)
        assert ledger.add(_entry(900)).outstanding(Money(1100)) == Money(0)


class TestContractInfo:
    def test_empty(self) -> None:
        contract = ContractInfo.empty()
        assert not contract.is_signed
        assert contract.contract_number is None

    def test_signed_trims_number(self) -> None:
        contract = ContractInfo.signed("  C-77 ", "", PAID_AT)
        assert contract.contract_number == "C-77"
        assert contract.document_url is None
        assert contract.is_signed

    def test_number_required(self) -> None:
        with pytest.raises(BusinessRuleViolation, match="Contract number is required"):
            ContractInfo.signed(" ", None, PAID_AT)

    def test_naive_signing_time_read_as_utc(self) -> None:
        contract = ContractInfo.signed("C-1", None, datetime(2025, 3, 1))
        assert contract.signed_at == PAID_AT
