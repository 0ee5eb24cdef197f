"""Domain exceptions for the marketplace lifecycle core.

Every failure the core raises is a business-rule violation: synchronous,
non-retryable, and correctable only by changing the input or the
aggregate's state. They are translated to user-facing responses outside
this package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decimal import Decimal


class MarketplaceError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "MARKETPLACE_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class BusinessRuleViolation(MarketplaceError):
    """Raised when a precondition or invariant does not hold.

    The message names the unmet precondition, e.g.
    "Cannot activate: license invalid or expired."
    """

    def __init__(self, message: str, code: str = "BUSINESS_RULE_VIOLATION") -> None:
        super().__init__(message=message, code=code)


# --- State Machine Errors ---


class InvalidStateTransitionError(BusinessRuleViolation):
    """Raised when the lifecycle guard refuses an event in the current state.

    Example: Completed -> cancel (a completed deal cannot be canceled)
    """

    def __init__(
        self,
        current_state: str,
        attempted_event: str,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            message=reason
            or f"Invalid state transition: {current_state} -> {attempted_event}",
            code="INVALID_STATE_TRANSITION",
        )
        self.current_state = current_state
        self.attempted_event = attempted_event


# --- Agent Errors ---


class ActivationGateError(BusinessRuleViolation):
    """Raised when an agent fails one of the go-live gates."""

    def __init__(self, gate: str, message: str) -> None:
        super().__init__(message=message, code="ACTIVATION_GATE_FAILED")
        self.gate = gate


# --- Money Errors ---


class CurrencyMismatchError(BusinessRuleViolation):
    """Raised when two amounts in different currencies are combined."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            message=f"Payment currency mismatch: expected {expected}, got {actual}.",
            code="CURRENCY_MISMATCH",
        )
        self.expected = expected
        self.actual = actual


class OutstandingBalanceError(BusinessRuleViolation):
    """Raised when a deal cannot complete because payments fall short.

    Unlike every other violation, this one is raised after the deal has
    moved to PaymentInProgress.
    """

    def __init__(
        self,
        total_due: Decimal,
        total_paid: Decimal,
        currency: str,
    ) -> None:
        self.total_due = total_due
        self.total_paid = total_paid
        self.shortfall = total_due - total_paid
        self.currency = currency
        super().__init__(
            message=(
                "Cannot complete: outstanding balance remains "
                f"({self.shortfall} {currency} of {total_due} {currency})."
            ),
            code="OUTSTANDING_BALANCE",
        )


# --- Lookup Errors ---


class AggregateNotFoundError(MarketplaceError):
    """Raised by orchestration services when an id does not exist."""

    def __init__(self, kind: str, aggregate_id: str) -> None:
        super().__init__(
            message=f"{kind} not found: {aggregate_id}",
            code=f"{kind.upper()}_NOT_FOUND",
        )
        self.kind = kind
        self.aggregate_id = aggregate_id
