"""Domain layer: pure lifecycle logic with zero framework dependencies."""

from amlaki_marketplace.domain.aggregates import Agent, Deal, Property
from amlaki_marketplace.domain.clock import Clock, FixedClock, SystemClock
from amlaki_marketplace.domain.enums import (
    AgentStatus,
    DealStatus,
    EventType,
    ModerationStatus,
    PropertyStatus,
    TransactionStatus,
)
from amlaki_marketplace.domain.events import DomainEvent
from amlaki_marketplace.domain.exceptions import (
    ActivationGateError,
    AggregateNotFoundError,
    BusinessRuleViolation,
    CurrencyMismatchError,
    InvalidStateTransitionError,
    MarketplaceError,
    OutstandingBalanceError,
)
from amlaki_marketplace.domain.state_machine import (
    AgentStateMachine,
    DealStateMachine,
    ListingStateMachine,
    advance,
)

__all__ = [
    "Agent",
    "Deal",
    "Property",
    "Clock",
    "FixedClock",
    "SystemClock",
    "AgentStatus",
    "DealStatus",
    "EventType",
    "ModerationStatus",
    "PropertyStatus",
    "TransactionStatus",
    "DomainEvent",
    "ActivationGateError",
    "AggregateNotFoundError",
    "BusinessRuleViolation",
    "CurrencyMismatchError",
    "InvalidStateTransitionError",
    "MarketplaceError",
    "OutstandingBalanceError",
    "AgentStateMachine",
    "DealStateMachine",
    "ListingStateMachine",
    "advance",
]
