"""Repository protocols and in-memory implementations.

Repositories store whole aggregates keyed by id. Optimistic concurrency is
the persistence collaborator's responsibility; these implementations assume
a single writer.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Protocol

from amlaki_marketplace.domain.exceptions import BusinessRuleViolation

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from amlaki_marketplace.domain.aggregates import Agent, Deal, Property
    from amlaki_marketplace.domain.enums import AgentStatus, DealStatus
    from amlaki_marketplace.domain.events import DomainEvent


class AgentRepository(Protocol):
    def get_by_id(self, agent_id: uuid.UUID) -> Agent | None: ...

    def get_by_user(self, user_id: uuid.UUID) -> Agent | None: ...

    def add(self, agent: Agent) -> Agent: ...

    def save(self, agent: Agent) -> Agent: ...


class PropertyRepository(Protocol):
    def get_by_id(self, property_id: uuid.UUID) -> Property | None: ...

    def get_by_code(self, code: str) -> Property | None: ...

    def add(self, listing: Property) -> Property: ...

    def save(self, listing: Property) -> Property: ...


class DealRepository(Protocol):
    def get_by_id(self, deal_id: uuid.UUID) -> Deal | None: ...

    def get_by_property(self, property_id: uuid.UUID) -> list[Deal]: ...

    def add(self, deal: Deal) -> Deal: ...

    def save(self, deal: Deal) -> Deal: ...


class EventLog(Protocol):
    def append(self, events: Iterable[DomainEvent]) -> None: ...

    def for_aggregate(self, aggregate_id: uuid.UUID) -> list[DomainEvent]: ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


class InMemoryAgentRepository:
    """Dict-backed agent store."""

    def __init__(self) -> None:
        self._agents: dict[uuid.UUID, Agent] = {}

    def get_by_id(self, agent_id: uuid.UUID) -> Agent | None:
        return self._agents.get(agent_id)

    def get_by_user(self, user_id: uuid.UUID) -> Agent | None:
        return next((a for a in self._agents.values() if a.user_id == user_id), None)

    def get_by_status(self, status: AgentStatus) -> list[Agent]:
        return [a for a in self._agents.values() if a.status == status]

    def add(self, agent: Agent) -> Agent:
        if self.get_by_user(agent.user_id) is not None:
            raise BusinessRuleViolation("User is already enrolled as an agent.")
        self._agents[agent.id] = agent
        return agent

    def save(self, agent: Agent) -> Agent:
        self._agents[agent.id] = agent
        return agent


class InMemoryPropertyRepository:
    """Dict-backed listing store; listing codes are unique."""

    def __init__(self) -> None:
        self._listings: dict[uuid.UUID, Property] = {}

    def get_by_id(self, property_id: uuid.UUID) -> Property | None:
        return self._listings.get(property_id)

    def get_by_code(self, code: str) -> Property | None:
        normalized = code.strip().upper()
        return next(
            (p for p in self._listings.values() if p.code.value == normalized), None
        )

    def add(self, listing: Property) -> Property:
        if self.get_by_code(listing.code.value) is not None:
            raise BusinessRuleViolation(f"Listing code already in use: {listing.code}")
        self._listings[listing.id] = listing
        return listing

    def save(self, listing: Property) -> Property:
        self._listings[listing.id] = listing
        return listing


class InMemoryDealRepository:
    """Dict-backed deal store."""

    def __init__(self) -> None:
        self._deals: dict[uuid.UUID, Deal] = {}

    def get_by_id(self, deal_id: uuid.UUID) -> Deal | None:
        return self._deals.get(deal_id)

    def get_by_property(self, property_id: uuid.UUID) -> list[Deal]:
        return [d for d in self._deals.values() if d.property_id == property_id]

    def get_by_status(self, status: DealStatus) -> list[Deal]:
        return [d for d in self._deals.values() if d.status == status]

    def add(self, deal: Deal) -> Deal:
        self._deals[deal.id] = deal
        return deal

    def save(self, deal: Deal) -> Deal:
        self._deals[deal.id] = deal
        return deal


class InMemoryEventLog:
    """Append-only audit trail grouped by aggregate id."""

    def __init__(self) -> None:
        self._events: dict[uuid.UUID, list[DomainEvent]] = defaultdict(list)

    def append(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            self._events[event.aggregate_id].append(event)

    def for_aggregate(self, aggregate_id: uuid.UUID) -> list[DomainEvent]:
        return list(self._events.get(aggregate_id, []))
