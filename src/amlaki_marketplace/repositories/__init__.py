"""Persistence seams.

The lifecycle core does not persist anything. These protocols describe what
the orchestration services need from a persistence collaborator; the
in-memory implementations back the tests and local runs.
"""

from amlaki_marketplace.repositories.memory import (
    AgentRepository,
    DealRepository,
    EventLog,
    InMemoryAgentRepository,
    InMemoryDealRepository,
    InMemoryEventLog,
    InMemoryPropertyRepository,
    PropertyRepository,
)

__all__ = [
    "AgentRepository",
    "DealRepository",
    "EventLog",
    "InMemoryAgentRepository",
    "InMemoryDealRepository",
    "InMemoryEventLog",
    "InMemoryPropertyRepository",
    "PropertyRepository",
]
