"""Lifecycle events collected by aggregates.

Aggregates never publish anything themselves. They append a DomainEvent
for every successful state-changing call, and the orchestration layer
drains them with ``pull_events()`` after saving the aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from amlaki_marketplace.domain.clock import SYSTEM_CLOCK

if TYPE_CHECKING:
    import uuid
    from datetime import datetime

    from amlaki_marketplace.domain.clock import Clock
    from amlaki_marketplace.domain.enums import EventType


@dataclass(frozen=True)
class DomainEvent:
    """One entry in an aggregate's audit trail.

    Attributes:
        event_type: What happened.
        aggregate_id: Id of the agent, property or deal.
        old_status: Lifecycle status before the call (None on creation).
        new_status: Lifecycle status after the call.
        occurred_at: Clock time of the change.
        metadata: Extra context (reason, amounts, buyer id...).
    """

    event_type: EventType
    aggregate_id: uuid.UUID
    old_status: str | None
    new_status: str
    occurred_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize for an audit log or outbox table."""
        return {
            "event_type": str(self.event_type),
            "aggregate_id": str(self.aggregate_id),
            "old_status": self.old_status,
            "new_status": self.new_status,
            "occurred_at": self.occurred_at.isoformat(),
            "metadata": self.metadata,
        }


class AggregateRoot:
    """Shared bookkeeping for aggregates: clock, timestamps, pending events.

    Subclasses are dataclasses; this mixin only contributes behaviour.
    """

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    clock: Clock
    _events: list[DomainEvent]

    def _now(self) -> datetime:
        return (self.clock or SYSTEM_CLOCK).now()

    def _touch(self, at: datetime | None = None) -> None:
        self.updated_at = at or self._now()

    def _record(
        self,
        event_type: EventType,
        old_status: str | None,
        new_status: str,
        **metadata: Any,
    ) -> None:
        self._events.append(
            DomainEvent(
                event_type=event_type,
                aggregate_id=self.id,
                old_status=old_status,
                new_status=new_status,
                occurred_at=self.updated_at,
                metadata=metadata,
            )
        )

    @property
    def pending_events(self) -> tuple[DomainEvent, ...]:
        return tuple(self._events)

    def pull_events(self) -> list[DomainEvent]:
        """Return and clear the events recorded since the last pull."""
        events = list(self._events)
        self._events.clear()
        return events
