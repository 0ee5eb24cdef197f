"""Agent Service: orchestrates the agent lifecycle.

Loads an agent, invokes exactly one transition, saves it and drains its
lifecycle events into the event log. The identity service supplies fresh
verification snapshots; this service never derives them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from amlaki_marketplace.domain.aggregates import Agent
from amlaki_marketplace.domain.clock import SYSTEM_CLOCK
from amlaki_marketplace.domain.exceptions import AggregateNotFoundError, BusinessRuleViolation
from amlaki_marketplace.logging_config import bind_aggregate, get_logger

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from amlaki_marketplace.domain.clock import Clock
    from amlaki_marketplace.domain.value_objects import (
        AgentDocument,
        AgentDocuments,
        AgentLicense,
        BrokerageAffiliation,
        CommissionSplit,
        ServiceAreas,
        VerificationSnapshot,
    )
    from amlaki_marketplace.repositories import AgentRepository, EventLog

logger = get_logger(__name__)


class AgentService:
    """Manages agent enrollment, activation and compliance updates."""

    def __init__(
        self,
        agents: AgentRepository,
        events: EventLog,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        self._agents = agents
        self._events = events
        self._clock = clock

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    def enroll(
        self,
        user_id: uuid.UUID,
        verification: VerificationSnapshot,
        license: AgentLicense,
        commission: CommissionSplit,
        service_areas: ServiceAreas,
        documents: AgentDocuments | None = None,
    ) -> Agent:
        agent = Agent.enroll(
            user_id,
            verification,
            license,
            commission,
            service_areas,
            documents,
            clock=self._clock,
        )
        self._agents.add(agent)
        self._flush(agent)
        logger.info("agent.enrolled", agent_id=str(agent.id), user_id=str(user_id))
        return agent

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self, agent_id: uuid.UUID) -> Agent:
        return self._apply(agent_id, "agent.activated", lambda a: a.activate())

    def suspend(self, agent_id: uuid.UUID, reason: str) -> Agent:
        return self._apply(agent_id, "agent.suspended", lambda a: a.suspend(reason))

    def reactivate(self, agent_id: uuid.UUID) -> Agent:
        return self._apply(agent_id, "agent.reactivated", lambda a: a.reactivate())

    def deactivate(self, agent_id: uuid.UUID, reason: str | None = None) -> Agent:
        return self._apply(agent_id, "agent.deactivated", lambda a: a.deactivate(reason))

    # ------------------------------------------------------------------
    # Compliance updates
    # ------------------------------------------------------------------

    def refresh_verification(
        self, agent_id: uuid.UUID, snapshot: VerificationSnapshot
    ) -> Agent:
        return self._apply(
            agent_id, "agent.verification_refreshed", lambda a: a.refresh_verification(snapshot)
        )

    def update_commission(self, agent_id: uuid.UUID, split: CommissionSplit) -> Agent:
        return self._apply(
            agent_id, "agent.commission_updated", lambda a: a.update_commission(split)
        )

    def replace_service_areas(
        self, agent_id: uuid.UUID, areas: ServiceAreas | str | Iterable[str]
    ) -> Agent:
        return self._apply(
            agent_id, "agent.service_areas_replaced", lambda a: a.replace_service_areas(areas)
        )

    def add_document(self, agent_id: uuid.UUID, doc: AgentDocument) -> Agent:
        return self._apply(
            agent_id,
            "agent.document_added",
            lambda a: a.add_document(doc),
            document_type=str(doc.type),
        )

    def attach_affiliation(
        self, agent_id: uuid.UUID, affiliation: BrokerageAffiliation
    ) -> Agent:
        return self._apply(
            agent_id,
            "agent.affiliation_attached",
            lambda a: a.attach_affiliation(affiliation),
            brokerage_id=str(affiliation.brokerage_id),
        )

    def end_affiliation(self, agent_id: uuid.UUID, at: datetime | None = None) -> Agent:
        return self._apply(agent_id, "agent.affiliation_ended", lambda a: a.end_affiliation(at))

    def renew_license(self, agent_id: uuid.UUID, new_expiry: datetime) -> Agent:
        return self._apply(
            agent_id,
            "agent.license_renewed",
            lambda a: a.renew_license(new_expiry),
            expires_at=new_expiry.isoformat(),
        )

    def revoke_license(self, agent_id: uuid.UUID) -> Agent:
        return self._apply(agent_id, "agent.license_revoked", lambda a: a.revoke_license())

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_agent(self, agent_id: uuid.UUID) -> Agent:
        return self._get_agent_or_raise(agent_id)

    def describe(self, agent_id: uuid.UUID) -> dict:
        """Get agent status with allowed events and unmet activation gates."""
        agent = self._get_agent_or_raise(agent_id)
        return {
            "agent_id": str(agent.id),
            "status": str(agent.status),
            "suspension_reason": agent.suspension_reason,
            "allowed_events": agent.allowed_events(),
            "activation_blockers": [b.gate for b in agent.activation_blockers()],
            "can_list_property": agent.can_list_property_now(),
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_agent_or_raise(self, agent_id: uuid.UUID) -> Agent:
        agent = self._agents.get_by_id(agent_id)
        if agent is None:
            raise AggregateNotFoundError("Agent", str(agent_id))
        return agent

    def _apply(
        self,
        agent_id: uuid.UUID,
        log_event: str,
        action: Callable[[Agent], object],
        **log_fields: object,
    ) -> Agent:
        agent = self._get_agent_or_raise(agent_id)
        with bind_aggregate(agent_id=agent_id):
            try:
                action(agent)
            except BusinessRuleViolation as err:
                logger.warning(
                    "agent.rule_violation", attempted=log_event, code=err.code, error=err.message
                )
                raise
            self._agents.save(agent)
            self._flush(agent)
            logger.info(log_event, status=agent.status, **log_fields)
        return agent

    def _flush(self, agent: Agent) -> None:
        self._events.append(agent.pull_events())
