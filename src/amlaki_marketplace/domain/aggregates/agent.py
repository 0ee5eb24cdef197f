"""Agent aggregate: licensing and compliance gated lifecycle.

    Onboarding -> Active <-> Suspended
    any non-Deactivated state -> Deactivated (terminal)

Going live requires every activation gate to hold at call time:
verification prerequisites, a currently valid license, an active
affiliation (if one is attached), at least one service area and the
required document set. Reactivation from suspension only re-checks the
license and verification.

Once deactivated the agent is frozen, except that a license renewal or
the end of an affiliation may still be recorded for historical accuracy.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from amlaki_marketplace.domain.clock import SYSTEM_CLOCK
from amlaki_marketplace.domain.enums import AgentStatus, EventType
from amlaki_marketplace.domain.events import AggregateRoot, DomainEvent
from amlaki_marketplace.domain.exceptions import ActivationGateError, BusinessRuleViolation
from amlaki_marketplace.domain.guards import optional_text, require_id, require_text
from amlaki_marketplace.domain.state_machine import AgentStateMachine, advance, allowed_events
from amlaki_marketplace.domain.value_objects.compliance import (
    AgentDocument,
    AgentDocuments,
    AgentLicense,
    BrokerageAffiliation,
    CommissionSplit,
    ServiceAreas,
    VerificationSnapshot,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from amlaki_marketplace.domain.clock import Clock

LICENSE_REVOKED_REASON = "License revoked."


@dataclass
class Agent(AggregateRoot):
    """A marketplace agent enrolled from a verified user."""

    user_id: uuid.UUID
    verification: VerificationSnapshot
    license: AgentLicense
    commission: CommissionSplit
    service_areas: ServiceAreas
    documents: AgentDocuments
    affiliation: BrokerageAffiliation | None = None
    status: AgentStatus = AgentStatus.ONBOARDING
    suspension_reason: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    clock: Clock = field(default=SYSTEM_CLOCK, compare=False, repr=False)
    _events: list[DomainEvent] = field(
        default_factory=list, init=False, compare=False, repr=False
    )

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    @classmethod
    def enroll(
        cls,
        user_id: uuid.UUID,
        verification: VerificationSnapshot,
        license: AgentLicense,
        commission: CommissionSplit,
        service_areas: ServiceAreas,
        documents: AgentDocuments | None = None,
        *,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Agent:
        """Create an agent in Onboarding from a verified user."""
        require_id(user_id, "UserId")
        if not verification.meets_agent_prerequisites():
            raise BusinessRuleViolation(
                "User must have verified email/phone and approved KYC to enroll as Agent."
            )

        now = clock.now()
        agent = cls(
            user_id=user_id,
            verification=verification,
            license=license,
            commission=commission,
            service_areas=service_areas,
            documents=documents or AgentDocuments(),
            created_at=now,
            updated_at=now,
            clock=clock,
        )
        agent._record(
            EventType.AGENT_ENROLLED, None, agent.status, user_id=str(user_id)
        )
        return agent

    # ------------------------------------------------------------------
    # Attribute mutators
    # ------------------------------------------------------------------

    def attach_affiliation(self, affiliation: BrokerageAffiliation) -> None:
        self._ensure_not_deactivated("Deactivated agent cannot change affiliation.")
        if self.affiliation is not None and self.affiliation.is_active:
            raise BusinessRuleViolation(
                "An active affiliation already exists. End it before attaching a new one."
            )
        self.affiliation = affiliation
        self._changed(
            EventType.AFFILIATION_ATTACHED, brokerage_id=str(affiliation.brokerage_id)
        )

    def end_affiliation(self, at: datetime | None = None) -> None:
        """End the current affiliation. No-op if there is none or it already ended."""
        if self.affiliation is None or not self.affiliation.is_active:
            return
        self.affiliation = self.affiliation.end(at or self._now())
        self._changed(
            EventType.AFFILIATION_ENDED, brokerage_id=str(self.affiliation.brokerage_id)
        )

    def refresh_verification(self, snapshot: VerificationSnapshot) -> None:
        self._ensure_not_deactivated("Deactivated agent cannot update verification.")
        self.verification = snapshot
        self._changed(EventType.AGENT_PROFILE_UPDATED, field="verification")

    def update_commission(self, split: CommissionSplit) -> None:
        self._ensure_not_deactivated("Deactivated agent cannot update commission.")
        self.commission = split
        self._changed(EventType.AGENT_PROFILE_UPDATED, field="commission")

    def replace_service_areas(self, areas: ServiceAreas | str | Iterable[str]) -> None:
        self._ensure_not_deactivated("Deactivated agent cannot update service areas.")
        if not isinstance(areas, ServiceAreas):
            areas = self.service_areas.replace(areas)
        self.service_areas = areas
        self._changed(EventType.AGENT_PROFILE_UPDATED, field="service_areas")

    def add_document(self, doc: AgentDocument) -> None:
        self._ensure_not_deactivated("Deactivated agent cannot add documents.")
        self.documents = self.documents.add(doc)
        self._changed(
            EventType.AGENT_PROFILE_UPDATED, field="documents", document_type=str(doc.type)
        )

    # ------------------------------------------------------------------
    # License
    # ------------------------------------------------------------------

    def renew_license(self, new_expiry: datetime) -> None:
        """Extend the license. Allowed even after deactivation."""
        self.license = self.license.renew(new_expiry)
        self._changed(EventType.LICENSE_RENEWED, expires_at=new_expiry.isoformat())

    def revoke_license(self) -> None:
        """Revoke the license; an active agent is suspended as a consequence."""
        self._ensure_not_deactivated("Deactivated agent cannot change license.")
        self.license = self.license.revoke()
        self._changed(EventType.LICENSE_REVOKED)
        if self.status == AgentStatus.ACTIVE:
            self.suspend(LICENSE_REVOKED_REASON)

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------

    def activate(self, now: datetime | None = None) -> None:
        """Go live. No-op if already Active.

        Raises:
            InvalidStateTransitionError: If the agent is deactivated.
            ActivationGateError: Naming the first gate that does not hold.
        """
        if self.status == AgentStatus.ACTIVE:
            return
        now = now or self._now()
        new_status = self._transition("activate", "Cannot activate a deactivated agent.")

        blockers = self.activation_blockers(now)
        if blockers:
            raise blockers[0]

        self._move_to(new_status, EventType.AGENT_ACTIVATED, now)

    def suspend(self, reason: str) -> None:
        new_status = self._transition("suspend", "Agent already deactivated.")
        reason = require_text(reason, "Reason")

        old_status = self.status
        self.status = new_status
        self.suspension_reason = reason
        self._touch()
        self._record(EventType.AGENT_SUSPENDED, old_status, new_status, reason=reason)

    def reactivate(self, now: datetime | None = None) -> None:
        """Return to Active re-checking only license validity and verification."""
        now = now or self._now()
        new_status = self._transition(
            "reactivate", "Cannot reactivate a deactivated agent."
        )
        if not self.license.is_currently_valid(now):
            raise ActivationGateError(
                "license", "Cannot reactivate: license invalid or expired."
            )
        if not self.verification.meets_agent_prerequisites():
            raise ActivationGateError(
                "verification", "Cannot reactivate: user verification/KYC not satisfied."
            )

        self._move_to(new_status, EventType.AGENT_REACTIVATED, now)

    def deactivate(self, reason: str | None = None) -> None:
        """Deactivate permanently. No-op if already deactivated."""
        if self.status == AgentStatus.DEACTIVATED:
            return
        new_status = self._transition("deactivate")

        old_status = self.status
        self.status = new_status
        self.suspension_reason = optional_text(reason)
        self._touch()
        self._record(
            EventType.AGENT_DEACTIVATED, old_status, new_status, reason=self.suspension_reason
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def activation_blockers(self, now: datetime | None = None) -> list[ActivationGateError]:
        """Return every activation gate that currently fails, in check order."""
        now = now or self._now()
        blockers: list[ActivationGateError] = []
        if not self.verification.meets_agent_prerequisites():
            blockers.append(
                ActivationGateError(
                    "verification", "Cannot activate: user verification/KYC not satisfied."
                )
            )
        if not self.license.is_currently_valid(now):
            blockers.append(
                ActivationGateError("license", "Cannot activate: license invalid or expired.")
            )
        if self.affiliation is not None and not self.affiliation.is_active:
            blockers.append(
                ActivationGateError("affiliation", "Cannot activate: affiliation ended.")
            )
        if len(self.service_areas) == 0:
            blockers.append(
                ActivationGateError(
                    "service_areas",
                    "Cannot activate: at least one service area is required.",
                )
            )
        try:
            self.documents.ensure_required_for_activation()
        except ActivationGateError as err:
            blockers.append(err)
        return blockers

    def can_list_property_now(self, now: datetime | None = None) -> bool:
        now = now or self._now()
        return (
            self.status == AgentStatus.ACTIVE
            and self.license.is_currently_valid(now)
            and self.verification.meets_agent_prerequisites()
        )

    def allowed_events(self) -> list[str]:
        return allowed_events(AgentStateMachine, self.status)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _transition(self, event_name: str, reason: str | None = None) -> AgentStatus:
        return AgentStatus(advance(AgentStateMachine, self.status, event_name, reason))

    def _ensure_not_deactivated(self, message: str) -> None:
        if self.status == AgentStatus.DEACTIVATED:
            raise BusinessRuleViolation(message)

    def _move_to(self, new_status: AgentStatus, event_type: EventType, now: datetime) -> None:
        old_status = self.status
        self.status = new_status
        self.suspension_reason = None
        self._touch(now)
        self._record(event_type, old_status, new_status)

    def _changed(self, event_type: EventType, **metadata: object) -> None:
        self._touch()
        self._record(event_type, self.status, self.status, **metadata)
