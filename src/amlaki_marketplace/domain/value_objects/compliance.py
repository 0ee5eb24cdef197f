"""Agent compliance value objects.

Verification, licensing, documents, affiliation, commission split and
service areas: the inputs the agent lifecycle gates on. All are frozen;
"mutators" return a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from amlaki_marketplace.config import get_settings
from amlaki_marketplace.domain.clock import as_utc
from amlaki_marketplace.domain.enums import DocumentType, LicenseStatus, UserRole
from amlaki_marketplace.domain.exceptions import ActivationGateError
from amlaki_marketplace.domain.guards import ensure, require_text

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable
    from datetime import datetime

REQUIRED_ACTIVATION_DOCUMENTS: tuple[tuple[DocumentType, str], ...] = (
    (DocumentType.LICENSE, "License document is required."),
    (DocumentType.ID_PROOF, "ID proof is required."),
    (DocumentType.PROFILE_PHOTO, "Profile photo is required."),
)


@dataclass(frozen=True)
class VerificationSnapshot:
    """Point-in-time copy of the identity service's verification flags."""

    email_verified: bool
    phone_verified: bool
    kyc_approved: bool

    def meets_agent_prerequisites(self) -> bool:
        return self.email_verified and self.phone_verified and self.kyc_approved


@dataclass(frozen=True)
class RoleGrants:
    """Roles granted to a user by the identity service."""

    roles: frozenset[UserRole] = frozenset({UserRole.USER})

    @classmethod
    def of(cls, *roles: UserRole) -> RoleGrants:
        return cls(frozenset(roles))

    def has_role(self, role: UserRole) -> bool:
        return role in self.roles

    def grant(self, role: UserRole) -> RoleGrants:
        return RoleGrants(self.roles | {role})

    def revoke(self, role: UserRole) -> RoleGrants:
        return RoleGrants(self.roles - {role})


@dataclass(frozen=True)
class AgentLicense:
    """A professional license with a validity window."""

    number: str
    issuing_authority: str
    issued_at: datetime
    expires_at: datetime
    status: LicenseStatus = LicenseStatus.ACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "number", require_text(self.number, "License number"))
        object.__setattr__(
            self,
            "issuing_authority",
            require_text(self.issuing_authority, "Issuing authority"),
        )
        object.__setattr__(self, "issued_at", as_utc(self.issued_at))
        object.__setattr__(self, "expires_at", as_utc(self.expires_at))
        ensure(self.expires_at > self.issued_at, "License expiry must be after issue date.")

    def is_currently_valid(self, now: datetime) -> bool:
        return self.status == LicenseStatus.ACTIVE and self.expires_at > as_utc(now)

    def renew(self, new_expiry: datetime) -> AgentLicense:
        new_expiry = as_utc(new_expiry)
        ensure(new_expiry > self.expires_at, "New expiry must be later than current expiry.")
        return AgentLicense(
            self.number,
            self.issuing_authority,
            self.issued_at,
            new_expiry,
            LicenseStatus.ACTIVE,
        )

    def revoke(self) -> AgentLicense:
        return AgentLicense(
            self.number,
            self.issuing_authority,
            self.issued_at,
            self.expires_at,
            LicenseStatus.REVOKED,
        )


@dataclass(frozen=True)
class BrokerageAffiliation:
    """Membership of a brokerage over an open or closed interval."""

    brokerage_id: uuid.UUID
    brokerage_name: str
    started_at: datetime
    ended_at: datetime | None = None

    def __post_init__(self) -> None:
        ensure(
            self.brokerage_id is not None and self.brokerage_id.int != 0,
            "BrokerageId is required.",
        )
        object.__setattr__(
            self, "brokerage_name", require_text(self.brokerage_name, "Brokerage name")
        )
        object.__setattr__(self, "started_at", as_utc(self.started_at))
        if self.ended_at is not None:
            object.__setattr__(self, "ended_at", as_utc(self.ended_at))
            ensure(self.ended_at > self.started_at, "End date must be after start date.")

    @property
    def is_active(self) -> bool:
        return self.ended_at is None

    def end(self, at: datetime) -> BrokerageAffiliation:
        return BrokerageAffiliation(self.brokerage_id, self.brokerage_name, self.started_at, at)


@dataclass(frozen=True)
class CommissionSplit:
    """How a commission is divided between agent, brokerage and platform.

    Percentages are non-negative, sum to exactly 100, and the agent share is
    capped by policy (95 by default).
    """

    agent_percent: Decimal
    brokerage_percent: Decimal
    platform_percent: Decimal

    def __post_init__(self) -> None:
        agent = Decimal(str(self.agent_percent))
        brokerage = Decimal(str(self.brokerage_percent))
        platform = Decimal(str(self.platform_percent))
        ensure(
            agent >= 0 and brokerage >= 0 and platform >= 0,
            "Commission percents cannot be negative.",
        )
        ensure(agent + brokerage + platform == 100, "Commission split must sum to 100%.")
        ensure(
            agent <= get_settings().max_agent_commission_percent,
            "Agent share too high per policy.",
        )
        object.__setattr__(self, "agent_percent", agent)
        object.__setattr__(self, "brokerage_percent", brokerage)
        object.__setattr__(self, "platform_percent", platform)


@dataclass(frozen=True)
class ServiceAreas:
    """Cities or regions an agent covers, case-normalized and unique.

    A bare string is one area, never a sequence of letters.
    """

    areas: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        areas = (self.areas,) if isinstance(self.areas, str) else self.areas
        normalized: list[str] = []
        for area in areas:
            value = require_text(area, "Area").lower()
            if value not in normalized:
                normalized.append(value)
        object.__setattr__(self, "areas", tuple(normalized))

    @classmethod
    def of(cls, *areas: str) -> ServiceAreas:
        return cls(tuple(areas))

    def contains(self, city_or_region: str) -> bool:
        return city_or_region.strip().lower() in self.areas

    def replace(self, areas: str | Iterable[str]) -> ServiceAreas:
        if isinstance(areas, str):
            return ServiceAreas((areas,))
        return ServiceAreas(tuple(areas))

    def __len__(self) -> int:
        return len(self.areas)


@dataclass(frozen=True)
class AgentDocument:
    """A compliance document stored by the blob store."""

    type: DocumentType
    url: str
    uploaded_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", require_text(self.url, "Document url"))
        object.__setattr__(self, "uploaded_at", as_utc(self.uploaded_at))


@dataclass(frozen=True)
class AgentDocuments:
    """The set of documents an agent has uploaded, unique by type+url+time."""

    docs: tuple[AgentDocument, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "docs", tuple(dict.fromkeys(self.docs)))

    def add(self, doc: AgentDocument) -> AgentDocuments:
        return AgentDocuments((*self.docs, doc))

    def has(self, doc_type: DocumentType) -> bool:
        return any(d.type == doc_type for d in self.docs)

    def missing_for_activation(self) -> list[DocumentType]:
        return [t for t, _ in REQUIRED_ACTIVATION_DOCUMENTS if not self.has(t)]

    def ensure_required_for_activation(self) -> None:
        """Raise naming the first required document that is missing."""
        for doc_type, message in REQUIRED_ACTIVATION_DOCUMENTS:
            if not self.has(doc_type):
                raise ActivationGateError("documents", message)

    def __len__(self) -> int:
        return len(self.docs)
