"""Domain enumerations for the marketplace lifecycle core.

These enums define the canonical states and types used throughout the system.
They are framework-agnostic (no persistence, no HTTP imports).
"""

import enum

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class UserRole(enum.StrEnum):
    """Capability tags granted by the identity service."""

    USER = "User"
    AGENT = "Agent"
    MODERATOR = "Moderator"
    ADMIN = "Admin"


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------


class AgentStatus(enum.StrEnum):
    """Lifecycle states of an agent.

    Transitions are enforced by AgentStateMachine (domain/state_machine.py).
    DEACTIVATED is terminal.
    """

    ONBOARDING = "Onboarding"
    ACTIVE = "Active"
    SUSPENDED = "Suspended"
    DEACTIVATED = "Deactivated"


class LicenseStatus(enum.StrEnum):
    ACTIVE = "Active"
    SUSPENDED = "Suspended"
    REVOKED = "Revoked"
    EXPIRED = "Expired"


class DocumentType(enum.StrEnum):
    """Kinds of compliance documents an agent uploads."""

    LICENSE = "License"
    ID_PROOF = "IDProof"
    PROFILE_PHOTO = "ProfilePhoto"
    BROKERAGE_CONTRACT = "BrokerageContract"
    OTHER = "Other"


# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


class PropertyStatus(enum.StrEnum):
    """Availability axis of a listing."""

    AVAILABLE = "Available"
    SOLD = "Sold"
    PENDING = "Pending"
    OFF_MARKET = "OffMarket"


class TransactionStatus(enum.StrEnum):
    """Workflow axis of a listing.

    Transitions are enforced by ListingStateMachine. CLOSED is terminal.
    """

    DRAFT = "Draft"
    PUBLISHED = "Published"
    CLOSED = "Closed"


class ModerationStatus(enum.StrEnum):
    PENDING_REVIEW = "PendingReview"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class TransactionType(enum.StrEnum):
    SALE = "Sale"
    RENT = "Rent"
    LEASE = "Lease"
    AUCTION = "Auction"


class PropertyType(enum.StrEnum):
    APARTMENT = "Apartment"
    HOUSE = "House"
    VILLA = "Villa"
    LAND = "Land"
    COMMERCIAL = "Commercial"
    OFFICE = "Office"


class MediaType(enum.StrEnum):
    PHOTO = "Photo"
    VIDEO = "Video"
    FLOOR_PLAN = "FloorPlan"


class HeatingSystem(enum.StrEnum):
    NONE = "None"
    CENTRAL = "Central"
    RADIATOR = "Radiator"
    FLOOR = "Floor"
    HEAT_PUMP = "HeatPump"


class CoolingSystem(enum.StrEnum):
    NONE = "None"
    SPLIT = "Split"
    CENTRAL = "Central"
    EVAPORATIVE = "Evaporative"


class Furnishing(enum.StrEnum):
    UNFURNISHED = "Unfurnished"
    SEMI_FURNISHED = "SemiFurnished"
    FURNISHED = "Furnished"


# ---------------------------------------------------------------------------
# Deal
# ---------------------------------------------------------------------------


class DealStatus(enum.StrEnum):
    """Lifecycle states of a transaction (deal).

    Transitions are enforced by DealStateMachine. COMPLETED and CANCELED
    are terminal.
    """

    INITIATED = "Initiated"
    OFFER_PROPOSED = "OfferProposed"
    OFFER_ACCEPTED = "OfferAccepted"
    OFFER_REJECTED = "OfferRejected"
    CONTRACT_SIGNED = "ContractSigned"
    PAYMENT_IN_PROGRESS = "PaymentInProgress"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


class PaymentMethod(enum.StrEnum):
    BANK_TRANSFER = "BankTransfer"
    CASH = "Cash"
    ESCROW = "Escrow"
    CHEQUE = "Cheque"
    MORTGAGE = "Mortgage"


class CancellationReason(enum.StrEnum):
    BUYER_WITHDRAWN = "BuyerWithdrawn"
    SELLER_WITHDRAWN = "SellerWithdrawn"
    FINANCING_FAILED = "FinancingFailed"
    COMPLIANCE_ISSUE = "ComplianceIssue"
    OTHER = "Other"


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


class EventType(enum.StrEnum):
    """Types of lifecycle events recorded on aggregates.

    Every successful state-changing call produces at least one event
    (revoking an active agent's license also records the suspension).
    No-op calls produce none.
    """

    # Agent
    AGENT_ENROLLED = "AGENT_ENROLLED"
    AGENT_ACTIVATED = "AGENT_ACTIVATED"
    AGENT_SUSPENDED = "AGENT_SUSPENDED"
    AGENT_REACTIVATED = "AGENT_REACTIVATED"
    AGENT_DEACTIVATED = "AGENT_DEACTIVATED"
    AGENT_PROFILE_UPDATED = "AGENT_PROFILE_UPDATED"
    LICENSE_RENEWED = "LICENSE_RENEWED"
    LICENSE_REVOKED = "LICENSE_REVOKED"
    AFFILIATION_ATTACHED = "AFFILIATION_ATTACHED"
    AFFILIATION_ENDED = "AFFILIATION_ENDED"

    # Property
    LISTING_CREATED = "LISTING_CREATED"
    LISTING_MODERATED = "LISTING_MODERATED"
    LISTING_PUBLISHED = "LISTING_PUBLISHED"
    LISTING_UNPUBLISHED = "LISTING_UNPUBLISHED"
    LISTING_UPDATED = "LISTING_UPDATED"
    LISTING_SOLD = "LISTING_SOLD"

    # Deal
    DEAL_STARTED = "DEAL_STARTED"
    OFFER_PROPOSED = "OFFER_PROPOSED"
    OFFER_ACCEPTED = "OFFER_ACCEPTED"
    OFFER_REJECTED = "OFFER_REJECTED"
    CONTRACT_SIGNED = "CONTRACT_SIGNED"
    PAYMENT_RECORDED = "PAYMENT_RECORDED"
    PAYMENT_SHORTFALL = "PAYMENT_SHORTFALL"
    DEAL_COMPLETED = "DEAL_COMPLETED"
    DEAL_CANCELED = "DEAL_CANCELED"
