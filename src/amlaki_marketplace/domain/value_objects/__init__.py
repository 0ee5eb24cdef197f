"""Immutable value objects owned by the aggregates."""

from amlaki_marketplace.domain.value_objects.compliance import (
    AgentDocument,
    AgentDocuments,
    AgentLicense,
    BrokerageAffiliation,
    CommissionSplit,
    RoleGrants,
    ServiceAreas,
    VerificationSnapshot,
)
from amlaki_marketplace.domain.value_objects.listing import (
    Address,
    Amenities,
    AreaInfo,
    GeoLocation,
    Interior,
    ListingCode,
    ListingCommission,
    MediaCollection,
    MediaItem,
    Notes,
    Tag,
)
from amlaki_marketplace.domain.value_objects.money import Money, Price
from amlaki_marketplace.domain.value_objects.payments import (
    ContractInfo,
    PaymentEntry,
    PaymentLedger,
)

__all__ = [
    "Address",
    "AgentDocument",
    "AgentDocuments",
    "AgentLicense",
    "Amenities",
    "AreaInfo",
    "BrokerageAffiliation",
    "CommissionSplit",
    "ContractInfo",
    "GeoLocation",
    "Interior",
    "ListingCode",
    "ListingCommission",
    "MediaCollection",
    "MediaItem",
    "Money",
    "Notes",
    "PaymentEntry",
    "PaymentLedger",
    "Price",
    "RoleGrants",
    "ServiceAreas",
    "Tag",
    "VerificationSnapshot",
]
