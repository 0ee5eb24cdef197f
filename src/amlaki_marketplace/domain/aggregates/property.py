"""Property aggregate: a listing with a moderated publication workflow.

Two independent status axes:

    transaction_status (workflow):  Draft -> Published -> Closed
    status (availability):          OffMarket <-> Available -> Pending / Sold

Moderation gates publication; a rejected listing is pulled off the market
immediately. A sale closes the listing for good: price, address and media
are frozen from then on, and ``status == Sold`` always implies
``transaction_status == Closed`` which implies a buyer is recorded.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from amlaki_marketplace.domain.clock import SYSTEM_CLOCK
from amlaki_marketplace.domain.enums import (
    EventType,
    MediaType,
    ModerationStatus,
    PropertyStatus,
    PropertyType,
    TransactionStatus,
    TransactionType,
)
from amlaki_marketplace.domain.events import AggregateRoot, DomainEvent
from amlaki_marketplace.domain.exceptions import BusinessRuleViolation
from amlaki_marketplace.domain.guards import require_id
from amlaki_marketplace.domain.state_machine import ListingStateMachine, advance, allowed_events
from amlaki_marketplace.domain.value_objects.listing import (
    Address,
    Amenities,
    AreaInfo,
    Interior,
    ListingCode,
    ListingCommission,
    MediaCollection,
    Notes,
    Tag,
)
from amlaki_marketplace.domain.value_objects.money import Money, Price

if TYPE_CHECKING:
    from datetime import datetime

    from amlaki_marketplace.domain.clock import Clock


@dataclass
class Property(AggregateRoot):
    """A real-estate listing owned by a seller."""

    code: ListingCode
    transaction_type: TransactionType
    seller_id: uuid.UUID
    property_type: PropertyType
    price: Price
    area: AreaInfo
    address: Address
    interior: Interior
    amenities: Amenities
    media: MediaCollection
    notes: Notes
    commission: ListingCommission
    listed_by: uuid.UUID | None = None
    buyer_id: uuid.UUID | None = None
    status: PropertyStatus = PropertyStatus.OFF_MARKET
    transaction_status: TransactionStatus = TransactionStatus.DRAFT
    moderation: ModerationStatus = ModerationStatus.PENDING_REVIEW
    tags: frozenset[Tag] = frozenset()
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    clock: Clock = field(default=SYSTEM_CLOCK, compare=False, repr=False)
    _events: list[DomainEvent] = field(
        default_factory=list, init=False, compare=False, repr=False
    )

    @classmethod
    def create(
        cls,
        code: ListingCode,
        transaction_type: TransactionType,
        seller_id: uuid.UUID,
        property_type: PropertyType,
        price: Price,
        area: AreaInfo,
        address: Address,
        interior: Interior,
        amenities: Amenities,
        media: MediaCollection,
        notes: Notes,
        commission: ListingCommission,
        *,
        listed_by: uuid.UUID | None = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Property:
        """Create a listing in Draft / OffMarket / PendingReview."""
        require_id(seller_id, "SellerId")
        now = clock.now()
        listing = cls(
            code=code,
            transaction_type=transaction_type,
            seller_id=seller_id,
            property_type=property_type,
            price=price,
            area=area,
            address=address,
            interior=interior,
            amenities=amenities,
            media=media,
            notes=notes,
            commission=commission,
            listed_by=listed_by,
            created_at=now,
            updated_at=now,
            clock=clock,
        )
        listing._record(
            EventType.LISTING_CREATED,
            None,
            listing.transaction_status,
            code=str(code),
            seller_id=str(seller_id),
        )
        return listing

    @property
    def is_closed(self) -> bool:
        return self.transaction_status == TransactionStatus.CLOSED

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    def approve_moderation(self) -> None:
        self._ensure_open("Closed listings cannot change moderation.")
        if self.moderation == ModerationStatus.APPROVED:
            return
        self.moderation = ModerationStatus.APPROVED
        self._changed(EventType.LISTING_MODERATED, moderation=str(self.moderation))

    def reject_moderation(self) -> None:
        """Reject the listing and take it off the market if it was live."""
        self._ensure_open("Closed listings cannot change moderation.")
        self.unpublish()
        self.moderation = ModerationStatus.REJECTED
        self._changed(EventType.LISTING_MODERATED, moderation=str(self.moderation))

    # ------------------------------------------------------------------
    # Publication workflow
    # ------------------------------------------------------------------

    def publish(self) -> None:
        new_status = self._transition("publish", "Only draft properties can be published.")
        if self.price.amount <= 0:
            raise BusinessRuleViolation("Price must be > 0 to publish.")
        if self.moderation != ModerationStatus.APPROVED:
            raise BusinessRuleViolation("Listing must be approved before publishing.")
        if self.media.count_of(MediaType.PHOTO) < 1:
            raise BusinessRuleViolation("At least one photo is required to publish.")

        self._move_to(new_status, PropertyStatus.AVAILABLE, EventType.LISTING_PUBLISHED)

    def unpublish(self) -> None:
        """Return a published listing to Draft. No-op in any other state."""
        if self.transaction_status != TransactionStatus.PUBLISHED:
            return
        new_status = self._transition("unpublish")
        self._move_to(new_status, PropertyStatus.OFF_MARKET, EventType.LISTING_UNPUBLISHED)

    def mark_pending(self) -> None:
        """Hold an available listing while a deal is being negotiated."""
        if self.transaction_status != TransactionStatus.PUBLISHED:
            raise BusinessRuleViolation("Only published listings can be put on hold.")
        if self.status == PropertyStatus.PENDING:
            return
        if self.status != PropertyStatus.AVAILABLE:
            raise BusinessRuleViolation("Only available listings can be put on hold.")
        self.status = PropertyStatus.PENDING
        self._changed(EventType.LISTING_UPDATED, status=str(self.status))

    def release_pending(self) -> None:
        if self.status != PropertyStatus.PENDING:
            return
        self.status = PropertyStatus.AVAILABLE
        self._changed(EventType.LISTING_UPDATED, status=str(self.status))

    def mark_as_sold(self, buyer_id: uuid.UUID) -> None:
        """Close the listing as sold to ``buyer_id``. Irreversible."""
        new_status = self._transition("mark_sold", "Only published listings can be sold.")
        if self.status == PropertyStatus.SOLD:
            raise BusinessRuleViolation("Property already sold.")
        require_id(buyer_id, "BuyerId")

        self.buyer_id = buyer_id
        self._move_to(
            new_status, PropertyStatus.SOLD, EventType.LISTING_SOLD, buyer_id=str(buyer_id)
        )

    # ------------------------------------------------------------------
    # Attribute mutators
    # ------------------------------------------------------------------

    def change_price(self, new_price: Price | Money) -> None:
        """Set a new asking price. No-op if the value is unchanged."""
        self._ensure_open("Closed listings cannot change price.")
        if isinstance(new_price, Money):
            if new_price.is_negative:
                raise BusinessRuleViolation("Price cannot be negative.")
            new_price = Price(new_price)

        if new_price == self.price:
            return
        old_price = self.price
        self.price = new_price
        self._changed(EventType.LISTING_UPDATED, old_price=str(old_price), price=str(new_price))

    def update_address(self, new_address: Address) -> None:
        self._ensure_open("Closed listings cannot change address.")
        self.address = new_address
        self._changed(EventType.LISTING_UPDATED, field="address")

    def replace_media(self, media: MediaCollection) -> None:
        self._ensure_open("Closed listings cannot change media.")
        self.media = media
        self._changed(EventType.LISTING_UPDATED, field="media", items=len(media))

    def add_tag(self, tag: Tag | str) -> None:
        tag = tag if isinstance(tag, Tag) else Tag(tag)
        if tag in self.tags:
            return
        self.tags = self.tags | {tag}
        self._changed(EventType.LISTING_UPDATED, tag_added=str(tag))

    def remove_tag(self, tag: Tag | str) -> None:
        tag = tag if isinstance(tag, Tag) else Tag(tag)
        if tag not in self.tags:
            return
        self.tags = self.tags - {tag}
        self._changed(EventType.LISTING_UPDATED, tag_removed=str(tag))

    def allowed_events(self) -> list[str]:
        return allowed_events(ListingStateMachine, self.transaction_status)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _transition(self, event_name: str, reason: str | None = None) -> TransactionStatus:
        return TransactionStatus(
            advance(ListingStateMachine, self.transaction_status, event_name, reason)
        )

    def _ensure_open(self, message: str) -> None:
        if self.is_closed:
            raise BusinessRuleViolation(message)

    def _move_to(
        self,
        new_status: TransactionStatus,
        availability: PropertyStatus,
        event_type: EventType,
        **metadata: object,
    ) -> None:
        old_status = self.transaction_status
        self.transaction_status = new_status
        self.status = availability
        self._touch()
        self._record(event_type, old_status, new_status, **metadata)

    def _changed(self, event_type: EventType, **metadata: object) -> None:
        self._touch()
        self._record(event_type, self.transaction_status, self.transaction_status, **metadata)
