"""Listing Service: orchestrates the property listing lifecycle.

Cross-aggregate rules live here, never in the aggregates: a listing agent
must be allowed to list at creation time, and only moderators may
approve or reject a listing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from amlaki_marketplace.domain.aggregates import Property
from amlaki_marketplace.domain.clock import SYSTEM_CLOCK
from amlaki_marketplace.domain.enums import UserRole
from amlaki_marketplace.domain.exceptions import AggregateNotFoundError, BusinessRuleViolation
from amlaki_marketplace.logging_config import bind_aggregate, get_logger

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable

    from amlaki_marketplace.domain.clock import Clock
    from amlaki_marketplace.domain.enums import PropertyType, TransactionType
    from amlaki_marketplace.domain.value_objects import (
        Address,
        Amenities,
        AreaInfo,
        Interior,
        ListingCode,
        ListingCommission,
        MediaCollection,
        Money,
        Notes,
        Price,
        RoleGrants,
        Tag,
    )
    from amlaki_marketplace.repositories import AgentRepository, EventLog, PropertyRepository

logger = get_logger(__name__)

_MODERATOR_ROLES = (UserRole.MODERATOR, UserRole.ADMIN)


class ListingService:
    """Manages listing creation, moderation, publication and sale."""

    def __init__(
        self,
        listings: PropertyRepository,
        agents: AgentRepository,
        events: EventLog,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        self._listings = listings
        self._agents = agents
        self._events = events
        self._clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_listing(
        self,
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
        agent_id: uuid.UUID | None = None,
    ) -> Property:
        """Create a draft listing, optionally on behalf of a listing agent."""
        if agent_id is not None:
            agent = self._agents.get_by_id(agent_id)
            if agent is None:
                raise AggregateNotFoundError("Agent", str(agent_id))
            if not agent.can_list_property_now(self._clock.now()):
                logger.warning(
                    "listing.agent_not_eligible", agent_id=str(agent_id), status=str(agent.status)
                )
                raise BusinessRuleViolation(
                    "Agent must be active with a valid license and verified identity to list."
                )

        listing = Property.create(
            code,
            transaction_type,
            seller_id,
            property_type,
            price,
            area,
            address,
            interior,
            amenities,
            media,
            notes,
            commission,
            listed_by=agent_id,
            clock=self._clock,
        )
        self._listings.add(listing)
        self._flush(listing)
        logger.info("listing.created", listing_id=str(listing.id), code=str(code))
        return listing

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    def approve(self, listing_id: uuid.UUID, moderator: RoleGrants) -> Property:
        self._ensure_moderator(moderator)
        return self._apply(listing_id, "listing.approved", lambda p: p.approve_moderation())

    def reject(self, listing_id: uuid.UUID, moderator: RoleGrants) -> Property:
        self._ensure_moderator(moderator)
        return self._apply(listing_id, "listing.rejected", lambda p: p.reject_moderation())

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def publish(self, listing_id: uuid.UUID) -> Property:
        return self._apply(listing_id, "listing.published", lambda p: p.publish())

    def unpublish(self, listing_id: uuid.UUID) -> Property:
        return self._apply(listing_id, "listing.unpublished", lambda p: p.unpublish())

    def mark_pending(self, listing_id: uuid.UUID) -> Property:
        return self._apply(listing_id, "listing.on_hold", lambda p: p.mark_pending())

    def release_pending(self, listing_id: uuid.UUID) -> Property:
        return self._apply(listing_id, "listing.released", lambda p: p.release_pending())

    def mark_as_sold(self, listing_id: uuid.UUID, buyer_id: uuid.UUID) -> Property:
        return self._apply(
            listing_id,
            "listing.sold",
            lambda p: p.mark_as_sold(buyer_id),
            buyer_id=str(buyer_id),
        )

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def change_price(self, listing_id: uuid.UUID, new_price: Price | Money) -> Property:
        return self._apply(
            listing_id,
            "listing.price_changed",
            lambda p: p.change_price(new_price),
            price=str(new_price),
        )

    def update_address(self, listing_id: uuid.UUID, address: Address) -> Property:
        return self._apply(listing_id, "listing.address_updated", lambda p: p.update_address(address))

    def replace_media(self, listing_id: uuid.UUID, media: MediaCollection) -> Property:
        return self._apply(listing_id, "listing.media_replaced", lambda p: p.replace_media(media))

    def add_tag(self, listing_id: uuid.UUID, tag: Tag | str) -> Property:
        return self._apply(listing_id, "listing.tag_added", lambda p: p.add_tag(tag))

    def remove_tag(self, listing_id: uuid.UUID, tag: Tag | str) -> Property:
        return self._apply(listing_id, "listing.tag_removed", lambda p: p.remove_tag(tag))

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_listing(self, listing_id: uuid.UUID) -> Property:
        return self._get_listing_or_raise(listing_id)

    def describe(self, listing_id: uuid.UUID) -> dict:
        """Get listing status axes with allowed workflow events."""
        listing = self._get_listing_or_raise(listing_id)
        return {
            "listing_id": str(listing.id),
            "code": str(listing.code),
            "status": str(listing.status),
            "transaction_status": str(listing.transaction_status),
            "moderation": str(listing.moderation),
            "allowed_events": listing.allowed_events(),
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_moderator(grants: RoleGrants) -> None:
        if not any(grants.has_role(role) for role in _MODERATOR_ROLES):
            raise BusinessRuleViolation("Only moderators can moderate listings.")

    def _get_listing_or_raise(self, listing_id: uuid.UUID) -> Property:
        listing = self._listings.get_by_id(listing_id)
        if listing is None:
            raise AggregateNotFoundError("Property", str(listing_id))
        return listing

    def _apply(
        self,
        listing_id: uuid.UUID,
        log_event: str,
        action: Callable[[Property], object],
        **log_fields: object,
    ) -> Property:
        listing = self._get_listing_or_raise(listing_id)
        with bind_aggregate(listing_id=listing_id):
            try:
                action(listing)
            except BusinessRuleViolation as err:
                logger.warning(
                    "listing.rule_violation", attempted=log_event, code=err.code, error=err.message
                )
                raise
            self._listings.save(listing)
            self._flush(listing)
            logger.info(
                log_event,
                status=listing.status,
                transaction_status=listing.transaction_status,
                **log_fields,
            )
        return listing

    def _flush(self, listing: Property) -> None:
        self._events.append(listing.pull_events())
