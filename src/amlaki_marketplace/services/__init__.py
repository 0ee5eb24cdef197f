"""Application services: use case orchestration."""

from amlaki_marketplace.services.agent_service import AgentService
from amlaki_marketplace.services.deal_service import DealService
from amlaki_marketplace.services.listing_service import ListingService

__all__ = ["AgentService", "DealService", "ListingService"]
