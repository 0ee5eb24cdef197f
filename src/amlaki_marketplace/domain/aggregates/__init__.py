"""Aggregates: the consistency boundaries mutated by the orchestration layer."""

from amlaki_marketplace.domain.aggregates.agent import Agent
from amlaki_marketplace.domain.aggregates.deal import Deal
from amlaki_marketplace.domain.aggregates.property import Property

__all__ = ["Agent", "Deal", "Property"]
