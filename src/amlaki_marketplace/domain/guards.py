"""Precondition helpers shared by value objects and aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from amlaki_marketplace.domain.exceptions import BusinessRuleViolation

if TYPE_CHECKING:
    import uuid


def require_text(value: str | None, name: str) -> str:
    """Return ``value`` trimmed, or raise if it is missing or blank."""
    if value is None or not value.strip():
        raise BusinessRuleViolation(f"{name} is required.")
    return value.strip()


def optional_text(value: str | None) -> str | None:
    """Return ``value`` trimmed, or None if it is missing or blank."""
    if value is None or not value.strip():
        return None
    return value.strip()


def ensure(condition: bool, message: str) -> None:
    if not condition:
        raise BusinessRuleViolation(message)


def require_id(value: uuid.UUID | None, name: str) -> uuid.UUID:
    """Return ``value``, or raise if it is missing or the nil UUID."""
    if value is None or value.int == 0:
        raise BusinessRuleViolation(f"{name} is required.")
    return value
