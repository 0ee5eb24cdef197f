"""Time source protocol.

Every time-sensitive rule (license expiry, affiliation end, contract and
payment stamping) reads "now" from a Clock handed to the aggregate, so
tests can pin time with FixedClock.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current UTC time."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC datetime."""
        ...


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime; naive values are read as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, at: datetime) -> None:
        self._at = as_utc(at)

    def now(self) -> datetime:
        return self._at

    def set(self, at: datetime) -> None:
        self._at = as_utc(at)

    def advance(self, delta: timedelta) -> datetime:
        self._at = self._at + delta
        return self._at


SYSTEM_CLOCK = SystemClock()
