"""Listing attribute value objects.

Everything a Property aggregate describes about the real estate itself:
its business key, address, areas, rooms, amenities, media, notes, tags and
the commission advertised on the listing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from amlaki_marketplace.config import get_settings
from amlaki_marketplace.domain.enums import CoolingSystem, Furnishing, HeatingSystem, MediaType
from amlaki_marketplace.domain.guards import ensure, optional_text, require_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from amlaki_marketplace.domain.value_objects.money import Money

_LISTING_CODE_CHARS = re.compile(r"^[A-Z0-9_-]+$")


@dataclass(frozen=True)
class ListingCode:
    """Human-facing unique key of a listing, e.g. ``TEH-0042``."""

    value: str

    @classmethod
    def create(cls, code: str) -> ListingCode:
        settings = get_settings()
        code = require_text(code, "Listing code").upper()
        ensure(
            settings.listing_code_min_length <= len(code) <= settings.listing_code_max_length,
            f"Listing code length must be "
            f"{settings.listing_code_min_length}-{settings.listing_code_max_length}.",
        )
        ensure(
            _LISTING_CODE_CHARS.match(code) is not None,
            "Listing code contains invalid chars.",
        )
        return cls(code)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        ensure(-90 <= self.latitude <= 90, "Latitude out of range.")
        ensure(-180 <= self.longitude <= 180, "Longitude out of range.")

    def __str__(self) -> str:
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class Address:
    city: str
    neighborhood: str
    line: str
    postal_code: str
    location: GeoLocation

    def __post_init__(self) -> None:
        object.__setattr__(self, "city", require_text(self.city, "City"))
        object.__setattr__(
            self, "neighborhood", require_text(self.neighborhood, "Neighborhood")
        )
        object.__setattr__(self, "line", require_text(self.line, "Address line"))
        object.__setattr__(self, "postal_code", require_text(self.postal_code, "Postal code"))


@dataclass(frozen=True)
class AreaInfo:
    land_sqm: Decimal
    built_sqm: Decimal
    floor_number: int = 0

    def __post_init__(self) -> None:
        ensure(Decimal(str(self.land_sqm)) >= 0, "Land area cannot be negative.")
        ensure(Decimal(str(self.built_sqm)) > 0, "Built area must be positive.")


@dataclass(frozen=True)
class Interior:
    bedrooms: int
    bathrooms: int
    parking: int = 0

    def __post_init__(self) -> None:
        ensure(
            self.bedrooms >= 0 and self.bathrooms >= 0 and self.parking >= 0,
            "Counts cannot be negative.",
        )


@dataclass(frozen=True)
class Amenities:
    elevator: bool = False
    balcony: bool = False
    garden_sqm: Decimal | None = None
    heating: HeatingSystem = HeatingSystem.NONE
    cooling: CoolingSystem = CoolingSystem.NONE
    furnishing: Furnishing = Furnishing.UNFURNISHED
    special_items: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.garden_sqm is not None:
            ensure(Decimal(str(self.garden_sqm)) >= 0, "Garden size cannot be negative.")
        items = (s.strip() for s in self.special_items)
        object.__setattr__(self, "special_items", tuple(dict.fromkeys(s for s in items if s)))


@dataclass(frozen=True)
class MediaItem:
    """A photo, video or floor plan URL. Equality ignores sort order."""

    url: str
    type: MediaType
    sort_order: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", require_text(self.url, "Media url"))


@dataclass(frozen=True)
class MediaCollection:
    """Ordered, de-duplicated media of a listing."""

    items: tuple[MediaItem, ...] = ()

    def __post_init__(self) -> None:
        unique = list(dict.fromkeys(self.items))
        unique.sort(key=lambda item: item.sort_order)
        limit = get_settings().max_media_items
        ensure(len(unique) <= limit, f"Maximum {limit} media items allowed.")
        object.__setattr__(self, "items", tuple(unique))

    def count_of(self, media_type: MediaType) -> int:
        return sum(1 for item in self.items if item.type == media_type)

    def replace(self, items: Iterable[MediaItem]) -> MediaCollection:
        return MediaCollection(tuple(items))

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Notes:
    public_text: str = ""
    internal_notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_text", (self.public_text or "").strip())
        object.__setattr__(self, "internal_notes", optional_text(self.internal_notes))


@dataclass(frozen=True)
class ListingCommission:
    """Commission advertised on a listing."""

    amount: Money

    def __post_init__(self) -> None:
        ensure(not self.amount.is_negative, "Commission cannot be negative.")


@dataclass(frozen=True)
class Tag:
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", require_text(self.value, "Tag").lower())

    def __str__(self) -> str:
        return self.value
