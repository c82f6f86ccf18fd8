"""Data models for the restaurant picker."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PlacePhoto:
    name: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class PlaceReview:
    author: str
    rating: Optional[float]
    text: str
    date: str  # relative label, e.g. "2 weeks ago"
    author_photo: Optional[str] = None
    source: str = "google"


@dataclass
class PlaceRecord:
    """Normalized place returned by the external lookup."""

    place_id: str
    name: str
    address: str = ""
    photos: list[PlacePhoto] = field(default_factory=list)
    maps_url: Optional[str] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    price_level: Optional[str] = None
    types: list[str] = field(default_factory=list)
    reviews: list[PlaceReview] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PhotoMedia:
    content: bytes
    content_type: str = "image/jpeg"


@dataclass
class EmbedMetadata:
    title: str = ""
    author_name: Optional[str] = None

    @property
    def text(self) -> str:
        return self.title.strip()


@dataclass
class MapLinkTarget:
    place_id: Optional[str] = None
    name: Optional[str] = None
    matcher: Optional[str] = None


@dataclass
class CandidateRecord:
    """Unconfirmed restaurant fields awaiting user confirmation."""

    name: str
    address: str
    county: str
    area: str
    cuisine: str
    price: str
    price_level: Optional[str]
    types: list[str] = field(default_factory=list)
    place_id: Optional[str] = None
    google_maps_url: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "area": self.area,
            "county": self.county,
            "cuisine": self.cuisine,
            "price": self.price,
            "priceLevel": self.price_level,
            "types": list(self.types),
            "placeId": self.place_id,
            "googleMapsUrl": self.google_maps_url,
        }


@dataclass
class RestaurantFilters:
    counties: list[str] = field(default_factory=list)
    areas: list[str] = field(default_factory=list)
    cuisines: list[str] = field(default_factory=list)
    prices: list[str] = field(default_factory=list)
    favorites_only: bool = False

    def is_empty(self) -> bool:
        return not (self.counties or self.areas or self.cuisines or self.prices or self.favorites_only)


@dataclass
class FilterSelection:
    counties: list[str] = field(default_factory=list)
    areas: list[str] = field(default_factory=list)
    cuisines: list[str] = field(default_factory=list)


@dataclass
class FilterOptions:
    counties: list[str]
    areas: list[str]
    cuisines: list[str]
    selected: FilterSelection

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
