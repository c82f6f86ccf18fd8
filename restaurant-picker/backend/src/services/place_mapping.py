from __future__ import annotations

from typing import Iterable, Optional

from mappings import LinkMappings
from models import CandidateRecord, PlaceRecord


def cuisine_for_types(types: Iterable[str], mappings: LinkMappings) -> str:
    """First place tag with a known cuisine wins, in the place's tag order."""
    for t in types:
        cuisine = mappings.cuisine_by_type.get(t)
        if cuisine:
            return cuisine
    return mappings.default_cuisine


def price_for_level(price_level: Optional[str], mappings: LinkMappings) -> str:
    if not price_level:
        return mappings.default_price
    return mappings.price_by_level.get(price_level, mappings.default_price)


def region_for_address(address: Optional[str], mappings: LinkMappings) -> str:
    lowered = (address or "").lower()
    if lowered:
        for rule in mappings.region_rules:
            if any(needle.lower() in lowered for needle in rule.needles):
                return rule.region
    return mappings.default_region


def area_for_address(address: Optional[str]) -> str:
    # "Street, City, State ZIP, Country" -> City
    parts = (address or "").split(",")
    if len(parts) >= 3:
        return parts[-3].strip() or parts[1].strip()
    if len(parts) >= 2:
        return parts[1].strip()
    return ""


def build_candidate(place: PlaceRecord, mappings: LinkMappings) -> CandidateRecord:
    price_level = place.price_level or mappings.default_price_level
    return CandidateRecord(
        name=place.name,
        address=place.address,
        county=region_for_address(place.address, mappings),
        area=area_for_address(place.address),
        cuisine=cuisine_for_types(place.types, mappings),
        price=price_for_level(price_level, mappings),
        price_level=price_level,
        types=list(place.types),
        place_id=place.place_id or None,
        google_maps_url=place.maps_url,
    )
