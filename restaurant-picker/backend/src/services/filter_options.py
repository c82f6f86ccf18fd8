from __future__ import annotations

from typing import Iterable, Protocol

from sqlalchemy.orm import Session

from models import FilterOptions, FilterSelection
from services.restaurant_store import list_restaurants


class _Row(Protocol):
    county: str
    area: str
    cuisine: str


def resolve_options(rows: Iterable[_Row], selection: FilterSelection) -> FilterOptions:
    """Recompute cascading filter options and drop stale selections.

    Counties narrow areas; counties plus the surviving areas narrow cuisines.
    A selected area or cuisine that is no longer offered is removed so the
    selection never points at an empty combination.
    """
    rows = list(rows)
    counties = set(selection.counties)

    in_county = [r for r in rows if not counties or r.county in counties]
    area_options = sorted({r.area for r in in_county})
    areas = [a for a in selection.areas if a in area_options]

    area_set = set(areas)
    in_area = [r for r in in_county if not area_set or r.area in area_set]
    cuisine_options = sorted({r.cuisine for r in in_area})
    cuisines = [c for c in selection.cuisines if c in cuisine_options]

    return FilterOptions(
        counties=sorted({r.county for r in rows}),
        areas=area_options,
        cuisines=cuisine_options,
        selected=FilterSelection(counties=list(selection.counties), areas=areas, cuisines=cuisines),
    )


def resolve_from_store(session: Session, selection: FilterSelection) -> FilterOptions:
    return resolve_options(list_restaurants(session), selection)
