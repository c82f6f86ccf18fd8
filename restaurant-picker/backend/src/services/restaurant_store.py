from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import Configuration
from db import DiaryEntry, Restaurant, Review
from errors import BadRequestError, DuplicateError
from models import RestaurantFilters
from utils import clean_text

PRICE_TIERS = ("$", "$$", "$$$", "$$$$")
DEFAULT_PRICE = "$$"
REQUIRED_FIELDS = ("name", "county", "area", "cuisine")


def _apply_filters(stmt, filters: RestaurantFilters):
    if filters.favorites_only:
        stmt = stmt.where(Restaurant.is_favorite.is_(True))
    if filters.counties:
        stmt = stmt.where(Restaurant.county.in_(filters.counties))
    if filters.areas:
        stmt = stmt.where(Restaurant.area.in_(filters.areas))
    if filters.cuisines:
        stmt = stmt.where(Restaurant.cuisine.in_(filters.cuisines))
    if filters.prices:
        stmt = stmt.where(Restaurant.price.in_(filters.prices))
    return stmt


def list_restaurants(session: Session) -> List[Restaurant]:
    return list(session.scalars(select(Restaurant).order_by(Restaurant.name, Restaurant.id)))


def list_filtered(session: Session, filters: RestaurantFilters) -> List[Restaurant]:
    """Rows matching every non-empty dimension (OR within a dimension)."""
    stmt = _apply_filters(select(Restaurant), filters).order_by(Restaurant.name, Restaurant.id)
    return list(session.scalars(stmt))


def pick_random(
    session: Session,
    filters: RestaurantFilters,
    rng: Optional[random.Random] = None,
) -> Optional[Restaurant]:
    rows = list_filtered(session, filters)
    if not rows:
        return None
    rng = rng or random
    return rows[rng.randrange(len(rows))]


def get_restaurant(session: Session, restaurant_id: int) -> Optional[Restaurant]:
    return session.get(Restaurant, restaurant_id)


def count_restaurants(session: Session) -> int:
    return int(session.scalar(select(func.count()).select_from(Restaurant)) or 0)


def find_duplicate(session: Session, name: str, county: str) -> Optional[Restaurant]:
    # SQLite lower() only folds ASCII, so names are compared after casefold()
    key = name.casefold()
    stmt = select(Restaurant).where(Restaurant.county == county).order_by(Restaurant.id)
    for restaurant in session.scalars(stmt):
        if (restaurant.name or "").casefold() == key:
            return restaurant
    return None


def add_restaurant(session: Session, cfg: Configuration, payload: Dict[str, Any]) -> Restaurant:
    fields = {k: clean_text(payload.get(k)) for k in REQUIRED_FIELDS}
    missing = [k for k in REQUIRED_FIELDS if not fields[k]]
    if missing:
        raise BadRequestError("Missing required fields: " + ", ".join(missing))

    county = fields["county"].upper()
    if cfg.regions and county not in cfg.regions:
        raise BadRequestError(f"Unknown county '{fields['county']}'. Expected one of: {', '.join(cfg.regions)}")

    price = clean_text(payload.get("price")) or DEFAULT_PRICE
    if price not in PRICE_TIERS:
        raise BadRequestError(f"Invalid price '{price}'. Expected one of: {', '.join(PRICE_TIERS)}")

    existing = find_duplicate(session, fields["name"], county)
    if existing is not None:
        logger.info("duplicate restaurant rejected name={} county={} existing_id={}", fields["name"], county, existing.id)
        raise DuplicateError(f"{existing.name} already exists in {county}", existing)

    restaurant = Restaurant(
        name=fields["name"],
        county=county,
        area=fields["area"],
        cuisine=fields["cuisine"],
        price=price,
        place_id=clean_text(payload.get("place_id")) or None,
        google_maps_url=clean_text(payload.get("google_maps_url")) or None,
        is_favorite=False,
    )
    try:
        session.add(restaurant)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(restaurant)
    logger.info("restaurant added id={} name={} county={}", restaurant.id, restaurant.name, restaurant.county)
    return restaurant


def remove_restaurant(session: Session, restaurant_id: int) -> bool:
    """Delete a restaurant; diary entries keep their name and lose the link."""
    restaurant = session.get(Restaurant, restaurant_id)
    if restaurant is None:
        return False
    try:
        session.execute(
            update(DiaryEntry)
            .where(DiaryEntry.restaurant_id == restaurant_id)
            .values(restaurant_id=None)
        )
        session.execute(delete(Review).where(Review.restaurant_id == restaurant_id))
        session.delete(restaurant)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    logger.info("restaurant removed id={}", restaurant_id)
    return True


def toggle_favorite(session: Session, restaurant_id: int) -> Optional[Restaurant]:
    restaurant = session.get(Restaurant, restaurant_id)
    if restaurant is None:
        return None
    try:
        restaurant.is_favorite = not bool(restaurant.is_favorite)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(restaurant)
    return restaurant


def distinct_counties(session: Session) -> List[str]:
    stmt = select(Restaurant.county).distinct().order_by(Restaurant.county)
    return list(session.scalars(stmt))


def distinct_areas_for(session: Session, counties: List[str]) -> List[str]:
    stmt = select(Restaurant.area).distinct()
    if counties:
        stmt = stmt.where(Restaurant.county.in_(counties))
    return list(session.scalars(stmt.order_by(Restaurant.area)))


def distinct_cuisines_for(session: Session, counties: List[str], areas: List[str]) -> List[str]:
    stmt = select(Restaurant.cuisine).distinct()
    if counties:
        stmt = stmt.where(Restaurant.county.in_(counties))
    if areas:
        stmt = stmt.where(Restaurant.area.in_(areas))
    return list(session.scalars(stmt.order_by(Restaurant.cuisine)))
