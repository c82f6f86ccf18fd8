from __future__ import annotations

from loguru import logger
from sqlalchemy.orm import Session

from db import Restaurant
from services.restaurant_store import count_restaurants

# county, area, cuisine, name, price
STARTER_RESTAURANTS = [
    ("LA", "Ktown", "Korean", "MDK", "$"),
    ("LA", "Ktown", "Korean", "Baekjeong", "$$"),
    ("LA", "Ktown", "Chinese", "Liu's Cafe", "$"),
    ("LA", "Ktown", "Korean", "Borit Gogae", "$$"),
    ("LA", "Ktown", "Korean", "Yetgol", "$"),
    ("LA", "Ktown", "Korean", "Park's BBQ", "$"),
    ("LA", "Ktown", "Korean", "Sun Nong Dan", "$$"),
    ("LA", "Ktown", "Western", "Boiling Crab", "$$"),
    ("LA", "Ktown", "Korean", "Daedo Sikdang", "$$$"),
    ("LA", "Ktown", "Korean", "Budonoki", "$$$"),
    ("LA", "Silverlake", "Chinese", "Woon", "$"),
    ("LA", "Silverlake", "Japanese", "Izakaya Osen", "$$$"),
    ("LA", "Silverlake", "Thai", "The Silver Lake House", "$"),
    ("LA", "Silverlake", "Mexican", "Casita Del Campo", "$"),
    ("LA", "Larchmont", "Western", "Etra", "$$$"),
    ("LA", "Larchmont", "Chinese", "Sua", "$$"),
    ("LA", "Echo Park", "Japanese", "Gyoza Bar", "$$"),
    ("LA", "Echo Park", "Western", "Triple Beam Pizza", "$"),
    ("LA", "Echo Park", "Western", "The Lonely Oyster", "$$$"),
    ("LA", "Los Feliz", "Western", "Found Oyster", "$$$"),
    ("LA", "Los Feliz", "Western", "Little Dom's", "$$"),
    ("LA", "Mid Wilshire", "Mexican", "Leo's Tacos Truck", "$"),
    ("LA", "Grove", "Mexican", "Escuela Taqueria", "$"),
    ("LA", "WEHO", "Japanese", "Toku Unagi & Sushi", "$$$$"),
    ("LA", "WEHO", "Brunch", "The Butcher, The Baker, The Cappuccino Maker", "$$"),
    ("LA", "Beverly Grove", "Japanese", "TAKAGI COFFEE WEST THIRD", "$$"),
    ("LA", "BH", "Western", "Matu", "$$$$"),
    ("LA", "BH", "Japanese", "Nozawa Bar", "$$$$"),
    ("LA", "BH", "Japanese", "Sugarfish", "$$"),
]


def seed_if_empty(session: Session) -> int:
    """Insert the starter list when the restaurants table is empty."""
    if count_restaurants(session) > 0:
        return 0
    session.add_all(
        Restaurant(county=county, area=area, cuisine=cuisine, name=name, price=price)
        for county, area, cuisine, name, price in STARTER_RESTAURANTS
    )
    session.commit()
    logger.info("seeded {} starter restaurants", len(STARTER_RESTAURANTS))
    return len(STARTER_RESTAURANTS)
