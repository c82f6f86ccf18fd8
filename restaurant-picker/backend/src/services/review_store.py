from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import Review
from models import PlaceReview


def cached_reviews(session: Session, restaurant_id: int) -> List[Review]:
    stmt = select(Review).where(Review.restaurant_id == restaurant_id).order_by(Review.id)
    return list(session.scalars(stmt))


def replace_reviews(session: Session, restaurant_id: int, reviews: Iterable[PlaceReview]) -> List[Review]:
    rows = [
        Review(
            restaurant_id=restaurant_id,
            source=r.source,
            author=r.author,
            rating=r.rating,
            text=r.text,
            date=r.date,
        )
        for r in reviews
    ]
    try:
        session.execute(delete(Review).where(Review.restaurant_id == restaurant_id))
        session.add_all(rows)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    return rows
