"""SQLAlchemy tables and session handling."""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.utcnow()


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    county = Column(Text, nullable=False, index=True)
    area = Column(Text, nullable=False, index=True)
    cuisine = Column(Text, nullable=False, index=True)
    price = Column(Text, nullable=False, default="$$")
    place_id = Column(Text, nullable=True)
    google_maps_url = Column(Text, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "county": self.county,
            "area": self.area,
            "cuisine": self.cuisine,
            "price": self.price,
            "place_id": self.place_id,
            "google_maps_url": self.google_maps_url,
            "is_favorite": bool(self.is_favorite),
            "created_at": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}', county='{self.county}')>"


class Review(Base):
    """Cached review snippet; the external lookup stays the source of truth."""

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    source = Column(Text, nullable=False)
    author = Column(Text, nullable=True)
    rating = Column(Float, nullable=True)
    text = Column(Text, nullable=True)
    date = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "author": self.author or "Anonymous",
            "rating": self.rating,
            "text": self.text or "",
            "date": self.date or "",
        }


class DiaryEntry(Base):
    __tablename__ = "food_diary"

    id = Column(Integer, primary_key=True)
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    restaurant_name = Column(Text, nullable=False)
    photo_url = Column(Text, nullable=False)
    comment = Column(Text, nullable=True)
    visit_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "restaurant_name": self.restaurant_name,
            "photo_url": self.photo_url,
            "comment": self.comment,
            "visit_date": _iso(self.visit_date),
            "created_at": _iso(self.created_at),
        }


def make_engine(url: str) -> Engine:
    kwargs: dict[str, Any] = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # a single shared connection keeps the in-memory database alive
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    engine = create_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):  # type: ignore[no-untyped-def]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)
    logger.info("database ready dialect={} tables={}", engine.dialect.name, sorted(Base.metadata.tables))


@lru_cache(maxsize=4)
def session_factory(url: str) -> sessionmaker:
    engine = make_engine(url)
    init_db(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
