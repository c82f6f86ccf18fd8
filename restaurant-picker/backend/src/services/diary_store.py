from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import Configuration
from db import DiaryEntry, Restaurant
from errors import BadRequestError
from utils import clean_text

REQUIRED_FIELDS = ("restaurant_name", "photo_url", "visit_date")


def _parse_visit_date(value: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise BadRequestError(f"visit_date must be YYYY-MM-DD, got '{value}'")


def _data_uri_size(photo_url: str) -> int:
    # base64 payload decodes to ~3/4 of its length
    _, _, payload = photo_url.partition(",")
    return len(payload) * 3 // 4


def _validate_photo(cfg: Configuration, photo_url: str) -> None:
    lowered = photo_url[:16].lower()
    if lowered.startswith("data:image/"):
        size = _data_uri_size(photo_url)
        if size > cfg.diary_max_photo_bytes:
            raise BadRequestError(
                f"photo is too large ({size // 1024} KB); limit is {cfg.diary_max_photo_bytes // 1024} KB"
            )
        return
    if lowered.startswith(("http://", "https://")):
        return
    raise BadRequestError("photo_url must be an image data URI or an http(s) URL")


def _coerce_restaurant_id(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError("restaurant_id must be an integer")


def list_entries(session: Session, restaurant_id: Optional[int] = None) -> List[DiaryEntry]:
    stmt = select(DiaryEntry)
    if restaurant_id is not None:
        stmt = stmt.where(DiaryEntry.restaurant_id == restaurant_id)
    stmt = stmt.order_by(DiaryEntry.visit_date.desc(), DiaryEntry.created_at.desc(), DiaryEntry.id.desc())
    return list(session.scalars(stmt))


def add_entry(session: Session, cfg: Configuration, payload: Dict[str, Any]) -> DiaryEntry:
    fields = {k: clean_text(payload.get(k)) for k in REQUIRED_FIELDS}
    missing = [k for k in REQUIRED_FIELDS if not fields[k]]
    if missing:
        raise BadRequestError("Missing required fields: " + ", ".join(missing))

    visit_date = _parse_visit_date(fields["visit_date"])
    _validate_photo(cfg, fields["photo_url"])

    restaurant_id = _coerce_restaurant_id(payload.get("restaurant_id"))
    if restaurant_id is not None and session.get(Restaurant, restaurant_id) is None:
        logger.info("diary entry references missing restaurant id={}; storing without link", restaurant_id)
        restaurant_id = None

    entry = DiaryEntry(
        restaurant_id=restaurant_id,
        restaurant_name=fields["restaurant_name"],
        photo_url=fields["photo_url"],
        comment=clean_text(payload.get("comment")) or None,
        visit_date=visit_date,
    )
    try:
        session.add(entry)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(entry)
    logger.info("diary entry added id={} restaurant={}", entry.id, entry.restaurant_name)
    return entry


def remove_entry(session: Session, entry_id: int) -> bool:
    entry = session.get(DiaryEntry, entry_id)
    if entry is None:
        return False
    try:
        session.delete(entry)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    return True
