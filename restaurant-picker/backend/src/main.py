from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, Iterator, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Configuration
from db import session_factory
from errors import AppError, BadRequestError, NotFoundError, UpstreamError
from mappings import LinkMappings
from models import FilterSelection, PlaceReview, RestaurantFilters
from services.diary_store import add_entry, list_entries, remove_entry
from services.filter_options import resolve_from_store
from services.google_places import GooglePlacesClient, PlacesConfigError, PlacesUpstreamError
from services.link_ingest import LinkIngestor
from services.restaurant_store import (
    PRICE_TIERS,
    add_restaurant,
    distinct_areas_for,
    distinct_cuisines_for,
    get_restaurant,
    list_filtered,
    list_restaurants,
    pick_random,
    remove_restaurant,
    toggle_favorite,
)
from services.review_store import cached_reviews, replace_reviews
from services.seed import seed_if_empty
from services.social_embed import SocialEmbedClient
from utils import split_csv


@lru_cache(maxsize=1)
def get_config() -> Configuration:
    return Configuration.from_env()


@lru_cache(maxsize=4)
def _load_mappings(path: Optional[str]) -> LinkMappings:
    return LinkMappings.load(path)


def get_session(cfg: Configuration = Depends(get_config)) -> Iterator[Session]:
    session = session_factory(cfg.database_url)()
    try:
        yield session
    finally:
        session.close()


def get_places_client(cfg: Configuration = Depends(get_config)) -> GooglePlacesClient:
    return GooglePlacesClient(cfg)


def get_embed_client(cfg: Configuration = Depends(get_config)) -> SocialEmbedClient:
    return SocialEmbedClient(cfg)


def get_link_ingestor(
    cfg: Configuration = Depends(get_config),
    places: GooglePlacesClient = Depends(get_places_client),
    embeds: SocialEmbedClient = Depends(get_embed_client),
) -> LinkIngestor:
    return LinkIngestor(
        places,
        embeds,
        mappings=_load_mappings(cfg.link_mappings_path),
        candidate_limit=cfg.social_candidate_limit,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    cfg = get_config()
    logger.info("cfg: {}", cfg.log_summary())
    factory = session_factory(cfg.database_url)
    if cfg.seed_on_startup:
        with factory() as session:
            seed_if_empty(session)
    yield


app = FastAPI(title="Restaurant Picker", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error rendering ──────────────────────────────────────────────────────


@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse({"error": "Invalid request: " + "; ".join(parts)}, status_code=400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(PlacesConfigError)
async def places_config_handler(_request: Request, exc: PlacesConfigError) -> JSONResponse:
    logger.error("places lookup not configured: {}", exc)
    return JSONResponse({"error": "Google Places API key not configured"}, status_code=500)


@app.exception_handler(PlacesUpstreamError)
async def places_upstream_handler(_request: Request, exc: PlacesUpstreamError) -> JSONResponse:
    logger.warning("places lookup failed: {}", exc)
    return JSONResponse({"error": "Place lookup failed"}, status_code=500)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database error: {}", exc)
    return JSONResponse({"error": "Database error"}, status_code=500)


@app.exception_handler(Exception)
async def unexpected_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error: {}", exc)
    return JSONResponse({"error": "internal error"}, status_code=500)


# ── Payloads ─────────────────────────────────────────────────────────────


class RestaurantCreateRequest(BaseModel):
    name: Optional[str] = None
    county: Optional[str] = None
    area: Optional[str] = None
    cuisine: Optional[str] = None
    price: Optional[str] = Field(None, description="$, $$, $$$ or $$$$; defaults to $$")
    place_id: Optional[str] = None
    google_maps_url: Optional[str] = None


class ParseLinkRequest(BaseModel):
    link: Optional[str] = Field(None, description="Google Maps, TikTok or Instagram link")
    caption: Optional[str] = Field(None, description="Post caption when the platform hides it")


class DiaryCreateRequest(BaseModel):
    restaurant_id: Optional[int] = None
    restaurant_name: Optional[str] = None
    photo_url: Optional[str] = Field(None, description="Downscaled image as a data URI")
    comment: Optional[str] = None
    visit_date: Optional[str] = Field(None, description="YYYY-MM-DD")


def _filters(
    counties: List[str] = Query(default=[]),
    areas: List[str] = Query(default=[]),
    cuisines: List[str] = Query(default=[]),
    prices: List[str] = Query(default=[]),
    favorites: bool = Query(default=False),
) -> RestaurantFilters:
    return RestaurantFilters(
        counties=split_csv(counties),
        areas=split_csv(areas),
        cuisines=split_csv(cuisines),
        prices=split_csv(prices),
        favorites_only=favorites,
    )


def _review_payload(review: PlaceReview) -> Dict[str, Any]:
    return {
        "source": review.source,
        "author": review.author,
        "authorPhoto": review.author_photo,
        "rating": review.rating,
        "text": review.text,
        "date": review.date,
    }


# ── Health ───────────────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/health/db")
def health_db(session: Session = Depends(get_session)) -> dict:
    session.execute(text("SELECT 1"))
    return {"ok": True}


# ── Restaurants ──────────────────────────────────────────────────────────


@app.get("/api/restaurants")
def restaurants_list(
    filters: RestaurantFilters = Depends(_filters),
    session: Session = Depends(get_session),
) -> List[dict]:
    rows = list_restaurants(session) if filters.is_empty() else list_filtered(session, filters)
    return [r.to_dict() for r in rows]


@app.post("/api/restaurants", status_code=201)
def restaurants_add(
    body: RestaurantCreateRequest,
    cfg: Configuration = Depends(get_config),
    session: Session = Depends(get_session),
) -> dict:
    restaurant = add_restaurant(session, cfg, body.model_dump())
    return restaurant.to_dict()


@app.get("/api/restaurants/random")
def restaurants_random(
    filters: RestaurantFilters = Depends(_filters),
    session: Session = Depends(get_session),
) -> dict:
    restaurant = pick_random(session, filters)
    if restaurant is None:
        raise NotFoundError("No restaurants match your filters")
    return restaurant.to_dict()


@app.get("/api/restaurants/{restaurant_id}")
def restaurants_get(restaurant_id: int, session: Session = Depends(get_session)) -> dict:
    restaurant = get_restaurant(session, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    return restaurant.to_dict()


@app.delete("/api/restaurants/{restaurant_id}")
def restaurants_delete(restaurant_id: int, session: Session = Depends(get_session)) -> dict:
    if not remove_restaurant(session, restaurant_id):
        raise NotFoundError("Restaurant not found")
    return {"success": True}


@app.post("/api/restaurants/{restaurant_id}/favorite")
def restaurants_toggle_favorite(restaurant_id: int, session: Session = Depends(get_session)) -> dict:
    restaurant = toggle_favorite(session, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    return restaurant.to_dict()


# ── Filter options ───────────────────────────────────────────────────────


@app.get("/api/filters")
def filter_options(
    kind: Optional[str] = Query(default=None, alias="type"),
    counties: List[str] = Query(default=[]),
    areas: List[str] = Query(default=[]),
    cuisines: List[str] = Query(default=[]),
    session: Session = Depends(get_session),
) -> dict:
    selection = FilterSelection(
        counties=split_csv(counties),
        areas=split_csv(areas),
        cuisines=split_csv(cuisines),
    )
    if kind == "areas":
        return {"areas": distinct_areas_for(session, selection.counties)}
    if kind == "cuisines":
        return {"cuisines": distinct_cuisines_for(session, selection.counties, selection.areas)}
    if kind is not None:
        raise BadRequestError("type must be 'areas' or 'cuisines'")

    options = resolve_from_store(session, selection)
    return {**options.to_dict(), "prices": list(PRICE_TIERS)}


# ── Places ───────────────────────────────────────────────────────────────


@app.post("/api/places/parse-link")
def places_parse_link(body: ParseLinkRequest, ingestor: LinkIngestor = Depends(get_link_ingestor)) -> dict:
    if not body.link or not body.link.strip():
        raise BadRequestError("Link is required")
    return ingestor.parse(body.link, caption=body.caption)


@app.get("/api/places/search")
def places_search(
    query: Optional[str] = None,
    places: GooglePlacesClient = Depends(get_places_client),
) -> dict:
    if not query or not query.strip():
        raise BadRequestError("Query parameter is required")
    try:
        place = places.text_search(query.strip())
    except PlacesUpstreamError as exc:
        raise UpstreamError("Failed to search for place", status_code=exc.status_code or 500)
    if place is None:
        raise NotFoundError("Place not found")
    return place.to_dict()


@app.get("/api/places/photo")
def places_photo(
    photo_name: Optional[str] = Query(default=None, alias="photoName"),
    max_width: Optional[int] = Query(default=None, alias="maxWidth", gt=0),
    max_height: Optional[int] = Query(default=None, alias="maxHeight", gt=0),
    places: GooglePlacesClient = Depends(get_places_client),
) -> Response:
    if not photo_name:
        raise BadRequestError("photoName parameter is required")
    try:
        media = places.fetch_photo(photo_name, max_width, max_height)
    except PlacesUpstreamError as exc:
        raise UpstreamError("Failed to fetch photo", status_code=exc.status_code or 500)
    return Response(
        content=media.content,
        media_type=media.content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )


# ── Reviews ──────────────────────────────────────────────────────────────


@app.get("/api/reviews")
def reviews(
    name: Optional[str] = None,
    area: Optional[str] = None,
    county: Optional[str] = None,
    restaurant_id: Optional[int] = None,
    refresh: bool = False,
    cfg: Configuration = Depends(get_config),
    places: GooglePlacesClient = Depends(get_places_client),
    session: Session = Depends(get_session),
) -> dict:
    if not name or not name.strip():
        raise BadRequestError("Restaurant name is required")

    if restaurant_id is not None and not refresh:
        cached = cached_reviews(session, restaurant_id)
        if cached:
            return {"reviews": [r.to_dict() for r in cached], "google": None, "cached": True}

    parts = [name.strip(), "restaurant", (area or "").strip(), cfg.region_location(county)]
    query = " ".join(p for p in parts if p)
    place = places.text_search(query)

    found = place.reviews[: cfg.review_limit] if place else []
    if found and restaurant_id is not None and get_restaurant(session, restaurant_id) is not None:
        replace_reviews(session, restaurant_id, found)

    return {
        "reviews": [_review_payload(r) for r in found],
        "google": {"rating": place.rating, "reviewCount": place.rating_count} if place else None,
        "cached": False,
    }


# ── Diary ────────────────────────────────────────────────────────────────


@app.get("/api/diary")
def diary_list(restaurant_id: Optional[int] = None, session: Session = Depends(get_session)) -> List[dict]:
    return [e.to_dict() for e in list_entries(session, restaurant_id)]


@app.post("/api/diary", status_code=201)
def diary_add(
    body: DiaryCreateRequest,
    cfg: Configuration = Depends(get_config),
    session: Session = Depends(get_session),
) -> dict:
    entry = add_entry(session, cfg, body.model_dump())
    return entry.to_dict()


@app.delete("/api/diary/{entry_id}")
def diary_delete(entry_id: int, session: Session = Depends(get_session)) -> dict:
    if not remove_entry(session, entry_id):
        raise NotFoundError("Diary entry not found")
    return {"success": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8010, reload=True)
