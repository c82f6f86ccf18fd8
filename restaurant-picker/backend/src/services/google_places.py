from __future__ import annotations

import time
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import requests
from loguru import logger

from config import Configuration
from models import PhotoMedia, PlacePhoto, PlaceRecord, PlaceReview

# Google field names stay inside this module.
SEARCH_FIELD_MASK = ",".join(
    f"places.{f}"
    for f in (
        "id",
        "displayName",
        "formattedAddress",
        "photos",
        "googleMapsUri",
        "rating",
        "userRatingCount",
        "priceLevel",
        "types",
        "reviews",
    )
)
DETAILS_FIELD_MASK = "id,displayName,formattedAddress,photos,googleMapsUri,rating,userRatingCount,priceLevel,types"

SHORT_LINK_HOSTS = ("goo.gl/maps", "maps.app.goo.gl")


class PlacesError(RuntimeError):
    pass


class PlacesConfigError(PlacesError):
    pass


class PlacesUpstreamError(PlacesError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PlaceLookup(Protocol):
    def require_configured(self) -> None: ...

    def text_search(self, query: str) -> Optional[PlaceRecord]: ...

    def get_place(self, place_id: str) -> Optional[PlaceRecord]: ...

    def expand_short_link(self, link: str) -> str: ...


@dataclass
class _RetryPolicy:
    retries: int = 2
    base_delay: float = 0.5


def _parse_review(raw: Dict[str, Any]) -> PlaceReview:
    author = raw.get("authorAttribution") or {}
    text = raw.get("text") or {}
    rating = raw.get("rating")
    return PlaceReview(
        author=author.get("displayName") or "Anonymous",
        author_photo=author.get("photoUri") or None,
        rating=float(rating) if isinstance(rating, (int, float)) else None,
        text=text.get("text") or "",
        date=raw.get("relativePublishTimeDescription") or "",
    )


def parse_place(raw: Dict[str, Any], fallback_id: Optional[str] = None) -> PlaceRecord:
    display = raw.get("displayName") or {}
    photos: List[PlacePhoto] = []
    for p in raw.get("photos") or []:
        if p.get("name"):
            photos.append(PlacePhoto(name=p["name"], width=p.get("widthPx"), height=p.get("heightPx")))
    rating = raw.get("rating")
    count = raw.get("userRatingCount")
    return PlaceRecord(
        place_id=str(raw.get("id") or fallback_id or ""),
        name=display.get("text") or "",
        address=raw.get("formattedAddress") or "",
        photos=photos,
        maps_url=raw.get("googleMapsUri") or None,
        rating=float(rating) if isinstance(rating, (int, float)) else None,
        rating_count=int(count) if isinstance(count, (int, float)) else None,
        price_level=raw.get("priceLevel") or None,
        types=[str(t) for t in (raw.get("types") or [])],
        reviews=[_parse_review(r) for r in (raw.get("reviews") or [])],
    )


class GooglePlacesClient:
    """Places API (New) adapter returning normalized ``PlaceRecord`` values."""

    def __init__(self, cfg: Configuration, session: Optional[requests.Session] = None) -> None:
        self.cfg = cfg
        self.base = cfg.google_places_base_url.rstrip("/")
        self.session = session or requests.Session()
        self.policy = _RetryPolicy(retries=max(cfg.google_places_retries, 0))

    def _api_key(self) -> str:
        try:
            self.cfg.require_google_places()
        except ValueError as exc:
            raise PlacesConfigError(str(exc))
        return self.cfg.google_places_api_key or ""

    def require_configured(self) -> None:
        """Raise ``PlacesConfigError`` when no API key is set."""
        self._api_key()

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = self.session.request(method, url, timeout=self.cfg.google_places_timeout, **kwargs)
            except requests.RequestException as exc:  # network error
                if attempt <= self.policy.retries:
                    time.sleep(self.policy.base_delay * attempt)
                    continue
                raise PlacesUpstreamError(f"request error: {exc}")

            if resp.status_code in (429, 500, 502, 503, 504) and attempt <= self.policy.retries:
                time.sleep(self.policy.base_delay * attempt)
                continue
            return resp

    def _json(self, resp: requests.Response) -> Dict[str, Any]:
        if not resp.ok:
            snippet = resp.text[:300]
            logger.warning("places upstream {}: {}", resp.status_code, snippet)
            raise PlacesUpstreamError(f"upstream {resp.status_code}: {snippet}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError:
            raise PlacesUpstreamError("invalid json response", status_code=resp.status_code)

    def text_search(self, query: str) -> Optional[PlaceRecord]:
        key = self._api_key()
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": key,
            "X-Goog-FieldMask": SEARCH_FIELD_MASK,
        }
        resp = self._send(
            "POST",
            f"{self.base}/places:searchText",
            headers=headers,
            json={"textQuery": query, "maxResultCount": 1},
        )
        payload = self._json(resp)
        places = payload.get("places") or []
        if not places:
            logger.debug("places text search empty query={}", query)
            return None
        return parse_place(places[0])

    def get_place(self, place_id: str) -> Optional[PlaceRecord]:
        key = self._api_key()
        headers = {"X-Goog-Api-Key": key, "X-Goog-FieldMask": DETAILS_FIELD_MASK}
        resp = self._send("GET", f"{self.base}/places/{urllib.parse.quote(place_id, safe='')}", headers=headers)
        if resp.status_code == 404:
            return None
        return parse_place(self._json(resp), fallback_id=place_id)

    def photo_url(self, photo_name: str, max_width: Optional[int] = None, max_height: Optional[int] = None) -> str:
        key = self._api_key()
        params = {
            "maxHeightPx": max_height or self.cfg.photo_max_height,
            "maxWidthPx": max_width or self.cfg.photo_max_width,
            "key": key,
        }
        return f"{self.base}/{photo_name}/media?{urllib.parse.urlencode(params)}"

    def fetch_photo(
        self,
        photo_name: str,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
    ) -> PhotoMedia:
        url = self.photo_url(photo_name, max_width, max_height)
        resp = self._send("GET", url)
        if not resp.ok:
            logger.warning("photo fetch failed status={} photo={}", resp.status_code, photo_name)
            raise PlacesUpstreamError(f"photo fetch failed: {resp.status_code}", status_code=resp.status_code)
        return PhotoMedia(content=resp.content, content_type=resp.headers.get("content-type") or "image/jpeg")

    def expand_short_link(self, link: str) -> str:
        """Resolve goo.gl / maps.app.goo.gl redirects; keep the link on failure."""
        if not any(host in link for host in SHORT_LINK_HOSTS):
            return link
        try:
            resp = self.session.head(link, allow_redirects=True, timeout=self.cfg.google_places_timeout)
        except requests.RequestException as exc:
            logger.warning("short link expansion failed for {}: {}", link, exc)
            return link
        return resp.url or link
