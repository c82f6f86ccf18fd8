import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest


# Ensure backend/src is on sys.path for tests so that imports like `services.*` and `db` work.
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from sqlalchemy.orm import sessionmaker  # noqa: E402

from config import Configuration  # noqa: E402
from db import init_db, make_engine  # noqa: E402
from models import EmbedMetadata, PhotoMedia, PlaceRecord  # noqa: E402
from services.google_places import PlacesConfigError, PlacesUpstreamError  # noqa: E402


class FakePlaces:
    """In-memory stand-in for the place lookup; records every call."""

    def __init__(self) -> None:
        self.by_query: Dict[str, PlaceRecord] = {}
        self.by_id: Dict[str, PlaceRecord] = {}
        self.redirects: Dict[str, str] = {}
        self.photos: Dict[str, PhotoMedia] = {}
        self.calls: List[Tuple[str, str]] = []
        self.configured = True
        # raised by text_search and get_place when set
        self.error: Optional[Exception] = None

    def require_configured(self) -> None:
        if not self.configured:
            raise PlacesConfigError("GOOGLE_PLACES_API_KEY is required")

    def text_search(self, query: str) -> Optional[PlaceRecord]:
        self.calls.append(("text_search", query))
        if self.error is not None:
            raise self.error
        for needle, place in self.by_query.items():
            if needle.lower() in query.lower():
                return place
        return None

    def get_place(self, place_id: str) -> Optional[PlaceRecord]:
        self.calls.append(("get_place", place_id))
        if self.error is not None:
            raise self.error
        return self.by_id.get(place_id)

    def expand_short_link(self, link: str) -> str:
        return self.redirects.get(link, link)

    def fetch_photo(self, photo_name: str, max_width=None, max_height=None) -> PhotoMedia:
        self.calls.append(("fetch_photo", photo_name))
        if photo_name not in self.photos:
            raise PlacesUpstreamError("photo fetch failed: 404", status_code=404)
        return self.photos[photo_name]


class FakeEmbeds:
    def __init__(self) -> None:
        self.by_link: Dict[str, EmbedMetadata] = {}

    def fetch(self, kind, link: str) -> Optional[EmbedMetadata]:
        return self.by_link.get(link)


@pytest.fixture
def cfg() -> Configuration:
    return Configuration(google_places_api_key="test-key", google_places_retries=0)


@pytest.fixture
def db_session():
    engine = make_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def fake_places() -> FakePlaces:
    return FakePlaces()


@pytest.fixture
def fake_embeds() -> FakeEmbeds:
    return FakeEmbeds()


@pytest.fixture
def client(cfg, db_session, fake_places, fake_embeds):
    from fastapi.testclient import TestClient

    import main

    main.app.dependency_overrides[main.get_config] = lambda: cfg
    main.app.dependency_overrides[main.get_session] = lambda: db_session
    main.app.dependency_overrides[main.get_places_client] = lambda: fake_places
    main.app.dependency_overrides[main.get_embed_client] = lambda: fake_embeds
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
