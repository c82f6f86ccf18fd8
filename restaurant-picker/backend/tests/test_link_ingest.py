from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from config import Configuration
from errors import UnrecognizedLinkError
from models import EmbedMetadata, PlaceRecord
from services.google_places import GooglePlacesClient, PlacesConfigError, PlacesUpstreamError
from services.link_ingest import LinkIngestor

TSUJITA = PlaceRecord(
    place_id="ChIJtsujita",
    name="Tsujita LA Artisan Noodle",
    address="2057 Sawtelle Blvd, Los Angeles, CA 90025, USA",
    maps_url="https://maps.google.com/?cid=42",
    price_level="PRICE_LEVEL_MODERATE",
    types=["ramen_restaurant", "japanese_restaurant", "restaurant"],
)

CAFE = PlaceRecord(
    place_id="CAFE123",
    name="Cafe Dulce",
    address="3465 W 6th St, Los Angeles, CA 90020, USA",
    price_level="PRICE_LEVEL_INEXPENSIVE",
    types=["cafe", "restaurant"],
)


@pytest.fixture
def ingestor(fake_places, fake_embeds) -> LinkIngestor:
    return LinkIngestor(fake_places, fake_embeds)


def test_unrecognized_link(ingestor) -> None:
    with pytest.raises(UnrecognizedLinkError) as err:
        ingestor.parse("https://example.com/somewhere")
    assert "Supported formats" in str(err.value)
    assert err.value.status_code == 400


def test_google_link_with_embedded_id(ingestor, fake_places) -> None:
    fake_places.by_id["CAFE123"] = CAFE
    out = ingestor.parse("https://www.google.com/maps/place/Cafe/data=!4m6!3m5!1sCAFE123!8m2")

    assert fake_places.calls == [("get_place", "CAFE123")]
    assert out["source"] == "google"
    assert out["requiresManualEntry"] is False
    assert out["name"] == "Cafe Dulce"
    assert out["cuisine"] == "Brunch"
    assert out["price"] == "$"
    assert out["county"] == "LA"
    assert out["area"] == "Los Angeles"
    assert out["placeId"] == "CAFE123"


def test_google_short_link_is_expanded(ingestor, fake_places) -> None:
    fake_places.redirects["https://maps.app.goo.gl/abc"] = "https://www.google.com/maps/place/Tsujita+LA/@34,-118,17z"
    fake_places.by_query["Tsujita"] = TSUJITA

    out = ingestor.parse("https://maps.app.goo.gl/abc")
    assert fake_places.calls == [("text_search", "Tsujita LA")]
    assert out["name"] == "Tsujita LA Artisan Noodle"
    assert out["cuisine"] == "Japanese"


def test_google_link_without_match_needs_manual_entry(ingestor, fake_places) -> None:
    out = ingestor.parse("https://www.google.com/maps/place/Nowhere+Cafe")
    assert out["requiresManualEntry"] is True
    assert out["source"] == "google"
    assert "manually" in out["message"]

    out = ingestor.parse("https://maps.google.com/")
    assert out["requiresManualEntry"] is True
    assert fake_places.calls == [("text_search", "Nowhere Cafe")]


def test_tiktok_caption_candidates(ingestor, fake_places, fake_embeds) -> None:
    link = "https://www.tiktok.com/@eater/video/1"
    fake_embeds.by_link[link] = EmbedMetadata(
        title="Amazing ramen @noodlehouse at Tsujita LA, so good!", author_name="eater"
    )
    fake_places.by_query["Tsujita"] = TSUJITA

    out = ingestor.parse(link)
    assert fake_places.calls == [
        ("text_search", "noodlehouse restaurant"),
        ("text_search", "Tsujita LA restaurant"),
    ]
    assert out["source"] == "tiktok"
    assert out["requiresManualEntry"] is False
    assert out["matchedCandidate"] == "Tsujita LA"
    assert out["author"] == "eater"
    assert out["name"] == "Tsujita LA Artisan Noodle"


def test_instagram_falls_back_to_supplied_caption(ingestor, fake_places) -> None:
    fake_places.by_query["Cafe Dulce"] = CAFE
    out = ingestor.parse("https://www.instagram.com/p/Cxyz/", caption="Morning at Cafe Dulce!")
    assert out["source"] == "instagram"
    assert out["name"] == "Cafe Dulce"
    assert out["caption"] == "Morning at Cafe Dulce!"
    assert out["author"] is None


def test_social_without_text_needs_manual_entry(ingestor, fake_places) -> None:
    out = ingestor.parse("https://www.instagram.com/p/Cxyz/")
    assert out == {
        "source": "instagram",
        "requiresManualEntry": True,
        "message": "Instagram link detected. Please enter restaurant details manually.",
    }
    assert fake_places.calls == []


def test_candidate_limit(fake_places, fake_embeds) -> None:
    ingestor = LinkIngestor(fake_places, fake_embeds, candidate_limit=2)
    caption = "@alpha @bravo @charlie"
    fake_places.by_query["charlie"] = TSUJITA

    out = ingestor.parse("https://www.tiktok.com/@x/video/2", caption=caption)
    assert len(fake_places.calls) == 2
    assert out["requiresManualEntry"] is True
    assert out["candidates"] == ["alpha", "bravo", "charlie"]
    assert out["caption"] == caption


@pytest.mark.parametrize(
    "link,caption",
    [
        ("https://www.google.com/maps/place/Cafe/data=!4m6!3m5!1sCAFE123!8m2", None),
        ("https://www.google.com/maps/place/Tsujita+LA", None),
        ("https://www.tiktok.com/@x/video/3", "Lunch at Tsujita LA!"),
    ],
)
def test_lookup_failure_propagates(ingestor, fake_places, link, caption) -> None:
    fake_places.error = PlacesUpstreamError("upstream 403: denied", status_code=403)
    with pytest.raises(PlacesUpstreamError):
        ingestor.parse(link, caption=caption)
    assert len(fake_places.calls) == 1


@pytest.mark.parametrize(
    "link,caption",
    [
        ("https://maps.google.com/", None),
        ("https://www.google.com/maps/place/Tsujita+LA", None),
        ("https://www.instagram.com/p/Cxyz/", None),
        ("https://www.tiktok.com/@x/video/3", "Lunch at Tsujita LA!"),
    ],
)
def test_missing_credentials_fail_before_parsing(ingestor, fake_places, link, caption) -> None:
    fake_places.configured = False
    with pytest.raises(PlacesConfigError):
        ingestor.parse(link, caption=caption)
    assert fake_places.calls == []


def test_unrecognized_link_wins_over_missing_credentials(ingestor, fake_places) -> None:
    fake_places.configured = False
    with pytest.raises(UnrecognizedLinkError):
        ingestor.parse("https://example.com/somewhere")


def test_places_client_without_key_rejects_map_link(fake_embeds) -> None:
    session = MagicMock()
    ingestor = LinkIngestor(GooglePlacesClient(Configuration(), session=session), fake_embeds)
    with pytest.raises(PlacesConfigError):
        ingestor.parse("https://maps.google.com/")
    session.request.assert_not_called()
