from __future__ import annotations

import pytest

from services.link_patterns import LinkKind, classify_link, extract_candidates, extract_map_target


@pytest.mark.parametrize(
    "link,kind",
    [
        ("https://www.google.com/maps/place/MDK/@34.06,-118.30,17z", LinkKind.GOOGLE),
        ("https://maps.app.goo.gl/abc123", LinkKind.GOOGLE),
        ("https://goo.gl/maps/xyz", LinkKind.GOOGLE),
        ("maps.google.com/?q=Tsujita", LinkKind.GOOGLE),
        ("https://www.tiktok.com/@eater/video/123", LinkKind.TIKTOK),
        ("https://vm.tiktok.com/ZMabc/", LinkKind.TIKTOK),
        ("https://www.instagram.com/p/Cxyz/", LinkKind.INSTAGRAM),
        ("https://example.com/maps/place/x", None),
        ("https://www.google.com/search?q=ramen", None),
        ("", None),
    ],
)
def test_classify_link(link, kind) -> None:
    assert classify_link(link) == kind


def test_embedded_place_id() -> None:
    link = "https://www.google.com/maps/place/Cafe/@34.1,-118.2,17z/data=!3m1!4b1!4m6!3m5!1sCAFE123!8m2"
    target = extract_map_target(link)
    assert target.place_id == "CAFE123"
    assert target.matcher == "embedded_place_id"


def test_place_id_query_param() -> None:
    target = extract_map_target("https://www.google.com/maps/search/?api=1&query=x&place_id=ChIJabc%2D1")
    assert target.place_id == "ChIJabc-1"
    assert target.matcher == "place_id_param"


def test_cid_pair() -> None:
    link = "https://www.google.com/maps/place/X/data=!4m2!3m1!1s0x80c2c7:0x1a2b3c"
    target = extract_map_target(link)
    assert target.place_id == "0x80c2c7:0x1a2b3c"
    assert target.matcher == "cid_pair"


def test_place_name_segment_is_decoded() -> None:
    target = extract_map_target("https://www.google.com/maps/place/Joe%27s+Diner/@34.0,-118.2,17z")
    assert target.name == "Joe's Diner"
    assert target.place_id is None
    assert target.matcher == "place_name_segment"


def test_query_param() -> None:
    target = extract_map_target("https://maps.google.com/?q=Din+Tai+Fung")
    assert target.name == "Din Tai Fung"
    assert target.matcher == "query_param"


def test_no_map_target() -> None:
    assert extract_map_target("https://maps.google.com/") is None


def test_caption_handle_and_at_phrase_in_order() -> None:
    text = "Amazing ramen @noodlehouse at Tsujita LA, so good!"
    assert extract_candidates(text) == ["noodlehouse", "Tsujita LA"]


def test_caption_pin_and_quotes() -> None:
    text = "Weekend plans \U0001F4CD Din Tai Fung, Glendale. Try the “Xiao Long Bao”"
    assert extract_candidates(text) == ["Din Tai Fung", "Xiao Long Bao"]


def test_caption_venue_phrase() -> None:
    assert extract_candidates("dinner at the Lonely Oyster Bar tonight") == ["Lonely Oyster Bar"]


def test_caption_filters_stop_words_and_dedupes() -> None:
    text = "@the @MDK tofu soup. Back at MDK."
    assert extract_candidates(text) == ["MDK"]


def test_caption_empty() -> None:
    assert extract_candidates("") == []
    assert extract_candidates(None) == []
    assert extract_candidates("so good, no names here") == []
