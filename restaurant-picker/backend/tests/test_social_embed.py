from __future__ import annotations

from unittest.mock import MagicMock

import requests

from config import Configuration
from services.link_patterns import LinkKind
from services.social_embed import SocialEmbedClient


def _resp(status: int = 200, payload=None) -> MagicMock:
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 400
    r.json.return_value = payload or {}
    return r


def test_tiktok_title_and_author() -> None:
    session = MagicMock()
    session.get.return_value = _resp(payload={"title": " Ramen at Tsujita LA ", "author_name": "eater"})
    client = SocialEmbedClient(Configuration(), session=session)

    meta = client.fetch(LinkKind.TIKTOK, "https://www.tiktok.com/@eater/video/1")

    assert meta.text == "Ramen at Tsujita LA"
    assert meta.author_name == "eater"
    url = session.get.call_args.args[0]
    assert url == "https://www.tiktok.com/oembed"
    assert session.get.call_args.kwargs["params"] == {"url": "https://www.tiktok.com/@eater/video/1"}


def test_instagram_requires_token() -> None:
    session = MagicMock()
    client = SocialEmbedClient(Configuration(), session=session)
    assert client.fetch(LinkKind.INSTAGRAM, "https://www.instagram.com/p/x/") is None
    session.get.assert_not_called()

    session.get.return_value = _resp(payload={"title": "Brunch at Cafe Dulce"})
    client = SocialEmbedClient(Configuration(instagram_oembed_token="tok"), session=session)
    assert client.fetch(LinkKind.INSTAGRAM, "https://www.instagram.com/p/x/").text == "Brunch at Cafe Dulce"
    assert session.get.call_args.kwargs["params"]["access_token"] == "tok"


def test_failures_return_none() -> None:
    session = MagicMock()
    client = SocialEmbedClient(Configuration(), session=session)
    link = "https://www.tiktok.com/@x/video/9"

    session.get.return_value = _resp(status=404)
    assert client.fetch(LinkKind.TIKTOK, link) is None

    session.get.return_value = _resp(payload={"title": "   "})
    assert client.fetch(LinkKind.TIKTOK, link) is None

    session.get.side_effect = requests.ConnectionError("offline")
    assert client.fetch(LinkKind.TIKTOK, link) is None
