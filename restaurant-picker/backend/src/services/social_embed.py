from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from loguru import logger

from config import Configuration
from models import EmbedMetadata
from services.link_patterns import LinkKind


class SocialEmbedClient:
    """Best-effort oEmbed lookups for short-video and photo posts.

    Every failure (network, status, payload, missing token) yields ``None`` so
    the caller can fall back to a user-supplied caption or manual entry.
    """

    def __init__(self, cfg: Configuration, session: Optional[requests.Session] = None) -> None:
        self.cfg = cfg
        self.session = session or requests.Session()

    def _endpoint(self, kind: LinkKind, link: str) -> Optional[tuple[str, Dict[str, Any]]]:
        if kind is LinkKind.TIKTOK:
            return self.cfg.tiktok_oembed_url, {"url": link}
        if kind is LinkKind.INSTAGRAM:
            if not self.cfg.instagram_oembed_token:
                logger.debug("instagram oembed skipped: no token configured")
                return None
            return self.cfg.instagram_oembed_url, {
                "url": link,
                "access_token": self.cfg.instagram_oembed_token,
                "omitscript": "true",
            }
        return None

    def fetch(self, kind: LinkKind, link: str) -> Optional[EmbedMetadata]:
        endpoint = self._endpoint(kind, link)
        if endpoint is None:
            return None
        url, params = endpoint
        try:
            resp = self.session.get(url, params=params, timeout=self.cfg.google_places_timeout)
        except requests.RequestException as exc:
            logger.warning("{} oembed request failed: {}", kind.value, exc)
            return None
        if not resp.ok:
            logger.warning("{} oembed upstream {} for {}", kind.value, resp.status_code, link)
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.warning("{} oembed returned invalid json", kind.value)
            return None
        title = str(data.get("title") or "").strip()
        if not title:
            return None
        return EmbedMetadata(title=title, author_name=data.get("author_name") or None)
