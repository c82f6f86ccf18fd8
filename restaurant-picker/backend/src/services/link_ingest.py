from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger

from errors import UnrecognizedLinkError
from mappings import LinkMappings
from models import EmbedMetadata
from services.google_places import PlaceLookup
from services.link_patterns import (
    SUPPORTED_FORMATS,
    LinkKind,
    classify_link,
    extract_candidates,
    extract_map_target,
)
from services.place_mapping import build_candidate
from services.social_embed import SocialEmbedClient
from utils import clean_text

_PLATFORM_LABELS = {
    LinkKind.GOOGLE: "Google Maps",
    LinkKind.TIKTOK: "TikTok",
    LinkKind.INSTAGRAM: "Instagram",
}


def _manual(kind: LinkKind, message: str, **extra: Any) -> Dict[str, Any]:
    return {"source": kind.value, "requiresManualEntry": True, "message": message, **extra}


class LinkIngestor:
    """Turn a shared link into a candidate record for the add form.

    Results are suggestions only; nothing here writes to the store.
    """

    def __init__(
        self,
        places: PlaceLookup,
        embeds: SocialEmbedClient,
        mappings: Optional[LinkMappings] = None,
        candidate_limit: int = 3,
    ) -> None:
        self.places = places
        self.embeds = embeds
        self.mappings = mappings or LinkMappings()
        self.candidate_limit = candidate_limit

    def parse(self, link: str, caption: Optional[str] = None) -> Dict[str, Any]:
        link = clean_text(link)
        kind = classify_link(link)
        if kind is None:
            raise UnrecognizedLinkError(
                f"Could not extract place information from link. Supported formats: {SUPPORTED_FORMATS}"
            )
        self.places.require_configured()
        logger.info("parsing {} link", kind.value)
        if kind is LinkKind.GOOGLE:
            return self._parse_map_link(link)
        return self._parse_social_link(kind, link, caption)

    def _parse_map_link(self, link: str) -> Dict[str, Any]:
        expanded = self.places.expand_short_link(link)
        target = extract_map_target(expanded)
        if target is None:
            return _manual(LinkKind.GOOGLE, "Could not find a place in this Google Maps link. Please enter details manually.")

        logger.debug("map link matched by {} place_id={} name={}", target.matcher, target.place_id, target.name)
        if target.place_id:
            place = self.places.get_place(target.place_id)
        else:
            place = self.places.text_search(target.name or "")
        if place is None:
            return _manual(LinkKind.GOOGLE, "Place not found on Google Maps. Please enter details manually.")

        candidate = build_candidate(place, self.mappings)
        return {"source": LinkKind.GOOGLE.value, **candidate.to_payload(), "requiresManualEntry": False}

    def _parse_social_link(self, kind: LinkKind, link: str, caption: Optional[str]) -> Dict[str, Any]:
        label = _PLATFORM_LABELS[kind]
        embed: Optional[EmbedMetadata] = self.embeds.fetch(kind, link)
        text = embed.text if embed else clean_text(caption)
        author = embed.author_name if embed else None
        if not text:
            return _manual(kind, f"{label} link detected. Please enter restaurant details manually.")

        candidates = extract_candidates(text)
        for candidate in candidates[: self.candidate_limit]:
            place = self.places.text_search(f"{candidate} restaurant")
            if place is None:
                continue
            logger.info("{} caption candidate '{}' matched place {}", kind.value, candidate, place.place_id)
            record = build_candidate(place, self.mappings)
            return {
                "source": kind.value,
                **record.to_payload(),
                "matchedCandidate": candidate,
                "caption": text,
                "author": author,
                "requiresManualEntry": False,
            }

        return _manual(
            kind,
            f"Could not identify the restaurant from this {label} post. Pick a name below or enter details manually.",
            candidates=candidates,
            caption=text,
            author=author,
        )
