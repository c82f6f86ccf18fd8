"""Pure pattern matchers for shared links and post captions.

Each matcher is an independent function; the module-level tuples fix the
order in which they are tried.
"""

from __future__ import annotations

import re
import urllib.parse
from enum import Enum
from typing import Callable, List, Optional, Tuple

from models import MapLinkTarget
from utils import dedupe_preserve_order


class LinkKind(str, Enum):
    GOOGLE = "google"
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"


SUPPORTED_FORMATS = "Google Maps, TikTok, Instagram"


def _split_url(link: str) -> Tuple[str, str]:
    value = link.strip()
    if not re.match(r"^[a-z][a-z0-9+.-]*://", value, re.I):
        value = "https://" + value
    parsed = urllib.parse.urlparse(value)
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host, parsed.path.lower()


def _is_google_maps(host: str, path: str) -> bool:
    if host == "maps.app.goo.gl":
        return True
    if host == "goo.gl" and path.startswith("/maps"):
        return True
    if host.startswith("maps.google."):
        return True
    return (host.startswith("google.") or ".google." in host) and path.startswith("/maps")


def _is_tiktok(host: str, path: str) -> bool:
    return host == "tiktok.com" or host.endswith(".tiktok.com")


def _is_instagram(host: str, path: str) -> bool:
    return host in ("instagram.com", "instagr.am") or host.endswith(".instagram.com")


LINK_CLASSIFIERS: Tuple[Tuple[LinkKind, Callable[[str, str], bool]], ...] = (
    (LinkKind.GOOGLE, _is_google_maps),
    (LinkKind.TIKTOK, _is_tiktok),
    (LinkKind.INSTAGRAM, _is_instagram),
)


def classify_link(link: str) -> Optional[LinkKind]:
    if not link or not link.strip():
        return None
    host, path = _split_url(link)
    for kind, check in LINK_CLASSIFIERS:
        if check(host, path):
            return kind
    return None


# --- map links -------------------------------------------------------------

_EMBEDDED_ID = re.compile(r"!1s([A-Za-z0-9_-]+)(?:!|$)")
_PLACE_ID_PARAM = re.compile(r"[?&]place_id=([^&#]+)")
_CID_PAIR = re.compile(r"!1s(0x[0-9a-f]+:0x[0-9a-f]+)", re.I)
_PLACE_SEGMENT = re.compile(r"/place/([^/@?#]+)")
_QUERY_PARAM = re.compile(r"[?&](?:q|query)=([^&#]+)")


def match_embedded_place_id(link: str) -> Optional[MapLinkTarget]:
    m = _EMBEDDED_ID.search(link)
    return MapLinkTarget(place_id=m.group(1)) if m else None


def match_place_id_param(link: str) -> Optional[MapLinkTarget]:
    m = _PLACE_ID_PARAM.search(link)
    if not m:
        return None
    value = urllib.parse.unquote(m.group(1)).strip()
    return MapLinkTarget(place_id=value) if value else None


def match_cid_pair(link: str) -> Optional[MapLinkTarget]:
    m = _CID_PAIR.search(link)
    return MapLinkTarget(place_id=m.group(1)) if m else None


def match_place_name_segment(link: str) -> Optional[MapLinkTarget]:
    m = _PLACE_SEGMENT.search(link)
    if not m:
        return None
    value = urllib.parse.unquote_plus(m.group(1)).strip()
    return MapLinkTarget(name=value) if value else None


def match_query_param(link: str) -> Optional[MapLinkTarget]:
    m = _QUERY_PARAM.search(link)
    if not m:
        return None
    value = urllib.parse.unquote_plus(m.group(1)).strip()
    return MapLinkTarget(name=value) if value else None


MAP_LINK_MATCHERS: Tuple[Tuple[str, Callable[[str], Optional[MapLinkTarget]]], ...] = (
    ("embedded_place_id", match_embedded_place_id),
    ("place_id_param", match_place_id_param),
    ("cid_pair", match_cid_pair),
    ("place_name_segment", match_place_name_segment),
    ("query_param", match_query_param),
)


def extract_map_target(link: str) -> Optional[MapLinkTarget]:
    for name, matcher in MAP_LINK_MATCHERS:
        target = matcher(link)
        if target is not None:
            target.matcher = name
            return target
    return None


# --- captions --------------------------------------------------------------

STOP_WORDS = frozenset({"the", "and", "for", "with", "this", "that", "food", "best", "love", "amazing"})
MIN_CANDIDATE_LEN = 3
MAX_CANDIDATE_LEN = 49

_HANDLE = re.compile(r"(?<![\w@])@([A-Za-z0-9_](?:[A-Za-z0-9_.]*[A-Za-z0-9_])?)")
_AT_PHRASE = re.compile(r"\b[Aa]t\s+([A-Z][^\n.,!?;:#@|()]*)")
_PIN = re.compile("\U0001F4CD\uFE0F?" r"\s*([^\n.,!?#@|]+)")
_QUOTED = re.compile(r"[\"“”]([^\"“”\n]+)[\"“”]")
_VENUE = re.compile(
    r"\b((?:[A-Z][\w'’&.-]*\s+){1,4}(?i:restaurant|cafe|café|bistro|kitchen|eatery|bar|grill|house))\b"
)

Hit = Tuple[int, str]


def _hits(pattern: re.Pattern, text: str) -> List[Hit]:
    return [(m.start(1), m.group(1)) for m in pattern.finditer(text)]


def match_handles(text: str) -> List[Hit]:
    return _hits(_HANDLE, text)


def match_at_phrases(text: str) -> List[Hit]:
    return _hits(_AT_PHRASE, text)


def match_pin_phrases(text: str) -> List[Hit]:
    return _hits(_PIN, text)


def match_quoted(text: str) -> List[Hit]:
    return _hits(_QUOTED, text)


def match_venue_phrases(text: str) -> List[Hit]:
    return _hits(_VENUE, text)


CAPTION_MATCHERS: Tuple[Callable[[str], List[Hit]], ...] = (
    match_handles,
    match_at_phrases,
    match_pin_phrases,
    match_quoted,
    match_venue_phrases,
)


def _clean_candidate(value: str) -> str:
    return value.strip().strip(" -–—|:;'\"").strip()


def _keep(candidate: str) -> bool:
    if not (MIN_CANDIDATE_LEN <= len(candidate) <= MAX_CANDIDATE_LEN):
        return False
    return candidate.casefold() not in STOP_WORDS


def extract_candidates(text: Optional[str]) -> List[str]:
    """Restaurant-name guesses from free text, in order of first appearance."""
    if not text:
        return []
    hits: List[Tuple[int, int, str]] = []
    for priority, matcher in enumerate(CAPTION_MATCHERS):
        for pos, raw in matcher(text):
            hits.append((pos, priority, _clean_candidate(raw)))
    hits.sort(key=lambda h: (h[0], h[1]))
    return dedupe_preserve_order(c for _, _, c in hits if _keep(c))
