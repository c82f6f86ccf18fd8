"""Utility helpers for the restaurant picker."""

from __future__ import annotations

from typing import Iterable, List, Optional


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    if not value:
        return "unset"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"


def split_csv(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated and comma-separated query values.

    ``["LA,OC", "VAN"]`` becomes ``["LA", "OC", "VAN"]``; blanks are dropped.
    """
    out: list[str] = []
    if not values:
        return out
    for value in values:
        if value is None:
            continue
        for part in str(value).split(","):
            part = part.strip()
            if part:
                out.append(part)
    return out


def dedupe_preserve_order(items: Iterable[str], *, casefold: bool = True) -> List[str]:
    seen = set()
    deduped: list[str] = []
    for s in items:
        key = s.casefold() if casefold else s
        if key in seen:
            continue
        seen.add(key)
        deduped.append(s)
    return deduped


def clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
