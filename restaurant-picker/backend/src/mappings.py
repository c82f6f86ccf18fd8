"""Field-mapping tables used to turn a place into restaurant fields.

The tables are data: ``LINK_MAPPINGS_PATH`` may point at a JSON file with the
same keys to replace any of them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

DEFAULT_CUISINE_BY_TYPE: Dict[str, str] = {
    "chinese_restaurant": "Chinese",
    "japanese_restaurant": "Japanese",
    "korean_restaurant": "Korean",
    "italian_restaurant": "Western",
    "french_restaurant": "French",
    "mexican_restaurant": "Mexican",
    "thai_restaurant": "Thai",
    "vietnamese_restaurant": "Vietnamese",
    "indian_restaurant": "SEA",
    "american_restaurant": "Western",
    "seafood_restaurant": "Western",
    "sushi_restaurant": "Japanese",
    "ramen_restaurant": "Japanese",
    "pizza_restaurant": "Western",
    "steak_house": "Western",
    "breakfast_restaurant": "Brunch",
    "brunch_restaurant": "Brunch",
    "cafe": "Brunch",
    "mediterranean_restaurant": "Mediterranean",
    "spanish_restaurant": "Spanish",
    "brazilian_restaurant": "Brazilian",
    "peruvian_restaurant": "Peruvian",
    "taiwanese_restaurant": "Taiwanese",
    "filipino_restaurant": "Filipino",
    "cuban_restaurant": "Cuban",
    "argentinian_restaurant": "Argentinean",
    "asian_restaurant": "Fusion",
    "fusion_restaurant": "Fusion",
}

DEFAULT_PRICE_BY_LEVEL: Dict[str, str] = {
    "PRICE_LEVEL_FREE": "$",
    "PRICE_LEVEL_INEXPENSIVE": "$",
    "PRICE_LEVEL_MODERATE": "$$",
    "PRICE_LEVEL_EXPENSIVE": "$$$",
    "PRICE_LEVEL_VERY_EXPENSIVE": "$$$$",
}


class RegionRule(BaseModel):
    region: str
    needles: List[str]


DEFAULT_REGION_RULES: List[RegionRule] = [
    RegionRule(region="VAN", needles=["vancouver", ", bc", "british columbia"]),
    RegionRule(
        region="OC",
        needles=["irvine", "tustin", "costa mesa", "westminster", "garden grove", "orange county"],
    ),
]


class LinkMappings(BaseModel):
    cuisine_by_type: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CUISINE_BY_TYPE))
    default_cuisine: str = Field(default="Western")
    price_by_level: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PRICE_BY_LEVEL))
    default_price: str = Field(default="$$")
    default_price_level: str = Field(default="PRICE_LEVEL_MODERATE")
    # checked in order; first rule with a matching substring wins
    region_rules: List[RegionRule] = Field(default_factory=lambda: [r.model_copy() for r in DEFAULT_REGION_RULES])
    default_region: str = Field(default="LA")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "LinkMappings":
        if not path:
            return cls()
        file = Path(path)
        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"cannot read link mappings from {path}: {exc}")
        logger.info("link mappings loaded from {} keys={}", path, sorted(data))
        return cls(**data)
