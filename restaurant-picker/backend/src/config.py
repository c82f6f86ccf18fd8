from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from utils import mask_secret, split_csv


class Configuration(BaseModel):
    # Storage
    database_url: str = Field(default="sqlite:///./restaurants.db")
    seed_on_startup: bool = Field(default=False)

    # Google Places (New)
    google_places_api_key: Optional[str] = Field(default=None)
    google_places_base_url: str = Field(default="https://places.googleapis.com/v1")
    google_places_timeout: int = Field(default=15)
    google_places_retries: int = Field(default=2)
    photo_max_width: int = Field(default=800)
    photo_max_height: int = Field(default=600)
    review_limit: int = Field(default=5)

    # Regions
    regions: List[str] = Field(default_factory=lambda: ["LA", "OC", "VAN"])
    region_locations: Dict[str, str] = Field(
        default_factory=lambda: {
            "LA": "Los Angeles, CA",
            "OC": "Orange County, CA",
            "VAN": "Vancouver, BC",
        }
    )

    # Link ingestion
    social_candidate_limit: int = Field(default=3)
    tiktok_oembed_url: str = Field(default="https://www.tiktok.com/oembed")
    instagram_oembed_url: str = Field(default="https://graph.facebook.com/v19.0/instagram_oembed")
    instagram_oembed_token: Optional[str] = Field(default=None)
    link_mappings_path: Optional[str] = Field(default=None)

    # Diary
    diary_max_photo_bytes: int = Field(default=5 * 1024 * 1024)

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("regions")
    @classmethod
    def _upper_regions(cls, v: List[str]) -> List[str]:
        # stored county codes are upper-case
        return [r.strip().upper() for r in v if r and r.strip()]

    @classmethod
    def from_env(cls, overrides: Optional[dict[str, Any]] = None) -> "Configuration":
        raw: dict[str, Any] = {}

        env_map = {
            "database_url": os.getenv("DATABASE_URL"),
            "seed_on_startup": os.getenv("SEED_ON_STARTUP"),
            "google_places_api_key": os.getenv("GOOGLE_PLACES_API_KEY"),
            "google_places_base_url": os.getenv("GOOGLE_PLACES_BASE_URL"),
            "google_places_timeout": os.getenv("GOOGLE_PLACES_TIMEOUT"),
            "google_places_retries": os.getenv("GOOGLE_PLACES_RETRIES"),
            "photo_max_width": os.getenv("PHOTO_MAX_WIDTH"),
            "photo_max_height": os.getenv("PHOTO_MAX_HEIGHT"),
            "review_limit": os.getenv("REVIEW_LIMIT"),
            "regions": os.getenv("REGIONS"),
            "social_candidate_limit": os.getenv("SOCIAL_CANDIDATE_LIMIT"),
            "tiktok_oembed_url": os.getenv("TIKTOK_OEMBED_URL"),
            "instagram_oembed_url": os.getenv("INSTAGRAM_OEMBED_URL"),
            "instagram_oembed_token": os.getenv("INSTAGRAM_OEMBED_TOKEN"),
            "link_mappings_path": os.getenv("LINK_MAPPINGS_PATH"),
            "diary_max_photo_bytes": os.getenv("DIARY_MAX_PHOTO_BYTES"),
            "cors_origins": os.getenv("CORS_ORIGINS"),
        }

        bool_fields = {"seed_on_startup"}
        list_fields = {"regions", "cors_origins"}

        for k, v in env_map.items():
            if v is None:
                continue
            if k in bool_fields:
                raw[k] = str(v).lower() in {"1", "true", "yes", "on"}
            elif k in list_fields:
                raw[k] = split_csv([v])
            else:
                raw[k] = v

        # Railway/Heroku style URLs use the legacy scheme
        url = raw.get("database_url")
        if url and url.startswith("postgres://"):
            raw["database_url"] = url.replace("postgres://", "postgresql://", 1)

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**raw)

    def require_google_places(self) -> None:
        if not self.google_places_api_key:
            raise ValueError("GOOGLE_PLACES_API_KEY is required")

    def region_location(self, county: Optional[str]) -> str:
        if not county:
            return ""
        return self.region_locations.get(county.upper(), "")

    def log_summary(self) -> str:
        return (
            "database=%s google_places=%s base=%s timeout=%s retries=%s regions=%s "
            "instagram_oembed=%s seed_on_startup=%s api_key=%s"
            % (
                self.database_url.split("@")[-1],
                bool(self.google_places_api_key),
                self.google_places_base_url,
                self.google_places_timeout,
                self.google_places_retries,
                ",".join(self.regions),
                bool(self.instagram_oembed_token),
                self.seed_on_startup,
                mask_secret(self.google_places_api_key),
            )
        )
