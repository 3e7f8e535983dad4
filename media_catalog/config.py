"""
Runtime configuration for the media catalog.

All settings come from environment variables so the same code can be used
from tests, scripts and services without extra config files:

  MEDIA_CATALOG_SEARCH_FALLBACK   comma separated fields tried, in order, for
                                  unstructured searches (default: "title")
  MEDIA_CATALOG_LOG_LEVEL         loguru level for configure_logging()
  MEDIA_CATALOG_JSON_PATH         local JSON catalog for JsonCatalogSource
  MEDIA_CATALOG_BASE_URI          prefix for relative source/image entries
"""

import os
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from .models import BrowseLabels


SEARCHABLE_FIELDS = ("title", "album", "artist", "genre")


class CatalogSettings(BaseModel):
    search_fallback: List[str] = Field(
        default_factory=lambda: ["title"],
        description="Fields tried in order for unstructured searches; first non-empty wins",
    )
    log_level: str = "INFO"
    catalog_path: Optional[Path] = None
    base_uri: Optional[str] = None
    labels: BrowseLabels = Field(default_factory=BrowseLabels)

    @field_validator("search_fallback")
    @classmethod
    def _known_fields(cls, v: List[str]) -> List[str]:
        fields = [f.strip().lower() for f in v if f and f.strip()]
        unknown = [f for f in fields if f not in SEARCHABLE_FIELDS]
        if unknown:
            raise ValueError(f"Unsupported search fields: {', '.join(unknown)}")
        if not fields:
            raise ValueError("search_fallback needs at least one field")
        return fields

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()

    @classmethod
    def from_env(cls) -> "CatalogSettings":
        values = {}
        fallback = os.environ.get("MEDIA_CATALOG_SEARCH_FALLBACK")
        if fallback:
            values["search_fallback"] = fallback.split(",")
        level = os.environ.get("MEDIA_CATALOG_LOG_LEVEL")
        if level:
            values["log_level"] = level
        path = os.environ.get("MEDIA_CATALOG_JSON_PATH")
        if path:
            values["catalog_path"] = Path(path)
        base_uri = os.environ.get("MEDIA_CATALOG_BASE_URI")
        if base_uri:
            values["base_uri"] = base_uri
        return cls(**values)

    def apply_logging(self) -> None:
        """Install the stderr sink at the configured level."""
        configure_logging(self.log_level)


def configure_logging(level: str = "INFO") -> None:
    """Send loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
