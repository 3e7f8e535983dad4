"""
Track Sources

A track source is any restartable iterable of ``Track`` records. The catalog
iterates it once per refresh and never mutates it.

Two implementations ship with the package:

* ``InMemoryTrackSource`` for tracks assembled in code (tests, fixtures).
* ``JsonCatalogSource`` for a local JSON catalog document:

      {"music": [{"title": ..., "album": ..., "artist": ..., "genre": ...,
                  "source": ..., "image": ..., "trackNumber": 1,
                  "totalTrackCount": 3, "duration": 215}]}

  ``duration`` is in seconds. Relative ``source``/``image`` entries are
  resolved against ``base_uri``.
"""

import json
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, runtime_checkable

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .config import CatalogSettings
from .models import Track


@runtime_checkable
class TrackSource(Protocol):
    def __iter__(self) -> Iterator[Track]:
        ...


class InMemoryTrackSource:
    """Track source backed by a list."""

    def __init__(self, tracks: Optional[List[Track]] = None) -> None:
        self._tracks: List[Track] = list(tracks or [])

    def add(
        self,
        title: str,
        album: str,
        artist: str,
        genre: str,
        source: str,
        icon_uri: str,
        track_number: int,
        total_track_count: int,
        duration_ms: int,
    ) -> Track:
        track = Track.from_source(
            source,
            title,
            album=album,
            artist=artist,
            genre=genre,
            art_icon_uri=icon_uri,
            track_number=track_number,
            total_track_count=total_track_count,
            duration_ms=duration_ms,
        )
        self._tracks.append(track)
        return track

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks))

    def __len__(self) -> int:
        return len(self._tracks)


# ---------------------------------------------------------------------------
# JSON catalog
# ---------------------------------------------------------------------------

class _JsonTrackEntry(BaseModel):
    """One element of the ``music`` array."""

    title: str
    album: str = ""
    artist: str = ""
    genre: str = ""
    source: str
    image: str = ""
    track_number: int = Field(0, ge=0, alias="trackNumber")
    total_track_count: int = Field(0, ge=0, alias="totalTrackCount")
    duration: int = Field(0, ge=0, description="Seconds")


def _resolve(uri: str, base_uri: Optional[str]) -> str:
    if not uri or not base_uri or "://" in uri:
        return uri
    return base_uri.rstrip("/") + "/" + uri.lstrip("/")


class JsonCatalogSource:
    """Reads tracks from a local JSON catalog file. Re-reads on every iteration."""

    def __init__(self, path: Path, base_uri: Optional[str] = None) -> None:
        self.path = Path(path)
        self.base_uri = base_uri

    @classmethod
    def from_env(cls) -> Optional["JsonCatalogSource"]:
        """Return a source if MEDIA_CATALOG_JSON_PATH is set, else None."""
        settings = CatalogSettings.from_env()
        if settings.catalog_path is None:
            logger.info("MEDIA_CATALOG_JSON_PATH not set, JSON catalog source disabled.")
            return None
        return cls(settings.catalog_path, base_uri=settings.base_uri)

    def __iter__(self) -> Iterator[Track]:
        return iter(self.load())

    def load(self) -> List[Track]:
        """
        Parse the catalog document.

        Raises OSError / ValueError when the file is missing or not a catalog;
        individual malformed entries are logged and skipped.
        """
        document = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(document, dict) or not isinstance(document.get("music"), list):
            raise ValueError(f"{self.path} is not a music catalog (missing 'music' list)")

        tracks: List[Track] = []
        for position, raw in enumerate(document["music"]):
            try:
                entry = _JsonTrackEntry.model_validate(raw)
            except ValidationError as exc:
                logger.warning(f"JsonCatalogSource: skipped entry {position} in {self.path}: {exc}")
                continue
            tracks.append(self._to_track(entry))

        logger.debug(f"JsonCatalogSource: {len(tracks)} tracks read from {self.path}")
        return tracks

    def _to_track(self, entry: _JsonTrackEntry) -> Track:
        return Track.from_source(
            _resolve(entry.source, self.base_uri),
            entry.title,
            album=entry.album,
            artist=entry.artist,
            genre=entry.genre,
            art_icon_uri=_resolve(entry.image, self.base_uri),
            track_number=entry.track_number,
            total_track_count=entry.total_track_count,
            duration_ms=entry.duration * 1000,
        )

    def __repr__(self) -> str:
        return f"JsonCatalogSource(path={self.path})"
