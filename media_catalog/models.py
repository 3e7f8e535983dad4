"""
Data Models for the Media Catalog

Track records as delivered by a track source, the overlay entries the
catalog layers on top of them, and the browse/queue shapes handed to the
session and UI layers.
"""

import hashlib
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


def track_id_for_source(source_uri: str) -> str:
    """Stable track id derived from the media source URI."""
    return hashlib.sha256(source_uri.encode("utf-8")).hexdigest()[:16]


# ---------------------------------------------------------------------------
# Track models
# ---------------------------------------------------------------------------

class Track(BaseModel):
    """A single playable track in the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique track identifier, derived from source_uri")
    title: str = Field(..., description="Track title")
    album: str = Field("", description="Album name")
    artist: str = Field("", description="Track artist")
    genre: str = Field("", description="Musical genre")
    source_uri: str = Field(..., description="Where the audio is streamed from")
    art_icon_uri: str = Field("", description="Album art URI")
    track_number: int = Field(0, ge=0, description="Position on the album")
    total_track_count: int = Field(0, ge=0, description="Number of tracks on the album")
    duration_ms: int = Field(0, ge=0, description="Track length in milliseconds")

    # Overlay fields, filled in by the catalog on read
    album_art: Optional[Any] = Field(None, description="High resolution album art handle")
    display_icon: Optional[Any] = Field(None, description="Small icon handle")
    favorite: bool = Field(False, description="Marked as favorite by the user")

    @classmethod
    def from_source(cls, source_uri: str, title: str, **fields: Any) -> "Track":
        return cls(
            id=track_id_for_source(source_uri),
            source_uri=source_uri,
            title=title,
            **fields,
        )

    def duration_formatted(self) -> str:
        seconds_total = self.duration_ms // 1000
        if seconds_total <= 0:
            return "0:00"
        minutes = seconds_total // 60
        seconds = seconds_total % 60
        return f"{minutes}:{seconds:02d}"


class TrackArtwork(BaseModel):
    """Artwork overlay entry kept by the catalog per track id."""

    model_config = ConfigDict(frozen=True)

    album_art: Optional[Any] = None
    display_icon: Optional[Any] = None


class CatalogState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


# ---------------------------------------------------------------------------
# Browse models
# ---------------------------------------------------------------------------

class BrowseLabels(BaseModel):
    """Human readable labels for the fixed browse categories and queue titles."""

    genres_title: str = "Genres"
    genres_subtitle: str = "Songs by genre"
    genre_subtitle: str = Field("{genre} songs", description="Formatted with genre=<name>")
    search_queue_title: str = "Search results"
    random_queue_title: str = "Random music"

    def subtitle_for_genre(self, genre: str) -> str:
        return self.genre_subtitle.format(genre=genre)


class BrowseNode(BaseModel):
    """An entry of the browse tree: a category or a playable track."""

    media_id: str
    title: str
    subtitle: str = ""
    icon_uri: Optional[str] = None
    browsable: bool = False
    playable: bool = False


# ---------------------------------------------------------------------------
# Queue models
# ---------------------------------------------------------------------------

class QueueItem(BaseModel):
    """A track placed in a play queue."""

    queue_id: int = Field(..., ge=0, description="0-based id, unique within its queue")
    media_id: str = Field(..., description="Hierarchy-aware media id the item was queued from")
    track: Track

    @property
    def title(self) -> str:
        return self.track.title


# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------

EXTRA_MEDIA_FOCUS = "media_focus"
EXTRA_MEDIA_GENRE = "genre"
EXTRA_MEDIA_ARTIST = "artist"
EXTRA_MEDIA_ALBUM = "album"
EXTRA_MEDIA_TITLE = "title"


class SearchFocus(str, Enum):
    ANY = "any"
    UNSTRUCTURED = "unstructured"
    GENRE = "genre"
    ARTIST = "artist"
    ALBUM = "album"
    SONG = "song"


class SearchParams(BaseModel):
    """Search criteria derived from a query string and its extras."""

    query: str = ""
    focus: SearchFocus = SearchFocus.UNSTRUCTURED
    genre: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    song: Optional[str] = None

    @classmethod
    def from_query(
        cls, query: Optional[str], extras: Optional[Mapping[str, Any]] = None
    ) -> "SearchParams":
        query = query or ""
        extras = extras or {}

        # "Play music" style requests come with an empty query
        if not query.strip():
            return cls(query=query, focus=SearchFocus.ANY)

        focus = extras.get(EXTRA_MEDIA_FOCUS)
        genre = extras.get(EXTRA_MEDIA_GENRE)
        artist = extras.get(EXTRA_MEDIA_ARTIST)
        album = extras.get(EXTRA_MEDIA_ALBUM)

        if focus == SearchFocus.GENRE.value:
            return cls(query=query, focus=SearchFocus.GENRE, genre=genre or query)
        if focus == SearchFocus.ARTIST.value:
            return cls(query=query, focus=SearchFocus.ARTIST, genre=genre, artist=artist)
        if focus == SearchFocus.ALBUM.value:
            return cls(
                query=query, focus=SearchFocus.ALBUM,
                album=album, artist=artist, genre=genre,
            )
        if focus == SearchFocus.SONG.value:
            return cls(
                query=query, focus=SearchFocus.SONG,
                song=extras.get(EXTRA_MEDIA_TITLE), album=album, artist=artist, genre=genre,
            )
        return cls(query=query, focus=SearchFocus.UNSTRUCTURED)
