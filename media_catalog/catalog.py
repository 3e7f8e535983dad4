"""
Catalog Store

Owns the track records of one catalog and the lookup indices built from
them: tracks by id, track ids by genre, and case-insensitive title, album and
artist indices used for substring search. Also keeps the per-track overlay
(favorites, artwork) and materializes the browse tree:

    __ROOT__
     +-- __BY_GENRE__
          +-- __BY_GENRE__/<genre>
               +-- __BY_GENRE__/<genre>|<track id>   (playable)

Lifecycle: UNINITIALIZED -> LOADING -> READY (-> LOADING -> READY on each
refresh). A refresh builds a complete ``CatalogIndex`` off the event loop and
swaps it in with a single assignment, so readers only ever see a finished
index. Reads issued before the first successful refresh return empty results.
"""

import asyncio
import random
import threading
from collections import defaultdict
from concurrent.futures import Future
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from .config import CatalogSettings
from .errors import NullIdentifier, SourceLoadFailure
from .media_id import (
    MEDIA_ID_MUSICS_BY_GENRE,
    MEDIA_ID_ROOT,
    MediaId,
    create_media_id,
    is_valid_category,
)
from .models import BrowseLabels, BrowseNode, CatalogState, Track, TrackArtwork


ReadyCallback = Callable[[bool], None]


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

class CatalogIndex:
    """Immutable-by-convention snapshot of a catalog and its lookup tables."""

    def __init__(self) -> None:
        self.by_id: Dict[str, Track] = {}
        self.by_genre: Dict[str, List[str]] = defaultdict(list)
        self.by_title: Dict[str, List[str]] = defaultdict(list)
        self.by_album: Dict[str, List[str]] = defaultdict(list)
        self.by_artist: Dict[str, List[str]] = defaultdict(list)
        self._position: Dict[str, int] = {}

    @classmethod
    def build(cls, tracks: Iterable[Track]) -> "CatalogIndex":
        """Pull every record from ``tracks`` and build all indices."""
        index = cls()
        for track in tracks:
            if track.id in index.by_id:
                logger.warning(
                    f"CatalogIndex: duplicate track id {track.id} "
                    f"({track.source_uri}), keeping the latest record"
                )
            index.by_id[track.id] = track

        for position, track in enumerate(index.by_id.values()):
            index._position[track.id] = position
            index.by_genre[track.genre].append(track.id)
            index.by_title[track.title.lower()].append(track.id)
            index.by_album[track.album.lower()].append(track.id)
            index.by_artist[track.artist.lower()].append(track.id)

        # Lookups must not grow the tables
        index.by_genre = dict(index.by_genre)
        index.by_title = dict(index.by_title)
        index.by_album = dict(index.by_album)
        index.by_artist = dict(index.by_artist)
        return index

    def __len__(self) -> int:
        return len(self.by_id)

    def genre_ids(self, genre: str) -> List[str]:
        return self.by_genre.get(genre, [])

    def search(self, table: Dict[str, List[str]], query: str) -> List[str]:
        """Ids whose indexed value contains ``query`` (case-insensitive), in catalog order."""
        q = query.lower()
        matches = [
            track_id
            for value, ids in table.items()
            if q in value.lower()
            for track_id in ids
        ]
        matches.sort(key=self._position.__getitem__)
        return matches


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class CatalogStore:
    """
    Concurrency-safe catalog of tracks.

    ``refresh`` is the only writer. Concurrent refreshes coalesce: callers
    arriving while one is in flight await the same completion (and see the
    same failure, if any). Readers need no locking because the index is
    replaced as a whole.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        labels: Optional[BrowseLabels] = None,
    ) -> None:
        self._state = CatalogState.UNINITIALIZED
        self._index: Optional[CatalogIndex] = None
        self._random = rng or random.Random()
        self.labels = labels or BrowseLabels()

        # Overlay side-table, guarded by _overlay_lock
        self._favorites: set[str] = set()
        self._artwork: Dict[str, TrackArtwork] = {}
        self._overlay_lock = threading.Lock()

        # In-flight build signal, guarded by _refresh_lock
        self._inflight: Optional[Future] = None
        self._refresh_lock = threading.Lock()
        self._ready_listeners: List[ReadyCallback] = []
        self._listeners_lock = threading.Lock()
        self.last_error: Optional[BaseException] = None

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "CatalogStore":
        """Store using the browse labels configured in ``settings``."""
        return cls(labels=settings.labels)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == CatalogState.READY

    @property
    def track_count(self) -> int:
        index = self._index
        return len(index) if index is not None else 0

    async def refresh(self, source: Iterable[Track]) -> None:
        """
        Load every track from ``source`` and rebuild the indices.

        Raises SourceLoadFailure if the source fails; the previously loaded
        catalog (if any) stays in place. Callers on any thread or event loop
        that arrive while a build is running wait for that build instead.
        """
        inflight, owner = self._claim_refresh()
        if not owner:
            logger.debug("Catalog refresh already in flight, joining it")
            await asyncio.shield(asyncio.wrap_future(inflight))
            return

        loop = asyncio.get_running_loop()
        logger.info(f"Refreshing catalog from {source!r}")

        try:
            index = await loop.run_in_executor(None, CatalogIndex.build, source)
        except asyncio.CancelledError:
            self._release_refresh()
            inflight.cancel()
            raise
        except Exception as exc:
            logger.error(f"Failed to load track source: {exc}")
            failure = SourceLoadFailure(f"Track source failed: {exc}")
            # Joiners on other threads may re-raise it before this frame does
            failure.__cause__ = exc
            self._release_refresh(error=exc)
            inflight.set_exception(failure)
            self._notify_ready(False)
            raise failure from exc

        self._release_refresh(index=index)
        inflight.set_result(None)
        logger.info(
            f"Catalog ready: {len(index)} tracks, {len(index.by_genre)} genres"
        )
        self._notify_ready(True)

    def refresh_blocking(self, source: Iterable[Track]) -> None:
        """Run ``refresh`` to completion from synchronous code."""
        with self._refresh_lock:
            inflight = self._inflight
        if inflight is not None:
            logger.debug("Catalog refresh already in flight, waiting for it")
            inflight.result()
            return
        asyncio.run(self.refresh(source))

    def _claim_refresh(self) -> Tuple[Future, bool]:
        """Return the in-flight build signal and whether the caller must run the build."""
        with self._refresh_lock:
            if self._inflight is not None:
                return self._inflight, False
            self._inflight = Future()
            self._state = CatalogState.LOADING
            return self._inflight, True

    def _release_refresh(
        self,
        index: Optional[CatalogIndex] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        with self._refresh_lock:
            if index is not None:
                self._install(index)
            else:
                self._state = self._settled_state()
                if error is not None:
                    self.last_error = error
            self._inflight = None

    def _settled_state(self) -> CatalogState:
        """State to fall back to when a refresh does not complete."""
        return CatalogState.READY if self._index is not None else CatalogState.UNINITIALIZED

    def _install(self, index: CatalogIndex) -> None:
        with self._overlay_lock:
            self._favorites = set()
            self._artwork = {
                track_id: art
                for track_id, art in self._artwork.items()
                if track_id in index.by_id
            }
            self._index = index
            self._state = CatalogState.READY
            self.last_error = None

    def when_ready(self, callback: ReadyCallback) -> bool:
        """
        Run ``callback(success)`` once the catalog is ready.

        Fires immediately and returns True if a complete catalog is readable,
        which includes the previous catalog while a later refresh runs;
        otherwise queues the callback for the next refresh completion and
        returns False.
        """
        with self._listeners_lock:
            if self._index is None:
                self._ready_listeners.append(callback)
                return False
        callback(True)
        return True

    async def wait_until_ready(self) -> bool:
        """Suspend until a catalog is readable; returns False if loading failed."""
        if self._index is not None:
            return True
        loop = asyncio.get_running_loop()
        signal = loop.create_future()

        def _resolve(success: bool) -> None:
            if not signal.done():
                signal.set_result(success)

        self.when_ready(lambda success: loop.call_soon_threadsafe(_resolve, success))
        return await signal

    def _notify_ready(self, success: bool) -> None:
        with self._listeners_lock:
            listeners, self._ready_listeners = self._ready_listeners, []
        for listener in listeners:
            try:
                listener(success)
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Catalog ready listener raised: {exc}")

    # ------------------------------------------------------------------
    # Overlay
    # ------------------------------------------------------------------

    def _with_overlay(self, track: Track) -> Track:
        art = self._artwork.get(track.id)
        favorite = track.id in self._favorites
        if art is None and not favorite:
            return track
        update = {"favorite": favorite}
        if art is not None:
            update["album_art"] = art.album_art
            update["display_icon"] = art.display_icon
        return track.model_copy(update=update)

    def set_favorite(self, track_id: str, favorite: bool) -> None:
        """Mark or unmark a loaded track. Unknown ids are ignored."""
        with self._overlay_lock:
            if not favorite:
                self._favorites.discard(track_id)
            elif self._index is not None and track_id in self._index.by_id:
                self._favorites.add(track_id)
            else:
                logger.warning(f"set_favorite: unknown track id {track_id}")

    def is_favorite(self, track_id: str) -> bool:
        return track_id in self._favorites

    def update_artwork(self, track_id: str, album_art, display_icon) -> None:
        """Attach artwork to a loaded track. Unknown ids are ignored."""
        index = self._index
        if index is None or track_id not in index.by_id:
            logger.warning(f"update_artwork: unknown track id {track_id}")
            return
        with self._overlay_lock:
            self._artwork[track_id] = TrackArtwork(
                album_art=album_art, display_icon=display_icon
            )

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def _tracks(self, index: CatalogIndex, ids: List[str]) -> Iterator[Track]:
        for track_id in ids:
            yield self._with_overlay(index.by_id[track_id])

    def get_track(self, track_id: str) -> Optional[Track]:
        index = self._index
        if index is None:
            return None
        track = index.by_id.get(track_id)
        return self._with_overlay(track) if track is not None else None

    def get_genres(self) -> Iterator[str]:
        index = self._index
        if index is None:
            return iter(())
        return iter(list(index.by_genre))

    def get_tracks_by_genre(self, genre: str) -> Iterator[Track]:
        index = self._index
        if index is None:
            return iter(())
        return self._tracks(index, index.genre_ids(genre))

    def search_by_title(self, query: str) -> Iterator[Track]:
        return self._search("by_title", query)

    def search_by_album(self, query: str) -> Iterator[Track]:
        return self._search("by_album", query)

    def search_by_artist(self, query: str) -> Iterator[Track]:
        return self._search("by_artist", query)

    def search_by_genre(self, query: str) -> Iterator[Track]:
        return self._search("by_genre", query)

    def _search(self, table: str, query: str) -> Iterator[Track]:
        index = self._index
        if index is None:
            return iter(())
        return self._tracks(index, index.search(getattr(index, table), query))

    def shuffled_tracks(self) -> Iterator[Track]:
        """Every track exactly once, in random order."""
        index = self._index
        if index is None:
            return iter(())
        ids = list(index.by_id)
        self._random.shuffle(ids)
        return self._tracks(index, ids)

    # ------------------------------------------------------------------
    # Browse tree
    # ------------------------------------------------------------------

    def get_children(
        self, media_id: Optional[str], labels: Optional[BrowseLabels] = None
    ) -> List[BrowseNode]:
        """
        Children of a browse node. Unknown, over-deep and playable media ids
        have no children and yield an empty list.
        """
        if media_id is None:
            raise NullIdentifier("get_children requires a media id")
        labels = labels or self.labels
        parsed = MediaId.parse(media_id)

        if not parsed.browsable:
            return []

        if media_id == MEDIA_ID_ROOT:
            return [self._genres_root_node(labels)]

        if parsed.kind == MEDIA_ID_MUSICS_BY_GENRE:
            if not parsed.values:
                return [
                    self._genre_node(genre, labels)
                    for genre in self.get_genres()
                    if self._browsable_genre(genre)
                ]
            if len(parsed.values) == 1:
                genre = parsed.values[0]
                return [self._track_node(track) for track in self.get_tracks_by_genre(genre)]

        logger.warning(f"Skipping unmatched media id: {media_id}")
        return []

    @staticmethod
    def _browsable_genre(genre: str) -> bool:
        if is_valid_category(genre):
            return True
        logger.warning(f"Genre {genre!r} contains a reserved separator, not browsable")
        return False

    @staticmethod
    def _genres_root_node(labels: BrowseLabels) -> BrowseNode:
        return BrowseNode(
            media_id=MEDIA_ID_MUSICS_BY_GENRE,
            title=labels.genres_title,
            subtitle=labels.genres_subtitle,
            browsable=True,
        )

    @staticmethod
    def _genre_node(genre: str, labels: BrowseLabels) -> BrowseNode:
        return BrowseNode(
            media_id=create_media_id(None, MEDIA_ID_MUSICS_BY_GENRE, genre),
            title=genre,
            subtitle=labels.subtitle_for_genre(genre),
            browsable=True,
        )

    @staticmethod
    def _track_node(track: Track) -> BrowseNode:
        # Hierarchy-aware id so a queue can be rebuilt from where it was picked
        return BrowseNode(
            media_id=create_media_id(track.id, MEDIA_ID_MUSICS_BY_GENRE, track.genre),
            title=track.title,
            subtitle=track.artist,
            icon_uri=track.art_icon_uri or None,
            playable=True,
        )

    def __repr__(self) -> str:
        return f"CatalogStore(state={self._state.value}, tracks={self.track_count})"
