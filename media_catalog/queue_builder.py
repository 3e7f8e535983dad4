"""
Play Queue Builder

Turns a browse location or a search request into an ordered play queue.
Each queue item carries a hierarchy-aware media id (category the queue was
built from + track id) and a queue id equal to its position, since queues
never change after they are built.
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from .catalog import CatalogStore
from .config import CatalogSettings
from .media_id import (
    MEDIA_ID_MUSICS_BY_GENRE,
    MEDIA_ID_MUSICS_BY_SEARCH,
    MEDIA_ID_MUSICS_SHUFFLED,
    create_media_id,
    get_hierarchy,
    sanitize_component,
)
from .models import QueueItem, SearchFocus, SearchParams, Track


NOT_FOUND = -1


class QueueBuilder:
    """Builds play queues from a CatalogStore."""

    def __init__(
        self,
        store: CatalogStore,
        settings: Optional[CatalogSettings] = None,
    ) -> None:
        self.store = store
        self.settings = settings or CatalogSettings()

    # ------------------------------------------------------------------
    # Queue construction
    # ------------------------------------------------------------------

    def queue_for_media_id(self, media_id: str) -> List[QueueItem]:
        """
        Queue for the category a media id was browsed from.

        Supports ``__BY_GENRE__/<genre>`` and ``__BY_SEARCH__/<query>``; the
        leaf part, if any, is ignored. Anything else yields an empty queue.
        """
        hierarchy = get_hierarchy(media_id)
        if len(hierarchy) != 2:
            logger.error(f"Could not build a playing queue for media id: {media_id}")
            return []

        category_type, category_value = hierarchy
        logger.debug(f"Creating playing queue for {category_type}, {category_value}")

        if category_type == MEDIA_ID_MUSICS_BY_GENRE:
            tracks = self.store.get_tracks_by_genre(category_value)
        elif category_type == MEDIA_ID_MUSICS_BY_SEARCH:
            tracks = self._unstructured_search(category_value)
        else:
            logger.error(f"Unrecognized category type: {category_type} for media id {media_id}")
            return []

        return self._to_queue(tracks, category_type, category_value)

    def queue_for_search(
        self, query: Optional[str], extras: Optional[Mapping[str, Any]] = None
    ) -> List[QueueItem]:
        """
        Queue for a search request.

        An empty query means "play anything" and gets the shuffled catalog.
        A genre, artist, album or song focus looks up that field; when the
        focused lookup finds nothing, or there is no focus, the query is
        matched against the configured fallback fields, title first by default.
        """
        params = SearchParams.from_query(query, extras)
        logger.debug(f"Creating playing queue from search: {params}")

        if params.focus == SearchFocus.ANY:
            return self.random_queue()

        term, tracks = self._focused_search(params)
        if not tracks:
            term, tracks = params.query, self._unstructured_search(params.query)
        return self._to_queue(tracks, MEDIA_ID_MUSICS_BY_SEARCH, sanitize_component(term))

    def random_queue(self) -> List[QueueItem]:
        """The whole catalog in random order."""
        return self._to_queue(self.store.shuffled_tracks(), MEDIA_ID_MUSICS_SHUFFLED)

    def _focused_search(self, params: SearchParams) -> Tuple[str, List[Track]]:
        """Search term and matches for the requested focus; no matches when unfocused."""
        if params.focus == SearchFocus.GENRE:
            term = params.genre or params.query
            return term, list(self.store.get_tracks_by_genre(term))
        if params.focus == SearchFocus.ARTIST:
            term = params.artist or params.query
            return term, list(self.store.search_by_artist(term))
        if params.focus == SearchFocus.ALBUM:
            term = params.album or params.query
            return term, list(self.store.search_by_album(term))
        if params.focus == SearchFocus.SONG:
            term = params.song or params.query
            return term, list(self.store.search_by_title(term))
        return params.query, []

    def _unstructured_search(self, query: str) -> List[Track]:
        for field in self.settings.search_fallback:
            tracks = list(getattr(self.store, f"search_by_{field}")(query))
            if tracks:
                return tracks
        return []

    @staticmethod
    def _to_queue(tracks: Iterable[Track], *categories: str) -> List[QueueItem]:
        return [
            QueueItem(
                queue_id=position,
                media_id=create_media_id(track.id, *categories),
                track=track,
            )
            for position, track in enumerate(tracks)
        ]

    # ------------------------------------------------------------------
    # Queue navigation
    # ------------------------------------------------------------------

    @staticmethod
    def index_of(queue: Optional[Sequence[QueueItem]], key: Union[str, int]) -> int:
        """Position of the item with the given media id or queue id, or NOT_FOUND."""
        if queue is None:
            return NOT_FOUND
        if isinstance(key, str):
            matches = (item.media_id == key for item in queue)
        elif isinstance(key, int) and not isinstance(key, bool):
            matches = (item.queue_id == key for item in queue)
        else:
            return NOT_FOUND
        for position, matched in enumerate(matches):
            if matched:
                return position
        return NOT_FOUND

    @staticmethod
    def is_playable_index(index: int, queue: Optional[Sequence[QueueItem]]) -> bool:
        return queue is not None and 0 <= index < len(queue)
