"""
Now-Playing Queue

Keeps the current play queue and the position of the current item in it.
Queues are produced by a QueueBuilder; this module only moves through them
and tells a listener when the queue, the position or the current track's
metadata changes.
"""

from typing import Any, List, Mapping, Optional, Sequence, Union

from loguru import logger

from .media_id import extract_category_value, extract_leaf_id, get_hierarchy
from .models import QueueItem, Track
from .queue_builder import QueueBuilder


class QueueListener:
    """Receives now-playing updates. Override the hooks you care about."""

    def on_metadata_changed(self, track: Track) -> None:
        pass

    def on_metadata_error(self) -> None:
        pass

    def on_current_index_updated(self, index: int) -> None:
        pass

    def on_queue_updated(self, title: str, queue: Sequence[QueueItem]) -> None:
        pass


class QueueManager:
    def __init__(self, builder: QueueBuilder, listener: Optional[QueueListener] = None) -> None:
        self.builder = builder
        self.listener = listener or QueueListener()
        self._queue: List[QueueItem] = []
        self._current_index = 0

    @property
    def store(self):
        return self.builder.store

    @property
    def queue(self) -> List[QueueItem]:
        return self._queue

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_queue_size(self) -> int:
        return len(self._queue)

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    def get_current_music(self) -> Optional[QueueItem]:
        if not QueueBuilder.is_playable_index(self._current_index, self._queue):
            return None
        return self._queue[self._current_index]

    def is_same_browsing_category(self, media_id: str) -> bool:
        """True if ``media_id`` was browsed from the category of the current item."""
        current = self.get_current_music()
        if current is None:
            return False
        return get_hierarchy(media_id) == get_hierarchy(current.media_id)

    def set_current_queue_item(self, key: Union[str, int]) -> bool:
        """Move to the item with the given media id or queue id."""
        index = QueueBuilder.index_of(self._queue, key)
        self._set_current_index(index)
        return index >= 0

    def _set_current_index(self, index: int) -> None:
        if QueueBuilder.is_playable_index(index, self._queue):
            self._current_index = index
            self.listener.on_current_index_updated(index)

    def skip_queue_position(self, amount: int) -> bool:
        """
        Move ``amount`` items forward (or back, if negative).

        Skipping back past the first item stays on the first item; skipping
        forward past the last item wraps around to the start.
        """
        if not self._queue:
            logger.error(f"Cannot skip {amount} positions on an empty queue")
            return False
        index = self._current_index + amount
        if index < 0:
            index = 0
        else:
            index %= len(self._queue)
        if not QueueBuilder.is_playable_index(index, self._queue):
            logger.error(
                f"Cannot move queue index by {amount}. "
                f"Current={self._current_index} queue length={len(self._queue)}"
            )
            return False
        self._current_index = index
        return True

    # ------------------------------------------------------------------
    # Queue replacement
    # ------------------------------------------------------------------

    def set_current_queue(
        self,
        title: str,
        queue: List[QueueItem],
        initial_media_id: Optional[str] = None,
    ) -> None:
        self._queue = queue
        index = 0
        if initial_media_id is not None:
            index = QueueBuilder.index_of(queue, initial_media_id)
        self._current_index = max(index, 0)
        self.listener.on_queue_updated(title, queue)

    def set_queue_from_search(
        self, query: Optional[str], extras: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """Replace the queue with search results; False if nothing matched."""
        queue = self.builder.queue_for_search(query, extras)
        self.set_current_queue(self.store.labels.search_queue_title, queue)
        return bool(queue)

    def set_random_queue(self) -> None:
        self.set_current_queue(self.store.labels.random_queue_title, self.builder.random_queue())

    def set_queue_from_music(self, media_id: str) -> None:
        """
        Play a track picked from the browse tree.

        ``media_id`` is hierarchy-aware, so the queue is the category the
        track was picked from. If the current queue already came from that
        category it is kept and only the position moves.
        """
        logger.debug(f"Setting queue from music: {media_id}")
        reused = False
        if self.is_same_browsing_category(media_id):
            reused = self.set_current_queue_item(media_id)
        if not reused:
            title = self.store.labels.subtitle_for_genre(extract_category_value(media_id) or "")
            self.set_current_queue(title, self.builder.queue_for_media_id(media_id), media_id)
        self.update_metadata()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def update_metadata(self) -> None:
        """Send the current track, with its overlay, to the listener."""
        current = self.get_current_music()
        if current is None:
            self.listener.on_metadata_error()
            return
        track_id = extract_leaf_id(current.media_id)
        track = self.store.get_track(track_id)
        if track is None:
            raise ValueError(f"Invalid track id {track_id}")
        self.listener.on_metadata_changed(track)

    def __repr__(self) -> str:
        return f"QueueManager(size={self.current_queue_size}, index={self._current_index})"
