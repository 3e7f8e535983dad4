"""Unit tests for the now-playing QueueManager."""

import pytest

from media_catalog.media_id import (
    MEDIA_ID_MUSICS_BY_GENRE,
    create_media_id,
    extract_leaf_id,
)
from media_catalog.models import BrowseLabels
from media_catalog.queue_manager import QueueListener, QueueManager


class RecordingListener(QueueListener):
    def __init__(self):
        self.indexes = []
        self.queues = []
        self.metadata = []
        self.errors = 0

    def on_metadata_changed(self, track):
        self.metadata.append(track)

    def on_metadata_error(self):
        self.errors += 1

    def on_current_index_updated(self, index):
        self.indexes.append(index)

    def on_queue_updated(self, title, queue):
        self.queues.append((title, queue))


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def manager(builder, listener):
    return QueueManager(builder, listener)


@pytest.fixture
def full_queue(builder):
    return builder.random_queue()


def genre_queue(builder, genre):
    return builder.queue_for_media_id(create_media_id(None, MEDIA_ID_MUSICS_BY_GENRE, genre))


class TestBrowsingCategory:
    def test_is_same_browsing_category(self, manager, builder):
        genre1 = genre_queue(builder, "Genre 1")
        genre2 = genre_queue(builder, "Genre 2")

        manager.set_current_queue("Queue genre 1", genre1)

        assert not manager.is_same_browsing_category(genre2[0].media_id)
        assert manager.is_same_browsing_category(genre1[0].media_id)

    def test_empty_queue_has_no_category(self, manager, builder):
        assert not manager.is_same_browsing_category(genre_queue(builder, "Genre 1")[0].media_id)


class TestSetQueueItem:
    def test_set_valid_queue_item(self, manager, listener, full_queue):
        expected_index = len(full_queue) - 1
        expected = full_queue[expected_index]

        manager.set_current_queue("Queue 1", full_queue)
        assert manager.set_current_queue_item(expected.queue_id)
        assert manager.set_current_queue_item(expected.media_id)

        assert listener.queues == [("Queue 1", full_queue)]
        assert listener.indexes == [expected_index, expected_index]
        assert manager.get_current_music() == expected

    def test_set_invalid_queue_item(self, manager, listener, full_queue):
        manager.set_current_queue("Queue 1", full_queue)

        assert not manager.set_current_queue_item(2**31 - 1)
        assert not manager.set_current_queue_item(-1)
        assert not manager.set_current_queue_item("INVALID_MEDIA_ID")

        assert listener.indexes == []
        assert manager.current_index == 0

    def test_initial_media_id_sets_position(self, manager, full_queue):
        manager.set_current_queue("Queue 1", full_queue, full_queue[2].media_id)
        assert manager.current_index == 2

    def test_unknown_initial_media_id_starts_at_zero(self, manager, full_queue):
        manager.set_current_queue("Queue 1", full_queue, "nope")
        assert manager.current_index == 0


class TestSkip:
    def test_skip(self, manager, full_queue):
        assert len(full_queue) > 3
        manager.set_current_queue("Queue 1", full_queue)

        assert manager.set_current_queue_item(full_queue[3].queue_id)
        assert manager.get_current_music().queue_id == full_queue[3].queue_id

        assert manager.skip_queue_position(-1)
        assert manager.get_current_music().queue_id == full_queue[2].queue_id

        assert manager.skip_queue_position(-2)
        assert manager.get_current_music().queue_id == full_queue[0].queue_id

        # Skipping back from the first item stays there
        assert manager.skip_queue_position(-1)
        assert manager.get_current_music().queue_id == full_queue[0].queue_id

        # Forward skips wrap: (index + amount) % size
        assert manager.skip_queue_position(len(full_queue) + 1)
        assert manager.get_current_music().queue_id == full_queue[1].queue_id

    def test_skip_on_empty_queue(self, manager):
        assert not manager.skip_queue_position(1)
        assert manager.get_current_music() is None


class TestQueueSources:
    def test_set_queue_from_search(self, manager, listener):
        assert manager.set_queue_from_search("Romantic")
        assert manager.current_queue_size == 2
        assert listener.queues[0][0] == BrowseLabels().search_queue_title

        for _ in range(manager.current_queue_size):
            assert "Romantic" in manager.get_current_music().title
            manager.skip_queue_position(1)

    def test_search_without_results(self, manager):
        assert not manager.set_queue_from_search("XYZ")
        assert manager.current_queue_size == 0

    def test_set_random_queue(self, manager, listener):
        manager.set_random_queue()
        assert manager.current_queue_size == 5
        assert listener.queues[0][0] == "Random music"

    def test_set_queue_from_music(self, manager, store, listener):
        genre = next(store.get_genres())
        track = next(store.get_tracks_by_genre(genre))
        media_id = create_media_id(track.id, MEDIA_ID_MUSICS_BY_GENRE, genre)

        manager.set_queue_from_music(media_id)

        expected = len(list(store.get_tracks_by_genre(genre)))
        assert manager.current_queue_size == expected
        assert listener.queues[0][0] == f"{genre} songs"
        assert [t.id for t in listener.metadata] == [track.id]

        for _ in range(manager.current_queue_size):
            item = manager.get_current_music()
            assert store.get_track(extract_leaf_id(item.media_id)).genre == genre
            manager.skip_queue_position(1)

    def test_same_category_reuses_queue(self, manager, store, listener):
        tracks = list(store.get_tracks_by_genre("Genre 1"))
        first = create_media_id(tracks[0].id, MEDIA_ID_MUSICS_BY_GENRE, "Genre 1")
        third = create_media_id(tracks[2].id, MEDIA_ID_MUSICS_BY_GENRE, "Genre 1")

        manager.set_queue_from_music(first)
        queue = manager.queue
        manager.set_queue_from_music(third)

        assert manager.queue is queue
        assert len(listener.queues) == 1
        assert manager.current_index == 2
        assert [t.id for t in listener.metadata] == [tracks[0].id, tracks[2].id]

    def test_other_category_replaces_queue(self, manager, store, listener):
        g1 = next(store.get_tracks_by_genre("Genre 1"))
        g2 = next(store.get_tracks_by_genre("Genre 2"))

        manager.set_queue_from_music(create_media_id(g1.id, MEDIA_ID_MUSICS_BY_GENRE, "Genre 1"))
        manager.set_queue_from_music(create_media_id(g2.id, MEDIA_ID_MUSICS_BY_GENRE, "Genre 2"))

        assert len(listener.queues) == 2
        assert manager.current_queue_size == 2
        assert manager.get_current_music().track.id == g2.id


class TestMetadata:
    def test_metadata_error_without_current_item(self, manager, listener):
        manager.update_metadata()
        assert listener.errors == 1
        assert listener.metadata == []

    def test_metadata_carries_overlay(self, manager, store, listener, full_queue):
        manager.set_current_queue("Queue 1", full_queue)
        current = manager.get_current_music()
        store.set_favorite(current.track.id, True)

        manager.update_metadata()
        assert listener.metadata[-1].favorite is True

    def test_default_listener(self, builder):
        manager = QueueManager(builder)
        manager.set_random_queue()
        manager.update_metadata()
        assert manager.current_queue_size == 5
