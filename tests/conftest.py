"""Shared fixtures: a five-track library across two genres."""

import pytest

from media_catalog.catalog import CatalogStore
from media_catalog.queue_builder import QueueBuilder
from media_catalog.sources import InMemoryTrackSource


def make_source():
    source = InMemoryTrackSource()
    source.add("Music 1", "Album 1", "Smith Singer", "Genre 1",
               "https://examplemusic.com/music1.mp3", "https://icons.com/album1.png", 1, 3, 3200)
    source.add("Music 2", "Album 1", "Joe Singer", "Genre 1",
               "https://examplemusic.com/music2.mp3", "https://icons.com/album1.png", 2, 3, 3300)
    source.add("Music 3", "Album 1", "John Singer", "Genre 1",
               "https://examplemusic.com/music3.mp3", "https://icons.com/album1.png", 3, 3, 3400)
    source.add("Romantic Song 1", "Album 2", "Joe Singer", "Genre 2",
               "https://examplemusic.com/music4.mp3", "https://icons.com/album2.png", 1, 2, 4200)
    source.add("Romantic Song 2", "Album 2", "Joe Singer", "Genre 2",
               "https://examplemusic.com/music5.mp3", "https://icons.com/album2.png", 2, 2, 4200)
    return source


@pytest.fixture
def source():
    return make_source()


@pytest.fixture
def store(source):
    s = CatalogStore()
    s.refresh_blocking(source)
    return s


@pytest.fixture
def builder(store):
    return QueueBuilder(store)
