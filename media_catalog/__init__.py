"""
Media catalog engine: track indices, a hierarchical browse tree addressed by
flat media ids, and play queues built from browse nodes or searches.
"""

from .catalog import CatalogIndex, CatalogStore
from .config import CatalogSettings, configure_logging
from .errors import InvalidIdentifierComponent, NullIdentifier, SourceLoadFailure
from .models import (
    BrowseLabels,
    BrowseNode,
    CatalogState,
    QueueItem,
    SearchFocus,
    SearchParams,
    Track,
)
from .queue_builder import NOT_FOUND, QueueBuilder
from .queue_manager import QueueListener, QueueManager
from .sources import InMemoryTrackSource, JsonCatalogSource, TrackSource

__all__ = [
    "BrowseLabels",
    "BrowseNode",
    "CatalogIndex",
    "CatalogSettings",
    "CatalogState",
    "CatalogStore",
    "InMemoryTrackSource",
    "InvalidIdentifierComponent",
    "JsonCatalogSource",
    "NOT_FOUND",
    "NullIdentifier",
    "QueueBuilder",
    "QueueItem",
    "QueueListener",
    "QueueManager",
    "SearchFocus",
    "SearchParams",
    "SourceLoadFailure",
    "Track",
    "TrackSource",
    "configure_logging",
]
