"""
Error types for the media catalog.

Structural caller mistakes (bad identifier components, missing identifiers)
raise immediately. A failing track source surfaces as ``SourceLoadFailure``
from ``CatalogStore.refresh``. Absence of data is never an error: lookups
return empty results instead.
"""


class InvalidIdentifierComponent(ValueError):
    """A category kind or value contains a reserved separator."""

    def __init__(self, component) -> None:
        super().__init__(f"Invalid category: {component!r}")
        self.component = component


class NullIdentifier(TypeError):
    """An operation that requires a media id received ``None``."""


class SourceLoadFailure(RuntimeError):
    """The track source failed while the catalog was being refreshed."""
