"""
Hierarchical Media IDs

A media id flattens a browse location into one string token:

    <kind>/<value>/<value>|<leaf id>

The category part names where an item was browsed from (e.g. genre ->
"Rock"), the optional leaf part is the unique track id. Tokens without a leaf
are browsable categories, tokens with one are playable tracks. Keeping the
category in the token lets a queue be rebuilt from the place the user picked
a track, even when that track appears under several categories.

Categories may not contain either separator. The leaf id is stored verbatim:
it always follows the first LEAF_SEPARATOR, so it may contain both.
"""

from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidIdentifierComponent, NullIdentifier


CATEGORY_SEPARATOR = "/"
LEAF_SEPARATOR = "|"
RESERVED_SEPARATORS: Tuple[str, str] = (CATEGORY_SEPARATOR, LEAF_SEPARATOR)

# ---------------------------------------------------------------------------
# Well-known browse tokens
# ---------------------------------------------------------------------------

MEDIA_ID_ROOT = "__ROOT__"
MEDIA_ID_EMPTY_ROOT = "__EMPTY_ROOT__"
MEDIA_ID_MUSICS_BY_GENRE = "__BY_GENRE__"
MEDIA_ID_MUSICS_BY_SEARCH = "__BY_SEARCH__"
MEDIA_ID_MUSICS_SHUFFLED = "__SHUFFLED__"


def is_valid_category(category) -> bool:
    return isinstance(category, str) and not any(
        sep in category for sep in RESERVED_SEPARATORS
    )


def _validate(categories: Iterable) -> Tuple[str, ...]:
    checked = tuple(categories)
    for category in checked:
        if not is_valid_category(category):
            raise InvalidIdentifierComponent(category)
    return checked


def _require(media_id: Optional[str]) -> str:
    if media_id is None:
        raise NullIdentifier("media id is required")
    return media_id


class MediaId(BaseModel):
    """Parsed form of a media id token."""

    model_config = ConfigDict(frozen=True)

    categories: Tuple[str, ...] = Field(..., description="Category kind followed by its values")
    leaf_id: Optional[str] = Field(None, description="Unique track id for playable items")

    @classmethod
    def parse(cls, media_id: Optional[str]) -> "MediaId":
        token = _require(media_id)
        head, sep, leaf = token.partition(LEAF_SEPARATOR)
        return cls(
            categories=tuple(head.split(CATEGORY_SEPARATOR)),
            leaf_id=leaf if sep else None,
        )

    def serialize(self) -> str:
        token = CATEGORY_SEPARATOR.join(_validate(self.categories))
        if self.leaf_id is not None:
            token += LEAF_SEPARATOR + self.leaf_id
        return token

    @property
    def browsable(self) -> bool:
        return self.leaf_id is None

    @property
    def kind(self) -> str:
        return self.categories[0]

    @property
    def values(self) -> Tuple[str, ...]:
        return self.categories[1:]

    def parent(self) -> "MediaId":
        """One level up: drop the leaf, else the last value, else go to root."""
        if self.leaf_id is not None:
            return MediaId(categories=self.categories)
        if len(self.categories) <= 1:
            return MediaId(categories=(MEDIA_ID_ROOT,))
        return MediaId(categories=self.categories[:-1])


# ---------------------------------------------------------------------------
# Functional helpers
# ---------------------------------------------------------------------------

def create_media_id(leaf_id: Optional[str], kind: str, *values: str) -> str:
    """
    Build a media id for a browsable (``leaf_id=None``) or playable item.

    Raises InvalidIdentifierComponent if ``kind`` or any value contains a
    reserved separator.
    """
    return MediaId(categories=_validate((kind,) + values), leaf_id=leaf_id).serialize()


def extract_leaf_id(media_id: Optional[str]) -> Optional[str]:
    """Return the unique track id, or None for a browsable category."""
    return MediaId.parse(media_id).leaf_id


def get_hierarchy(media_id: Optional[str]) -> List[str]:
    """Return ``[kind, value, ...]`` with the leaf segment stripped."""
    return list(MediaId.parse(media_id).categories)


def extract_category_value(media_id: Optional[str]) -> Optional[str]:
    """Return the deepest category value, or None if there is none."""
    values = MediaId.parse(media_id).values
    return values[-1] if values else None


def is_browsable(media_id: Optional[str]) -> bool:
    return MediaId.parse(media_id).browsable


def parent_media_id(media_id: Optional[str]) -> str:
    """
    Parent of a media id. A playable item's parent is its category, a
    category's parent drops its last value, a bare kind's parent is the
    root, and the root is its own parent.
    """
    return MediaId.parse(media_id).parent().serialize()


def sanitize_component(text: str) -> str:
    """Make free text usable as a category value."""
    for sep in RESERVED_SEPARATORS:
        text = text.replace(sep, " ")
    return text
