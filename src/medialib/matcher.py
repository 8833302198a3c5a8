from typing import Callable, Iterable

from .catalog import Catalog
from .item import MediaItem
from .query import Clause, parse_query

FieldGetter = Callable[[MediaItem], str]

FIELD_GETTERS: dict[str, FieldGetter] = {
    "path": lambda item: item.normalized_pathname,
    "pathname": lambda item: item.normalized_pathname,
    "album": lambda item: item.normalized_album,
    "artist": lambda item: item.normalized_artist,
    "name": lambda item: item.normalized_name,
    "disc": lambda item: item.normalized_disc,
    "track": lambda item: item.normalized_track,
    "year": lambda item: item.normalized_year,
    "genre": lambda item: item.normalized_genre,
    "mtime": lambda item: item.mtime,
    "added": lambda item: item.mtime,
}

_ANY_FIELD: tuple[FieldGetter, ...] = (
    FIELD_GETTERS["pathname"],
    FIELD_GETTERS["album"],
    FIELD_GETTERS["artist"],
    FIELD_GETTERS["name"],
    FIELD_GETTERS["disc"],
    FIELD_GETTERS["track"],
    FIELD_GETTERS["year"],
    FIELD_GETTERS["genre"],
    FIELD_GETTERS["mtime"],
)


def _contains(item: MediaItem, clause: Clause) -> bool:
    getter = FIELD_GETTERS.get(clause.keyword)
    if getter is not None:
        return clause.term in getter(item)
    # No keyword, or one that names no field: search everything.
    return any(clause.term in field(item) for field in _ANY_FIELD)


def match_item(item: MediaItem, clauses: Iterable[Clause]) -> bool:
    """Checks whether an item satisfies every clause.

    Each clause tests substring containment of its term in the named normalized field, or
    in any field when the keyword is empty or unknown; a negated clause inverts that test.
    Evaluation stops at the first failing clause. No clauses at all match every item.

    Args:
        item: The catalog item.
        clauses: Normalized clauses, usually from `parse_query`.

    Returns:
        bool: True if the item matches.
    """
    for clause in clauses:
        if _contains(item, clause) == clause.negated:
            return False
    return True


def match_items(items: Iterable[MediaItem], clauses: list[Clause]) -> list[MediaItem]:
    """Returns the items matching all clauses, in their original order."""
    return [item for item in items if match_item(item, clauses)]


def search(catalog: Catalog, query: str) -> list[MediaItem]:
    """Parses a raw query and returns the matching catalog items in catalog order."""
    return match_items(catalog.items, parse_query(query))
