from .catalog import Catalog
from .collection import MediaCollection
from .exceptions import CacheDecodeError, CacheWriteError, MediaLibError, ScanRootError
from .indexing_status import get_indexing_status
from .item import MediaItem, build_item, normalize_for_search
from .matcher import match_item, match_items, search
from .query import Clause, parse_query, reconstruct_clauses, tokenize
from .store import CatalogStore

__all__ = [
    "CacheDecodeError",
    "CacheWriteError",
    "Catalog",
    "CatalogStore",
    "Clause",
    "MediaCollection",
    "MediaItem",
    "MediaLibError",
    "ScanRootError",
    "build_item",
    "get_indexing_status",
    "match_item",
    "match_items",
    "normalize_for_search",
    "parse_query",
    "reconstruct_clauses",
    "search",
    "tokenize",
]
