from dataclasses import dataclass, field
from typing import Iterator

from .item import MediaItem


@dataclass(frozen=True)
class Catalog:
    """An immutable snapshot of every item under one media root.

    A new Catalog is built for each rebuild and published by swapping the reference held
    by the store; a published Catalog is never modified.

    Attributes:
        items: The items in scan order.
        synced_at: POSIX timestamp of the scan that produced the items, 0.0 if never synced.
    """

    items: tuple[MediaItem, ...] = field(default_factory=tuple)
    synced_at: float = 0.0

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[MediaItem]:
        return iter(self.items)
