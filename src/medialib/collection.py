import random
import re
from datetime import date
from pathlib import Path, PurePosixPath
from threading import Event, Thread
from typing import Iterable, Optional

from watchdog.observers import Observer

from common.logging import Logger, NullLogger

from ._scanner import AUDIO_EXTENSIONS, VIDEO_EXTENSIONS, TagReader
from ._tags import read_tags
from ._watcher import RebuildWatcher
from .catalog import Catalog
from .exceptions import MediaLibError
from .indexing_status import get_indexing_status
from .item import MediaItem
from .matcher import search
from .store import CatalogStore

RANDOM_QUERY = "?"
RECENT_MONTHS = 6

_WHITESPACE = re.compile(r"\s+")


class MediaCollection:
    """The media library of one root directory: catalog upkeep plus search.

    Owns a CatalogStore and keeps it current with two triggers: a periodic one that rebuilds
    every `rebuild_interval` seconds and, when `watch_changes` is set, a watchdog observer
    that requests a rebuild once the tree has been quiet after a change. Both go through the
    store's single-flight rebuild, so a trigger firing mid-rebuild is simply dropped.

    Searches run against whatever snapshot is published at call time and never raise for
    catalog problems; before the first load completes they see an empty catalog.

    Usage:
        with MediaCollection(media_root=Path("/srv/media")) as media:
            media.load()
            for item in media.search("artist:monae -remix"):
                print(item.pathname)
    """

    DEFAULT_REBUILD_INTERVAL = 120.0

    def __init__(
        self,
        media_root: Path | str,
        cache_path: Path | str | None = None,
        status_dir: Path | str | None = None,
        audio_extensions: Iterable[str] = AUDIO_EXTENSIONS,
        video_extensions: Iterable[str] = VIDEO_EXTENSIONS,
        rebuild_interval: float = DEFAULT_REBUILD_INTERVAL,
        watch_changes: bool = False,
        tag_reader: TagReader = read_tags,
        logger: Logger | None = None,
    ) -> None:
        self.media_root = Path(media_root)
        self.rebuild_interval = rebuild_interval
        self.watch_changes = watch_changes
        self._logger = logger or NullLogger()
        self._store = CatalogStore(
            self.media_root,
            cache_path=cache_path,
            status_dir=status_dir,
            audio_extensions=audio_extensions,
            video_extensions=video_extensions,
            tag_reader=tag_reader,
            logger=self._logger,
        )

        self._stop = Event()
        self._trigger_thread: Optional[Thread] = None
        self._observer: Optional[Observer] = None
        self._watcher: Optional[RebuildWatcher] = None

    def __enter__(self) -> "MediaCollection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # === Catalog ===

    @property
    def catalog(self) -> Catalog:
        return self._store.catalog

    def count(self) -> int:
        return len(self._store.catalog)

    def is_indexing(self) -> bool:
        return self._store.is_rebuilding()

    def indexing_status(self) -> dict | None:
        """Returns the advisory progress of a running rebuild, or None when idle."""
        return get_indexing_status(self._store.status_dir, logger=self._logger)

    def load(self) -> Catalog:
        """Loads the cached catalog, rebuilding it when stale. See `CatalogStore.load`."""
        return self._store.load()

    def rebuild(self) -> Optional[Catalog]:
        """Rebuilds synchronously. Returns None if another rebuild is already running."""
        return self._store.rebuild()

    def request_rebuild(self) -> bool:
        """Starts a rebuild in a background thread.

        Returns:
            bool: False if a rebuild is already running and the request was dropped.
        """
        if self._store.is_rebuilding():
            self._logger.info("Rebuild requested while one is running; ignoring")
            return False
        Thread(target=self._safe_rebuild, name="catalog-rebuild", daemon=True).start()
        return True

    def _safe_rebuild(self, initial: bool = False) -> None:
        try:
            if initial:
                self._store.load()
            else:
                self._store.rebuild()
        except (MediaLibError, OSError) as e:
            self._logger.error(f"Catalog rebuild failed: {e}", exc_info=True)
        except Exception:
            # Keeps the periodic trigger alive whatever the scan or a hook raises
            self._logger.exception("Unexpected error during catalog rebuild")

    # === Triggers ===

    def start(self) -> None:
        """Loads the catalog in the background and starts the rebuild triggers.

        Returns:
            None
        """
        if self._trigger_thread is not None:
            return
        self._stop.clear()
        self._trigger_thread = Thread(
            target=self._periodic_loop, name="catalog-trigger", daemon=True
        )
        self._trigger_thread.start()
        if self.watch_changes:
            self.start_monitoring()

    def _periodic_loop(self) -> None:
        self._safe_rebuild(initial=True)
        while not self._stop.wait(self.rebuild_interval):
            self._logger.debug("Periodic catalog rebuild")
            self._safe_rebuild()

    def start_monitoring(self) -> None:
        """Starts the watchdog observer that requests rebuilds on filesystem changes."""
        if self._observer is not None:
            return
        self._watcher = RebuildWatcher(self.media_root, self.request_rebuild)
        self._observer = Observer()
        self._observer.schedule(self._watcher, str(self.media_root), recursive=True)
        self._observer.start()
        self._logger.info(f"Watching {self.media_root} for changes")

    def close(self) -> None:
        """Stops the periodic trigger and the observer. A running rebuild is not interrupted."""
        self._stop.set()
        if self._trigger_thread is not None:
            self._trigger_thread.join(timeout=5)
            self._trigger_thread = None
        if self._watcher is not None:
            self._watcher.shutdown()
            self._watcher = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    # === Search ===

    def search(self, query: str) -> list[MediaItem]:
        """Returns the items matching `query` in catalog order. An empty query matches everything."""
        return search(self._store.catalog, query)

    def search_with_fallback(
        self,
        query: str,
        today: date | None = None,
        rng: random.Random | None = None,
    ) -> list[MediaItem]:
        """Search for the UI, which wants something to show even without a query.

        A blank query looks for items added in the current month, then in each of the five
        months before it, and returns the first non-empty result. Failing that, or for the
        query "?", the last word of a random item's folder name is used as the query.

        Args:
            query: The raw query string.
            today: Reference date for the recent-items lookup, today by default.
            rng: Random source for the random-folder query.

        Returns:
            list[MediaItem]: The matching items in catalog order.
        """
        catalog = self._store.catalog
        query = query.strip()

        if not query:
            today = today or date.today()
            year, month = today.year, today.month
            for _ in range(RECENT_MONTHS):
                matches = search(catalog, f"mtime:{year:04d}-{month:02d}-")
                if matches:
                    return matches
                year, month = (year - 1, 12) if month == 1 else (year, month - 1)
            query = RANDOM_QUERY

        if query == RANDOM_QUERY:
            if not catalog.items:
                return []
            item = (rng or random).choice(catalog.items)
            folder = str(PurePosixPath(item.pathname).parent)
            query = _WHITESPACE.split(folder)[-1]
            self._logger.debug(f"Random query {query!r}")

        return search(catalog, query)
