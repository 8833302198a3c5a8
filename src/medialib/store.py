import gzip
import os
import pickle
import tempfile
import time
import zlib
from pathlib import Path
from threading import Lock
from typing import BinaryIO, Iterable, Optional

from common.logging import Logger, NullLogger

from ._scanner import AUDIO_EXTENSIONS, VIDEO_EXTENSIONS, DirectoryHook, TagReader, TreeScanner
from ._tags import read_tags
from .catalog import Catalog
from .exceptions import CacheDecodeError, CacheWriteError
from .indexing_status import clear_indexing_status, set_indexing_status
from .item import MediaItem

CACHE_BASENAME = ".catalog.pickle.gz"
CACHE_FORMAT = "medialib-catalog"
CACHE_VERSION = 1

_RECORD_FIELDS = ("pathname", "album", "artist", "name", "disc", "track", "year", "genre", "mtime")


# === Codec ===


class _RecordUnpickler(pickle.Unpickler):
    """Unpickler that only accepts builtin containers and scalars."""

    def find_class(self, module: str, name: str):
        raise pickle.UnpicklingError(f"Refusing to load {module}.{name} from catalog cache")


def _load_record(stream: BinaryIO):
    """Loads one pickled record. EOFError passes through; any other failure is a decode error."""
    try:
        return _RecordUnpickler(stream).load()
    except EOFError:
        raise
    except Exception as e:
        # A corrupt body can surface as MemoryError or OverflowError from the frame reader
        raise CacheDecodeError(f"{type(e).__name__}: {e}") from e


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def write_catalog(stream: BinaryIO, catalog: Catalog) -> None:
    """Encodes a catalog onto a binary stream.

    The stream holds a header record followed by one record per item, each pickled
    separately, so a reader can stop cleanly at end of stream.

    Args:
        stream: Writable binary stream.
        catalog: The catalog to encode.

    Returns:
        None
    """
    header = {
        "format": CACHE_FORMAT,
        "version": CACHE_VERSION,
        "synced_at": catalog.synced_at,
        "count": len(catalog.items),
    }
    pickle.dump(header, stream, protocol=pickle.HIGHEST_PROTOCOL)
    for item in catalog.items:
        record = tuple(getattr(item, name) for name in _RECORD_FIELDS)
        pickle.dump(record, stream, protocol=pickle.HIGHEST_PROTOCOL)


def read_catalog(stream: BinaryIO) -> Catalog:
    """Decodes a catalog written by `write_catalog`.

    End of stream after the last record is the normal terminator. The item count in the
    header guards against truncated streams.

    Args:
        stream: Readable binary stream.

    Returns:
        Catalog: The decoded catalog.

    Raises:
        CacheDecodeError: If the header is missing or unknown, a record is malformed, or
            the stream holds fewer or more items than announced.
    """
    try:
        header = _load_record(stream)
    except EOFError as e:
        raise CacheDecodeError("empty stream") from e

    if (
        not isinstance(header, dict)
        or header.get("format") != CACHE_FORMAT
        or header.get("version") != CACHE_VERSION
        or not _is_number(header.get("synced_at"))
        or not isinstance(header.get("count"), int)
        or isinstance(header.get("count"), bool)
    ):
        raise CacheDecodeError(f"unsupported header {header!r}")

    items: list[MediaItem] = []
    while True:
        try:
            record = _load_record(stream)
        except EOFError:
            break
        if (
            not isinstance(record, tuple)
            or len(record) != len(_RECORD_FIELDS)
            or not all(isinstance(value, str) for value in record)
        ):
            raise CacheDecodeError(f"malformed record after {len(items)} items")
        items.append(MediaItem(**dict(zip(_RECORD_FIELDS, record))))

    if len(items) != header["count"]:
        raise CacheDecodeError(f"expected {header['count']} items, found {len(items)}")
    return Catalog(items=tuple(items), synced_at=float(header["synced_at"]))


# === Store ===


class CatalogStore:
    """Owns the catalog of one media root: its cache file and its published snapshot.

    `load()` serves the cache when it is fresh and falls back to a rebuild otherwise.
    `rebuild()` walks the root, commits the result to the cache by atomic rename and then
    publishes the new snapshot. At most one rebuild runs at a time; a call that arrives while
    one is in flight returns None immediately instead of waiting.

    Args:
        root: The media root directory.
        cache_path: Cache file location, `<root>/.catalog.pickle.gz` by default.
        status_dir: Directory for the advisory indexing status file, the cache directory by default.
        audio_extensions: Extensions scanned as audio.
        video_extensions: Extensions scanned as video.
        tag_reader: Tag extraction callable handed to the scanner.
        on_directory: Directory hook handed to the scanner.
        logger: Optional logger.
    """

    def __init__(
        self,
        root: Path | str,
        cache_path: Path | str | None = None,
        status_dir: Path | str | None = None,
        audio_extensions: Iterable[str] = AUDIO_EXTENSIONS,
        video_extensions: Iterable[str] = VIDEO_EXTENSIONS,
        tag_reader: TagReader = read_tags,
        on_directory: DirectoryHook | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.root = Path(root)
        self.cache_path = Path(cache_path) if cache_path else self.root / CACHE_BASENAME
        self.status_dir = Path(status_dir) if status_dir else self.cache_path.parent
        self._audio_extensions = frozenset(audio_extensions)
        self._video_extensions = frozenset(video_extensions)
        self._tag_reader = tag_reader
        self._on_directory = on_directory
        self._logger = logger or NullLogger()

        self._catalog = Catalog()
        self._rebuild_lock = Lock()

    @property
    def catalog(self) -> Catalog:
        """The currently published snapshot; empty until the first load or rebuild."""
        return self._catalog

    def is_rebuilding(self) -> bool:
        return self._rebuild_lock.locked()

    # === Staleness ===

    def is_stale(self) -> bool:
        """Checks whether the cache is missing or older than any top-level folder.

        Only immediate, non-hidden subdirectories of the root are compared; adding an album
        to an artist folder touches that folder and so invalidates the cache.

        Returns:
            bool: True if a rebuild is needed.
        """
        try:
            cache_mtime = self.cache_path.stat().st_mtime
        except OSError:
            return True

        try:
            with os.scandir(self.root) as entries:
                for entry in entries:
                    if entry.name.startswith("."):
                        continue
                    if entry.is_dir(follow_symlinks=False) and entry.stat().st_mtime > cache_mtime:
                        self._logger.info(f"{entry.path} changed since the catalog was cached")
                        return True
        except OSError as e:
            self._logger.warning(f"Cannot check {self.root} for changes: {e}")
            return True
        return False

    # === Load ===

    def load(self) -> Catalog:
        """Publishes the cached catalog, rebuilding it first when it is stale or unreadable.

        A cache that cannot be read or decoded is handled exactly like a missing one.

        Returns:
            Catalog: The published snapshot. If a rebuild was needed but another one is
            already running, the current snapshot is returned unchanged.

        Raises:
            ScanRootError: If a rebuild is needed and the root cannot be walked.
            CacheWriteError: If a rebuild is needed and its cache cannot be committed.
        """
        if self.is_stale():
            self._logger.info(f"Catalog cache {self.cache_path} is missing or stale")
            return self.rebuild() or self._catalog

        try:
            catalog = self._read_cache()
        except (OSError, EOFError, zlib.error, CacheDecodeError) as e:
            self._logger.warning(f"Discarding unreadable catalog cache {self.cache_path}: {e}")
            return self.rebuild() or self._catalog

        self._publish(catalog)
        self._logger.info(f"Loaded {len(catalog)} items from {self.cache_path}")
        return catalog

    def _read_cache(self) -> Catalog:
        with gzip.open(self.cache_path, "rb") as stream:
            return read_catalog(stream)

    # === Rebuild ===

    def rebuild(self) -> Optional[Catalog]:
        """Rescans the root, commits the result to the cache and publishes it.

        Returns:
            Catalog | None: The new snapshot, or None when another rebuild was already in
            flight and this call was dropped.

        Raises:
            ScanRootError: If the root cannot be walked.
            CacheWriteError: If the cache cannot be written or renamed into place.
        """
        if not self._rebuild_lock.acquire(blocking=False):
            self._logger.info("Rebuild already in progress; request dropped")
            return None

        expected = len(self._catalog)
        try:
            self._report_progress(0, expected)
            scanner = TreeScanner(
                self.root,
                audio_extensions=self._audio_extensions,
                video_extensions=self._video_extensions,
                tag_reader=self._tag_reader,
                on_progress=lambda count: self._report_progress(count, expected),
                on_directory=self._on_directory,
                logger=self._logger,
            )
            items = scanner.scan()
            catalog = Catalog(items=tuple(items), synced_at=time.time())
            self._commit(catalog)
            self._publish(catalog)
            self._logger.info(f"Rebuilt catalog with {len(catalog)} items")
            return catalog
        finally:
            try:
                clear_indexing_status(self.status_dir)
            except OSError as e:
                self._logger.warning(f"Cannot clear indexing status: {e}")
            self._rebuild_lock.release()

    def _report_progress(self, count: int, expected: int) -> None:
        try:
            set_indexing_status(self.status_dir, "rebuilding", current=count, total=expected)
        except OSError as e:
            self._logger.warning(f"Cannot write indexing status: {e}")

    def _commit(self, catalog: Catalog) -> None:
        """Writes the catalog to a temporary sibling file and renames it over the cache."""
        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=self.cache_path.parent, prefix=".catalog-", suffix=".tmp", delete=False
            ) as tmp_file:
                temp_path = Path(tmp_file.name)
                with gzip.GzipFile(fileobj=tmp_file, mode="wb", compresslevel=9) as zipped:
                    write_catalog(zipped, catalog)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(temp_path, self.cache_path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise CacheWriteError(self.cache_path, str(e)) from e

    def _publish(self, catalog: Catalog) -> None:
        self._catalog = catalog
