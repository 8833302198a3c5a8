import os
import stat
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from common.logging import Logger, NullLogger

from ._tags import TagInfo, read_tags
from .exceptions import ScanRootError
from .item import MediaItem, build_item

AUDIO_EXTENSIONS = frozenset(
    {".flac", ".m4a", ".mid", ".midi", ".mp3", ".ogg", ".wav", ".wave"}
)
VIDEO_EXTENSIONS = frozenset(
    {".avi", ".m4v", ".mkv", ".mov", ".mp4", ".mpeg", ".mpg", ".ogv", ".webm"}
)

ProgressCallback = Callable[[int], None]
DirectoryHook = Callable[[Path], None]
TagReader = Callable[[Path, Logger], Optional[TagInfo]]


def should_skip(name: str) -> bool:
    """Returns True for entries the scanner never looks at: unnamed or hidden ones."""
    return name == "" or name.startswith(".")


class TreeScanner:
    """Walks a media root and turns every audio and video file into a MediaItem.

    Traversal is depth-first with entries sorted by name, so the resulting item order is
    stable between runs. Hidden entries, empty files and anything that is not a regular
    file are skipped. A file that cannot be stat'ed or opened is logged and skipped; only a
    root that cannot be listed at all aborts the scan.

    Args:
        root: The media root directory.
        audio_extensions: Lower-case extensions (with dot) treated as audio; tags are read.
        video_extensions: Lower-case extensions treated as video; catalogued from the pathname.
        tag_reader: Callable reading tags from an audio file, `read_tags` by default.
        on_progress: Called with the running item count at most once per `progress_interval`.
        on_directory: Called for every directory visited below the root.
        logger: Optional logger.
        progress_interval: Minimum seconds between two progress callbacks.
    """

    def __init__(
        self,
        root: Path | str,
        audio_extensions: Iterable[str] = AUDIO_EXTENSIONS,
        video_extensions: Iterable[str] = VIDEO_EXTENSIONS,
        tag_reader: TagReader = read_tags,
        on_progress: ProgressCallback | None = None,
        on_directory: DirectoryHook | None = None,
        logger: Logger | None = None,
        progress_interval: float = 1.0,
    ) -> None:
        self.root = Path(root)
        self.audio_extensions = frozenset(e.lower() for e in audio_extensions)
        self.video_extensions = frozenset(e.lower() for e in video_extensions)
        self._tag_reader = tag_reader
        self._on_progress = on_progress
        self._on_directory = on_directory
        self._logger = logger or NullLogger()
        self._progress_interval = progress_interval

    def scan(self) -> list[MediaItem]:
        """Walks the root and returns the catalogued items in traversal order.

        Returns:
            list[MediaItem]: One item per readable, non-empty media file.

        Raises:
            ScanRootError: If the root is not a directory or cannot be listed.
        """
        try:
            if not stat.S_ISDIR(os.stat(self.root).st_mode):
                raise ScanRootError(self.root, "not a directory")
            with os.scandir(self.root):
                pass
        except OSError as e:
            raise ScanRootError(self.root, str(e)) from e

        self._logger.info(f"Scanning media root {self.root}")
        started = time.monotonic()
        last_report = started
        items: list[MediaItem] = []

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=self._log_walk_error):
            dirnames[:] = sorted(d for d in dirnames if not should_skip(d))
            directory = Path(dirpath)
            if directory != self.root and self._on_directory is not None:
                self._on_directory(directory)

            for filename in sorted(filenames):
                if should_skip(filename):
                    continue
                item = self._scan_file(directory / filename)
                if item is not None:
                    items.append(item)

                now = time.monotonic()
                if now - last_report >= self._progress_interval:
                    last_report = now
                    self._report_progress(len(items))

        self._logger.info(
            f"Scanned {len(items)} items under {self.root} in {time.monotonic() - started:.1f}s"
        )
        return items

    def _scan_file(self, path: Path) -> MediaItem | None:
        extension = path.suffix.lower()
        is_audio = extension in self.audio_extensions
        if not is_audio and extension not in self.video_extensions:
            return None

        try:
            info = os.lstat(path)
            if not stat.S_ISREG(info.st_mode) or info.st_size == 0:
                return None
            tags = self._tag_reader(path, self._logger) if is_audio else None
        except OSError as e:
            self._logger.warning(f"Skipping {path}: {e}")
            return None

        pathname = path.relative_to(self.root).as_posix()
        added = datetime.fromtimestamp(info.st_mtime).strftime("%Y-%m-%d")
        return build_item(pathname, tags=tags, mtime=added)

    def _report_progress(self, count: int) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(count)
        except Exception as e:
            self._logger.warning(f"Progress callback failed: {e}")

    def _log_walk_error(self, error: OSError) -> None:
        self._logger.warning(f"Cannot list {error.filename}: {error}")
