import os
from pathlib import Path
from threading import Lock, Timer
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler

# Seconds of quiet after the last change before a rebuild is requested
DEBOUNCE_DELAY = 2.0

RELEVANT_EVENTS = {"created", "deleted", "modified", "moved"}


class RebuildWatcher(FileSystemEventHandler):
    """Turns bursts of filesystem changes under the media root into one rebuild request.

    Copying an album produces dozens of events; each one restarts a single debounce timer,
    and only when the tree has been quiet for `debounce_delay` seconds is `request_rebuild`
    called. Events for hidden entries (the catalog cache, its temporary files and the
    indexing status file live there) and read-only events such as "opened" are ignored, so
    a rebuild never retriggers itself.

    Attributes:
        root: The watched media root.
        request_rebuild: Callable invoked once per quiet period.
        debounce_delay: Seconds to wait after the last relevant event.
    """

    def __init__(
        self,
        root: Path,
        request_rebuild: Callable[[], None],
        debounce_delay: float = DEBOUNCE_DELAY,
    ) -> None:
        self.root = Path(root)
        self.request_rebuild = request_rebuild
        self.debounce_delay = debounce_delay

        self._lock = Lock()
        self._timer: Optional[Timer] = None

    def is_relevant(self, event: FileSystemEvent) -> bool:
        if event.event_type not in RELEVANT_EVENTS:
            return False
        if event.is_directory and event.event_type == "modified":
            return False
        path = Path(os.fsdecode(event.src_path))
        try:
            parts = path.relative_to(self.root).parts
        except ValueError:
            return False
        return not any(part.startswith(".") for part in parts)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if not self.is_relevant(event):
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = Timer(self.debounce_delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        self.request_rebuild()

    def shutdown(self) -> None:
        """Cancels a pending request without firing it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
