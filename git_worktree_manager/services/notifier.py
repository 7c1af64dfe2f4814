"""Filesystem watcher for git metadata directories.

Watches each repository's git directory and triggers a model refresh when
something changes. A single git command touches many files, so events are
debounced: every event restarts a short timer and the refresh only runs
once the timer expires without further events.
"""

import os
from threading import Lock, Timer
from typing import Callable, Dict, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from git_worktree_manager.constants import IGNORED_METADATA_DIRS
from git_worktree_manager.logging_config import get_logger

logger = get_logger(__name__)

_RELEVANT_EVENT_TYPES = {"created", "modified", "deleted", "moved"}


def is_relevant_path(path: str, metadata_dir: str) -> bool:
    """Check whether a changed path under ``metadata_dir`` can affect the model."""
    try:
        relative = os.path.relpath(path, metadata_dir)
    except ValueError:
        # Different drive on Windows
        return False
    if relative.startswith(os.pardir):
        return False
    first = relative.split(os.sep, 1)[0]
    return first not in IGNORED_METADATA_DIRS


class _MetadataHandler(FileSystemEventHandler):
    """Watchdog handler that forwards relevant events to the notifier."""

    def __init__(self, notifier: "ChangeNotifier", metadata_dir: str):
        super().__init__()
        self._notifier = notifier
        self._metadata_dir = metadata_dir

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _RELEVANT_EVENT_TYPES:
            return
        src = os.fsdecode(event.src_path)
        if not is_relevant_path(src, self._metadata_dir):
            return
        logger.debug(f"{event.event_type}: {src}")
        self._notifier.trigger()


class ChangeNotifier:
    """Debounced change signal fed by watchdog events on git metadata directories."""

    def __init__(self, callback: Callable[[], None], debounce_seconds: float = 0.3):
        """Initialize the notifier.

        Args:
            callback: Called (on a timer thread) once per burst of changes
            debounce_seconds: Quiet period required before the callback runs
        """
        self._callback = callback
        self.debounce_seconds = debounce_seconds
        self._lock = Lock()
        self._timer: Optional[Timer] = None
        self._observer: Optional[Observer] = None
        self._watches: Dict[str, object] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def watched_paths(self) -> list:
        with self._lock:
            return sorted(self._watches)

    def start(self, metadata_dirs: Iterable[str] = ()) -> None:
        """Start the observer thread and watch ``metadata_dirs``."""
        with self._lock:
            if self._running:
                return
            observer = Observer()
            observer.daemon = True
            self._observer = observer
            self._running = True
        observer.start()
        self.rewatch(metadata_dirs)
        logger.info(f"Change notifier started, watching {len(self.watched_paths)} directories")

    def rewatch(self, metadata_dirs: Iterable[str]) -> None:
        """Watch exactly ``metadata_dirs`` (recursively), adding and dropping watches as needed."""
        wanted = {os.path.abspath(d) for d in metadata_dirs if d and os.path.isdir(d)}
        with self._lock:
            if not self._running or self._observer is None:
                return
            for path in set(self._watches) - wanted:
                try:
                    self._observer.unschedule(self._watches.pop(path))
                    logger.debug(f"Stopped watching {path}")
                except (KeyError, ValueError) as e:
                    logger.debug(f"Error unwatching {path}: {e}")
            for path in sorted(wanted - set(self._watches)):
                try:
                    self._watches[path] = self._observer.schedule(
                        _MetadataHandler(self, path), path, recursive=True
                    )
                    logger.debug(f"Watching {path}")
                except OSError as e:
                    logger.warning(f"Could not watch {path}: {e}")

    def trigger(self) -> None:
        """Record a change; the callback runs after the debounce window."""
        with self._lock:
            if not self._running:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = Timer(self.debounce_seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
            if not self._running:
                return
        try:
            self._callback()
        except Exception as e:
            logger.warning(f"Refresh after filesystem change failed: {e}", exc_info=True)

    def stop(self) -> None:
        """Cancel any pending callback and stop the observer."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            observer = self._observer
            self._observer = None
            self._watches.clear()

        if observer is not None:
            observer.stop()
            observer.join(timeout=2)
        logger.info("Change notifier stopped")
