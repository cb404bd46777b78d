"""File watching based on watchdog.

Callbacks run on the watchdog observer thread.
"""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .events import Disposable

logger = logging.getLogger(__name__)


class _FileChangeHandler(FileSystemEventHandler):
    """Forward events that touch a single file."""

    def __init__(self, path: str, on_change: Callable[[], None]):
        self._path = path
        self._on_change = on_change

    def _matches(self, candidate: str | bytes) -> bool:
        return os.path.normpath(os.fsdecode(candidate)) == self._path

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._on_change()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._on_change()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors often save by writing a temp file and renaming it over the target
        if not event.is_directory and self._matches(event.dest_path):
            self._on_change()


def stop_observer(observer: threading.Thread) -> None:
    """Stop an observer, joining it unless called from its own thread."""
    observer.stop()  # type: ignore[attr-defined]
    # A listener may dispose from inside a callback, and a thread cannot join itself
    if threading.current_thread() is not observer:
        observer.join()


def watch_file(path: Path | str, on_change: Callable[[], None]) -> Disposable:
    """Invoke ``on_change`` whenever the file at ``path`` changes.

    Args:
        path: File to watch; its parent directory must exist
        on_change: Callback with no arguments

    Returns:
        Disposable that stops the observer
    """
    target = os.path.normpath(os.path.abspath(path))
    observer = Observer()
    observer.schedule(_FileChangeHandler(target, on_change), os.path.dirname(target), recursive=False)
    observer.daemon = True
    observer.start()
    logger.debug(f"Watching {target}")

    def stop() -> None:
        stop_observer(observer)
        logger.debug(f"Stopped watching {target}")

    return Disposable(stop)
