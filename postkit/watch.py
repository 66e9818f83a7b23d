"""Watch a directory tree for file system changes."""

from __future__ import annotations

import os
import queue
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class WatchEventKind(Enum):
    """Kind of file system change."""

    CREATED = "Created"
    MODIFIED = "Modified"
    REMOVED = "Removed"


_KINDS = {
    "created": WatchEventKind.CREATED,
    "modified": WatchEventKind.MODIFIED,
    "moved": WatchEventKind.MODIFIED,
    "deleted": WatchEventKind.REMOVED,
}


@dataclass
class WatchEvent:
    """A file system change and the paths it concerns."""

    kind: WatchEventKind
    paths: list[Path] = field(default_factory=list)


@dataclass
class WatchAction:
    """A command to run for events whose paths match a glob pattern."""

    name: str
    pattern: str
    command: str


class _QueueHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._events.put(event)


def _convert(event: FileSystemEvent) -> WatchEvent | None:
    kind = _KINDS.get(event.event_type)
    if kind is None:
        return None
    paths = [Path(os.fsdecode(event.src_path))]
    dest = getattr(event, "dest_path", "")
    if dest:
        paths.append(Path(os.fsdecode(dest)))
    return WatchEvent(kind=kind, paths=paths)


class FileWatcher:
    """Recursive watcher on a directory with a list of actions."""

    def __init__(self, directory: Path) -> None:
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Not a directory: {directory}")
        self._events: queue.Queue = queue.Queue()
        self.actions: list[WatchAction] = []
        self._observer = Observer()
        self._observer.schedule(_QueueHandler(self._events), str(directory), recursive=True)
        self._observer.start()

    def __enter__(self) -> FileWatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_action(self, action: WatchAction) -> None:
        """Add an action to run when a matching event occurs."""
        self.actions.append(action)

    def next_event(self) -> WatchEvent | None:
        """Wait for the next event; None if it is not a create, modify or remove."""
        return _convert(self._events.get())

    def try_next_event(self, timeout: float) -> WatchEvent | None:
        """Wait up to ``timeout`` seconds for the next event; None if none arrives."""
        try:
            event = self._events.get(timeout=timeout)
        except queue.Empty:
            return None
        return _convert(event)

    def close(self) -> None:
        """Stop watching."""
        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join()