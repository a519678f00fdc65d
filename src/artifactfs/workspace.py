"""ArtifactsWorkspace: one session's view state over a store.

A workspace is created when a chat session starts and closed when it ends.
It owns the open editor tabs and the active file, and keeps both consistent
with the store: tabs follow renames (including folder moves) and are closed
when their file, or a folder containing it, is deleted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifactfs.events import EventKind, FileEvent
from artifactfs.paths import is_under, rebase
from artifactfs.store import ArtifactStore

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("artifactfs.workspace")


class ArtifactsWorkspace:
    def __init__(self, store: ArtifactStore | None = None, *, available: bool = True) -> None:
        self.store = store if store is not None else ArtifactStore()
        self.is_available = available
        self.show_drawer = False
        self.open_files: list[str] = []
        self.active_file: str | None = None
        self._unsubscribers: list[Callable[[], None]] = [
            self.store.subscribe(EventKind.DELETED, self._on_deleted),
            self.store.subscribe(EventKind.RENAMED, self._on_renamed),
        ]

    @property
    def version(self) -> int:
        return self.store.version

    @property
    def is_enabled(self) -> bool:
        """Artifacts UI is shown when available and either toggled on or holding files."""
        return self.is_available and (self.show_drawer or len(self.store) > 0)

    def open_file(self, path: str) -> None:
        """Open path in a tab (no duplicates) and make it active."""
        if path not in self.open_files:
            self.open_files.append(path)
        self.active_file = path
        self.show_drawer = True

    def close_file(self, path: str) -> None:
        if path not in self.open_files:
            return
        self.open_files.remove(path)
        if self.active_file == path:
            self.active_file = self.open_files[-1] if self.open_files else None

    def set_drawer(self, show: bool) -> None:
        self.show_drawer = show

    def toggle_drawer(self) -> bool:
        self.show_drawer = not self.show_drawer
        return self.show_drawer

    def close(self) -> None:
        """End the session: detach from the store."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def __enter__(self) -> ArtifactsWorkspace:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Store events
    # ------------------------------------------------------------------

    def _on_deleted(self, event: FileEvent) -> None:
        for path in [p for p in self.open_files if is_under(p, event.path)]:
            logger.debug("closing tab for deleted file: %s", path)
            self.close_file(path)

    def _on_renamed(self, event: FileEvent) -> None:
        old = event.old_path
        if old is None:
            return
        self.open_files = [rebase(p, old, event.path) if is_under(p, old) else p for p in self.open_files]
        if self.active_file is not None and is_under(self.active_file, old):
            self.active_file = rebase(self.active_file, old, event.path)
