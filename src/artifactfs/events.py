"""Synchronous publish/subscribe bus scoped to one store.

Handlers run inline, before the mutating store call returns. Handlers for
the same kind fire in registration order. A handler that raises is logged
and skipped; the remaining handlers still run and the error never reaches
the caller of the mutation.

Folder-scoped operations are batched: deleting ``/src`` publishes a single
``fileDeleted`` event for ``/src`` with ``folder=True`` (not one per child),
and renaming ``/src`` → ``/lib`` publishes one ``fileRenamed`` event.
Subscribers that track nested state should match with ``paths.is_under``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("artifactfs.events")


class EventKind(str, Enum):
    CREATED = "fileCreated"
    UPDATED = "fileUpdated"
    DELETED = "fileDeleted"
    RENAMED = "fileRenamed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileEvent:
    kind: EventKind
    path: str                       # new path for renames
    old_path: str | None = None     # renames only
    folder: bool = False            # True for batched folder delete / rename
    version: int = 0                # store version after the mutation


def coerce_kind(kind: EventKind | str) -> EventKind:
    try:
        return EventKind(kind)
    except ValueError:
        msg = f"Unknown event kind: {kind!r}"
        raise ValueError(msg) from None


class EventBus:
    """Callback registry keyed by event kind."""

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[Callable[[FileEvent], object]]] = {k: [] for k in EventKind}
        self._lock = threading.RLock()

    def subscribe(self, kind: EventKind | str, handler: Callable[[FileEvent], object]) -> Callable[[], None]:
        """Register handler; returns an idempotent unsubscribe function."""
        ek = coerce_kind(kind)
        # Fresh wrapper per registration: the same callable may be subscribed twice.
        def _call(event: FileEvent) -> object:
            return handler(event)

        with self._lock:
            self._handlers[ek].append(_call)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers[ek]
                if _call in handlers:
                    handlers.remove(_call)

        return unsubscribe

    def publish(self, event: FileEvent) -> None:
        with self._lock:
            handlers = list(self._handlers[event.kind])
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("handler failed for %s %s", event.kind.value, event.path)

    def handler_count(self, kind: EventKind | str) -> int:
        with self._lock:
            return len(self._handlers[coerce_kind(kind)])

    def clear(self) -> None:
        with self._lock:
            for handlers in self._handlers.values():
                handlers.clear()
