"""ArtifactStore: the in-memory, path-addressed file store.

    store = ArtifactStore()
    store.create_file("/src/app.py", "print('hi')")
    store.rename_file("/src", "/lib")          # moves the whole subtree
    store.delete_file("/lib")                  # folder delete
    unsubscribe = store.subscribe("fileCreated", on_created)

Folders are never stored. ``delete_file`` and ``rename_file`` first look
for an exact file at the given path and only then fall back to treating it
as a folder prefix. A path can never be a file and a folder at the same
time: creates and renames that would produce such a clash are refused, so
the exact-then-prefix dispatch is never ambiguous.

Every successful mutation bumps ``version`` by one and publishes exactly one
event. Failed operations and reads leave ``version`` untouched.

All operations run under one re-entrant lock, so event handlers may call
back into the store. Folder operations work on a snapshot of the key set
and validate every target before touching the map: a subtree rename either
moves every file or none.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import TYPE_CHECKING

from artifactfs.archive import export_zip
from artifactfs.classify import artifact_kind
from artifactfs.errors import AlreadyExistsError, InvalidPathError, NotFoundError
from artifactfs.events import EventBus, EventKind, FileEvent
from artifactfs.models import FileRecord, next_timestamp
from artifactfs.paths import (
    ROOT,
    ancestors,
    is_strictly_under,
    is_under,
    normalize_path,
    path_kind,
    rebase,
    validate_path,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterator


def _target(path: str) -> str:
    """Normalize a delete/rename argument; the root itself is never a target."""
    norm = normalize_path(path)
    if norm == ROOT:
        raise InvalidPathError(path, "root cannot be deleted or renamed")
    return norm


def _check_content(content: object) -> None:
    if not isinstance(content, str):
        msg = f"content must be str, not {type(content).__name__}"
        raise TypeError(msg)


def _folders_of(paths: Collection[str]) -> set[str]:
    folders: set[str] = set()
    for p in paths:
        folders.update(ancestors(p))
    return folders


def _first_conflict(targets: list[str], occupied: Collection[str]) -> str | None:
    """First target that would clash with occupied: same path, existing folder, or file ancestor."""
    occupied_folders = _folders_of(occupied)
    for t in targets:
        if t in occupied or t in occupied_folders:
            return t
        if any(a in occupied for a in ancestors(t)):
            return t
    return None


class ArtifactStore:
    """Authoritative owner of the path → FileRecord map."""

    def __init__(self, *, compression: str = "deflated", compresslevel: int | None = None) -> None:
        self._files: dict[str, FileRecord] = {}
        self._version = 0
        self._bus = EventBus()
        self._lock = threading.RLock()
        self.compression = compression
        self.compresslevel = compresslevel

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Monotonic counter, +1 per successful mutation."""
        return self._version

    def get_file(self, path: str) -> FileRecord | None:
        """Exact lookup. Absence (including malformed paths) is None, never an error."""
        if not isinstance(path, str):
            return None
        return self._files.get(path)

    def read_file(self, path: str) -> str:
        """Content of the file at path; raises NotFoundError if absent."""
        record = self.get_file(path)
        if record is None:
            raise NotFoundError(path)
        return record.content

    def list_files(self, directory: str | None = None) -> list[FileRecord]:
        """All records, or those under directory (``/src`` and ``/src/`` are equivalent).

        Order is unspecified; sort for display.
        """
        with self._lock:
            records = list(self._files.values())
        if directory is None or directory in ("", ROOT):
            return records
        try:
            prefix = normalize_path(directory)
        except InvalidPathError:
            return []
        if prefix == ROOT:
            return records
        return [r for r in records if is_under(r.path, prefix)]

    def snapshot(self) -> list[FileRecord]:
        """Records sorted by path."""
        return sorted(self.list_files(), key=lambda r: r.path)

    def exists(self, path: str) -> bool:
        """True for an existing file or folder."""
        return self.kind_of(path) is not None

    def is_file(self, path: str) -> bool:
        return self.get_file(path) is not None

    def is_folder(self, path: str) -> bool:
        return self.kind_of(path) == "folder"

    def kind_of(self, path: str) -> str | None:
        """``"file"``, ``"folder"`` or None."""
        try:
            norm = normalize_path(path)
        except InvalidPathError:
            return None
        with self._lock:
            keys = list(self._files)
        if norm == ROOT:
            return "folder" if keys else None
        return path_kind(norm, keys)

    def folders(self) -> list[str]:
        """Every derived folder path, sorted."""
        with self._lock:
            keys = list(self._files)
        return sorted(_folders_of(keys))

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and path in self._files

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.snapshot())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_file(self, path: str, content: str) -> FileRecord:
        """Insert a new record.

        Raises InvalidPathError for a malformed path and AlreadyExistsError when
        the path is taken, is an existing folder, or sits below an existing file.
        """
        validate_path(path)
        _check_content(content)
        with self._lock:
            if path in self._files:
                raise AlreadyExistsError(path)
            if _first_conflict([path], self._files.keys()) is not None:
                blocker = next((a for a in ancestors(path) if a in self._files), None)
                if blocker is not None:
                    raise AlreadyExistsError(path, f"parent {blocker} is a file")
                raise AlreadyExistsError(path, "a folder exists at this path")
            record = FileRecord.new(path, content)
            self._files[path] = record
            self._commit(EventKind.CREATED, path)
            return record

    def update_file(self, path: str, content: str) -> bool:
        """Replace content. False if no file exists at path."""
        validate_path(path)
        _check_content(content)
        with self._lock:
            record = self._files.get(path)
            if record is None:
                return False
            self._files[path] = replace(
                record,
                content=content,
                content_type=artifact_kind(path),
                updated_at=next_timestamp(record.updated_at),
            )
            self._commit(EventKind.UPDATED, path)
            return True

    def delete_file(self, path: str) -> bool:
        """Delete the file at path, or every file under path if it is a folder.

        A folder delete is one mutation and one ``fileDeleted`` event carrying
        the folder path (``folder=True``). False if nothing matched.
        """
        path = _target(path)
        with self._lock:
            if path in self._files:
                del self._files[path]
                self._commit(EventKind.DELETED, path)
                return True

            victims = [p for p in list(self._files) if is_strictly_under(p, path)]
            if not victims:
                return False
            for p in victims:
                del self._files[p]
            self._commit(EventKind.DELETED, path, folder=True)
            return True

    def rename_file(self, old_path: str, new_path: str) -> bool:
        """Rename a file, or move a folder's whole subtree.

        Never overwrites: False if any target path is already occupied, if
        old_path does not exist, or if a folder would move into itself.
        Both paths are validated before anything changes. old_path may carry a
        trailing slash; new_path must be a well-formed file path.
        """
        old_path = _target(old_path)
        validate_path(new_path)
        with self._lock:
            if old_path == new_path:
                return False

            record = self._files.get(old_path)
            if record is not None:
                others = self._files.keys() - {old_path}
                if _first_conflict([new_path], others) is not None:
                    return False
                del self._files[old_path]
                self._files[new_path] = replace(record, path=new_path, content_type=artifact_kind(new_path))
                self._commit(EventKind.RENAMED, new_path, old_path=old_path)
                return True

            members = [p for p in list(self._files) if is_strictly_under(p, old_path)]
            if not members or is_under(new_path, old_path):
                return False
            moves = {p: rebase(p, old_path, new_path) for p in members}
            others = self._files.keys() - set(members)
            if _first_conflict(list(moves.values()), others) is not None:
                return False

            moved = {moves[p]: self._files.pop(p) for p in members}
            for dest, rec in moved.items():
                self._files[dest] = replace(rec, path=dest, content_type=artifact_kind(dest))
            self._commit(EventKind.RENAMED, new_path, old_path=old_path, folder=True)
            return True

    # ------------------------------------------------------------------
    # Export / events
    # ------------------------------------------------------------------

    def download_as_zip(self) -> bytes:
        """Zip of every current file, entries named by path minus the leading slash."""
        return export_zip(self.snapshot(), compression=self.compression, compresslevel=self.compresslevel)

    def subscribe(self, kind: EventKind | str, handler: Callable[[FileEvent], object]) -> Callable[[], None]:
        """Register handler for one event kind; returns an idempotent unsubscribe."""
        return self._bus.subscribe(kind, handler)

    def _commit(self, kind: EventKind, path: str, *, old_path: str | None = None, folder: bool = False) -> None:
        self._version += 1
        self._bus.publish(FileEvent(kind=kind, path=path, old_path=old_path, folder=folder, version=self._version))
