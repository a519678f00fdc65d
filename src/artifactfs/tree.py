"""Folder tree projection and browser expansion state.

The tree is derived on demand from ``store.list_files()``; nothing here is
stored alongside the files. ``FileTreeView`` only rebuilds when the store's
version counter has moved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from artifactfs.events import EventKind, FileEvent
from artifactfs.paths import ancestors, is_under, rebase, split_path

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from artifactfs.models import FileRecord
    from artifactfs.store import ArtifactStore


@dataclass
class TreeNode:
    name: str
    path: str
    type: str                                   # file | folder
    children: list[TreeNode] = field(default_factory=list)
    record: FileRecord | None = None            # set for files

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"

    def walk(self) -> Iterator[TreeNode]:
        yield self
        for child in self.children:
            yield from child.walk()

    def file_count(self) -> int:
        return sum(1 for n in self.walk() if not n.is_folder)


def _sort_key(node: TreeNode) -> tuple[int, str]:
    # Folders before files, then by name.
    return (0 if node.is_folder else 1, node.name)


def build_file_tree(records: Iterable[FileRecord]) -> list[TreeNode]:
    """Nest records into folder nodes. Pure function of its input."""
    roots: list[TreeNode] = []
    folders: dict[str, TreeNode] = {}

    for record in sorted(records, key=lambda r: r.path):
        parts = split_path(record.path)
        level = roots
        current = ""
        for part in parts[:-1]:
            current += "/" + part
            folder = folders.get(current)
            if folder is None:
                folder = TreeNode(name=part, path=current, type="folder")
                folders[current] = folder
                level.append(folder)
            level = folder.children
        level.append(TreeNode(name=parts[-1], path=record.path, type="file", record=record))

    def _sort(nodes: list[TreeNode]) -> None:
        nodes.sort(key=_sort_key)
        for n in nodes:
            if n.children:
                _sort(n.children)

    _sort(roots)
    return roots


class FileTreeView:
    """Cached tree, recomputed whenever the store version changes."""

    def __init__(self, store: ArtifactStore) -> None:
        self._store = store
        self._version = -1
        self._tree: list[TreeNode] = []

    @property
    def tree(self) -> list[TreeNode]:
        if self._version != self._store.version:
            self._tree = build_file_tree(self._store.list_files())
            self._version = self._store.version
        return self._tree

    def find(self, path: str) -> TreeNode | None:
        for root in self.tree:
            for node in root.walk():
                if node.path == path:
                    return node
        return None


class ExpandedFolders:
    """Which folders a tree browser shows expanded, kept in step with store events."""

    def __init__(self, store: ArtifactStore) -> None:
        self._expanded: set[str] = set()
        self._unsubscribers: list[Callable[[], None]] = [
            store.subscribe(EventKind.CREATED, self._on_created),
            store.subscribe(EventKind.DELETED, self._on_deleted),
            store.subscribe(EventKind.RENAMED, self._on_renamed),
        ]

    def __contains__(self, path: object) -> bool:
        return path in self._expanded

    @property
    def paths(self) -> set[str]:
        return set(self._expanded)

    def expand(self, path: str) -> None:
        self._expanded.add(path)

    def collapse(self, path: str) -> None:
        self._expanded.discard(path)

    def toggle(self, path: str) -> bool:
        """Flip path; returns the new expanded state."""
        if path in self._expanded:
            self._expanded.discard(path)
            return False
        self._expanded.add(path)
        return True

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    # New files reveal their parent folders.
    def _on_created(self, event: FileEvent) -> None:
        self._expanded.update(ancestors(event.path))

    def _on_deleted(self, event: FileEvent) -> None:
        self._expanded = {p for p in self._expanded if not is_under(p, event.path)}

    def _on_renamed(self, event: FileEvent) -> None:
        old = event.old_path
        if old is None:
            return
        self._expanded = {
            rebase(p, old, event.path) if is_under(p, old) else p
            for p in self._expanded
        }
