"""Path helpers for the in-memory artifact filesystem.

Paths are absolute, slash-separated, case-sensitive strings:

    /README.md
    /src/components/App.tsx

There are no folder entries. A folder is any strict prefix (followed by ``/``)
of one or more stored file paths, so every folder test here is segment-aware:
``/src`` contains ``/src/a.ts`` but never ``/src2/a.ts`` or ``/src-backup/x``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifactfs.errors import InvalidPathError

if TYPE_CHECKING:
    from collections.abc import Iterable

SEP = "/"
ROOT = "/"


def validate_path(path: str) -> str:
    """Return path unchanged if it is a well-formed file path, else raise InvalidPathError."""
    if not isinstance(path, str) or not path:
        raise InvalidPathError(str(path), "path is empty")
    if not path.startswith(SEP):
        raise InvalidPathError(path, "path must start with /")
    if path == ROOT:
        raise InvalidPathError(path, "root is not a file path")
    if "\x00" in path:
        raise InvalidPathError(path, "path contains NUL")
    if path.endswith(SEP):
        raise InvalidPathError(path, "trailing slash")
    for segment in path[1:].split(SEP):
        if not segment:
            raise InvalidPathError(path, "empty segment")
        if segment in (".", ".."):
            raise InvalidPathError(path, f"'{segment}' segment")
    return path


def normalize_path(path: str) -> str:
    """Strip trailing slashes (``/src/`` → ``/src``) and validate.

    The root ``/`` is returned as-is; it is a valid folder but never a file.
    """
    if isinstance(path, str) and path.startswith(SEP):
        stripped = path.rstrip(SEP)
        if not stripped:
            return ROOT
        path = stripped
    return validate_path(path)


def split_path(path: str) -> list[str]:
    """``/a/b/c.txt`` → ``["a", "b", "c.txt"]``."""
    return [p for p in path.split(SEP) if p]


def join_path(*segments: str) -> str:
    parts: list[str] = []
    for seg in segments:
        parts.extend(split_path(seg))
    return SEP + SEP.join(parts)


def parent_path(path: str) -> str:
    """Folder that contains path; ``/`` for top-level files."""
    head, _, _ = path.rstrip(SEP).rpartition(SEP)
    return head or ROOT


def basename(path: str) -> str:
    return path.rstrip(SEP).rpartition(SEP)[2]


def extension(path: str) -> str:
    """Lower-cased text after the last dot of the basename, ``""`` if none."""
    name = basename(path)
    if "." not in name:
        return ""
    return name.rpartition(".")[2].lower()


def ancestors(path: str) -> list[str]:
    """Every folder prefix of path, outermost first.

    ``/a/b/c.txt`` → ``["/a", "/a/b"]``
    """
    parts = split_path(path)
    result: list[str] = []
    current = ""
    for seg in parts[:-1]:
        current += SEP + seg
        result.append(current)
    return result


def is_under(candidate: str, prefix: str) -> bool:
    """Segment-aware prefix test: candidate equals prefix or is nested under it."""
    if prefix == ROOT:
        return candidate.startswith(SEP)
    return candidate == prefix or candidate.startswith(prefix + SEP)


def is_strictly_under(candidate: str, prefix: str) -> bool:
    return candidate != prefix and is_under(candidate, prefix)


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """Swap old_prefix for new_prefix, keeping the relative suffix exactly."""
    if not is_under(path, old_prefix):
        msg = f"{path} is not under {old_prefix}"
        raise ValueError(msg)
    return new_prefix + path[len(old_prefix):]


def path_kind(path: str, paths: Iterable[str]) -> str | None:
    """Classify path against the stored paths: ``"file"``, ``"folder"`` or ``None``."""
    is_folder = False
    for p in paths:
        if p == path:
            return "file"
        if not is_folder and is_strictly_under(p, path):
            is_folder = True
    return "folder" if is_folder else None
