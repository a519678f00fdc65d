"""Error taxonomy for the artifact filesystem.

Read paths never raise for a missing file (``get_file`` returns ``None``) and
mutations report ordinary failures with a ``False`` return. These exceptions
are reserved for malformed input and explicit collisions.
"""

from __future__ import annotations


class ArtifactFSError(Exception):
    """Base class for all artifactfs errors."""


class InvalidPathError(ArtifactFSError, ValueError):
    """Path is empty, relative, or has an empty / dot segment."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path!r}: {reason}")


class AlreadyExistsError(ArtifactFSError, FileExistsError):
    """A file (or folder) already occupies the target path."""

    def __init__(self, path: str, reason: str = "already exists") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class NotFoundError(ArtifactFSError, FileNotFoundError):
    """No file or folder at the given path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not found: {path}")
