"""Data models for the in-memory artifact store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from artifactfs.classify import ArtifactKind, artifact_kind


def utc_now() -> datetime:
    return datetime.now(UTC)


def next_timestamp(previous: datetime) -> datetime:
    """Current time, nudged forward so it is strictly after previous."""
    now = utc_now()
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


@dataclass(frozen=True)
class FileRecord:
    """One stored artifact. Immutable: the store swaps records, callers never edit them."""

    path: str
    content: str
    content_type: ArtifactKind
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def new(cls, path: str, content: str) -> FileRecord:
        now = utc_now()
        return cls(
            path=path,
            content=content,
            content_type=artifact_kind(path),
            created_at=now,
            updated_at=now,
        )

    @property
    def size(self) -> int:
        """Length of content in characters (what the tool layer reports)."""
        return len(self.content)

    @property
    def name(self) -> str:
        return self.path.rpartition("/")[2]

    @property
    def archive_name(self) -> str:
        """Entry name inside an exported archive: the path minus its leading slash."""
        return self.path[1:]

    def summary_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "size": self.size,
            "contentType": self.content_type.value,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.summary_dict(),
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
