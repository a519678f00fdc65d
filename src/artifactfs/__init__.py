"""In-memory, path-addressed artifact filesystem shared by users and agents.

Layout:
    store.py      ArtifactStore: path → FileRecord map, the only writer
    events.py     synchronous pub/sub (fileCreated/Updated/Deleted/Renamed)
    paths.py      normalize / split / segment-aware prefix tests
    classify.py   path → presentation kind (code, markdown, csv, ...)
    archive.py    zip export, entry name = path minus leading "/"
    tree.py       derived folder tree + browser expansion state
    workspace.py  per-session open tabs / active file
    tools.py      agent tools (create_file, list_files, move_file, ...)
    mcp.py        stdio MCP server over the tools

Folders are never stored: a folder is any path that prefixes one or more
files. Each successful mutation bumps ``ArtifactStore.version`` by one and
publishes exactly one event.
"""

from artifactfs.classify import ArtifactKind, artifact_kind, artifact_language
from artifactfs.config import ArtifactsConfig, init_config, load_config
from artifactfs.errors import AlreadyExistsError, ArtifactFSError, InvalidPathError, NotFoundError
from artifactfs.events import EventBus, EventKind, FileEvent
from artifactfs.models import FileRecord
from artifactfs.store import ArtifactStore
from artifactfs.tools import ArtifactTools
from artifactfs.workspace import ArtifactsWorkspace

__all__ = [
    "AlreadyExistsError",
    "ArtifactFSError",
    "ArtifactKind",
    "ArtifactStore",
    "ArtifactTools",
    "ArtifactsConfig",
    "ArtifactsWorkspace",
    "EventBus",
    "EventKind",
    "FileEvent",
    "FileRecord",
    "InvalidPathError",
    "NotFoundError",
    "artifact_kind",
    "artifact_language",
    "init_config",
    "load_config",
]
