"""Load real files into the store (the drag-and-drop / folder import path).

Files are discovered with ``git ls-files`` when the source is a git checkout,
else by globbing the include patterns. Binary and oversized files are
skipped. Each file lands at ``<mount>/<relative path>``.
"""

from __future__ import annotations

import logging
import subprocess
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from artifactfs.errors import AlreadyExistsError, InvalidPathError
from artifactfs.paths import ROOT, join_path, normalize_path

if TYPE_CHECKING:
    from artifactfs.config import SourceConfig
    from artifactfs.store import ArtifactStore

logger = logging.getLogger("artifactfs.importer")

# Binary detection: if >30% of first 512 bytes are non-printable, skip
_BINARY_THRESHOLD = 0.30


def _is_binary(path: Path) -> bool:
    try:
        sample = path.read_bytes()[:512]
    except OSError:
        return True
    if b"\x00" in sample:
        return True
    non_printable = sum(1 for b in sample if b < 9 or (13 < b < 32) or b == 127)
    return len(sample) > 0 and non_printable / len(sample) > _BINARY_THRESHOLD


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

def _git_files(source_path: Path) -> list[Path] | None:
    """Return git-tracked files in source_path. Returns None if not a git repo."""
    try:
        result = subprocess.run(
            ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
            cwd=source_path,
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
        return [source_path / p for p in result.stdout.splitlines() if p]
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
        return None


def _excluded(rel: str, exclude: list[str]) -> bool:
    # "/" + rel lets "**/x/**" match top-level x/ too
    return any(fnmatch(rel, pat.lstrip("/")) or fnmatch("/" + rel, pat) for pat in exclude)


def _matches(rel: str, name: str, include: list[str], exclude: list[str]) -> bool:
    included = any(fnmatch(rel, pat) or fnmatch(name, pat.split("/")[-1]) for pat in include)
    return included and not _excluded(rel, exclude)


def _glob_files(source_path: Path, include: list[str], exclude: list[str]) -> list[Path]:
    """Glob-based file discovery respecting include/exclude patterns."""
    files: list[Path] = []
    for pattern in include:
        for p in source_path.rglob(pattern.lstrip("*").lstrip("/")):
            if p.is_file():
                rel = p.relative_to(source_path).as_posix()
                if not _excluded(rel, exclude):
                    files.append(p)
    return list(dict.fromkeys(files))


def collect_files(source: SourceConfig) -> list[Path]:
    """Return all importable files for a source, sorted."""
    source_path = source.abs_path
    if not source_path.is_dir():
        return []

    if source.use_git:
        git_files = _git_files(source_path)
        if git_files is not None:
            result = [
                p for p in git_files
                if p.is_file() and _matches(p.relative_to(source_path).as_posix(), p.name, source.include, source.exclude)
            ]
            return sorted(result)

    return sorted(_glob_files(source_path, source.include, source.exclude))


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def import_source(
    store: ArtifactStore,
    source: SourceConfig,
    *,
    mount: str = ROOT,
) -> dict[str, int]:
    """Copy a source directory into store. Returns stats: new, updated, unchanged, skipped."""
    mount = normalize_path(mount)
    stats = {"new": 0, "updated": 0, "unchanged": 0, "skipped": 0}
    source_path = source.abs_path

    for p in collect_files(source):
        rel = p.relative_to(source_path).as_posix()
        try:
            if p.stat().st_size > source.max_size_kb * 1024 or _is_binary(p):
                stats["skipped"] += 1
                continue
            text = p.read_text(encoding="utf-8", errors="replace")
        except OSError:
            logger.warning("unreadable: %s", p)
            stats["skipped"] += 1
            continue

        vpath = join_path(mount, rel)
        existing = store.get_file(vpath)
        if existing is not None:
            if existing.content == text:
                stats["unchanged"] += 1
            else:
                store.update_file(vpath, text)
                stats["updated"] += 1
            continue

        try:
            store.create_file(vpath, text)
        except (AlreadyExistsError, InvalidPathError) as exc:
            logger.warning("skipped %s: %s", rel, exc)
            stats["skipped"] += 1
            continue
        stats["new"] += 1

    logger.info(
        "imported %s: %d new, %d updated, %d unchanged, %d skipped",
        source.name or source_path, stats["new"], stats["updated"], stats["unchanged"], stats["skipped"],
    )
    return stats


def import_directory(store: ArtifactStore, directory: Path | str, *, use_git: bool = True, mount: str = ROOT) -> dict[str, int]:
    """Import a directory with the default include/exclude patterns."""
    from artifactfs.config import SourceConfig

    path = Path(directory).resolve()
    source = SourceConfig(path=".", name=path.name, use_git=use_git, root=path)
    return import_source(store, source, mount=mount)
