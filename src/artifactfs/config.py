"""ArtifactsConfig: project-local config for artifactfs.

Looked up as ``artifacts.toml`` in the working directory or any parent.
Every key is optional:

    [artifacts]
    name = "my-project"

    [archive]
    filename = "artifacts.zip"
    compression = "deflated"    # deflated | stored | bzip2 | lzma
    compresslevel = 6

    [[sources]]
    name = "workspace"
    path = "."
    include = ["**/*.py", "**/*.md"]
    exclude = ["**/__pycache__/**"]
    use_git = true              # use git ls-files (respects .gitignore)
    max_size_kb = 512

    [server]
    name = "artifactfs"

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from artifactfs.archive import compression_method

_CONFIG_FILENAME = "artifacts.toml"

_DEFAULT_INCLUDE = [
    "**/*.py", "**/*.md", "**/*.txt", "**/*.rst",
    "**/*.toml", "**/*.yaml", "**/*.yml", "**/*.json",
    "**/*.js", "**/*.ts", "**/*.jsx", "**/*.tsx",
    "**/*.html", "**/*.css", "**/*.svg", "**/*.csv", "**/*.mmd",
    "**/*.go", "**/*.rs", "**/*.java",
    "**/*.c", "**/*.h", "**/*.cpp", "**/*.hpp",
    "**/*.sql", "**/*.sh",
    "**/Dockerfile", "**/Makefile",
]
_DEFAULT_EXCLUDE = [
    "**/.git/**", "**/__pycache__/**",
    "**/*.lock", "**/node_modules/**", "**/dist/**", "**/build/**",
    "**/*.min.js", "**/*.min.css",
]


@dataclass
class SourceConfig:
    """A [[sources]] entry: a real directory imported into the store."""
    path: str                               # relative to config root
    name: str = ""
    include: list[str] = field(default_factory=lambda: list(_DEFAULT_INCLUDE))
    exclude: list[str] = field(default_factory=lambda: list(_DEFAULT_EXCLUDE))
    use_git: bool = True
    max_size_kb: int = 512
    root: Path = field(default_factory=Path.cwd)

    @property
    def abs_path(self) -> Path:
        return (self.root / self.path).resolve()


@dataclass
class ArchiveConfig:
    filename: str = "artifacts.zip"
    compression: str = "deflated"
    compresslevel: int | None = None


@dataclass
class ServerConfig:
    name: str = "artifactfs"


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class ArtifactsConfig:
    """Resolved configuration."""

    root: Path                      # directory that contains artifacts.toml
    name: str = ""
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    sources: list[SourceConfig] = field(default_factory=list)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_path(self) -> Path:
        return self.root / _CONFIG_FILENAME

    @property
    def archive_path(self) -> Path:
        return self.root / self.archive.filename


def load_config(root: Path | str | None = None) -> ArtifactsConfig:
    """Load artifacts.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    section = raw.get("artifacts", {})
    arc_section = raw.get("archive", {})
    srv_section = raw.get("server", {})
    log_section = raw.get("logging", {})

    compression = str(arc_section.get("compression", "deflated")).lower()
    compression_method(compression)  # fail fast on typos
    level = arc_section.get("compresslevel")

    sources = [
        SourceConfig(
            path=s.get("path", "."),
            name=s.get("name", ""),
            include=s.get("include", list(_DEFAULT_INCLUDE)),
            exclude=s.get("exclude", list(_DEFAULT_EXCLUDE)),
            use_git=bool(s.get("use_git", True)),
            max_size_kb=int(s.get("max_size_kb", 512)),
            root=root_path,
        )
        for s in raw.get("sources", [])
    ]

    return ArtifactsConfig(
        root=root_path,
        name=section.get("name", root_path.name),
        archive=ArchiveConfig(
            filename=arc_section.get("filename", "artifacts.zip"),
            compression=compression,
            compresslevel=int(level) if level is not None else None,
        ),
        sources=sources,
        server=ServerConfig(name=srv_section.get("name", "artifactfs")),
        logging=LoggingConfig(level=str(log_section.get("level", "INFO")).upper()),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for artifacts.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, name: str | None = None) -> Path:
    """Write a default artifacts.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"{_CONFIG_FILENAME} already exists at {config_path}"
        raise FileExistsError(msg)

    project_name = name or root.name
    content = f"""\
[artifacts]
name = "{project_name}"

# [archive]
# filename = "artifacts.zip"
# compression = "deflated"   # deflated | stored | bzip2 | lzma
# compresslevel = 6

# Directories imported by `afs tree` / `afs pack` when no DIR is given
# [[sources]]
# name = "workspace"
# path = "."
# include = ["**/*.py", "**/*.md", "**/*.toml"]
# exclude = ["**/__pycache__/**"]
# use_git = true      # use git ls-files to respect .gitignore
# max_size_kb = 512

# [server]
# name = "artifactfs"

# [logging]
# level = "INFO"
"""
    config_path.write_text(content)
    return config_path
