"""Artifact classifier: path → presentation category.

Only the basename and extension are consulted. The result drives which
viewer renders a file (markdown preview, CSV grid, diagram, ...) and never
affects filesystem behaviour.
"""

from __future__ import annotations

from enum import Enum

from artifactfs.paths import basename, extension


class ArtifactKind(str, Enum):
    TEXT = "text"
    CODE = "code"
    SVG = "svg"            # diagram
    HTML = "html"          # markup
    CSV = "csv"            # tabular
    MERMAID = "mermaid"    # diagram
    MARKDOWN = "markdown"  # document

    def __str__(self) -> str:
        return self.value


# Basenames with no useful extension (matched case-insensitively, also as "<name>.*")
_RESERVED_BASENAMES: dict[str, str] = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
}

_EXTENSION_KINDS: dict[ArtifactKind, frozenset[str]] = {
    ArtifactKind.HTML: frozenset({"html", "htm"}),
    ArtifactKind.SVG: frozenset({"svg"}),
    ArtifactKind.CSV: frozenset({"csv", "tsv"}),
    ArtifactKind.MERMAID: frozenset({"mmd", "mermaid"}),
    ArtifactKind.MARKDOWN: frozenset({"md", "markdown"}),
}

# Source code, plus styling and data formats which render in the code editor.
_CODE_EXTENSIONS = frozenset({
    "js", "jsx", "ts", "tsx", "mjs", "cjs", "py", "go", "rs", "java", "jar",
    "c", "cc", "cpp", "cxx", "h", "hpp", "hxx", "hh", "cs", "php", "rb",
    "swift", "kt", "kts", "scala", "sc", "dart", "m", "mm", "sh", "bash",
    "zsh", "ksh", "pl", "pm", "t", "r", "jl", "lua", "hs", "ex", "exs",
    "erl", "hrl", "fs", "fsi", "fsx", "fsscript", "vb", "vbs", "asm", "s",
    "sql", "groovy", "gradle", "coffee", "nim", "clj", "cljs",
    "edn", "lisp", "scm", "rkt", "ml", "mli", "ada", "adb", "ads", "pas",
    "pp", "f", "f90", "f95", "for", "v", "vh", "sv", "vhd", "vhdl",
    # styling
    "css", "scss", "sass", "less", "styl",
    # data / config
    "json", "jsonc", "json5", "yaml", "yml", "toml", "ini", "conf", "cfg", "xml",
})


def _reserved_name(path: str) -> str | None:
    name = basename(path).lower()
    for reserved, language in _RESERVED_BASENAMES.items():
        if name == reserved or name.startswith(reserved + "."):
            return language
    return None


def artifact_kind(path: str) -> ArtifactKind:
    """Classify path by reserved basename, then extension; default TEXT."""
    if _reserved_name(path) is not None:
        return ArtifactKind.CODE
    ext = extension(path)
    if not ext:
        return ArtifactKind.TEXT
    for kind, exts in _EXTENSION_KINDS.items():
        if ext in exts:
            return kind
    if ext in _CODE_EXTENSIONS:
        return ArtifactKind.CODE
    return ArtifactKind.TEXT


def artifact_language(path: str) -> str:
    """Editor language id: ``dockerfile``, ``makefile`` or the lower-cased extension."""
    reserved = _reserved_name(path)
    if reserved is not None:
        return reserved
    return extension(path)
