"""afs CLI: in-memory artifact filesystem.

Commands:
    afs init [NAME]            create artifacts.toml
    afs tree [DIR]             import DIR (or configured sources) and print the folder tree
    afs pack [DIR] [-o OUT]    import DIR (or configured sources) and write a zip archive
    afs classify PATH...       show artifact kind / editor language for paths
    afs serve                  start stdio MCP server
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click

from artifactfs.classify import artifact_kind, artifact_language
from artifactfs.archive import write_zip
from artifactfs.config import ArtifactsConfig, init_config, load_config
from artifactfs.errors import ArtifactFSError
from artifactfs.importer import import_directory, import_source
from artifactfs.mcp import run_server
from artifactfs.store import ArtifactStore
from artifactfs.tree import TreeNode, build_file_tree

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.tree import Tree

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> ArtifactsConfig:
    try:
        return load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _setup_logging(cfg: ArtifactsConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, cfg.logging.level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _load_store(cfg: ArtifactsConfig, directory: str | None, mount: str, use_git: bool) -> ArtifactStore:
    """Build a store from DIR, or from the configured [[sources]] when DIR is omitted."""
    store = ArtifactStore(compression=cfg.archive.compression, compresslevel=cfg.archive.compresslevel)
    try:
        if directory is not None:
            stats = import_directory(store, directory, use_git=use_git, mount=mount)
            _echo_stats(Path(directory).resolve().name, stats)
        elif cfg.sources:
            for src in cfg.sources:
                stats = import_source(store, src, mount=mount)
                _echo_stats(src.name or src.path, stats)
        else:
            raise click.UsageError("No DIR given and no [[sources]] in artifacts.toml")
    except ArtifactFSError as exc:
        raise click.ClickException(str(exc)) from exc
    return store


def _echo_stats(name: str, stats: dict[str, int]) -> None:
    parts = [f"{v} {k}" for k, v in stats.items() if v]
    click.echo(f"{name}: {', '.join(parts) or 'nothing to import'}", err=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="artifactfs")
def cli() -> None:
    """afs: in-memory artifact filesystem."""


# ---------------------------------------------------------------------------
# afs init
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name", required=False)
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
def init(name: str | None, root: str) -> None:
    """Create artifacts.toml in the current project."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, name=name)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("artifacts.toml already exists, skipping init")


# ---------------------------------------------------------------------------
# afs tree / afs pack
# ---------------------------------------------------------------------------

_source_options = [
    click.argument("directory", required=False, type=click.Path(exists=True, file_okay=False)),
    click.option("--mount", default="/", show_default=True, help="Folder the files are imported under"),
    click.option("--no-git", is_flag=True, help="Glob files instead of using git ls-files"),
    click.option("-v", "--verbose", is_flag=True, help="Debug logging"),
]


def _with_source_options(f: Callable[..., None]) -> Callable[..., None]:
    for option in reversed(_source_options):
        f = option(f)
    return f


def _add_rich_nodes(branch: Tree, nodes: list[TreeNode]) -> None:
    from rich.markup import escape

    for node in nodes:
        if node.is_folder:
            child = branch.add(f"[bold blue]{escape(node.name)}/[/bold blue]")
            _add_rich_nodes(child, node.children)
        else:
            kind = node.record.content_type.value if node.record else "text"
            branch.add(f"{escape(node.name)} [dim]({kind})[/dim]")


@cli.command()
@_with_source_options
def tree(directory: str | None, mount: str, no_git: bool, verbose: bool) -> None:
    """Import files and print the derived folder tree."""
    from rich.console import Console
    from rich.markup import escape
    from rich.tree import Tree

    cfg = _load_cfg()
    _setup_logging(cfg, verbose)
    store = _load_store(cfg, directory, mount, use_git=not no_git)

    root = Tree(f"[bold]{escape(cfg.name)}[/bold]  [dim]{len(store)} files, {len(store.folders())} folders[/dim]")
    _add_rich_nodes(root, build_file_tree(store.list_files()))
    Console().print(root)


@cli.command()
@_with_source_options
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Archive path (default: [archive] filename)")
def pack(directory: str | None, mount: str, no_git: bool, verbose: bool, output: str | None) -> None:
    """Import files and write them as a zip archive."""
    cfg = _load_cfg()
    _setup_logging(cfg, verbose)
    store = _load_store(cfg, directory, mount, use_git=not no_git)

    dest = Path(output) if output else cfg.archive_path
    size = write_zip(
        store.snapshot(), dest, compression=cfg.archive.compression, compresslevel=cfg.archive.compresslevel
    )
    click.echo(f"Wrote {dest} ({len(store)} files, {size} bytes)")


# ---------------------------------------------------------------------------
# afs classify
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("paths", nargs=-1, required=True)
def classify(paths: tuple[str, ...]) -> None:
    """Show the artifact kind and editor language of each PATH."""
    from rich.console import Console
    from rich.table import Table

    table = Table(show_header=True, header_style="bold")
    table.add_column("Path", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Language", style="dim")
    for p in paths:
        table.add_row(p, artifact_kind(p).value, artifact_language(p) or "-")
    Console().print(table)


# ---------------------------------------------------------------------------
# afs serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging (stderr)")
def serve(verbose: bool) -> None:
    """Start the stdio MCP server (one in-memory filesystem per process)."""
    cfg = _load_cfg()
    _setup_logging(cfg, verbose)
    run_server(cfg)


if __name__ == "__main__":
    cli()
