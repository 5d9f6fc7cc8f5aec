"""Shared CLI utilities for idehelp.

Provides the common Typer options, config-loading helper, and standardised
output / error helpers used by the command, plus source-file discovery.

Usage in a command::

    import typer
    from idehelp.cli import RootOption, get_config, error_exit, json_print

    app = typer.Typer()

    @app.command()
    def main(root: Path | None = RootOption) -> None:
        cfg = get_config(root)
        ...
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from idehelp.config import ProjectConfig, default_config, load_config

# Re-usable Typer option for --root
RootOption: Path | None = typer.Option(
    None,
    "--root",
    "-r",
    help="Project root holding idehelp.toml (default: search upward from cwd).",
)


def get_config(root: Path | None = None) -> ProjectConfig:
    """Load the project config, falling back to defaults without idehelp.toml."""
    try:
        return load_config(root=root)
    except FileNotFoundError:
        return default_config(root if root is not None else Path.cwd().resolve())


# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(f"[red bold]error:[/red bold] {escape(msg)}")
    raise typer.Exit(code=code)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))


def source_glob(cfg: ProjectConfig | None) -> str:
    """Return the glob pattern for source files (``"*.php"`` by default)."""
    ext = cfg.source_ext if cfg is not None else ".php"
    return f"*{ext}"


def rel_display_path(filepath: Path, base_dir: Path | None = None) -> str:
    """Return a display-friendly path for *filepath*, relative to *base_dir*.

    Falls back to ``filepath.name`` if the file is not under *base_dir*.
    """
    if base_dir is not None:
        try:
            return str(filepath.relative_to(base_dir))
        except ValueError:
            pass
    return filepath.name


def iter_sources(
    directory: Path, cfg: ProjectConfig | None = None, class_name: str | None = None
) -> list[Path]:
    """Return source files under *directory*, recursively, sorted by path.

    With *class_name* only files named after that class are returned.  A
    missing directory yields an empty list.
    """
    if not directory.is_dir():
        return []
    files = sorted(directory.rglob(source_glob(cfg)))
    if class_name:
        files = [f for f in files if f.stem == class_name]
    return files
