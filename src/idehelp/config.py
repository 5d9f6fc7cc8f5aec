"""Centralised project configuration loader for idehelp.

Reads ``idehelp.toml`` from the project root and exposes every setting as
simple attributes so the generator never hardcodes folder names, mixins or
database locations.

Example ``idehelp.toml``::

    [paths]
    models = "app/Models"
    classes = ["app/Http"]
    source_ext = ".php"

    [docblock]
    placeholder = "<Class description here>"
    mixins = ['\\Illuminate\\Database\\Eloquent\\Builder']

    [database]
    default = "sqlite"

    [database.connections.sqlite]
    path = "database/database.sqlite"

Every key is optional.  Relative paths resolve against the directory that
holds ``idehelp.toml``.

Usage::

    from idehelp.config import load_config
    cfg = load_config()
    cfg.models_dir      # Path
    cfg.connections     # {"sqlite": Path(...)}
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_NAME = "idehelp.toml"

DEFAULT_MIXINS = ["\\Illuminate\\Database\\Eloquent\\Builder"]
DEFAULT_PLACEHOLDER = "<Class description here>"


@dataclass
class ProjectConfig:
    """Parsed project configuration with computed paths."""

    # Root directory (where idehelp.toml lives, or the cwd without one)
    root: Path

    # --- [paths] ---
    models_dir: Path = field(default_factory=lambda: Path("app/Models"))
    class_dirs: list[Path] = field(default_factory=lambda: [Path("app/Http")])
    source_ext: str = ".php"

    # --- [docblock] ---
    placeholder: str = DEFAULT_PLACEHOLDER
    mixins: list[str] = field(default_factory=lambda: list(DEFAULT_MIXINS))

    # --- [database] ---
    default_connection: str | None = None
    connections: dict[str, Path] = field(default_factory=dict)

    def source_roots(self) -> list[tuple[Path, bool]]:
        """Return ``(directory, is_model_dir)`` pairs in processing order."""
        return [(self.models_dir, True)] + [(d, False) for d in self.class_dirs]


def _resolve(root: Path, rel: str | None) -> Path | None:
    """Resolve a path relative to project root."""
    if rel is None:
        return None
    p = Path(rel)
    if p.is_absolute():
        return p
    return root / p


def _find_root(start: Path | None = None) -> Path:
    """Walk up from *start* (or cwd) to find idehelp.toml."""
    if start is not None:
        return start
    candidate = Path.cwd().resolve()
    while candidate != candidate.parent:
        if (candidate / CONFIG_NAME).exists():
            return candidate
        candidate = candidate.parent
    raise FileNotFoundError(
        f"Could not find {CONFIG_NAME} in any parent of the current directory."
    )


def default_config(root: Path) -> ProjectConfig:
    """Configuration used when a project has no idehelp.toml."""
    return from_dict(root, {})


def from_dict(root: Path, raw: dict[str, Any]) -> ProjectConfig:
    """Build a :class:`ProjectConfig` from parsed TOML."""
    paths = raw.get("paths", {})
    docblock = raw.get("docblock", {})
    database = raw.get("database", {})

    classes = paths.get("classes", ["app/Http"])
    if isinstance(classes, str):
        classes = [classes]

    mixins = docblock.get("mixins", DEFAULT_MIXINS)
    if isinstance(mixins, str):
        mixins = [mixins]
    mixins = list(mixins)

    connections: dict[str, Path] = {}
    for name, conn in database.get("connections", {}).items():
        if not isinstance(conn, dict):
            raise ValueError(f"[database.connections.{name}] must be a table")
        path = _resolve(root, conn.get("path"))
        if path is None:
            raise ValueError(f"[database.connections.{name}] has no 'path'")
        connections[name] = path

    default_connection = database.get("default")
    if default_connection is None and len(connections) == 1:
        default_connection = next(iter(connections))

    return ProjectConfig(
        root=root,
        models_dir=_resolve(root, paths.get("models", "app/Models")),
        class_dirs=[_resolve(root, c) for c in classes],
        source_ext=paths.get("source_ext", ".php"),
        placeholder=docblock.get("placeholder", DEFAULT_PLACEHOLDER),
        mixins=mixins,
        default_connection=default_connection,
        connections=connections,
    )


def load_config(root: Path | None = None) -> ProjectConfig:
    """Load idehelp.toml.

    Args:
        root: Project root directory.  Auto-detected if ``None``.

    Raises:
        FileNotFoundError: no idehelp.toml was found.
        ValueError: the file is not valid TOML or has a malformed section.
    """
    root = _find_root(root)
    toml_path = root / CONFIG_NAME
    if not toml_path.exists():
        raise FileNotFoundError(f"Config not found: {toml_path}")

    with open(toml_path, "rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"{toml_path}: {exc}") from exc

    return from_dict(root, raw)
