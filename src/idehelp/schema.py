"""schema.py - Database column discovery for model classes.

Models map to a table on a named connection.  Column names and their native
types are read from the configured SQLite database and mapped to a coarse
PHP type category for ``@property`` tags.

Everything here may fail for reasons outside our control (no such
connection, unreadable database, missing table).  All such failures surface
as :class:`MetadataUnavailable` so callers can fall back to leaving the
existing tags alone.
"""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path


class MetadataUnavailable(Exception):
    """Column facts for a class could not be obtained."""


# Ordered substring rules on the lower-cased native type; first match wins.
# Check order matters: ``int`` is tested first so ``tinyint(1)`` stays ``int``.
TYPE_RULES: list[tuple[tuple[str, ...], str]] = [
    (("int",), "int"),
    (("bool",), "bool"),
    (("float", "double", "decimal", "real", "numeric"), "float"),
    (("varchar", "char", "text", "timestamp", "date", "time"), "string"),
]
DEFAULT_TYPE = "string"


def php_type(native_type: str) -> str:
    """Map a native column type (``VARCHAR(255)``, ``bigint``) to a PHP type."""
    lowered = native_type.lower()
    for needles, category in TYPE_RULES:
        if any(needle in lowered for needle in needles):
            return category
    return DEFAULT_TYPE


def _snake(name: str) -> str:
    """``BlogPost`` -> ``blog_post``."""
    s = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s).lower()


def _plural(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def model_table(class_name: str) -> str:
    """Default table name of a model: snake case, last word pluralised."""
    return _plural(_snake(class_name))


class ConnectionCache:
    """Lazily opened database handles keyed by connection name.

    Scoped to one run: handles are opened on first use, reused for every
    later model on the same connection, and only released by :meth:`close`.
    """

    def __init__(self, databases: dict[str, Path]) -> None:
        self._databases = databases
        self._handles: dict[str, sqlite3.Connection] = {}

    def get(self, name: str) -> sqlite3.Connection:
        """Return the handle for connection *name*, opening it if needed."""
        handle = self._handles.get(name)
        if handle is not None:
            return handle

        path = self._databases.get(name)
        if path is None:
            raise MetadataUnavailable(f"Unknown connection '{name}'")
        if not path.exists():
            raise MetadataUnavailable(f"Database for connection '{name}' not found: {path}")
        try:
            handle = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise MetadataUnavailable(f"Cannot open connection '{name}': {exc}") from exc
        self._handles[name] = handle
        return handle

    def close(self) -> None:
        for handle in self._handles.values():
            handle.close()
        self._handles.clear()

    def __enter__(self) -> ConnectionCache:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def column_types(handle: sqlite3.Connection, table: str) -> list[tuple[str, str]]:
    """Return ``(column, native_type)`` pairs of *table* in declaration order."""
    quoted = '"' + table.replace('"', '""') + '"'
    try:
        rows = handle.execute(f"PRAGMA table_info({quoted})").fetchall()
    except sqlite3.Error as exc:
        raise MetadataUnavailable(f"Cannot read columns of '{table}': {exc}") from exc
    if not rows:
        raise MetadataUnavailable(f"Table '{table}' does not exist")
    # (cid, name, type, notnull, dflt_value, pk)
    return [(row[1], row[2] or "") for row in rows]


def discover_columns(
    cache: ConnectionCache, connection: str | None, table: str
) -> list[tuple[str, str]]:
    """Return ``(column, php_type)`` facts for *table* on *connection*."""
    if not connection:
        raise MetadataUnavailable("No database connection configured")
    handle = cache.get(connection)
    return [(name, php_type(native)) for name, native in column_types(handle, table)]
