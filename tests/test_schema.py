"""Tests for idehelp.schema: column discovery and type mapping."""

import sqlite3
from pathlib import Path

import pytest

from idehelp.schema import (
    ConnectionCache,
    MetadataUnavailable,
    column_types,
    discover_columns,
    model_table,
    php_type,
)


def _make_db(path: Path) -> Path:
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE users ("
        "id INTEGER PRIMARY KEY, name VARCHAR(255), is_admin BOOLEAN, "
        "balance DECIMAL(10,2), created_at TIMESTAMP, notes)"
    )
    conn.commit()
    conn.close()
    return path


class TestPhpType:
    @pytest.mark.parametrize(
        "native, expected",
        [
            ("int", "int"),
            ("bigint unsigned", "int"),
            ("INTEGER", "int"),
            ("tinyint(1)", "int"),
            ("varchar(255)", "string"),
            ("timestamp", "string"),
            ("BOOLEAN", "bool"),
            ("decimal(8,2)", "float"),
            ("double", "float"),
            ("json", "string"),
            ("", "string"),
        ],
    )
    def test_mapping(self, native: str, expected: str) -> None:
        assert php_type(native) == expected


class TestModelTable:
    @pytest.mark.parametrize(
        "class_name, table",
        [
            ("User", "users"),
            ("BlogPost", "blog_posts"),
            ("Category", "categories"),
            ("Address", "addresses"),
            ("Day", "days"),
        ],
    )
    def test_default_table(self, class_name: str, table: str) -> None:
        assert model_table(class_name) == table


class TestConnectionCache:
    def test_opens_lazily_and_reuses(self, tmp_path: Path) -> None:
        db = _make_db(tmp_path / "app.sqlite")
        db.unlink()
        cache = ConnectionCache({"main": db})
        _make_db(db)
        first = cache.get("main")
        assert cache.get("main") is first
        cache.close()
        with pytest.raises(sqlite3.ProgrammingError):
            first.execute("SELECT 1")
        assert cache.get("main") is not first
        cache.close()

    def test_unknown_connection(self, tmp_path: Path) -> None:
        with ConnectionCache({}) as cache, pytest.raises(MetadataUnavailable, match="Unknown"):
            cache.get("missing")

    def test_missing_database_file(self, tmp_path: Path) -> None:
        with ConnectionCache({"main": tmp_path / "nope.sqlite"}) as cache:
            with pytest.raises(MetadataUnavailable, match="not found"):
                cache.get("main")
        assert not (tmp_path / "nope.sqlite").exists()


class TestColumns:
    def test_column_types_in_declaration_order(self, tmp_path: Path) -> None:
        db = _make_db(tmp_path / "app.sqlite")
        with ConnectionCache({"main": db}) as cache:
            cols = column_types(cache.get("main"), "users")
        assert [name for name, _ in cols] == [
            "id",
            "name",
            "is_admin",
            "balance",
            "created_at",
            "notes",
        ]
        assert cols[1] == ("name", "VARCHAR(255)")
        assert cols[-1] == ("notes", "")

    def test_missing_table(self, tmp_path: Path) -> None:
        db = _make_db(tmp_path / "app.sqlite")
        with ConnectionCache({"main": db}) as cache:
            with pytest.raises(MetadataUnavailable, match="does not exist"):
                column_types(cache.get("main"), "posts")

    def test_discover_columns_maps_types(self, tmp_path: Path) -> None:
        db = _make_db(tmp_path / "app.sqlite")
        with ConnectionCache({"main": db}) as cache:
            facts = discover_columns(cache, "main", "users")
        assert facts == [
            ("id", "int"),
            ("name", "string"),
            ("is_admin", "bool"),
            ("balance", "float"),
            ("created_at", "string"),
            ("notes", "string"),
        ]

    def test_discover_without_connection(self) -> None:
        with ConnectionCache({}) as cache, pytest.raises(MetadataUnavailable):
            discover_columns(cache, None, "users")
