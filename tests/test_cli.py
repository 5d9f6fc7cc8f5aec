"""Tests for idehelp.cli shared helpers."""

from pathlib import Path

import pytest
import typer

from idehelp.cli import error_exit, get_config, iter_sources, rel_display_path, source_glob
from idehelp.config import CONFIG_NAME, default_config


class TestGetConfig:
    def test_falls_back_to_defaults(self, tmp_path: Path) -> None:
        assert get_config(tmp_path) == default_config(tmp_path)

    def test_reads_config_file(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_NAME).write_text('[paths]\nmodels = "Models"\n', encoding="utf-8")
        assert get_config(tmp_path).models_dir == tmp_path / "Models"

    def test_invalid_config_propagates(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_NAME).write_text("[paths\n", encoding="utf-8")
        with pytest.raises(ValueError):
            get_config(tmp_path)


class TestErrorExit:
    def test_raises_exit(self, capsys) -> None:
        with pytest.raises(typer.Exit) as exc_info:
            error_exit("boom", json_mode=True, code=2)
        assert exc_info.value.exit_code == 2
        assert '"error": "boom"' in capsys.readouterr().out


class TestIterSources:
    def test_recursive_and_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "Sub").mkdir()
        for rel in ("Zed.php", "Sub/Alpha.php", "Beta.php", "notes.txt"):
            (tmp_path / rel).write_text("<?php\n")
        files = iter_sources(tmp_path)
        assert [f.relative_to(tmp_path).as_posix() for f in files] == [
            "Beta.php",
            "Sub/Alpha.php",
            "Zed.php",
        ]

    def test_class_filter(self, tmp_path: Path) -> None:
        (tmp_path / "User.php").write_text("<?php\n")
        (tmp_path / "UserPolicy.php").write_text("<?php\n")
        assert iter_sources(tmp_path, class_name="User") == [tmp_path / "User.php"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert iter_sources(tmp_path / "nope") == []

    def test_custom_extension(self, tmp_path: Path) -> None:
        cfg = default_config(tmp_path)
        cfg.source_ext = ".inc"
        assert source_glob(cfg) == "*.inc"
        assert source_glob(None) == "*.php"


class TestRelDisplayPath:
    def test_relative(self, tmp_path: Path) -> None:
        assert rel_display_path(tmp_path / "app" / "User.php", tmp_path) == str(Path("app/User.php"))

    def test_outside_base(self, tmp_path: Path) -> None:
        assert rel_display_path(Path("/elsewhere/User.php"), tmp_path) == "User.php"
