"""Tests for ata/config_file.py — TOML configuration utilities."""

from __future__ import annotations

import tomllib
from unittest.mock import patch

import pytest

from ata.config_file import (
    EXAMPLE_CONFIG,
    generate_template,
    load_config,
    write_config,
    write_example,
)


class TestLoadConfig:
    def test_parses_tables(self, tmp_path) -> None:
        path = tmp_path / "ata2.toml"
        path.write_text('model = "gpt-4o"\n[ui]\nhide_config = true\n')
        assert load_config(path) == {"model": "gpt-4o", "ui": {"hide_config": True}}

    def test_invalid_toml_raises(self, tmp_path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[ui\n")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)


class TestWriteConfig:
    def test_creates_parent_dirs(self, tmp_path) -> None:
        path = tmp_path / "deep" / "nested" / "ata2.toml"
        write_config(path, {"model": "gpt-4o", "ui": {"save_history": False}})
        assert load_config(path) == {"model": "gpt-4o", "ui": {"save_history": False}}

    def test_replaces_existing_file(self, tmp_path) -> None:
        path = tmp_path / "ata2.toml"
        path.write_text('model = "old"\n')
        write_config(path, {"model": "new"})
        assert load_config(path)["model"] == "new"

    def test_failed_write_leaves_no_temp_file(self, tmp_path) -> None:
        path = tmp_path / "out" / "ata2.toml"
        with patch("tomli_w.dump", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                write_config(path, {"model": "x"})
        assert list(path.parent.iterdir()) == []


class TestTemplate:
    def test_template_has_example_keys(self) -> None:
        parsed = tomllib.loads(generate_template())
        assert parsed == EXAMPLE_CONFIG
        assert parsed["api_key"] == "<YOUR SECRET API KEY>"

    def test_write_example(self, tmp_path) -> None:
        path = tmp_path / "cfg" / "ata2.toml"
        write_example(path)
        assert load_config(path) == EXAMPLE_CONFIG
