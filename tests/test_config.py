"""Tests for onchange_core.config."""

import logging
from pathlib import Path

import pytest

from conftest import modified
from onchange_core.config import Settings, load_settings


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "onchange.toml"
    path.write_text(
        """
[watch]
command = ["pytest", "-x"]
paths = ["src", "tests"]
extensions = ["py"]
ignores = ["*.log"]
restart = true
debounce_ms = 500
"""
    )
    return path


class TestLoadSettings:
    def test_values_loaded(self, config_file):
        """Test every [watch] key is read and converted."""
        values = load_settings(config_file)
        assert values["command"] == "pytest -x"
        assert values["paths"] == [config_file.parent / "src", config_file.parent / "tests"]
        assert values["extensions"] == ["py"]
        assert values["ignores"] == ["*.log"]
        assert values["restart"] is True
        assert values["debounce_ms"] == 500
        assert "clear" not in values

    def test_settings_from_file(self, config_file):
        """Test loaded values build valid Settings."""
        settings = Settings(**load_settings(config_file))
        settings.validate()
        assert settings.debounce_seconds == 0.5
        assert not settings.clear

    def test_string_accepted_for_list(self, tmp_path):
        """Test a single string is accepted where a list is expected."""
        path = tmp_path / "c.toml"
        path.write_text('[watch]\ncommand = "make"\nfilters = "*.c"\n')
        assert load_settings(path)["filters"] == ["*.c"]

    def test_missing_file(self, tmp_path):
        """Test missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        """Test unparsable TOML raises ValueError."""
        path = tmp_path / "c.toml"
        path.write_text("[watch\ncommand = ")
        with pytest.raises(ValueError, match="Failed to parse config file"):
            load_settings(path)

    @pytest.mark.parametrize(
        "line",
        ['restart = "yes"', "paths = [1, 2]", "debounce_ms = true", "command = 3"],
    )
    def test_wrong_types(self, tmp_path, line):
        """Test values of the wrong type raise ValueError."""
        path = tmp_path / "c.toml"
        path.write_text(f"[watch]\n{line}\n")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_unknown_keys_warned(self, tmp_path, caplog):
        """Test unknown keys are skipped with a warning."""
        path = tmp_path / "c.toml"
        path.write_text('[watch]\ncommand = "make"\ncolour = "blue"\n')
        with caplog.at_level(logging.WARNING, logger="onchange_core.config"):
            values = load_settings(path)
        assert values == {"command": "make"}
        assert "unknown setting 'colour'" in caplog.text

    def test_empty_file(self, tmp_path):
        """Test an empty file yields no settings."""
        path = tmp_path / "c.toml"
        path.write_text("")
        assert load_settings(path) == {}


class TestSettings:
    def test_defaults(self):
        """Test Settings defaults."""
        settings = Settings(command="make")
        assert settings.paths == [Path(".")]
        assert settings.debounce_ms == 250
        assert settings.origin == Path.cwd()

    @pytest.mark.parametrize(
        "kwargs",
        [{"command": ""}, {"command": "  "}, {"command": "make", "debounce_ms": 0}, {"command": "make", "paths": []}],
    )
    def test_invalid(self, kwargs):
        """Test validation rejects unusable settings."""
        with pytest.raises(ValueError):
            Settings(**kwargs).validate()

    def test_build_filter_includes_defaults(self, tmp_path):
        """Test the built filter has default and user rules."""
        settings = Settings(command="make", extensions=["py"], ignores=["*.log"], origin=tmp_path)
        f = settings.build_filter()
        assert not f.is_relevant(modified("a.pyc"))
        assert not f.is_relevant(modified("a.log"))
        assert not f.is_relevant(modified("a.txt"))
        assert f.is_relevant(modified("a.py"))
