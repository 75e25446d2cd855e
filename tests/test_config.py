"""Tests for JSON-backed configuration."""

import json

from timelapse_view.core.config import SHOW_DIFFERENCES_ONLY, Configuration


def test_defaults_when_file_missing(tmp_path):
    config = Configuration(tmp_path / "settings.json")

    assert config.get("scm", "git") == "git"
    assert config.get_bool(SHOW_DIFFERENCES_ONLY) is False
    assert config.get_int("limit", 100) == 100


def test_values_persist(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    config = Configuration(path)
    config.set_bool(SHOW_DIFFERENCES_ONLY, True)
    config.set("scm", "svn")

    assert json.loads(path.read_text()) == {SHOW_DIFFERENCES_ONLY: True, "scm": "svn"}
    reloaded = Configuration(path)
    assert reloaded.get_bool(SHOW_DIFFERENCES_ONLY) is True
    assert reloaded.get("scm") == "svn"


def test_string_values_are_coerced(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({SHOW_DIFFERENCES_ONLY: "true", "limit": "25"}))
    config = Configuration(path)

    assert config.get_bool(SHOW_DIFFERENCES_ONLY) is True
    assert config.get_int("limit", 100) == 25


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    config = Configuration(path)

    assert config.get("scm") is None
    config.set("scm", "git")
    assert json.loads(path.read_text()) == {"scm": "git"}
