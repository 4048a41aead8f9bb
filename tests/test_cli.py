"""Tests for the click commands that do not start the terminal UI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hn_tui.cli import main


@pytest.fixture
def env(tmp_path, monkeypatch):
    for name in ("HN_BATCH_SIZE", "HN_POLL_INTERVAL", "HN_REQUEST_TIMEOUT", "HN_DEBUG_LOGGING"):
        monkeypatch.delenv(name, raising=False)
    bookmarks = tmp_path / "bookmarks.json"
    monkeypatch.setenv("HN_BOOKMARKS_FILE", str(bookmarks))
    config_file = tmp_path / "config.toml"
    with patch("hn_tui.config.CONFIG_FILE", config_file), patch("hn_tui.config.CONFIG_DIR", tmp_path):
        yield bookmarks, config_file


class TestBookmarksCommand:

    def test_empty(self, env):
        result = CliRunner().invoke(main, ["bookmarks"])
        assert result.exit_code == 0
        assert "No bookmarks yet" in result.output

    def test_lists_entries(self, env):
        bookmarks, _ = env
        bookmarks.write_text(json.dumps([{"id": "1", "title": "Saved", "detail": None, "url": None}]))

        result = CliRunner().invoke(main, ["bookmarks"])

        assert result.exit_code == 0
        assert "Saved" in result.output

    def test_remove(self, env):
        bookmarks, _ = env
        bookmarks.write_text(json.dumps([{"id": "1", "title": "Saved"}]))

        result = CliRunner().invoke(main, ["bookmarks", "--remove", "1"])

        assert result.exit_code == 0
        assert json.loads(bookmarks.read_text()) == []

    def test_corrupt_file_exits(self, env):
        bookmarks, _ = env
        bookmarks.write_text("{")

        result = CliRunner().invoke(main, ["bookmarks"])

        assert result.exit_code == 1


class TestConfigCommand:

    def test_set_batch_size(self, env):
        _, config_file = env

        result = CliRunner().invoke(main, ["config", "--batch-size", "50"])

        assert result.exit_code == 0
        assert "batch_size = 50" in config_file.read_text()

    def test_show(self, env):
        result = CliRunner().invoke(main, ["config", "--show"])
        assert result.exit_code == 0
        assert "Batch Size" in result.output

    def test_version(self, env):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "hn-tui v" in result.output
