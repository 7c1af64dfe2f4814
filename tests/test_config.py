"""Tests for configuration handling"""
import json
import os

import pytest

from git_worktree_manager.config import Config, load_config


class TestConfig:
    """Test Config validation."""

    def test_defaults(self):
        config = Config()
        assert config.roots == [os.getcwd()]
        assert config.remote_name == "origin"
        assert config.debounce_seconds == 0.3
        assert config.normalize_paths is True
        assert config.watch is True

    def test_single_root_string(self):
        assert Config(roots="/repo").roots == ["/repo"]

    def test_roots_are_absolute_and_unique(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        config = Config(roots=["repo", str(temp_dir / "repo"), "other"])
        assert config.roots == [str(temp_dir / "repo"), str(temp_dir / "other")]
        assert config.primary_root == str(temp_dir / "repo")

    def test_trailing_whitespace_in_root_is_kept(self):
        assert Config(roots=["/repo "]).roots == ["/repo "]

    def test_no_roots(self):
        config = Config(roots=[])
        assert config.roots == []
        assert config.primary_root is None

    @pytest.mark.parametrize("kwargs", [
        {"roots": ["/repo", ""]},
        {"roots": 42},
        {"remote_name": "  "},
        {"debounce_seconds": 0},
        {"debounce_seconds": 6},
        {"git_timeout": 0},
        {"workers": 0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            Config(**kwargs)

    def test_dict_access(self):
        config = Config(roots=["/repo"], workers=3)
        assert config.get("workers") == 3
        assert config.get("missing", "fallback") == "fallback"
        assert config.to_dict()["roots"] == ["/repo"]

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"roots": ["/repo"], "stale_days": 30})
        assert config.roots == ["/repo"]


class TestLoadConfig:
    """Test loading the JSON config file."""

    def test_missing_file_gives_defaults(self, temp_dir):
        config = load_config(temp_dir / "absent.json", roots=["/repo"])
        assert config.roots == ["/repo"]
        assert config.remote_name == "origin"

    def test_file_values_and_overrides(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"roots": ["/a", "/b"], "remote_name": "upstream", "workers": 2}))

        config = load_config(path, workers=8, roots=None, debug=None)

        assert config.roots == ["/a", "/b"]
        assert config.remote_name == "upstream"
        assert config.workers == 8
        assert config.debug is False

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid config file"):
            load_config(path)

    def test_not_an_object(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)

    def test_invalid_value_in_file(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"debounce_seconds": 10}))
        with pytest.raises(ValueError, match="debounce_seconds"):
            load_config(path)
