"""Tests for configuration resolution."""

from pathlib import Path

import pytest
import yaml

from vidfeed.config import defaults
from vidfeed.config.loader import (
    ConfigSource,
    _load_yaml_config,
    _settings_from_yaml,
    clear_config_cache,
    get_config,
    get_db_path,
    get_root_dir,
)


@pytest.fixture
def root(tmp_path, monkeypatch):
    root_dir = tmp_path / "root"
    root_dir.mkdir()
    monkeypatch.setenv("VIDFEED_ROOT", str(root_dir))
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    return root_dir


def write_yaml(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:
    def test_no_files(self, root):
        config = get_config()
        assert config.source is ConfigSource.DEFAULT
        assert config.root_dir == root.resolve()
        assert config.db_path == root.resolve() / "vidfeed.db"
        assert config.parent_domain == defaults.DEFAULT_PARENT_DOMAIN
        assert config.fallback_buffer_seconds == 5.0
        assert config.pinterest_fallback_buffer_seconds == 2.0
        assert config.progress_debounce_seconds == 2.0
        assert config.progress_min_delta_seconds == 5.0
        assert config.buffer_window == 1

    def test_cached(self, root):
        assert get_config() is get_config()

    def test_helpers_create_directories(self, tmp_path, monkeypatch):
        root_dir = tmp_path / "fresh"
        monkeypatch.setenv("VIDFEED_ROOT", str(root_dir))
        clear_config_cache()
        assert get_root_dir() == root_dir.resolve()
        assert root_dir.is_dir()
        assert get_db_path().parent.is_dir()


class TestLayers:
    def test_user_config(self, root):
        write_yaml(root / "config.yaml", {"parent_domain": "user.test", "buffer_window": 2})
        config = get_config()
        assert config.source is ConfigSource.USER
        assert config.parent_domain == "user.test"
        assert config.buffer_window == 2

    def test_project_overrides_user_per_key(self, root, tmp_path):
        write_yaml(root / "config.yaml", {"parent_domain": "user.test", "buffer_window": 2})
        write_yaml(tmp_path / ".vidfeed" / "config.yaml", {"parent_domain": "project.test"})
        config = get_config()
        assert config.source is ConfigSource.PROJECT
        assert config.parent_domain == "project.test"
        assert config.buffer_window == 2

    def test_project_found_from_subdirectory(self, root, tmp_path, monkeypatch):
        write_yaml(tmp_path / ".vidfeed" / "config.yaml", {"fallback_buffer_seconds": 8})
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)
        monkeypatch.chdir(sub)
        assert get_config().fallback_buffer_seconds == 8.0

    def test_env_wins(self, root, tmp_path, monkeypatch):
        write_yaml(tmp_path / ".vidfeed" / "config.yaml", {"parent_domain": "project.test"})
        monkeypatch.setenv("VIDFEED_PARENT_DOMAIN", " env.test ")
        monkeypatch.setenv("VIDFEED_DB_PATH", str(tmp_path / "env.db"))
        config = get_config()
        assert config.source is ConfigSource.ENV
        assert config.parent_domain == "env.test"
        assert config.db_path == (tmp_path / "env.db").resolve()

    def test_relative_db_path_resolved_against_config_file(self, root):
        write_yaml(root / "config.yaml", {"db_path": "data/feed.db"})
        assert get_config().db_path == (root / "data" / "feed.db").resolve()

    def test_negative_buffer_window_clamped(self, root):
        write_yaml(root / "config.yaml", {"buffer_window": -3})
        assert get_config().buffer_window == 0


class TestYamlParsing:
    def test_missing_file(self, tmp_path):
        assert _load_yaml_config(tmp_path / "nope.yaml") is None

    def test_empty_file(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("")
        assert _load_yaml_config(path) == {}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml_config(path) is None

    def test_broken_yaml(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("key: [unclosed\n")
        assert _load_yaml_config(path) is None

    def test_bad_values_skipped(self):
        settings = _settings_from_yaml(
            {"buffer_window": "wide", "mystery": 1, "parent_domain": None, "fallback_buffer_seconds": "3"}
        )
        assert settings == {"fallback_buffer_seconds": 3.0}
