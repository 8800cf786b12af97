"""Tests for the vidfeed command line."""

import json
import sys
from unittest.mock import patch

import pytest
import yaml

from vidfeed.cli import main
from vidfeed.operations.metadata import HttpResponse


@pytest.fixture
def run_cli(monkeypatch, capsys, tmp_path):
    """Run main() with argv and return (exit_code, stdout)."""
    monkeypatch.chdir(tmp_path)

    def _run(*argv):
        monkeypatch.setattr(sys, "argv", ["vidfeed", *argv])
        code = 0
        try:
            main()
        except SystemExit as e:
            code = e.code or 0
        return code, capsys.readouterr().out

    return _run


def _json(out):
    return json.loads(out)


class TestStatelessCommands:
    def test_classify(self, run_cli):
        code, out = run_cli("classify", "https://youtu.be/abc123")
        assert code == 0
        assert _json(out) == {
            "kind": "youtube",
            "external_id": "abc123",
            "subtype": None,
            "canonical_url": "https://youtu.be/abc123",
        }

    def test_classify_garbage(self, run_cli):
        _, out = run_cli("classify", "not a url")
        assert _json(out)["kind"] == "other"

    def test_embed(self, run_cli):
        code, out = run_cli(
            "embed", "https://www.twitch.tv/videos/1", "--parent", "cli.test", "--inactive"
        )
        data = _json(out)
        assert code == 0
        assert data["kind"] == "iframe"
        assert "parent=cli.test" in data["src"]
        assert data["muted"] is True

    def test_no_command_prints_help(self, run_cli):
        code, out = run_cli()
        assert code == 0
        assert "usage" in out.lower()


class TestLibraryCommands:
    def test_add_tag_and_playlist_flow(self, run_cli):
        _, out = run_cli("add", "https://www.tiktok.com/@u/video/1", "--no-fetch", "--tag", "dance")
        first = _json(out)
        assert [t["name"] for t in first["tags"]] == ["dance"]
        _, out = run_cli("add", "https://vimeo.com/12345", "--no-fetch", "--tag", "dance")
        second = _json(out)

        _, out = run_cli("playlist", "create", "Dance", "--tag", "dance", "--auto-add")
        playlist = _json(out)
        assert playlist["video_count"] == 2

        _, out = run_cli("playlist", "sync", str(playlist["id"]))
        assert _json(out)["added"] == 0

        _, out = run_cli("playlist", "reorder", str(playlist["id"]), "1", "0")
        assert _json(out)["order"] == [second["id"], first["id"]]

        _, out = run_cli("playlist", "show", str(playlist["id"]), "--active", "0")
        feed = _json(out)
        assert feed["state"] == "playing"
        assert feed["window"] == [0, 1]
        assert [e["video_id"] for e in feed["entries"]] == [second["id"], first["id"]]
        assert feed["entries"][0]["embed"]["platform"] == "vimeo"

        _, out = run_cli("playlist", "list")
        assert _json(out)["count"] == 1

    def test_show_not_started(self, run_cli):
        _, out = run_cli("playlist", "create", "Empty")
        playlist_id = _json(out)["id"]
        _, out = run_cli("playlist", "show", str(playlist_id))
        feed = _json(out)
        assert feed["state"] == "not_started"
        assert feed["entries"] == []

    def test_progress(self, run_cli):
        _, out = run_cli("add", "https://cdn.example.com/a.mp4", "--no-fetch")
        video_id = _json(out)["id"]
        code, out = run_cli("progress", str(video_id), "95.5")
        assert code == 0
        assert _json(out) == {"video_id": video_id, "last_timestamp": 95, "position": "1:35 / ?"}

    def test_missing_video_exits_nonzero(self, run_cli):
        code, out = run_cli("progress", "404", "10")
        assert code == 1
        assert _json(out)["error"]["type"] == "VideoNotFoundError"

    def test_missing_playlist_exits_nonzero(self, run_cli):
        code, out = run_cli("playlist", "show", "404")
        assert code == 1
        assert _json(out)["error"]["details"] == {"playlist_id": 404}

    def test_active_out_of_range(self, run_cli):
        _, out = run_cli("playlist", "create", "Empty")
        code, out = run_cli("playlist", "show", str(_json(out)["id"]), "--active", "3")
        assert code == 1
        assert "out of range" in _json(out)["error"]

    def test_add_same_url_reuses_video(self, run_cli):
        url = "https://vimeo.com/12345"
        _, out = run_cli("add", url, "--no-fetch", "--tag", "travel")
        first = _json(out)
        _, out = run_cli("add", url, "--no-fetch", "--tag", "film")
        second = _json(out)
        assert second["id"] == first["id"]
        assert sorted(t["name"] for t in second["tags"]) == ["film", "travel"]

    def test_add_short_link_finds_resolved_video(self, run_cli):
        target = "https://www.tiktok.com/@u/video/123"
        _, out = run_cli("add", target, "--no-fetch")
        saved = _json(out)

        response = HttpResponse(url=target, status=200, body="")
        with patch("vidfeed.operations.metadata.http_get", return_value=response) as mock_get:
            _, out = run_cli("add", "https://vm.tiktok.com/ZMabc/")
        assert _json(out)["id"] == saved["id"]
        mock_get.assert_called_once()


class TestValidateConfig:
    def test_no_files(self, run_cli):
        code, out = run_cli("validate-config")
        assert code == 0
        assert "No config file found." in out

    def test_valid_project_file(self, run_cli, tmp_path):
        config = tmp_path / ".vidfeed" / "config.yaml"
        config.parent.mkdir()
        config.write_text(yaml.safe_dump({"parent_domain": "feed.test"}))
        code, out = run_cli("validate-config")
        assert code == 0
        assert "Config is valid." in out
        assert "feed.test" in out

    def test_invalid_user_file(self, run_cli, tmp_path, monkeypatch):
        root = tmp_path / "root"
        root.mkdir()
        (root / "config.yaml").write_text(yaml.safe_dump({"buffer_window": "wide", "x": 1}))
        monkeypatch.setenv("VIDFEED_ROOT", str(root))
        code, out = run_cli("validate-config")
        assert code == 1
        assert "x Invalid value for 'buffer_window'" in out
        assert "! Unknown key 'x'" in out
