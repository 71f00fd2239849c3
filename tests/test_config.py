"""Tests for configuration loading."""

import os

import pytest

from plexterm.config import Config, ServerConfig, _parse_config, load_config


class TestParseConfig:
    def test_defaults(self):
        config = _parse_config({})
        assert config.server.url == "http://localhost:32400"
        assert config.server.token == ""
        assert config.server.timeout == 30.0
        assert config.picker.backend == "fzf"
        assert config.player.mpv_path == "mpv"
        assert config.downloads.movies_dir == os.path.join("downloads", "movies")

    def test_full(self):
        config = _parse_config({
            "server": {"url": "http://nas:32400/", "token": "abc", "timeout": 5, "preflight_timeout": 2},
            "downloads": {"base_dir": "/media", "music_dir": "/audio"},
            "player": {"mpv_path": "/usr/local/bin/mpv", "extra_args": ["--fs"]},
            "picker": {"backend": "textual"},
        })
        assert config.server.base_url == "http://nas:32400"
        assert config.server.timeout == 5.0
        assert config.server.preflight_timeout == 2.0
        assert config.downloads.shows_dir == os.path.join("/media", "shows")
        assert config.downloads.music_dir == "/audio"
        assert config.player.extra_args == ("--fs",)
        assert config.picker.backend == "textual"

    def test_env_overrides_file(self):
        env = {"PLEX_URL": "http://env:32400", "PLEX_TOKEN": "envtok"}
        config = _parse_config({"server": {"url": "http://file:32400", "token": "filetok"}}, env=env)
        assert config.server.url == "http://env:32400"
        assert config.server.token == "envtok"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown picker backend"):
            _parse_config({"picker": {"backend": "dmenu"}})


class TestLoadConfig:
    def test_explicit_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PLEX_URL", raising=False)
        monkeypatch.delenv("PLEX_TOKEN", raising=False)
        path = tmp_path / "plexterm.toml"
        path.write_text('[server]\nurl = "http://nas:32400"\ntoken = "abc"\n')
        config = load_config(str(path))
        assert config.server.url == "http://nas:32400"
        assert config.server.token == "abc"

    def test_no_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.delenv("PLEX_URL", raising=False)
        monkeypatch.delenv("PLEX_TOKEN", raising=False)
        config = load_config()
        assert config.server == ServerConfig()
        assert isinstance(config, Config)
