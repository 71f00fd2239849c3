"""Tests for the mpv player wrapper."""

import subprocess
from unittest.mock import patch

import pytest

from plexterm.player import MpvPlayer, PlayerError


class TestMpvPlayer:
    def test_build_command(self):
        player = MpvPlayer("/opt/mpv", ["--fs"])
        cmd = player.build_command("http://plex/file.mkv?X-Plex-Token=t", "Alien (1979)")
        assert cmd == ["/opt/mpv", "--title=Alien (1979)", "--fs", "http://plex/file.mkv?X-Plex-Token=t"]

    @patch("plexterm.player.subprocess.run")
    def test_play_returns_exit_status(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(args=["mpv"], returncode=4)
        assert MpvPlayer().play("/tmp/a.mkv", "A") == 4
        mock_run.assert_called_once_with(["mpv", "--title=A", "/tmp/a.mkv"])

    @patch("plexterm.player.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_binary(self, mock_run):
        with pytest.raises(PlayerError, match="mpv not found"):
            MpvPlayer().play("/tmp/a.mkv", "A")

    @patch("plexterm.player.subprocess.run", side_effect=PermissionError("denied"))
    def test_launch_failure(self, mock_run):
        with pytest.raises(PlayerError, match="Failed to launch"):
            MpvPlayer().play("/tmp/a.mkv", "A")
