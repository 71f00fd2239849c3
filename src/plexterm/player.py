"""Playback capability - launches mpv and blocks until playback ends."""

import logging
import subprocess
import time
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)


class PlayerError(Exception):
    """The player could not be launched."""


class Player(Protocol):
    def play(self, locator: str, title: str) -> int:
        """Play a stream URL or local path; return the player's exit status."""
        ...


class MpvPlayer:
    """Runs mpv in the foreground of the terminal.

    Usage:
        player = MpvPlayer()
        player.play("http://plex:32400/library/parts/1/file.mkv?X-Plex-Token=...", "Movie (2020)")
    """

    def __init__(self, mpv_path: str = "mpv", extra_args: Sequence[str] = ()):
        self.mpv_path = mpv_path
        self.extra_args = list(extra_args)

    def build_command(self, locator: str, title: str) -> list[str]:
        return [self.mpv_path, f"--title={title}", *self.extra_args, locator]

    def play(self, locator: str, title: str) -> int:
        cmd = self.build_command(locator, title)
        logger.info("Playing: %s", title)
        start_time = time.monotonic()
        try:
            result = subprocess.run(cmd)
        except FileNotFoundError:
            raise PlayerError(f"mpv not found: {self.mpv_path}")
        except OSError as e:
            raise PlayerError(f"Failed to launch mpv: {e}")

        elapsed = time.monotonic() - start_time
        logger.info("Playback ended after %.0fs (exit=%d)", elapsed, result.returncode)
        return result.returncode
