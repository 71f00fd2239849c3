"""Tests for the offline downloads browser."""

import pytest

from conftest import FakePicker, FakePlayer
from plexterm.downloads import DownloadsBrowser
from plexterm.navigator import GO_BACK
from plexterm.player import PlayerError
from plexterm.plex.models import MediaKind


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


@pytest.fixture
def library(store):
    _touch(store.subroot(MediaKind.MOVIE) / "Alien (1979).mkv")
    _touch(store.subroot(MediaKind.EPISODE) / "Lost" / "Season 1" / "Lost - S01E02 - Second.mkv")
    _touch(store.subroot(MediaKind.EPISODE) / "Lost" / "Season 1" / "Lost - S01E01 - Pilot.mkv")
    return store


class TestDownloadsMenu:
    def test_categories(self, store, player, console):
        picker = FakePicker()
        DownloadsBrowser(store, picker, player, console).run()
        assert picker.calls[0]["options"] == ["Movies", "TV Shows", "Music"]
        assert picker.calls[0]["header"] == "Downloads Menu"
        assert picker.calls[0]["prompt"] == "Search Downloads > "

    def test_empty_category(self, store, player, console):
        picker = FakePicker(["Music"])
        DownloadsBrowser(store, picker, player, console).run()
        assert picker.calls[1]["disabled"] is True
        assert picker.calls[1]["options"] == [GO_BACK]
        assert picker.calls[1]["header"] == "No downloaded music found"
        assert picker.calls[2]["header"] == "Downloads Menu"

    @pytest.mark.parametrize("category,message", [
        ("Movies", "No downloaded movies found"),
        ("TV Shows", "No downloaded TV shows found"),
        ("Music", "No downloaded music found"),
    ])
    def test_empty_category_messages(self, store, player, console, category, message):
        picker = FakePicker([category])
        DownloadsBrowser(store, picker, player, console).run()
        assert picker.calls[1]["header"] == message


class TestBrowse:
    def test_play_movie(self, library, console):
        player = FakePlayer()
        picker = FakePicker(["Alien (1979)"])
        DownloadsBrowser(library, picker, player, console).browse(MediaKind.MOVIE)
        path = library.subroot(MediaKind.MOVIE) / "Alien (1979).mkv"
        assert player.played == [(str(path), "Alien (1979)")]
        assert picker.calls[0]["header"] == "Select Downloaded Movie"
        assert picker.calls[0]["prompt"] == "Search Downloaded Movies > "
        # stays on the movie list after playback
        assert picker.calls[1]["header"] == "Select Downloaded Movie"

    def test_episode_levels(self, library, console):
        player = FakePlayer()
        picker = FakePicker(["Lost", "Season 1", "2. Second"])
        DownloadsBrowser(library, picker, player, console).browse(MediaKind.EPISODE)
        assert picker.calls[2]["options"] == ["1. Pilot", "2. Second"]
        assert picker.calls[2]["header"] == "TV Show: Lost\nSeason: Season 1\nSelect Downloaded Episode"
        assert player.played[0][0].endswith("Lost - S01E02 - Second.mkv")
        assert [c["header"] for c in picker.calls[3:]] == [
            "TV Show: Lost\nSeason: Season 1\nSelect Downloaded Episode",
            "TV Show: Lost\nSelect Downloaded Season",
            "Select Downloaded TV Show",
        ]

    def test_empty_season_directory(self, store, player, console):
        (store.subroot(MediaKind.EPISODE) / "Lost" / "Season 1").mkdir(parents=True)
        picker = FakePicker(["Lost", "Season 1"])
        DownloadsBrowser(store, picker, player, console).browse(MediaKind.EPISODE)
        assert picker.calls[2]["header"] == "No episodes found"
        assert picker.calls[2]["disabled"] is True

    def test_player_error_reported(self, library, console):
        class BrokenPlayer:
            def play(self, locator, title):
                raise PlayerError("mpv not found: mpv")

        picker = FakePicker(["Alien (1979)"])
        DownloadsBrowser(library, picker, BrokenPlayer(), console).browse(MediaKind.MOVIE)
        assert "Error: mpv not found: mpv" in console.out.getvalue()
