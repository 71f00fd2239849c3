"""Offline browser for media already in the download root."""

import logging

from plexterm.console import Console
from plexterm.local_store import LocalStore
from plexterm.navigator import GO_BACK
from plexterm.picker import Chosen, Picker
from plexterm.player import Player, PlayerError
from plexterm.plex.models import MediaKind

logger = logging.getLogger(__name__)

# (menu label, kind, message when nothing of the kind is downloaded)
CATEGORIES = (
    ("Movies", MediaKind.MOVIE, "No downloaded movies found"),
    ("TV Shows", MediaKind.EPISODE, "No downloaded TV shows found"),
    ("Music", MediaKind.TRACK, "No downloaded music found"),
)

EMPTY_ROOT_MESSAGES = {kind: message for _, kind, message in CATEGORIES}

# (singular, plural) per directory level
LEVEL_NAMES = {
    MediaKind.MOVIE: (("Movie", "Movies"),),
    MediaKind.EPISODE: (("TV Show", "TV Shows"), ("Season", "Seasons"), ("Episode", "Episodes")),
    MediaKind.TRACK: (("Artist", "Artists"), ("Album", "Albums"), ("Track", "Tracks")),
}


class DownloadsBrowser:
    """Browse and play downloads without contacting the server."""

    def __init__(self, store: LocalStore, picker: Picker, player: Player, console: Console):
        self.store = store
        self.picker = picker
        self.player = player
        self.console = console

    def run(self):
        while True:
            selection = self.picker.pick(
                [label for label, _, _ in CATEGORIES],
                header="Downloads Menu",
                prompt="Search Downloads > ",
            )
            if not isinstance(selection, Chosen):
                return
            self.browse(CATEGORIES[selection.index][1])

    def browse(self, kind: MediaKind):
        """Walk one media subroot; choosing a file plays it and stays on that level."""
        names = LEVEL_NAMES[kind]
        # (relative path, display titles of the directories above)
        stack: list[tuple[str, tuple[str, ...]]] = [("", ())]
        while stack:
            relative_path, titles = stack[-1]
            singular, plural = names[len(titles)]
            entries = self.store.list(kind, relative_path)

            if not entries:
                if titles:
                    header = f"No {plural.lower()} found"
                else:
                    header = EMPTY_ROOT_MESSAGES[kind]
                self.picker.pick([GO_BACK], header=header, disabled=True)
                stack.pop()
                continue

            lines = [f"{names[i][0]}: {title}" for i, title in enumerate(titles)]
            lines.append(f"Select Downloaded {singular}")
            selection = self.picker.pick(
                [e.display_name for e in entries],
                header="\n".join(lines),
                prompt=f"Search Downloaded {plural} > ",
            )
            if not isinstance(selection, Chosen):
                stack.pop()
                continue

            entry = entries[selection.index]
            if entry.is_dir:
                stack.append((entry.relative_path, titles + (entry.display_name,)))
                continue

            self.console.clear()
            try:
                self.player.play(str(self.store.path_of(kind, entry)), entry.display_name)
            except PlayerError as e:
                logger.error("Local playback failed: %s", e)
                self.console.error(str(e))
                self.console.pause()
            self.console.clear()
