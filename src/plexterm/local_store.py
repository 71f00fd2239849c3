"""Local download store - finds and lists previously downloaded media.

Nothing is persisted besides the files themselves; every lookup rescans
the relevant directory of the download root.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from plexterm.config import DownloadConfig
from plexterm.naming import DownloadTarget, decode, restore
from plexterm.plex.models import MediaKind
from plexterm.sorting import lexical_sorted, natural_sorted

logger = logging.getLogger(__name__)

# Containers accepted when matching a remote item against local files
MATCH_EXTENSIONS = {
    MediaKind.MOVIE: {".mkv", ".mp4", ".avi"},
    MediaKind.EPISODE: {".mkv", ".mp4", ".avi"},
    MediaKind.TRACK: {".mp3", ".flac", ".m4a"},
}

VIDEO_EXTENSIONS = {
    ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm",
    ".m4v", ".mpg", ".mpeg", ".ts", ".vob", ".3gp",
}

AUDIO_EXTENSIONS = {
    ".mp3", ".flac", ".wav", ".aac", ".ogg", ".m4a", ".wma", ".opus",
}

# Directory levels above the files: show/season, artist/album
FILE_DEPTH = {
    MediaKind.MOVIE: 0,
    MediaKind.EPISODE: 2,
    MediaKind.TRACK: 2,
}


@dataclass(frozen=True)
class LocalEntry:
    """A file or directory in the download store."""

    relative_path: str      # relative to the media subroot, "/" separated
    encoded_filename: str   # name as stored on disk
    display_name: str
    is_dir: bool = False


def _listable_extensions(kind: MediaKind) -> set[str]:
    return AUDIO_EXTENSIONS if kind is MediaKind.TRACK else VIDEO_EXTENSIONS


class LocalStore:
    """Read access to the download root plus target path resolution."""

    def __init__(self, config: DownloadConfig):
        self.config = config

    def subroot(self, kind: MediaKind) -> Path:
        if kind is MediaKind.MOVIE:
            return Path(self.config.movies_dir)
        if kind is MediaKind.EPISODE:
            return Path(self.config.shows_dir)
        return Path(self.config.music_dir)

    def ensure_dirs(self):
        """Create the three media subroots (idempotent)."""
        for kind in MediaKind:
            self.subroot(kind).mkdir(parents=True, exist_ok=True)

    def target_path(self, target: DownloadTarget) -> Path:
        return self.subroot(target.kind) / target.relative_path

    def _scan(self, directory: Path) -> list[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                return sorted(
                    (e for e in it if not e.name.startswith(".")),
                    key=lambda e: e.name,
                )
        except FileNotFoundError:
            return []
        except PermissionError:
            logger.warning("Permission denied scanning: %s", directory)
            return []

    def exists(self, kind: MediaKind, stem: str, relative_dir: str = "") -> Path | None:
        """Find a local file whose name without extension equals stem.

        Only files with one of the kind's accepted container extensions
        are considered. Matching is exact: no case folding, no whitespace
        normalization.
        """
        directory = self.subroot(kind) / relative_dir if relative_dir else self.subroot(kind)
        accepted = MATCH_EXTENSIONS[kind]
        for entry in self._scan(directory):
            if not entry.is_file():
                continue
            name, ext = os.path.splitext(entry.name)
            if ext.lower() in accepted and name == stem:
                logger.debug("Local match for %r: %s", stem, entry.path)
                return Path(entry.path)
        return None

    def exists_for(self, target: DownloadTarget) -> Path | None:
        return self.exists(target.kind, target.stem, target.directory)

    def list(self, kind: MediaKind, relative_path: str = "") -> list[LocalEntry]:
        """List one level of the store with decoded display names.

        Above the file level the entries are directories (shows, seasons,
        artists, albums); at the file level they are media files. Seasons,
        episodes and tracks are ordered naturally, the rest alphabetically.
        """
        depth = len(relative_path.split("/")) if relative_path else 0
        directory = self.subroot(kind) / relative_path if relative_path else self.subroot(kind)
        prefix = f"{relative_path}/" if relative_path else ""
        at_files = depth >= FILE_DEPTH[kind]

        entries = []
        for entry in self._scan(directory):
            if at_files:
                if not entry.is_file():
                    continue
                if os.path.splitext(entry.name)[1].lower() not in _listable_extensions(kind):
                    continue
                entries.append(LocalEntry(
                    relative_path=prefix + entry.name,
                    encoded_filename=entry.name,
                    display_name=decode(kind, prefix + entry.name),
                ))
            elif entry.is_dir():
                entries.append(LocalEntry(
                    relative_path=prefix + entry.name,
                    encoded_filename=entry.name,
                    display_name=restore(entry.name),
                    is_dir=True,
                ))

        natural = kind is not MediaKind.MOVIE and (at_files or (kind is MediaKind.EPISODE and depth == 1))
        if natural:
            return natural_sorted(entries, key=lambda e: e.display_name)
        return lexical_sorted(entries, key=lambda e: e.display_name)

    def path_of(self, kind: MediaKind, entry: LocalEntry) -> Path:
        return self.subroot(kind) / entry.relative_path
