"""Mapping between Plex items and on-disk download names.

Layout under each media subroot:

    movies/{title} ({year}).ext
    shows/{show}/{season}/{show} - S01E03 - {episode}.ext
    music/{artist}/{album}/{artist} - {album} - 03 - {track}.ext

A "/" inside a metadata field would create a subdirectory, so it is stored
as SLASH_PLACEHOLDER and turned back into "/" when decoding. Double quotes
are dropped and colons become hyphens; those two edits are not reversed.
A title that really contains the placeholder character decodes with a "/"
in its place.
"""

import re
from dataclasses import dataclass, replace
from posixpath import splitext
from urllib.parse import urlparse

from plexterm.plex.models import CatalogItem, MediaKind

SLASH_PLACEHOLDER = "*"
DEFAULT_EXTENSION = ".mp4"

_EXTENSION = re.compile(r"^(.+)(\.[A-Za-z0-9]{1,5})$")
_SEASON_NUMBER = re.compile(r"(\d+)")
_EPISODE_STEM = re.compile(r"S(\d+)E(\d+) - (.+)$")
_TRACK_STEM = re.compile(r" - (\d+) - (.+)$")


@dataclass(frozen=True)
class DownloadTarget:
    """Where a remote item lives (or would live) under its media subroot.

    `directory` is relative to the subroot and uses "/" separators; it is
    empty for movies. `stem` is the filename without extension, which is
    what local matching compares.
    """

    kind: MediaKind
    directory: str
    stem: str
    extension: str = ""

    @property
    def filename(self) -> str:
        return self.stem + self.extension

    @property
    def relative_path(self) -> str:
        if self.directory:
            return f"{self.directory}/{self.filename}"
        return self.filename

    def with_extension(self, extension: str) -> "DownloadTarget":
        return replace(self, extension=extension)


def sanitize(text: str) -> str:
    """Make a single metadata field safe to use as (part of) a path segment."""
    text = text.replace("&amp;", "&")
    text = text.replace("/", SLASH_PLACEHOLDER)
    text = text.replace('"', "")
    return text.replace(":", "-")


def restore(text: str) -> str:
    """Undo the slash substitution of sanitize()."""
    return text.replace(SLASH_PLACEHOLDER, "/")


def split_extension(filename: str) -> tuple[str, str]:
    """Split "name.ext" into ("name", ".ext").

    Only a short alphanumeric suffix counts as an extension, so titles
    such as "Dr. No" are left whole.
    """
    match = _EXTENSION.match(filename)
    if match:
        return match.group(1), match.group(2)
    return filename, ""


def extension_from_locator(locator: str) -> str:
    """File extension of a stream URL, ignoring its query string."""
    ext = splitext(urlparse(locator).path)[1]
    return ext or DEFAULT_EXTENSION


def season_number(item: CatalogItem, season_title: str) -> int:
    if item.parent_index is not None:
        return item.parent_index
    match = _SEASON_NUMBER.search(season_title)
    return int(match.group(1)) if match else 0


def _ancestor(ancestors, position: int, fallback: str) -> str:
    return ancestors[position] if len(ancestors) > position else fallback


def encode(kind: MediaKind, item: CatalogItem, ancestors=(), extension: str = "") -> DownloadTarget:
    """Derive the download target for a leaf item.

    ancestors are the breadcrumb titles above the item: (show, season) for
    episodes, (artist, album) for tracks, nothing for movies. When absent
    the item's own parent/grandparent titles are used.
    """
    if kind is MediaKind.MOVIE:
        name = f"{item.title} ({item.year})" if item.year else item.title
        return DownloadTarget(kind, "", sanitize(name), extension)

    if kind is MediaKind.EPISODE:
        show = sanitize(_ancestor(ancestors, 0, item.grandparent_title))
        season_title = _ancestor(ancestors, 1, item.parent_title)
        season = season_number(item, season_title)
        episode = item.index or 0
        stem = f"{show} - S{season:02d}E{episode:02d} - {sanitize(item.title)}"
        return DownloadTarget(kind, f"{show}/{sanitize(season_title)}", stem, extension)

    if kind is MediaKind.TRACK:
        artist = sanitize(_ancestor(ancestors, 0, item.grandparent_title))
        album = sanitize(_ancestor(ancestors, 1, item.parent_title))
        track = item.index or 0
        stem = f"{artist} - {album} - {track:02d} - {sanitize(item.title)}"
        return DownloadTarget(kind, f"{artist}/{album}", stem, extension)

    raise ValueError(f"Unsupported media kind: {kind}")


def display_name(kind: MediaKind, item: CatalogItem, ancestors=()) -> str:
    """Human-readable title used for action menus and the player window."""
    if kind is MediaKind.EPISODE:
        show = _ancestor(ancestors, 0, item.grandparent_title)
        season = season_number(item, _ancestor(ancestors, 1, item.parent_title))
        return f"{show} - S{season:02d}E{(item.index or 0):02d} - {item.title}"
    return item.label


def parse_stem(kind: MediaKind, stem: str, directory: str = "") -> tuple[int | None, str]:
    """Split an encoded episode/track stem into (number, encoded title).

    The directory ("show/season" or "artist/album") is used to strip the
    known prefix; a pattern match is the fallback for files that were not
    written by plexterm. Returns (None, stem) if nothing matches.
    """
    parents = directory.split("/") if directory else []

    if kind is MediaKind.EPISODE:
        if parents:
            prefix = f"{parents[0]} - "
            if stem.startswith(prefix):
                match = _EPISODE_STEM.match(stem[len(prefix):])
                if match:
                    return int(match.group(2)), match.group(3)
        match = _EPISODE_STEM.search(stem)
        if match:
            return int(match.group(2)), match.group(3)

    elif kind is MediaKind.TRACK:
        if len(parents) >= 2:
            prefix = f"{parents[0]} - {parents[1]} - "
            rest = stem[len(prefix):] if stem.startswith(prefix) else ""
            number, sep, title = rest.partition(" - ")
            if sep and number.isdigit():
                return int(number), title
        match = _TRACK_STEM.search(stem)
        if match:
            return int(match.group(1)), match.group(2)

    return None, stem


def decode(kind: MediaKind, relative_path: str) -> str:
    """Display title for a stored file, given its path under the subroot.

    Movies decode to "Title (Year)"; episodes and tracks to "3. Title".
    """
    directory, _, filename = relative_path.rpartition("/")
    stem, _ = split_extension(filename)
    if kind is MediaKind.MOVIE:
        return restore(stem)
    number, title = parse_stem(kind, stem, directory)
    if number is None:
        return restore(stem)
    return f"{number}. {restore(title)}"
