"""Typed records normalized from Plex XML responses."""

from dataclasses import dataclass
from enum import Enum


class SectionKind(str, Enum):
    """Library section types plexterm can browse."""

    MOVIE = "movie"
    SHOW = "show"
    ARTIST = "artist"


class ItemKind(str, Enum):
    LEAF = "leaf"            # playable: movie, episode, track
    CONTAINER = "container"  # show, season, artist, album


class MediaKind(str, Enum):
    """Kind of playable leaf, which decides naming and local storage."""

    MOVIE = "movie"
    EPISODE = "episode"
    TRACK = "track"


class Sentinel(Enum):
    EMPTY = "EMPTY"


# Returned by PlexClient.list_items for a library with no items
EMPTY = Sentinel.EMPTY


@dataclass(frozen=True)
class LibrarySection:
    """A Plex library section (one "Movies", "TV Shows" or "Music" library)."""

    key: str
    title: str
    kind: SectionKind


@dataclass(frozen=True)
class CatalogItem:
    """A movie, show, season, episode, artist, album or track.

    `id` is the Plex ratingKey and is unique; `title` is not.
    `index` is the episode/track number and `parent_index` the season
    number, when the server provides them.
    """

    title: str
    id: str
    kind: ItemKind
    year: int | None = None
    index: int | None = None
    parent_index: int | None = None
    parent_title: str = ""
    grandparent_title: str = ""
    type: str = ""

    @property
    def is_leaf(self) -> bool:
        return self.kind is ItemKind.LEAF

    @property
    def label(self) -> str:
        """Menu label: "Title (Year)" for movies, "3. Title" for numbered items."""
        if self.type == "movie":
            return f"{self.title} ({self.year})" if self.year else self.title
        if self.type in ("episode", "track") and self.index is not None:
            return f"{self.index}. {self.title}"
        return self.title


@dataclass(frozen=True)
class ItemMetadata:
    """Attributes from /library/metadata/{id} needed for playback and naming."""

    id: str
    title: str
    type: str = ""
    year: int | None = None
    index: int | None = None
    parent_index: int | None = None
    parent_title: str = ""
    grandparent_title: str = ""
    part_key: str = ""


@dataclass(frozen=True)
class ServerInfo:
    """Result of the startup connectivity check."""

    name: str
    library_count: int
