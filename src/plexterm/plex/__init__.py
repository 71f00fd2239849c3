"""Plex Media Server API access.

PlexClient talks to the server; the records it returns live in models.
"""

from plexterm.plex.client import (
    DownloadError,
    LocatorNotFoundError,
    PlexAPIError,
    PlexAuthError,
    PlexClient,
    PlexConnectionError,
)
from plexterm.plex.models import (
    EMPTY,
    CatalogItem,
    ItemKind,
    ItemMetadata,
    LibrarySection,
    MediaKind,
    SectionKind,
    ServerInfo,
)

__all__ = [
    "PlexClient",
    "PlexAPIError",
    "PlexAuthError",
    "PlexConnectionError",
    "LocatorNotFoundError",
    "DownloadError",
    "EMPTY",
    "CatalogItem",
    "ItemKind",
    "ItemMetadata",
    "LibrarySection",
    "MediaKind",
    "SectionKind",
    "ServerInfo",
]
