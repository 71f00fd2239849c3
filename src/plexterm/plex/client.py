"""HTTP client for the Plex Media Server XML API.

Fetches library sections, paginated section contents, children listings
and item metadata, and normalizes the XML attribute sets into the typed
records in plexterm.plex.models.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable
from urllib.parse import urlencode

import httpx

from plexterm.config import ServerConfig
from plexterm.plex.models import (
    EMPTY,
    CatalogItem,
    ItemKind,
    ItemMetadata,
    LibrarySection,
    SectionKind,
    Sentinel,
    ServerInfo,
)
from plexterm.sorting import natural_sorted

logger = logging.getLogger(__name__)

PAGE_SIZE = 50
ALL_EPISODES_TITLE = "All episodes"

LEAF_TAGS = ("Video", "Track")
ITEM_TAGS = ("Directory",) + LEAF_TAGS

# (current, total) - pagination counts or downloaded bytes
ProgressFn = Callable[[int, int], None]


class PlexAPIError(Exception):
    """Error communicating with the Plex server."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PlexConnectionError(PlexAPIError):
    """Server unreachable or request timed out."""


class PlexAuthError(PlexAPIError):
    """Token missing or rejected by the server."""


class LocatorNotFoundError(PlexAPIError):
    """Item metadata has no playable media part."""

    def __init__(self, item_id: str):
        super().__init__(f"No playable media found for item {item_id}", 404)
        self.item_id = item_id


class DownloadError(Exception):
    """A download could not be completed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Download failed for {path}: {reason}")
        self.path = path
        self.reason = reason


def _unescape(text: str) -> str:
    # Some servers double-escape ampersands in titles
    return text.replace("&amp;", "&")


def _int_attr(el: ET.Element, name: str) -> int | None:
    value = el.get(name, "")
    try:
        return int(value)
    except ValueError:
        return None


def parse_item(el: ET.Element) -> CatalogItem:
    """Normalize a Directory/Video/Track element into a CatalogItem.

    Missing attributes become empty strings or None.
    """
    item_type = el.get("type", "")
    if not item_type and el.tag == "Track":
        item_type = "track"
    return CatalogItem(
        title=_unescape(el.get("title", "")),
        id=el.get("ratingKey", ""),
        kind=ItemKind.LEAF if el.tag in LEAF_TAGS else ItemKind.CONTAINER,
        year=_int_attr(el, "year"),
        index=_int_attr(el, "index"),
        parent_index=_int_attr(el, "parentIndex"),
        parent_title=_unescape(el.get("parentTitle", "")),
        grandparent_title=_unescape(el.get("grandparentTitle", "")),
        type=item_type,
    )


def _items(root: ET.Element) -> list[CatalogItem]:
    return [parse_item(el) for el in root if el.tag in ITEM_TAGS]


class PlexClient:
    """Client for the Plex XML API.

    Usage:
        client = PlexClient(ServerConfig(url="http://plex:32400", token="..."))
        for section in client.list_sections():
            items = client.list_items(section.key)

    A custom httpx transport can be passed for testing.
    """

    def __init__(self, config: ServerConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self.base_url = config.base_url
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=config.timeout,
            headers={"X-Plex-Token": config.token, "Accept": "application/xml"},
            transport=transport,
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _get(self, path: str, params: dict | None = None, timeout: float | None = None) -> ET.Element:
        logger.debug("GET %s %s", path, params or "")
        kwargs = {"params": params}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            resp = self._client.get(path, **kwargs)
            resp.raise_for_status()
        except httpx.ConnectError:
            raise PlexConnectionError(f"Cannot connect to {self.base_url}")
        except httpx.TimeoutException:
            raise PlexConnectionError("Request timed out")
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            if code in (401, 403):
                raise PlexAuthError("Invalid Plex token or unauthorized access", code)
            raise PlexAPIError(str(e), code)
        except httpx.HTTPError as e:
            raise PlexAPIError(str(e))

        if not resp.content:
            raise PlexAPIError(f"Empty response from {path}")
        try:
            return ET.fromstring(resp.content)
        except ET.ParseError as e:
            raise PlexAPIError(f"Malformed response from {path}: {e}")

    # --- Server ---

    def preflight(self) -> ServerInfo:
        """Check that the server is reachable and the token is accepted.

        Raises PlexConnectionError or PlexAuthError.
        """
        if not self.config.url or not self.config.token:
            raise PlexAuthError("Plex URL or token not set")

        timeout = self.config.preflight_timeout
        self._get("/identity", timeout=timeout)
        sections = self._get("/library/sections", timeout=timeout)
        if sections.tag != "MediaContainer":
            raise PlexAuthError("Invalid Plex token or unauthorized access")

        root = self._get("/", timeout=timeout)
        name = root.get("friendlyName") or root.get("title") or "Unknown"
        count = len(sections.findall("Directory"))
        logger.info("Connected to %s (%d libraries)", name, count)
        return ServerInfo(name=name, library_count=count)

    # --- Catalog ---

    def list_sections(self) -> list[LibrarySection]:
        root = self._get("/library/sections")
        sections = []
        for el in root.findall("Directory"):
            try:
                kind = SectionKind(el.get("type", ""))
            except ValueError:
                logger.debug("Skipping unsupported section type: %s", el.get("type"))
                continue
            sections.append(LibrarySection(
                key=el.get("key", ""),
                title=_unescape(el.get("title", "")),
                kind=kind,
            ))
        return sections

    def list_items(
        self, section_key: str, on_progress: ProgressFn | None = None,
    ) -> list[CatalogItem] | Sentinel:
        """Fetch every item of a library section.

        A one-item probe learns totalSize; EMPTY is returned when the
        library has no items. Pages of PAGE_SIZE are then fetched until
        totalSize is reached or a page comes back empty. on_progress gets
        (fetched, total) after each page. Request failures raise
        PlexAPIError rather than returning a partial list.
        """
        path = f"/library/sections/{section_key}/all"
        probe = self._get(path, {"X-Plex-Container-Start": 0, "X-Plex-Container-Size": 1})
        total = _int_attr(probe, "totalSize") or 0
        if total == 0 or not _items(probe):
            logger.info("Library %s is empty", section_key)
            return EMPTY

        items: list[CatalogItem] = []
        offset = 0
        while True:
            root = self._get(path, {
                "X-Plex-Container-Start": offset,
                "X-Plex-Container-Size": PAGE_SIZE,
            })
            page = _items(root)
            if not page:
                logger.warning(
                    "Library %s: empty page at offset %d (expected %d items)",
                    section_key, offset, total,
                )
                break
            items.extend(page)
            if on_progress:
                on_progress(min(offset + PAGE_SIZE, total), total)
            if offset + PAGE_SIZE >= total:
                break
            offset += PAGE_SIZE

        logger.debug("Library %s: fetched %d/%d items", section_key, len(items), total)
        return items

    def list_children(self, item_id: str) -> list[CatalogItem]:
        """Albums of an artist, tracks of an album, episodes of a season."""
        return _items(self._get(f"/library/metadata/{item_id}/children"))

    def list_seasons(self, show_id: str) -> list[CatalogItem]:
        """Seasons of a show in natural order, without the "All episodes" entry."""
        seasons = [
            item for item in self.list_children(show_id)
            if item.type == "season" and item.id and item.title != ALL_EPISODES_TITLE
        ]
        return natural_sorted(seasons, key=lambda s: s.title)

    def get_metadata(self, item_id: str) -> ItemMetadata:
        root = self._get(f"/library/metadata/{item_id}")
        el = next((child for child in root if child.tag in ITEM_TAGS), None)
        if el is None:
            raise PlexAPIError(f"No metadata for item {item_id}", 404)
        item = parse_item(el)
        part = el.find(".//Part")
        return ItemMetadata(
            id=item.id or item_id,
            title=item.title,
            type=item.type,
            year=item.year,
            index=item.index,
            parent_index=item.parent_index,
            parent_title=item.parent_title,
            grandparent_title=item.grandparent_title,
            part_key=part.get("key", "") if part is not None else "",
        )

    # --- Playback / download ---

    def stream_url(self, part_key: str) -> str:
        return f"{self.base_url}{part_key}?{urlencode({'X-Plex-Token': self.config.token})}"

    def resolve_playback_locator(self, item_id: str) -> str:
        """Return the direct stream URL for an item.

        Raises LocatorNotFoundError if the item has no media part.
        """
        meta = self.get_metadata(item_id)
        if not meta.part_key:
            raise LocatorNotFoundError(item_id)
        return self.stream_url(meta.part_key)

    def download(self, url: str, dest: Path, on_progress: ProgressFn | None = None) -> Path:
        """Stream url to dest.

        Data is written to "<dest>.part" and renamed into place when the
        transfer completes. The partial file is removed on failure.
        """
        part = dest.with_name(dest.name + ".part")
        logger.info("Downloading %s -> %s", url.split("?")[0], dest)
        try:
            with self._client.stream("GET", url, follow_redirects=True) as resp:
                resp.raise_for_status()
                total = int(resp.headers.get("Content-Length", 0) or 0)
                done = 0
                with part.open("wb") as f:
                    for chunk in resp.iter_bytes(chunk_size=65536):
                        f.write(chunk)
                        done += len(chunk)
                        if on_progress:
                            on_progress(done, total)
            part.replace(dest)
        except (httpx.HTTPError, OSError) as e:
            logger.error("Download failed: %s", e)
            part.unlink(missing_ok=True)
            raise DownloadError(dest, str(e))
        return dest
