"""Shared test fixtures for the plexterm test suite.

FakePlexServer answers the subset of the Plex XML API plexterm uses and
is mounted into a real PlexClient through httpx.MockTransport.
"""

import io
import re
from xml.sax.saxutils import quoteattr

import httpx
import pytest

from plexterm.config import DownloadConfig, ServerConfig
from plexterm.console import Console
from plexterm.local_store import LocalStore
from plexterm.picker import CANCELLED, Chosen
from plexterm.plex.client import PlexClient

BASE_URL = "http://plex.test:32400"
TOKEN = "test-token"


def element(tag: str, **attrs) -> str:
    """Build an XML element string; attribute names are passed as-is."""
    body = "".join(f" {k}={quoteattr(str(v))}" for k, v in attrs.items() if v is not None)
    return f"<{tag}{body}/>"


def container(children=(), **attrs) -> str:
    body = "".join(f" {k}={quoteattr(str(v))}" for k, v in attrs.items())
    return f"<MediaContainer{body}>{''.join(children)}</MediaContainer>"


def movie(title, key, year=None):
    return element("Video", type="movie", title=title, ratingKey=key, year=year)


def show(title, key):
    return element("Directory", type="show", title=title, ratingKey=key)


def season(title, key, index=None):
    return element("Directory", type="season", title=title, ratingKey=key, index=index)


def episode(title, key, index, parent_index=None, show_title="", season_title=""):
    return element(
        "Video", type="episode", title=title, ratingKey=key, index=index,
        parentIndex=parent_index, grandparentTitle=show_title, parentTitle=season_title,
    )


def artist(title, key):
    return element("Directory", type="artist", title=title, ratingKey=key)


def album(title, key):
    return element("Directory", type="album", title=title, ratingKey=key)


def track(title, key, index):
    return element("Track", type="track", title=title, ratingKey=key, index=index)


class FakePlexServer:
    """In-memory Plex server.

    sections: list of (key, title, type)
    items: section key -> list of element strings
    children: rating key -> list of element strings
    metadata: rating key -> element string including any <Part>
    parts: part path -> bytes
    """

    def __init__(self):
        self.sections: list[tuple[str, str, str]] = []
        self.items: dict[str, list[str]] = {}
        self.total_override: dict[str, int] = {}
        self.children: dict[str, list[str]] = {}
        self.metadata: dict[str, str] = {}
        self.parts: dict[str, bytes] = {}
        self.fail: set[tuple[str, int | None]] = set()  # (path, container start)
        self.status: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def page_requests(self, section_key: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"/library/sections/{section_key}/all"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        start = request.url.params.get("X-Plex-Container-Start")
        start = int(start) if start is not None else None

        if (path, start) in self.fail or (path, None) in self.fail:
            return httpx.Response(500, text="Internal Server Error")
        if path in self.status:
            return httpx.Response(self.status[path])

        if path == "/identity":
            return self._xml(container(machineIdentifier="abc123"))
        if path == "/":
            return self._xml(container(friendlyName="Test Server"))
        if path == "/library/sections":
            dirs = [element("Directory", key=k, title=t, type=ty) for k, t, ty in self.sections]
            return self._xml(container(dirs, size=len(dirs)))

        match = re.fullmatch(r"/library/sections/([^/]+)/all", path)
        if match:
            key = match.group(1)
            all_items = self.items.get(key, [])
            size = int(request.url.params.get("X-Plex-Container-Size", len(all_items)))
            offset = start or 0
            page = all_items[offset:offset + size]
            total = self.total_override.get(key, len(all_items))
            return self._xml(container(page, size=len(page), totalSize=total, offset=offset))

        match = re.fullmatch(r"/library/metadata/([^/]+)/children", path)
        if match:
            return self._xml(container(self.children.get(match.group(1), [])))

        match = re.fullmatch(r"/library/metadata/([^/]+)", path)
        if match and match.group(1) in self.metadata:
            return self._xml(container([self.metadata[match.group(1)]]))

        if path in self.parts:
            return httpx.Response(200, content=self.parts[path])

        return httpx.Response(404, text="Not Found")

    @staticmethod
    def _xml(text: str) -> httpx.Response:
        return httpx.Response(200, content=text.encode(), headers={"Content-Type": "text/xml"})


class FakePicker:
    """Scripted picker.

    Each response is a label to choose, an int index, or None to cancel.
    Disabled (placeholder) menus are recorded but consume no response.
    Once the script runs out every prompt is cancelled, which unwinds any
    browse loop.
    """

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.calls: list[dict] = []

    def pick(self, options, header="", prompt="> ", disabled=False):
        self.calls.append({
            "options": list(options), "header": header,
            "prompt": prompt, "disabled": disabled,
        })
        if disabled or not self.responses:
            return CANCELLED
        response = self.responses.pop(0)
        if response is None:
            return CANCELLED
        if isinstance(response, int):
            return Chosen(response, options[response])
        return Chosen(list(options).index(response), response)


class FakePlayer:
    def __init__(self):
        self.played: list[tuple[str, str]] = []

    def play(self, locator, title):
        self.played.append((locator, title))
        return 0


def make_console(answers=()):
    """Console writing to StringIO with scripted input answers."""
    answers = list(answers)
    prompts = []

    def fake_input(prompt=""):
        prompts.append(prompt)
        return answers.pop(0) if answers else ""

    console = Console(out=io.StringIO(), err=io.StringIO(), input_fn=fake_input)
    console.prompts = prompts
    return console


@pytest.fixture
def server():
    return FakePlexServer()


@pytest.fixture
def server_config():
    return ServerConfig(url=BASE_URL, token=TOKEN)


@pytest.fixture
def client(server, server_config):
    c = PlexClient(server_config, transport=server.transport())
    yield c
    c.close()


@pytest.fixture
def store(tmp_path):
    return LocalStore(DownloadConfig(base_dir=str(tmp_path / "downloads")))


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def console():
    return make_console()
