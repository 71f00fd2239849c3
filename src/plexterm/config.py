"""Configuration loader for plexterm."""

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python 3.9-3.10 fallback


@dataclass(frozen=True)
class ServerConfig:
    """Connection settings for the Plex server."""

    url: str = "http://localhost:32400"
    token: str = ""
    timeout: float = 30.0
    preflight_timeout: float = 10.0  # Deadline for the startup connectivity check

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")


@dataclass(frozen=True)
class DownloadConfig:
    """Where downloaded media is stored.

    The three subroots default to movies/, shows/ and music/ under base_dir.
    """

    base_dir: str = "downloads"
    movies_dir: str = ""
    shows_dir: str = ""
    music_dir: str = ""

    def __post_init__(self):
        # frozen dataclass: fill derived defaults through object.__setattr__
        base = os.path.expanduser(self.base_dir)
        object.__setattr__(self, "base_dir", base)
        if not self.movies_dir:
            object.__setattr__(self, "movies_dir", os.path.join(base, "movies"))
        if not self.shows_dir:
            object.__setattr__(self, "shows_dir", os.path.join(base, "shows"))
        if not self.music_dir:
            object.__setattr__(self, "music_dir", os.path.join(base, "music"))


@dataclass(frozen=True)
class PlayerConfig:
    """Settings for the external media player."""

    mpv_path: str = "mpv"
    extra_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class PickerConfig:
    """Settings for the interactive fuzzy picker."""

    backend: str = "fzf"  # "fzf" or "textual"
    fzf_path: str = "fzf"


@dataclass(frozen=True)
class Config:
    """Top-level plexterm configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    downloads: DownloadConfig = field(default_factory=DownloadConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    picker: PickerConfig = field(default_factory=PickerConfig)


def load_config(path: str | None = None) -> Config:
    """Load configuration from plexterm.toml.

    Search order:
    1. Explicit path argument
    2. ./plexterm.toml
    3. ~/.config/plexterm/plexterm.toml
    4. Defaults

    PLEX_URL and PLEX_TOKEN environment variables override the file.
    """
    search_paths = []
    if path:
        search_paths.append(Path(path))
    search_paths.extend([
        Path("plexterm.toml"),
        Path.home() / ".config" / "plexterm" / "plexterm.toml",
    ])

    data: dict = {}
    for p in search_paths:
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            break

    return _parse_config(data, env=os.environ)


def _parse_config(data: dict, env: dict | None = None) -> Config:
    """Parse a TOML dict (plus optional environment) into Config."""
    env = env or {}
    defaults = Config()

    s = data.get("server", {})
    server = ServerConfig(
        url=env.get("PLEX_URL") or s.get("url", defaults.server.url),
        token=env.get("PLEX_TOKEN") or s.get("token", defaults.server.token),
        timeout=float(s.get("timeout", defaults.server.timeout)),
        preflight_timeout=float(s.get("preflight_timeout", defaults.server.preflight_timeout)),
    )

    d = data.get("downloads", {})
    downloads = DownloadConfig(
        base_dir=d.get("base_dir", "downloads"),
        movies_dir=d.get("movies_dir", ""),
        shows_dir=d.get("shows_dir", ""),
        music_dir=d.get("music_dir", ""),
    )

    p = data.get("player", {})
    player = PlayerConfig(
        mpv_path=p.get("mpv_path", defaults.player.mpv_path),
        extra_args=tuple(p.get("extra_args", [])),
    )

    k = data.get("picker", {})
    backend = k.get("backend", defaults.picker.backend)
    if backend not in ("fzf", "textual"):
        raise ValueError(f"Unknown picker backend: {backend!r} (expected 'fzf' or 'textual')")
    picker = PickerConfig(
        backend=backend,
        fzf_path=k.get("fzf_path", defaults.picker.fzf_path),
    )

    return Config(server=server, downloads=downloads, player=player, picker=picker)
