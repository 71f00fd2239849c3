"""Actions on a selected leaf item: play local file, stream, download."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from plexterm import naming
from plexterm.console import Console
from plexterm.local_store import LocalStore
from plexterm.picker import Chosen, Picker
from plexterm.player import Player, PlayerError
from plexterm.plex.client import DownloadError, PlexAPIError, PlexClient
from plexterm.plex.models import CatalogItem, MediaKind

logger = logging.getLogger(__name__)


class Action(str, Enum):
    PLAY_LOCAL = "Play Local File"
    PLAY_REMOTE = "Play from Plex"
    DOWNLOAD = "Download"
    CANCEL = "Cancel"


@dataclass(frozen=True)
class ActionResult:
    """What dispatch() did. action is None when the menu was dismissed."""

    action: Action | None
    ok: bool = True
    path: Path | None = None
    message: str = ""


def available_actions(local_file: Path | None) -> list[Action]:
    actions = [Action.PLAY_REMOTE, Action.DOWNLOAD, Action.CANCEL]
    if local_file is not None:
        actions.insert(0, Action.PLAY_LOCAL)
    return actions


class MediaActionDispatcher:
    """Offers and runs the actions available for one leaf item.

    Every outcome returns to the caller; failures are reported on the
    console and never raised.
    """

    def __init__(
        self,
        client: PlexClient,
        store: LocalStore,
        picker: Picker,
        player: Player,
        console: Console,
    ):
        self.client = client
        self.store = store
        self.picker = picker
        self.player = player
        self.console = console

    def dispatch(self, kind: MediaKind, item: CatalogItem, ancestors=()) -> ActionResult:
        target = naming.encode(kind, item, ancestors)
        title = naming.display_name(kind, item, ancestors)
        local_file = self.store.exists_for(target)

        actions = available_actions(local_file)
        selection = self.picker.pick(
            [a.value for a in actions],
            header=f"Select Action for: {title}",
            prompt="Choose action > ",
        )
        if not isinstance(selection, Chosen):
            return ActionResult(None)

        action = actions[selection.index]
        logger.debug("Action %s for %s", action.name, item.id)
        if action is Action.PLAY_LOCAL:
            return self._play(action, str(local_file), title)
        if action is Action.PLAY_REMOTE:
            return self.play_remote(item, title)
        if action is Action.DOWNLOAD:
            return self.download(item, target, title)
        return ActionResult(Action.CANCEL)

    def _play(self, action: Action, locator: str, title: str) -> ActionResult:
        self.console.clear()
        try:
            self.player.play(locator, title)
        except PlayerError as e:
            return self._fail(action, str(e))
        self.console.clear()
        return ActionResult(action)

    def play_remote(self, item: CatalogItem, title: str) -> ActionResult:
        try:
            locator = self.client.resolve_playback_locator(item.id)
        except PlexAPIError as e:
            logger.warning("No stream for %s: %s", item.id, e)
            return self._fail(Action.PLAY_REMOTE, "Could not retrieve stream URL.")
        self.console.info(f"Playing: {title}")
        return self._play(Action.PLAY_REMOTE, locator, title)

    def download(self, item: CatalogItem, target: naming.DownloadTarget, title: str) -> ActionResult:
        """Download after an explicit confirmation.

        The extension comes from the stream URL. Target directories are
        created as needed inside the download root.
        """
        if not self.console.confirm("Do you want to proceed with the download?"):
            self.console.info("Download cancelled.")
            self.console.pause()
            return ActionResult(Action.DOWNLOAD, ok=False, message="cancelled")

        try:
            locator = self.client.resolve_playback_locator(item.id)
        except PlexAPIError as e:
            logger.warning("No download URL for %s: %s", item.id, e)
            return self._fail(Action.DOWNLOAD, "Could not retrieve download URL.")

        target = target.with_extension(naming.extension_from_locator(locator))
        dest = self.store.target_path(target)
        self.console.info(f"Downloading: {title}")
        self.console.info(f"Destination: {dest}")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            self.client.download(locator, dest, on_progress=self.console.download_progress)
        except (DownloadError, OSError) as e:
            return self._fail(Action.DOWNLOAD, f"Download failed! {e}", path=dest)

        self.console.info("")
        self.console.info("Download completed successfully!")
        self.console.pause()
        return ActionResult(Action.DOWNLOAD, path=dest)

    def _fail(self, action: Action, message: str, path: Path | None = None) -> ActionResult:
        self.console.error(message)
        self.console.pause()
        return ActionResult(action, ok=False, path=path, message=message)
