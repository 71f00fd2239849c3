"""Stack-based browsing of a Plex library down to a playable item.

Browse paths per library kind:

    movie:  library -> movie -> [action]
    show:   library -> show -> season -> episode -> [action]
    artist: library -> artist -> album -> track -> [action]

Each frame on the stack is one menu level. Choosing an entry pushes the
next level, cancelling pops back to the previous one, and the stack's
ordering is the breadcrumb shown in menu headers. A level's choices are
re-fetched every time it is shown.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from plexterm.actions import MediaActionDispatcher
from plexterm.console import Console
from plexterm.picker import Chosen, Picker
from plexterm.plex.client import PlexAPIError, PlexClient
from plexterm.plex.models import EMPTY, CatalogItem, LibrarySection, MediaKind, SectionKind

logger = logging.getLogger(__name__)

GO_BACK = "< Go back"


class Level(str, Enum):
    LIBRARY = "library"
    MOVIE = "movie"
    SHOW = "show"
    SEASON = "season"
    EPISODE = "episode"
    ARTIST = "artist"
    ALBUM = "album"
    TRACK = "track"


class BrowseOutcome(str, Enum):
    BACK = "back"                    # user backed out of the top level
    NO_LIBRARIES = "no_libraries"    # server has no library of this kind
    EMPTY_LIBRARY = "empty_library"  # last level left had nothing to show
    ERROR = "error"                  # last level left failed to load


@dataclass(frozen=True)
class LevelSpec:
    level: Level
    noun: str     # "Select {noun}", breadcrumb label
    plural: str   # "Search {plural} > "


BROWSE_PATHS = {
    SectionKind.MOVIE: (
        LevelSpec(Level.MOVIE, "Movie", "Movies"),
    ),
    SectionKind.SHOW: (
        LevelSpec(Level.SHOW, "TV Show", "TV Shows"),
        LevelSpec(Level.SEASON, "Season", "Seasons"),
        LevelSpec(Level.EPISODE, "Episode", "Episodes"),
    ),
    SectionKind.ARTIST: (
        LevelSpec(Level.ARTIST, "Artist", "Artists"),
        LevelSpec(Level.ALBUM, "Album", "Albums"),
        LevelSpec(Level.TRACK, "Track", "Tracks"),
    ),
}

LEAF_KINDS = {
    SectionKind.MOVIE: MediaKind.MOVIE,
    SectionKind.SHOW: MediaKind.EPISODE,
    SectionKind.ARTIST: MediaKind.TRACK,
}

LIBRARY_NOUNS = {
    SectionKind.MOVIE: "Movie",
    SectionKind.SHOW: "TV Show",
    SectionKind.ARTIST: "Music",
}


@dataclass
class NavigationFrame:
    """One menu level on the browse stack.

    depth indexes the kind's browse path; the library frame uses -1.
    titles holds the chosen ancestors' titles, outermost first.
    """

    level: Level
    parent_id: str
    depth: int = -1
    titles: tuple[str, ...] = ()
    parent: CatalogItem | None = None
    choices: list = field(default_factory=list)


class NavigationEngine:
    """Drives the picker through a library's levels.

    Usage:
        engine = NavigationEngine(client, picker, dispatcher, console)
        engine.browse(SectionKind.SHOW)
    """

    def __init__(
        self,
        client: PlexClient,
        picker: Picker,
        dispatcher: MediaActionDispatcher,
        console: Console,
    ):
        self.client = client
        self.picker = picker
        self.dispatcher = dispatcher
        self.console = console
        self.stack: list[NavigationFrame] = []

    @property
    def breadcrumb(self) -> tuple[str, ...]:
        return self.stack[-1].titles if self.stack else ()

    def browse(self, kind: SectionKind) -> BrowseOutcome:
        """Run the browse loop for one library kind until the user backs out.

        A single library of the kind is selected without prompting, so
        leaving its top level ends the browse.
        """
        noun = LIBRARY_NOUNS[kind]
        try:
            sections = [s for s in self.client.list_sections() if s.kind is kind]
        except PlexAPIError as e:
            logger.error("Listing libraries failed: %s", e)
            self._report(f"Could not load libraries: {e}")
            return BrowseOutcome.ERROR

        if not sections:
            self._report(f"No {noun.lower()} libraries found.")
            return BrowseOutcome.NO_LIBRARIES

        if len(sections) == 1:
            logger.debug("Auto-selecting library %s", sections[0].title)
            self.stack = [self._section_frame(kind, sections[0])]
        else:
            self.stack = [NavigationFrame(Level.LIBRARY, "", choices=sections)]

        outcome = BrowseOutcome.BACK
        while self.stack:
            outcome = self.step(kind)
        return outcome

    def step(self, kind: SectionKind) -> BrowseOutcome | None:
        """Render the top frame once and apply the user's choice.

        Returns the reason when the frame was popped, None otherwise.
        """
        frame = self.stack[-1]
        if frame.level is Level.LIBRARY:
            return self._choose_library(kind, frame)

        path = BROWSE_PATHS[kind]
        spec = path[frame.depth]
        try:
            choices = self._fetch(spec.level, frame.parent_id)
        except PlexAPIError as e:
            logger.error("Loading %s for %s failed: %s", spec.plural, frame.parent_id, e)
            self._report(f"Could not load {spec.plural.lower()}: {e}")
            self.stack.pop()
            return BrowseOutcome.ERROR

        if choices is EMPTY or not choices:
            header = "Library Empty" if choices is EMPTY else f"No {spec.plural.lower()} found"
            self.picker.pick([GO_BACK], header=header, disabled=True)
            self.stack.pop()
            return BrowseOutcome.EMPTY_LIBRARY

        frame.choices = choices
        selection = self.picker.pick(
            [item.label for item in choices],
            header=self._header(path, frame, spec),
            prompt=f"Search {spec.plural} > ",
        )
        if not isinstance(selection, Chosen):
            self.stack.pop()
            return BrowseOutcome.BACK

        item = choices[selection.index]
        if frame.depth == len(path) - 1:
            leaf = self._complete_leaf(item, frame)
            self.dispatcher.dispatch(LEAF_KINDS[kind], leaf, frame.titles)
            return None

        self.stack.append(NavigationFrame(
            level=path[frame.depth + 1].level,
            parent_id=item.id,
            depth=frame.depth + 1,
            titles=frame.titles + (item.title,),
            parent=item,
        ))
        return None

    def _choose_library(self, kind: SectionKind, frame: NavigationFrame) -> BrowseOutcome | None:
        noun = LIBRARY_NOUNS[kind]
        sections = frame.choices
        selection = self.picker.pick(
            [s.title for s in sections],
            header=f"Select {noun} Library",
            prompt=f"Search {noun} Libraries > ",
        )
        if not isinstance(selection, Chosen):
            self.stack.pop()
            return BrowseOutcome.BACK
        self.stack.append(self._section_frame(kind, sections[selection.index]))
        return None

    def _section_frame(self, kind: SectionKind, section: LibrarySection) -> NavigationFrame:
        return NavigationFrame(BROWSE_PATHS[kind][0].level, section.key, depth=0)

    def _fetch(self, level: Level, parent_id: str):
        if level in (Level.MOVIE, Level.SHOW, Level.ARTIST):
            return self.client.list_items(parent_id, on_progress=self.console.progress)
        if level is Level.SEASON:
            return self.client.list_seasons(parent_id)
        return self.client.list_children(parent_id)

    def _header(self, path, frame: NavigationFrame, spec: LevelSpec) -> str:
        lines = [f"{path[i].noun}: {title}" for i, title in enumerate(frame.titles)]
        lines.append(f"Select {spec.noun}")
        return "\n".join(lines)

    def _complete_leaf(self, item: CatalogItem, frame: NavigationFrame) -> CatalogItem:
        # Season listings don't always carry parentIndex on their episodes
        if frame.level is not Level.EPISODE or item.parent_index is not None:
            return item
        if frame.parent is not None and frame.parent.index is not None:
            return replace(item, parent_index=frame.parent.index)
        return item

    def _report(self, message: str):
        self.console.error(message)
        self.console.pause()
