"""CLI entry point for plexterm.

plexterm: connects to the configured Plex server and runs the interactive
menu (Movies, TV Shows, Music, Downloads).
"""

import argparse
import dataclasses
import logging
import shutil
import sys

from plexterm import __version__

MAIN_MENU = ("Movies", "TV Shows", "Music", "Downloads", "Help", "Quit")

HELP_TEXT = f"""plexterm v{__version__} - Guide

NAVIGATION:
    Up/Down          Move up/down in menus
    Enter            Select current item
    ESC              Go back to previous menu
    Ctrl+C           Exit the program
    Type to search   Fuzzy finding in any menu

MENU STRUCTURE:
    1. Main Menu
        - Movies
        - TV Shows
        - Music
        - Downloads
        - Help
        - Quit

    2. Library Selection
        Select your preferred library.
        If there is only one library of the selected
        type it is selected automatically.

    3. Media Selection
        Movies: Select movie from list
        TV Shows: Select show -> season -> episode
        Music: Select artist -> album -> track

    4. Actions
        Play Local File (only when already downloaded)
        Play from Plex
        Download

DEPENDENCIES:
    Required: mpv, fzf (or the textual picker: pip install "plexterm[tui]")
"""


def check_dependencies(config) -> list[str]:
    """Return the external programs that are missing from PATH."""
    required = [config.player.mpv_path]
    if config.picker.backend == "fzf":
        required.append(config.picker.fzf_path)
    return [dep for dep in required if shutil.which(dep) is None]


def create_picker(config):
    if config.picker.backend == "textual":
        try:
            from plexterm.tui.picker_app import TextualPicker
        except ImportError:
            print("TUI dependencies not installed. Install with:")
            print('  pip install "plexterm[tui]"')
            sys.exit(1)
        return TextualPicker()

    from plexterm.picker import FzfPicker
    return FzfPicker(config.picker.fzf_path)


def run_main_menu(picker, engine, downloads, console) -> bool:
    """Show the main menu once. Returns False when the user chose Quit."""
    from plexterm.picker import Chosen
    from plexterm.plex.models import SectionKind

    selection = picker.pick(list(MAIN_MENU), header="Select Media Type", prompt="Search Menu > ")
    if not isinstance(selection, Chosen):
        console.clear()
        return True

    choice = selection.value
    if choice == "Movies":
        engine.browse(SectionKind.MOVIE)
    elif choice == "TV Shows":
        engine.browse(SectionKind.SHOW)
    elif choice == "Music":
        engine.browse(SectionKind.ARTIST)
    elif choice == "Downloads":
        downloads.run()
    elif choice == "Help":
        console.clear()
        console.info(HELP_TEXT)
        console.pause("Press Enter to return to main menu...")
        console.clear()
    elif choice == "Quit":
        return False
    return True


def main(argv=None):
    """Entry point for the plexterm command."""
    parser = argparse.ArgumentParser(
        prog="plexterm",
        description="plexterm - browse and play Plex media from the terminal",
    )
    parser.add_argument(
        "--config", default=None, help="Path to plexterm.toml config file"
    )
    parser.add_argument(
        "--url", default=None, help="Plex server URL (default: from config or PLEX_URL)"
    )
    parser.add_argument(
        "--token", default=None, help="Plex token (default: from config or PLEX_TOKEN)"
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)"
    )
    parser.add_argument(
        "--log-file", default=None, help="Write logs to this file instead of stderr"
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"plexterm v{__version__}"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
        filename=args.log_file,
    )
    log = logging.getLogger("plexterm")

    from plexterm.config import load_config

    config = load_config(args.config)

    # CLI args override config file and environment
    if args.url or args.token:
        config = dataclasses.replace(config, server=dataclasses.replace(
            config.server,
            url=args.url or config.server.url,
            token=args.token or config.server.token,
        ))

    missing = check_dependencies(config)
    if missing:
        print(f"Missing required dependencies: {' '.join(missing)}")
        print("Please install them and try again.")
        sys.exit(1)

    from plexterm.actions import MediaActionDispatcher
    from plexterm.console import Console
    from plexterm.downloads import DownloadsBrowser
    from plexterm.local_store import LocalStore
    from plexterm.navigator import NavigationEngine
    from plexterm.player import MpvPlayer
    from plexterm.plex.client import (
        PlexAPIError,
        PlexAuthError,
        PlexClient,
        PlexConnectionError,
    )

    client = PlexClient(config.server)
    print("Checking Plex server connection...")
    try:
        info = client.preflight()
    except PlexAuthError as e:
        print(f"Error: {e}")
        print("Set [server] token in plexterm.toml, PLEX_TOKEN, or --token")
        client.close()
        sys.exit(1)
    except PlexConnectionError as e:
        print(f"Error: Could not connect to Plex server at {config.server.url} ({e})")
        print("Please check if:")
        print("1. The Plex server URL is correct")
        print("2. The Plex server is running")
        print("3. Your network connection is working")
        client.close()
        sys.exit(1)
    except PlexAPIError as e:
        print(f"Error: Unexpected response from Plex server: {e}")
        client.close()
        sys.exit(1)
    print(f"Successfully connected to Plex server: {info.name}")
    print(f"Found {info.library_count} available libraries")

    store = LocalStore(config.downloads)
    store.ensure_dirs()

    console = Console()
    picker = create_picker(config)
    player = MpvPlayer(config.player.mpv_path, config.player.extra_args)
    dispatcher = MediaActionDispatcher(client, store, picker, player, console)
    engine = NavigationEngine(client, picker, dispatcher, console)
    downloads = DownloadsBrowser(store, picker, player, console)

    log.info("plexterm v%s started against %s", __version__, config.server.url)
    try:
        while run_main_menu(picker, engine, downloads, console):
            pass
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        client.close()


if __name__ == "__main__":
    main()
