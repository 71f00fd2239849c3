"""plexterm - browse and play a Plex media library from the terminal."""

__version__ = "1.2.6"
