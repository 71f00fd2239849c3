"""Ordering helpers for menu listings."""

import re

_DIGITS = re.compile(r"(\d+)")


def natural_key(text: str) -> list:
    """Version-aware sort key, so "Season 2" sorts before "Season 10".

    re.split with a capture group always yields text at even positions and
    digit runs at odd positions, so keys of two strings never compare an
    int against a str.
    """
    parts = _DIGITS.split(text)
    return [int(part) if i % 2 else part.casefold() for i, part in enumerate(parts)]


def natural_sorted(items, key=None) -> list:
    """Sort items with natural_key applied to key(item) (or the item itself)."""
    if key is None:
        return sorted(items, key=natural_key)
    return sorted(items, key=lambda item: natural_key(key(item)))


def lexical_sorted(items, key=None) -> list:
    """Case-insensitive alphabetical sort."""
    if key is None:
        return sorted(items, key=str.casefold)
    return sorted(items, key=lambda item: key(item).casefold())
