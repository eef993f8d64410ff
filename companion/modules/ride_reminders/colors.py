"""Reminder color palette: resolve stored tags to concrete theme colors."""

from __future__ import annotations

DEFAULT_TAG = "red"

# Hex colors per tag, per theme
PALETTE: dict[str, dict[str, str]] = {
    "light": {
        "red": "#E53935",
        "orange": "#FB8C00",
        "yellow": "#FDD835",
        "green": "#43A047",
        "blue": "#1E88E5",
        "purple": "#8E24AA",
        "grey": "#757575",
    },
    "dark": {
        "red": "#EF9A9A",
        "orange": "#FFCC80",
        "yellow": "#FFF59D",
        "green": "#A5D6A7",
        "blue": "#90CAF9",
        "purple": "#CE93D8",
        "grey": "#BDBDBD",
    },
}


def tag_to_color(tag: str | None, theme: str = "light") -> str:
    """Return the hex color for a tag. Unknown tags and themes fall back to light red."""
    colors = PALETTE.get(theme, PALETTE["light"])
    return colors.get(tag or DEFAULT_TAG, colors[DEFAULT_TAG])
