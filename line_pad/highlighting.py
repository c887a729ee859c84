# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
Highlight tags and the colours they are drawn with.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pygments.console import codes as ANSI_CODES

logger = logging.getLogger(__name__)


class HighlightType(Enum):
    """Classification of one rendered character."""

    NONE = "none"
    NUMBER = "number"
    STRING = "string"
    CHARACTER = "character"
    COMMENT = "comment"
    PRIMARY_KEYWORD = "primary_keyword"
    SECONDARY_KEYWORD = "secondary_keyword"
    MATCH = "match"


DEFAULT_COLORS: Dict[str, str] = {
    "none": "gray",
    "number": "#f4a261",
    "string": "#e9edc9",
    "character": "#ffc8dd",
    "comment": "#859900",
    "primary_keyword": "green",
    "secondary_keyword": "yellow",
    "match": "cyan",
}

# Position of each named ANSI colour in the xterm palette.
NAMED_XTERM_INDEX: Dict[str, int] = {
    "black": 0, "red": 1, "green": 2, "yellow": 3,
    "blue": 4, "magenta": 5, "cyan": 6, "gray": 7,
    "brightblack": 8, "brightred": 9, "brightgreen": 10, "brightyellow": 11,
    "brightblue": 12, "brightmagenta": 13, "brightcyan": 14, "white": 15,
}


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hex color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError(f"Expected #rrggbb, got {hex_color!r}")

    r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)

    # Simple grayscale check
    if r == g == b:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return round(((r - 8) / 247) * 24) + 232

    # Color cube
    color_index = 16
    color_index += 36 * round(r / 255 * 5)
    color_index += 6 * round(g / 255 * 5)
    color_index += round(b / 255 * 5)
    return int(color_index)


def color_to_xterm(value: str) -> int:
    """Palette index for a ``#rrggbb`` value or a named ANSI colour."""
    if value.startswith("#"):
        return hex_to_xterm(value)
    try:
        return NAMED_XTERM_INDEX[value]
    except KeyError:
        raise ValueError(f"Unknown color name: {value!r}") from None


def color_to_ansi(value: str) -> str:
    """
    ANSI foreground escape for a colour value.

    Hex colours become 256-colour escapes; names go through
    ``pygments.console.codes`` so they match what pygments prints.
    """
    if value.startswith("#"):
        return f"\x1b[38;5;{hex_to_xterm(value)}m"
    if value not in NAMED_XTERM_INDEX or value not in ANSI_CODES:
        raise ValueError(f"Unknown color name: {value!r}")
    return ANSI_CODES[value]


class ColorScheme:
    """
    Maps every :class:`HighlightType` to a display attribute.

    Args:
        colors: Optional ``{tag name: colour}`` overrides, usually the
            ``[colors]`` table of the configuration. Unknown tag names are
            ignored with a warning; unknown colour values raise ``ValueError``.
    """

    def __init__(self, colors: Optional[Dict[str, Any]] = None) -> None:
        merged = dict(DEFAULT_COLORS)
        for name, value in (colors or {}).items():
            if name not in merged:
                logger.warning("Ignoring color for unknown highlight type %r", name)
                continue
            merged[name] = str(value)

        self._values: Dict[HighlightType, str] = {}
        self._markers: Dict[HighlightType, str] = {}
        for tag in HighlightType:
            value = merged[tag.value]
            self._values[tag] = value
            self._markers[tag] = color_to_ansi(value)
        self.reset = ANSI_CODES["reset"]

    def value(self, tag: HighlightType) -> str:
        return self._values[tag]

    def marker(self, tag: HighlightType) -> str:
        return self._markers[tag]

    def xterm_index(self, tag: HighlightType) -> int:
        return color_to_xterm(self._values[tag])


DEFAULT_SCHEME = ColorScheme()
