# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
Conversions between the three units a row of text is measured in.

* **byte offset** – position inside the UTF-8 encoding; substring search
  runs on bytes.
* **scalar index** – position inside the Python ``str`` (one Unicode scalar
  value per index); the highlighting scanner walks scalars.
* **grapheme index** – position in user-perceived characters; every cursor
  and editing operation is addressed in graphemes.
"""

import string
import unicodedata
from typing import List, Optional

import grapheme
from wcwidth import wcswidth, wcwidth

# str.isspace() is wider than ASCII whitespace; the scanner only splits on these.
ASCII_WHITESPACE = frozenset(" \t\n\x0c\r")
ASCII_PUNCTUATION = frozenset(string.punctuation)


def is_separator(ch: str) -> bool:
    """True for ASCII punctuation or ASCII whitespace."""
    return ch in ASCII_PUNCTUATION or ch in ASCII_WHITESPACE


def graphemes(text: str) -> List[str]:
    return list(grapheme.graphemes(text))


def grapheme_count(text: str) -> int:
    return grapheme.length(text)


def grapheme_starts(text: str) -> List[int]:
    """Scalar offset at which each grapheme of *text* starts."""
    starts: List[int] = []
    offset = 0
    for cluster in grapheme.graphemes(text):
        starts.append(offset)
        offset += len(cluster)
    return starts


def grapheme_to_scalar(text: str, index: int) -> int:
    """
    Scalar offset of the grapheme at *index*.

    Indices at or past the grapheme count map to ``len(text)`` so the result
    can always be used as a slice bound.
    """
    if index <= 0:
        return 0
    offset = 0
    for i, cluster in enumerate(grapheme.graphemes(text)):
        if i == index:
            return offset
        offset += len(cluster)
    return len(text)


def scalar_to_grapheme(text: str, offset: int) -> int:
    """
    Index of the grapheme that contains the scalar at *offset*.

    Offsets at or past the end of *text* map to the grapheme count.
    """
    if offset <= 0:
        return 0
    position = 0
    index = 0
    for index, cluster in enumerate(grapheme.graphemes(text)):
        position += len(cluster)
        if offset < position:
            return index
    return grapheme_count(text)


def grapheme_to_byte(text: str, index: int) -> int:
    """UTF-8 byte offset at which the grapheme at *index* starts."""
    return len(text[:grapheme_to_scalar(text, index)].encode("utf-8"))


def byte_to_grapheme(text: str, offset: int) -> Optional[int]:
    """
    Grapheme index that starts at UTF-8 byte *offset*.

    Returns ``None`` when the offset falls inside a grapheme (or inside a
    multi-byte scalar); the end of the text maps to the grapheme count.
    """
    if offset < 0:
        return None
    position = 0
    index = 0
    for index, cluster in enumerate(grapheme.graphemes(text)):
        if position == offset:
            return index
        if position > offset:
            return None
        position += len(cluster.encode("utf-8"))
    if position == offset:
        return grapheme_count(text)
    return None


def char_width(ch: str) -> int:
    """Cells taken by a single scalar; control and combining scalars take none."""
    if unicodedata.category(ch) in ("Cc", "Cf") or unicodedata.combining(ch):
        return 0
    width = wcwidth(ch)
    return width if width >= 0 else 1


def display_width(text: str) -> int:
    """
    Return the printable width of *text* in terminal cells.

    Uses ``wcswidth`` to honour full-width CJK; when the string holds
    non-printables (``wcswidth`` == -1) the widths are summed per scalar.
    """
    if text.isascii() and text.isprintable():
        return len(text)
    width = wcswidth(text)
    if width >= 0:
        return width
    return sum(char_width(ch) for ch in text)
