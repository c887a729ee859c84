# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
One line of document text and its per-character highlight tags.

Every position a Row accepts or returns is a grapheme index. The
highlighting scanner works on scalars internally and maps its result back
to graphemes, so ``len(row.highlighting) == len(row)`` after each pass.
"""

import logging
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .filetype import HighlightingOptions
from .highlighting import DEFAULT_SCHEME, ColorScheme, HighlightType
from .units import (
    byte_to_grapheme,
    display_width,
    grapheme_count,
    grapheme_starts,
    graphemes,
    is_separator,
)

logger = logging.getLogger(__name__)


class SearchDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


# ───────────────────────────── Matchers ─────────────────────────────
# Each matcher looks at the scalar at ``index`` and returns how many
# scalars it consumes (0 = no match).

Matcher = Callable[[Sequence[str], int, HighlightingOptions], int]


def _is_ascii_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def match_number(chars: Sequence[str], index: int, opts: HighlightingOptions) -> int:
    if not opts.numbers or not _is_ascii_digit(chars[index]):
        return 0
    if index > 0 and not is_separator(chars[index - 1]):
        return 0
    end = index + 1
    while end < len(chars) and (_is_ascii_digit(chars[end]) or chars[end] in ".e_"):
        end += 1
    return end - index


def match_string(chars: Sequence[str], index: int, opts: HighlightingOptions) -> int:
    # No escape handling: a backslash-quote closes the literal.
    if not opts.strings or chars[index] != '"':
        return 0
    end = index + 1
    while end < len(chars) and chars[end] != '"':
        end += 1
    if end < len(chars):
        end += 1
    return end - index


def match_character(chars: Sequence[str], index: int, opts: HighlightingOptions) -> int:
    if not opts.characters or chars[index] != "'" or index + 1 >= len(chars):
        return 0
    closing = index + 3 if chars[index + 1] == "\\" else index + 2
    if closing < len(chars) and chars[closing] == "'":
        return closing - index + 1
    return 0


def match_comment(chars: Sequence[str], index: int, opts: HighlightingOptions) -> int:
    if not opts.comments or chars[index] != "/":
        return 0
    if index + 1 < len(chars) and chars[index + 1] == "/":
        return len(chars) - index
    return 0


def _match_keywords(chars: Sequence[str], index: int, keywords: Sequence[str]) -> int:
    if index > 0 and not is_separator(chars[index - 1]):
        return 0
    for word in keywords:
        if not word:
            continue
        end = index + len(word)
        if end > len(chars):
            continue
        if end < len(chars) and not is_separator(chars[end]):
            continue
        if "".join(chars[index:end]) == word:
            return len(word)
    return 0


def match_primary_keyword(chars: Sequence[str], index: int, opts: HighlightingOptions) -> int:
    return _match_keywords(chars, index, opts.primary_keywords)


def match_secondary_keyword(chars: Sequence[str], index: int, opts: HighlightingOptions) -> int:
    return _match_keywords(chars, index, opts.secondary_keywords)


# Priority order; the first matcher that consumes anything wins.
MATCHERS: Tuple[Tuple[HighlightType, Matcher], ...] = (
    (HighlightType.NUMBER, match_number),
    (HighlightType.STRING, match_string),
    (HighlightType.CHARACTER, match_character),
    (HighlightType.COMMENT, match_comment),
    (HighlightType.PRIMARY_KEYWORD, match_primary_keyword),
    (HighlightType.SECONDARY_KEYWORD, match_secondary_keyword),
)


def scan(text: str, opts: HighlightingOptions) -> List[HighlightType]:
    """
    Classifies every scalar of *text* in a single left-to-right pass.

    Returns one tag per scalar (``len(result) == len(text)``).
    """
    chars = list(text)
    tags: List[HighlightType] = []
    index = 0
    while index < len(chars):
        for tag, matcher in MATCHERS:
            consumed = matcher(chars, index, opts)
            if consumed:
                tags.extend([tag] * consumed)
                index += consumed
                break
        else:
            tags.append(HighlightType.NONE)
            index += 1
    return tags


# ─────────────────────────────── Row ────────────────────────────────
class Row:
    """
    A single line of text, never containing a newline.

    Attributes:
        highlighting (List[HighlightType]): One tag per grapheme, valid after
            the most recent :meth:`highlight` call.
    """

    def __init__(self, content: str = "") -> None:
        if "\n" in content:
            raise ValueError("Row content cannot contain a newline")
        self._content = content
        self._len = grapheme_count(content)
        self.highlighting: List[HighlightType] = []

    def __len__(self) -> int:
        return self._len

    def __repr__(self) -> str:
        return f"Row({self._content!r})"

    @property
    def content(self) -> str:
        return self._content

    def is_empty(self) -> bool:
        return self._len == 0

    def as_bytes(self) -> bytes:
        return self._content.encode("utf-8")

    def _set_content(self, content: str) -> None:
        self._content = content
        self._len = grapheme_count(content)

    # ───────────── Editing ─────────────
    def insert(self, at: int, ch: str) -> None:
        """Inserts *ch* before the grapheme at *at*, or appends when ``at >= len``."""
        if at >= self._len:
            self._set_content(self._content + ch)
            return
        clusters = graphemes(self._content)
        self._set_content("".join(clusters[:at]) + ch + "".join(clusters[at:]))

    def delete(self, at: int) -> None:
        """Removes the grapheme at *at*; out of range is a no-op."""
        if at >= self._len:
            return
        clusters = graphemes(self._content)
        del clusters[at]
        self._set_content("".join(clusters))

    def append(self, other: "Row") -> None:
        """Concatenates *other* onto this row; the caller re-highlights."""
        self._set_content(self._content + other._content)

    def split(self, at: int) -> "Row":
        """
        Truncates this row to graphemes ``[0, at)`` and returns a new row
        holding ``[at, len)``. The new row has no highlighting yet.
        """
        clusters = graphemes(self._content)
        tail = Row("".join(clusters[at:]))
        self._set_content("".join(clusters[:at]))
        return tail

    # ───────────── Search ─────────────
    def find(self, query: str, at: int, direction: SearchDirection) -> Optional[int]:
        """
        Returns the grapheme index of the first match of *query*.

        Forward searches graphemes ``[at, len)``, Backward ``[0, at)`` (the
        last match wins). An empty query or ``at > len`` finds nothing, as
        does a byte-level hit that does not start on a grapheme boundary.
        """
        if at > self._len or not query:
            return None

        if direction == SearchDirection.FORWARD:
            start, end = at, self._len
        else:
            start, end = 0, at

        window = "".join(graphemes(self._content)[start:end])
        haystack = window.encode("utf-8")
        needle = query.encode("utf-8")
        if direction == SearchDirection.FORWARD:
            byte_index = haystack.find(needle)
        else:
            byte_index = haystack.rfind(needle)
        if byte_index == -1:
            return None

        index = byte_to_grapheme(window, byte_index)
        if index is None:
            return None
        return start + index

    # ───────────── Highlighting ─────────────
    def highlight(self, opts: HighlightingOptions, word: Optional[str] = None) -> None:
        """
        Re-scans the whole row and replaces :attr:`highlighting`, then
        overlays ``MATCH`` on every occurrence of *word*.
        """
        scalar_tags = scan(self._content, opts)
        # A grapheme takes the tag of its first scalar.
        self.highlighting = [scalar_tags[offset] for offset in grapheme_starts(self._content)]
        self.highlight_matches(word)

    def highlight_matches(self, word: Optional[str]) -> None:
        if not word:
            return
        word_len = grapheme_count(word)
        search_index = 0
        while True:
            match = self.find(word, search_index, SearchDirection.FORWARD)
            if match is None:
                break
            next_index = min(match + word_len, len(self.highlighting))
            for i in range(match, next_index):
                self.highlighting[i] = HighlightType.MATCH
            search_index = match + max(word_len, 1)

    # ───────────── Output ─────────────
    def segments(self, start: int, end: int) -> Iterator[Tuple[str, HighlightType]]:
        """
        Yields ``(text, tag)`` runs for graphemes ``[start, end)``, clamped to
        the row. Adjacent graphemes sharing a tag form one run; tabs are
        rendered as a single space.
        """
        end = min(end, self._len)
        start = min(start, end)
        clusters = graphemes(self._content)

        run: List[str] = []
        run_tag: Optional[HighlightType] = None
        for i in range(start, end):
            tag = self.highlighting[i] if i < len(self.highlighting) else HighlightType.NONE
            if tag != run_tag and run:
                yield "".join(run), run_tag
                run = []
            run_tag = tag
            cluster = clusters[i]
            run.append(" " if cluster == "\t" else cluster)
        if run:
            yield "".join(run), run_tag

    def render(self, start: int, end: int, scheme: Optional[ColorScheme] = None) -> str:
        """
        Returns graphemes ``[start, end)`` with a colour marker before each
        run of equally tagged characters and a reset marker at the end.
        """
        scheme = scheme or DEFAULT_SCHEME
        parts = [scheme.marker(tag) + text for text, tag in self.segments(start, end)]
        parts.append(scheme.reset)
        return "".join(parts)

    def display_width(self, start: int = 0, end: Optional[int] = None) -> int:
        """Terminal cells taken by graphemes ``[start, end)`` as rendered."""
        return sum(display_width(text) for text, _ in self.segments(start, self._len if end is None else end))
