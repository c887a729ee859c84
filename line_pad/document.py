# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
The document: an ordered list of rows plus the file it came from.

Positions are ``(x, y)`` pairs where ``y`` is a row index and ``x`` a
grapheme offset inside that row. Out-of-range positions are silently
ignored; file-system failures propagate as the built-in ``OSError``
subclasses (``FileNotFoundError``, ``PermissionError``, ...).
"""

import errno
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import chardet

from .filetype import FileType
from .row import Row, SearchDirection

logger = logging.getLogger(__name__)


@dataclass
class Position:
    x: int = 0
    y: int = 0


def describe_os_error(exc: OSError) -> str:
    """Classifies a load/save failure for display: not found, permission denied or I/O error."""
    if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
        kind = "not found"
    elif isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        kind = "permission denied"
    else:
        kind = "I/O error"
    detail = exc.strerror or str(exc)
    return f"{kind}: {detail}" if detail and detail.lower() != kind else kind


def decode_text(data: bytes, filename: str = "") -> str:
    """
    Decodes file contents as UTF-8, falling back to the encoding chardet
    guesses when the bytes are not valid UTF-8.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        guess = chardet.detect(data)
        encoding = guess.get("encoding") or "utf-8"
        logger.warning(
            f"'{filename}' is not valid UTF-8 ({exc.reason} at byte {exc.start}); "
            f"decoding as {encoding} (confidence {guess.get('confidence') or 0.0:.2f})"
        )
        try:
            return data.decode(encoding, errors="replace")
        except LookupError:
            logger.warning(f"Unknown encoding '{encoding}' reported for '{filename}', using UTF-8")
            return data.decode("utf-8", errors="replace")


def split_lines(text: str) -> List[str]:
    """
    Splits on ``\\n`` and strips one trailing ``\\r`` per line. A final empty
    line after the last newline does not become a row.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Document:
    """
    Owns the rows of one buffer.

    Attributes:
        rows (List[Row]): Rows in file order; index is the ``y`` coordinate.
        filename (Optional[str]): Target path for :meth:`save`; ``None`` until
            one is associated.
        file_type (FileType): Language profile derived from ``filename``.
        file_types (Optional[Sequence[FileType]]): Profiles consulted when the
            file type is (re-)derived; ``None`` means the built-ins.
    """

    def __init__(
            self,
            rows: Optional[List[Row]] = None,
            filename: Optional[str] = None,
            file_types: Optional[Sequence[FileType]] = None,
    ) -> None:
        self.rows: List[Row] = list(rows) if rows else []
        self.filename = filename
        self.file_types = file_types
        self.file_type = FileType.from_filename(filename, file_types)
        self.dirty = False
        self.highlight()

    @classmethod
    def open(cls, filename: str, file_types: Optional[Sequence[FileType]] = None) -> "Document":
        """
        Loads *filename* into a new, fully highlighted document.

        Raises:
            FileNotFoundError, PermissionError, IsADirectoryError, OSError:
                Propagated unchanged from the file system.
        """
        logger.debug(f"Opening '{filename}'")
        with open(filename, "rb") as fh:
            data = fh.read()
        rows = [Row(line) for line in split_lines(decode_text(data, filename))]
        document = cls(rows, filename=filename, file_types=file_types)
        logger.info(f"Opened '{filename}': {len(rows)} rows, file type {document.file_type.name}")
        return document

    def __len__(self) -> int:
        return len(self.rows)

    def is_empty(self) -> bool:
        return not self.rows

    def is_dirty(self) -> bool:
        return self.dirty

    def row(self, index: int) -> Optional[Row]:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None

    def file_type_name(self) -> str:
        return self.file_type.name

    def highlight(self, word: Optional[str] = None) -> None:
        """Re-highlights every row, overlaying matches of *word* when given."""
        for row in self.rows:
            row.highlight(self.file_type.options, word)

    def _highlight_row(self, row: Row) -> None:
        row.highlight(self.file_type.options)

    # ───────────── Editing ─────────────
    def insert(self, at: Position, ch: str) -> None:
        self.dirty = True
        if ch == "\n":
            self.insert_newline(at)
            return
        if at.y >= len(self.rows):
            row = Row()
            row.insert(0, ch)
            self._highlight_row(row)
            self.rows.append(row)
        else:
            row = self.rows[at.y]
            row.insert(at.x, ch)
            self._highlight_row(row)

    def insert_newline(self, at: Position) -> None:
        if at.y > len(self.rows):
            logger.debug(f"insert_newline ignored: row {at.y} beyond {len(self.rows)}")
            return
        self.dirty = True
        if at.y == len(self.rows):
            self.rows.append(Row())
            return
        current = self.rows[at.y]
        new_row = current.split(at.x)
        self._highlight_row(current)
        self._highlight_row(new_row)
        self.rows.insert(at.y + 1, new_row)

    def delete(self, at: Position) -> None:
        if at.y >= len(self.rows):
            logger.debug(f"delete ignored: row {at.y} beyond {len(self.rows)}")
            return
        self.dirty = True
        row = self.rows[at.y]
        if at.x == len(row) and at.y + 1 < len(self.rows):
            next_row = self.rows.pop(at.y + 1)
            row.append(next_row)
        else:
            row.delete(at.x)
        self._highlight_row(row)

    # ───────────── Search ─────────────
    def find(self, query: str, at: Position, direction: SearchDirection) -> Optional[Position]:
        """
        Searches row by row from *at*; never wraps past the first or last row.
        """
        if at.y >= len(self.rows):
            return None
        position = Position(at.x, at.y)
        if direction == SearchDirection.FORWARD:
            steps = len(self.rows) - at.y
        else:
            steps = at.y + 1

        for _ in range(steps):
            row = self.rows[position.y]
            x = row.find(query, position.x, direction)
            if x is not None:
                return Position(x, position.y)
            if direction == SearchDirection.FORWARD:
                position = Position(0, position.y + 1)
            else:
                if position.y == 0:
                    break
                position = Position(len(self.rows[position.y - 1]), position.y - 1)
        return None

    # ───────────── Persistence ─────────────
    def save(self) -> Optional[int]:
        """
        Writes every row followed by ``\\n`` to :attr:`filename` as UTF-8.

        The file type is re-derived from the filename (a save-as may change
        the language) and every row re-highlighted. The dirty flag is only
        cleared once everything was written.

        Returns:
            Optional[int]: Bytes written, or ``None`` when no filename is set.

        Raises:
            OSError: Propagated unchanged; a partially written file may remain.
        """
        if not self.filename:
            logger.debug("save skipped: no filename associated")
            return None

        written = 0
        with open(self.filename, "wb") as fh:
            for row in self.rows:
                written += fh.write(row.as_bytes())
                written += fh.write(b"\n")

        self.file_type = FileType.from_filename(self.filename, self.file_types)
        self.highlight()
        self.dirty = False
        logger.info(f"Saved '{self.filename}': {written} bytes, {len(self.rows)} rows")
        return written
