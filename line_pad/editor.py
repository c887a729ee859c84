#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
Curses front end: modal key handling, prompts, status bars and drawing.

The editor only translates keys into ``(Position, operation)`` calls on a
:class:`~line_pad.document.Document` and draws what the rows report back.
"""

import argparse
import curses
import locale
import logging
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, TextIO, Union

from . import __version__
from .config import load_config, setup_logging
from .document import Document, Position, describe_os_error
from .filetype import load_file_types
from .highlighting import DEFAULT_SCHEME, ColorScheme, HighlightType
from .row import Row, SearchDirection
from .units import display_width, graphemes

logger = logging.getLogger(__name__)
KEY_LOGGER = logging.getLogger("line_pad.keyevents")  # raw key-press trace

Key = Union[str, int]

CTRL_F = "\x06"
CTRL_Q = "\x11"
CTRL_S = "\x13"
ESC = "\x1b"
ENTER_KEYS = ("\n", "\r", curses.KEY_ENTER)
BACKSPACE_KEYS = ("\x7f", "\x08", curses.KEY_BACKSPACE)
MOVEMENT_KEYS = (
    curses.KEY_UP, curses.KEY_DOWN, curses.KEY_LEFT, curses.KEY_RIGHT,
    curses.KEY_PPAGE, curses.KEY_NPAGE, curses.KEY_HOME, curses.KEY_END,
)
NORMAL_MODE_MOVES = {
    "h": curses.KEY_LEFT,
    "j": curses.KEY_DOWN,
    "k": curses.KEY_UP,
    "l": curses.KEY_RIGHT,
}
HELP_MESSAGE = "[USAGE] i = insert | Esc = normal | Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"


class Mode(Enum):
    NORMAL = "Normal"
    INSERT = "Insert"


@dataclass
class StatusMessage:
    text: str
    time: float = field(default_factory=time.monotonic)


def load_color_scheme(config: Dict[str, Any]) -> ColorScheme:
    """Colour scheme from the ``[colors]`` table; invalid values fall back to the defaults."""
    try:
        return ColorScheme(config.get("colors"))
    except ValueError as exc:
        logger.error(f"Invalid [colors] configuration: {exc}. Using default colors.")
        return DEFAULT_SCHEME


def fit_to_width(text: str, cells: int) -> str:
    """Longest prefix of *text* (whole graphemes only) that fits in *cells*."""
    out = []
    used = 0
    for cluster in graphemes(text):
        width = display_width(cluster)
        if used + width > cells:
            break
        out.append(cluster)
        used += width
    return "".join(out)


class LinePadEditor:
    """
    Interactive editor state on top of one document.

    Attributes:
        stdscr (curses.window): Screen the editor draws on.
        config (dict): Merged configuration (see :func:`line_pad.config.load_config`).
        document (Document): The buffer being edited.
        cursor (Position): Cursor in document coordinates (grapheme units);
            ``cursor.y`` may equal the row count (the line after the last).
        offset (Position): First document row/grapheme shown on screen.
        mode (Mode): Normal (navigation) or Insert (typing).
        colors (Dict[HighlightType, int]): curses attribute per highlight tag.
    """

    def __init__(self, stdscr: "curses.window", config: Optional[Dict[str, Any]] = None) -> None:
        self.stdscr = stdscr
        self.config = config if config is not None else load_config()
        self.scheme = load_color_scheme(self.config)
        self.file_types = load_file_types(self.config)
        self.document = Document(file_types=self.file_types)
        self.cursor = Position()
        self.offset = Position()
        self.mode = Mode.NORMAL
        self.should_quit = False
        self.status = StatusMessage(HELP_MESSAGE)
        self.colors: Dict[HighlightType, int] = {tag: curses.A_NORMAL for tag in HighlightType}
        self.status_attr = curses.A_REVERSE
        self.filler_attr = curses.A_DIM

    # ───────────── State helpers ─────────────
    def set_status_message(self, text: str) -> None:
        self.status = StatusMessage(text)

    def text_area_size(self) -> tuple:
        """(rows, columns) available for document text; two lines go to the bars."""
        height, width = self.stdscr.getmaxyx()
        return max(1, height - 2), max(1, width)

    def open_file(self, filename: str) -> bool:
        """
        Loads *filename* into the editor.

        A missing file starts an empty buffer bound to that name so the first
        save creates it. Other failures leave an unnamed empty buffer. Either
        way the reason is shown in the message bar.

        Returns:
            bool: True when the file was read.
        """
        try:
            self.document = Document.open(filename, self.file_types)
        except FileNotFoundError:
            logger.info(f"'{filename}' does not exist yet, starting a new buffer")
            self.document = Document(filename=filename, file_types=self.file_types)
            self.set_status_message(f"New file: {filename}")
            return False
        except OSError as exc:
            logger.warning(f"Could not open '{filename}': {exc}")
            self.document = Document(file_types=self.file_types)
            self.set_status_message(f"ERROR: Could not open file: {filename} ({describe_os_error(exc)})")
            return False
        self.cursor = Position()
        self.offset = Position()
        return True

    # ───────────── Drawing ─────────────
    def init_colors(self) -> None:
        """Creates one curses colour pair per highlight tag from the colour scheme."""
        if not curses.has_colors():
            logger.warning("Terminal has no color support; highlighting disabled.")
            return
        curses.start_color()
        try:
            curses.use_default_colors()
            background = -1
        except curses.error:
            background = curses.COLOR_BLACK

        for pair_id, tag in enumerate(HighlightType, start=1):
            color = self.scheme.xterm_index(tag)
            if color >= curses.COLORS:
                # Hex colours need 256 colours; fall back to the terminal default.
                color = -1 if background == -1 else curses.COLOR_WHITE
            try:
                curses.init_pair(pair_id, color, background)
                self.colors[tag] = curses.color_pair(pair_id)
            except curses.error as exc:
                logger.error(f"Failed to initialize color for '{tag.value}': {exc}")
        logger.debug(f"Initialized {len(HighlightType)} color pairs ({curses.COLORS} colors)")

    def _addstr(self, y: int, x: int, text: str, attr: int = 0) -> None:
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error as exc:
            # Writing the bottom-right cell moves the cursor off screen and raises.
            logger.debug("addstr failed at (%d,%d): %s", y, x, exc)

    def draw_row(self, screen_y: int, row: Row, width: int) -> None:
        x = 0
        for text, tag in row.segments(self.offset.x, self.offset.x + width):
            visible = fit_to_width(text, width - x)
            if visible:
                self._addstr(screen_y, x, visible, self.colors[tag])
                x += display_width(visible)
            if len(visible) < len(text):
                break

    def draw_rows(self, height: int, width: int) -> None:
        for screen_y in range(height):
            row = self.document.row(self.offset.y + screen_y)
            if row is None:
                self._addstr(screen_y, 0, "~", self.filler_attr)
            else:
                self.draw_row(screen_y, row, width)

    def draw_status_bar(self, screen_y: int, width: int) -> None:
        filename = (self.document.filename or "[unnamed]")[:20]
        modified = " [modified]" if self.document.is_dirty() else ""
        status = f"{filename}:{self.cursor.y + 1}:{self.cursor.x + 1}{modified}"
        indicator = f"{self.document.file_type_name()} | {self.mode.value}"
        padding = max(0, width - len(status) - len(indicator))
        self._addstr(screen_y, 0, f"{status}{' ' * padding}{indicator}"[:width], self.status_attr)

    def draw_message_bar(self, screen_y: int, width: int) -> None:
        timeout = self.config.get("editor", {}).get("status_message_timeout", 5)
        if time.monotonic() - self.status.time < timeout:
            self._addstr(screen_y, 0, fit_to_width(self.status.text, width - 1))

    def draw(self) -> None:
        height, width = self.text_area_size()
        self.stdscr.erase()
        self.draw_rows(height, width)
        self.draw_status_bar(height, width)
        self.draw_message_bar(height + 1, width)

        row = self.document.row(self.cursor.y)
        cursor_x = row.display_width(self.offset.x, self.cursor.x) if row else 0
        try:
            self.stdscr.move(self.cursor.y - self.offset.y, min(cursor_x, width - 1))
        except curses.error as exc:
            logger.debug(f"Cursor move failed: {exc}")
        self.stdscr.refresh()

    # ───────────── Input ─────────────
    def read_key(self) -> Key:
        key = self.stdscr.get_wch()
        KEY_LOGGER.debug("key=%r mode=%s", key, self.mode.value)
        return key

    def prompt(self, message: str, callback: Optional[Callable[[Key, str], None]] = None) -> Optional[str]:
        """
        Reads a line of input in the message bar.

        *callback* runs after every key except Enter and Esc with the key and
        the input so far. Enter confirms, Esc cancels.

        Returns:
            The entered text, or None if cancelled or empty.
        """
        result = ""
        while True:
            self.set_status_message(f"{message}{result}")
            self.draw()
            key = self.read_key()
            if key in BACKSPACE_KEYS:
                result = result[:-1]
            elif key in ENTER_KEYS:
                break
            elif key == ESC:
                result = ""
                break
            elif isinstance(key, str) and key.isprintable():
                result += key
            if callback is not None:
                callback(key, result)
        self.set_status_message("")
        return result or None

    def save_file(self) -> None:
        if not self.document.filename:
            new_name = self.prompt("Save as: ")
            if new_name is None:
                self.set_status_message("Aborted save")
                return
            self.document.filename = new_name
        try:
            written = self.document.save()
        except OSError as exc:
            logger.error(f"Failed to save '{self.document.filename}': {exc}")
            self.set_status_message(f"Failed to save file: {describe_os_error(exc)}")
            return
        self.set_status_message(f"Saved {written} bytes to {self.document.filename}")

    def quit(self) -> None:
        confirm = self.config.get("editor", {}).get("quit_confirm", True)
        if not (self.document.is_dirty() and confirm):
            self.should_quit = True
            return
        answer = self.prompt("Confirm to quit without saving? [y/N] ")
        if answer is not None and answer.lower() in ("y", "yes"):
            self.should_quit = True
        else:
            self.set_status_message("Aborted quit")

    def search(self) -> None:
        """
        Incremental search. Right jumps to the next match, Left to the
        previous one, any other key searches forward from the cursor.
        Esc puts the cursor back where the search started.
        """
        saved_cursor = Position(self.cursor.x, self.cursor.y)
        direction = SearchDirection.FORWARD

        def on_key(key: Key, query: str) -> None:
            nonlocal direction
            moved = False
            if key == curses.KEY_RIGHT:
                direction = SearchDirection.FORWARD
                moved = True
                self.move_cursor(curses.KEY_RIGHT)
            elif key == curses.KEY_LEFT:
                direction = SearchDirection.BACKWARD
            else:
                direction = SearchDirection.FORWARD

            position = self.document.find(query, self.cursor, direction)
            if position is not None:
                self.cursor = position
                self.scroll()
            elif moved:
                self.move_cursor(curses.KEY_LEFT)
            self.document.highlight(query)

        query = self.prompt("Search (ESC = cancel, Left | Right = nav): ", on_key)
        if query is None:
            self.cursor = saved_cursor
            self.scroll()
        self.document.highlight(None)

    def handle_key(self, key: Key) -> None:
        if key == CTRL_Q:
            self.quit()
        elif key == CTRL_S:
            self.save_file()
        elif key == CTRL_F:
            self.search()
        elif key == ESC:
            self.mode = Mode.NORMAL
        elif key in ENTER_KEYS:
            if self.mode == Mode.INSERT:
                self.document.insert(self.cursor, "\n")
                self.move_cursor(curses.KEY_RIGHT)
        elif key == curses.KEY_DC:
            if self.mode == Mode.INSERT:
                self.document.delete(self.cursor)
        elif key in BACKSPACE_KEYS:
            if self.mode == Mode.INSERT and (self.cursor.x > 0 or self.cursor.y > 0):
                self.move_cursor(curses.KEY_LEFT)
                self.document.delete(self.cursor)
        elif key in MOVEMENT_KEYS:
            self.move_cursor(key)
        elif isinstance(key, str) and (key.isprintable() or key == "\t"):
            if self.mode == Mode.INSERT:
                before = self._row_width(self.cursor.y)
                self.document.insert(self.cursor, key)
                # A combining mark joins the previous grapheme; the cursor stays.
                if self._row_width(self.cursor.y) > before:
                    self.move_cursor(curses.KEY_RIGHT)
            elif key in NORMAL_MODE_MOVES:
                self.move_cursor(NORMAL_MODE_MOVES[key])
            elif key == "i":
                self.mode = Mode.INSERT
        self.scroll()

    def process_keypress(self) -> None:
        try:
            key = self.read_key()
        except curses.error:
            return
        if key == curses.KEY_RESIZE:
            return
        self.handle_key(key)

    # ───────────── Cursor ─────────────
    def _row_width(self, y: int) -> int:
        row = self.document.row(y)
        return len(row) if row is not None else 0

    def move_cursor(self, key: Key) -> None:
        x, y = self.cursor.x, self.cursor.y
        height = len(self.document)
        page = self.text_area_size()[0]
        width = self._row_width(y)

        if key == curses.KEY_UP:
            y = max(0, y - 1)
        elif key == curses.KEY_DOWN:
            if y < height:
                y += 1
        elif key == curses.KEY_LEFT:
            if x > 0:
                x -= 1
            elif y > 0:
                y -= 1
                x = self._row_width(y)
        elif key == curses.KEY_RIGHT:
            if x < width:
                x += 1
            else:
                if y < height:
                    y += 1
                x = 0
        elif key == curses.KEY_PPAGE:
            y = max(0, y - page)
        elif key == curses.KEY_NPAGE:
            y = min(y + page, height)
        elif key == curses.KEY_HOME:
            if x == 0:
                y = max(0, y - 1)
            x = 0
        elif key == curses.KEY_END:
            if x == width and y < height:
                y += 1
            x = self._row_width(y)

        self.cursor = Position(min(x, self._row_width(y)), y)

    def scroll(self) -> None:
        height, width = self.text_area_size()
        if self.cursor.y < self.offset.y:
            self.offset.y = self.cursor.y
        elif self.cursor.y >= self.offset.y + height:
            self.offset.y = self.cursor.y - height + 1
        if self.cursor.x < self.offset.x:
            self.offset.x = self.cursor.x
            return
        # Horizontal offset is in graphemes, the screen in cells.
        row = self.document.row(self.cursor.y)
        if row is None:
            return
        while self.offset.x < self.cursor.x and row.display_width(self.offset.x, self.cursor.x) >= width:
            self.offset.x += 1

    def run(self) -> None:
        """Main loop: draw, then handle one key, until quit is confirmed."""
        logger.info("Editor main loop started.")
        curses.raw()
        self.stdscr.keypad(True)
        self.init_colors()
        while True:
            self.scroll()
            self.draw()
            if self.should_quit:
                break
            self.process_keypress()
        logger.info("Editor main loop finished.")


def render_file(filename: str, config: Dict[str, Any], out: Optional[TextIO] = None) -> int:
    """
    Prints every row of *filename* with ANSI colour markers.

    Returns:
        int: Exit status, 1 if the file could not be read.
    """
    out = out or sys.stdout
    try:
        document = Document.open(filename, load_file_types(config))
    except OSError as exc:
        logger.error(f"--render failed for '{filename}': {exc}")
        print(f"line-pad: {filename}: {describe_os_error(exc)}", file=sys.stderr)
        return 1
    scheme = load_color_scheme(config)
    for row in document.rows:
        out.write(row.render(0, len(row), scheme) + "\n")
    return 0


def main_curses_function(stdscr: "curses.window", filename: Optional[str], config: Dict[str, Any]) -> None:
    editor = LinePadEditor(stdscr, config)
    if filename:
        logger.info(f"Opening file from command line: '{filename}'")
        editor.open_file(filename)
    editor.run()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="line-pad", description="Terminal line editor with syntax highlighting.")
    parser.add_argument("filename", nargs="?", help="file to edit")
    parser.add_argument("--config", help="path to a TOML configuration file")
    parser.add_argument("--render", action="store_true",
                        help="print FILE with syntax highlighting and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.render and not args.filename:
        parser.error("--render needs a FILE")

    config = load_config(args.config)
    setup_logging(config)

    if args.render:
        return render_file(args.filename, config)

    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as e_locale:
        logger.error(f"Failed to set system locale: {e_locale}. Character widths may be wrong.")

    logger.info("Line-Pad starting up...")
    curses.wrapper(main_curses_function, args.filename, config)
    logger.info("Line-Pad shut down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
