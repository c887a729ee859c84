# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
Configuration loading (TOML) and logging setup.
"""

import copy
import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Dict, Optional

import toml

from .highlighting import DEFAULT_COLORS

CONFIG_FILENAME = "line-pad.toml"
USER_CONFIG_PATH = os.path.join("~", ".config", "line-pad", "config.toml")
KEYTRACE_ENV = "LINE_PAD_KEYTRACE"

DEFAULT_CONFIG: Dict[str, Any] = {
    "colors": dict(DEFAULT_COLORS),
    "editor": {
        "status_message_timeout": 5,
        "quit_confirm": True,
    },
    "logging": {
        "file": "line-pad.log",
        "file_level": "DEBUG",
        "console_level": "WARNING",
        # The terminal belongs to curses while the editor runs.
        "log_to_console": False,
    },
    "filetypes": {},
}

logger = logging.getLogger(__name__)


def deep_merge(base: Dict[Any, Any], override: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Returns a copy of *base* with *override* layered on top.

    Nested tables are merged key by key; any other value in *override*
    (including a table replacing a scalar) wins outright. Neither argument
    is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            value = deep_merge(merged[key], value)
        merged[key] = value
    return merged


def find_config_file(path: Optional[str] = None) -> Optional[str]:
    """Explicit *path* first, then ``./line-pad.toml``, then the per-user file."""
    if path:
        return path
    for candidate in (CONFIG_FILENAME, os.path.expanduser(USER_CONFIG_PATH)):
        if os.path.isfile(candidate):
            return candidate
    return None


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads and merges the application configuration from a TOML file, applying safe defaults.

    Two tiers are layered:
    1. Hard-coded defaults so the editor can start in any environment.
    2. User settings from *path*, ``./line-pad.toml`` or
       ``~/.config/line-pad/config.toml`` (first one found), overriding only
       the keys they set.

    Missing files, TOML syntax errors and I/O errors are logged and resolved
    by falling back to the defaults, so the function never raises.

    Args:
        path (Optional[str]): Explicit configuration file.

    Returns:
        dict: The fully merged configuration dictionary.

    Example:
        >>> config = load_config()
        >>> config["editor"]["status_message_timeout"]
        5
    """
    defaults = copy.deepcopy(DEFAULT_CONFIG)
    config_path = find_config_file(path)
    if config_path is None:
        logger.debug("No configuration file found, using defaults.")
        return defaults

    user_config: Dict[str, Any] = {}
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            user_config = toml.loads(fh.read())
        logger.debug("Loaded user config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults.", config_path)
    except toml.TomlDecodeError as exc:
        logger.error("TOML parse error in %s: %s, using defaults.", config_path, exc)
    except OSError as exc:
        logger.error("Could not read %s: %s, using defaults.", config_path, exc)

    final_config = deep_merge(defaults, user_config)
    for section, default_val in defaults.items():
        if not isinstance(final_config.get(section), type(default_val)):
            logger.warning("Config section [%s] has the wrong type, using defaults for it.", section)
            final_config[section] = default_val
    return final_config


def setup_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Configures application-wide logging handlers and log levels.

    Up to three independent handlers are installed:

    1. **File handler** – rotating log file (``[logging] file``, default
       *line-pad.log*) capturing everything from ``file_level`` upward.
    2. **Console handler** – optional ``stderr`` output at
       ``console_level``; off by default because curses owns the terminal.
    3. **Key-event handler** – rotating *keytrace.log* attached to the
       ``line_pad.keyevents`` logger, enabled only when the environment
       variable ``LINE_PAD_KEYTRACE`` is ``1/true/yes``.

    Existing handlers on the root logger are replaced so repeated calls (for
    example from tests) do not duplicate records.

    Notes:
        The function never raises; I/O or permission errors are reported to
        *stderr* and logging continues with whatever could be set up.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_filename = logging_config.get("file", "line-pad.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    log_dir = os.path.dirname(log_filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            log_filename = os.path.join(tempfile.gettempdir(), "line-pad.log")
            print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-20s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding='utf-8'
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except OSError as e_fh:
        print(f"Error setting up file logger for '{log_filename}': {e_fh}. File logging disabled.",
              file=sys.stderr)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-20s - %(message)s"))
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    root_logger.setLevel(log_file_level)

    # --- Key Event Logger ---
    key_event_logger = logging.getLogger("line_pad.keyevents")
    key_event_logger.propagate = False
    key_event_logger.setLevel(logging.DEBUG)
    for handler in key_event_logger.handlers[:]:
        key_event_logger.removeHandler(handler)
        handler.close()

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        try:
            key_trace_handler = logging.handlers.RotatingFileHandler(
                "keytrace.log", maxBytes=1 * 1024 * 1024, backupCount=3, encoding='utf-8'
            )
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            key_event_logger.addHandler(key_trace_handler)
            key_event_logger.disabled = False
            logger.info("Key event tracing enabled, logging to 'keytrace.log'.")
        except OSError as e_keytrace:
            logger.error(f"Failed to set up key trace logging: {e_keytrace}")
            key_event_logger.disabled = True
    else:
        key_event_logger.addHandler(logging.NullHandler())
        key_event_logger.disabled = True

    logger.info("Logging setup complete. Root logger level: %s.", logging.getLevelName(root_logger.level))
