# -*- coding: utf-8 -*-
# Line-Pad is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
"""
Language profiles: which token kinds are highlighted and which keyword
lists apply, selected by the filename extension.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_FILETYPE_NAME = "No filetype"


@dataclass(frozen=True)
class HighlightingOptions:
    numbers: bool = False
    strings: bool = False
    characters: bool = False
    comments: bool = False
    primary_keywords: Tuple[str, ...] = ()
    secondary_keywords: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileType:
    """A named language profile and the extensions that select it."""

    name: str = DEFAULT_FILETYPE_NAME
    extensions: Tuple[str, ...] = ()
    options: HighlightingOptions = field(default_factory=HighlightingOptions)

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_FILETYPE_NAME

    def matches(self, filename: str) -> bool:
        ext = os.path.splitext(filename)[1].lower()
        return bool(ext) and ext in self.extensions

    @classmethod
    def from_filename(
            cls,
            filename: Optional[str],
            file_types: Optional[Sequence["FileType"]] = None
    ) -> "FileType":
        """
        Returns the first profile listing the extension of *filename*, or the
        default profile (nothing highlighted) when none does.
        """
        if not filename:
            return DEFAULT_FILETYPE
        for file_type in BUILTIN_FILETYPES if file_types is None else file_types:
            if file_type.matches(filename):
                logger.debug(f"File type for '{filename}': {file_type.name}")
                return file_type
        logger.debug(f"No file type registered for '{filename}'")
        return DEFAULT_FILETYPE


DEFAULT_FILETYPE = FileType()

C_PRIMARY_KEYWORDS = (
    "auto", "break", "case", "continue", "default", "do", "else", "enum",
    "extern", "for", "goto", "if", "register", "return", "sizeof", "static",
    "struct", "switch", "typedef", "union", "volatile", "while", "NULL",
)
C_SECONDARY_KEYWORDS = (
    "int", "long", "double", "float", "char", "unsigned", "signed", "void",
    "short", "const", "bool",
)
CPP_PRIMARY_KEYWORDS = C_PRIMARY_KEYWORDS + (
    "alignas", "alignof", "and", "and_eq", "asm", "bitand", "bitor", "class",
    "compl", "constexpr", "const_cast", "decltype", "delete", "dynamic_cast",
    "explicit", "export", "false", "friend", "inline", "mutable", "namespace",
    "new", "noexcept", "not", "not_eq", "nullptr", "operator", "or", "or_eq",
    "private", "protected", "public", "reinterpret_cast", "static_assert",
    "static_cast", "template", "this", "thread_local", "throw", "true", "try",
    "typeid", "typename", "virtual", "xor", "xor_eq",
)

BUILTIN_FILETYPES: Tuple[FileType, ...] = (
    FileType(
        name="Rust",
        extensions=(".rs",),
        options=HighlightingOptions(
            numbers=True,
            strings=True,
            characters=True,
            comments=True,
            primary_keywords=(
                "as", "break", "const", "continue", "crate", "else", "enum",
                "extern", "false", "fn", "for", "if", "impl", "in", "let",
                "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
                "self", "Self", "static", "struct", "super", "trait", "true",
                "type", "unsafe", "use", "where", "while", "dyn", "abstract",
                "become", "box", "do", "final", "macro", "override", "priv",
                "typeof", "unsized", "virtual", "yield", "async", "await", "try",
            ),
            secondary_keywords=(
                "bool", "char", "i8", "i16", "i32", "i64", "isize", "u8", "u16",
                "u32", "u64", "usize", "f32", "f64",
            ),
        ),
    ),
    FileType(
        name="C",
        extensions=(".c", ".h"),
        options=HighlightingOptions(
            numbers=True,
            strings=True,
            characters=True,
            comments=True,
            primary_keywords=C_PRIMARY_KEYWORDS,
            secondary_keywords=C_SECONDARY_KEYWORDS,
        ),
    ),
    FileType(
        name="C++",
        extensions=(".cpp", ".cc", ".cxx", ".hpp", ".hh"),
        options=HighlightingOptions(
            numbers=True,
            strings=True,
            characters=True,
            comments=True,
            primary_keywords=CPP_PRIMARY_KEYWORDS,
            secondary_keywords=C_SECONDARY_KEYWORDS,
        ),
    ),
    FileType(
        name="JavaScript",
        extensions=(".js", ".mjs", ".cjs", ".jsx"),
        options=HighlightingOptions(
            numbers=True,
            strings=True,
            comments=True,
            primary_keywords=(
                "break", "case", "catch", "class", "const", "continue",
                "debugger", "default", "delete", "do", "else", "export",
                "extends", "finally", "for", "function", "if", "import", "in",
                "instanceof", "let", "new", "of", "return", "static", "super",
                "switch", "this", "throw", "try", "typeof", "var", "void",
                "while", "with", "yield", "async", "await",
            ),
            secondary_keywords=("true", "false", "null", "undefined", "NaN", "Infinity"),
        ),
    ),
    FileType(
        name="Go",
        extensions=(".go",),
        options=HighlightingOptions(
            numbers=True,
            strings=True,
            characters=True,
            comments=True,
            primary_keywords=(
                "break", "case", "chan", "const", "continue", "default", "defer",
                "else", "fallthrough", "for", "func", "go", "goto", "if",
                "import", "interface", "map", "package", "range", "return",
                "select", "struct", "switch", "type", "var",
            ),
            secondary_keywords=(
                "bool", "byte", "complex64", "complex128", "error", "float32",
                "float64", "int", "int8", "int16", "int32", "int64", "rune",
                "string", "uint", "uint8", "uint16", "uint32", "uint64",
                "uintptr", "true", "false", "nil", "iota",
            ),
        ),
    ),
)


def _normalize_extension(ext: str) -> str:
    ext = str(ext).strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _file_type_from_table(key: str, table: Dict[str, Any], base: Optional[FileType]) -> FileType:
    """Builds a profile from one ``[filetypes.<key>]`` table, layered over *base*."""
    base = base or FileType(name=key)
    options = base.options
    option_updates: Dict[str, Any] = {}
    for flag in ("numbers", "strings", "characters", "comments"):
        if flag not in table:
            continue
        if not isinstance(table[flag], bool):
            logger.warning("Ignoring [filetypes.%s] %s = %r: expected true or false", key, flag, table[flag])
            continue
        option_updates[flag] = table[flag]
    for kind in ("primary_keywords", "secondary_keywords"):
        if kind not in table:
            continue
        if not isinstance(table[kind], list):
            logger.warning("Ignoring [filetypes.%s] %s: expected a list of words", key, kind)
            continue
        option_updates[kind] = tuple(str(word) for word in table[kind] if word)
    if option_updates:
        options = replace(options, **option_updates)

    extensions = base.extensions
    if isinstance(table.get("extensions"), list):
        extensions = tuple(_normalize_extension(ext) for ext in table["extensions"])
    elif "extensions" in table:
        logger.warning("Ignoring [filetypes.%s] extensions: expected a list", key)

    return FileType(name=str(table.get("name", base.name)), extensions=extensions, options=options)


def load_file_types(config: Optional[Dict[str, Any]] = None) -> List[FileType]:
    """
    Returns the built-in profiles overridden and extended by the
    ``[filetypes]`` section of *config*.

    A table whose key names a built-in profile (case-insensitive) only
    replaces the keys it sets; any other key adds a new profile. User
    profiles are consulted after the built-ins they do not override.
    """
    file_types = list(BUILTIN_FILETYPES)
    tables = (config or {}).get("filetypes", {})
    if not isinstance(tables, dict):
        logger.warning("Ignoring [filetypes]: expected a table, got %s", type(tables).__name__)
        return file_types

    by_name = {file_type.name.lower(): i for i, file_type in enumerate(file_types)}
    for key, table in tables.items():
        if not isinstance(table, dict):
            logger.warning("Ignoring [filetypes.%s]: expected a table", key)
            continue
        existing = by_name.get(key.lower())
        if existing is not None:
            file_types[existing] = _file_type_from_table(key, table, file_types[existing])
            logger.debug(f"Overrode built-in file type '{file_types[existing].name}' from config")
        else:
            file_types.append(_file_type_from_table(key, table, None))
            by_name[key.lower()] = len(file_types) - 1
            logger.debug(f"Registered file type '{file_types[-1].name}' from config")
    return file_types
