import unittest

from line_pad.filetype import (
    BUILTIN_FILETYPES,
    DEFAULT_FILETYPE,
    DEFAULT_FILETYPE_NAME,
    FileType,
    load_file_types,
)


class TestFileTypeDetection(unittest.TestCase):

    def test_builtin_extensions(self):
        cases = {
            "main.rs": "Rust",
            "src/lib.RS": "Rust",
            "x.c": "C",
            "x.h": "C",
            "x.cpp": "C++",
            "x.hpp": "C++",
            "app.js": "JavaScript",
            "main.go": "Go",
        }
        for filename, name in cases.items():
            self.assertEqual(FileType.from_filename(filename).name, name, filename)

    def test_unknown_or_missing_name_is_default(self):
        for filename in (None, "", "notes.txt", "Makefile", ".rs.bak"):
            file_type = FileType.from_filename(filename)
            self.assertIs(file_type, DEFAULT_FILETYPE)
            self.assertEqual(file_type.name, DEFAULT_FILETYPE_NAME)
            self.assertTrue(file_type.is_default)

    def test_default_highlights_nothing(self):
        options = DEFAULT_FILETYPE.options
        self.assertFalse(options.numbers or options.strings or options.characters or options.comments)
        self.assertEqual(options.primary_keywords, ())

    def test_javascript_has_no_character_literals(self):
        self.assertFalse(FileType.from_filename("a.js").options.characters)


class TestLoadFileTypes(unittest.TestCase):

    def test_no_config_returns_builtins(self):
        self.assertEqual(load_file_types(None), list(BUILTIN_FILETYPES))
        self.assertEqual(load_file_types({"filetypes": {}}), list(BUILTIN_FILETYPES))

    def test_override_builtin_keeps_unset_keys(self):
        file_types = load_file_types({"filetypes": {"rust": {"numbers": False}}})
        rust = FileType.from_filename("a.rs", file_types)
        self.assertEqual(rust.name, "Rust")
        self.assertFalse(rust.options.numbers)
        self.assertTrue(rust.options.strings)
        self.assertIn("fn", rust.options.primary_keywords)

    def test_add_new_profile(self):
        file_types = load_file_types({"filetypes": {"zig": {
            "name": "Zig",
            "extensions": ["zig", ".ZON"],
            "comments": True,
            "primary_keywords": ["fn", "const"],
        }}})
        zig = FileType.from_filename("build.zig", file_types)
        self.assertEqual(zig.name, "Zig")
        self.assertEqual(zig.extensions, (".zig", ".zon"))
        self.assertTrue(zig.options.comments)
        self.assertFalse(zig.options.numbers)
        self.assertEqual(zig.options.primary_keywords, ("fn", "const"))
        self.assertEqual(FileType.from_filename("build.zon", file_types).name, "Zig")

    def test_non_boolean_flags_are_ignored(self):
        file_types = load_file_types({"filetypes": {"rust": {
            "numbers": "false",
            "comments": False,
            "primary_keywords": "fn",
            "extensions": "rs",
        }}})
        rust = FileType.from_filename("a.rs", file_types)
        self.assertTrue(rust.options.numbers)
        self.assertFalse(rust.options.comments)
        self.assertIn("let", rust.options.primary_keywords)
        self.assertEqual(rust.extensions, (".rs",))

    def test_malformed_tables_are_ignored(self):
        self.assertEqual(load_file_types({"filetypes": 3}), list(BUILTIN_FILETYPES))
        self.assertEqual(load_file_types({"filetypes": {"zig": "nope"}}), list(BUILTIN_FILETYPES))


if __name__ == '__main__':
    unittest.main()
