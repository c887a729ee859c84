import errno
import os
import shutil
import tempfile
import unittest

from line_pad.document import Document, Position, decode_text, describe_os_error, split_lines
from line_pad.highlighting import HighlightType
from line_pad.row import Row, SearchDirection


def make_document(*lines, filename=None):
    return Document([Row(line) for line in lines], filename=filename)


def contents(document):
    return [row.content for row in document.rows]


class TestDocumentEditing(unittest.TestCase):

    def test_new_document_is_clean(self):
        document = make_document("a")
        self.assertFalse(document.is_dirty())
        self.assertEqual(document.file_type_name(), "No filetype")
        self.assertTrue(Document().is_empty())

    def test_insert_character(self):
        document = make_document("ac")
        document.insert(Position(1, 0), "b")
        self.assertEqual(contents(document), ["abc"])
        self.assertTrue(document.is_dirty())

    def test_insert_past_last_row_appends_row(self):
        document = make_document("a")
        document.insert(Position(0, 1), "b")
        self.assertEqual(contents(document), ["a", "b"])

    def test_insert_newline_splits_row(self):
        document = make_document("hello")
        document.insert(Position(2, 0), "\n")
        self.assertEqual(contents(document), ["he", "llo"])
        self.assertEqual(len(document.rows[1].highlighting), 3)

    def test_insert_newline_at_start_and_end(self):
        document = make_document("hello")
        document.insert(Position(0, 0), "\n")
        self.assertEqual(contents(document), ["", "hello"])
        document.insert(Position(0, 2), "\n")
        self.assertEqual(contents(document), ["", "hello", ""])

    def test_insert_newline_far_past_end_is_ignored(self):
        document = make_document("a")
        document.insert_newline(Position(0, 5))
        self.assertEqual(contents(document), ["a"])
        self.assertFalse(document.is_dirty())

    def test_delete_at_row_end_merges_next_row(self):
        document = make_document("foo", "bar")
        document.delete(Position(3, 0))
        self.assertEqual(contents(document), ["foobar"])
        self.assertTrue(document.is_dirty())

    def test_delete_character(self):
        document = make_document("abc")
        document.delete(Position(1, 0))
        self.assertEqual(contents(document), ["ac"])

    def test_delete_at_end_of_last_row_changes_nothing(self):
        document = make_document("abc")
        document.delete(Position(3, 0))
        self.assertEqual(contents(document), ["abc"])

    def test_delete_out_of_range_is_ignored(self):
        document = make_document("abc")
        document.delete(Position(0, 4))
        self.assertEqual(contents(document), ["abc"])
        self.assertFalse(document.is_dirty())

    def test_edits_rehighlight_rows(self):
        document = make_document("x", filename="main.rs")
        document.insert(Position(1, 0), " ")
        document.insert(Position(2, 0), "7")
        self.assertEqual(document.rows[0].highlighting[2], HighlightType.NUMBER)

    def test_row_lookup(self):
        document = make_document("a", "b")
        self.assertEqual(document.row(1).content, "b")
        self.assertIsNone(document.row(2))
        self.assertIsNone(document.row(-1))


class TestDocumentFind(unittest.TestCase):

    def setUp(self):
        self.document = make_document("abc", "xyz", "abc")

    def test_forward_crosses_rows(self):
        found = self.document.find("abc", Position(1, 0), SearchDirection.FORWARD)
        self.assertEqual(found, Position(0, 2))

    def test_backward_crosses_rows(self):
        found = self.document.find("abc", Position(0, 2), SearchDirection.BACKWARD)
        self.assertEqual(found, Position(0, 0))

    def test_search_does_not_wrap(self):
        self.assertIsNone(self.document.find("xyz", Position(1, 1), SearchDirection.FORWARD))
        self.assertIsNone(self.document.find("abc", Position(0, 0), SearchDirection.BACKWARD))

    def test_start_past_last_row(self):
        self.assertIsNone(self.document.find("abc", Position(0, 3), SearchDirection.FORWARD))

    def test_highlight_marks_matches(self):
        self.document.highlight("y")
        self.assertEqual(self.document.rows[1].highlighting[1], HighlightType.MATCH)
        self.document.highlight()
        self.assertNotIn(HighlightType.MATCH, self.document.rows[1].highlighting)


class TestDocumentFiles(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def path(self, name):
        return os.path.join(self.temp_dir, name)

    def test_save_and_open_round_trip(self):
        filename = self.path("notes.txt")
        document = make_document("a", "", "b", filename=filename)
        document.dirty = True
        self.assertEqual(document.save(), 5)
        self.assertFalse(document.is_dirty())
        with open(filename, "rb") as fh:
            self.assertEqual(fh.read(), b"a\n\nb\n")

        reopened = Document.open(filename)
        self.assertEqual(contents(reopened), ["a", "", "b"])
        self.assertFalse(reopened.is_dirty())
        self.assertEqual(reopened.filename, filename)

    def test_save_writes_utf8(self):
        filename = self.path("unicode.txt")
        make_document("日本", filename=filename).save()
        with open(filename, "rb") as fh:
            self.assertEqual(fh.read(), "日本\n".encode("utf-8"))

    def test_save_without_filename(self):
        document = make_document("a")
        document.insert(Position(1, 0), "b")
        self.assertIsNone(document.save())
        self.assertTrue(document.is_dirty())

    def test_save_as_rederives_file_type(self):
        document = make_document("let x = 1;", filename=self.path("a.txt"))
        self.assertEqual(document.file_type_name(), "No filetype")
        document.filename = self.path("a.rs")
        document.save()
        self.assertEqual(document.file_type_name(), "Rust")
        self.assertEqual(document.rows[0].highlighting[0], HighlightType.PRIMARY_KEYWORD)

    def test_failed_save_keeps_dirty_flag(self):
        document = make_document("a", filename=self.temp_dir)
        document.dirty = True
        with self.assertRaises(OSError):
            document.save()
        self.assertTrue(document.is_dirty())

    def test_open_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            Document.open(self.path("missing.rs"))

    def test_open_directory(self):
        with self.assertRaises(IsADirectoryError):
            Document.open(self.temp_dir)

    def test_open_detects_file_type_and_highlights(self):
        filename = self.path("main.go")
        with open(filename, "w", encoding="utf-8") as fh:
            fh.write("func main() {\n}\n")
        document = Document.open(filename)
        self.assertEqual(document.file_type_name(), "Go")
        self.assertEqual(document.rows[0].highlighting[:4], [HighlightType.PRIMARY_KEYWORD] * 4)

    def test_open_crlf_and_empty_files(self):
        crlf = self.path("crlf.txt")
        with open(crlf, "wb") as fh:
            fh.write(b"a\r\nb\r\n")
        self.assertEqual(contents(Document.open(crlf)), ["a", "b"])

        empty = self.path("empty.txt")
        open(empty, "wb").close()
        self.assertTrue(Document.open(empty).is_empty())

    def test_open_non_utf8_file(self):
        filename = self.path("latin1.txt")
        with open(filename, "wb") as fh:
            fh.write("café au lait, très bien, déjà vu\n".encode("latin-1"))
        document = Document.open(filename)
        self.assertEqual(len(document), 1)
        self.assertTrue(document.rows[0].content.startswith("caf"))


class TestHelpers(unittest.TestCase):

    def test_split_lines(self):
        self.assertEqual(split_lines(""), [])
        self.assertEqual(split_lines("a"), ["a"])
        self.assertEqual(split_lines("a\n"), ["a"])
        self.assertEqual(split_lines("a\n\n"), ["a", ""])
        self.assertEqual(split_lines("a\r\nb"), ["a", "b"])

    def test_decode_text(self):
        self.assertEqual(decode_text("日本".encode("utf-8")), "日本")
        self.assertIsInstance(decode_text(b"\xff\xfe bad bytes \xe9"), str)

    def test_describe_os_error(self):
        self.assertEqual(
            describe_os_error(FileNotFoundError(errno.ENOENT, "No such file or directory")),
            "not found: No such file or directory",
        )
        self.assertEqual(
            describe_os_error(PermissionError(errno.EACCES, "Permission denied")),
            "permission denied",
        )
        self.assertEqual(
            describe_os_error(OSError(errno.EIO, "Input/output error")),
            "I/O error: Input/output error",
        )


if __name__ == '__main__':
    unittest.main()
