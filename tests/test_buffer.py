import os
import tempfile
import unittest
from unittest.mock import MagicMock

from sway_buffer.buffer import Buffer, StatusInfo, StatusMessage, VisibleRow
from sway_buffer.config import EditorSettings, static_settings_provider
from sway_buffer.cursor import Direction
from sway_buffer.document import Document
from sway_buffer.syntax import NORMAL, SEARCH_MATCH, Syntax, keyword


class TestStatusMessage(unittest.TestCase):

    def test_expires_after_five_seconds(self):
        now = [100.0]
        message = StatusMessage("saved", clock=lambda: now[0])
        now[0] = 104.5
        self.assertEqual(message.get(), "saved")
        now[0] = 105.5
        self.assertIsNone(message.get())
        self.assertIsNone(message.get())

    def test_empty(self):
        self.assertIsNone(StatusMessage().get())


class TestBufferEditing(unittest.TestCase):

    def setUp(self):
        self.buffer = Buffer()

    def type_text(self, text):
        for char in text:
            if char == "\n":
                self.buffer.insert_newline()
            else:
                self.buffer.insert_char(char)

    def test_typing(self):
        self.type_text("hi\nthere")
        self.assertEqual(self.buffer.document.lines(), ["hi", "there"])
        self.assertEqual(self.buffer.cursor.position, (5, 1))
        self.assertEqual(self.buffer.dirty, 8)

    def test_backspace(self):
        self.type_text("ab\nc")
        self.buffer.delete_char()
        self.buffer.delete_char()
        self.assertEqual(self.buffer.document.lines(), ["ab"])
        self.assertEqual(self.buffer.cursor.position, (2, 0))

    def test_backspace_at_origin_leaves_buffer_clean(self):
        self.buffer.delete_char()
        self.assertEqual(self.buffer.dirty, 0)

    def test_soft_tab(self):
        self.buffer.insert_tab()
        self.assertEqual(self.buffer.document.lines(), ["    "])
        self.assertEqual(self.buffer.cursor.position, (4, 0))

    def test_hard_tab(self):
        buffer = Buffer(settings_provider=static_settings_provider(EditorSettings(soft_tabs=False)))
        buffer.insert_tab()
        self.assertEqual(buffer.document.lines(), ["\t"])
        self.assertEqual(buffer.document.rows[0].render, "»   ")
        self.assertEqual(buffer.cursor.position, (1, 0))

    def test_settings_are_read_live(self):
        current = [EditorSettings(soft_tabs=False, tab_width=4)]
        buffer = Buffer(settings_provider=lambda: current[0])
        buffer.insert_tab()
        self.assertEqual(buffer.document.rows[0].render, "»   ")

        current[0] = EditorSettings(soft_tabs=False, tab_width=2)
        buffer.insert_char("x")
        self.assertEqual(buffer.document.rows[0].render, "» x")

    def test_tab_change_rerenders_unedited_rows(self):
        current = [EditorSettings(tab_width=8)]
        doc = Document.from_lines(["\tfoo", "other"], current[0])
        buffer = Buffer(doc, settings_provider=lambda: current[0])
        row = doc.rows[0]
        self.assertEqual(row.render, "»       foo")

        current[0] = EditorSettings(tab_width=2)
        buffer.cursor.set_position(1, 0, doc)
        buffer.scroll()
        self.assertEqual(row.render, "» foo")
        self.assertEqual(buffer.cursor.render_width, 2)
        self.assertEqual(row.render[buffer.cursor.render_width], "f")

        buffer.find("foo")
        self.assertEqual(row.highlight, [NORMAL, NORMAL] + [SEARCH_MATCH] * 3)
        self.assertEqual(doc.rows[1].highlight, [NORMAL] * 5)

    def test_tab_change_during_search(self):
        current = [EditorSettings(tab_width=8)]
        doc = Document.from_lines(["\tfoo"], current[0])
        buffer = Buffer(doc, settings_provider=lambda: current[0])
        buffer.find("foo")
        self.assertEqual(len(doc.rows[0].highlight), 11)

        current[0] = EditorSettings(tab_width=2, tab_char=">")
        buffer.find("foo")
        self.assertEqual(doc.rows[0].render, "> foo")
        self.assertEqual(doc.rows[0].highlight, [NORMAL, NORMAL] + [SEARCH_MATCH] * 3)

        buffer.cancel_search()
        self.assertEqual(doc.rows[0].highlight, [NORMAL] * 5)

    def test_tab_char_change_shows_in_visible_rows(self):
        current = [EditorSettings()]
        doc = Document.from_lines(["\tx"], current[0])
        buffer = Buffer(doc, settings_provider=lambda: current[0])
        current[0] = EditorSettings(tab_char="|")
        self.assertEqual(buffer.visible_rows()[0].render, "|   x")

    def test_provider_called_per_edit(self):
        provider = MagicMock(return_value=EditorSettings())
        buffer = Buffer(settings_provider=provider)
        buffer.insert_char("a")
        buffer.insert_char("b")
        self.assertGreaterEqual(provider.call_count, 2)

    def test_move_cursor(self):
        self.type_text("ab")
        self.assertTrue(self.buffer.move_cursor(Direction.LEFT))
        self.assertEqual(self.buffer.cursor.position, (1, 0))

    def test_edit_during_search_ends_it(self):
        self.type_text("foo")
        self.buffer.find("foo")
        self.assertEqual(self.buffer.document.rows[0].highlight[0], SEARCH_MATCH)
        self.buffer.insert_char("x")
        self.assertFalse(self.buffer.search.active)
        row = self.buffer.document.rows[0]
        self.assertEqual(row.content, "xfoo")
        self.assertNotIn(SEARCH_MATCH, row.highlight)

    def test_search_cancel(self):
        self.type_text("foo bar foo")
        self.buffer.find("foo", Direction.DOWN)
        self.assertEqual(self.buffer.cursor.position, (8, 0))
        self.buffer.cancel_search()
        self.assertEqual(self.buffer.cursor.position, (11, 0))

    def test_search_commit(self):
        self.type_text("foo bar foo")
        self.buffer.find("bar")
        self.buffer.commit_search()
        self.assertEqual(self.buffer.cursor.position, (4, 0))
        self.assertNotIn(SEARCH_MATCH, self.buffer.document.rows[0].highlight)


class TestBufferView(unittest.TestCase):

    def test_visible_rows_are_windowed(self):
        doc = Document.from_lines(["abcdefghijklmnop", "x", "y"], EditorSettings())
        buffer = Buffer(doc, term_size=(12, 2))
        buffer.scroll()
        rows = buffer.visible_rows()
        self.assertEqual(rows, [
            VisibleRow(1, "abcdefg", rows[0].highlight),
            VisibleRow(2, "x", rows[1].highlight),
        ])
        for row in rows:
            self.assertEqual(len(row.render), len(row.highlight))

    def test_visible_rows_follow_cursor(self):
        doc = Document.from_lines(["abcdefghijklmnop", "x", "y"], EditorSettings())
        buffer = Buffer(doc, term_size=(12, 2))
        buffer.cursor.set_position(0, 2, doc)
        buffer.scroll()
        self.assertEqual([row.line_number for row in buffer.visible_rows()], [2, 3])
        self.assertEqual(buffer.cursor_position(), (5, 1))

    def test_default_viewport(self):
        self.assertEqual(Buffer().cursor.term_size, (80, 24))

    def test_status(self):
        self.assertEqual(Buffer().status(), StatusInfo("no name", False, "no ft", 1, 1))


class TestBufferFiles(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def test_open_existing_file(self):
        with open(self.path("main.rs"), "w", encoding="utf-8") as fh:
            fh.write("fn main() {}\n")
        buffer = Buffer.open(self.path("main.rs"))
        self.assertEqual(buffer.document.lines(), ["fn main() {}"])
        self.assertEqual(buffer.status(), StatusInfo("main.rs", False, "rust", 1, 1))

    def test_open_takes_viewport_from_config(self):
        config_path = self.path("config.toml")
        with open(config_path, "w", encoding="utf-8") as fh:
            fh.write("[viewport]\ncols = 100\nrows = 30\n")
        buffer = Buffer.open(self.path("new.txt"), config_path=config_path)
        self.assertEqual(buffer.cursor.term_size, (100, 30))

    def test_explicit_term_size_wins(self):
        buffer = Buffer.open(self.path("new.txt"), term_size=(40, 10))
        self.assertEqual(buffer.cursor.term_size, (40, 10))

    def test_open_missing_file_starts_new_file(self):
        buffer = Buffer.open(self.path("new.py"))
        self.assertEqual(buffer.document.num_rows(), 0)
        self.assertEqual(buffer.document.filepath, self.path("new.py"))
        self.assertIs(buffer.document.syntax, Syntax.PYTHON)
        self.assertIn("New file", buffer.message.get())

    def test_failed_load_leaves_buffer_unchanged(self):
        buffer = Buffer()
        buffer.insert_char("a")
        document = buffer.document
        self.assertFalse(buffer.load(self.tmpdir.name))
        self.assertIs(buffer.document, document)
        self.assertEqual(buffer.dirty, 1)
        self.assertTrue(buffer.message.get().startswith("Error opening"))

    def test_write_without_path_reports_error(self):
        buffer = Buffer()
        buffer.insert_char("a")
        self.assertIsNone(buffer.write())
        self.assertIn("Can't save", buffer.message.get())
        self.assertEqual(buffer.dirty, 1)

    def test_write_under_new_name_resolves_syntax(self):
        buffer = Buffer()
        for char in "fn x":
            buffer.insert_char(char)
        target = self.path("x.rs")

        self.assertEqual(buffer.write(target), 4)
        self.assertEqual(buffer.dirty, 0)
        self.assertEqual(buffer.message.get(), f"4 bytes written to {target}")
        self.assertIs(buffer.document.syntax, Syntax.RUST)
        self.assertEqual(buffer.document.rows[0].highlight[:2], [keyword("blue")] * 2)
        with open(target, encoding="utf-8") as fh:
            self.assertEqual(fh.read(), "fn x")

    def test_write_failure_keeps_dirty(self):
        buffer = Buffer()
        buffer.insert_char("a")
        self.assertIsNone(buffer.write(self.path("missing_dir/out.txt")))
        self.assertEqual(buffer.dirty, 1)


if __name__ == '__main__':
    unittest.main()
