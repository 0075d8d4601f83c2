# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
The document: an ordered list of rows with an optional backing file.

Structural edits take logical cursor coordinates, clamp them to the document,
re-render the touched rows and reclassify them through
:func:`sway_buffer.syntax.update_syntax`. Each edit returns the cursor
position the caller should move to.
"""

import logging
import os
from typing import List, Optional, Tuple

import chardet

from .config import EditorSettings
from .errors import NoFilePathError
from .rows import Row, new_row, render_row
from .syntax import Syntax, highlight_all, update_syntax

logger = logging.getLogger(__name__)

OPENING_BRACKETS = ("[", "{", "(")
CHARDET_SAMPLE_SIZE = 20 * 1024
CHARDET_MIN_CONFIDENCE = 0.75


def _decode(raw: bytes, filename: str) -> Tuple[str, str]:
    """
    Decodes file bytes, returning ``(text, encoding)``.

    A confident chardet guess is tried first, then UTF-8, then Latin-1,
    which accepts any byte sequence.
    """
    if not raw:
        return "", "utf-8"

    guess = chardet.detect(raw[:CHARDET_SAMPLE_SIZE])
    encoding_guess = guess.get("encoding")
    confidence = guess.get("confidence") or 0.0
    logger.debug("chardet: '%s' -> %s (confidence %.2f)", filename, encoding_guess, confidence)

    candidates: List[str] = []
    if encoding_guess and confidence >= CHARDET_MIN_CONFIDENCE:
        # ASCII files become UTF-8 so later non-ASCII input can be saved.
        candidates.append("utf-8" if encoding_guess.lower() == "ascii" else encoding_guess)
    for fallback in ("utf-8", "latin-1"):
        if fallback not in candidates:
            candidates.append(fallback)

    for encoding in candidates:
        try:
            return raw.decode(encoding), encoding
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning("Failed to decode '%s' as %s: %s", filename, encoding, e)

    # latin-1 decodes every byte sequence, so this is unreachable in practice.
    return raw.decode("utf-8", errors="replace"), "utf-8"


def split_lines(text: str) -> List[str]:
    """
    Splits file text into row contents on ``\\n`` only.

    A trailing newline does not create an extra empty row, and a trailing
    ``\\r`` is dropped from each line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _render_key(settings: EditorSettings) -> Tuple[int, str]:
    return settings.tab_width, settings.tab_char


class Document:
    """
    Ordered rows plus the file they came from.

    Attributes:
        rows (List[Row]): The document's rows. May be empty.
        filepath (Optional[str]): Backing file, if any.
        encoding (str): Encoding used to write the file back.
        syntax (Optional[Syntax]): Language rules, or None for plain text.
    """

    def __init__(
        self,
        rows: Optional[List[Row]] = None,
        filepath: Optional[str] = None,
        syntax: Optional[Syntax] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.rows: List[Row] = rows if rows is not None else []
        self.filepath = filepath
        self.syntax = syntax
        self.encoding = encoding
        # (tab_width, tab_char) the rows were rendered with; None if unknown.
        self.render_key: Optional[Tuple[int, str]] = None

    # --- Construction ----------------------------------------------------
    @classmethod
    def from_lines(
        cls,
        lines: List[str],
        settings: EditorSettings,
        filepath: Optional[str] = None,
        syntax: Optional[Syntax] = None,
        encoding: str = "utf-8",
    ) -> "Document":
        doc = cls([new_row(line, settings) for line in lines], filepath, syntax, encoding)
        doc.render_key = _render_key(settings)
        highlight_all(syntax.rule if syntax else None, doc.rows)
        return doc

    @classmethod
    def from_text(cls, text: str, settings: EditorSettings, filepath: Optional[str] = None) -> "Document":
        return cls.from_lines(split_lines(text), settings, filepath, Syntax.for_filename(filepath))

    @classmethod
    def load(cls, path: str, settings: EditorSettings) -> "Document":
        """
        Reads `path` into a new document.

        The encoding is detected with chardet and the syntax is resolved from
        the file name.

        Raises:
            OSError: If the file cannot be read (missing, a directory, no
                permission). Callers keep their current document in that case.
        """
        with open(path, "rb") as fh:
            raw = fh.read()
        text, encoding = _decode(raw, path)
        syntax = Syntax.for_filename(path)
        doc = cls.from_lines(split_lines(text), settings, path, syntax, encoding)
        logger.info(
            "Loaded '%s': %d rows, encoding %s, filetype %s",
            path, doc.num_rows(), encoding, syntax.filetype if syntax else "none",
        )
        return doc

    # --- Accessors -------------------------------------------------------
    def num_rows(self) -> int:
        return len(self.rows)

    def get_row(self, at: int) -> Row:
        return self.rows[at]

    def get_content(self, at: int) -> str:
        return self.rows[at].content

    def lines(self) -> List[str]:
        return [row.content for row in self.rows]

    def line_nums_width(self) -> int:
        """Width of the line-number gutter: digits of the row count plus padding."""
        return len(str(self.num_rows())) + 4

    @property
    def filetype(self) -> Optional[str]:
        return self.syntax.filetype if self.syntax else None

    def set_syntax(self, syntax: Optional[Syntax]) -> None:
        """Binds a new syntax and reclassifies the whole document."""
        self.syntax = syntax
        highlight_all(syntax.rule if syntax else None, self.rows)

    def refresh_render(self, settings: EditorSettings) -> bool:
        """
        Re-renders and reclassifies every row if `settings` expand tabs
        differently from the last render.

        Returns:
            bool: True if the rows were rebuilt.
        """
        key = _render_key(settings)
        if key == self.render_key:
            return False
        for row in self.rows:
            render_row(row, settings)
        highlight_all(self.syntax.rule if self.syntax else None, self.rows)
        logger.debug("Re-rendered %d rows for tab settings %s (was %s)", self.num_rows(), key, self.render_key)
        self.render_key = key
        return True

    def _clamp(self, x: int, y: int) -> Tuple[int, int]:
        y = max(0, min(y, self.num_rows()))
        line_len = len(self.rows[y].content) if y < self.num_rows() else 0
        return max(0, min(x, line_len)), y

    def _reclassify(self, *indices: int) -> None:
        if self.syntax is not None:
            update_syntax(self.syntax.rule, self.rows, *indices)

    # --- Structural edits -----------------------------------------------
    def insert_row(self, at: int, content: str, settings: EditorSettings) -> None:
        """
        Inserts a row before `at` without reclassifying. The new row takes the
        continuation of the row above it, which is what the rows below were
        classified with.
        """
        self.refresh_render(settings)
        at = max(0, min(at, self.num_rows()))
        row = new_row(content, settings)
        if at > 0:
            row.continuation = self.rows[at - 1].continuation
        self.rows.insert(at, row)

    def insert_char(self, x: int, y: int, char: str, settings: EditorSettings) -> Tuple[int, int]:
        self.refresh_render(settings)
        x, y = self._clamp(x, y)
        if y == self.num_rows():
            self.insert_row(y, "", settings)
        self.rows[y].insert_char(x, char, settings)
        self._reclassify(y)
        return x + 1, y

    def delete_char(self, x: int, y: int, settings: EditorSettings) -> Tuple[int, int]:
        """
        Deletes the character before `(x, y)`, joining with the previous row
        at column 0.

        Returns:
            Tuple[int, int]: The new cursor position. ``(0, 0)`` is a no-op.
        """
        self.refresh_render(settings)
        x, y = self._clamp(x, y)
        if x == 0 and y == 0:
            return x, y

        if y == self.num_rows():
            self.insert_row(y, "", settings)

        if x == 0:
            new_x = len(self.rows[y - 1].content)
            self.join_adjacent_rows(y, settings)
            y -= 1
        else:
            self.rows[y].delete_char(x - 1, settings)
            new_x = x - 1

        self._reclassify(y)
        return new_x, y

    def join_adjacent_rows(self, at: int, settings: EditorSettings) -> None:
        """Appends row `at` to row ``at - 1`` and removes it."""
        removed = self.rows.pop(at)
        prev = self.rows[at - 1]
        prev.append(removed.content, settings)
        # The rows below were classified against the removed row's state.
        prev.continuation = removed.continuation

    def auto_indent(self, at: int, contents: str, settings: EditorSettings) -> str:
        """
        Prefixes `contents` with the indentation for a new row at `at`.

        The whitespace prefix of row ``at - 1`` is copied, plus one indent
        unit when that row's last non-whitespace character opens a bracket.
        Nothing is added when auto-indent is off.
        """
        if not settings.auto_indent or at <= 0 or at > self.num_rows():
            return contents

        above = self.rows[at - 1].content
        stripped = above.lstrip()
        indent = above[: len(above) - len(stripped)]

        tail = above.rstrip()
        if tail and tail[-1] in OPENING_BRACKETS:
            indent += settings.indent_unit

        return indent + contents

    def insert_newline(self, x: int, y: int, settings: EditorSettings) -> Tuple[int, int]:
        self.refresh_render(settings)
        x, y = self._clamp(x, y)

        if x == 0:
            self.insert_row(y, "", settings)
            self._reclassify(y)
            return 0, y + 1

        current = self.rows[y]
        tail = current.truncate(x, settings)
        indented = self.auto_indent(y + 1, tail, settings)
        self.insert_row(y + 1, indented, settings)
        # The new row now sits above what used to follow `current`.
        self.rows[y + 1].continuation = current.continuation
        self._reclassify(y, y + 1)
        return len(indented) - len(tail), y + 1

    # --- Persistence -----------------------------------------------------
    def write(self, path: Optional[str] = None) -> int:
        """
        Writes the rows joined with ``\\n`` to `path` (or the document's own
        path), replacing the file.

        Returns:
            int: Number of bytes written.

        Raises:
            NoFilePathError: If neither `path` nor ``self.filepath`` is set.
            OSError: If the file cannot be written.
        """
        target = path or self.filepath
        if not target:
            raise NoFilePathError()

        data = "\n".join(self.lines()).encode(self.encoding, errors="replace")
        with open(target, "wb") as fh:
            fh.write(data)

        logger.info("Wrote %d bytes to '%s'", len(data), target)
        return len(data)

    def __repr__(self) -> str:
        name = os.path.basename(self.filepath) if self.filepath else "no name"
        return f"<Document {name!r} rows={self.num_rows()} filetype={self.filetype}>"
