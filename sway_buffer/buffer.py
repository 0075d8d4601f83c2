# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
One editing session over one document.

:class:`Buffer` is what a terminal front end talks to: it owns the
:class:`~sway_buffer.document.Document`, the
:class:`~sway_buffer.cursor.Cursor` and the
:class:`~sway_buffer.search.SearchIndex`, fetches a fresh
:class:`~sway_buffer.config.EditorSettings` snapshot from its settings
provider before every edit and render, and turns I/O failures into status
messages instead of exceptions.
"""

import logging
import os
import time
from typing import Callable, List, NamedTuple, Optional, Tuple

from .config import (
    DEFAULT_CONFIG,
    EditorSettings,
    SettingsProvider,
    load_config,
    static_settings_provider,
    viewport_size,
)
from .cursor import Cursor, Direction
from .document import Document
from .search import SearchIndex
from .syntax import HighlightType, Syntax

logger = logging.getLogger(__name__)

MESSAGE_TIMEOUT = 5.0


class StatusMessage:
    """A status-line message that disappears :data:`MESSAGE_TIMEOUT` seconds after it was set."""

    def __init__(self, text: Optional[str] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._text: Optional[str] = None
        self._timestamp: Optional[float] = None
        if text is not None:
            self.set(text)

    def set(self, text: str) -> None:
        self._text = text
        self._timestamp = self._clock()

    def get(self) -> Optional[str]:
        if self._timestamp is None:
            return None
        if self._clock() - self._timestamp > MESSAGE_TIMEOUT:
            self._text = None
            self._timestamp = None
        return self._text


class VisibleRow(NamedTuple):
    line_number: int
    render: str
    highlight: List[HighlightType]


class StatusInfo(NamedTuple):
    filename: str
    dirty: bool
    filetype: str
    line: int
    column: int


class Buffer:
    """
    Editing session: document, cursor, search state and status message.

    Args:
        document (Optional[Document]): Content to edit; an empty unnamed
            document by default.
        settings_provider (Optional[SettingsProvider]): Zero-argument callable
            returning the current :class:`EditorSettings`. Called on every
            edit and render, never cached.
        term_size (Optional[Tuple[int, int]]): Viewport ``(cols, rows)`` for
            the text area. Defaults to the ``[viewport]`` defaults.
    """

    def __init__(
        self,
        document: Optional[Document] = None,
        settings_provider: Optional[SettingsProvider] = None,
        term_size: Optional[Tuple[int, int]] = None,
    ) -> None:
        self.document = document if document is not None else Document()
        self.settings_provider = settings_provider or static_settings_provider()
        self.cursor = Cursor(term_size or viewport_size(DEFAULT_CONFIG))
        self.search = SearchIndex()
        self.message = StatusMessage()
        self.dirty = 0

    @property
    def settings(self) -> EditorSettings:
        return self.current_settings()

    def current_settings(self) -> EditorSettings:
        """
        Fetches a fresh snapshot from the provider. If the tab settings
        changed since the rows were rendered, the whole document is
        re-rendered first so cursor columns and search paint stay aligned
        with `render`.
        """
        settings = self.settings_provider()
        if self.document.render_key != (settings.tab_width, settings.tab_char):
            # The saved highlight belongs to the old render.
            self.search.restore(self.document)
            self.document.refresh_render(settings)
        return settings

    # --- Files -----------------------------------------------------------
    @classmethod
    def open(
        cls,
        path: str,
        settings_provider: Optional[SettingsProvider] = None,
        term_size: Optional[Tuple[int, int]] = None,
        config_path: Optional[str] = None,
    ) -> "Buffer":
        """
        Creates a buffer for `path`; see :meth:`load`. Without `term_size`
        the viewport comes from the ``[viewport]`` section of the config
        file at `config_path`.
        """
        if term_size is None:
            term_size = viewport_size(load_config(config_path))
        buffer = cls(settings_provider=settings_provider, term_size=term_size)
        buffer.load(path)
        return buffer

    def load(self, path: str) -> bool:
        """
        Replaces the document with the contents of `path`.

        A file that does not exist yet opens as an empty document bound to
        `path`, so the first write creates it. Any other read error leaves
        the current document untouched.

        Returns:
            bool: True if the buffer now shows `path`.
        """
        try:
            document = Document.load(path, self.settings)
        except FileNotFoundError:
            logger.info("'%s' does not exist; starting a new file.", path)
            document = Document(filepath=path, syntax=Syntax.for_filename(path))
            self.message.set(f"New file: {path}")
        except OSError as e:
            logger.error("Failed to open '%s': %s", path, e)
            self.message.set(f"Error opening {path}: {e.strerror or e}")
            return False

        self.document = document
        self.cursor = Cursor(self.cursor.term_size)
        self.search.reset()
        self.dirty = 0
        return True

    def write(self, path: Optional[str] = None) -> Optional[int]:
        """
        Saves the document, to `path` if given.

        Saving under a new name rebinds the document to it and re-resolves
        the syntax from the new extension.

        Returns:
            Optional[int]: Bytes written, or None if the write failed. The
            outcome is reported through the status message either way.
        """
        self._end_search()
        try:
            written = self.document.write(path)
        except OSError as e:
            logger.error("Failed to write '%s': %s", path or self.document.filepath, e)
            self.message.set(f"Can't save! I/O error: {e.strerror or e}")
            return None

        if path and path != self.document.filepath:
            self.document.filepath = path
            self.document.set_syntax(Syntax.for_filename(path))

        self.dirty = 0
        self.message.set(f"{written} bytes written to {self.document.filepath}")
        return written

    # --- Editing ---------------------------------------------------------
    def _end_search(self) -> None:
        if self.search.active:
            self.search.commit(self.document)

    def _after_edit(self, position: Tuple[int, int]) -> None:
        self.cursor.set_position(position[0], position[1], self.document)
        self.dirty += 1

    def move_cursor(self, direction: Direction) -> bool:
        return self.cursor.move_cursor(direction, self.document)

    def insert_char(self, char: str) -> None:
        self._end_search()
        self._after_edit(self.document.insert_char(self.cursor.x, self.cursor.y, char, self.settings))

    def insert_tab(self) -> None:
        """Inserts one indent unit: spaces with soft tabs, else a tab character."""
        settings = self.settings
        self._end_search()
        x, y = self.cursor.position
        for char in settings.indent_unit:
            x, y = self.document.insert_char(x, y, char, settings)
        self._after_edit((x, y))

    def delete_char(self) -> None:
        if self.cursor.position == (0, 0):
            return
        self._end_search()
        self._after_edit(self.document.delete_char(self.cursor.x, self.cursor.y, self.settings))

    def insert_newline(self) -> None:
        self._end_search()
        self._after_edit(self.document.insert_newline(self.cursor.x, self.cursor.y, self.settings))

    # --- Search ----------------------------------------------------------
    def find(self, keyword: str, direction: Optional[Direction] = None) -> Optional[Tuple[int, int]]:
        return self.search.find(keyword, direction, self.document, self.cursor, self.settings)

    def cancel_search(self) -> None:
        self.search.cancel(self.document, self.cursor)

    def commit_search(self) -> None:
        self.search.commit(self.document)

    # --- Rendering -------------------------------------------------------
    def scroll(self) -> bool:
        return self.cursor.scroll(self.document, self.settings)

    def visible_rows(self) -> List[VisibleRow]:
        """
        Rows inside the viewport, each cut to the visible render columns.
        Call :meth:`scroll` first so the offsets follow the cursor.
        """
        self.current_settings()
        cols, rows = self.cursor.term_size
        width = max(0, cols - self.document.line_nums_width())
        start = self.cursor.col_offset
        end = start + width

        visible = []
        last = min(self.cursor.row_offset + rows, self.document.num_rows())
        for y in range(self.cursor.row_offset, last):
            row = self.document.get_row(y)
            visible.append(VisibleRow(y + 1, row.render[start:end], row.highlight[start:end]))
        return visible

    def cursor_position(self) -> Tuple[int, int]:
        return self.cursor.screen_position(self.document)

    def status(self) -> StatusInfo:
        filepath = self.document.filepath
        return StatusInfo(
            filename=os.path.basename(filepath) if filepath else "no name",
            dirty=self.dirty > 0,
            filetype=self.document.filetype or "no ft",
            line=self.cursor.y + 1,
            column=self.cursor.x + 1,
        )

    def __repr__(self) -> str:
        return f"<Buffer {self.document!r} {self.cursor!r} dirty={self.dirty}>"
