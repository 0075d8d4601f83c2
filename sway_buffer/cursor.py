# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import logging
from enum import Enum
from typing import Tuple

from .config import EditorSettings
from .document import Document
from .rows import render_column

logger = logging.getLogger(__name__)


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Cursor:
    """
    Logical cursor position and the scroll offsets of a fixed-size viewport.

    ``y`` ranges over ``[0, num_rows]``; ``y == num_rows`` is the virtual
    row one past the end of the document, where typing appends a new row.

    Attributes:
        x (int): Logical column (character offset into the row's content).
        y (int): Row index.
        render_width (int): Render column of `x`; updated by :meth:`scroll`.
        row_offset (int): First visible row.
        col_offset (int): First visible render column.
        term_size (Tuple[int, int]): Viewport ``(cols, rows)``.
    """

    def __init__(self, term_size: Tuple[int, int] = (80, 24)) -> None:
        cols, rows = term_size
        self.term_size = (max(1, cols), max(1, rows))
        self.x = 0
        self.y = 0
        self.render_width = 0
        self.row_offset = 0
        self.col_offset = 0

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y

    def set_position(self, x: int, y: int, document: Document) -> None:
        """Moves to `(x, y)`, clamped to the document."""
        self.y = max(0, min(y, document.num_rows()))
        self.x = max(0, min(x, self._row_len(document, self.y)))

    @staticmethod
    def _row_len(document: Document, y: int) -> int:
        return len(document.get_content(y)) if y < document.num_rows() else 0

    def move_cursor(self, direction: Direction, document: Document) -> bool:
        """
        Applies one directional motion.

        Returns:
            bool: True if the position changed.
        """
        old = (self.x, self.y)
        num_rows = document.num_rows()
        line_len = self._row_len(document, self.y)

        if direction is Direction.UP:
            if self.y > 0:
                self.y -= 1
        elif direction is Direction.DOWN:
            if self.y < num_rows:
                self.y += 1
        elif direction is Direction.LEFT:
            if self.x > 0:
                self.x -= 1
            elif self.y > 0:
                self.y -= 1
                self.x = self._row_len(document, self.y)
        elif direction is Direction.RIGHT:
            if self.x < line_len:
                self.x += 1
            elif self.y + 1 < num_rows:
                self.y += 1
                self.x = 0

        self.x = min(self.x, self._row_len(document, self.y))

        changed = old != (self.x, self.y)
        if changed:
            logger.debug("cursor %s (%d,%d)", direction.value, self.x, self.y)
        return changed

    def scroll(self, document: Document, settings: EditorSettings) -> bool:
        """
        Recomputes `render_width` and moves the offsets the minimum needed to
        keep the cursor inside the viewport.

        Returns:
            bool: True if either offset changed.
        """
        cols, rows = self.term_size
        old_offsets = (self.row_offset, self.col_offset)

        if self.y < document.num_rows():
            self.render_width = render_column(document.get_content(self.y), self.x, settings.tab_width)
        else:
            self.render_width = 0

        if self.y < self.row_offset:
            self.row_offset = self.y
        elif self.y >= self.row_offset + rows:
            self.row_offset = self.y - rows + 1

        gutter = document.line_nums_width()
        if self.render_width < self.col_offset:
            self.col_offset = self.render_width
        if self.render_width + gutter >= self.col_offset + cols:
            self.col_offset = self.render_width + gutter - cols + 1

        return old_offsets != (self.row_offset, self.col_offset)

    def screen_position(self, document: Document) -> Tuple[int, int]:
        """Physical ``(column, row)`` of the cursor inside the viewport."""
        return (
            self.render_width - self.col_offset + document.line_nums_width(),
            self.y - self.row_offset,
        )

    def __repr__(self) -> str:
        return (
            f"Cursor(x={self.x}, y={self.y}, render_width={self.render_width}, "
            f"offsets=({self.row_offset}, {self.col_offset}))"
        )
