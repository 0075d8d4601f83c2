# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Rows: logical content plus its rendered form and highlight."""

from dataclasses import dataclass, field
from typing import List

from .config import EditorSettings
from .syntax import NORMAL, HighlightType


@dataclass
class Row:
    """
    One line of a document.

    Attributes:
        content (str): The text as stored on disk.
        render (str): `content` with tabs expanded; derived.
        highlight (List[HighlightType]): One tag per `render` character; derived.
        continuation (bool): True if the row ends inside an unterminated
            multi-line comment.
    """

    content: str = ""
    render: str = ""
    highlight: List[HighlightType] = field(default_factory=list)
    continuation: bool = False

    def insert_char(self, at: int, char: str, settings: EditorSettings) -> None:
        at = max(0, min(at, len(self.content)))
        self.content = self.content[:at] + char + self.content[at:]
        render_row(self, settings)

    def delete_char(self, at: int, settings: EditorSettings) -> str:
        """Removes and returns the character at `at`; '' if out of range."""
        if not (0 <= at < len(self.content)):
            return ""
        removed = self.content[at]
        self.content = self.content[:at] + self.content[at + 1:]
        render_row(self, settings)
        return removed

    def truncate(self, at: int, settings: EditorSettings) -> str:
        """Cuts the row at `at` and returns the removed tail."""
        tail = self.content[at:]
        self.content = self.content[:at]
        render_row(self, settings)
        return tail

    def append(self, text: str, settings: EditorSettings) -> None:
        self.content += text
        render_row(self, settings)


def render_row(row: Row, settings: EditorSettings) -> None:
    """
    Rebuilds ``row.render`` from ``row.content``.

    A tab becomes ``settings.tab_char`` followed by spaces up to the next
    multiple of ``settings.tab_width``; every other character is one render
    unit. The highlight is reset to plain text of the new length, so the
    caller must reclassify the row if the buffer has a syntax.

    Example:
        >>> row = Row("a\\tb")
        >>> render_row(row, EditorSettings(tab_width=4, tab_char="»"))
        >>> row.render
        'a»  b'
    """
    tab_width = settings.tab_width
    parts: List[str] = []
    column = 0
    for char in row.content:
        if char == "\t":
            stop = (column // tab_width + 1) * tab_width
            parts.append(settings.tab_char + " " * (stop - column - 1))
            column = stop
        else:
            parts.append(char)
            column += 1
    row.render = "".join(parts)
    row.highlight = [NORMAL] * len(row.render)


def render_column(content: str, x: int, tab_width: int) -> int:
    """Render column of logical offset `x`, matching :func:`render_row`."""
    column = 0
    for char in content[:x]:
        if char == "\t":
            column = (column // tab_width + 1) * tab_width
        else:
            column += 1
    return column


def new_row(content: str, settings: EditorSettings) -> Row:
    row = Row(content)
    render_row(row, settings)
    return row
