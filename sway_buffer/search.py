# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Incremental search with a single-row highlight overlay.

While a search is active exactly one row may have its highlight replaced by
:data:`~sway_buffer.syntax.SEARCH_MATCH` tags. The row's real highlight is
kept in ``prev_row`` and put back before another row is painted and when the
search ends.
"""

import logging
from typing import List, Optional, Tuple

from .config import EditorSettings
from .cursor import Cursor, Direction
from .document import Document
from .rows import render_column
from .syntax import SEARCH_MATCH, HighlightType

logger = logging.getLogger(__name__)


def find_matches(keyword: str, document: Document) -> List[Tuple[int, int]]:
    """
    Returns every literal occurrence of `keyword` as ``(offset, row_index)``,
    ordered by row and then left to right. Matches within a row do not
    overlap.
    """
    matches: List[Tuple[int, int]] = []
    if not keyword:
        return matches
    for y, row in enumerate(document.rows):
        start = row.content.find(keyword)
        while start != -1:
            matches.append((start, y))
            start = row.content.find(keyword, start + len(keyword))
    return matches


class SearchIndex:
    """
    State of the current search.

    Attributes:
        idx (int): Rank of the selected match among all matches.
        prev_row (Optional[Tuple[int, List[HighlightType]]]): Index and saved
            highlight of the row currently painted, if any.
        saved_position (Optional[Tuple[int, int]]): Cursor ``(x, y)`` when
            the search started; restored by :meth:`cancel`.
    """

    def __init__(self) -> None:
        self.idx = 0
        self.prev_row: Optional[Tuple[int, List[HighlightType]]] = None
        self.saved_position: Optional[Tuple[int, int]] = None

    @property
    def active(self) -> bool:
        return self.saved_position is not None

    def reset(self) -> None:
        self.idx = 0
        self.prev_row = None
        self.saved_position = None

    def restore(self, document: Document) -> None:
        """Puts back the highlight of the painted row, if any."""
        if self.prev_row is None:
            return
        y, highlight = self.prev_row
        self.prev_row = None
        if y < document.num_rows():
            document.get_row(y).highlight = highlight

    def find(
        self,
        keyword: str,
        direction: Optional[Direction],
        document: Document,
        cursor: Cursor,
        settings: EditorSettings,
    ) -> Optional[Tuple[int, int]]:
        """
        Selects and paints a match of `keyword`.

        `direction` ``UP`` selects the previous match (stopping at the first),
        ``DOWN`` the next one (stopping at the last); ``None`` re-selects the
        current rank, e.g. after the keyword was edited.

        Returns:
            Optional[Tuple[int, int]]: The selected ``(offset, row_index)``, or
            None when there is nothing to select. An empty keyword or a keyword
            without matches leaves every piece of state untouched.
        """
        matches = find_matches(keyword, document)
        if not matches:
            logger.debug("search: no matches for %r", keyword)
            return None

        if self.saved_position is None:
            self.saved_position = cursor.position

        if direction is Direction.UP:
            self.idx = max(self.idx - 1, 0)
        elif direction is Direction.DOWN:
            self.idx = min(self.idx + 1, len(matches) - 1)
        else:
            self.idx = min(self.idx, len(matches) - 1)

        self.restore(document)

        x, y = matches[self.idx]
        row = document.get_row(y)
        self.prev_row = (y, list(row.highlight))

        start = render_column(row.content, x, settings.tab_width)
        end = render_column(row.content, x + len(keyword), settings.tab_width)
        for i in range(start, min(end, len(row.highlight))):
            row.highlight[i] = SEARCH_MATCH

        cursor.set_position(x, y, document)
        logger.debug("search: %r match %d/%d at (%d,%d)", keyword, self.idx + 1, len(matches), x, y)
        return x, y

    def cancel(self, document: Document, cursor: Cursor) -> None:
        """Ends the search and returns the cursor to where it started."""
        saved = self.saved_position
        self.restore(document)
        self.reset()
        if saved is not None:
            cursor.set_position(saved[0], saved[1], document)

    def commit(self, document: Document) -> None:
        """Ends the search, leaving the cursor on the selected match."""
        self.restore(document)
        self.reset()
