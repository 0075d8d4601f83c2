# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Exceptions raised by the buffer core."""

from typing import Optional


class SwayBufferError(Exception):
    """Base class for all errors raised by sway_buffer."""


class HighlightInvariantError(SwayBufferError, RuntimeError):
    """
    Raised when a classified row does not carry exactly one highlight tag
    per render character. This always indicates a classifier defect.
    """

    def __init__(self, row_index: Optional[int], render_len: int, highlight_len: int) -> None:
        super().__init__(
            f"highlight length {highlight_len} does not match render length {render_len}"
            + (f" on row {row_index}" if row_index is not None else "")
        )
        self.row_index = row_index
        self.render_len = render_len
        self.highlight_len = highlight_len


class SyntaxRuleError(SwayBufferError, ValueError):
    """Raised when a highlight rule table is malformed."""


class NoFilePathError(SwayBufferError, OSError):
    """Raised when a document without a backing path is written."""

    def __init__(self, message: str = "no file name specified") -> None:
        super().__init__(message)
