# sway_buffer/__init__.py

__version__ = "0.1.0"

from .buffer import Buffer, StatusInfo, StatusMessage, VisibleRow
from .config import (
    EditorSettings,
    deep_merge,
    file_settings_provider,
    load_config,
    static_settings_provider,
    viewport_size,
)
from .cursor import Cursor, Direction
from .document import Document
from .errors import HighlightInvariantError, NoFilePathError, SwayBufferError, SyntaxRuleError
from .log_setup import setup_logging
from .rows import Row, render_column, render_row
from .search import SearchIndex
from .syntax import HighlightRule, HighlightType, Syntax, classify, highlight_all, update_syntax

__all__ = [
    'Buffer',
    'StatusInfo',
    'StatusMessage',
    'VisibleRow',
    'EditorSettings',
    'deep_merge',
    'file_settings_provider',
    'load_config',
    'static_settings_provider',
    'viewport_size',
    'Cursor',
    'Direction',
    'Document',
    'HighlightInvariantError',
    'NoFilePathError',
    'SwayBufferError',
    'SyntaxRuleError',
    'setup_logging',
    'Row',
    'render_column',
    'render_row',
    'SearchIndex',
    'HighlightRule',
    'HighlightType',
    'Syntax',
    'classify',
    'highlight_all',
    'update_syntax',
]
