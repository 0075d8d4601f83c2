# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Incremental syntax classification.

Every render character of a row gets exactly one :class:`HighlightType`.
Classification of a row depends on whether the previous row ended inside an
unterminated multi-line comment (its *continuation* flag), so an edit can
force the rows below it to be reclassified. :func:`update_syntax` handles
that with an explicit worklist: a row is re-queued only when the row above
it changed its continuation, and propagation stops at the first row whose
continuation comes out unchanged.

Supported languages form a closed set (:class:`Syntax`); each member carries
an immutable :class:`HighlightRule` validated when the module is imported.
"""

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .errors import HighlightInvariantError, SyntaxRuleError

if TYPE_CHECKING:
    from .rows import Row

logger = logging.getLogger(__name__)

SEPARATORS = frozenset(",.;()[]{}+-/*=~%<>&:|\"'")
DIGITS = frozenset("0123456789")


class HighlightKind(Enum):
    NORMAL = "normal"
    NUMBER = "number"
    SEARCH_MATCH = "search_match"
    STRINGLIKE = "stringlike"
    COMMENT = "comment"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class HighlightType:
    """Classification of one render character. ``color`` is set for keywords only."""

    kind: HighlightKind
    color: Optional[str] = None

    def __repr__(self) -> str:
        if self.kind is HighlightKind.KEYWORD:
            return f"Keyword({self.color})"
        return self.kind.name.title().replace("_", "")


NORMAL = HighlightType(HighlightKind.NORMAL)
NUMBER = HighlightType(HighlightKind.NUMBER)
SEARCH_MATCH = HighlightType(HighlightKind.SEARCH_MATCH)
STRINGLIKE = HighlightType(HighlightKind.STRINGLIKE)
COMMENT = HighlightType(HighlightKind.COMMENT)


def keyword(color: str) -> HighlightType:
    return HighlightType(HighlightKind.KEYWORD, color)


def is_separator(char: str) -> bool:
    return char.isspace() or char in SEPARATORS


@dataclass(frozen=True)
class HighlightRule:
    """
    Highlighting rules for one language.

    Attributes:
        filetype (str): Name shown on the status line, e.g. ``"rust"``.
        extensions (Tuple[str, ...]): File extensions without the dot.
        stringlikes (Tuple[str, ...]): Single-character string delimiters.
        comment (str): Single-line comment marker; empty to disable.
        multiline_comment (Optional[Tuple[str, str]]): ``(start, end)`` markers.
        keywords (Tuple[Tuple[str, Tuple[str, ...]], ...]): ``(color, words)``
            groups. Words are tried in table order and the first match wins,
            so longer operators must precede their prefixes.

    Raises:
        SyntaxRuleError: If the table is malformed. Rules are built at import
            time, so a bad table fails at startup rather than mid-scan.
    """

    filetype: str
    extensions: Tuple[str, ...]
    stringlikes: Tuple[str, ...] = ('"', "'")
    comment: str = ""
    multiline_comment: Optional[Tuple[str, str]] = None
    keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    _flat_keywords: Tuple[Tuple[str, HighlightType, bool], ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        if not self.filetype:
            raise SyntaxRuleError("highlight rule needs a filetype name")
        if not self.extensions or any(not ext or ext.startswith(".") for ext in self.extensions):
            raise SyntaxRuleError(f"{self.filetype}: extensions must be non-empty and given without a dot")
        for delimiter in self.stringlikes:
            if len(delimiter) != 1:
                raise SyntaxRuleError(f"{self.filetype}: string delimiter {delimiter!r} is not one character")
        if self.multiline_comment is not None:
            start, end = self.multiline_comment
            if not start or not end:
                raise SyntaxRuleError(f"{self.filetype}: multi-line comment markers must not be empty")

        flat: List[Tuple[str, HighlightType, bool]] = []
        for color, words in self.keywords:
            if not color:
                raise SyntaxRuleError(f"{self.filetype}: keyword group without a color")
            tag = keyword(color)
            for word in words:
                if not word:
                    raise SyntaxRuleError(f"{self.filetype}: empty keyword in the {color} group")
                flat.append((word, tag, word.isalnum()))
        object.__setattr__(self, "_flat_keywords", tuple(flat))


RUST_RULE = HighlightRule(
    filetype="rust",
    extensions=("rs",),
    stringlikes=('"', "'"),
    comment="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        ("blue", (
            "mod", "unsafe", "extern", "crate", "use", "type", "struct",
            "enum", "union", "const", "static", "let", "if", "else",
            "impl", "trait", "for", "fn", "while", "true", "false",
            "in", "continue", "break", "loop", "match", "return", "pub",
        )),
        ("red", (
            "isize", "i8", "i16", "i32", "i64",
            "usize", "u8", "u16", "u32", "u64",
            "f32", "f64", "char", "str", "bool",
            "mut", "&",
        )),
        ("magenta", (
            "==", "!=", "<=", "<", ">=", ">", "=>", "->",
            "+=", "-=", "*=", "/=", "=", "Self", "self",
        )),
        ("dark_grey", ("::",)),
    ),
)

JAVASCRIPT_RULE = HighlightRule(
    filetype="javascript",
    extensions=("js", "mjs", "cjs"),
    stringlikes=('"', "'", "`"),
    comment="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        ("blue", (
            "await", "break", "case", "catch", "class",
            "const", "continue", "debugger", "default", "delete",
            "do", "else", "enum", "export", "extends",
            "finally", "for", "function", "if", "implements",
            "import", "in", "instanceof", "interface", "let",
            "new", "package", "private", "protected", "public",
            "return", "super", "switch", "static", "throw",
            "try", "typeof", "var", "void", "while",
            "with", "yield",
        )),
        ("red", ("true", "false", "null")),
        ("magenta", (
            "===", "!==", "==", "!=", "<=", "<", ">=", ">",
            "=>", "+=", "-=", "*=", "/=", "=", "++", "--",
            "this",
        )),
    ),
)

PYTHON_RULE = HighlightRule(
    filetype="python",
    extensions=("py", "pyw"),
    stringlikes=('"', "'"),
    comment="#",
    keywords=(
        ("blue", (
            "and", "as", "assert", "async", "await", "break", "class",
            "continue", "def", "del", "elif", "else", "except", "finally",
            "for", "from", "global", "if", "import", "in", "is", "lambda",
            "nonlocal", "not", "or", "pass", "raise", "return", "try",
            "while", "with", "yield",
        )),
        ("red", ("True", "False", "None")),
        ("magenta", (
            "==", "!=", "<=", ">=", "<", ">", "->", "+=", "-=", "*=", "/=",
            "=", "self", "cls",
        )),
    ),
)

C_RULE = HighlightRule(
    filetype="c",
    extensions=("c", "h"),
    stringlikes=('"', "'"),
    comment="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        ("blue", (
            "auto", "break", "case", "continue", "default", "do", "else",
            "extern", "for", "goto", "if", "register", "return", "sizeof",
            "switch", "typedef", "volatile", "while",
        )),
        ("red", (
            "char", "const", "double", "enum", "float", "int", "long",
            "short", "signed", "static", "struct", "union", "unsigned", "void",
        )),
        ("magenta", (
            "==", "!=", "<=", ">=", "<", ">", "->", "+=", "-=", "*=", "/=",
            "=", "++", "--",
        )),
        ("dark_grey", ("#include", "#define", "#ifdef", "#ifndef", "#endif")),
    ),
)


class Syntax(Enum):
    """Closed set of supported languages, one member per rule table."""

    RUST = RUST_RULE
    JAVASCRIPT = JAVASCRIPT_RULE
    PYTHON = PYTHON_RULE
    C = C_RULE

    @property
    def rule(self) -> HighlightRule:
        return self.value

    @property
    def filetype(self) -> str:
        return self.value.filetype

    @classmethod
    def for_extension(cls, extension: str) -> Optional["Syntax"]:
        ext = extension.lower().lstrip(".")
        for member in cls:
            if ext in member.rule.extensions:
                return member
        return None

    @classmethod
    def for_filename(cls, filename: Optional[str]) -> Optional["Syntax"]:
        """
        Resolves the syntax for a file name.

        The extension is checked against the rule tables first. Names the
        tables do not know are looked up in the Pygments lexer registry and
        matched to a member through the lexer's name and aliases.
        """
        if not filename:
            return None

        _, ext = os.path.splitext(os.path.basename(filename))
        if ext:
            found = cls.for_extension(ext)
            if found is not None:
                return found

        try:
            lexer = get_lexer_for_filename(filename)
        except ClassNotFound:
            logger.debug("No lexer known for '%s'; plain text.", filename)
            return None

        names = {lexer.name.lower(), *(alias.lower() for alias in lexer.aliases)}
        for member in cls:
            if member.filetype in names:
                logger.debug("Resolved '%s' to %s via Pygments lexer '%s'.", filename, member.name, lexer.name)
                return member
        return None


def _match_keyword(
    rule: HighlightRule, render: str, idx: int, separated: bool
) -> Optional[Tuple[str, HighlightType]]:
    end_of_line = len(render)
    for word, tag, alnum in rule._flat_keywords:
        # Alphanumeric keywords need a separator on both sides.
        if alnum and not separated:
            continue
        end = idx + len(word)
        if end > end_of_line or not render.startswith(word, idx):
            continue
        if alnum and end < end_of_line and not is_separator(render[end]):
            continue
        return word, tag
    return None


def classify(
    rule: HighlightRule, render: str, continuation: bool = False
) -> Tuple[List[HighlightType], bool]:
    """
    Classifies one rendered row.

    The scan runs left to right once. At each position the first rule that
    applies wins: single-line comment, multi-line comment, open string,
    string start, number, keyword, normal text.

    Args:
        rule (HighlightRule): Rules of the buffer's language.
        render (str): The row's render text.
        continuation (bool): True if the previous row ended inside an
            unterminated multi-line comment.

    Returns:
        Tuple[List[HighlightType], bool]: One tag per render character, and
        whether this row itself ends inside a multi-line comment.

    Raises:
        HighlightInvariantError: If the tag count differs from the render
            length.
    """
    highlight: List[HighlightType] = []
    comment_start = rule.comment
    multiline = rule.multiline_comment
    in_comment = continuation and multiline is not None
    in_string: Optional[str] = None
    separated = True
    length = len(render)
    idx = 0

    while idx < length:
        char = render[idx]
        prev = highlight[idx - 1] if idx > 0 else NORMAL

        if in_string is None and comment_start and not in_comment and render.startswith(comment_start, idx):
            highlight.extend([COMMENT] * (length - idx))
            break

        if multiline is not None and in_string is None:
            ml_start, ml_end = multiline
            if in_comment:
                if render.startswith(ml_end, idx):
                    highlight.extend([COMMENT] * len(ml_end))
                    idx += len(ml_end)
                    in_comment = False
                    separated = True
                else:
                    highlight.append(COMMENT)
                    idx += 1
                continue
            if render.startswith(ml_start, idx):
                highlight.extend([COMMENT] * len(ml_start))
                idx += len(ml_start)
                in_comment = True
                continue

        if in_string is not None:
            highlight.append(STRINGLIKE)
            if char == "\\" and idx + 1 < length:
                highlight.append(STRINGLIKE)
                idx += 2
                continue
            if char == in_string:
                in_string = None
            separated = True
            idx += 1
            continue

        if char in rule.stringlikes:
            in_string = char
            highlight.append(STRINGLIKE)
            idx += 1
            continue

        if (char in DIGITS and (separated or prev == NUMBER)) or (char == "." and prev == NUMBER):
            highlight.append(NUMBER)
            separated = False
            idx += 1
            continue

        matched = _match_keyword(rule, render, idx, separated)
        if matched is not None:
            word, tag = matched
            highlight.extend([tag] * len(word))
            idx += len(word)
            separated = is_separator(word[-1])
            continue

        highlight.append(NORMAL)
        separated = is_separator(char)
        idx += 1

    if len(highlight) != length:
        raise HighlightInvariantError(None, length, len(highlight))

    return highlight, in_comment


def update_syntax(rule: HighlightRule, rows: Sequence["Row"], *indices: int) -> int:
    """
    Reclassifies `indices` and every row below them whose input state changed.

    Rows are processed from a worklist. After a row is classified, its
    continuation flag is compared with the stored one; only a change queues
    the next row. An unterminated comment opener can therefore rescan the
    rest of the document, but an ordinary keystroke touches one row.

    Returns:
        int: The number of rows classified.

    Raises:
        HighlightInvariantError: If a row's highlight and render lengths
            disagree after classification.
    """
    pending = deque(sorted(i for i in set(indices) if 0 <= i < len(rows)))
    classified = 0

    while pending:
        at = pending.popleft()
        row = rows[at]
        continuation_in = at > 0 and rows[at - 1].continuation

        try:
            highlight, continuation_out = classify(rule, row.render, continuation_in)
        except HighlightInvariantError as exc:
            raise HighlightInvariantError(at, exc.render_len, exc.highlight_len) from exc

        row.highlight = highlight
        changed = continuation_out != row.continuation
        row.continuation = continuation_out
        classified += 1

        nxt = at + 1
        if changed and nxt < len(rows) and (not pending or pending[0] != nxt):
            pending.appendleft(nxt)

    if classified > 1:
        logger.debug("Reclassified %d rows starting at %s.", classified, min(indices))
    return classified


def highlight_all(rule: Optional[HighlightRule], rows: Sequence["Row"]) -> None:
    """Classifies every row in a single top-down pass, e.g. after loading a file."""
    continuation = False
    for row in rows:
        if rule is None:
            row.highlight = [NORMAL] * len(row.render)
            row.continuation = False
            continue
        highlight, continuation = classify(rule, row.render, continuation)
        row.highlight = highlight
        row.continuation = continuation


def syntax_color(tag: HighlightType, colors: Optional[Dict[str, str]] = None) -> str:
    """
    Maps a highlight tag to the color name the presentation layer should
    use. Keywords carry their own color class; other kinds are looked up in
    the ``[colors]`` configuration table.
    """
    if tag.kind is HighlightKind.KEYWORD and tag.color:
        return tag.color
    if colors and tag.kind.value in colors:
        return colors[tag.kind.value]
    return _DEFAULT_COLORS[tag.kind]


_DEFAULT_COLORS = {
    HighlightKind.NORMAL: "default",
    HighlightKind.NUMBER: "cyan",
    HighlightKind.SEARCH_MATCH: "yellow",
    HighlightKind.STRINGLIKE: "green",
    HighlightKind.COMMENT: "dark_grey",
    HighlightKind.KEYWORD: "default",
}
