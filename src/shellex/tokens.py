"""Token kinds and the data structures the lexer produces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    COMMENT = "Comment"
    KEYWORD = "Keyword"
    NAME_BUILTIN = "Name.Builtin"
    NAME_VARIABLE = "Name.Variable"
    OPERATOR = "Operator"
    PUNCTUATION = "Punctuation"

    # Literals
    STRING_DOUBLE = "Literal.String.Double"
    STRING_SINGLE = "Literal.String.Single"
    STRING_BACKTICK = "Literal.String.Backtick"
    STRING_HEREDOC = "Literal.String.Heredoc"
    STRING_ESCAPE = "Literal.String.Escape"
    NUMBER = "Literal.Number"

    TEXT = "Text"
    ERROR = "Error"  # one unmatched character

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token: its kind, the exact source text it covers, and where.

    ``state`` names the lexical state whose rule produced the token.
    """

    kind: TokenKind
    text: str
    span: Span
    state: str


def advance_position(pos: Position, text: str) -> Position:
    """Return the position reached after consuming *text* from *pos*."""
    newlines = text.count("\n")
    if newlines:
        column = len(text) - text.rfind("\n")
        return Position(pos.line + newlines, column, pos.offset + len(text))
    return Position(pos.line, pos.column + len(text), pos.offset + len(text))
