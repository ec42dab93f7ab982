"""Shell script tokenizer for syntax highlighting."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shellex.tokens import TokenKind

__version__ = "0.1.0"


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Tokenize shell source into (kind, text) pairs."""
    from shellex.lexer import tokenize

    return [(tok.kind, tok.text) for tok in tokenize(source)]
