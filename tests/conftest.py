"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from shellex.lexer import Lexer, tokenize
from shellex.tokens import Token, TokenKind


@pytest.fixture
def lex():
    """Return a helper that tokenizes shell source."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source)

    return _lex


@pytest.fixture
def lexer():
    """Return a helper that runs a Lexer to completion and returns it with its tokens."""

    def _run(source: str) -> tuple[Lexer, list[Token]]:
        lx = Lexer(source)
        return lx, lx.tokenize()

    return _run


def pairs(tokens: list[Token]) -> list[tuple[TokenKind, str]]:
    return [(t.kind, t.text) for t in tokens]


def assert_pairs(tokens: list[Token], expected: list[tuple[TokenKind, str]]) -> None:
    """Assert that the (kind, text) pairs match the expected list."""
    actual = pairs(tokens)
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_kinds(tokens: list[Token], expected: list[TokenKind]) -> None:
    """Assert that the token kinds match the expected list."""
    actual = [t.kind for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], kind: TokenKind) -> list[Token]:
    """Return all tokens of the given kind."""
    return [t for t in tokens if t.kind == kind]


def assert_no_errors(tokens: list[Token]) -> None:
    errors = find_tokens(tokens, TokenKind.ERROR)
    assert not errors, f"Unexpected fallback tokens: {pairs(errors)}"


def assert_lossless(source: str, tokens: list[Token]) -> None:
    """Assert the tokens cover the source exactly, in order, with no empty tokens."""
    assert "".join(t.text for t in tokens) == source
    offset = 0
    for tok in tokens:
        assert tok.text, f"Empty token {tok.kind} at {tok.span.start}"
        assert tok.span.start.offset == offset
        offset = tok.span.end.offset
    assert offset == len(source)
