"""Regex state-machine lexer: runs a Grammar over source text."""

from __future__ import annotations

import re
from collections.abc import Iterator

from shellex.errors import LexProblem
from shellex.rules import POP, Grammar, Rule, State
from shellex.shell import SHELL
from shellex.tokens import Position, Span, Token, TokenKind, advance_position


class Lexer:
    """Tokenize source text with a Grammar into a lossless stream of Token objects.

    Each step tries the rules of the state on top of the stack in order and
    commits the first non-empty match. When nothing matches, one character is
    emitted as an ERROR token, so every input produces a complete stream.
    """

    def __init__(self, source: str, grammar: Grammar = SHELL) -> None:
        self._source = source
        self._grammar = grammar
        self._pos = Position(1, 1, 0)
        self._pending: list[Token] = []
        # (state, position where it was entered); the root frame is never popped
        self._stack: list[tuple[State, Position]] = [(grammar[grammar.root], self._pos)]

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        return list(self.stream())

    def stream(self) -> Iterator[Token]:
        """Yield tokens as they are produced."""
        while self._pos.offset < len(self._source):
            self._step()
            yield from self._pending
            self._pending.clear()

    # ------------------------------------------------------------------
    # Stack inspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._stack[-1][0]

    @property
    def state_stack(self) -> tuple[str, ...]:
        """Names of the active states, floor first."""
        return tuple(state.name for state, _ in self._stack)

    def open_contexts(self) -> list[tuple[str, Position]]:
        """States above the root that are still open, with where they began."""
        return [(state.name, opened) for state, opened in self._stack[1:]]

    # ------------------------------------------------------------------
    # Engine primitives
    # ------------------------------------------------------------------

    def push(self, state: State, opened_at: Position | None = None) -> None:
        self._stack.append((state, opened_at or self._pos))

    def pop(self) -> None:
        if len(self._stack) > 1:
            self._stack.pop()

    def emit(self, kind: TokenKind, text: str) -> Token:
        """Emit *text* as a token of *kind* and advance the cursor past it."""
        start = self._pos
        self._pos = advance_position(start, text)
        tok = Token(kind, text, Span(start, self._pos), self.state.name)
        self._pending.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _step(self) -> None:
        offset = self._pos.offset
        for r in self.state.rules:
            m = r.pattern.match(self._source, offset)
            # Zero-width matches would never advance the cursor
            if m is None or m.end() == offset:
                continue
            self._apply(r, m)
            return
        self.emit(TokenKind.ERROR, self._source[offset])

    def _apply(self, r: Rule, m: re.Match[str]) -> None:
        start = self._pos
        if isinstance(r.action, tuple):
            self._emit_groups(r.action, m)
        else:
            self.emit(r.action, m.group())

        target = r.transition
        if target is None:
            return
        if isinstance(target, str):
            if target == POP:
                self.pop()
            else:
                self.push(self._grammar[target], start)
        else:
            self.push(target(m), start)

    def _emit_groups(self, kinds: tuple[TokenKind, ...], m: re.Match[str]) -> None:
        # Text outside the groups is still emitted so the stream stays lossless
        cursor = m.start()
        for i, kind in enumerate(kinds, start=1):
            begin, end = m.span(i)
            if begin < cursor or begin == end:
                continue
            if begin > cursor:
                self.emit(TokenKind.TEXT, m.string[cursor:begin])
            self.emit(kind, m.string[begin:end])
            cursor = end
        if cursor < m.end():
            self.emit(TokenKind.TEXT, m.string[cursor : m.end()])


def tokenize(source: str) -> list[Token]:
    """Convenience function: tokenize shell source and return the token list."""
    return Lexer(source).tokenize()


def find_problems(
    source: str, grammar: Grammar = SHELL, *, warn_unclosed: bool = True
) -> list[LexProblem]:
    """Lex *source* and report fallback tokens and contexts left open at the end.

    Adjacent fallback characters are reported as one problem.
    """
    lexer = Lexer(source, grammar)
    problems: list[LexProblem] = []
    run: list[Token] = []

    def flush() -> None:
        if run:
            text = "".join(t.text for t in run)
            problems.append(
                LexProblem(
                    f"no rule matches {text!r} in state '{run[0].state}'",
                    Span(run[0].span.start, run[-1].span.end),
                    source,
                )
            )
            run.clear()

    for tok in lexer.stream():
        if tok.kind is TokenKind.ERROR and (not run or run[-1].state == tok.state):
            run.append(tok)
            continue
        flush()
        if tok.kind is TokenKind.ERROR:
            run.append(tok)
    flush()

    if warn_unclosed:
        for name, opened in lexer.open_contexts():
            after = Position(opened.line, opened.column + 1, opened.offset + 1)
            problems.append(
                LexProblem(
                    f"'{name}' still open at end of input",
                    Span(opened, after),
                    source,
                    "warning",
                )
            )
    return problems
