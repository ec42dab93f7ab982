"""Error types and reportable lexing problems with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from shellex.tokens import Span


class GrammarError(Exception):
    """Raised while building a grammar table: unknown or cyclic state references."""

    def __init__(self, message: str, state: str | None = None) -> None:
        self.message = message
        self.state = state
        super().__init__(self.format())

    def format(self) -> str:
        if self.state is None:
            return f"grammar error: {self.message}"
        return f"grammar error in state '{self.state}': {self.message}"


Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class LexProblem:
    """Something in the source the lexer could only handle best-effort.

    Lexing itself never fails; problems are collected after the fact for
    ``--check`` and the language server.
    """

    message: str
    span: Span
    source: str
    severity: Severity = "error"

    def format(self, filename: str = "<stdin>") -> str:
        lines = self.source.splitlines(keepends=True)
        line_idx = self.span.start.line - 1
        col = self.span.start.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        # Underline the full span when on one line, otherwise to end of line
        if self.span.end.line == self.span.start.line:
            underline_len = max(1, self.span.end.column - col)
        else:
            underline_len = max(1, len(source_line) - col + 1)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.span.start.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"{self.severity}: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.span.start.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )
