"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from shellex.tokens import Token


def dump_tokens(
    tokens: Iterable[Token],
    stack: tuple[str, ...] = (),
    *,
    file: TextIO | None = None,
) -> None:
    """Print one line per token (position, producing state, kind, text) to *file*.

    *file* defaults to whatever ``sys.stderr`` is at call time. When *stack*
    is given, the state stack left at end of input follows.
    """
    if file is None:
        file = sys.stderr
    for tok in tokens:
        start = tok.span.start
        where = f"{start.line}:{start.column}"
        file.write(f"{where:>8}  {tok.state:<16} {tok.kind.value:<24} {tok.text!r}\n")
    if stack:
        file.write(f"stack: {' > '.join(stack)}\n")
