"""Lexer registration metadata and source detection (filename, mimetype, shebang)."""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from pathlib import PurePath


@dataclass(frozen=True, slots=True)
class LexerInfo:
    """Registration descriptor for a lexer."""

    tag: str
    aliases: tuple[str, ...]
    filenames: tuple[str, ...]
    mimetypes: tuple[str, ...]
    description: str = ""

    def matches_filename(self, filename: str) -> bool:
        """Return True if the basename of *filename* matches one of the globs."""
        name = PurePath(filename).name
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.filenames)

    def matches_mimetype(self, mimetype: str) -> bool:
        return mimetype.strip().lower() in self.mimetypes


SHELL_INFO = LexerInfo(
    tag="shell",
    aliases=("bash", "zsh", "ksh", "sh"),
    filenames=(
        "*.sh",
        "*.bash",
        "*.zsh",
        "*.ksh",
        ".bashrc",
        ".zshrc",
        ".kshrc",
        ".profile",
    ),
    mimetypes=("application/x-sh", "application/x-shellscript"),
    description="Various shell languages, including sh and bash",
)

# tag or alias -> descriptor
REGISTRY: dict[str, LexerInfo] = {
    name: SHELL_INFO for name in (SHELL_INFO.tag, *SHELL_INFO.aliases)
}

_SHEBANG = re.compile(r"\A\s*#!(.*)$", re.MULTILINE)
_SHELL_INTERPRETER = re.compile(r"\b(?:ba|z|k)?sh(?:\s|$)")


def shebang(text: str) -> str | None:
    """Return the interpreter part of the first line if it is a shebang."""
    m = _SHEBANG.match(text)
    if m is None:
        return None
    return m.group(1)


def analyze_text(text: str) -> float:
    """Score how likely *text* is a shell script: 1.0 for a shell shebang, else 0.0.

    ``#!/bin/bash``, ``#!/usr/bin/env bash`` and ``#!/usr/bin/env bash -i``
    score 1.0; ``#!/bin/smash`` and ``#!/bin/bash/python`` do not.
    """
    line = shebang(text)
    if line is None:
        return 0.0
    return 1.0 if _SHELL_INTERPRETER.search(line) else 0.0


def find_lexer(name: str) -> LexerInfo | None:
    """Look a lexer up by tag or alias."""
    return REGISTRY.get(name.lower())


def guess(
    filename: str | None = None,
    mimetype: str | None = None,
    source: str | None = None,
) -> LexerInfo | None:
    """Return the descriptor matching any of the given hints, or None."""
    for info in dict.fromkeys(REGISTRY.values()):
        if filename is not None and info.matches_filename(filename):
            return info
        if mimetype is not None and info.matches_mimetype(mimetype):
            return info
        if source is not None and analyze_text(source) > 0:
            return info
    return None
