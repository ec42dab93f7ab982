"""Shell grammar: lexical states for sh, bash, zsh and ksh sources."""

from __future__ import annotations

import re
from functools import lru_cache

from shellex.rules import POP, State, build_grammar, include, rule
from shellex.tokens import TokenKind

COMMENT = TokenKind.COMMENT
KEYWORD = TokenKind.KEYWORD
BUILTIN = TokenKind.NAME_BUILTIN
VARIABLE = TokenKind.NAME_VARIABLE
OPERATOR = TokenKind.OPERATOR
PUNCTUATION = TokenKind.PUNCTUATION
DOUBLE = TokenKind.STRING_DOUBLE
SINGLE = TokenKind.STRING_SINGLE
BACKTICK = TokenKind.STRING_BACKTICK
HEREDOC = TokenKind.STRING_HEREDOC
ESCAPE = TokenKind.STRING_ESCAPE
NUMBER = TokenKind.NUMBER
TEXT = TokenKind.TEXT

# `case` is not here: it also opens the case state
KEYWORDS: tuple[str, ...] = (
    "if", "fi", "else", "while", "do", "done", "for", "then", "return",
    "function", "select", "continue", "until", "esac", "elif", "in",
)

BUILTINS: tuple[str, ...] = (
    "alias", "bg", "bind", "break", "builtin", "caller", "cd", "command",
    "compgen", "complete", "declare", "dirs", "disown", "echo", "enable",
    "eval", "exec", "exit", "export", "false", "fc", "fg", "getopts", "hash",
    "help", "history", "jobs", "kill", "let", "local", "logout", "popd",
    "printf", "pushd", "pwd", "read", "readonly", "set", "shift", "shopt",
    "source", "suspend", "test", "time", "times", "trap", "true", "type",
    "typeset", "ulimit", "umask", "unalias", "unset", "wait",
)

_KEYWORDS = "|".join(KEYWORDS)
_BUILTINS = "|".join(BUILTINS)


@lru_cache(maxsize=64)
def heredoc_state(terminator: str) -> State:
    """Build the state that consumes heredoc lines until *terminator* stands alone."""
    word = re.escape(terminator)
    return State(
        f"heredoc:{terminator}",
        (
            # whitespace but not newline around the word, so CRLF lines close too
            rule(rf"^[^\S\n]*{word}[^\S\n]*(?:\n|\Z)", HEREDOC, POP),
            # one line at a time, never crossing a newline
            rule(r".*?(?:\n|\Z)", HEREDOC),
        ),
    )


def _open_heredoc(m: re.Match[str]) -> State:
    return heredoc_state(m.group(2))


SHELL = build_grammar(
    "shell",
    {
        "basic": [
            rule(r"#.*(?:\n|\Z)", COMMENT),
            rule(rf"\b(?:{_KEYWORDS})\s*\b", KEYWORD),
            rule(r"\bcase\b", KEYWORD, "case"),
            rule(rf"\b(?:{_BUILTINS})\s*\b(?!\.)", BUILTIN),
            rule(r"(\b\w+)(=)", (VARIABLE, OPERATOR)),
            rule(r"[\[\]{}()=]", OPERATOR),
            rule(r"&&|\|\|", OPERATOR),
            rule(r"<<<", OPERATOR),  # here-string
            rule(r"""<<-?\s*(['"]?)\\?(\w+)\1""", HEREDOC, _open_heredoc),
        ],
        "data": [
            rule(r"\s+", TEXT),
            rule(r"\\.", ESCAPE),
            rule(r'\$?"', DOUBLE, "double_quotes"),
            # POSIX: single quotes preserve every enclosed character literally,
            # so the state just scans to the next quote.
            rule(r"\$?'", SINGLE, "single_quotes"),
            rule(r"\*", KEYWORD),
            rule(r";", TEXT),
            rule(r"""[^=*\s{}()$"'`\\<]+""", TEXT),
            rule(r"\d+(?=\s|\Z)", NUMBER),
            rule(r"<", TEXT),
            include("interp"),
        ],
        "double_quotes": [
            # "abc$" is the literal string abc$, so $" must close, not interpolate
            rule(r'(?:\$#?)?"', DOUBLE, POP),
            include("interp"),
            rule(r'[^"`\\$]+', DOUBLE),
        ],
        "single_quotes": [
            rule(r"'", SINGLE, POP),
            rule(r"[^']+", SINGLE),
        ],
        "curly": [
            rule(r"\}", KEYWORD, POP),
            rule(r":-", KEYWORD),
            rule(r"[a-zA-Z0-9_]+", VARIABLE),
            rule(r"""[^}:"'`$]+""", PUNCTUATION),
            include("root"),
        ],
        "paren": [
            rule(r"\)", KEYWORD, POP),
            include("root"),
        ],
        "math": [
            rule(r"\)\)", KEYWORD, POP),
            rule(r"[-+*/%^|&]|\*\*|\|\|", OPERATOR),
            rule(r"\d+", NUMBER),
            include("root"),
        ],
        "case": [
            rule(r"\besac\b", KEYWORD, POP),
            rule(r"\|", PUNCTUATION),
            rule(r"\)", PUNCTUATION, "case_stanza"),
            include("root"),
        ],
        "case_stanza": [
            rule(r";;", PUNCTUATION, POP),
            include("root"),
        ],
        "backticks": [
            rule(r"`", BACKTICK, POP),
            include("root"),
        ],
        "interp": [
            rule(r"\\$", ESCAPE),  # line continuation
            rule(r"\\.", ESCAPE),
            rule(r"\$\(\(", KEYWORD, "math"),
            rule(r"\$\(", KEYWORD, "paren"),
            rule(r"\$\{#?", KEYWORD, "curly"),
            rule(r"`", BACKTICK, "backticks"),
            rule(r"\$#?(\w+|.)", VARIABLE),
        ],
        "root": [
            include("basic"),
            include("data"),
        ],
    },
)
