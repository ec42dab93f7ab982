"""Lexical states, rules, and the table builder that resolves mixins."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from shellex.errors import GrammarError
from shellex.tokens import TokenKind

POP = "#pop"

# Rule patterns are tried with Pattern.match at the cursor; ^ and $ are line anchors.
_FLAGS = re.MULTILINE

Action = TokenKind | tuple[TokenKind, ...]


@dataclass(frozen=True, slots=True)
class Rule:
    """One pattern -> action entry of a state.

    ``action`` is either a single kind covering the whole match or one kind
    per capture group. ``transition`` is None (stay), POP, the name of a
    state to push, or a callable building a fresh State from the match.
    """

    pattern: re.Pattern[str]
    action: Action
    transition: str | Callable[[re.Match[str]], State] | None = None


@dataclass(frozen=True, slots=True)
class Include:
    """Mixin marker: splice another state's rules in at this point."""

    state: str


@dataclass(frozen=True, slots=True)
class State:
    name: str
    rules: tuple[Rule, ...]


@dataclass(frozen=True, slots=True)
class Grammar:
    """A resolved, read-only state table."""

    name: str
    states: Mapping[str, State]
    root: str = "root"

    def __getitem__(self, name: str) -> State:
        return self.states[name]


def rule(
    pattern: str,
    action: Action,
    transition: str | Callable[[re.Match[str]], State] | None = None,
) -> Rule:
    """Compile *pattern* into a Rule."""
    return Rule(re.compile(pattern, _FLAGS), action, transition)


def include(state: str) -> Include:
    return Include(state)


def build_grammar(
    name: str,
    table: Mapping[str, list[Rule | Include]],
    root: str = "root",
) -> Grammar:
    """Flatten every state's includes into a plain rule tuple and validate targets.

    Includes are resolved once here, so dispatch at lex time is a flat scan.
    """
    if root not in table:
        raise GrammarError(f"root state '{root}' is not defined")

    resolved: dict[str, tuple[Rule, ...]] = {}

    def resolve(state: str, chain: tuple[str, ...]) -> tuple[Rule, ...]:
        if state in resolved:
            return resolved[state]
        if state in chain:
            cycle = " -> ".join((*chain, state))
            raise GrammarError(f"cyclic include: {cycle}", state)
        if state not in table:
            raise GrammarError(f"include of unknown state '{state}'", chain[-1])
        rules: list[Rule] = []
        for entry in table[state]:
            if isinstance(entry, Include):
                rules.extend(resolve(entry.state, (*chain, state)))
            else:
                rules.append(entry)
        resolved[state] = tuple(rules)
        return resolved[state]

    for state in table:
        resolve(state, ())

    for state, rules in resolved.items():
        for r in rules:
            if isinstance(r.action, tuple) and r.pattern.groups < len(r.action):
                raise GrammarError(
                    f"rule '{r.pattern.pattern}' has {r.pattern.groups} groups "
                    f"for {len(r.action)} token kinds",
                    state,
                )
            target = r.transition
            if isinstance(target, str) and target != POP and target not in resolved:
                raise GrammarError(
                    f"rule '{r.pattern.pattern}' pushes unknown state '{target}'", state
                )

    states = {n: State(n, rs) for n, rs in resolved.items()}
    return Grammar(name, MappingProxyType(states), root)
