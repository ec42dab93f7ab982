"""Test grammar construction: mixin resolution, validation, and the engine on small tables."""

from __future__ import annotations

import re

import pytest

from shellex.errors import GrammarError
from shellex.lexer import Lexer
from shellex.rules import POP, State, build_grammar, include, rule
from shellex.shell import BUILTINS, KEYWORDS, SHELL
from shellex.tokens import TokenKind

from .conftest import assert_pairs

K = TokenKind


class TestShellTable:
    def test_state_names(self):
        assert set(SHELL.states) == {
            "basic",
            "data",
            "double_quotes",
            "single_quotes",
            "curly",
            "paren",
            "math",
            "case",
            "case_stanza",
            "backticks",
            "interp",
            "root",
        }

    def test_root_is_basic_then_data(self):
        assert SHELL["root"].rules == SHELL["basic"].rules + SHELL["data"].rules

    def test_data_ends_with_interp(self):
        interp = SHELL["interp"].rules
        assert SHELL["data"].rules[-len(interp) :] == interp

    def test_comment_rule_comes_first(self):
        assert SHELL["root"].rules[0].action is K.COMMENT

    def test_assignment_precedes_operators(self):
        actions = [r.action for r in SHELL["basic"].rules]
        assignment = actions.index((K.NAME_VARIABLE, K.OPERATOR))
        first_operator = actions.index(K.OPERATOR)
        assert assignment < first_operator

    def test_substates_end_with_root(self):
        root = SHELL["root"].rules
        for name in ("curly", "paren", "math", "case", "case_stanza", "backticks"):
            assert SHELL[name].rules[-len(root) :] == root, name

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            SHELL.states["extra"] = State("extra", ())  # type: ignore[index]

    def test_vocabularies(self):
        assert "case" not in KEYWORDS
        assert "esac" in KEYWORDS
        assert len(BUILTINS) == len(set(BUILTINS))
        assert {"cd", "echo", "export", "read", "set", "trap"} <= set(BUILTINS)


class TestBuildGrammar:
    def test_include_is_flattened(self):
        g = build_grammar(
            "t",
            {
                "root": [rule(r"a", K.TEXT), include("more")],
                "more": [rule(r"b", K.KEYWORD)],
            },
        )
        assert [r.pattern.pattern for r in g["root"].rules] == ["a", "b"]

    def test_missing_root(self):
        with pytest.raises(GrammarError, match="root state"):
            build_grammar("t", {"start": [rule(r"a", K.TEXT)]})

    def test_unknown_include(self):
        with pytest.raises(GrammarError, match="unknown state 'nope'") as exc_info:
            build_grammar("t", {"root": [include("nope")]})
        assert exc_info.value.state == "root"

    def test_cyclic_include(self):
        with pytest.raises(GrammarError, match="cyclic include"):
            build_grammar(
                "t",
                {"root": [include("a")], "a": [include("b")], "b": [include("a")]},
            )

    def test_push_to_unknown_state(self):
        with pytest.raises(GrammarError, match="pushes unknown state 'gone'"):
            build_grammar("t", {"root": [rule(r"a", K.TEXT, "gone")]})

    def test_group_count_mismatch(self):
        with pytest.raises(GrammarError, match="groups"):
            build_grammar("t", {"root": [rule(r"(a)", (K.TEXT, K.KEYWORD))]})

    def test_error_message_names_state(self):
        err = GrammarError("boom", "curly")
        assert str(err) == "grammar error in state 'curly': boom"


class TestEngine:
    def test_push_and_pop(self):
        g = build_grammar(
            "t",
            {
                "root": [rule(r"a+", K.TEXT), rule(r"b", K.KEYWORD, "inner")],
                "inner": [rule(r"c", K.PUNCTUATION, POP)],
            },
        )
        lx = Lexer("aabca", g)
        assert_pairs(
            lx.tokenize(),
            [(K.TEXT, "aa"), (K.KEYWORD, "b"), (K.PUNCTUATION, "c"), (K.TEXT, "a")],
        )
        assert lx.state_stack == ("root",)

    def test_pop_never_removes_root(self):
        g = build_grammar("t", {"root": [rule(r"x", K.TEXT, POP)]})
        lx = Lexer("xxx", g)
        assert len(lx.tokenize()) == 3
        assert lx.state_stack == ("root",)

    def test_zero_width_match_is_skipped(self):
        g = build_grammar("t", {"root": [rule(r"(?=a)", K.TEXT), rule(r"a", K.KEYWORD)]})
        assert_pairs(Lexer("a", g).tokenize(), [(K.KEYWORD, "a")])

    def test_unmatched_character_falls_back(self):
        g = build_grammar("t", {"root": [rule(r"a", K.TEXT)]})
        assert_pairs(Lexer("aza", g).tokenize(), [(K.TEXT, "a"), (K.ERROR, "z"), (K.TEXT, "a")])

    def test_text_between_groups_is_kept(self):
        g = build_grammar("t", {"root": [rule(r"(a)-(b)", (K.KEYWORD, K.OPERATOR))]})
        assert_pairs(
            Lexer("a-b", g).tokenize(),
            [(K.KEYWORD, "a"), (K.TEXT, "-"), (K.OPERATOR, "b")],
        )

    def test_dynamic_state(self):
        def until(m: re.Match[str]) -> State:
            return State("until", (rule(re.escape(m.group(1)), K.PUNCTUATION, POP),))

        g = build_grammar(
            "t",
            {"root": [rule(r"<(\w)", K.KEYWORD, until), rule(r"\w", K.TEXT)]},
        )
        lx = Lexer("<xyzx", g)
        tokens = lx.tokenize()
        assert [t.kind for t in tokens] == [K.KEYWORD, K.ERROR, K.ERROR, K.PUNCTUATION]
        assert lx.state_stack == ("root",)

    def test_open_contexts_record_entry_position(self):
        lx = Lexer('echo "abc')
        lx.tokenize()
        [(name, opened)] = lx.open_contexts()
        assert name == "double_quotes"
        assert opened.column == 6

    def test_stream_is_lazy(self):
        stream = Lexer("a b c").stream()
        first = next(stream)
        assert first.text == "a"
