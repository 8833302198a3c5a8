"""Tests for the query tokenizer and clause parser."""

from __future__ import annotations

import pytest

from medialib.query import Clause, parse_query, reconstruct_clauses, tokenize

RAW_QUERY = 'Foo bar kw:term kw2 : term2 -greeb graggle kw3: -"term 3"'

EXPECTED_TOKENS = [
    "Foo",
    "bar",
    "kw",
    ":",
    "term",
    "kw2",
    ":",
    "term2",
    "-",
    "greeb",
    "graggle",
    "kw3",
    ":",
    "-",
    "term 3",
]

EXPECTED_CLAUSES = [
    Clause("", "Foo", False),
    Clause("", "bar", False),
    Clause("kw", "term", False),
    Clause("kw2", "term2", False),
    Clause("", "greeb", True),
    Clause("", "graggle", False),
    Clause("kw3", "term 3", True),
]


class TestTokenize:
    def test_reference_query(self):
        assert tokenize(RAW_QUERY) == EXPECTED_TOKENS

    def test_blank_input(self):
        assert tokenize("") == []
        assert tokenize("   \t ") == []

    def test_quoted_text_keeps_spaces_and_operators(self):
        assert tokenize('"AC-DC: live at donington"') == ["AC-DC: live at donington"]

    def test_unterminated_quote_runs_to_end(self):
        assert tokenize('artist:"janelle mon') == ["artist", ":", "janelle mon"]

    def test_empty_quotes_emit_nothing(self):
        assert tokenize('"" foo') == ["foo"]

    def test_dash_inside_a_word_is_not_an_operator(self):
        assert tokenize("ac-dc") == ["ac-dc"]

    def test_operators_at_a_boundary_are_tokens(self):
        assert tokenize("- : -x") == ["-", ":", "-", "x"]


class TestReconstructClauses:
    def test_reference_query(self):
        assert reconstruct_clauses(EXPECTED_TOKENS) == EXPECTED_CLAUSES

    def test_no_tokens(self):
        assert reconstruct_clauses([]) == []

    def test_trailing_negation_is_dropped(self):
        assert reconstruct_clauses(["foo", "-"]) == [Clause("", "foo", False)]

    def test_keyword_without_term_becomes_plain_term(self):
        assert reconstruct_clauses(["artist", ":"]) == [Clause("", "artist", False)]
        assert reconstruct_clauses(["artist", ":", "-"]) == [Clause("", "artist", False)]

    def test_stray_separator_is_dropped(self):
        assert reconstruct_clauses([":", "foo"]) == [Clause("", "foo", False)]

    def test_order_is_preserved(self):
        tokens = ["b", "a", "year", ":", "1980"]
        assert reconstruct_clauses(tokens) == [
            Clause("", "b"),
            Clause("", "a"),
            Clause("year", "1980"),
        ]


class TestParseQuery:
    def test_terms_and_keywords_are_normalized(self):
        assert parse_query('ARTIST:"Janelle Monáe" -Remix') == [
            Clause("artist", "janelle monae", False),
            Clause("", "remix", True),
        ]

    def test_blank_query_has_no_clauses(self):
        assert parse_query("   ") == []

    @pytest.mark.parametrize(
        "raw",
        ['"', "-", ":", '::--""', 'a:"', "- -", "kw: -", '"unterminated -x'],
    )
    def test_malformed_queries_never_raise(self, raw):
        clauses = parse_query(raw)
        assert isinstance(clauses, list)
