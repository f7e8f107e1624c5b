"""Unit tests for workbench_core.parser.parameters."""

from __future__ import annotations

import pytest

from workbench_core.parser.parameters import (
    ParameterStyle,
    detect_parameters,
    escape_value,
    substitute_parameters,
)


def _names(sql: str) -> list[str]:
    return [p.name for p in detect_parameters(sql)]


# ---------------------------------------------------------------------------
# detect_parameters
# ---------------------------------------------------------------------------


class TestDetectNumbered:
    def test_repeated_numbered_placeholder_deduped(self):
        params = detect_parameters("WHERE a = $1 AND b = $1 AND c = $2")
        assert [p.name for p in params] == ["$1", "$2"]
        assert all(p.style is ParameterStyle.NUMBERED for p in params)

    def test_order_of_first_appearance(self):
        assert _names("SELECT $2, $1, $2") == ["$2", "$1"]

    def test_multi_digit(self):
        assert _names("SELECT $10") == ["$10"]

    def test_dollar_without_digit_is_not_a_parameter(self):
        assert _names("SELECT $$body$$") == []


class TestDetectNamed:
    def test_named_placeholders(self):
        params = detect_parameters("SELECT * FROM t WHERE id = :id AND name = :user_name")
        assert [p.name for p in params] == [":id", ":user_name"]
        assert all(p.style is ParameterStyle.NAMED for p in params)

    def test_repeated_named_deduped(self):
        assert _names("WHERE a = :x OR b = :x") == [":x"]

    def test_cast_is_not_a_parameter(self):
        assert _names("SELECT x::int FROM t") == []

    def test_array_cast_is_not_a_parameter(self):
        assert _names("SELECT x::text[] FROM t WHERE y = :y") == [":y"]

    def test_colon_followed_by_digit_is_not_named(self):
        assert _names("SELECT '10:30', a[1:2] FROM t") == []


class TestDetectPositional:
    def test_each_question_mark_is_distinct(self):
        params = detect_parameters("INSERT INTO t VALUES (?, ?, ?)")
        assert [p.name for p in params] == ["?1", "?2", "?3"]
        assert [p.index for p in params] == [0, 1, 2]
        assert all(p.style is ParameterStyle.POSITIONAL for p in params)

    @pytest.mark.parametrize("op", ["?|", "?&"])
    def test_jsonb_operators_are_not_placeholders(self, op):
        assert _names(f"SELECT data {op} array['a'] FROM t") == []

    def test_double_question_mark_is_not_a_placeholder(self):
        assert _names("SELECT a ?? b") == []


class TestDetectSkippedContexts:
    def test_placeholders_in_string_literal_ignored(self):
        assert _names("SELECT '$1 :name ?' FROM t WHERE a = $1") == ["$1"]

    def test_placeholders_in_quoted_identifier_ignored(self):
        assert _names('SELECT ":col?" FROM t') == []

    def test_placeholders_in_comments_ignored(self):
        sql = "SELECT 1 -- where x = :x\n/* and ? */ WHERE y = :y"
        assert _names(sql) == [":y"]

    def test_mixed_styles_share_index_sequence(self):
        params = detect_parameters("SELECT $1, :name, ?")
        assert [(p.name, p.index) for p in params] == [("$1", 0), (":name", 1), ("?1", 2)]

    def test_no_placeholders(self):
        assert detect_parameters("SELECT 1") == []


# ---------------------------------------------------------------------------
# substitute_parameters
# ---------------------------------------------------------------------------


class TestSubstitute:
    def test_numbered_substitution_replaces_every_occurrence(self):
        sql = "WHERE a = $1 AND b = $1 AND c = $2"
        out = substitute_parameters(sql, {"$1": 5, "$2": "x"})
        assert out == "WHERE a = 5 AND b = 5 AND c = 'x'"

    def test_named_substitution(self):
        out = substitute_parameters("SELECT * FROM t WHERE name = :name", {":name": "O'Brien"})
        assert out == "SELECT * FROM t WHERE name = 'O''Brien'"

    def test_positional_substitution_in_order(self):
        out = substitute_parameters("VALUES (?, ?)", {"?1": 1, "?2": None})
        assert out == "VALUES (1, NULL)"

    def test_missing_values_are_left_untouched(self):
        assert substitute_parameters("SELECT $1, $2", {"$1": 1}) == "SELECT 1, $2"

    def test_prefix_token_not_replaced_inside_longer_token(self):
        assert substitute_parameters("SELECT $1, $10", {"$1": "a"}) == "SELECT 'a', $10"

    def test_literals_and_casts_are_untouched(self):
        sql = "SELECT ':name', x::int, :name"
        assert substitute_parameters(sql, {":name": 3, ":int": 9}) == "SELECT ':name', x::int, 3"

    def test_no_placeholder_remains_after_full_substitution(self):
        sql = "SELECT $1, :a, ? FROM t WHERE b = $2 AND c = :a AND d = ?"
        values = {p.name: "v" for p in detect_parameters(sql)}
        assert detect_parameters(substitute_parameters(sql, values)) == []


# ---------------------------------------------------------------------------
# escape_value
# ---------------------------------------------------------------------------


class TestEscapeValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "NULL"),
            ("NULL", "NULL"),
            ("null", "NULL"),
            (True, "TRUE"),
            (False, "FALSE"),
            (42, "42"),
            (-1.5, "-1.5"),
            ("42", "42"),
            ("-3.25", "-3.25"),
            (".5", ".5"),
            ("1e5", "'1e5'"),
            ("abc", "'abc'"),
            ("it's", "'it''s'"),
            ("", "''"),
            ("12abc", "'12abc'"),
            (1e20, "'1e+20'"),
            (float("nan"), "'nan'"),
            (float("inf"), "'inf'"),
            (float("-inf"), "'-inf'"),
        ],
    )
    def test_escape(self, value, expected):
        assert escape_value(value) == expected

    def test_non_finite_floats_are_substituted_as_strings(self):
        sql = substitute_parameters("SELECT $1, $2", {"$1": float("nan"), "$2": float("inf")})
        assert sql == "SELECT 'nan', 'inf'"
