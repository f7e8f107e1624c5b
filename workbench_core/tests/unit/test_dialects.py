"""Unit tests for workbench_core.parser.dialects."""

from __future__ import annotations

import pytest

from workbench_core.parser.dialects import (
    Dialect,
    UnsupportedDialectError,
    build_explain_query,
    format_identifier,
    qualify_table_name,
    quote_identifier,
)

# ---------------------------------------------------------------------------
# Dialect.parse
# ---------------------------------------------------------------------------


class TestDialectParse:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("postgresql", Dialect.POSTGRESQL),
            ("PostgreSQL", Dialect.POSTGRESQL),
            ("postgres", Dialect.POSTGRESQL),
            ("pg", Dialect.POSTGRESQL),
            ("MySQL", Dialect.MYSQL),
            ("MariaDB", Dialect.MARIADB),
            ("SQLite", Dialect.SQLITE),
            ("sqlite3", Dialect.SQLITE),
            ("MSSQL", Dialect.MSSQL),
            ("SQL Server", Dialect.MSSQL),
            ("tsql", Dialect.MSSQL),
            ("CockroachDB", Dialect.COCKROACHDB),
            (" duckdb ", Dialect.DUCKDB),
        ],
    )
    def test_names_and_aliases(self, name, expected):
        assert Dialect.parse(name) is expected

    def test_unknown_dialect_raises(self):
        with pytest.raises(UnsupportedDialectError, match="Unsupported dialect"):
            Dialect.parse("cassandra")

    def test_unsupported_dialect_is_value_error(self):
        assert issubclass(UnsupportedDialectError, ValueError)

    def test_families(self):
        assert Dialect.MARIADB.is_mysql_family
        assert Dialect.REDSHIFT.is_postgres_family
        assert not Dialect.SQLITE.is_mysql_family
        assert not Dialect.MSSQL.is_postgres_family


# ---------------------------------------------------------------------------
# Identifier quoting
# ---------------------------------------------------------------------------


class TestQuoteIdentifier:
    def test_postgres_double_quotes(self):
        assert quote_identifier("users", Dialect.POSTGRESQL) == '"users"'

    def test_mysql_backticks(self):
        assert quote_identifier("users", Dialect.MYSQL) == "`users`"

    def test_mariadb_uses_mysql_quoting(self):
        assert quote_identifier("users", "MariaDB") == "`users`"

    def test_mssql_brackets(self):
        assert quote_identifier("users", Dialect.MSSQL) == "[users]"

    def test_embedded_double_quote_is_escaped(self):
        assert quote_identifier('a"b', Dialect.POSTGRESQL) == '"a""b"'

    def test_embedded_backtick_is_escaped(self):
        assert quote_identifier("a`b", Dialect.MYSQL) == "`a``b`"


class TestFormatIdentifier:
    def test_plain_name_stays_bare(self):
        assert format_identifier("order_items", Dialect.POSTGRESQL) == "order_items"

    def test_name_with_space_is_quoted(self):
        assert format_identifier("order items", Dialect.POSTGRESQL) == '"order items"'

    def test_name_with_space_is_quoted_for_mysql(self):
        assert format_identifier("order items", Dialect.MYSQL) == "`order items`"


class TestQualifyTableName:
    def test_active_schema_returns_bare_name(self):
        assert qualify_table_name("public", "users", "public", Dialect.POSTGRESQL) == "users"

    def test_other_schema_is_qualified_and_quoted(self):
        assert qualify_table_name("sales", "orders", "public", Dialect.POSTGRESQL) == '"sales"."orders"'

    def test_no_active_schema(self):
        assert qualify_table_name("app", "users", None, Dialect.MYSQL) == "`app`.`users`"


# ---------------------------------------------------------------------------
# build_explain_query
# ---------------------------------------------------------------------------


class TestBuildExplainQuery:
    @pytest.mark.parametrize(
        ("dialect", "expected"),
        [
            (Dialect.POSTGRESQL, "EXPLAIN (ANALYZE, FORMAT JSON) SELECT 1"),
            (Dialect.COCKROACHDB, "EXPLAIN (ANALYZE, FORMAT JSON) SELECT 1"),
            (Dialect.MYSQL, "EXPLAIN FORMAT=JSON SELECT 1"),
            (Dialect.MARIADB, "EXPLAIN FORMAT=JSON SELECT 1"),
            (Dialect.SQLITE, "EXPLAIN QUERY PLAN SELECT 1"),
            (Dialect.DUCKDB, "EXPLAIN SELECT 1"),
        ],
    )
    def test_dialect_forms(self, dialect, expected):
        assert build_explain_query("SELECT 1", dialect) == expected

    def test_trailing_semicolon_is_stripped(self):
        assert build_explain_query("SELECT 1;  \n", "sqlite") == "EXPLAIN QUERY PLAN SELECT 1"

    def test_mssql_showplan_wrapper(self):
        out = build_explain_query("SELECT 1;", Dialect.MSSQL)
        assert out == "SET SHOWPLAN_TEXT ON;\nSELECT 1;\nSET SHOWPLAN_TEXT OFF"
