"""Database dialects and dialect-specific SQL text helpers.

Identifier quoting is delegated to SQLGlot's generator so that each dialect
gets its native quote characters (backticks for the MySQL family, brackets for
SQL Server, double quotes elsewhere) and embedded quote characters are escaped
the way that dialect expects.
"""

from __future__ import annotations

import enum
import re

from sqlglot import exp


class UnsupportedDialectError(ValueError):
    """Raised when a dialect name does not match any supported database."""


class Dialect(str, enum.Enum):
    """Databases whose SQL text and plan reports the engine understands."""

    POSTGRESQL = "postgresql"
    COCKROACHDB = "cockroachdb"
    REDSHIFT = "redshift"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    SQLITE = "sqlite"
    MSSQL = "mssql"
    CLICKHOUSE = "clickhouse"
    ORACLE = "oracle"
    SNOWFLAKE = "snowflake"
    BIGQUERY = "bigquery"
    DUCKDB = "duckdb"

    @classmethod
    def parse(cls, name: str) -> Dialect:
        """Resolve a dialect from its value or a common alias, case-insensitively."""
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedDialectError(f"Unsupported dialect: {name!r}") from None

    @property
    def sqlglot_name(self) -> str:
        """Name of the matching SQLGlot dialect."""
        return _SQLGLOT_DIALECTS[self]

    @property
    def is_mysql_family(self) -> bool:
        return self in (Dialect.MYSQL, Dialect.MARIADB)

    @property
    def is_postgres_family(self) -> bool:
        return self in (Dialect.POSTGRESQL, Dialect.COCKROACHDB, Dialect.REDSHIFT)


_ALIASES: dict[str, str] = {
    "postgres": "postgresql",
    "pg": "postgresql",
    "cockroach": "cockroachdb",
    "maria": "mariadb",
    "sqlserver": "mssql",
    "sql server": "mssql",
    "tsql": "mssql",
    "sqlite3": "sqlite",
}

_SQLGLOT_DIALECTS: dict[Dialect, str] = {
    Dialect.POSTGRESQL: "postgres",
    Dialect.COCKROACHDB: "postgres",
    Dialect.REDSHIFT: "redshift",
    Dialect.MYSQL: "mysql",
    Dialect.MARIADB: "mysql",
    Dialect.SQLITE: "sqlite",
    Dialect.MSSQL: "tsql",
    Dialect.CLICKHOUSE: "clickhouse",
    Dialect.ORACLE: "oracle",
    Dialect.SNOWFLAKE: "snowflake",
    Dialect.BIGQUERY: "bigquery",
    Dialect.DUCKDB: "duckdb",
}


def _as_dialect(dialect: Dialect | str) -> Dialect:
    return dialect if isinstance(dialect, Dialect) else Dialect.parse(dialect)


# ---------------------------------------------------------------------------
# Identifier quoting
# ---------------------------------------------------------------------------


def quote_identifier(name: str, dialect: Dialect | str) -> str:
    """Always quote *name* with the dialect's identifier delimiters."""
    d = _as_dialect(dialect)
    return exp.to_identifier(name, quoted=True).sql(dialect=d.sqlglot_name)


def format_identifier(name: str, dialect: Dialect | str) -> str:
    """Quote *name* only when it is not a plain ``[A-Za-z_][A-Za-z0-9_]*`` word."""
    d = _as_dialect(dialect)
    return exp.to_identifier(name).sql(dialect=d.sqlglot_name)


def qualify_table_name(
    schema_name: str,
    table_name: str,
    active_schema: str | None,
    dialect: Dialect | str,
) -> str:
    """Return ``schema.table`` unless *schema_name* is the active schema.

    Tables in the active schema are returned bare, exactly as given, so the
    editor inserts what the user would type.
    """
    if active_schema and schema_name == active_schema:
        return table_name
    return f"{quote_identifier(schema_name, dialect)}.{quote_identifier(table_name, dialect)}"


# ---------------------------------------------------------------------------
# EXPLAIN
# ---------------------------------------------------------------------------

_TRAILING_SEMICOLON_RE = re.compile(r";\s*$")


def build_explain_query(sql: str, dialect: Dialect | str) -> str:
    """Wrap *sql* in the EXPLAIN form whose output the plan normalizer reads.

    PostgreSQL-family dialects request an analysed JSON plan, MySQL/MariaDB a
    JSON plan, SQLite the tabular ``EXPLAIN QUERY PLAN``.
    """
    d = _as_dialect(dialect)
    trimmed = _TRAILING_SEMICOLON_RE.sub("", sql)

    if d.is_postgres_family:
        return f"EXPLAIN (ANALYZE, FORMAT JSON) {trimmed}"
    if d.is_mysql_family:
        return f"EXPLAIN FORMAT=JSON {trimmed}"
    if d is Dialect.SQLITE:
        return f"EXPLAIN QUERY PLAN {trimmed}"
    if d is Dialect.MSSQL:
        return f"SET SHOWPLAN_TEXT ON;\n{trimmed};\nSET SHOWPLAN_TEXT OFF"
    return f"EXPLAIN {trimmed}"
