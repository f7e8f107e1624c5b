"""Lexical index advisor.

Proposes candidate ``CREATE INDEX`` statements for the columns a query
filters, joins, sorts or groups on.  The analysis is a handful of regular
expressions over comment-free SQL with string literals blanked out; it never
parses the statement and knows nothing about existing indexes, so every
suggestion is advisory.

Column references are attributed to tables in three steps: a qualifier that
matches a FROM/JOIN alias wins, then one that matches a table name, and
anything else (including unqualified columns) falls back to the first table
referenced by the query.  A query that references no table yields no
suggestions.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from pydantic import BaseModel, Field

from workbench_core.parser.dialects import Dialect, format_identifier

logger = logging.getLogger(__name__)


class IndexReason(str, Enum):
    """Clause that produced a suggestion."""

    WHERE = "where"
    JOIN = "join"
    ORDER_BY = "order_by"
    GROUP_BY = "group_by"


class IndexSuggestion(BaseModel):
    """A candidate index for one table."""

    table: str = Field(..., description="Table the index would be created on.")
    columns: list[str] = Field(..., min_length=1, description="Indexed columns, in order.")
    reason: str = Field(..., description="Human-readable explanation.")
    reason_kind: IndexReason = Field(..., description="Clause the columns came from.")
    sql: str = Field(..., description="CREATE INDEX statement quoted for the dialect.")


# ---------------------------------------------------------------------------
# Lexical helpers
# ---------------------------------------------------------------------------

# fmt: off
_RESERVED_WORDS = frozenset(
    {
        "select", "from", "where", "join", "inner", "left", "right", "outer",
        "full", "cross", "natural", "lateral", "using",
        "on", "and", "or", "not", "in", "between", "like", "order", "group",
        "having", "limit", "offset", "union", "intersect", "except", "as",
        "set", "update", "insert", "delete", "create", "alter", "drop",
        "index", "table", "view", "into", "values", "null", "true", "false",
    }
)
# fmt: on

_LINE_COMMENT_RE = re.compile(r"--[^\n]*")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_STRING_LITERAL_RE = re.compile(r"'(?:[^']|'')*'")

_TABLE_REF_RE = re.compile(r"\b(?:FROM|JOIN)\s+(?:(\w+)\.)?(\w+)", re.IGNORECASE)
_ALIAS_RE = re.compile(r"\s+(?:AS\s+)?(\w+)", re.IGNORECASE)

_WHERE_CLAUSE_RE = re.compile(
    r"\bWHERE\b(.*?)(?=\bGROUP\b|\bORDER\b|\bLIMIT\b|\bHAVING\b|\bUNION\b|;|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_WHERE_COLUMN_RE = re.compile(
    r"\b(?:(\w+)\.)?(\w+)\s*(?:!=|<>|>=|<=|=|>|<|\bLIKE\b|\bIN\b|\bIS\b|\bBETWEEN\b)",
    re.IGNORECASE,
)
_ON_CLAUSE_RE = re.compile(
    r"\bON\s+(.*?)(?=\bJOIN\b|\bWHERE\b|\bGROUP\b|\bORDER\b|\bLIMIT\b|;|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_EQUI_JOIN_RE = re.compile(r"\b(?:(\w+)\.)?(\w+)\s*=\s*(?:(\w+)\.)?(\w+)")
_ORDER_BY_RE = re.compile(
    r"\bORDER\s+BY\b(.*?)(?=\bLIMIT\b|\bOFFSET\b|\bFETCH\b|\bUNION\b|;|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_ORDER_ITEM_RE = re.compile(
    r"(?:(\w+)\.)?(\w+)(?:\s+(?:ASC|DESC))?(?:\s+NULLS\s+(?:FIRST|LAST))?",
    re.IGNORECASE,
)
_GROUP_BY_RE = re.compile(
    r"\bGROUP\s+BY\b(.*?)(?=\bHAVING\b|\bORDER\b|\bLIMIT\b|\bUNION\b|;|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_GROUP_ITEM_RE = re.compile(r"(?:(\w+)\.)?(\w+)")


def _is_column_token(word: str) -> bool:
    return word.lower() not in _RESERVED_WORDS and not word[0].isdigit()


def _normalise(sql: str) -> str:
    """Drop comments and empty every string literal."""
    text = _BLOCK_COMMENT_RE.sub(" ", sql)
    text = _LINE_COMMENT_RE.sub("", text)
    return _STRING_LITERAL_RE.sub("''", text).strip()


class _TableRef(BaseModel):
    name: str
    alias: str | None = None


# (qualifier, columns); the qualifier is "" for unqualified references.
_ColumnRef = tuple[str, list[str]]


def _referenced_tables(sql: str) -> list[_TableRef]:
    tables: list[_TableRef] = []
    for m in _TABLE_REF_RE.finditer(sql):
        name = m.group(2)
        if not _is_column_token(name):
            continue
        alias_match = _ALIAS_RE.match(sql, m.end())
        alias = alias_match.group(1) if alias_match else None
        if alias is not None and not _is_column_token(alias):
            alias = None
        tables.append(_TableRef(name=name, alias=alias))
    return tables


def _where_columns(sql: str) -> list[_ColumnRef]:
    m = _WHERE_CLAUSE_RE.search(sql)
    if not m:
        return []
    return [
        (cm.group(1) or "", [cm.group(2)])
        for cm in _WHERE_COLUMN_RE.finditer(m.group(1))
        if _is_column_token(cm.group(2))
    ]


def _join_columns(sql: str) -> list[_ColumnRef]:
    refs: list[_ColumnRef] = []
    for on in _ON_CLAUSE_RE.finditer(sql):
        for m in _EQUI_JOIN_RE.finditer(on.group(1)):
            left_table, left_col, right_table, right_col = m.groups()
            if _is_column_token(left_col):
                refs.append((left_table or "", [left_col]))
            if _is_column_token(right_col):
                refs.append((right_table or "", [right_col]))
    return refs


def _list_columns(sql: str, clause_re: re.Pattern[str], item_re: re.Pattern[str]) -> list[_ColumnRef]:
    """Collect the plain column items of an ORDER BY / GROUP BY list as one reference.

    Items that are expressions rather than (qualified) column names are
    skipped.  The last qualifier seen applies to the whole list.
    """
    m = clause_re.search(sql)
    if not m:
        return []

    qualifier = ""
    columns: list[str] = []
    for part in m.group(1).split(","):
        item = item_re.fullmatch(part.strip())
        if item and _is_column_token(item.group(2)):
            if item.group(1):
                qualifier = item.group(1)
            columns.append(item.group(2))
    return [(qualifier, columns)] if columns else []


def _resolve_table(qualifier: str, tables: list[_TableRef]) -> str:
    if qualifier:
        wanted = qualifier.lower()
        for t in tables:
            if t.alias and t.alias.lower() == wanted:
                return t.name
        for t in tables:
            if t.name.lower() == wanted:
                return t.name
    return tables[0].name


def _create_index_sql(table: str, columns: list[str], dialect: Dialect | str) -> str:
    index_name = f"idx_{table}_{'_'.join(columns)}".lower()
    column_list = ", ".join(format_identifier(c, dialect) for c in columns)
    return (
        f"CREATE INDEX {format_identifier(index_name, dialect)} "
        f"ON {format_identifier(table, dialect)} ({column_list});"
    )


def _reason_text(kind: IndexReason, columns: list[str]) -> str:
    if kind is IndexReason.WHERE:
        return f"Column{'s' if len(columns) > 1 else ''} used in WHERE clause"
    if kind is IndexReason.JOIN:
        return "Column used in JOIN condition"
    if kind is IndexReason.ORDER_BY:
        return "Column used in ORDER BY; an index can avoid the sort"
    return "Column used in GROUP BY; an index can speed up grouping"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze_query_for_indexes(sql: str, dialect: Dialect | str) -> list[IndexSuggestion]:
    """Suggest indexes for the columns *sql* filters, joins, sorts or groups on.

    Parameters
    ----------
    sql:
        A single statement.  Comments and literal contents are ignored.
    dialect:
        Target database; controls identifier quoting in the generated DDL.

    Returns
    -------
    list[IndexSuggestion]
        Suggestions in clause order (WHERE, JOIN, ORDER BY, GROUP BY).  A
        table/column-list pair is suggested once, with the reason of the
        clause that found it first.
    """
    normalized = _normalise(sql)
    tables = _referenced_tables(normalized)
    if not tables:
        logger.debug("No FROM/JOIN tables found; no index suggestions")
        return []

    candidates: list[tuple[IndexReason, list[_ColumnRef]]] = [
        (IndexReason.WHERE, _where_columns(normalized)),
        (IndexReason.JOIN, _join_columns(normalized)),
        (IndexReason.ORDER_BY, _list_columns(normalized, _ORDER_BY_RE, _ORDER_ITEM_RE)),
        (IndexReason.GROUP_BY, _list_columns(normalized, _GROUP_BY_RE, _GROUP_ITEM_RE)),
    ]

    suggestions: list[IndexSuggestion] = []
    seen: set[tuple[str, tuple[str, ...]]] = set()
    for kind, refs in candidates:
        for qualifier, columns in refs:
            table = _resolve_table(qualifier, tables)
            key = (table, tuple(columns))
            if key in seen:
                continue
            seen.add(key)
            suggestions.append(
                IndexSuggestion(
                    table=table,
                    columns=columns,
                    reason=_reason_text(kind, columns),
                    reason_kind=kind,
                    sql=_create_index_sql(table, columns, dialect),
                )
            )

    logger.debug(
        "Index advisor: %d table(s) referenced, %d suggestion(s)",
        len(tables),
        len(suggestions),
    )
    return suggestions
