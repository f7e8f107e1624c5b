"""Render a :class:`TableDiffResult` as a DDL migration script.

The script moves the *source* table's structure towards the *target*: new
columns are added, dropped columns removed, changed columns altered, and
indexes and foreign keys are dropped and recreated as needed.  Statement
forms differ per dialect (``MODIFY COLUMN`` on MySQL, ``ALTER COLUMN ... TYPE``
on PostgreSQL, and so on).  SQLite cannot alter a column in place, so those
changes become comments asking for a manual table rebuild.

The output is meant for review before it is run; nothing here executes SQL.
"""

from __future__ import annotations

import logging

from workbench_core.models.diff import DiffEntry, DiffStatus, TableDiffResult
from workbench_core.models.schema import ColumnDescriptor, ForeignKeyDescriptor, IndexDescriptor
from workbench_core.parser.dialects import Dialect, quote_identifier

logger = logging.getLogger(__name__)

NO_CHANGES_MARKER = "-- No changes detected"

_DEFAULT_ACTION = "NO ACTION"


class _Script:
    """Accumulates statements for one table, quoting identifiers for the dialect."""

    def __init__(self, schema: str, table: str, dialect: Dialect) -> None:
        self.dialect = dialect
        self.table = self.qualified(schema, table)
        self.lines: list[str] = []

    def quote(self, name: str) -> str:
        return quote_identifier(name, self.dialect)

    def qualified(self, schema: str, name: str) -> str:
        if not schema:
            return self.quote(name)
        return f"{self.quote(schema)}.{self.quote(name)}"

    def alter(self, clause: str) -> None:
        self.lines.append(f"ALTER TABLE {self.table} {clause};")

    def manual(self, what: str, column: str) -> None:
        self.lines.append(
            f'-- SQLite does not support {what}. Manual migration required for column "{column}".'
        )


def _column_definition(col: ColumnDescriptor) -> str:
    nullable = "" if col.is_nullable else " NOT NULL"
    default = f" DEFAULT {col.column_default}" if col.column_default else ""
    return f"{col.data_type}{nullable}{default}"


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


def _alter_column(script: _Script, entry: DiffEntry[ColumnDescriptor]) -> None:
    src, tgt = entry.source, entry.target
    if src is None or tgt is None:
        return
    d = script.dialect
    col = script.quote(entry.name)

    type_changed = src.data_type != tgt.data_type
    nullable_changed = src.is_nullable != tgt.is_nullable

    if d.is_mysql_family:
        # MODIFY COLUMN restates the whole definition, covering type and NULL-ability at once.
        if type_changed or nullable_changed:
            script.alter(f"MODIFY COLUMN {col} {_column_definition(tgt)}")
    elif d is Dialect.SQLITE:
        if type_changed:
            script.manual("ALTER COLUMN TYPE", entry.name)
        if nullable_changed:
            script.manual("ALTER COLUMN NULL constraint", entry.name)
    else:
        if type_changed:
            if d is Dialect.MSSQL:
                script.alter(f"ALTER COLUMN {col} {tgt.data_type}")
            else:
                script.alter(f"ALTER COLUMN {col} TYPE {tgt.data_type}")
        if nullable_changed:
            action = "DROP NOT NULL" if tgt.is_nullable else "SET NOT NULL"
            script.alter(f"ALTER COLUMN {col} {action}")

    if src.column_default != tgt.column_default:
        if d is Dialect.SQLITE:
            script.manual("ALTER COLUMN DEFAULT", entry.name)
        elif tgt.column_default:
            script.alter(f"ALTER COLUMN {col} SET DEFAULT {tgt.column_default}")
        else:
            script.alter(f"ALTER COLUMN {col} DROP DEFAULT")


def _column_statements(script: _Script, columns: list[DiffEntry[ColumnDescriptor]]) -> None:
    for entry in columns:
        if entry.status is DiffStatus.ADDED and entry.target is not None:
            script.alter(f"ADD COLUMN {script.quote(entry.name)} {_column_definition(entry.target)}")

    for entry in columns:
        if entry.status is DiffStatus.REMOVED:
            script.alter(f"DROP COLUMN {script.quote(entry.name)}")

    for entry in columns:
        if entry.status is DiffStatus.CHANGED:
            _alter_column(script, entry)


# ---------------------------------------------------------------------------
# Indexes and foreign keys
# ---------------------------------------------------------------------------


def _drop_index(script: _Script, name: str) -> None:
    if script.dialect.is_mysql_family:
        script.lines.append(f"DROP INDEX {script.quote(name)} ON {script.table};")
    else:
        script.lines.append(f"DROP INDEX {script.quote(name)};")


def _index_statements(script: _Script, indexes: list[DiffEntry[IndexDescriptor]]) -> None:
    for entry in indexes:
        if entry.status is DiffStatus.REMOVED:
            _drop_index(script, entry.name)

    for entry in indexes:
        if entry.status not in (DiffStatus.ADDED, DiffStatus.CHANGED) or entry.target is None:
            continue
        if entry.status is DiffStatus.CHANGED:
            _drop_index(script, entry.name)
        unique = "UNIQUE " if entry.target.is_unique else ""
        cols = ", ".join(script.quote(c) for c in entry.target.columns)
        script.lines.append(f"CREATE {unique}INDEX {script.quote(entry.name)} ON {script.table} ({cols});")


def _foreign_key_statements(script: _Script, foreign_keys: list[DiffEntry[ForeignKeyDescriptor]]) -> None:
    for entry in foreign_keys:
        if entry.status is DiffStatus.REMOVED:
            script.alter(f"DROP CONSTRAINT {script.quote(entry.name)}")

    for entry in foreign_keys:
        fk = entry.target
        if entry.status not in (DiffStatus.ADDED, DiffStatus.CHANGED) or fk is None:
            continue
        if entry.status is DiffStatus.CHANGED:
            script.alter(f"DROP CONSTRAINT {script.quote(entry.name)}")

        cols = ", ".join(script.quote(c) for c in fk.columns)
        ref_cols = ", ".join(script.quote(c) for c in fk.referenced_columns)
        ref_table = script.qualified(fk.referenced_schema, fk.referenced_table)
        clause = (
            f"ADD CONSTRAINT {script.quote(entry.name)} FOREIGN KEY ({cols}) "
            f"REFERENCES {ref_table} ({ref_cols})"
        )
        if fk.on_update and fk.on_update.upper() != _DEFAULT_ACTION:
            clause += f" ON UPDATE {fk.on_update}"
        if fk.on_delete and fk.on_delete.upper() != _DEFAULT_ACTION:
            clause += f" ON DELETE {fk.on_delete}"
        script.alter(clause)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_migration(
    diff: TableDiffResult,
    schema: str,
    table: str,
    dialect: Dialect | str,
) -> str:
    """Build the DDL that turns the diff's source table into its target.

    Parameters
    ----------
    diff:
        Result of :func:`~workbench_core.diff.schema_diff.compute_table_diff`.
    schema:
        Schema of the table being migrated; empty for an unqualified name.
    table:
        Name of the table being migrated.
    dialect:
        Target database.

    Returns
    -------
    str
        A newline-separated script: a header, then column, index and
        foreign-key statements in that order.  When the diff holds no
        changes the body is the single line ``-- No changes detected``.
    """
    d = dialect if isinstance(dialect, Dialect) else Dialect.parse(dialect)
    script = _Script(schema, table, d)

    _column_statements(script, diff.columns)
    _index_statements(script, diff.indexes)
    _foreign_key_statements(script, diff.foreign_keys)

    body = script.lines or [NO_CHANGES_MARKER]
    logger.debug("Generated %d migration statement(s) for %s", len(script.lines), script.table)

    header = [
        f"-- Migration generated for {script.table}",
        f"-- Source: {diff.source_table} → Target: {diff.target_table}",
        "",
    ]
    return "\n".join(header + body)
