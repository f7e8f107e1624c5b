"""Schema diff engine for comparing two tables' descriptors.

Columns, indexes and foreign keys are matched by name and classified as
added, removed, changed or unchanged.  Which attributes count as a change is
declared once per descriptor type in a tracked-field table; the same table
drives both the comparison and the ``"label: old → new"`` change lines, so the
two can never disagree.

Output order is deterministic: removed entries first, then changed, added and
unchanged.  Within a status, entries keep source order (target order for
added entries).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel

from workbench_core.models.diff import DiffEntry, DiffStatus, DiffSummary, TableDiffResult
from workbench_core.models.schema import ColumnDescriptor, ForeignKeyDescriptor, IndexDescriptor

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=BaseModel)

# (label, attribute) pairs, in the order changes are reported.
TrackedFields = tuple[tuple[str, str], ...]

COLUMN_FIELDS: TrackedFields = (
    ("type", "data_type"),
    ("nullable", "is_nullable"),
    ("default", "column_default"),
    ("pk", "is_primary_key"),
)

INDEX_FIELDS: TrackedFields = (
    ("columns", "columns"),
    ("unique", "is_unique"),
    ("type", "index_type"),
)

FOREIGN_KEY_FIELDS: TrackedFields = (
    ("columns", "columns"),
    ("ref table", "referenced_table"),
    ("ref columns", "referenced_columns"),
    ("on_update", "on_update"),
    ("on_delete", "on_delete"),
)

_STATUS_ORDER: dict[DiffStatus, int] = {
    DiffStatus.REMOVED: 0,
    DiffStatus.CHANGED: 1,
    DiffStatus.ADDED: 2,
    DiffStatus.UNCHANGED: 3,
}


def _format_value(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return "[" + ", ".join(str(v) for v in value) + "]"
    return str(value)


def _field_changes(source: BaseModel, target: BaseModel, fields: TrackedFields) -> list[str]:
    changes: list[str] = []
    for label, attr in fields:
        old = getattr(source, attr)
        new = getattr(target, attr)
        if old != new:
            changes.append(f"{label}: {_format_value(old)} → {_format_value(new)}")
    return changes


def _diff_named(
    source: Sequence[D],
    target: Sequence[D],
    fields: TrackedFields,
    entry_type: type[DiffEntry[D]],
) -> list[DiffEntry[D]]:
    """Match *source* and *target* by ``name`` and classify every object."""
    source_by_name = {item.name: item for item in source}  # type: ignore[attr-defined]
    target_by_name = {item.name: item for item in target}  # type: ignore[attr-defined]

    entries: list[DiffEntry[D]] = []
    for name, src in source_by_name.items():
        tgt = target_by_name.get(name)
        if tgt is None:
            entries.append(entry_type(name=name, status=DiffStatus.REMOVED, source=src))
            continue
        changes = _field_changes(src, tgt, fields)
        entries.append(
            entry_type(
                name=name,
                status=DiffStatus.CHANGED if changes else DiffStatus.UNCHANGED,
                source=src,
                target=tgt,
                changes=changes,
            )
        )

    for name, tgt in target_by_name.items():
        if name not in source_by_name:
            entries.append(entry_type(name=name, status=DiffStatus.ADDED, target=tgt))

    # sorted() is stable, so collection order survives within each status.
    return sorted(entries, key=lambda e: _STATUS_ORDER[e.status])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def diff_columns(
    source: Sequence[ColumnDescriptor],
    target: Sequence[ColumnDescriptor],
) -> list[DiffEntry[ColumnDescriptor]]:
    """Compare two column lists by name."""
    return _diff_named(source, target, COLUMN_FIELDS, DiffEntry[ColumnDescriptor])


def diff_indexes(
    source: Sequence[IndexDescriptor],
    target: Sequence[IndexDescriptor],
) -> list[DiffEntry[IndexDescriptor]]:
    """Compare two index lists by name."""
    return _diff_named(source, target, INDEX_FIELDS, DiffEntry[IndexDescriptor])


def diff_foreign_keys(
    source: Sequence[ForeignKeyDescriptor],
    target: Sequence[ForeignKeyDescriptor],
) -> list[DiffEntry[ForeignKeyDescriptor]]:
    """Compare two foreign-key lists by constraint name."""
    return _diff_named(source, target, FOREIGN_KEY_FIELDS, DiffEntry[ForeignKeyDescriptor])


def compute_table_diff(
    source_columns: Sequence[ColumnDescriptor],
    target_columns: Sequence[ColumnDescriptor],
    source_indexes: Sequence[IndexDescriptor],
    target_indexes: Sequence[IndexDescriptor],
    source_foreign_keys: Sequence[ForeignKeyDescriptor],
    target_foreign_keys: Sequence[ForeignKeyDescriptor],
    source_table: str,
    target_table: str,
) -> TableDiffResult:
    """Diff every descriptor collection of two tables and count the outcomes.

    Parameters
    ----------
    source_columns, target_columns:
        Column descriptors of the two tables.
    source_indexes, target_indexes:
        Index descriptors of the two tables.
    source_foreign_keys, target_foreign_keys:
        Foreign-key descriptors of the two tables.
    source_table, target_table:
        Display names of the two tables.

    Returns
    -------
    TableDiffResult
        The three diffs plus a summary counting entries of every status
        across all of them.
    """
    columns = diff_columns(source_columns, target_columns)
    indexes = diff_indexes(source_indexes, target_indexes)
    foreign_keys = diff_foreign_keys(source_foreign_keys, target_foreign_keys)

    counts = {status: 0 for status in DiffStatus}
    for entry in (*columns, *indexes, *foreign_keys):
        counts[entry.status] += 1

    summary = DiffSummary(
        added=counts[DiffStatus.ADDED],
        removed=counts[DiffStatus.REMOVED],
        changed=counts[DiffStatus.CHANGED],
        unchanged=counts[DiffStatus.UNCHANGED],
    )
    logger.debug(
        "Table diff %s -> %s: %d added, %d removed, %d changed",
        source_table,
        target_table,
        summary.added,
        summary.removed,
        summary.changed,
    )
    return TableDiffResult(
        source_table=source_table,
        target_table=target_table,
        columns=columns,
        indexes=indexes,
        foreign_keys=foreign_keys,
        summary=summary,
    )
