"""Row-level comparison of two result sets.

Rows are paired in one of two ways:

* **Key-based** (``key_columns`` non-empty): each row is identified by the
  tuple of its key cells.  A source row with no target partner is
  ``removed``, a target row with no source partner is ``added``, and matched
  pairs are ``changed`` or ``identical`` depending on their non-key cells.
  When several rows share a key they pair up in order of appearance.
* **Positional**: row *i* of the source pairs with row *i* of the target;
  surplus rows on either side are ``removed`` / ``added``.

Cell equality is type-aware (an ``int`` 1 never equals a ``text`` ``"1"``)
and NULL equals only NULL.  Truncated large values are compared by what the
client actually holds: the preview for large text/JSON and the byte length
for large binary.  Two large values that differ only beyond the preview
therefore compare equal.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable, Sequence
from typing import Any

from workbench_core.models.diff import DataDiffResult, RowDiffEntry, RowDiffStatus, RowDiffSummary
from workbench_core.models.query import CellKind, CellValue, QueryResult

logger = logging.getLogger(__name__)

Row = list[CellValue]


# ---------------------------------------------------------------------------
# Cell canonicalisation
# ---------------------------------------------------------------------------


def cell_key(cell: CellValue) -> str:
    """Canonical, kind-tagged text of *cell* used for matching and equality."""
    kind = cell.kind
    if kind is CellKind.NULL:
        return "null:"
    if kind is CellKind.BOOL:
        text = "true" if cell.value else "false"
    elif kind is CellKind.FLOAT:
        text = repr(float(cell.value))  # type: ignore[arg-type]
    elif kind is CellKind.BINARY:
        text = ",".join(str(b) for b in cell.value or [])  # type: ignore[union-attr]
    elif kind in (CellKind.LARGE_TEXT, CellKind.LARGE_JSON):
        text = cell.preview or ""
    elif kind is CellKind.LARGE_BINARY:
        text = str(cell.full_length or 0)
    else:
        text = str(cell.value)
    return f"{kind.value}:{text}"


def cells_equal(a: CellValue, b: CellValue) -> bool:
    """Type-aware equality; NULL equals only NULL."""
    if a.is_null or b.is_null:
        return a.is_null and b.is_null
    return cell_key(a) == cell_key(b)


def _coerce_rows(rows: Iterable[Sequence[Any]]) -> list[Row]:
    return [[CellValue.coerce(v) for v in row] for row in rows]


def _cell_at(row: Row, index: int) -> CellValue | None:
    return row[index] if index < len(row) else None


def _changed_columns(source: Row, target: Row, skip: frozenset[int]) -> set[int]:
    """Indices where the rows differ, over the wider of the two; a missing cell counts as changed."""
    changed: set[int] = set()
    for i in range(max(len(source), len(target))):
        if i in skip:
            continue
        a, b = _cell_at(source, i), _cell_at(target, i)
        if a is None or b is None or not cells_equal(a, b):
            changed.add(i)
    return changed


def _row_key(row: Row, key_columns: Sequence[int]) -> tuple[str, ...]:
    return tuple(cell_key(_cell_at(row, i) or CellValue.null()) for i in key_columns)


def _key_values(row: Row, key_columns: Sequence[int]) -> list[str]:
    return [(_cell_at(row, i) or CellValue.null()).display_text() for i in key_columns]


def _paired_entry(source: Row, target: Row, key_columns: Sequence[int]) -> RowDiffEntry:
    changed = _changed_columns(source, target, frozenset(key_columns))
    return RowDiffEntry(
        status=RowDiffStatus.CHANGED if changed else RowDiffStatus.IDENTICAL,
        key_values=_key_values(source, key_columns),
        source_row=source,
        target_row=target,
        changed_columns=changed,
    )


# ---------------------------------------------------------------------------
# Pairing strategies
# ---------------------------------------------------------------------------


def _diff_by_key(source_rows: list[Row], target_rows: list[Row], key_columns: Sequence[int]) -> list[RowDiffEntry]:
    pending: defaultdict[tuple[str, ...], deque[int]] = defaultdict(deque)
    for idx, row in enumerate(target_rows):
        pending[_row_key(row, key_columns)].append(idx)

    matched: set[int] = set()
    entries: list[RowDiffEntry] = []
    for row in source_rows:
        candidates = pending.get(_row_key(row, key_columns))
        if not candidates:
            entries.append(
                RowDiffEntry(
                    status=RowDiffStatus.REMOVED,
                    key_values=_key_values(row, key_columns),
                    source_row=row,
                )
            )
            continue
        target_idx = candidates.popleft()
        matched.add(target_idx)
        entries.append(_paired_entry(row, target_rows[target_idx], key_columns))

    for idx, row in enumerate(target_rows):
        if idx not in matched:
            entries.append(
                RowDiffEntry(
                    status=RowDiffStatus.ADDED,
                    key_values=_key_values(row, key_columns),
                    target_row=row,
                )
            )
    return entries


def _diff_by_position(source_rows: list[Row], target_rows: list[Row]) -> list[RowDiffEntry]:
    entries: list[RowDiffEntry] = []
    for idx in range(max(len(source_rows), len(target_rows))):
        if idx >= len(target_rows):
            entries.append(RowDiffEntry(status=RowDiffStatus.REMOVED, source_row=source_rows[idx]))
        elif idx >= len(source_rows):
            entries.append(RowDiffEntry(status=RowDiffStatus.ADDED, target_row=target_rows[idx]))
        else:
            entries.append(_paired_entry(source_rows[idx], target_rows[idx], ()))
    return entries


def _summarize(entries: list[RowDiffEntry]) -> RowDiffSummary:
    counts = {status: 0 for status in RowDiffStatus}
    for entry in entries:
        counts[entry.status] += 1
    return RowDiffSummary(
        added=counts[RowDiffStatus.ADDED],
        removed=counts[RowDiffStatus.REMOVED],
        changed=counts[RowDiffStatus.CHANGED],
        identical=counts[RowDiffStatus.IDENTICAL],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def diff_rows(
    source_rows: Iterable[Sequence[Any]],
    target_rows: Iterable[Sequence[Any]],
    key_columns: Sequence[int] | None = None,
) -> list[RowDiffEntry]:
    """Pair and classify the rows of two result sets.

    Parameters
    ----------
    source_rows, target_rows:
        Rows of :class:`CellValue` cells or plain Python values (coerced with
        :meth:`CellValue.coerce`).
    key_columns:
        Column indices identifying a row.  ``None`` or empty selects
        positional pairing.

    Returns
    -------
    list[RowDiffEntry]
        Key-based: one entry per source row in source order, then the
        unmatched target rows in target order.  Positional: one entry per
        row index.
    """
    src = _coerce_rows(source_rows)
    tgt = _coerce_rows(target_rows)

    if key_columns:
        entries = _diff_by_key(src, tgt, list(key_columns))
    else:
        entries = _diff_by_position(src, tgt)

    logger.debug(
        "Row diff (%s): %d source row(s), %d target row(s), %d entries",
        "key" if key_columns else "positional",
        len(src),
        len(tgt),
        len(entries),
    )
    return entries


def compute_data_diff(
    source_rows: Iterable[Sequence[Any]],
    target_rows: Iterable[Sequence[Any]],
    key_indices: Sequence[int],
    column_names: Sequence[str],
) -> DataDiffResult:
    """Diff two row sets of the same table and attach column metadata."""
    entries = diff_rows(source_rows, target_rows, key_indices)
    return DataDiffResult(
        key_columns=[column_names[i] for i in key_indices if i < len(column_names)],
        columns=list(column_names),
        rows=entries,
        summary=_summarize(entries),
    )


def compare_results(
    source: QueryResult,
    target: QueryResult,
    match_columns: Sequence[int | str] | None = None,
) -> DataDiffResult:
    """Compare two query results, by match columns or by position.

    *match_columns* may mix column indices and source column names.

    Raises
    ------
    ValueError
        If a match column name is not a column of *source*.
    """
    names = source.column_names
    indices: list[int] = []
    for col in match_columns or []:
        if isinstance(col, str):
            if col not in names:
                raise ValueError(f"Unknown match column: {col!r}")
            indices.append(names.index(col))
        else:
            indices.append(col)

    return compute_data_diff(source.rows, target.rows, indices, names)
