"""Unit tests for workbench_core.diff.row_diff."""

from __future__ import annotations

import pytest

from workbench_core.diff.row_diff import cell_key, cells_equal, compare_results, compute_data_diff, diff_rows
from workbench_core.models.diff import RowDiffStatus
from workbench_core.models.query import CellKind, CellValue, QueryResult

# ---------------------------------------------------------------------------
# Cell equality
# ---------------------------------------------------------------------------


class TestCellEquality:
    def test_null_equals_only_null(self):
        null = CellValue.null()
        assert cells_equal(null, CellValue.null())
        assert not cells_equal(null, CellValue.text("NULL"))
        assert not cells_equal(CellValue.text(""), null)

    def test_kind_matters(self):
        assert not cells_equal(CellValue.coerce(1), CellValue.coerce("1"))
        assert not cells_equal(CellValue.coerce(1), CellValue.coerce(1.0))
        assert not cells_equal(CellValue.coerce(True), CellValue.coerce(1))

    def test_same_value_same_kind(self):
        assert cells_equal(CellValue.coerce(3.5), CellValue.coerce(3.5))
        assert cells_equal(CellValue.coerce(b"\x00\x01"), CellValue.coerce(b"\x00\x01"))
        assert cells_equal(CellValue.coerce({"b": 1, "a": 2}), CellValue.coerce({"a": 2, "b": 1}))

    def test_large_text_compares_by_preview(self):
        a = CellValue.large_text("lorem ipsum", 10_000)
        b = CellValue.large_text("lorem ipsum", 20_000)
        assert cells_equal(a, b)

    def test_large_binary_compares_by_length(self):
        a = CellValue(kind=CellKind.LARGE_BINARY, full_length=10)
        b = CellValue(kind=CellKind.LARGE_BINARY, full_length=11)
        assert not cells_equal(a, b)

    def test_cell_key_is_tagged(self):
        assert cell_key(CellValue.coerce(7)) == "int:7"
        assert cell_key(CellValue.coerce("7")) == "text:7"
        assert cell_key(CellValue.null()) == "null:"


# ---------------------------------------------------------------------------
# Key-based matching
# ---------------------------------------------------------------------------


class TestKeyBased:
    def test_identical_sets(self):
        rows = [[1, "a"], [2, "b"]]
        entries = diff_rows(rows, [list(r) for r in rows], key_columns=[0])
        assert [e.status for e in entries] == [RowDiffStatus.IDENTICAL, RowDiffStatus.IDENTICAL]
        assert all(e.changed_columns == set() for e in entries)

    def test_changed_removed_added(self):
        source = [[1, "a", 10], [2, "b", 20], [3, "c", 30]]
        target = [[3, "c", 31], [1, "a", 10], [4, "d", 40]]
        entries = diff_rows(source, target, key_columns=[0])
        assert [(e.key_values, e.status) for e in entries] == [
            (["1"], RowDiffStatus.IDENTICAL),
            (["2"], RowDiffStatus.REMOVED),
            (["3"], RowDiffStatus.CHANGED),
            (["4"], RowDiffStatus.ADDED),
        ]
        assert entries[2].changed_columns == {2}
        assert entries[1].target_row is None
        assert entries[3].source_row is None

    def test_composite_key(self):
        source = [["eu", 1, "x"], ["us", 1, "y"]]
        target = [["us", 1, "y"], ["eu", 1, "z"]]
        entries = diff_rows(source, target, key_columns=[0, 1])
        assert [e.status for e in entries] == [RowDiffStatus.CHANGED, RowDiffStatus.IDENTICAL]
        assert entries[0].key_values == ["eu", "1"]

    def test_key_tuple_does_not_collide_on_separator(self):
        source = [["a|b", "c", 1]]
        target = [["a", "b|c", 1]]
        entries = diff_rows(source, target, key_columns=[0, 1])
        assert [e.status for e in entries] == [RowDiffStatus.REMOVED, RowDiffStatus.ADDED]

    def test_duplicate_keys_pair_in_order(self):
        source = [[1, "first"], [1, "second"]]
        target = [[1, "first"], [1, "other"], [1, "extra"]]
        entries = diff_rows(source, target, key_columns=[0])
        assert [e.status for e in entries] == [
            RowDiffStatus.IDENTICAL,
            RowDiffStatus.CHANGED,
            RowDiffStatus.ADDED,
        ]
        assert entries[2].target_row[1].value == "extra"

    def test_missing_cell_counts_as_changed(self):
        entries = diff_rows([[1, "a"]], [[1, "a", "extra"]], key_columns=[0])
        assert entries[0].status is RowDiffStatus.CHANGED
        assert entries[0].changed_columns == {2}

    def test_key_columns_are_never_changed(self):
        entries = diff_rows([[1, "a"]], [[1, "b"]], key_columns=[0])
        assert 0 not in entries[0].changed_columns

    def test_null_keys_match_each_other(self):
        entries = diff_rows([[None, "a"]], [[None, "a"]], key_columns=[0])
        assert entries[0].status is RowDiffStatus.IDENTICAL
        assert entries[0].key_values == ["NULL"]


# ---------------------------------------------------------------------------
# Positional matching
# ---------------------------------------------------------------------------


class TestPositional:
    def test_pairs_by_index(self):
        entries = diff_rows([[1], [2]], [[1], [3]])
        assert [e.status for e in entries] == [RowDiffStatus.IDENTICAL, RowDiffStatus.CHANGED]
        assert entries[1].changed_columns == {0}
        assert entries[0].key_values == []

    def test_surplus_source_rows_removed(self):
        entries = diff_rows([[1], [2], [3]], [[1]])
        assert [e.status for e in entries] == [RowDiffStatus.IDENTICAL, RowDiffStatus.REMOVED, RowDiffStatus.REMOVED]

    def test_surplus_target_rows_added(self):
        entries = diff_rows([], [[1], [2]], key_columns=None)
        assert [e.status for e in entries] == [RowDiffStatus.ADDED, RowDiffStatus.ADDED]

    def test_empty_key_list_is_positional(self):
        entries = diff_rows([[1, "a"]], [[2, "a"]], key_columns=[])
        assert entries[0].status is RowDiffStatus.CHANGED
        assert entries[0].changed_columns == {0}


# ---------------------------------------------------------------------------
# Wrappers
# ---------------------------------------------------------------------------


class TestComputeDataDiff:
    def test_summary_and_metadata(self):
        result = compute_data_diff(
            [[1, "a"], [2, "b"]],
            [[1, "a"], [2, "B"], [3, "c"]],
            key_indices=[0],
            column_names=["id", "name"],
        )
        assert result.key_columns == ["id"]
        assert result.columns == ["id", "name"]
        assert result.summary.model_dump() == {"added": 1, "removed": 0, "changed": 1, "identical": 1}
        assert not result.is_identical

    def test_identical(self):
        result = compute_data_diff([[1]], [[1]], key_indices=[0], column_names=["id"])
        assert result.is_identical


class TestCompareResults:
    def _results(self):
        source = QueryResult.from_python(["id", "v"], [[1, "x"], [2, "y"]])
        target = QueryResult.from_python(["id", "v"], [[2, "y"], [1, "z"]])
        return source, target

    def test_positional_by_default(self):
        result = compare_results(*self._results())
        assert result.key_columns == []
        assert result.summary.changed == 2

    def test_match_by_column_name(self):
        result = compare_results(*self._results(), match_columns=["id"])
        assert result.key_columns == ["id"]
        assert [r.status for r in result.rows] == [RowDiffStatus.CHANGED, RowDiffStatus.IDENTICAL]

    def test_match_by_index(self):
        result = compare_results(*self._results(), match_columns=[0])
        assert result.summary.identical == 1

    def test_unknown_match_column(self):
        with pytest.raises(ValueError, match="Unknown match column"):
            compare_results(*self._results(), match_columns=["nope"])
