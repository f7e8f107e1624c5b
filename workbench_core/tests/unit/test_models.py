"""Unit tests for workbench_core.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from workbench_core.models.plan import HintSeverity, PlanAnalysis, PlanNode, ProfilingHint
from workbench_core.models.query import CellKind, CellValue, QueryResult

# ---------------------------------------------------------------------------
# CellValue
# ---------------------------------------------------------------------------


class TestCellCoerce:
    @pytest.mark.parametrize(
        ("obj", "kind"),
        [
            (None, CellKind.NULL),
            (True, CellKind.BOOL),
            (3, CellKind.INT),
            (2.5, CellKind.FLOAT),
            ("x", CellKind.TEXT),
            (b"\x01\x02", CellKind.BINARY),
            ({"a": 1}, CellKind.JSON),
            ([1, 2], CellKind.JSON),
        ],
    )
    def test_kinds(self, obj, kind):
        assert CellValue.coerce(obj).kind is kind

    def test_bool_is_not_int(self):
        cell = CellValue.coerce(False)
        assert cell.kind is CellKind.BOOL
        assert cell.value is False

    def test_existing_cell_passes_through(self):
        cell = CellValue.text("a")
        assert CellValue.coerce(cell) is cell

    def test_binary_becomes_byte_list(self):
        assert CellValue.coerce(b"\x00\xff").value == [0, 255]


class TestCellDisplay:
    @pytest.mark.parametrize(
        ("cell", "text"),
        [
            (CellValue.null(), "NULL"),
            (CellValue.coerce(True), "true"),
            (CellValue.coerce(12), "12"),
            (CellValue.coerce(1.0), "1"),
            (CellValue.coerce(1.25), "1.25"),
            (CellValue.coerce(b"abc"), "[3 bytes]"),
            (CellValue.large_text("abc", 9000), "abc"),
            (CellValue(kind=CellKind.LARGE_BINARY, full_length=2048), "[2048 bytes]"),
            (CellValue(kind=CellKind.TIMESTAMP, value="2024-01-01T00:00:00"), "2024-01-01T00:00:00"),
        ],
    )
    def test_display_text(self, cell, text):
        assert cell.display_text() == text

    def test_truncation_flags(self):
        assert CellValue.large_text("a", 10).is_truncated
        assert not CellValue.text("a").is_truncated
        assert CellValue.null().is_null


class TestQueryResult:
    def test_from_python(self):
        result = QueryResult.from_python(["id", "name"], [(1, "a"), (2, None)], execution_time_ms=3.5)
        assert result.column_names == ["id", "name"]
        assert result.row_count == 2
        assert result.rows[1][1].is_null
        assert result.execution_time_ms == 3.5

    def test_negative_execution_time_rejected(self):
        with pytest.raises(ValidationError):
            QueryResult(execution_time_ms=-1)


# ---------------------------------------------------------------------------
# Plan models
# ---------------------------------------------------------------------------


class TestPlanNode:
    def test_label(self):
        assert PlanNode(operation_type="Seq Scan", relation_name="t").label == "Seq Scan on t"
        assert PlanNode(operation_type="Sort").label == "Sort"

    def test_walk_is_preorder(self):
        tree = PlanNode(
            operation_type="a",
            children=[
                PlanNode(operation_type="b", children=[PlanNode(operation_type="c")]),
                PlanNode(operation_type="d"),
            ],
        )
        assert [n.operation_type for n in tree.walk()] == ["a", "b", "c", "d"]
        assert tree.node_count == 4

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            PlanNode(operation_type="x", estimated_cost=-1)

    def test_serialisation_round_trip(self):
        tree = PlanNode(operation_type="a", children=[PlanNode(operation_type="b", extra={"k": "v"})])
        assert PlanNode.model_validate_json(tree.model_dump_json()) == tree


class TestPlanAnalysis:
    def test_critical_and_filter(self):
        hints = [
            ProfilingHint(severity=HintSeverity.INFO, node="Hash", message="m", suggestion="s"),
            ProfilingHint(severity=HintSeverity.CRITICAL, node="Sort", message="m", suggestion="s"),
        ]
        analysis = PlanAnalysis(hints=hints)
        assert analysis.has_critical
        assert [h.node for h in analysis.hints_for("Sort")] == ["Sort"]
        assert analysis.max_cost == 1.0
