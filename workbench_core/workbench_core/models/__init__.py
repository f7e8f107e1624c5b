"""Domain models for the workbench core engine."""

from workbench_core.models.diff import (
    DataDiffResult,
    DiffEntry,
    DiffStatus,
    DiffSummary,
    RowDiffEntry,
    RowDiffStatus,
    RowDiffSummary,
    TableDiffResult,
)
from workbench_core.models.plan import (
    HintSeverity,
    PlanAnalysis,
    PlanNode,
    ProfilingHint,
    TimelineEntry,
)
from workbench_core.models.query import CellKind, CellValue, ColumnDef, QueryResult
from workbench_core.models.schema import ColumnDescriptor, ForeignKeyDescriptor, IndexDescriptor

__all__ = [
    "CellKind",
    "CellValue",
    "ColumnDef",
    "ColumnDescriptor",
    "DataDiffResult",
    "DiffEntry",
    "DiffStatus",
    "DiffSummary",
    "ForeignKeyDescriptor",
    "HintSeverity",
    "IndexDescriptor",
    "PlanAnalysis",
    "PlanNode",
    "ProfilingHint",
    "QueryResult",
    "RowDiffEntry",
    "RowDiffStatus",
    "RowDiffSummary",
    "TableDiffResult",
    "TimelineEntry",
]
