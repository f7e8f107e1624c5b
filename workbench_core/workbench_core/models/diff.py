"""Diff models for schema and row-set comparison.

These models represent the output of comparing two snapshots (source vs.
target): either schema descriptors of two tables, or the rows of two result
sets.
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, model_validator

from workbench_core.models.query import CellValue
from workbench_core.models.schema import ColumnDescriptor, ForeignKeyDescriptor, IndexDescriptor

T = TypeVar("T", bound=BaseModel)


class DiffStatus(str, Enum):
    """Classification of one schema object between source and target."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class DiffEntry(BaseModel, Generic[T]):
    """Comparison outcome for one named schema object."""

    name: str = Field(..., description="Object name shared by source and target.")
    status: DiffStatus = Field(..., description="How the object differs.")
    source: T | None = Field(default=None, description="Descriptor in the source snapshot.")
    target: T | None = Field(default=None, description="Descriptor in the target snapshot.")
    changes: list[str] = Field(
        default_factory=list,
        description="'field: old → new' lines, in tracked-field order.",
    )

    @model_validator(mode="after")
    def _check_status_invariants(self) -> DiffEntry[T]:
        if self.status is DiffStatus.ADDED and self.source is not None:
            raise ValueError("added entries must not carry a source descriptor")
        if self.status is DiffStatus.REMOVED and self.target is not None:
            raise ValueError("removed entries must not carry a target descriptor")
        if self.status is DiffStatus.CHANGED and (self.source is None or self.target is None or not self.changes):
            raise ValueError("changed entries need both descriptors and at least one change")
        if self.status is DiffStatus.UNCHANGED and self.changes:
            raise ValueError("unchanged entries must not list changes")
        return self


class DiffSummary(BaseModel):
    """Counts of schema diff entries by status."""

    added: int = 0
    removed: int = 0
    changed: int = 0
    unchanged: int = 0


class TableDiffResult(BaseModel):
    """Column, index and foreign-key diffs between two tables."""

    source_table: str = Field(..., description="Qualified name of the source table.")
    target_table: str = Field(..., description="Qualified name of the target table.")
    columns: list[DiffEntry[ColumnDescriptor]] = Field(default_factory=list)
    indexes: list[DiffEntry[IndexDescriptor]] = Field(default_factory=list)
    foreign_keys: list[DiffEntry[ForeignKeyDescriptor]] = Field(default_factory=list)
    summary: DiffSummary = Field(default_factory=DiffSummary)

    @property
    def has_changes(self) -> bool:
        s = self.summary
        return bool(s.added or s.removed or s.changed)


# ---------------------------------------------------------------------------
# Row diffs
# ---------------------------------------------------------------------------


class RowDiffStatus(str, Enum):
    """Classification of one row between source and target result sets."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    IDENTICAL = "identical"


class RowDiffEntry(BaseModel):
    """Comparison outcome for one row (or one matched pair of rows)."""

    status: RowDiffStatus = Field(..., description="How the row differs.")
    key_values: list[str] = Field(
        default_factory=list,
        description="Display text of the match-column cells; empty in positional mode.",
    )
    source_row: list[CellValue] | None = Field(default=None, description="Row from the source set.")
    target_row: list[CellValue] | None = Field(default=None, description="Row from the target set.")
    changed_columns: set[int] = Field(
        default_factory=set,
        description="Indices of cells that differ; empty unless status is CHANGED.",
    )


class RowDiffSummary(BaseModel):
    """Counts of row diff entries by status."""

    added: int = 0
    removed: int = 0
    changed: int = 0
    identical: int = 0


class DataDiffResult(BaseModel):
    """Row-level comparison of two result sets."""

    key_columns: list[str] = Field(
        default_factory=list,
        description="Names of the columns rows were matched on; empty for positional matching.",
    )
    columns: list[str] = Field(default_factory=list, description="Column names of the source set.")
    rows: list[RowDiffEntry] = Field(default_factory=list)
    summary: RowDiffSummary = Field(default_factory=RowDiffSummary)

    @property
    def is_identical(self) -> bool:
        s = self.summary
        return s.added == 0 and s.removed == 0 and s.changed == 0
