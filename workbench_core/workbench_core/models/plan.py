"""Canonical query-plan tree and the analysis products derived from it.

Every dialect-specific plan report is normalised into a tree of
:class:`PlanNode` objects by :mod:`workbench_core.plan.normalizer`.  The
analyzer walks that tree and produces :class:`ProfilingHint` and
:class:`TimelineEntry` records.  None of these objects are persisted; they are
recomputed every time a plan is inspected.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, Field


class PlanNode(BaseModel):
    """One operation in a normalised execution plan."""

    operation_type: str = Field(..., description="Operator name, e.g. 'Seq Scan' or 'Hash Join'.")
    relation_name: str | None = Field(
        default=None,
        description="Table the operation reads, when the report names one.",
    )
    estimated_cost: float = Field(default=0.0, ge=0, description="Planner total cost estimate.")
    startup_cost: float | None = Field(default=None, ge=0, description="Planner startup cost.")
    estimated_rows: float = Field(default=0.0, ge=0, description="Planner row estimate.")
    actual_rows: float | None = Field(default=None, ge=0, description="Rows produced per loop.")
    actual_time_ms: float | None = Field(
        default=None,
        ge=0,
        description="Actual total time in milliseconds (ANALYZE only).",
    )
    startup_time_ms: float | None = Field(
        default=None,
        ge=0,
        description="Actual time until the first row (ANALYZE only).",
    )
    loop_count: int | None = Field(default=None, ge=0, description="Number of times the node ran.")
    width: int | None = Field(default=None, ge=0, description="Average row width in bytes.")
    children: list[PlanNode] = Field(
        default_factory=list,
        description="Child operations in report order.",
    )
    extra: dict[str, str] = Field(
        default_factory=dict,
        description="Report fields without a dedicated attribute, stringified.",
    )

    @property
    def label(self) -> str:
        """Operation type, qualified with the relation when there is one."""
        if self.relation_name:
            return f"{self.operation_type} on {self.relation_name}"
        return self.operation_type

    def walk(self) -> Iterator[PlanNode]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def node_count(self) -> int:
        """Total number of nodes in the subtree (including self)."""
        return 1 + sum(c.node_count for c in self.children)


PlanNode.model_rebuild()


class HintSeverity(str, Enum):
    """How urgently a profiling hint deserves attention."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class ProfilingHint(BaseModel):
    """An optimisation suggestion attached to one plan node."""

    severity: HintSeverity = Field(..., description="Impact of the finding.")
    node: str = Field(..., description="Operation type of the node the hint is about.")
    relation: str | None = Field(default=None, description="Relation of that node, if any.")
    message: str = Field(..., description="What was observed.")
    suggestion: str = Field(..., description="What to try.")


class TimelineEntry(BaseModel):
    """One bar of the execution timeline."""

    label: str = Field(..., description="Operation type, plus relation when present.")
    start_offset_ms: float = Field(..., ge=0, description="Time until the node produced its first row.")
    duration_ms: float = Field(..., ge=0, description="Time from first row to completion.")
    cost: float = Field(default=0.0, ge=0, description="Planner cost of the node.")


class PlanAnalysis(BaseModel):
    """Everything the plan view needs, computed in one pass over the tree."""

    hints: list[ProfilingHint] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)
    max_cost: float = Field(default=1.0, description="Largest node cost, floored at 1.")
    total_cost: float = Field(default=0.0, description="Sum of all node costs.")
    total_time_ms: float = Field(default=0.0, description="Actual time of the root node.")

    @property
    def has_critical(self) -> bool:
        return any(h.severity is HintSeverity.CRITICAL for h in self.hints)

    def hints_for(self, node: str) -> list[ProfilingHint]:
        """Return hints filtered to one operation type."""
        return [h for h in self.hints if h.node == node]
