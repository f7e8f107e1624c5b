"""Heuristic analysis of a normalised plan tree.

Produces :class:`ProfilingHint` records for the patterns that most often
explain a slow query (large full scans, exploding nested loops, slow sorts,
stale statistics and expensive operators) plus the timeline and cost folds
used by the plan view.

The rules are deliberately simple and dialect-agnostic: they look only at the
canonical :class:`PlanNode` fields, so every report shape the normaliser
understands is analysed the same way.  Numeric thresholds come from
:class:`AnalyzerThresholds`; the module never reads the environment itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from workbench_core.models.plan import (
    HintSeverity,
    PlanAnalysis,
    PlanNode,
    ProfilingHint,
    TimelineEntry,
)

if TYPE_CHECKING:
    from workbench_core.config import Settings

logger = logging.getLogger(__name__)


class AnalyzerThresholds(BaseModel):
    """Numeric limits above which a plan node earns a hint."""

    seq_scan_rows: float = Field(
        default=1000,
        ge=0,
        description="Rows read by a full scan before it is flagged.",
    )
    nested_loop_rows: float = Field(
        default=10_000,
        ge=0,
        description="Rows x loops of a nested loop before it is flagged.",
    )
    sort_time_ms: float = Field(
        default=100.0,
        ge=0,
        description="Actual sort time in milliseconds before it is flagged.",
    )
    row_drift_ratio: float = Field(
        default=10.0,
        gt=1,
        description="Actual/estimated row ratio (or its inverse) signalling stale statistics.",
    )
    high_cost: float = Field(default=10_000.0, ge=0, description="Cost reported as informational.")
    critical_cost: float = Field(default=100_000.0, ge=0, description="Cost reported as critical.")

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalyzerThresholds:
        return cls(
            seq_scan_rows=settings.seq_scan_row_threshold,
            nested_loop_rows=settings.nested_loop_row_threshold,
            sort_time_ms=settings.sort_time_threshold_ms,
            row_drift_ratio=settings.row_drift_ratio,
            high_cost=settings.high_cost_threshold,
            critical_cost=settings.critical_cost_threshold,
        )


_DEFAULT_THRESHOLDS = AnalyzerThresholds()


# ---------------------------------------------------------------------------
# Hint rules
# ---------------------------------------------------------------------------


def _is_full_scan(type_lower: str) -> bool:
    # MySQL reports a full table scan as access_type "ALL".
    return "seq scan" in type_lower or "full" in type_lower or type_lower in ("scan", "all")


def _fmt_rows(value: float) -> str:
    return f"{value:,.0f}"


def _node_hints(node: PlanNode, limits: AnalyzerThresholds) -> list[ProfilingHint]:
    hints: list[ProfilingHint] = []
    type_lower = node.operation_type.lower()

    def add(severity: HintSeverity, message: str, suggestion: str) -> None:
        hints.append(
            ProfilingHint(
                severity=severity,
                node=node.operation_type,
                relation=node.relation_name,
                message=message,
                suggestion=suggestion,
            )
        )

    if _is_full_scan(type_lower) and node.relation_name:
        if node.estimated_rows > limits.seq_scan_rows or (
            node.actual_rows is not None and node.actual_rows > limits.seq_scan_rows
        ):
            rows = node.actual_rows if node.actual_rows is not None else node.estimated_rows
            add(
                HintSeverity.WARNING,
                f'Sequential scan on "{node.relation_name}" reading {_fmt_rows(rows)} rows',
                f'Consider adding an index on the filtered columns of "{node.relation_name}"',
            )

    if "nested loop" in type_lower:
        rows = node.actual_rows if node.actual_rows is not None else node.estimated_rows
        total_rows = rows * (node.loop_count if node.loop_count is not None else 1)
        if total_rows > limits.nested_loop_rows:
            add(
                HintSeverity.WARNING,
                f"Nested loop join producing {_fmt_rows(total_rows)} rows",
                "Consider adding indexes on join columns or rewriting as a hash/merge join",
            )

    if "sort" in type_lower and "index" not in type_lower:
        if node.actual_time_ms is not None and node.actual_time_ms > limits.sort_time_ms:
            add(
                HintSeverity.WARNING,
                f"Sort operation taking {node.actual_time_ms:.1f}ms",
                "Consider adding an index to support the ORDER BY clause",
            )

    if node.actual_rows is not None and node.estimated_rows > 0:
        ratio = node.actual_rows / node.estimated_rows
        if ratio > limits.row_drift_ratio or ratio < 1 / limits.row_drift_ratio:
            add(
                HintSeverity.INFO,
                f"Estimated {_fmt_rows(node.estimated_rows)} rows but got "
                f"{_fmt_rows(node.actual_rows)} ({ratio:.1f}x drift)",
                "Table statistics may be outdated; run ANALYZE on the table",
            )

    if node.estimated_cost > limits.high_cost:
        add(
            HintSeverity.CRITICAL if node.estimated_cost > limits.critical_cost else HintSeverity.INFO,
            f"High cost operation: {node.estimated_cost:.0f}",
            "Review this operation for optimization opportunities",
        )

    return hints


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze_plan(root: PlanNode, thresholds: AnalyzerThresholds | None = None) -> list[ProfilingHint]:
    """Return optimisation hints for every node of *root*, in pre-order.

    Parameters
    ----------
    root:
        Root of a normalised plan tree.
    thresholds:
        Limits to apply; the defaults match a typical OLTP workload.

    Returns
    -------
    list[ProfilingHint]
        Zero or more hints per node.  Hints of one node keep rule order:
        full scan, nested loop, sort, row drift, cost.
    """
    limits = thresholds or _DEFAULT_THRESHOLDS
    hints: list[ProfilingHint] = []
    for node in root.walk():
        hints.extend(_node_hints(node, limits))

    logger.debug("Plan analysis produced %d hint(s) over %d node(s)", len(hints), root.node_count)
    return hints


def compute_timeline(root: PlanNode) -> list[TimelineEntry]:
    """Flatten the nodes that carry actual timing into timeline bars."""
    entries: list[TimelineEntry] = []
    for node in root.walk():
        if node.actual_time_ms is None:
            continue
        start = node.startup_time_ms or 0.0
        entries.append(
            TimelineEntry(
                label=node.label,
                start_offset_ms=start,
                duration_ms=max(0.0, node.actual_time_ms - start),
                cost=node.estimated_cost,
            )
        )
    return entries


def get_max_cost(root: PlanNode) -> float:
    """Largest node cost in the tree, or 1 when every cost is zero."""
    return max((node.estimated_cost for node in root.walk()), default=0.0) or 1.0


def get_total_cost(root: PlanNode) -> float:
    return sum(node.estimated_cost for node in root.walk())


def get_total_time(root: PlanNode) -> float:
    return root.actual_time_ms or 0.0


def summarize_plan(root: PlanNode, thresholds: AnalyzerThresholds | None = None) -> PlanAnalysis:
    """Bundle hints, timeline and cost/time folds for one plan."""
    return PlanAnalysis(
        hints=analyze_plan(root, thresholds),
        timeline=compute_timeline(root),
        max_cost=get_max_cost(root),
        total_cost=get_total_cost(root),
        total_time_ms=get_total_time(root),
    )
