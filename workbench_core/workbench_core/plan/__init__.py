"""Query-plan normalisation and heuristic analysis."""

from workbench_core.plan.analyzer import (
    AnalyzerThresholds,
    analyze_plan,
    compute_timeline,
    get_max_cost,
    get_total_cost,
    get_total_time,
    summarize_plan,
)
from workbench_core.plan.normalizer import PlanParseError, parse_plan_payload, parse_plan_tree

__all__ = [
    "AnalyzerThresholds",
    "PlanParseError",
    "analyze_plan",
    "compute_timeline",
    "get_max_cost",
    "get_total_cost",
    "get_total_time",
    "parse_plan_payload",
    "parse_plan_tree",
    "summarize_plan",
]
