"""Lexical index suggestions for ad-hoc queries."""

from workbench_core.advisor.index_advisor import IndexReason, IndexSuggestion, analyze_query_for_indexes

__all__ = [
    "IndexReason",
    "IndexSuggestion",
    "analyze_query_for_indexes",
]
