"""Schema and row-set diff engines."""

from workbench_core.diff.migration import generate_migration
from workbench_core.diff.row_diff import cell_key, cells_equal, compare_results, compute_data_diff, diff_rows
from workbench_core.diff.schema_diff import compute_table_diff, diff_columns, diff_foreign_keys, diff_indexes

__all__ = [
    "cell_key",
    "cells_equal",
    "compare_results",
    "compute_data_diff",
    "compute_table_diff",
    "diff_columns",
    "diff_foreign_keys",
    "diff_indexes",
    "diff_rows",
    "generate_migration",
]
