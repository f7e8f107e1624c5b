"""Normalise dialect-specific plan reports into one :class:`PlanNode` tree.

Three report shapes are understood, selected by dialect and then by the shape
of the payload:

1. **Nested tree JSON** (PostgreSQL, CockroachDB, Redshift, and any other
   dialect that hands back JSON): ``EXPLAIN (FORMAT JSON)`` output such as
   ``[{"Plan": {"Node Type": ..., "Plans": [...]}}]``.  Mapped recursively;
   keys without a dedicated :class:`PlanNode` attribute go to ``extra``.
2. **Flat JSON block** (MySQL, MariaDB): ``EXPLAIN FORMAT=JSON`` output with a
   ``query_block`` holding one access entry per table.  The entries become
   children of a synthetic ``Query Block`` root.
3. **Tabular rows** (SQLite ``EXPLAIN QUERY PLAN``): ``id, parent, ...,
   detail`` rows.  Linked through a parent-id index; parent ``-1`` is the
   virtual root.  These reports carry no costs, so all numbers are zero.

:func:`parse_plan_tree` never raises: anything it cannot map yields ``None``
and the reason is logged at DEBUG level.  :func:`parse_plan_payload` is the
strict variant and raises :class:`PlanParseError`.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from workbench_core.models.plan import PlanNode
from workbench_core.models.query import QueryResult
from workbench_core.parser.dialects import Dialect, UnsupportedDialectError

logger = logging.getLogger(__name__)

PlanPayload = QueryResult | str | bytes | Mapping[str, Any] | Sequence[Any]


class PlanParseError(Exception):
    """Raised when a plan payload does not match any supported report shape."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_plan_tree(payload: PlanPayload, dialect: Dialect | str) -> PlanNode | None:
    """Normalise *payload* into a plan tree, or return ``None``.

    Parameters
    ----------
    payload:
        The EXPLAIN output: a :class:`QueryResult` as returned by the
        execution collaborator, a JSON document (text or already decoded), or
        for SQLite a list of ``id, parent, ..., detail`` rows.
    dialect:
        Database the report came from.

    Returns
    -------
    PlanNode | None
        The root of the normalised tree; ``None`` when the payload is empty,
        malformed, or of an unsupported shape.
    """
    try:
        root = parse_plan_payload(payload, dialect)
    except (PlanParseError, RecursionError) as exc:
        logger.debug("Plan payload rejected (dialect=%s): %s", dialect, exc)
        return None

    logger.debug("Normalised plan with %d node(s)", root.node_count)
    return root


def parse_plan_payload(payload: PlanPayload, dialect: Dialect | str) -> PlanNode:
    """Strict variant of :func:`parse_plan_tree`.

    Raises
    ------
    PlanParseError
        If the dialect is unknown or the payload cannot be mapped.
    """
    try:
        d = dialect if isinstance(dialect, Dialect) else Dialect.parse(dialect)
    except UnsupportedDialectError as exc:
        raise PlanParseError(str(exc)) from exc

    if isinstance(payload, QueryResult):
        return _parse_query_result(payload, d)
    if isinstance(payload, str | bytes):
        return _parse_json_plan(_decode_json(payload), d)
    if d is Dialect.SQLITE and _looks_tabular(payload):
        return _parse_tabular([[_cell_text(c) for c in row] for row in payload])  # type: ignore[union-attr]
    if isinstance(payload, Mapping | list):
        return _parse_json_plan(payload, d)
    raise PlanParseError(f"Unsupported payload type: {type(payload).__name__}")


# ---------------------------------------------------------------------------
# Payload dispatch
# ---------------------------------------------------------------------------


def _parse_query_result(result: QueryResult, dialect: Dialect) -> PlanNode:
    if not result.rows or not result.rows[0]:
        raise PlanParseError("Plan result has no rows")

    first = result.rows[0][0].display_text()
    if first.lstrip().startswith(("[", "{")):
        return _parse_json_plan(_decode_json(first), dialect)

    if dialect is Dialect.SQLITE and len(result.columns) >= 3:
        return _parse_tabular([[cell.display_text() for cell in row] for row in result.rows])

    raise PlanParseError(f"Unrecognised plan result for dialect {dialect.value}")


def _decode_json(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise PlanParseError(f"Plan payload is not valid JSON: {exc}") from exc


def _parse_json_plan(doc: Any, dialect: Dialect) -> PlanNode:
    if dialect.is_mysql_family:
        return _parse_flat_block(doc)

    root = doc
    if isinstance(root, list):
        if not root:
            raise PlanParseError("Plan document is an empty list")
        root = root[0]
    if isinstance(root, Mapping) and isinstance(root.get("Plan"), Mapping):
        root = root["Plan"]
    if not isinstance(root, Mapping) or "Node Type" not in root:
        raise PlanParseError("Plan document has no 'Node Type' root")
    return _parse_tree_node(root)


def _looks_tabular(payload: Any) -> bool:
    return (
        isinstance(payload, Sequence)
        and not isinstance(payload, str | bytes)
        and bool(payload)
        and all(isinstance(row, Sequence) and not isinstance(row, str | bytes) for row in payload)
    )


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def _opt_number(value: Any) -> float | None:
    """Parse a non-negative finite number; anything else is ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return max(0.0, number)


def _number(value: Any) -> float:
    parsed = _opt_number(value)
    return 0.0 if parsed is None else parsed


def _opt_int(value: Any) -> int | None:
    parsed = _opt_number(value)
    return None if parsed is None else int(parsed)


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping | list):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _cell_text(value: Any) -> str:
    if hasattr(value, "display_text"):
        return value.display_text()
    return "" if value is None else str(value)


def _make_node(**fields: Any) -> PlanNode:
    try:
        return PlanNode(**fields)
    except ValidationError as exc:
        raise PlanParseError(f"Invalid plan node: {exc}") from exc


# ---------------------------------------------------------------------------
# Shape 1: nested tree JSON
# ---------------------------------------------------------------------------

_TREE_FIELDS = frozenset(
    {
        "Node Type",
        "Relation Name",
        "Total Cost",
        "Startup Cost",
        "Plan Rows",
        "Plan Width",
        "Actual Total Time",
        "Actual Startup Time",
        "Actual Rows",
        "Actual Loops",
        "Plans",
    }
)


def _parse_tree_node(node: Any) -> PlanNode:
    if not isinstance(node, Mapping):
        raise PlanParseError(f"Plan node is a {type(node).__name__}, not an object")

    raw_children = node.get("Plans") or []
    if not isinstance(raw_children, list):
        raise PlanParseError("'Plans' is not a list")

    return _make_node(
        operation_type=str(node.get("Node Type") or "Unknown"),
        relation_name=_opt_str(node.get("Relation Name")),
        estimated_cost=_number(node.get("Total Cost")),
        startup_cost=_opt_number(node.get("Startup Cost")),
        estimated_rows=_number(node.get("Plan Rows")),
        width=_opt_int(node.get("Plan Width")),
        actual_time_ms=_opt_number(node.get("Actual Total Time")),
        startup_time_ms=_opt_number(node.get("Actual Startup Time")),
        actual_rows=_opt_number(node.get("Actual Rows")),
        loop_count=_opt_int(node.get("Actual Loops")),
        children=[_parse_tree_node(child) for child in raw_children],
        extra={k: _stringify(v) for k, v in node.items() if k not in _TREE_FIELDS and v is not None},
    )


# ---------------------------------------------------------------------------
# Shape 2: flat JSON block (MySQL / MariaDB)
# ---------------------------------------------------------------------------

_FLAT_OPTIONAL_EXTRAS = ("possible_keys", "attached_condition")


def _parse_flat_block(doc: Any) -> PlanNode:
    block = doc.get("query_block") if isinstance(doc, Mapping) else None
    if not isinstance(block, Mapping):
        raise PlanParseError("Plan document has no 'query_block' object")

    tables: list[Any] = []
    nested = block.get("nested_loop")
    if isinstance(nested, list):
        tables = [item.get("table") for item in nested if isinstance(item, Mapping)]
    elif isinstance(block.get("table"), Mapping):
        tables = [block["table"]]

    cost_info = block.get("cost_info")
    query_cost = cost_info.get("query_cost") if isinstance(cost_info, Mapping) else None

    return _make_node(
        operation_type="Query Block",
        estimated_cost=_number(query_cost),
        children=[_parse_flat_table(t) for t in tables if isinstance(t, Mapping)],
    )


def _parse_flat_table(table: Mapping[str, Any]) -> PlanNode:
    cost_info = table.get("cost_info")
    read_cost = cost_info.get("read_cost") if isinstance(cost_info, Mapping) else None
    if read_cost is None:
        read_cost = table.get("read_cost")

    used = table.get("used_columns")
    extra = {
        "key": str(table.get("key") or "none"),
        "used_columns": ", ".join(map(str, used)) if isinstance(used, list) else str(used or ""),
    }
    for name in _FLAT_OPTIONAL_EXTRAS:
        if table.get(name) is not None:
            extra[name] = _stringify(table[name])

    return _make_node(
        operation_type=str(table.get("access_type") or "scan"),
        relation_name=_opt_str(table.get("table_name")),
        estimated_rows=_number(table.get("rows_examined_per_scan")),
        estimated_cost=_number(read_cost),
        extra=extra,
    )


# ---------------------------------------------------------------------------
# Shape 3: tabular id/parent/detail rows (SQLite)
# ---------------------------------------------------------------------------


def _parse_tabular(rows: list[list[str]]) -> PlanNode:
    root = PlanNode(operation_type="Query Plan")
    by_id: dict[int, PlanNode] = {-1: root}

    for row in rows:
        if len(row) < 3:
            raise PlanParseError(f"Plan row has {len(row)} column(s), expected at least 3")
        try:
            node_id = int(row[0])
            parent_id = int(row[1])
        except ValueError as exc:
            raise PlanParseError(f"Non-numeric plan row id: {exc}") from exc

        node = PlanNode(operation_type=row[-1])
        # Resolve the parent first so a self-referencing row lands on the root.
        parent = by_id.get(parent_id, root) if parent_id != node_id else root
        parent.children.append(node)
        by_id[node_id] = node

    return root
