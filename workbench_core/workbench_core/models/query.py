"""Result-set models returned by the external execution collaborator.

A :class:`QueryResult` is what the client receives after running one
statement: column definitions plus rows of typed :class:`CellValue` cells.
Plan reports arrive in the same container (a single JSON cell, or tabular
id/parent/detail rows) and are handed to :mod:`workbench_core.plan.normalizer`.

Large values are delivered truncated: ``LARGE_TEXT`` / ``LARGE_JSON`` cells
carry only a ``preview`` prefix plus the ``full_length`` of the original, and
``LARGE_BINARY`` cells carry only lengths.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CellKind(str, Enum):
    """Type tag of a single result cell."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    BINARY = "binary"
    JSON = "json"
    LARGE_TEXT = "large_text"
    LARGE_JSON = "large_json"
    LARGE_BINARY = "large_binary"


_LARGE_KINDS = frozenset({CellKind.LARGE_TEXT, CellKind.LARGE_JSON, CellKind.LARGE_BINARY})


class CellValue(BaseModel):
    """One typed cell of a result row."""

    kind: CellKind = Field(..., description="Type tag of the cell.")
    value: bool | int | float | str | list[int] | None = Field(
        default=None,
        description="Cell payload; None for NULL and for large values.",
    )
    preview: str | None = Field(
        default=None,
        description="Truncated prefix of a large text/JSON value.",
    )
    full_length: int | None = Field(
        default=None,
        description="Length of the untruncated value, for large kinds only.",
    )

    @property
    def is_null(self) -> bool:
        return self.kind is CellKind.NULL

    @property
    def is_truncated(self) -> bool:
        return self.kind in _LARGE_KINDS

    # -- constructors --------------------------------------------------------

    @classmethod
    def null(cls) -> CellValue:
        return cls(kind=CellKind.NULL)

    @classmethod
    def text(cls, value: str) -> CellValue:
        return cls(kind=CellKind.TEXT, value=value)

    @classmethod
    def large_text(cls, preview: str, full_length: int) -> CellValue:
        return cls(kind=CellKind.LARGE_TEXT, preview=preview, full_length=full_length)

    @classmethod
    def coerce(cls, obj: Any) -> CellValue:
        """Map a plain Python value onto a cell.

        ``None`` becomes NULL, ``bytes`` become BINARY, and ``dict``/``list``
        values are serialised as JSON.  Existing cells pass through untouched.
        """
        if isinstance(obj, CellValue):
            return obj
        if obj is None:
            return cls.null()
        # bool is a subclass of int, so it has to be checked first.
        if isinstance(obj, bool):
            return cls(kind=CellKind.BOOL, value=obj)
        if isinstance(obj, int):
            return cls(kind=CellKind.INT, value=obj)
        if isinstance(obj, float):
            return cls(kind=CellKind.FLOAT, value=obj)
        if isinstance(obj, bytes | bytearray | memoryview):
            return cls(kind=CellKind.BINARY, value=list(bytes(obj)))
        if isinstance(obj, dict | list):
            return cls(kind=CellKind.JSON, value=json.dumps(obj, sort_keys=True, default=str))
        return cls.text(str(obj))

    # -- rendering -----------------------------------------------------------

    def display_text(self) -> str:
        """Human-readable text of the cell, as a grid would show it."""
        kind = self.kind
        if kind is CellKind.NULL:
            return "NULL"
        if kind is CellKind.BOOL:
            return "true" if self.value else "false"
        if kind is CellKind.FLOAT:
            return _format_float(self.value)  # type: ignore[arg-type]
        if kind is CellKind.BINARY:
            return f"[{len(self.value or [])} bytes]"  # type: ignore[arg-type]
        if kind in (CellKind.LARGE_TEXT, CellKind.LARGE_JSON):
            return self.preview or ""
        if kind is CellKind.LARGE_BINARY:
            return f"[{self.full_length or 0} bytes]"
        return str(self.value)


def _format_float(value: float) -> str:
    """Render a float the way the client grid does (``1.0`` shows as ``1``)."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


class ColumnDef(BaseModel):
    """Name and database type of one result column."""

    name: str = Field(..., description="Column label as returned by the driver.")
    data_type: str = Field(default="", description="Database type name, if reported.")


class QueryResult(BaseModel):
    """Rows and metadata returned for one executed statement."""

    columns: list[ColumnDef] = Field(
        default_factory=list,
        description="Result columns in driver order.",
    )
    rows: list[list[CellValue]] = Field(
        default_factory=list,
        description="Result rows; each row is aligned with ``columns``.",
    )
    execution_time_ms: float = Field(default=0.0, ge=0, description="Wall-clock execution time.")
    affected_rows: int | None = Field(
        default=None,
        description="Rows affected by DML; None for queries.",
    )
    truncated: bool = Field(
        default=False,
        description="True when the driver stopped fetching at the row limit.",
    )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @classmethod
    def from_python(
        cls,
        columns: list[str],
        rows: list[list[Any]] | list[tuple[Any, ...]],
        **kwargs: Any,
    ) -> QueryResult:
        """Build a result from column names and rows of plain Python values."""
        return cls(
            columns=[ColumnDef(name=name) for name in columns],
            rows=[[CellValue.coerce(v) for v in row] for row in rows],
            **kwargs,
        )
