"""Map database error messages back to a span of the submitted SQL.

Drivers report error locations in different ways.  Three are recognised, in
this order:

* PostgreSQL family -- ``... at character 42`` (1-based offset); the span runs
  to the end of the token at that offset.
* MySQL family -- ``... at line 3``; the span is the whole line.
* SQL Server -- ``Incorrect syntax near 'FROMM'``; the span is the last
  occurrence of the quoted token in the script.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

_PG_CHARACTER_RE = re.compile(r"at character (\d+)", re.IGNORECASE)
_MYSQL_LINE_RE = re.compile(r"at line (\d+)", re.IGNORECASE)
_NEAR_TOKEN_RE = re.compile(r"""near ['"](.*?)['"]""", re.IGNORECASE)


class ErrorSpan(BaseModel):
    """Half-open character range ``[start, end)`` within the SQL text."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


def locate_error_position(message: str, sql: str) -> ErrorSpan | None:
    """Return the span of *sql* that *message* points at, or ``None``."""
    m = _PG_CHARACTER_RE.search(message)
    if m:
        pos = int(m.group(1)) - 1
        if 0 <= pos < len(sql):
            end = pos + 1
            while end < len(sql) and not sql[end].isspace():
                end += 1
            return ErrorSpan(start=pos, end=end)

    m = _MYSQL_LINE_RE.search(message)
    if m:
        line_no = int(m.group(1)) - 1
        lines = sql.split("\n")
        if 0 <= line_no < len(lines):
            offset = sum(len(line) + 1 for line in lines[:line_no])
            return ErrorSpan(start=offset, end=offset + len(lines[line_no]))

    m = _NEAR_TOKEN_RE.search(message)
    if m and m.group(1):
        token = m.group(1)
        idx = sql.rfind(token)
        if idx >= 0:
            return ErrorSpan(start=idx, end=idx + len(token))

    return None
