"""Multi-statement script splitting.

Splits a script on top-level semicolons in a single left-to-right pass.  The
scanner understands exactly four lexical contexts and nothing else about SQL:

* single-quoted string literals (``'it''s'`` -- a doubled quote stays inside),
* double-quoted identifiers (``"a""b"``),
* line comments (``-- ...`` up to the newline),
* block comments (``/* ... */``, not nested).

A semicolon inside any of those contexts is ordinary text.  Each returned
statement spans from its first to its last *code* character, where code is
anything that is neither whitespace nor comment text, so leading and trailing
comments are dropped and comment-only segments produce nothing.  Because no
statement ever ends inside a line comment, joining the output with ``";\\n"``
and splitting again yields the same statements.
"""

from __future__ import annotations

import enum
import logging

logger = logging.getLogger(__name__)


class _Mode(enum.Enum):
    CODE = enum.auto()
    SINGLE_QUOTE = enum.auto()
    DOUBLE_QUOTE = enum.auto()
    LINE_COMMENT = enum.auto()
    BLOCK_COMMENT = enum.auto()


_QUOTE_MODES: dict[str, _Mode] = {
    "'": _Mode.SINGLE_QUOTE,
    '"': _Mode.DOUBLE_QUOTE,
}
_QUOTE_CHARS: dict[_Mode, str] = {mode: char for char, mode in _QUOTE_MODES.items()}


def split_statements(sql: str) -> list[str]:
    """Split *sql* into individually executable statements.

    Parameters
    ----------
    sql:
        Raw script text, possibly containing several statements.

    Returns
    -------
    list[str]
        Trimmed, non-empty statements in script order, without their
        terminating semicolons.  Empty or comment-only input yields ``[]``.
    """
    statements: list[str] = []
    mode = _Mode.CODE
    # Bounds of the code seen so far in the current segment; -1 = none yet.
    first_code = -1
    code_end = -1

    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ""

        if mode is _Mode.LINE_COMMENT:
            if ch == "\n":
                mode = _Mode.CODE
            i += 1
            continue

        if mode is _Mode.BLOCK_COMMENT:
            if ch == "*" and nxt == "/":
                mode = _Mode.CODE
                i += 2
            else:
                i += 1
            continue

        if mode in _QUOTE_CHARS:
            quote = _QUOTE_CHARS[mode]
            if ch == quote and nxt == quote:
                i += 2
            else:
                if ch == quote:
                    mode = _Mode.CODE
                i += 1
            code_end = i
            continue

        # Top level.
        if ch == "-" and nxt == "-":
            mode = _Mode.LINE_COMMENT
            i += 2
            continue
        if ch == "/" and nxt == "*":
            mode = _Mode.BLOCK_COMMENT
            i += 2
            continue
        if ch == ";":
            if first_code >= 0:
                statements.append(sql[first_code:code_end])
            first_code = code_end = -1
            i += 1
            continue

        if ch in _QUOTE_MODES:
            mode = _QUOTE_MODES[ch]
        if not ch.isspace():
            if first_code < 0:
                first_code = i
            code_end = i + 1
        i += 1

    if first_code >= 0:
        statements.append(sql[first_code:code_end])

    logger.debug("Split script of %d chars into %d statement(s)", n, len(statements))
    return statements
