"""Bind-parameter detection and substitution.

Three placeholder families are recognised:

* **numbered** -- ``$1``, ``$2`` ... (PostgreSQL); repeated tokens are one
  parameter.
* **named** -- ``:name`` (Oracle, SQLAlchemy, ...); repeated tokens are one
  parameter.
* **positional** -- ``?`` (JDBC, SQLite, MySQL drivers); every occurrence is a
  distinct parameter, named ``?1``, ``?2`` ... in order of appearance.

Detection and substitution share one tokenizer, :func:`_scan`, so both see
exactly the same placeholders.  The tokenizer skips string literals, quoted
identifiers, comments, and the PostgreSQL ``::type`` cast (so ``x::int`` never
produces a ``:int`` parameter).  A ``?`` touching ``?``, ``|`` or ``&`` is the
JSONB operator family (``?|``, ``?&``) rather than a placeholder.

This is a lexical scan, not a parser: dollar-quoted bodies (``$$ ... $$``)
are not recognised, so placeholders inside them are still detected.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ParameterStyle(str, enum.Enum):
    """Placeholder convention of a detected parameter."""

    POSITIONAL = "positional"
    NAMED = "named"
    NUMBERED = "numbered"


class Parameter(BaseModel):
    """A bind parameter found in SQL text."""

    name: str = Field(..., description="Placeholder token: '$1', ':name', or '?N' for positional.")
    style: ParameterStyle = Field(..., description="Placeholder convention.")
    index: int = Field(..., ge=0, description="Ordinal among all detected parameters.")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Piece:
    """A slice of the input: plain text, or one placeholder occurrence."""

    text: str
    style: ParameterStyle | None = None
    # Lookup key for values: '$1', ':name' or '?N'.
    name: str = ""


_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_IDENT_CHARS = _IDENT_START | frozenset("0123456789")
_CAST_TYPE_CHARS = _IDENT_CHARS | frozenset("[]")
_DIGITS = frozenset("0123456789")
_JSON_OPERATOR_CHARS = frozenset("?|&")


def _skip_quoted(sql: str, start: int, quote: str) -> int:
    """Return the index just past the literal opened at *start*."""
    i = start + 1
    n = len(sql)
    while i < n:
        if sql[i] == quote:
            if i + 1 < n and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def _skip_while(sql: str, start: int, chars: frozenset[str]) -> int:
    i = start
    while i < len(sql) and sql[i] in chars:
        i += 1
    return i


def _scan(sql: str) -> Iterator[_Piece]:
    """Split *sql* into text pieces and placeholder pieces, losslessly."""
    n = len(sql)
    i = 0
    text_start = 0
    positional = 0

    while i < n:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ""

        if ch in ("'", '"'):
            i = _skip_quoted(sql, i, ch)
            continue

        if ch == "-" and nxt == "-":
            end = sql.find("\n", i)
            i = n if end < 0 else end
            continue

        if ch == "/" and nxt == "*":
            end = sql.find("*/", i + 2)
            i = n if end < 0 else end + 2
            continue

        if ch == ":" and nxt == ":":
            i = _skip_while(sql, i + 2, _CAST_TYPE_CHARS)
            continue

        piece: _Piece | None = None
        end = i + 1

        if ch == "$" and nxt in _DIGITS:
            end = _skip_while(sql, i + 1, _DIGITS)
            token = sql[i:end]
            piece = _Piece(token, ParameterStyle.NUMBERED, token)

        elif ch == ":" and nxt in _IDENT_START:
            end = _skip_while(sql, i + 1, _IDENT_CHARS)
            token = sql[i:end]
            piece = _Piece(token, ParameterStyle.NAMED, token)

        elif (
            ch == "?"
            and (i == 0 or sql[i - 1] not in _JSON_OPERATOR_CHARS)
            and nxt not in _JSON_OPERATOR_CHARS
        ):
            positional += 1
            piece = _Piece(ch, ParameterStyle.POSITIONAL, f"?{positional}")

        if piece is None:
            i += 1
            continue

        if text_start < i:
            yield _Piece(sql[text_start:i])
        yield piece
        i = text_start = end

    if text_start < n:
        yield _Piece(sql[text_start:])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_parameters(sql: str) -> list[Parameter]:
    """Return the bind parameters of *sql* in order of first appearance.

    Numbered and named placeholders are reported once per distinct token;
    each positional ``?`` is reported individually.
    """
    params: list[Parameter] = []
    seen: set[str] = set()

    for piece in _scan(sql):
        if piece.style is None:
            continue
        if piece.style is not ParameterStyle.POSITIONAL:
            if piece.name in seen:
                continue
            seen.add(piece.name)
        params.append(Parameter(name=piece.name, style=piece.style, index=len(params)))

    return params


def substitute_parameters(sql: str, values: Mapping[str, object]) -> str:
    """Replace placeholders in *sql* with escaped literal values.

    Parameters
    ----------
    sql:
        SQL text containing placeholders.
    values:
        Mapping from placeholder name (``'$1'``, ``':name'``, ``'?1'``) to the
        value to inline.  Placeholders without an entry are left untouched.

    Returns
    -------
    str
        The SQL with every supplied placeholder inlined via :func:`escape_value`.
    """
    out: list[str] = []
    replaced = 0
    for piece in _scan(sql):
        if piece.style is not None and piece.name in values:
            out.append(escape_value(values[piece.name]))
            replaced += 1
        else:
            out.append(piece.text)

    logger.debug("Substituted %d placeholder occurrence(s)", replaced)
    return "".join(out)


_PLAIN_NUMBER_RE = re.compile(r"-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")


def escape_value(value: object) -> str:
    """Render *value* as a SQL literal.

    ``NULL`` (any case, or ``None``) stays bare, plain decimal numbers stay
    bare, booleans become ``TRUE``/``FALSE``, and everything else is
    single-quoted with embedded quotes doubled.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    # Exponent and non-finite float forms fall through to quoting.
    text = repr(value) if isinstance(value, int | float) else str(value)
    if text.upper() == "NULL":
        return "NULL"
    if _PLAIN_NUMBER_RE.fullmatch(text):
        return text
    return "'" + text.replace("'", "''") + "'"
