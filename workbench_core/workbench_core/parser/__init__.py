"""Lexical SQL text handling: dialects, statement splitting, bind parameters."""

from workbench_core.parser.dialects import (
    Dialect,
    UnsupportedDialectError,
    build_explain_query,
    format_identifier,
    qualify_table_name,
    quote_identifier,
)
from workbench_core.parser.error_position import ErrorSpan, locate_error_position
from workbench_core.parser.parameters import (
    Parameter,
    ParameterStyle,
    detect_parameters,
    escape_value,
    substitute_parameters,
)
from workbench_core.parser.splitter import split_statements

__all__ = [
    "Dialect",
    "ErrorSpan",
    "Parameter",
    "ParameterStyle",
    "UnsupportedDialectError",
    "build_explain_query",
    "detect_parameters",
    "escape_value",
    "format_identifier",
    "locate_error_position",
    "qualify_table_name",
    "quote_identifier",
    "split_statements",
    "substitute_parameters",
]
