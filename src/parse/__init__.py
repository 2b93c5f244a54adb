"""Parsing of GCC cgraph dumps and resolution of their edge tokens."""

from parse.dump_lines import (
    DumpFileParser,
    FieldLabel,
    VisibilityFlags,
    classify_line,
    extract_symbol_section,
    parse_dump_lines,
    parse_dump_text,
    read_symbol_section,
    strip_edge_tokens,
)
from parse.resolution import resolve_symbol_table

__all__ = [
    "DumpFileParser",
    "FieldLabel",
    "VisibilityFlags",
    "classify_line",
    "extract_symbol_section",
    "parse_dump_lines",
    "parse_dump_text",
    "read_symbol_section",
    "resolve_symbol_table",
    "strip_edge_tokens",
]
