"""Parsing of the "Initial Symbol table" section of GCC cgraph dumps.

A dump section looks like::

    Initial Symbol table:

    bar/1 (bar) @0x7f0c2a1b4000
      Type: function
      Visibility: external public
      Called by: foo/0 (1.00 per call)
    foo/0 (foo) @0x7f0c2a1b4100
      Type: function definition analyzed
      Visibility:
      Calls: bar/1 (1.00 per call)

Each header line opens a record keyed by the private form of the symbol
(``foo@origin``); a public Visibility line re-keys it to the bare symbol.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from artifacts.models.artifacts.symbols import EdgeField
from contract.artifacts import PRIVATE_KEY_SEPARATOR
from contract.errors import DumpFormatError
from utils import to_private_key, to_public_key

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from graph.table import SymbolTable

logger = logging.getLogger(__name__)

SECTION_HEADER = "Initial Symbol table:"

_HEADER_LINE = re.compile(r"^(.+?)/\d+ \((.+?)\) @0x([0-9a-fA-F]+)$")
_FIELD_LINE = re.compile(r"^  (Type|Visibility|References|Referring|Called by|Calls):\s*(.*)$")
_INNER_PARENS = re.compile(r"\([^()]*\)")
_ORDINAL_SUFFIX = re.compile(r"/\d+")


class FieldLabel(str, Enum):
    """Field labels recognised inside a symbol block."""

    TYPE = "Type"
    VISIBILITY = "Visibility"
    REFERENCES = "References"
    REFERRING = "Referring"
    CALLS = "Calls"
    CALLED_BY = "Called by"

    @property
    def edge_field(self) -> EdgeField | None:
        return _EDGE_FIELDS.get(self)


_EDGE_FIELDS: dict[FieldLabel, EdgeField] = {
    FieldLabel.REFERENCES: EdgeField.REFERENCES,
    FieldLabel.REFERRING: EdgeField.REFERRING,
    FieldLabel.CALLS: EdgeField.CALLS,
    FieldLabel.CALLED_BY: EdgeField.CALLED_BY,
}


@dataclass(frozen=True)
class HeaderLine:
    symbol: str
    name: str
    address: str


@dataclass(frozen=True)
class FieldLine:
    label: FieldLabel
    value: str


DumpLine = HeaderLine | FieldLine


@dataclass(frozen=True)
class VisibilityFlags:
    """Decomposition of a Visibility value into the four flags we rely on."""

    public: bool
    artificial: bool
    external: bool
    weak: bool

    @classmethod
    def from_text(cls, text: str) -> VisibilityFlags:
        """Compute flags by substring and reject impossible combinations.

        Raises:
            DumpFormatError: If the combination contradicts GCC's dump format.
        """
        flags = cls(
            public="public" in text,
            artificial="artificial" in text,
            external="external" in text,
            weak="weak" in text,
        )

        if flags.artificial and flags.public:
            msg = f"Visibility {text!r} is both artificial and public"
            raise DumpFormatError(msg)
        if flags.external and not flags.public:
            msg = f"Visibility {text!r} is external but not public"
            raise DumpFormatError(msg)
        if flags.weak and not flags.public:
            msg = f"Visibility {text!r} is weak but not public"
            raise DumpFormatError(msg)

        return flags


def classify_line(line: str) -> DumpLine | None:
    """Classify one right-trimmed line of the symbol table section.

    Returns:
        A HeaderLine or FieldLine, or None for indented lines with labels
        we do not track (Availability, Function flags, ...).

    Raises:
        DumpFormatError: For a non-indented line that is not a valid header.
    """
    if not line[:1].isspace():
        match = _HEADER_LINE.match(line)
        if match is None:
            msg = f"Malformed symbol header line: {line!r}"
            raise DumpFormatError(msg)
        symbol, name, address = match.groups()
        if PRIVATE_KEY_SEPARATOR in symbol or PRIVATE_KEY_SEPARATOR in name:
            msg = (
                f"Symbol {symbol!r} or name {name!r} contains the reserved "
                f"{PRIVATE_KEY_SEPARATOR!r} separator"
            )
            raise DumpFormatError(msg)
        return HeaderLine(symbol=symbol, name=name, address=address)

    match = _FIELD_LINE.match(line)
    if match is None:
        return None
    return FieldLine(label=FieldLabel(match.group(1)), value=match.group(2))


def strip_edge_tokens(value: str) -> list[str]:
    """Split an edge list value into bare symbol tokens.

    Parenthesised annotations (nested ones included) and ``/ordinal``
    suffixes are removed first.

    Examples:
        >>> strip_edge_tokens("bar/1 (1.00 per call) baz/7 (inlined)")
        ['bar', 'baz']
        >>> strip_edge_tokens("qux/3 (1073741824 (estimated locally),1.00 per call)")
        ['qux']
    """
    previous = None
    while previous != value:
        previous = value
        value = _INNER_PARENS.sub(" ", value)
    value = _ORDINAL_SUFFIX.sub("", value)
    return value.split()


def extract_symbol_section(lines: Iterable[str]) -> list[str]:
    """Return the right-trimmed lines of the initial symbol table section.

    The line right after the sentinel is blank and skipped; the section ends
    at the next blank line.
    """
    section: list[str] = []
    in_section = False
    skip_blank = False

    for raw_line in lines:
        line = raw_line.rstrip()
        if not in_section:
            if line == SECTION_HEADER:
                in_section = True
                skip_blank = True
            continue
        if skip_blank:
            skip_blank = False
            if not line:
                continue
        if not line:
            break
        section.append(line)

    return section


def read_symbol_section(path: Path) -> list[str]:
    """Read a dump file and return its symbol table section."""
    with path.open(encoding="utf-8", errors="replace") as handle:
        return extract_symbol_section(handle)


class DumpFileParser:
    """Feeds the lines of one dump into a shared SymbolTable.

    The parser keeps a single pointer, the key of the record currently being
    filled in.
    """

    def __init__(self, table: SymbolTable, origin: str) -> None:
        self.table = table
        self.origin = origin
        self.current_key = ""

    def feed(self, line: str) -> None:
        parsed = classify_line(line)
        if parsed is None:
            return
        if isinstance(parsed, HeaderLine):
            self._handle_header(parsed)
            return

        if self.current_key not in self.table:
            # Before the first header, or the record was artificial.
            return

        label = parsed.label
        if label is FieldLabel.TYPE:
            self._handle_type(parsed.value)
        elif label is FieldLabel.VISIBILITY:
            self._handle_visibility(parsed.value)
        else:
            edge_field = label.edge_field
            if edge_field is None:
                msg = f"Unhandled field label {label!r}"
                raise AssertionError(msg)
            self.table[self.current_key].add_edges(
                edge_field, strip_edge_tokens(parsed.value)
            )

    def finish(self) -> None:
        """Check the last record of the file for spuriousness."""
        if self.current_key:
            self.table.remove_if_spurious(self.current_key)

    def _handle_header(self, header: HeaderLine) -> None:
        key = to_private_key(header.symbol, self.origin)

        if self.current_key and self.current_key not in (header.symbol, key):
            self.table.remove_if_spurious(self.current_key)

        existing = self.table.get(key)
        if existing is not None and (
            existing.name != header.name or self.origin not in existing.filename
        ):
            msg = (
                f"Symbol {key!r} seen again with name {header.name!r} "
                f"(stored: {existing.name!r}, origins {existing.filename!r})"
            )
            raise DumpFormatError(msg)

        record = self.table.ensure(key)
        record.name = header.name
        record.add_origins([self.origin])
        self.current_key = key

    def _handle_type(self, value: str) -> None:
        if "function" in value:
            kind = "function"
        elif "variable" in value:
            kind = "variable"
        else:
            msg = f"Type {value!r} of {self.current_key!r} is neither function nor variable"
            raise DumpFormatError(msg)

        record = self.table[self.current_key]
        if record.kind is not None and record.kind != kind:
            msg = (
                f"Type of {self.current_key!r} changed from {record.kind!r} "
                f"to {kind!r}"
            )
            raise DumpFormatError(msg)
        record.kind = kind

    def _handle_visibility(self, value: str) -> None:
        flags = VisibilityFlags.from_text(value)
        record = self.table[self.current_key]

        if flags.public:
            if flags.external:
                # Defined in another translation unit.
                record.filename = []
            record.visibility = "public"
            public_key = to_public_key(self.current_key)
            self.table.merge(public_key, self.current_key)
            self.current_key = public_key
            return

        if flags.artificial and record.visibility is None:
            logger.debug("Dropping artificial symbol %s", self.current_key)
            self.table.remove(self.current_key)
            return

        if record.visibility == "public":
            msg = f"Visibility of public symbol {self.current_key!r} changed to private"
            raise DumpFormatError(msg)
        record.visibility = "private"


def parse_dump_lines(lines: Iterable[str], origin: str, table: SymbolTable) -> None:
    """Parse the symbol table section lines of one translation unit."""
    parser = DumpFileParser(table, origin)
    for line in lines:
        parser.feed(line)
    parser.finish()


def parse_dump_text(text: str, origin: str, table: SymbolTable) -> None:
    """Parse a whole dump file's text into ``table``."""
    parse_dump_lines(extract_symbol_section(text.splitlines()), origin, table)


__all__ = [
    "SECTION_HEADER",
    "DumpFileParser",
    "DumpLine",
    "FieldLabel",
    "FieldLine",
    "HeaderLine",
    "VisibilityFlags",
    "classify_line",
    "extract_symbol_section",
    "parse_dump_lines",
    "parse_dump_text",
    "read_symbol_section",
    "strip_edge_tokens",
]
