"""Read and write the persisted symbol table (``cgraph.yaml``).

The format is a small YAML-compatible subset::

    bar:
      name: bar
      type: function
      visibility: public
      called_by: [foo@src/file1.c]
      filename: [src/file2.c]

Keys are written in sorted order; scalar fields come first, then lists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError

from artifacts.models.artifacts.symbols import SymbolRecord
from contract.artifacts import (
    KNOWN_FIELDS,
    LIST_FIELDS,
    MANDATORY_FIELDS,
    SCALAR_FIELDS,
    TABLE_FILENAME,
)
from contract.models import ValidationMessage
from graph.table import SymbolTable

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

INDENT = "  "
LIST_SEPARATOR = ", "

_KEY_LINE = re.compile(r"^(\S.*):$")
_FIELD_LINE = re.compile(r"^  (\S+):\s*(.*)$")
_LIST_VALUE = re.compile(r"^\[(.*)\]$")


@dataclass
class TableReadResult:
    """Outcome of reading a persisted table; ``table`` is None on any error."""

    table: SymbolTable | None
    errors: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.table is not None


def _record_lines(key: str, record: SymbolRecord) -> list[str]:
    data = record.model_dump(by_alias=True)
    lines = [f"{key}:"]

    for name in SCALAR_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        lines.append(f"{INDENT}{name}: {value}")

    for name in LIST_FIELDS:
        values = data[name]
        if not values and name not in MANDATORY_FIELDS:
            continue
        lines.append(f"{INDENT}{name}: [{LIST_SEPARATOR.join(values)}]")

    return lines


def format_table(table: SymbolTable) -> str:
    """Render ``table`` in the persisted format."""
    lines: list[str] = []
    for key in sorted(table):
        lines.extend(_record_lines(key, table[key]))
    return "".join(f"{line}\n" for line in lines)


def write_table(table: SymbolTable, path: Path) -> None:
    path.write_text(format_table(table), encoding="utf-8")


def _parse_list(value: str) -> list[str] | None:
    match = _LIST_VALUE.match(value)
    if match is None:
        return None
    inner = match.group(1).strip()
    if not inner:
        return []
    # Origins may contain spaces, so only ", " separates items.
    items = inner.split(LIST_SEPARATOR)
    if any(not item or item != item.strip() for item in items):
        return None
    return items


class _TableReader:
    def __init__(self, path: Path | None) -> None:
        self.path = path
        self.errors: list[ValidationMessage] = []
        self.raw: dict[str, dict[str, object]] = {}
        self.key_lines: dict[str, int] = {}
        self.current_key: str | None = None

    def error(self, message: str, line: int | None, key: str | None = None) -> None:
        self.errors.append(
            ValidationMessage(
                artifact="table",
                message=message,
                path=self.path,
                line=line,
                key=key,
            )
        )

    def feed(self, line_number: int, raw_line: str) -> None:
        line = raw_line.rstrip()
        if not line or line.lstrip().startswith("#"):
            return

        key_match = _KEY_LINE.match(line)
        if key_match is not None:
            key = key_match.group(1)
            if key in self.raw:
                self.error(f"Symbol {key!r} is defined twice.", line_number, key)
                self.current_key = None
                return
            self.raw[key] = {}
            self.key_lines[key] = line_number
            self.current_key = key
            return

        field_match = _FIELD_LINE.match(line)
        if field_match is None:
            self.error(f"Unrecognised line: {line!r}.", line_number)
            return

        label, value = field_match.groups()
        if self.current_key is None:
            self.error(
                f"Field {label!r} appears before any symbol key line.", line_number
            )
            return

        key = self.current_key
        fields = self.raw[key]
        if label not in KNOWN_FIELDS:
            self.error(f"Unknown field {label!r}.", line_number, key)
            return
        if label in fields:
            self.error(f"Field {label!r} is defined twice.", line_number, key)
            return

        if label in LIST_FIELDS:
            items = _parse_list(value)
            if items is None:
                self.error(
                    f"Field {label!r} is not a well-formed list: {value!r}.",
                    line_number,
                    key,
                )
                return
            fields[label] = items
        elif label == "visibility" and not value.strip():
            # An empty visibility is the private default.
            fields[label] = "private"
        else:
            fields[label] = value.strip()

    def build(self) -> SymbolTable | None:
        records: dict[str, SymbolRecord] = {}

        for key, fields in self.raw.items():
            line = self.key_lines[key]
            missing = [name for name in MANDATORY_FIELDS if name not in fields]
            if missing:
                self.error(
                    f"Missing mandatory field(s): {', '.join(missing)}.", line, key
                )
                continue
            try:
                records[key] = SymbolRecord.model_validate(fields)
            except ValidationError as exc:
                self.error(f"Invalid field value: {exc}.", line, key)

        if self.errors:
            return None
        return SymbolTable(records)


def read_table(
    source: str | Iterable[str],
    *,
    path: Path | None = None,
) -> TableReadResult:
    """Parse a persisted table from text or an iterable of lines.

    Every problem found is reported; the table is returned only when there
    were none.
    """
    lines = source.splitlines() if isinstance(source, str) else source
    reader = _TableReader(path)
    for line_number, raw_line in enumerate(lines, 1):
        reader.feed(line_number, raw_line)

    table = reader.build()
    return TableReadResult(table=table, errors=reader.errors)


def load_table(path: Path) -> TableReadResult:
    """Read a persisted table file; a directory means its ``cgraph.yaml``."""
    if path.is_dir():
        path = path / TABLE_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return TableReadResult(
            table=None,
            errors=[
                ValidationMessage(
                    artifact="table",
                    message=f"Failed to read file: {exc}.",
                    path=path,
                )
            ],
        )
    return read_table(text, path=path)


__all__ = [
    "TableReadResult",
    "format_table",
    "load_table",
    "read_table",
    "write_table",
]
