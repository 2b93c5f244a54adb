"""Artifact and persisted-table contract definitions.

This module defines the stable filenames, formats and field labels that the
builder writes and the readers/validators accept.
"""

from __future__ import annotations

from dataclasses import dataclass

# Artifact schema version for JSON artifacts.
ARTIFACT_SCHEMA_VERSION = 1

# Artifact filename constants (stable contract identifiers).
TABLE_FILENAME = "cgraph.yaml"
SYMBOLS_JSONL = "symbols.jsonl"
SUMMARY_JSON = "summary.json"

# Separator between a symbol and its origin in a private key: ``foo@file1.c``.
PRIVATE_KEY_SEPARATOR = "@"

# Persisted table field labels.
MANDATORY_FIELDS: tuple[str, ...] = ("name", "type", "filename")
OPTIONAL_FIELDS: tuple[str, ...] = (
    "visibility",
    "references",
    "referring",
    "calls",
    "called_by",
)
SCALAR_FIELDS: tuple[str, ...] = ("name", "type", "visibility")
LIST_FIELDS: tuple[str, ...] = (
    "references",
    "referring",
    "calls",
    "called_by",
    "filename",
)
KNOWN_FIELDS = frozenset(MANDATORY_FIELDS + OPTIONAL_FIELDS)


@dataclass(frozen=True)
class ArtifactSpec:
    """Specification for a generated artifact."""

    filename: str
    format: str
    required_fields_note: str


ARTIFACT_SPECS: dict[str, ArtifactSpec] = {
    "table": ArtifactSpec(
        filename=TABLE_FILENAME,
        format="table",
        required_fields_note="Persisted symbol table (name, type, filename required).",
    ),
    "symbols": ArtifactSpec(
        filename=SYMBOLS_JSONL,
        format="jsonl",
        required_fields_note="SymbolArtifact fields required by contract.",
    ),
    "summary": ArtifactSpec(
        filename=SUMMARY_JSON,
        format="json",
        required_fields_note="GraphSummary fields required by contract.",
    ),
}
