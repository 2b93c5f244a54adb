"""Stable contract surface for cgraph-core.

Filenames, field labels and the report types that readers of the persisted
table and the JSON artifacts rely on.
"""

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    SUMMARY_JSON,
    SYMBOLS_JSONL,
    TABLE_FILENAME,
    ArtifactSpec,
)
from contract.errors import DumpFormatError, MergeConflictError


def __getattr__(name: str) -> object:
    if name in {
        "GraphSummary",
        "SymbolArtifact",
        "SymbolRecord",
        "ValidationMessage",
        "ValidationResult",
    }:
        from contract import models

        return getattr(models, name)

    if name in {"validate_artifacts", "validate_table"}:
        from contract.validation import validate_artifacts, validate_table

        return {
            "validate_artifacts": validate_artifacts,
            "validate_table": validate_table,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "ARTIFACT_SPECS",
    "SUMMARY_JSON",
    "SYMBOLS_JSONL",
    "TABLE_FILENAME",
    "ArtifactSpec",
    "DumpFormatError",
    "GraphSummary",
    "MergeConflictError",
    "SymbolArtifact",
    "SymbolRecord",
    "ValidationMessage",
    "ValidationResult",
    "validate_artifacts",
    "validate_table",
]
