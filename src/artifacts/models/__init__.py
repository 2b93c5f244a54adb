"""Model namespace for cgraph-core schemas."""

from artifacts.models.artifacts.summary import GraphSummary
from artifacts.models.artifacts.symbols import (
    FORWARD_FIELDS,
    REVERSE_FIELDS,
    EdgeField,
    SymbolArtifact,
    SymbolKind,
    SymbolRecord,
    Visibility,
)

__all__ = [
    "FORWARD_FIELDS",
    "REVERSE_FIELDS",
    "EdgeField",
    "GraphSummary",
    "SymbolArtifact",
    "SymbolKind",
    "SymbolRecord",
    "Visibility",
]
