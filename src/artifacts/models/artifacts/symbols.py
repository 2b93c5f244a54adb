"""Symbol models for the call graph.

This module contains the record stored per symbol key (functions and
global/static variables) and the closed set of edge fields linking them.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from contract.artifacts import ARTIFACT_SCHEMA_VERSION

SymbolKind = Literal["function", "variable"]
Visibility = Literal["private", "public"]


class EdgeField(str, Enum):
    """The four edge lists of a symbol record."""

    REFERENCES = "references"
    REFERRING = "referring"
    CALLS = "calls"
    CALLED_BY = "called_by"

    @property
    def reverse(self) -> EdgeField:
        """The field holding the inverse edge on the target record."""
        return _REVERSE_FIELDS[self]

    @property
    def is_forward(self) -> bool:
        return self in (EdgeField.REFERENCES, EdgeField.CALLS)


_REVERSE_FIELDS: dict[EdgeField, EdgeField] = {
    EdgeField.REFERENCES: EdgeField.REFERRING,
    EdgeField.REFERRING: EdgeField.REFERENCES,
    EdgeField.CALLS: EdgeField.CALLED_BY,
    EdgeField.CALLED_BY: EdgeField.CALLS,
}

FORWARD_FIELDS: tuple[EdgeField, ...] = (EdgeField.REFERENCES, EdgeField.CALLS)
REVERSE_FIELDS: tuple[EdgeField, ...] = (EdgeField.REFERRING, EdgeField.CALLED_BY)


def _append_unique(target: list[str], items: Iterable[str]) -> None:
    seen = set(target)
    for item in items:
        if item not in seen:
            seen.add(item)
            target.append(item)


class SymbolRecord(BaseModel):
    """One declared function or variable in the call graph."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    kind: SymbolKind | None = Field(default=None, alias="type")
    visibility: Visibility | None = Field(
        default=None, description="None until a Visibility line was parsed"
    )
    filename: list[str] = Field(
        default_factory=list,
        description="Origin files; several only for weak public symbols",
    )
    references: list[str] = Field(default_factory=list)
    referring: list[str] = Field(default_factory=list)
    calls: list[str] = Field(default_factory=list)
    called_by: list[str] = Field(default_factory=list)

    def edges(self, field: EdgeField) -> list[str]:
        return getattr(self, field.value)

    def set_edges(self, field: EdgeField, keys: Iterable[str]) -> None:
        values: list[str] = []
        _append_unique(values, keys)
        setattr(self, field.value, values)

    def add_edges(self, field: EdgeField, keys: Iterable[str]) -> None:
        """Union ``keys`` into ``field``, keeping first-appearance order."""
        _append_unique(self.edges(field), keys)

    def add_origins(self, origins: Iterable[str]) -> None:
        _append_unique(self.filename, origins)

    def has_edges(self) -> bool:
        return any(self.edges(field) for field in EdgeField)


class SymbolArtifact(SymbolRecord):
    """Schema for symbols.jsonl records."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    key: str


__all__ = [
    "FORWARD_FIELDS",
    "REVERSE_FIELDS",
    "EdgeField",
    "SymbolArtifact",
    "SymbolKind",
    "SymbolRecord",
    "Visibility",
]
