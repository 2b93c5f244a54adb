"""Record and report types exposed at the contract boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from artifacts.models.artifacts.summary import GraphSummary
from artifacts.models.artifacts.symbols import SymbolArtifact, SymbolRecord

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class ValidationMessage:
    artifact: str
    message: str
    path: Path | None = None
    line: int | None = None
    key: str | None = None

    def location(self) -> str:
        if self.path is None:
            return self.key or self.artifact
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "path": None if self.path is None else str(self.path),
            "line": self.line,
            "key": self.key,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


__all__ = [
    "GraphSummary",
    "SymbolArtifact",
    "SymbolRecord",
    "ValidationMessage",
    "ValidationResult",
]
