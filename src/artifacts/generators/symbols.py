"""Symbols artifact generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from artifacts.models.artifacts.symbols import SymbolArtifact
from artifacts.utils import _write_jsonl
from contract.artifacts import SYMBOLS_JSONL

if TYPE_CHECKING:
    from pathlib import Path

    from graph.table import SymbolTable


class SymbolsGenerator:
    """Generates symbols.jsonl, one record per symbol key."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "symbols"

    def generate(
        self,
        root: Path,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Generate symbols artifact."""
        table: SymbolTable = kwargs["table"]

        out_dir.mkdir(parents=True, exist_ok=True)

        all_symbols = [
            SymbolArtifact(key=key, **table[key].model_dump())
            for key in sorted(table)
        ]

        _write_jsonl(out_dir / SYMBOLS_JSONL, all_symbols)

        symbol_dicts = [s.model_dump(by_alias=True) for s in all_symbols]

        return symbol_dicts, {}
