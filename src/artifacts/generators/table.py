"""Persisted table generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from artifacts.table_io import write_table
from contract.artifacts import TABLE_FILENAME

if TYPE_CHECKING:
    from pathlib import Path

    from graph.table import SymbolTable


class TableGenerator:
    """Writes the resolved table as cgraph.yaml."""

    @property
    def name(self) -> str:
        return "table"

    def generate(
        self,
        root: Path,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        table: SymbolTable = kwargs["table"]

        out_dir.mkdir(parents=True, exist_ok=True)
        write_table(table, out_dir / TABLE_FILENAME)

        return [], {"symbol_count": len(table)}
