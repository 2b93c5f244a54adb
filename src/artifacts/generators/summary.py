"""Call graph summary generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from artifacts.summaries.builders import build_graph_summary
from artifacts.utils import _write_json
from contract.artifacts import SUMMARY_JSON

if TYPE_CHECKING:
    from pathlib import Path

    from graph.table import SymbolTable


class SummaryGenerator:
    """Generator for summary.json (counts, fan stats and cycles)."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "summary"

    def generate(
        self,
        root: Path,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Generate summary.json from the resolved table."""
        table: SymbolTable = kwargs["table"]
        top_n: int = kwargs.get("top_n", 10)

        out_dir.mkdir(parents=True, exist_ok=True)

        summary = build_graph_summary(table, top_n=top_n)
        _write_json(out_dir / SUMMARY_JSON, summary)

        return [], summary.model_dump()


__all__ = ["SUMMARY_JSON", "SummaryGenerator"]
