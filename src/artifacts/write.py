from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.generators import SummaryGenerator, SymbolsGenerator, TableGenerator
from artifacts.models.artifacts.summary import GraphSummary
from artifacts.utils import _get_output_dir_name
from contract.artifacts import SUMMARY_JSON, SYMBOLS_JSONL, TABLE_FILENAME
from graph.builder import build_symbol_table
from rules.config import load_config, resolve_output_dir

if TYPE_CHECKING:
    from pathlib import Path

    from graph.table import SymbolTable
    from rules.config import CGraphConfig

logger = logging.getLogger(__name__)


def write_artifacts(table: SymbolTable, *, root: Path, out_dir: Path) -> GraphSummary:
    """Write the persisted table, symbols.jsonl and summary.json for ``table``."""
    TableGenerator().generate(root=root, out_dir=out_dir, table=table)
    SymbolsGenerator().generate(root=root, out_dir=out_dir, table=table)
    _, summary_dict = SummaryGenerator().generate(
        root=root, out_dir=out_dir, table=table
    )
    return GraphSummary(**summary_dict)


def generate_all_artifacts(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: CGraphConfig | None = None,
) -> dict[str, object]:
    """Build the call graph of a tree of dumps and write its artifacts.

    Args:
        root: Root directory containing the cgraph dumps
        out_dir: Optional output directory for generated artifacts
        config: Optional configuration (defaults to cgraph.toml under root)

    Returns:
        Dictionary with counts and list of generated artifact paths.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    out_dir_name = _get_output_dir_name(out_dir.resolve(), root.resolve())
    table = build_symbol_table(
        root,
        config=config,
        out_dir_name=out_dir_name or config.output_dir,
    )
    summary = write_artifacts(table, root=root, out_dir=out_dir)
    logger.info("Wrote artifacts for %d symbols to %s", len(table), out_dir)

    artifacts_list = [TABLE_FILENAME, SYMBOLS_JSONL, SUMMARY_JSON]

    return {
        "symbol_count": summary.symbol_count,
        "function_count": summary.function_count,
        "variable_count": summary.variable_count,
        "call_edge_count": summary.call_edge_count,
        "reference_edge_count": summary.reference_edge_count,
        "cycle_count": len(summary.cycles),
        "artifacts": [str(out_dir / name) for name in artifacts_list],
    }
