"""Build a resolved SymbolTable from a tree of cgraph dumps."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from graph.table import SymbolTable
from parse.dump_lines import parse_dump_lines, read_symbol_section
from parse.resolution import resolve_symbol_table
from scan.files import find_dump_files
from utils import origin_for_dump

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import CGraphConfig

logger = logging.getLogger(__name__)


def _read_sections(files: list[Path], jobs: int) -> list[list[str]]:
    if jobs <= 1 or len(files) <= 1:
        return [read_symbol_section(path) for path in files]

    with ThreadPoolExecutor(max_workers=jobs) as executor:
        return list(executor.map(read_symbol_section, files))


def build_from_files(
    files: list[Path],
    root: Path,
    *,
    suffix: str,
    jobs: int = 1,
) -> SymbolTable:
    """Parse ``files`` in the given order into one table and resolve it.

    Reads may happen on a thread pool; parsing and resolution always run on
    the calling thread, in file order.
    """
    table = SymbolTable()
    sections = _read_sections(files, jobs)

    for path, lines in zip(files, sections, strict=True):
        origin = origin_for_dump(path, root, suffix)
        logger.debug("Parsing %s (%d lines) as %s", path, len(lines), origin)
        parse_dump_lines(lines, origin, table)

    resolve_symbol_table(table)
    return table


def build_symbol_table(
    root: Path,
    *,
    config: CGraphConfig | None = None,
    out_dir_name: str | None = None,
) -> SymbolTable:
    """Build the call graph of every dump under ``root``.

    Args:
        root: Directory searched recursively for dump files
        config: Optional configuration (defaults to ``cgraph.toml`` under root)
        out_dir_name: Top-level directory to skip; defaults to the configured
            output directory

    Returns:
        The resolved table. It is not validated here.

    Raises:
        DumpFormatError: If any dump violates the expected format.
    """
    if config is None:
        from rules.config import load_config

        config = load_config(root)

    if out_dir_name is None:
        out_dir_name = config.output_dir

    files = list(
        find_dump_files(
            root,
            suffix=config.dump_suffix,
            output_dir=out_dir_name,
            include_patterns=config.include,
            exclude_patterns=config.exclude,
            nested_gitignore=config.nested_gitignore,
        )
    )
    logger.info("Found %d dump files under %s", len(files), root)

    table = build_from_files(files, root, suffix=config.dump_suffix, jobs=config.jobs)
    logger.info("Built call graph with %d symbols", len(table))
    return table


__all__ = ["build_from_files", "build_symbol_table"]
