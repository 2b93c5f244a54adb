"""Artifact generators for cgraph-core."""

from artifacts.generators.summary import SummaryGenerator
from artifacts.generators.symbols import SymbolsGenerator
from artifacts.generators.table import TableGenerator

__all__ = [
    "SummaryGenerator",
    "SymbolsGenerator",
    "TableGenerator",
]
