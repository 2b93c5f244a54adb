"""Summary builders for artifact generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.summary import GraphSummary
from graph.algos import build_forward_graph, find_cycles

if TYPE_CHECKING:
    from graph.table import SymbolTable


def compute_fan_stats(
    edges: list[tuple[str, str]],
) -> tuple[dict[str, int], dict[str, int]]:
    """Compute fan-in and fan-out statistics from edges."""
    fan_in: dict[str, int] = {}
    fan_out: dict[str, int] = {}

    for source, target in edges:
        fan_out[source] = fan_out.get(source, 0) + 1
        fan_in[target] = fan_in.get(target, 0) + 1

    return fan_in, fan_out


def call_edges(table: SymbolTable) -> list[tuple[str, str]]:
    """Return the sorted ``(caller, callee)`` pairs of the table."""
    return sorted(
        (key, callee) for key, record in table.items() for callee in record.calls
    )


def build_graph_summary(table: SymbolTable, *, top_n: int = 10) -> GraphSummary:
    """Summarize a resolved table.

    Fan statistics count direct calls only; cycles are computed over calls
    and references together.
    """
    records = [record for _key, record in table.items()]
    edges = call_edges(table)
    fan_in, fan_out = compute_fan_stats(edges)

    cycles = [sorted(scc) for scc in find_cycles(build_forward_graph(table))]
    cycles.sort()

    functions = {key for key, record in table.items() if record.kind == "function"}
    top_functions = sorted(
        (key for key in fan_in if key in functions),
        key=lambda k: (-fan_in[k], k),
    )[:top_n]

    return GraphSummary(
        symbol_count=len(records),
        function_count=sum(1 for r in records if r.kind == "function"),
        variable_count=sum(1 for r in records if r.kind == "variable"),
        public_count=sum(1 for r in records if r.visibility == "public"),
        private_count=sum(1 for r in records if r.visibility != "public"),
        call_edge_count=len(edges),
        reference_edge_count=sum(len(r.references) for r in records),
        cycles=cycles,
        fan_in=dict(sorted(fan_in.items())),
        fan_out=dict(sorted(fan_out.items())),
        top_functions=top_functions,
    )
