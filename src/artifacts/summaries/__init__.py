"""Summary helpers for cgraph-core artifacts."""

from artifacts.summaries.builders import (
    build_graph_summary,
    call_edges,
    compute_fan_stats,
)

__all__ = ["build_graph_summary", "call_edges", "compute_fan_stats"]
