"""Graph algorithms over the symbol table.

Path and cycle search are backtracking depth-first traversals. ``found`` is
the current path; ``dead`` memoizes keys proven not to lead to success so
sibling branches never re-explore them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from artifacts.models.artifacts.symbols import EdgeField
from rules.patterns import compile_pattern, compile_patterns, is_ignored

if TYPE_CHECKING:
    import re
    from collections.abc import Iterable, Iterator

    from graph.table import SymbolTable

logger = logging.getLogger(__name__)


class UnresolvedEdgeError(RuntimeError):
    """Raised when a stored edge names a key with no record in the table."""


class Direction(str, Enum):
    """Edge direction followed by a search."""

    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def fields(self) -> tuple[EdgeField, EdgeField]:
        if self is Direction.FORWARD:
            return (EdgeField.CALLS, EdgeField.REFERENCES)
        return (EdgeField.CALLED_BY, EdgeField.REFERRING)


@dataclass
class _SearchState:
    """Per-call traversal state; never shared between queries."""

    found: list[str] = field(default_factory=list)
    on_path: set[str] = field(default_factory=set)
    dead: set[str] = field(default_factory=set)

    def push(self, key: str) -> None:
        self.found.append(key)
        self.on_path.add(key)

    def retire(self) -> None:
        key = self.found.pop()
        self.on_path.discard(key)
        self.dead.add(key)


def next_symbols(table: SymbolTable, key: str, direction: Direction) -> list[str]:
    """Return the neighbors of ``key`` in ``direction``, in stored order.

    Raises:
        UnresolvedEdgeError: If an edge names a key missing from the table.
    """
    record = table[key]
    neighbors: list[str] = []
    for edge_field in direction.fields:
        for target in record.edges(edge_field):
            if target not in table:
                msg = (
                    f"Edge {key!r} -> {target!r} in field {edge_field.value!r} "
                    "does not resolve to any symbol"
                )
                raise UnresolvedEdgeError(msg)
            neighbors.append(target)
    return neighbors


def _is_function_named(table: SymbolTable, key: str, pattern: re.Pattern[str]) -> bool:
    record = table[key]
    return record.kind == "function" and pattern.search(record.name) is not None


def _traverse(
    table: SymbolTable,
    start: str,
    direction: Direction,
    state: _SearchState,
    *,
    end_pattern: re.Pattern[str] | None,
) -> bool:
    """Depth-first search from ``start``.

    With ``end_pattern`` this is a path search: revisits fail and success is
    reaching a matching function. Without it this is a cycle search: a
    revisit of a key on the current path succeeds.
    """

    def enter(key: str) -> bool | None:
        # True: success, False: fail, None: pushed and must be expanded.
        if key in state.dead:
            return False
        if key in state.on_path:
            if end_pattern is not None:
                return False
            state.found.append(key)
            return True
        state.push(key)
        if end_pattern is not None and _is_function_named(table, key, end_pattern):
            return True
        return None

    outcome = enter(start)
    if outcome is not None:
        return outcome

    stack: list[tuple[str, Iterator[str]]] = [
        (start, iter(next_symbols(table, start, direction)))
    ]
    while stack:
        key, neighbors = stack[-1]
        nxt = next(neighbors, None)
        if nxt is None:
            stack.pop()
            state.retire()
            logger.debug("Dead end at %s", key)
            continue

        outcome = enter(nxt)
        if outcome is True:
            return True
        if outcome is None:
            stack.append((nxt, iter(next_symbols(table, nxt, direction))))

    return False


def _run_search(
    table: SymbolTable,
    start_pattern: str,
    direction: Direction,
    ignore: Iterable[str] | None,
    end_pattern: str | None,
) -> list[str]:
    start_re = compile_pattern(start_pattern)
    end_re = compile_pattern(end_pattern) if end_pattern is not None else None
    ignore_list = list(ignore or ())
    ignore_res = compile_patterns(ignore_list)

    ignored = {
        key
        for key in table
        if is_ignored(key, table[key].name, ignore_list, ignore_res)
    }
    state = _SearchState(dead=set(ignored))

    for key in table:
        if not _is_function_named(table, key, start_re):
            continue

        if key in ignored:
            logger.warning(
                "Ignore list %s matches start symbol %s; searching from it anyway",
                ignore_list,
                key,
            )
            state.dead.discard(key)

        if _traverse(table, key, direction, state, end_pattern=end_re):
            return state.found

        state.found.clear()
        state.on_path.clear()

    return []


def find_func_path(
    table: SymbolTable,
    start_pattern: str,
    end_pattern: str,
    ignore: Iterable[str] | None = None,
    *,
    direction: Direction = Direction.FORWARD,
) -> list[str]:
    """Find a path between functions whose names match the two patterns.

    Args:
        table: Resolved, validated symbol table
        start_pattern: Regex matched against the display name of start functions
        end_pattern: Regex matched against the display name of end functions
        ignore: Symbol keys or name patterns never traversed
        direction: Follow calls/references (forward) or called_by/referring

    Returns:
        Keys from the start function to the end function, or an empty list.
    """
    logger.info(
        "Searching %s path %r -> %r", direction.value, start_pattern, end_pattern
    )
    return _run_search(table, start_pattern, direction, ignore, end_pattern)


def find_func_cycle(
    table: SymbolTable,
    start_pattern: str,
    ignore: Iterable[str] | None = None,
    *,
    direction: Direction = Direction.FORWARD,
) -> list[str]:
    """Find a cycle reachable from a function whose name matches the pattern.

    Returns:
        The path from the start function, ending with the repeated key, or an
        empty list.
    """
    logger.info("Searching %s cycle from %r", direction.value, start_pattern)
    return _run_search(table, start_pattern, direction, ignore, None)


def find_path(
    table: SymbolTable,
    start_pattern: str,
    end_pattern: str,
    ignore: Iterable[str] | None = None,
) -> list[str]:
    return find_func_path(table, start_pattern, end_pattern, ignore)


def find_rev_path(
    table: SymbolTable,
    start_pattern: str,
    end_pattern: str,
    ignore: Iterable[str] | None = None,
) -> list[str]:
    return find_func_path(
        table, start_pattern, end_pattern, ignore, direction=Direction.BACKWARD
    )


def find_cycle(
    table: SymbolTable,
    start_pattern: str,
    ignore: Iterable[str] | None = None,
) -> list[str]:
    return find_func_cycle(table, start_pattern, ignore)


def find_rev_cycle(
    table: SymbolTable,
    start_pattern: str,
    ignore: Iterable[str] | None = None,
) -> list[str]:
    return find_func_cycle(table, start_pattern, ignore, direction=Direction.BACKWARD)


def build_forward_graph(table: SymbolTable) -> dict[str, set[str]]:
    """Project the table onto a plain adjacency map over calls and references."""
    return {
        key: set(record.calls) | set(record.references)
        for key, record in table.items()
    }


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Extract a strongly connected component from the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    return scc


def _strongconnect(node: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    """Process a node in Tarjan's algorithm without recursing."""
    work: list[tuple[str, Iterator[str]]] = []

    def open_node(v: str) -> None:
        state.indices[v] = state.index
        state.low_link[v] = state.index
        state.index += 1
        state.stack.append(v)
        state.on_stack.add(v)
        work.append((v, iter(sorted(graph.get(v, set())))))

    open_node(node)
    while work:
        v, neighbors = work[-1]
        w = next(neighbors, None)
        if w is not None:
            if w not in state.indices:
                open_node(w)
            elif w in state.on_stack:
                state.low_link[v] = min(state.low_link[v], state.indices[w])
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[v])

        if state.low_link[v] == state.indices[v]:
            scc = _extract_scc(state, v)
            if len(scc) > 1 or v in graph.get(v, set()):
                state.sccs.append(scc)


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find cycles in a directed graph using Tarjan's algorithm.

    Args:
        graph: Dictionary representing the graph

    Returns:
        List of strongly connected components that contain a cycle
    """
    state = _TarjanState()

    for node in graph:
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


__all__ = [
    "Direction",
    "UnresolvedEdgeError",
    "build_forward_graph",
    "find_cycle",
    "find_cycles",
    "find_func_cycle",
    "find_func_path",
    "find_path",
    "find_rev_cycle",
    "find_rev_path",
    "next_symbols",
]
