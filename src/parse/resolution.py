"""Whole-table resolution of edge tokens to symbol keys.

Dumps name call and reference targets by their bare, possibly ambiguous,
symbol. Once every file is parsed, the resolver rewrites each edge to the
key it actually denotes and makes the reverse fields agree.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.models.artifacts.symbols import (
    FORWARD_FIELDS,
    REVERSE_FIELDS,
    EdgeField,
)
from utils import is_private_key, public_and_private_keys

if TYPE_CHECKING:
    from graph.table import SymbolTable

logger = logging.getLogger(__name__)


def _restore_detached_origins(table: SymbolTable) -> None:
    for key, origins in table.detached_origins.items():
        record = table.get(key)
        if record is not None:
            record.add_origins(origins)
    table.detached_origins.clear()


def _resolve_forward_field(
    table: SymbolTable,
    key: str,
    field: EdgeField,
) -> None:
    record = table[key]
    tokens = record.edges(field)
    if not tokens:
        return

    reverse = field.reverse
    has_weak_origins = len(record.filename) > 1
    back_fill = is_private_key(key)
    resolved: list[str] = []

    for token in tokens:
        for origin in record.filename:
            _, private_key = public_and_private_keys(token, origin)
            target_key = private_key if private_key in table else token

            target = table.get(target_key)
            if target is None:
                continue
            if has_weak_origins and key not in target.edges(reverse):
                # A weak definition only links to targets that name it back.
                continue

            if back_fill:
                target.add_edges(reverse, [key])
            if target_key not in resolved:
                resolved.append(target_key)

    logger.debug("Resolved %s.%s: %s -> %s", key, field.value, tokens, resolved)
    record.set_edges(field, resolved)


def _prune_reverse_field(table: SymbolTable, key: str, field: EdgeField) -> None:
    record = table[key]
    forward = field.reverse
    kept: list[str] = []

    for token in record.edges(field):
        if is_private_key(token):
            kept.append(token)
            continue
        target = table.get(token)
        if target is not None and key in target.edges(forward):
            kept.append(token)

    record.set_edges(field, kept)


def _sweep_spurious(table: SymbolTable) -> int:
    """Delete edgeless records and edges naming deleted keys until stable."""
    removed = 0
    while True:
        spurious = [key for key, record in table.items() if not record.has_edges()]
        if not spurious:
            return removed
        for key in spurious:
            table.remove(key)
        removed += len(spurious)

        gone = set(spurious)
        for _key, record in table.items():
            for field in EdgeField:
                edges = record.edges(field)
                if gone.intersection(edges):
                    record.set_edges(field, (e for e in edges if e not in gone))


def resolve_symbol_table(table: SymbolTable) -> None:
    """Resolve every edge field of a fully parsed table in place.

    Pass 1 rewrites references/calls tokens to private keys where the
    current record's origin declares one, drops tokens with no record and
    back-fills reverse fields from private records. Pass 2 keeps a public
    entry of referring/called_by only when the target names the record back
    in its forward field. A final sweep removes records left without edges.
    """
    _restore_detached_origins(table)

    keys = table.keys()
    logger.info("Resolving %d symbols", len(keys))

    for key in keys:
        for field in FORWARD_FIELDS:
            _resolve_forward_field(table, key, field)

    for key in keys:
        for field in REVERSE_FIELDS:
            _prune_reverse_field(table, key, field)

    removed = _sweep_spurious(table)
    if removed:
        logger.info("Removed %d symbols left without edges", removed)


__all__ = ["resolve_symbol_table"]
