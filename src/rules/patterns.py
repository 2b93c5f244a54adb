"""Name pattern compilation and matching for queries."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class PatternError(ValueError):
    """Raised when a user-supplied name pattern is not a valid regex."""


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a name pattern (regex, matched anywhere in the name)."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        msg = f"Invalid name pattern {pattern!r}: {exc}"
        raise PatternError(msg) from exc


def compile_patterns(patterns: Iterable[str] | None) -> list[re.Pattern[str]]:
    """Compile a possibly absent list of patterns; None means empty."""
    return [compile_pattern(p) for p in patterns or ()]


def matches_any(name: str, patterns: list[re.Pattern[str]]) -> bool:
    return any(p.search(name) for p in patterns)


def is_ignored(
    key: str,
    name: str,
    ignore: Iterable[str],
    ignore_patterns: list[re.Pattern[str]],
) -> bool:
    """Check whether a symbol is ignored by exact key or by name pattern."""
    return key in ignore or matches_any(name, ignore_patterns)
