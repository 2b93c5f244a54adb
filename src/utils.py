"""Shared utilities for symbol keys and dump origins."""

from __future__ import annotations

import re
from pathlib import Path

from contract.artifacts import PRIVATE_KEY_SEPARATOR

# GCC appends a pass tag before the dump suffix: ``file1.c.000i.cgraph``.
_PASS_TAG = re.compile(r"\.\d+[a-z]$")


def is_private_key(key: str) -> bool:
    """Return True when the key carries an origin tag."""
    return PRIVATE_KEY_SEPARATOR in key


def to_private_key(symbol: str, origin: str) -> str:
    """Return the private key of ``symbol`` declared in ``origin``."""
    return f"{symbol}{PRIVATE_KEY_SEPARATOR}{origin}"


def to_public_key(key: str) -> str:
    """Strip the origin tag from a key.

    Examples:
        >>> to_public_key("foo@src/file1.c")
        'foo'
        >>> to_public_key("bar")
        'bar'
    """
    return key.split(PRIVATE_KEY_SEPARATOR, 1)[0]


def public_and_private_keys(symbol: str, origin: str) -> tuple[str, str]:
    """Return ``(public_key, private_key)`` for a raw symbol or a key."""
    if is_private_key(symbol):
        return to_public_key(symbol), symbol
    return symbol, to_private_key(symbol, origin)


def origin_for_dump(file_path: str | Path, root: Path, suffix: str) -> str:
    """Convert a dump file path to the origin tag used in private keys.

    Args:
        file_path: Dump file path, absolute or relative to ``root``
        root: Root directory that was scanned
        suffix: Dump suffix (e.g. ".cgraph")

    Returns:
        Root-relative POSIX path of the translation unit

    Examples:
        >>> origin_for_dump("src/file1.c.000i.cgraph", Path("."), ".cgraph")
        'src/file1.c'
        >>> origin_for_dump("file2.c.cgraph", Path("."), ".cgraph")
        'file2.c'
    """
    path = Path(file_path)
    if path.is_absolute():
        try:
            path = path.relative_to(root)
        except ValueError:
            pass
    origin = path.as_posix()

    if suffix and origin.endswith(suffix):
        origin = origin[: -len(suffix)]

    return _PASS_TAG.sub("", origin)


__all__ = [
    "is_private_key",
    "origin_for_dump",
    "public_and_private_keys",
    "to_private_key",
    "to_public_key",
]
