"""Fatal errors raised while building the symbol table."""

from __future__ import annotations


class DumpFormatError(Exception):
    """Raised when a dump violates an assumption about GCC's format.

    These are not recoverable: the build is aborted.
    """


class MergeConflictError(DumpFormatError):
    """Raised when two declarations of one symbol disagree on type or visibility."""


__all__ = ["DumpFormatError", "MergeConflictError"]
