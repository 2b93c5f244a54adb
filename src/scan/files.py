"""Discovery of GCC cgraph dump files under a root directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

DEFAULT_DUMP_SUFFIX = ".cgraph"

logger = logging.getLogger(__name__)


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        path.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return False
    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return .gitignore files under root (root included), shallowest first."""
    candidates = {root / ".gitignore", *root.rglob(".gitignore")}
    found = [p for p in candidates if p.is_file() and not p.is_symlink()]
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    matchers = [parse_gitignore(path) for path in _iter_gitignore_files(root)]
    if not matchers:
        return None

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Raised for paths outside that .gitignore's directory.
                continue
        return False

    return matches


@dataclass(frozen=True)
class DumpFilter:
    """Filtering rules applied to every candidate dump path."""

    root: Path
    output_dir: str = ".cgraph"
    gitignore_matches: Callable[[str], bool] | None = None
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    def accepts(self, path: Path) -> bool:
        if not path.is_file() or path.is_symlink():
            return False
        if not _is_within_root(path, self.root):
            return False

        rel_path = path.relative_to(self.root)
        rel_path_str = rel_path.as_posix()

        if self.output_dir and rel_path.parts[:1] == (self.output_dir,):
            return False
        if self.gitignore_matches is not None and self.gitignore_matches(str(path)):
            return False
        if self.include_patterns and not any(
            fnmatch(rel_path_str, pat) for pat in self.include_patterns
        ):
            return False
        return not any(fnmatch(rel_path_str, pat) for pat in self.exclude_patterns)


def find_dump_files(
    directory: Path,
    *,
    suffix: str = DEFAULT_DUMP_SUFFIX,
    output_dir: str = ".cgraph",
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all cgraph dump files in a directory, respecting .gitignore.

    Args:
        directory: Directory to search recursively
        suffix: Filename suffix selecting dump files (default ".cgraph")
        output_dir: Top-level directory name to skip (default ".cgraph")
        include_patterns: Optional fnmatch patterns; if given, a dump must
            match at least one of them
        exclude_patterns: Optional fnmatch patterns; matching dumps are skipped
        nested_gitignore: Compose every .gitignore under the directory
            instead of only the root one

    Yields:
        Dump paths sorted by relative POSIX path, so the parse order (and
        therefore the built table) does not depend on the filesystem.
    """
    dump_filter = DumpFilter(
        root=directory,
        output_dir=output_dir,
        gitignore_matches=_build_gitignore_matcher(
            directory, nested_gitignore=nested_gitignore
        ),
        include_patterns=tuple(include_patterns or ()),
        exclude_patterns=tuple(exclude_patterns or ()),
    )

    matched_files = [
        path for path in directory.rglob(f"*{suffix}") if dump_filter.accepts(path)
    ]
    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())
    logger.debug("Matched %d dump files under %s", len(matched_files), directory)

    yield from matched_files


__all__ = ["DEFAULT_DUMP_SUFFIX", "DumpFilter", "find_dump_files"]
