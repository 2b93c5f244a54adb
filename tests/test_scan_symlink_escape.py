from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_dump_files

if TYPE_CHECKING:
    from pathlib import Path


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("Initial Symbol table:\n\n", encoding="utf-8")


def _found(root: Path, **kwargs: object) -> list[str]:
    return [path.relative_to(root).as_posix() for path in find_dump_files(root, **kwargs)]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_dump_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _touch(repo_root / "src" / "a.c.000i.cgraph")

    external_root = tmp_path / "external"
    _touch(external_root / "leak.c.000i.cgraph")

    symlink_dir = repo_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = _found(repo_root)

    assert "src/a.c.000i.cgraph" in results
    assert "linked/leak.c.000i.cgraph" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _touch(repo_root / "src" / "a.c.cgraph")
    (repo_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text("src/a.c.cgraph\n", encoding="utf-8")

    symlink_gitignore = repo_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(repo_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(repo_root / "src" / "a.c.cgraph")) is False


def test_find_dump_files_sorted_and_filtered_by_suffix(tmp_path: Path) -> None:
    for rel in ("b/z.c.cgraph", "a.c.cgraph", "b/a.c.cgraph", "notes.txt", "a.c"):
        _touch(tmp_path / rel)

    assert _found(tmp_path) == ["a.c.cgraph", "b/a.c.cgraph", "b/z.c.cgraph"]


def test_find_dump_files_skips_output_dir(tmp_path: Path) -> None:
    _touch(tmp_path / "a.c.cgraph")
    _touch(tmp_path / ".cgraph" / "old.c.cgraph")
    _touch(tmp_path / "out" / "old.c.cgraph")

    assert _found(tmp_path) == ["a.c.cgraph", "out/old.c.cgraph"]
    assert _found(tmp_path, output_dir="out") == [".cgraph/old.c.cgraph", "a.c.cgraph"]


def test_find_dump_files_include_and_exclude(tmp_path: Path) -> None:
    for rel in ("src/a.c.cgraph", "src/b.c.cgraph", "test/t.c.cgraph"):
        _touch(tmp_path / rel)

    assert _found(tmp_path, include_patterns=["src/*"]) == [
        "src/a.c.cgraph",
        "src/b.c.cgraph",
    ]
    assert _found(tmp_path, exclude_patterns=["*/b.c.cgraph"]) == [
        "src/a.c.cgraph",
        "test/t.c.cgraph",
    ]


def test_find_dump_files_respects_root_gitignore(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "a.c.cgraph")
    _touch(tmp_path / "src" / "b.c.cgraph")
    (tmp_path / ".gitignore").write_text("a.c.cgraph\n", encoding="utf-8")

    assert _found(tmp_path) == ["src/b.c.cgraph"]


def test_nested_gitignore_only_when_enabled(tmp_path: Path) -> None:
    _touch(tmp_path / "keep" / "a.c.cgraph")
    _touch(tmp_path / "sub" / "a.c.cgraph")
    _touch(tmp_path / "sub" / "b.c.cgraph")
    (tmp_path / "sub" / ".gitignore").write_text("a.c.cgraph\n", encoding="utf-8")

    assert _found(tmp_path) == ["keep/a.c.cgraph", "sub/a.c.cgraph", "sub/b.c.cgraph"]
    assert _found(tmp_path, nested_gitignore=True) == [
        "keep/a.c.cgraph",
        "sub/b.c.cgraph",
    ]
