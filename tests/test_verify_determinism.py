from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from artifacts.write import generate_all_artifacts
from contract.artifacts import TABLE_FILENAME
from verify.verify import DeterminismResult, verify_determinism

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_dumps"


def _copy_fixture(root: Path) -> None:
    shutil.copytree(FIXTURE_ROOT, root)


def test_verify_determinism_requires_artifacts_dir(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)

    missing_dir = tmp_path / "missing"
    with pytest.raises(FileNotFoundError, match="Artifacts directory does not exist"):
        verify_determinism(root=repo_root, artifacts_dir=missing_dir)


def test_verify_determinism_rejects_file_path(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "artifacts"
    not_a_dir.write_text("", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        verify_determinism(root=tmp_path, artifacts_dir=not_a_dir)


def test_verify_determinism_fresh_build_is_ok(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    generate_all_artifacts(root=repo_root)

    result = verify_determinism(root=repo_root, artifacts_dir=repo_root / ".cgraph")

    assert result == DeterminismResult(ok=True)


def test_verify_determinism_detects_edited_table(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)
    out_dir = tmp_path / "artifacts"
    generate_all_artifacts(root=repo_root, out_dir=out_dir)

    with (out_dir / TABLE_FILENAME).open("a", encoding="utf-8") as handle:
        handle.write("# edited by hand\n")
    (out_dir / "notes.txt").write_text("stray", encoding="utf-8")

    result = verify_determinism(root=repo_root, artifacts_dir=out_dir)

    assert result == DeterminismResult(
        ok=False,
        mismatches=(TABLE_FILENAME,),
        missing=("notes.txt",),
        extra=(),
    )


def test_verify_determinism_relative_paths_and_sorted_mismatches(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_root = tmp_path / "repo"
    _copy_fixture(repo_root)

    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()

    for rel_path, content in (
        ("b.txt", "b-original"),
        ("a.txt", "a-original"),
    ):
        path = artifacts_dir / rel_path
        path.write_text(content, encoding="utf-8")

    def _fake_generate_all_artifacts(
        *, root: Path, out_dir: Path, config: object = None
    ) -> dict[str, object]:
        (out_dir / "a.txt").write_text("a-original", encoding="utf-8")
        (out_dir / "b.txt").write_text("b-regenerated", encoding="utf-8")
        return {"artifacts": [str(out_dir / "a.txt"), str(out_dir / "b.txt")]}

    monkeypatch.setattr(
        "verify.verify.generate_all_artifacts",
        _fake_generate_all_artifacts,
    )

    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert result == DeterminismResult(
        ok=False,
        mismatches=("b.txt",),
        missing=(),
        extra=(),
    )
