"""Command-line interface for cgraph-core."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.table_io import load_table
from artifacts.write import write_artifacts
from contract.errors import DumpFormatError
from contract.validation import validate_artifacts, validate_table
from graph.algos import Direction, UnresolvedEdgeError, find_func_cycle, find_func_path
from graph.builder import build_symbol_table
from logging_setup import setup_logging
from rules.config import ConfigError, load_config, resolve_output_dir
from rules.patterns import PatternError
from verify.verify import verify_determinism

if TYPE_CHECKING:
    from contract.models import ValidationMessage
    from graph.table import SymbolTable


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory searched for cgraph dumps (default: .)",
    )


def _add_query_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        help="Directory searched for cgraph dumps (default: .)",
    )
    parser.add_argument(
        "--table",
        default=None,
        help="Read a persisted cgraph.yaml (or a directory holding one) "
        "instead of building from the dumps",
    )
    parser.add_argument(
        "--reverse",
        action="store_true",
        help="Follow called_by/referring instead of calls/references",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="KEY_OR_PATTERN",
        help="Symbol key or name regex never traversed (repeatable)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cgraph")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build", help="Build the call graph and write artifacts"
    )
    _add_common_paths(build_parser)
    build_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for generated artifacts (default: config output dir)",
    )

    validate_parser = subparsers.add_parser("validate", help="Validate artifacts")
    _add_common_paths(validate_parser)
    validate_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify determinism of artifacts"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    path_parser = subparsers.add_parser(
        "path", help="Find a path between two functions"
    )
    path_parser.add_argument("start", help="Regex matched against start function names")
    path_parser.add_argument("end", help="Regex matched against end function names")
    _add_query_options(path_parser)

    cycle_parser = subparsers.add_parser(
        "cycle", help="Find a cycle reachable from a function"
    )
    cycle_parser.add_argument("start", help="Regex matched against start function names")
    _add_query_options(cycle_parser)

    return parser


def _resolve_output_dir(root: Path, out_dir: str | None) -> Path:
    if out_dir is None:
        return resolve_output_dir(root, load_config(root).output_dir)
    return Path(out_dir).expanduser().resolve()


def _resolve_artifacts_dir(root: Path, artifacts_dir: str | None) -> Path:
    if artifacts_dir is None:
        config = load_config(root)
        return (root / config.output_dir).resolve()
    return Path(artifacts_dir).expanduser().resolve()


def _report(messages: list[ValidationMessage]) -> None:
    for message in messages:
        sys.stderr.write(f"{message.location()}: {message.message}\n")


def _handle_build(root: Path, out_dir: str | None) -> int:
    config = load_config(root)
    resolved_out_dir = _resolve_output_dir(root, out_dir)

    table = build_symbol_table(root, config=config)
    result = validate_table(table)
    if not result.ok:
        _report(result.errors)
        return 1

    write_artifacts(table, root=root, out_dir=resolved_out_dir)
    return 0


def _handle_validate(root: Path, artifacts_dir: str | None) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    result = validate_artifacts(resolved_artifacts_dir)
    if result.errors:
        _report(result.errors)
        return 1
    return 0


def _handle_verify(root: Path, artifacts_dir: str | None) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    try:
        result = verify_determinism(root=root, artifacts_dir=resolved_artifacts_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"artifacts-dir: {resolved_artifacts_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def _load_query_table(args: argparse.Namespace) -> SymbolTable | None:
    if args.table is not None:
        read = load_table(Path(args.table).expanduser().resolve())
        if read.table is None:
            _report(read.errors)
            return None
        table = read.table
    else:
        table = build_symbol_table(Path(args.root).expanduser().resolve())

    result = validate_table(table)
    if not result.ok:
        _report(result.errors)
        return None
    return table


def _handle_query(args: argparse.Namespace) -> int:
    table = _load_query_table(args)
    if table is None:
        return 1

    root = Path(args.root).expanduser().resolve()
    ignore = [*load_config(root).ignore, *args.ignore]
    direction = Direction.BACKWARD if args.reverse else Direction.FORWARD

    if args.command == "path":
        found = find_func_path(
            table, args.start, args.end, ignore, direction=direction
        )
        not_found = f"No path from {args.start!r} to {args.end!r}"
    else:
        found = find_func_cycle(table, args.start, ignore, direction=direction)
        not_found = f"No cycle reachable from {args.start!r}"

    if not found:
        sys.stderr.write(f"{not_found}\n")
        return 1

    for key in found:
        sys.stdout.write(f"{key}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        if args.command in {"path", "cycle"}:
            return _handle_query(args)

        root = Path(args.root).expanduser().resolve()

        if args.command == "build":
            return _handle_build(root, args.out_dir)

        if args.command == "validate":
            return _handle_validate(root, args.artifacts_dir)

        if args.command == "verify":
            return _handle_verify(root, args.artifacts_dir)
    except (ConfigError, PatternError, DumpFormatError, UnresolvedEdgeError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
