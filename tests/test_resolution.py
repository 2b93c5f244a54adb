from __future__ import annotations

from pathlib import Path

from contract.validation import validate_table
from graph.builder import build_from_files
from graph.table import SymbolTable
from parse.dump_lines import parse_dump_text
from parse.resolution import resolve_symbol_table
from scan.files import find_dump_files

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_dumps"


def _dump(*lines: str) -> str:
    return "\n".join(["Initial Symbol table:", "", *lines, ""]) + "\n"


def _build(dumps: dict[str, str]) -> SymbolTable:
    table = SymbolTable()
    for origin, text in dumps.items():
        parse_dump_text(text, origin, table)
    resolve_symbol_table(table)
    return table


def _fixture_table() -> SymbolTable:
    files = list(find_dump_files(FIXTURE_ROOT))
    return build_from_files(files, FIXTURE_ROOT, suffix=".cgraph")


def test_private_caller_links_to_public_callee() -> None:
    table = _fixture_table()

    foo = table["foo@src/file1.c"]
    bar = table["bar"]
    assert foo.calls == ["bar"]
    assert bar.called_by == ["foo@src/file1.c"]
    assert bar.filename == ["src/file2.c"]


def test_public_caller_resolves_to_private_callee() -> None:
    table = _fixture_table()

    assert table["main"].calls == ["foo@src/file1.c"]
    assert table["foo@src/file1.c"].called_by == ["main"]
    assert table["bar"].calls == ["baz@src/file2.c"]
    assert table["bar"].references == ["counter@src/file2.c"]
    assert table["counter@src/file2.c"].referring == ["bar"]


def test_fixture_table_is_valid() -> None:
    table = _fixture_table()

    assert sorted(table) == [
        "bar",
        "baz@src/file2.c",
        "counter@src/file2.c",
        "foo@src/file1.c",
        "main",
    ]
    assert validate_table(table).ok


def test_weak_public_symbol_is_one_record_with_two_origins() -> None:
    weak_file = _dump(
        "wk/0 (wk) @0x1",
        "  Type: function definition analyzed",
        "  Visibility: public weak",
        "  Calls: helper/1 (1.00 per call)",
        "helper/1 (helper) @0x2",
        "  Type: function definition analyzed",
        "  Visibility: prevailing_def_ironly",
        "  Called by: wk/0 (1.00 per call)",
    )

    table = _build({"a.c": weak_file, "b.c": weak_file})

    assert table["wk"].filename == ["a.c", "b.c"]
    assert table["wk"].calls == ["helper@a.c", "helper@b.c"]
    assert table["helper@a.c"].called_by == ["wk"]
    assert table["helper@b.c"].called_by == ["wk"]
    assert validate_table(table).ok


def test_weak_symbol_skips_targets_that_do_not_name_it_back() -> None:
    table = _build(
        {
            "a.c": _dump(
                "wk/0 (wk) @0x1",
                "  Type: function definition analyzed",
                "  Visibility: public weak",
                "  Calls: helper/1",
                "helper/1 (helper) @0x2",
                "  Type: function definition analyzed",
                "  Visibility: prevailing_def_ironly",
                "  Called by: wk/0",
            ),
            "b.c": _dump(
                "wk/0 (wk) @0x1",
                "  Type: function definition analyzed",
                "  Visibility: public weak",
                "  Calls: other/3",
                "helper/1 (helper) @0x2",
                "  Type: function definition analyzed",
                "  Visibility: prevailing_def_ironly",
                "  Calls: other/3",
                "other/3 (other) @0x3",
                "  Type: function",
                "  Visibility: external public",
                "  Called by: wk/0 helper/1",
            ),
        }
    )

    assert table["wk"].calls == ["helper@a.c", "other"]
    assert "wk" not in table["helper@b.c"].called_by


def test_unknown_tokens_are_dropped() -> None:
    table = _build(
        {
            "a.c": _dump(
                "f/0 (f) @0x1",
                "  Type: function definition analyzed",
                "  Visibility: public",
                "  Calls: g/1 printf/9",
                "g/1 (g) @0x2",
                "  Type: function definition analyzed",
                "  Visibility: public",
                "  Called by: f/0",
            ),
        }
    )

    assert table["f"].calls == ["g"]
    assert validate_table(table).ok


def test_symbols_left_without_edges_are_swept() -> None:
    table = _build(
        {
            "a.c": _dump(
                "f/0 (f) @0x1",
                "  Type: function definition analyzed",
                "  Visibility: public",
                "  Calls: printf/9",
            ),
        }
    )

    assert len(table) == 0


def test_artificial_symbol_never_appears_after_resolution() -> None:
    table = _build(
        {
            "a.c": _dump(
                "_GLOBAL__sub_I_a/3 (_GLOBAL__sub_I_a) @0x1",
                "  Type: function definition analyzed",
                "  Visibility: artificial",
                "  Calls: init/1 (1.00 per call)",
                "init/1 (init) @0x2",
                "  Type: function definition analyzed",
                "  Visibility: public",
                "  Called by: _GLOBAL__sub_I_a/3 main/4",
                "main/4 (main) @0x4",
                "  Type: function definition analyzed",
                "  Visibility: public",
                "  Calls: init/1",
            ),
        }
    )

    assert sorted(table) == ["init", "main"]
    assert table["init"].called_by == ["main"]
    assert validate_table(table).ok


def test_public_origin_independent_of_file_order() -> None:
    defining = _dump(
        "shared/0 (shared) @0x1",
        "  Type: function definition analyzed",
        "  Visibility: public",
        "  Calls:",
    )
    calling = _dump(
        "shared/0 (shared) @0x1",
        "  Type: function",
        "  Visibility: external public",
        "  Called by: user/1",
        "user/1 (user) @0x2",
        "  Type: function definition analyzed",
        "  Visibility: public",
        "  Calls: shared/0",
    )

    forward = _build({"a.c": defining, "b.c": calling})
    backward = _build({"b.c": calling, "a.c": defining})

    assert forward["shared"].filename == ["a.c"]
    assert backward["shared"].filename == ["a.c"]
    assert forward == backward
