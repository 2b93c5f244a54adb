from __future__ import annotations

from pathlib import Path

import pytest

from contract.errors import DumpFormatError, MergeConflictError
from graph.table import SymbolTable
from parse.dump_lines import (
    FieldLabel,
    FieldLine,
    HeaderLine,
    VisibilityFlags,
    classify_line,
    extract_symbol_section,
    parse_dump_lines,
    parse_dump_text,
    read_symbol_section,
    strip_edge_tokens,
)

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_dumps"


def _dump(*lines: str) -> str:
    return "\n".join(["Initial Symbol table:", "", *lines, ""]) + "\n"


def test_classify_header_line() -> None:
    parsed = classify_line("foo/12 (foo) @0x7f0c2a1b4000")

    assert parsed == HeaderLine(symbol="foo", name="foo", address="7f0c2a1b4000")


def test_classify_header_keeps_display_name_distinct_from_symbol() -> None:
    parsed = classify_line("_ZN3Foo3barEv/4 (Foo::bar) @0x55d0")

    assert isinstance(parsed, HeaderLine)
    assert parsed.symbol == "_ZN3Foo3barEv"
    assert parsed.name == "Foo::bar"


def test_classify_field_lines() -> None:
    assert classify_line("  Called by: foo/0 (1.00 per call)") == FieldLine(
        label=FieldLabel.CALLED_BY, value="foo/0 (1.00 per call)"
    )
    assert classify_line("  Calls:") == FieldLine(label=FieldLabel.CALLS, value="")


def test_classify_ignores_untracked_labels() -> None:
    assert classify_line("  Availability: available") is None
    assert classify_line("  Function flags: body local") is None


def test_classify_malformed_header_is_fatal() -> None:
    with pytest.raises(DumpFormatError, match="Malformed symbol header"):
        classify_line("foo (foo) @0x1")


def test_classify_separator_in_symbol_is_fatal() -> None:
    with pytest.raises(DumpFormatError, match="reserved"):
        classify_line("foo@bar/1 (foo) @0x1")


def test_strip_edge_tokens_removes_nested_annotations() -> None:
    value = "bar/1 (1073741824 (estimated locally),1.00 per call) baz/7 (inlined)"

    assert strip_edge_tokens(value) == ["bar", "baz"]


def test_strip_edge_tokens_empty_value() -> None:
    assert strip_edge_tokens("") == []


def test_visibility_flags_by_substring() -> None:
    flags = VisibilityFlags.from_text("external public weak")

    assert flags == VisibilityFlags(
        public=True, artificial=False, external=True, weak=True
    )


@pytest.mark.parametrize(
    "text",
    ["artificial public", "external", "weak"],
)
def test_visibility_flag_contradictions_are_fatal(text: str) -> None:
    with pytest.raises(DumpFormatError):
        VisibilityFlags.from_text(text)


def test_extract_symbol_section_bounds() -> None:
    lines = [
        ";; Function foo",
        "Initial Symbol table:",
        "",
        "foo/0 (foo) @0x1   ",
        "  Type: function",
        "",
        "bar/1 (bar) @0x2",
    ]

    assert extract_symbol_section(lines) == ["foo/0 (foo) @0x1", "  Type: function"]


def test_extract_symbol_section_missing_sentinel() -> None:
    assert extract_symbol_section(["foo/0 (foo) @0x1"]) == []


def test_read_symbol_section_from_fixture() -> None:
    section = read_symbol_section(FIXTURE_ROOT / "src" / "file1.c.000i.cgraph")

    assert section[0] == "bar/1 (bar) @0x7f0c2a1b4100"
    assert section[-1] == "  Calls: foo/0 (1.00 per call)"


def test_private_symbol_keyed_by_origin() -> None:
    table = SymbolTable()
    parse_dump_text(
        _dump(
            "foo/0 (foo) @0x1",
            "  Type: function definition analyzed",
            "  Visibility: prevailing_def_ironly",
            "  Calls: bar/1 (1.00 per call)",
        ),
        "src/file1.c",
        table,
    )

    record = table["foo@src/file1.c"]
    assert record.name == "foo"
    assert record.kind == "function"
    assert record.visibility == "private"
    assert record.filename == ["src/file1.c"]
    assert record.calls == ["bar"]


def test_external_public_symbol_has_no_origin() -> None:
    table = SymbolTable()
    parse_dump_text(
        _dump(
            "bar/1 (bar) @0x1",
            "  Type: function",
            "  Visibility: external public",
            "  Called by: foo/0 (1.00 per call)",
        ),
        "src/file1.c",
        table,
    )

    assert table.keys() == ["bar"]
    assert table["bar"].visibility == "public"
    assert table["bar"].filename == []


def test_spurious_symbol_dropped_when_next_header_starts() -> None:
    table = SymbolTable()
    parse_dump_text(
        _dump(
            "lonely/0 (lonely) @0x1",
            "  Type: function definition analyzed",
            "  Visibility: prevailing_def_ironly",
            "  Calls:",
            "foo/1 (foo) @0x2",
            "  Type: function definition analyzed",
            "  Visibility: prevailing_def_ironly",
            "  Calls: bar/2",
        ),
        "a.c",
        table,
    )

    assert "lonely@a.c" not in table
    assert "foo@a.c" in table


def test_last_symbol_checked_at_end_of_file() -> None:
    table = SymbolTable()
    parse_dump_text(
        _dump(
            "lonely/0 (lonely) @0x1",
            "  Type: variable",
            "  Visibility: prevailing_def_ironly",
        ),
        "a.c",
        table,
    )

    assert len(table) == 0


def test_artificial_symbol_deleted_and_its_fields_ignored() -> None:
    table = SymbolTable()
    parse_dump_text(
        _dump(
            "_GLOBAL__sub_I_a/3 (_GLOBAL__sub_I_a) @0x1",
            "  Type: function definition analyzed",
            "  Visibility: artificial",
            "  Calls: init/1 (1.00 per call)",
            "init/1 (init) @0x2",
            "  Type: function definition analyzed",
            "  Visibility: public",
            "  Called by: _GLOBAL__sub_I_a/3 (1.00 per call)",
        ),
        "a.c",
        table,
    )

    assert table.keys() == ["init"]


def test_artificial_public_is_fatal() -> None:
    with pytest.raises(DumpFormatError, match="artificial and public"):
        parse_dump_text(
            _dump(
                "f/0 (f) @0x1",
                "  Type: function",
                "  Visibility: artificial public",
            ),
            "a.c",
            SymbolTable(),
        )


def test_type_neither_function_nor_variable_is_fatal() -> None:
    with pytest.raises(DumpFormatError, match="neither function nor variable"):
        parse_dump_text(
            _dump("f/0 (f) @0x1", "  Type: alias"),
            "a.c",
            SymbolTable(),
        )


def test_type_change_is_fatal() -> None:
    with pytest.raises(DumpFormatError, match="changed from"):
        parse_dump_text(
            _dump("f/0 (f) @0x1", "  Type: function", "  Type: variable"),
            "a.c",
            SymbolTable(),
        )


def test_public_symbol_cannot_become_private() -> None:
    with pytest.raises(DumpFormatError, match="changed to private"):
        parse_dump_text(
            _dump(
                "f/0 (f) @0x1",
                "  Type: function",
                "  Visibility: public",
                "  Visibility: prevailing_def_ironly",
            ),
            "a.c",
            SymbolTable(),
        )


def test_reopened_symbol_with_different_name_is_fatal() -> None:
    table = SymbolTable()
    with pytest.raises(DumpFormatError, match="seen again"):
        parse_dump_lines(
            [
                "f/0 (f) @0x1",
                "  Type: function",
                "  Visibility: prevailing_def_ironly",
                "  Calls: g/1",
                "f/0 (other) @0x1",
            ],
            "a.c",
            table,
        )


def test_public_symbols_with_different_kinds_conflict() -> None:
    table = SymbolTable()
    parse_dump_text(
        _dump(
            "x/0 (x) @0x1",
            "  Type: variable definition analyzed",
            "  Visibility: public",
            "  Referring: f/1 (read)",
        ),
        "a.c",
        table,
    )

    with pytest.raises(MergeConflictError, match="kind differs"):
        parse_dump_text(
            _dump(
                "x/0 (x) @0x2",
                "  Type: function definition analyzed",
                "  Visibility: public",
            ),
            "b.c",
            table,
        )


def test_field_lines_before_first_header_are_ignored() -> None:
    table = SymbolTable()
    parse_dump_lines(["  Calls: f/1", "  Type: function"], "a.c", table)

    assert len(table) == 0
