from __future__ import annotations

import logging

import pytest

from goldrecon.domain.errors import ParseError
from goldrecon.domain.legacy import parse_export, parse_lines


def test_parse_export_groups_records_by_section(sample_export_text: str) -> None:
    export = parse_export(sample_export_text)

    assert [section.code for section in export.sections] == ["IM", "PS", "PS", "RT", "RN"]
    assert export.record_counts() == {"IM": 3, "PS": 4, "RT": 3, "RN": 2}
    first = export.sections[0].records[1]
    assert first.get("IM-KEY") == "P100"
    assert first.get("IM-DESCR") == "BRACKET, MOUNTING"
    assert first.line_number == 4


def test_parse_export_is_deterministic(sample_export_text: str) -> None:
    assert parse_export(sample_export_text) == parse_export(sample_export_text)


def test_add_marker_is_not_a_field_name() -> None:
    export = parse_export("DECL(IM) ADD IM-KEY IM-DESCR\nEND\nP1 X\n")

    assert export.sections[0].field_names == ("IM-KEY", "IM-DESCR")


def test_header_without_add_marker() -> None:
    export = parse_export("DECL(RT) RT-ITEM-KEY RT-WORKCENTER-KEY\nEND\nP1 N120\n")

    assert export.sections[0].field_names == ("RT-ITEM-KEY", "RT-WORKCENTER-KEY")
    assert export.records[0].as_dict() == {"RT-ITEM-KEY": "P1", "RT-WORKCENTER-KEY": "N120"}


def test_quoted_empty_token_keeps_columns_aligned() -> None:
    export = parse_export('DECL(IM) ADD IM-KEY IM-REV IM-DESCR\nEND\nA "" B\n')

    record = export.records[0]
    assert record.values == ("A", "", "B")
    assert record.get("IM-REV") == ""
    assert record.get("IM-DESCR") == "B"


def test_short_rows_leave_trailing_fields_unset() -> None:
    export = parse_export("DECL(IM) ADD IM-KEY IM-REV IM-DESCR\nEND\nP1\n")

    record = export.records[0]
    assert record.get("IM-KEY") == "P1"
    assert record.get("IM-REV") is None
    assert record.as_dict() == {"IM-KEY": "P1"}


def test_long_rows_drop_surplus_tokens() -> None:
    export = parse_export("DECL(IM) ADD IM-KEY\nEND\nP1 EXTRA MORE\n")

    assert export.records[0].values == ("P1",)


def test_blank_line_closes_section_and_ignores_following_rows() -> None:
    text = "DECL(IM) ADD IM-KEY\nEND\nP1\n\nP2\nP3\n"

    export = parse_export(text)

    assert [record.get("IM-KEY") for record in export.records] == ["P1"]


def test_rows_before_end_are_not_records() -> None:
    export = parse_export("DECL(IM) ADD IM-KEY\nP0\nEND\nP1\n")

    assert [record.get("IM-KEY") for record in export.records] == ["P1"]


def test_data_rows_without_section_are_ignored() -> None:
    export = parse_export("GARBAGE LINE\nEND\nDECL(IM) ADD IM-KEY\nEND\nP1\n")

    assert len(export.records) == 1


def test_header_with_no_fields_produces_empty_records() -> None:
    export = parse_export("DECL(XX) ADD\nEND\nSOMETHING\n")

    section = export.sections[0]
    assert section.field_names == ()
    assert len(section.records) == 1
    assert section.records[0].as_dict() == {}


def test_header_without_closing_parenthesis_is_a_parse_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_lines(["DECL(IM) ADD IM-KEY", "END", "P1", "", "DECL(RT ADD RT-ITEM-KEY"])

    assert excinfo.value.line_number == 5
    assert "line 5" in str(excinfo.value)


def test_header_with_empty_code_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_export("DECL() ADD IM-KEY\n")


def test_unterminated_quote_in_data_row_keeps_later_rows(
    caplog: pytest.LogCaptureFixture,
) -> None:
    text = 'DECL(IM) ADD IM-KEY IM-DESCR\nEND\n"P100" "BRACKET\n"P200" "PLATE"\n'

    with caplog.at_level(logging.WARNING, logger="goldrecon.domain.legacy.parser"):
        export = parse_export(text)

    assert [record.as_dict() for record in export.records] == [
        {"IM-KEY": "P100", "IM-DESCR": "BRACKET"},
        {"IM-KEY": "P200", "IM-DESCR": "PLATE"},
    ]
    assert "Line 3: unterminated quote" in caplog.text


def test_unterminated_quote_in_header_is_a_parse_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_export('DECL(IM) ADD IM-KEY "IM-DESCR\nEND\nP1\n')

    assert excinfo.value.line_number == 1
