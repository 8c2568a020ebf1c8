from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from goldrecon.adapters.legacy import read_export, read_property_dump
from goldrecon.domain.errors import ManifestFormatError, MissingInputError, ParseError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def test_read_export_parses_file(tmp_path: Path, sample_export_text: str) -> None:
    path = tmp_path / "Import.prn"
    path.write_text(sample_export_text, encoding="utf-8")

    export = read_export(path)

    assert export.record_counts() == {"IM": 3, "PS": 4, "RT": 3, "RN": 2}


def test_read_export_reports_path_and_line(tmp_path: Path) -> None:
    path = tmp_path / "Import.prn"
    path.write_text('DECL(IM) ADD IM-KEY\nEND\nP1\n\nDECL(RT ADD RT-ITEM-KEY\n', encoding="utf-8")

    with pytest.raises(ParseError) as excinfo:
        read_export(path)

    assert excinfo.value.path == path
    assert excinfo.value.line_number == 5
    assert str(excinfo.value).startswith(f"{path}:5: ")


def test_read_export_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MissingInputError, match="Legacy export not found"):
        read_export(tmp_path / "Import.prn")


def test_read_property_dump(write_json: Callable[[str, object], Path]) -> None:
    dump = read_property_dump(
        write_json("props.json", {"P100": {"Thickness": 0.0747, "OP20_WorkCenter": "N120 - 5040"}})
    )

    assert dump == {"P100": {"Thickness": 0.0747, "OP20_WorkCenter": "N120 - 5040"}}


def test_read_property_dump_rejects_wrong_shape(
    write_json: Callable[[str, object], Path],
) -> None:
    with pytest.raises(ManifestFormatError, match="not a property dump"):
        read_property_dump(write_json("props.json", {"P100": ["Thickness", 0.0747]}))
