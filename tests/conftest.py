from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

SAMPLE_EXPORT = """\
DECL(IM) ADD IM-KEY IM-DRAWING IM-DESCR IM-REV IM-TYPE IM-CLASS IM-COMMODITY IM-STD-LOT
END
"ASSY1" "ASSY1" "WELDMENT, FRAME" "A" 2 9 "F" 1
"P100" "P100" "BRACKET, MOUNTING" "A" 1 9 "F" 1
"P200" "P200" "PLATE, COVER" "" 1 9 "F" 1

DECL(PS) ADD PS-PARENT-KEY PS-SUBORD-KEY PS-QTY-P PS-DIM-1
END
"P100" "S.304L14GA" 2.5 0
"P200" "S.CR11GA" 1.25 0

DECL(PS) ADD PS-PARENT-KEY PS-SUBORD-KEY PS-PIECE-NO PS-QTY-P
END
"ASSY1" "P100" "1" 2
"ASSY1" "P200" "2" 1

DECL(RT) ADD RT-ITEM-KEY RT-WORKCENTER-KEY RT-OP-NUM RT-SETUP RT-RUN-STD
END
"P100" "N120" 20 6 .48
"P100" "N140" 30 12 .3
"P200" "N120" 20 6 .3

DECL(RN) ADD RN-ITEM-KEY RN-OP-NUM RN-DESCR
END
"P100" 20 "LASER CUT"
"P100" 20 "DEBURR EDGES"
"""

SAMPLE_FILE_NAMES = ("P100.SLDPRT", "P200_Cover.SLDPRT", "ASSY1.SLDASM")


@pytest.fixture
def sample_export_text() -> str:
    return SAMPLE_EXPORT


@pytest.fixture
def sample_file_names() -> tuple[str, ...]:
    return SAMPLE_FILE_NAMES


@pytest.fixture
def sample_results() -> list[dict[str, object]]:
    return [
        {
            "FileName": "P100.SLDPRT",
            "Status": "Success",
            "Description": "BRACKET, MOUNTING",
            "OptiMaterial": "S.304L14GA",
            "RawWeight": 2.5,
            "BomQty": 2,
            "F115_Setup": 0.1,
            "F115_Run": 0.008,
            "F140_Setup": 0.2,
            "F140_Run": 0.005,
        },
        {
            "FileName": "P200_Cover.SLDPRT",
            "Status": "Success",
            "Description": "PLATE, COVER",
            "OptiMaterial": "S.CR11GA",
            "RawWeight": 1.25,
            "BomQty": 1,
            "Routing": {"N120": {"setup": 0.1, "run": 0.005}},
        },
    ]


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, object], Path]:
    def write(name: str, document: object) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return write


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "GOLDRECON_MANIFEST",
        "GOLDRECON_RESULTS",
        "GOLDRECON_EXPORT",
        "GOLDRECON_HISTORY",
        "GOLDRECON_WIDEN_FACTOR",
        "GOLDRECON_LEGACY_TIME_UNIT",
        "GOLDRECON_EXCLUDED_KEYS",
        "GOLDRECON_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GOLDRECON_DATA_DIR", str(tmp_path / "data"))
