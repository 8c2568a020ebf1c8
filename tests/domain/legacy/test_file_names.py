from __future__ import annotations

import logging

import pytest

from goldrecon.domain.legacy import FileNameMapper
from goldrecon.domain.legacy.file_names import base_name


def test_base_name_strips_directory_and_extension() -> None:
    assert base_name("parts/P100.SLDPRT") == "P100"
    assert base_name("P100") == "P100"


def test_exact_match_wins_over_prefix() -> None:
    mapper = FileNameMapper(file_names=["P100_Bracket.SLDPRT", "P100.SLDPRT"])

    mapping = mapper.map_keys(["P100"])

    assert mapping.mapped == {"P100": "P100.SLDPRT"}
    assert mapping.ambiguous == ()


def test_exact_match_is_case_insensitive() -> None:
    mapping = FileNameMapper(file_names=["p100.sldprt"]).map_keys(["P100"])

    assert mapping.file_for("P100") == "p100.sldprt"


def test_prefix_match_requires_a_proper_prefix() -> None:
    mapper = FileNameMapper(file_names=["P10.SLDPRT", "P100_Cover.SLDPRT"])

    mapping = mapper.map_keys(["P100", "P1000"])

    assert mapping.mapped == {"P100": "P100_Cover.SLDPRT"}
    assert mapping.unmapped == ("P1000",)


def test_prefix_collision_takes_first_in_listing_order_and_is_flagged(
    caplog: pytest.LogCaptureFixture,
) -> None:
    mapper = FileNameMapper(file_names=["P200_B.SLDPRT", "P200_A.SLDPRT"])

    with caplog.at_level(logging.WARNING):
        mapping = mapper.map_keys(["P200"])

    assert mapping.mapped == {"P200": "P200_B.SLDPRT"}
    [collision] = mapping.ambiguous
    assert collision.key == "P200"
    assert collision.candidates == ("P200_B.SLDPRT", "P200_A.SLDPRT")
    assert collision.chosen == "P200_B.SLDPRT"
    assert "P200" in caplog.text


def test_excluded_keys_are_neither_mapped_nor_unmapped() -> None:
    mapper = FileNameMapper(
        file_names=["ASSY1.SLDASM", "P100.SLDPRT"],
        excluded_keys=frozenset({"assy1", "P100-ALT"}),
    )

    mapping = mapper.map_keys(["ASSY1", "P100", "P100-ALT"])

    assert mapping.mapped == {"P100": "P100.SLDPRT"}
    assert mapping.excluded == ("ASSY1", "P100-ALT")
    assert mapping.unmapped == ()
