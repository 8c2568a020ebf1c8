from __future__ import annotations

from datetime import UTC, datetime

import pytest

from goldrecon.domain.actuals import ActualResult
from goldrecon.domain.baseline import (
    BaselineManifestBuilder,
    BuildSettings,
    Deviation,
    DeviationStatus,
    Manifest,
    ManifestEntry,
    Tier,
)
from goldrecon.domain.legacy import LegacyPartIndex, collect_legacy_parts, parse_export

BUILD_TIME = datetime(2026, 10, 18, 10, 0, tzinfo=UTC)


@pytest.fixture
def legacy(sample_export_text: str) -> LegacyPartIndex:
    return collect_legacy_parts(parse_export(sample_export_text))


@pytest.fixture
def builder() -> BaselineManifestBuilder:
    return BaselineManifestBuilder(clock=lambda: BUILD_TIME)


def test_build_writes_legacy_fields_into_vba_baseline(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
    sample_file_names: tuple[str, ...],
) -> None:
    result = builder.build(legacy, file_names=sample_file_names)

    entry = result.manifest.files["P100.SLDPRT"]
    assert entry.tier(Tier.VBA_BASELINE) == {
        "description": "BRACKET, MOUNTING",
        "optiMaterial": "S.304L14GA",
        "rawWeight": 2.5,
        "bomQty": 2,
        "routing": {
            "N120": {"setup": 0.1, "run": 0.008},
            "N140": {"setup": 0.2, "run": 0.005},
        },
    }
    assert entry.top_level == {}
    assert not entry.has_tier(Tier.CSHARP_EXPECTED)
    assert result.manifest.generated_at == BUILD_TIME
    assert result.manifest.version == "2.0"


def test_build_maps_by_prefix_and_excludes_top_level_assembly(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
    sample_file_names: tuple[str, ...],
) -> None:
    result = builder.build(legacy, file_names=sample_file_names)

    assert set(result.manifest.files) == {"P100.SLDPRT", "P200_Cover.SLDPRT"}
    assert result.mapping.excluded == ("ASSY1",)
    assert result.mapping.unmapped == ()


def test_build_without_listing_uses_part_keys(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
) -> None:
    result = builder.build(legacy)

    assert set(result.manifest.files) == {"P100", "P200"}


def test_legacy_time_unit_hours_is_not_converted(legacy: LegacyPartIndex) -> None:
    builder = BaselineManifestBuilder(
        settings=BuildSettings(legacy_time_unit="hours"),
        clock=lambda: BUILD_TIME,
    )

    result = builder.build(legacy)

    routing = result.manifest.files["P200"].tier(Tier.VBA_BASELINE)["routing"]
    assert routing == {"N120": {"setup": 6.0, "run": 0.3}}


def test_routing_times_are_stored_in_the_manifest_unit(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
) -> None:
    prior = Manifest(units={"routing": "minutes"})

    result = builder.build(legacy, prior=prior, property_dump={"P200": {"F140_S": 0.5}})

    assert result.manifest.units == {"routing": "minutes"}
    routing = result.manifest.files["P200"].tier(Tier.VBA_BASELINE)["routing"]
    assert routing == {"N120": {"setup": 6.0, "run": 0.3}, "N140": {"setup": 30.0}}


def test_unsupported_manifest_routing_unit_is_rejected(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
) -> None:
    with pytest.raises(ValueError, match="seconds"):
        builder.build(legacy, prior=Manifest(units={"routing": "seconds"}))


def test_steps_on_one_work_center_are_summed() -> None:
    text = (
        "DECL(RT) ADD RT-ITEM-KEY RT-WORKCENTER-KEY RT-OP-NUM RT-SETUP RT-RUN-STD\n"
        "END\n"
        "P1 N120 20 6 .6\n"
        "P1 N120 40 3 .3\n"
        "P1 N999 50 0 0\n"
    )
    legacy = collect_legacy_parts(parse_export(text))

    result = BaselineManifestBuilder(clock=lambda: BUILD_TIME).build(legacy)

    assert result.manifest.files["P1"].tier(Tier.VBA_BASELINE) == {
        "routing": {"N120": {"setup": 0.15, "run": 0.015}},
    }


def test_merge_keeps_other_tiers_and_untouched_entries(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
) -> None:
    prior = Manifest(
        version="1.3",
        description="hand made",
        files={
            "P100.SLDPRT": ManifestEntry(
                should_pass=True,
                tiers={
                    Tier.TOP_LEVEL: {"expectedClassification": "SheetMetal"},
                    Tier.VBA_BASELINE: {"description": "OLD", "thickness": 0.075},
                    Tier.CSHARP_EXPECTED: {"description": "BRACKET"},
                },
            ),
            "Manual.SLDPRT": ManifestEntry(tiers={Tier.TOP_LEVEL: {"expectedThickness_in": 0.1}}),
        },
    )

    result = builder.build(legacy, prior=prior)

    merged = result.manifest.files["P100.SLDPRT"]
    assert merged.top_level == {"expectedClassification": "SheetMetal"}
    assert merged.tier(Tier.CSHARP_EXPECTED) == {"description": "BRACKET"}
    baseline = merged.tier(Tier.VBA_BASELINE)
    assert baseline is not None
    assert baseline["description"] == "BRACKET, MOUNTING"
    assert baseline["thickness"] == 0.075
    manual = result.manifest.files["Manual.SLDPRT"]
    assert not manual.has_tier(Tier.VBA_BASELINE)
    assert result.manifest.version == "1.3"
    assert result.manifest.description == "hand made"
    # the prior manifest is not mutated
    assert prior.files["P100.SLDPRT"].tier(Tier.VBA_BASELINE) == {
        "description": "OLD",
        "thickness": 0.075,
    }


def test_property_dump_adds_recognised_fields(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
    sample_file_names: tuple[str, ...],
) -> None:
    dump = {
        "P100": {
            "Thickness": "0.0747",
            "BendCount": 4,
            "MaterialCost": 3.14159,
            "OP20_WorkCenter": "N120 - 5040",
            "OP20_S": 0.25,
            "OP20_R": "0.0125",
            "F140_S": 0.3,
            "F140_R": 0,
            "SomethingElse": "x",
        },
        "NOPE": {"Thickness": 1},
    }

    result = builder.build(legacy, file_names=sample_file_names, property_dump=dump)

    baseline = result.manifest.files["P100.SLDPRT"].tier(Tier.VBA_BASELINE)
    assert baseline is not None
    assert baseline["thickness"] == 0.0747
    assert baseline["bendCount"] == 4
    assert baseline["materialCost"] == 3.14
    assert baseline["routing"] == {
        "N120": {"setup": 0.25, "run": 0.0125},
        "N140": {"setup": 0.3, "run": 0.005},
    }
    assert result.ignored_properties == ("SomethingElse",)
    assert result.unresolved_dump_keys == ("NOPE",)


def test_bootstrap_adds_not_implemented_for_absent_actuals(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
    sample_file_names: tuple[str, ...],
) -> None:
    results = [
        ActualResult(
            file_name="P100.SLDPRT",
            status="Success",
            values={"Description": "BRACKET, MOUNTING", "RawWeight": 0, "F115_Setup": 0.1},
        ),
    ]

    result = builder.build(legacy, file_names=sample_file_names, actual_results=results)

    entry = result.manifest.files["P100.SLDPRT"]
    assert set(entry.known_deviations) == {
        "optiMaterial",
        "rawWeight",
        "bomQty",
        "routing.N120.run",
        "routing.N140.setup",
        "routing.N140.run",
    }
    assert all(
        deviation.status is DeviationStatus.NOT_IMPLEMENTED
        for deviation in entry.known_deviations.values()
    )
    assert ("P100.SLDPRT", "optiMaterial") in result.bootstrapped
    # no result for P200 in this run, so nothing is bootstrapped there
    assert result.manifest.files["P200_Cover.SLDPRT"].known_deviations == {}


def test_bootstrap_never_replaces_documented_deviation(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
) -> None:
    documented = Deviation(reason="different naming", status=DeviationStatus.INTENTIONAL)
    prior = Manifest(files={"P200": ManifestEntry(known_deviations={"optiMaterial": documented})})
    results = [ActualResult(file_name="P200", status="Success", values={})]

    result = builder.build(legacy, prior=prior, actual_results=results)

    assert result.manifest.files["P200"].known_deviations["optiMaterial"] == documented


def test_bootstrap_requires_results(
    builder: BaselineManifestBuilder,
    legacy: LegacyPartIndex,
) -> None:
    result = builder.build(legacy)

    assert result.bootstrapped == ()
    assert all(not entry.known_deviations for entry in result.manifest.files.values())
