from __future__ import annotations

from goldrecon.domain.baseline import Deviation, DeviationStatus, ManifestEntry, Tier
from goldrecon.domain.fields import FieldCatalog
from goldrecon.domain.reconciliation.resolve import (
    canonical_path,
    deviation_for,
    resolve_expectations,
)

CATALOG = FieldCatalog()


def test_highest_tier_defines_the_expected_value() -> None:
    entry = ManifestEntry(
        tiers={
            Tier.TOP_LEVEL: {"expectedThickness_in": 0.12},
            Tier.VBA_BASELINE: {"thickness": 0.105, "description": "PLATE"},
            Tier.CSHARP_EXPECTED: {"thickness": 0.10},
        }
    )

    resolved = {item.path: item for item in resolve_expectations(entry, CATALOG)}

    assert set(resolved) == {"thickness", "description"}
    assert resolved["thickness"].value == 0.10
    assert resolved["thickness"].tier is Tier.CSHARP_EXPECTED
    assert resolved["description"].tier is Tier.VBA_BASELINE


def test_empty_tiers_contribute_nothing() -> None:
    entry = ManifestEntry(
        tiers={Tier.TOP_LEVEL: {}, Tier.VBA_BASELINE: {}, Tier.CSHARP_EXPECTED: None}
    )

    assert resolve_expectations(entry, CATALOG) == []


def test_routing_paths_use_erp_work_centers() -> None:
    assert canonical_path("routing.F115.Setup", CATALOG) == "routing.N120.setup"
    assert canonical_path("expectedBendCount", CATALOG) == "bendCount"
    assert canonical_path("customField", CATALOG) == "customField"


def test_deviation_falls_back_to_parent_paths() -> None:
    whole_routing = Deviation(reason="routing not ported", status=DeviationStatus.NOT_IMPLEMENTED)
    laser_setup = Deviation(reason="new setup model", status=DeviationStatus.INTENTIONAL)
    entry = ManifestEntry(
        known_deviations={"routing": whole_routing, "routing.N120.setup": laser_setup}
    )

    assert deviation_for(entry, "routing.N120.setup", CATALOG) is laser_setup
    assert deviation_for(entry, "routing.N120.run", CATALOG) is whole_routing
    assert deviation_for(entry, "thickness", CATALOG) is None


def test_deviation_documented_under_an_alias() -> None:
    deviation = Deviation(reason="gauge table differs", status=DeviationStatus.BUG)
    entry = ManifestEntry(known_deviations={"expectedThickness_in": deviation})

    assert deviation_for(entry, "thickness", CATALOG) is deviation
