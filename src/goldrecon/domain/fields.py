"""Catalog of the part fields tracked by the baseline.

Each entry ties a canonical manifest field name to the keys the pipeline uses
in its results, the aliases older manifests use, the legacy property names it
is read from, and its quantity class (which picks rounding and tolerance).
Routing fields are dynamic: ``routing.<WORKCENTER>.setup`` / ``.run``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class QuantityClass(StrEnum):
    LENGTH = "length"
    AREA = "area"
    WEIGHT = "weight"
    COST = "cost"
    TIME = "time"
    COUNT = "count"
    TEXT = "text"


ROUTING_FIELD: Final[str] = "routing"
ROUTING_SUBFIELDS: Final[tuple[str, ...]] = ("setup", "run")

# calculator work centers as reported by the pipeline -> ERP work centers
WORK_CENTER_ALIASES: Final[dict[str, str]] = {
    "F115": "N120",
    "F140": "N140",
    "F210": "N210",
    "F220": "N220",
    "F325": "N325",
}

DEFAULT_TOLERANCE_KEYS: Final[dict[QuantityClass, str]] = {
    QuantityClass.LENGTH: "dimensions",
    QuantityClass.AREA: "dimensions",
    QuantityClass.WEIGHT: "mass",
    QuantityClass.COST: "cost",
    QuantityClass.TIME: "routing",
    QuantityClass.COUNT: "count",
}


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldSpec:
    name: str
    quantity: QuantityClass
    actual_keys: tuple[str, ...]
    aliases: tuple[str, ...] = ()
    property_names: tuple[str, ...] = ()
    tolerance_key: str | None = None

    @property
    def manifest_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    @property
    def effective_tolerance_key(self) -> str | None:
        return self.tolerance_key or DEFAULT_TOLERANCE_KEYS.get(self.quantity)


FIELD_SPECS: Final[tuple[FieldSpec, ...]] = (
    FieldSpec(
        name="classification",
        quantity=QuantityClass.TEXT,
        actual_keys=("Classification",),
        aliases=("expectedClassification",),
    ),
    FieldSpec(
        name="thickness",
        quantity=QuantityClass.LENGTH,
        actual_keys=("Thickness_in",),
        aliases=("expectedThickness_in", "thickness_in"),
        property_names=("Thickness",),
        tolerance_key="thickness",
    ),
    FieldSpec(
        name="bendCount",
        quantity=QuantityClass.COUNT,
        actual_keys=("BendCount",),
        aliases=("expectedBendCount",),
        property_names=("BendCount",),
    ),
    FieldSpec(name="material", quantity=QuantityClass.TEXT, actual_keys=("Material",)),
    FieldSpec(
        name="optiMaterial",
        quantity=QuantityClass.TEXT,
        actual_keys=("OptiMaterial",),
        property_names=("OptiMaterial",),
    ),
    FieldSpec(
        name="description",
        quantity=QuantityClass.TEXT,
        actual_keys=("Description",),
        property_names=("Description",),
    ),
    FieldSpec(
        name="rawWeight",
        quantity=QuantityClass.WEIGHT,
        actual_keys=("RawWeight", "Mass_lb"),
        aliases=("mass_lb",),
        property_names=("RawWeight",),
    ),
    FieldSpec(
        name="f300Length",
        quantity=QuantityClass.LENGTH,
        actual_keys=("F300Length", "F300_Length", "TubeLength_in"),
        property_names=("F300_Length",),
    ),
    FieldSpec(
        name="bomQty",
        quantity=QuantityClass.COUNT,
        actual_keys=("BomQty",),
        aliases=("bomQuantity",),
    ),
    FieldSpec(
        name="flatArea",
        quantity=QuantityClass.AREA,
        actual_keys=("FlatArea_sqin",),
        aliases=("flatArea_sqin",),
    ),
    FieldSpec(
        name="materialCost",
        quantity=QuantityClass.COST,
        actual_keys=("MaterialCost",),
        property_names=("MaterialCost",),
    ),
    FieldSpec(
        name="totalCost",
        quantity=QuantityClass.COST,
        actual_keys=("TotalCost",),
        property_names=("TotalCost",),
    ),
)


class FieldCatalog:
    """Case-insensitive lookup over ``FieldSpec`` entries."""

    def __init__(self, specs: tuple[FieldSpec, ...] = FIELD_SPECS) -> None:
        self._specs = specs
        self._by_manifest_name = {
            name.casefold(): spec for spec in specs for name in spec.manifest_names
        }
        self._by_property = {
            name.casefold(): spec for spec in specs for name in spec.property_names
        }

    @property
    def specs(self) -> tuple[FieldSpec, ...]:
        return self._specs

    def spec_for(self, manifest_field: str) -> FieldSpec | None:
        return self._by_manifest_name.get(manifest_field.casefold())

    def spec_for_property(self, property_name: str) -> FieldSpec | None:
        return self._by_property.get(property_name.casefold())

    def canonical_name(self, manifest_field: str) -> str:
        spec = self.spec_for(manifest_field)
        return spec.name if spec is not None else manifest_field

    def quantity_of(self, path: str) -> QuantityClass | None:
        if is_routing_path(path):
            return QuantityClass.TIME
        spec = self.spec_for(path)
        return spec.quantity if spec is not None else None

    def tolerance_key_of(self, path: str) -> str | None:
        if is_routing_path(path):
            return DEFAULT_TOLERANCE_KEYS[QuantityClass.TIME]
        spec = self.spec_for(path)
        return spec.effective_tolerance_key if spec is not None else None


def routing_path(work_center: str, subfield: str) -> str:
    return f"{ROUTING_FIELD}.{work_center}.{subfield}"


def is_routing_path(path: str) -> bool:
    parts = path.split(".")
    return len(parts) == 3 and parts[0] == ROUTING_FIELD and parts[2] in ROUTING_SUBFIELDS


def canonical_work_center(code: str) -> str:
    normalized = code.strip().upper()
    return WORK_CENTER_ALIASES.get(normalized, normalized)
