"""Pydantic models describing the manifest JSON document."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from goldrecon.domain.baseline.manifest import (
    DEFAULT_TOLERANCES,
    MANIFEST_VERSION,
    DeviationStatus,
)
from goldrecon.domain.baseline.units import TIME_UNITS
from goldrecon.domain.fields import ROUTING_FIELD

TreePayload = dict[str, object]

# older manifests spell the intentional status out in full
_STATUS_ALIASES: dict[str, str] = {"INTENTIONAL_DEVIATION": DeviationStatus.INTENTIONAL.value}


def _check_tree(value: object, path: str = "") -> object:
    """Tier trees hold scalars and nested objects only; nulls are dropped."""

    if not isinstance(value, Mapping):
        raise ValueError(f"{path or 'tier'} must be an object")
    cleaned: TreePayload = {}
    for key, item in cast(Mapping[str, object], value).items():
        item_path = f"{path}.{key}" if path else str(key)
        if item is None:
            continue
        if isinstance(item, Mapping):
            cleaned[str(key)] = _check_tree(item, item_path)
        elif isinstance(item, str | int | float | bool):
            cleaned[str(key)] = item
        else:
            raise ValueError(f"{item_path} must be a scalar or an object")
    return cleaned


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DeviationPayload(ManifestBaseModel):
    reason: str = ""
    status: DeviationStatus

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().upper()
            return _STATUS_ALIASES.get(normalized, normalized)
        return value


class EntryPayload(ManifestBaseModel):
    """One ``files`` entry; unknown keys are top-level expected values."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    should_pass: bool = Field(default=True, alias="shouldPass")
    vba_baseline: TreePayload | None = Field(default=None, alias="vbaBaseline")
    csharp_expected: TreePayload | None = Field(default=None, alias="csharpExpected")
    known_deviations: dict[str, DeviationPayload] = Field(
        default_factory=dict["str", "DeviationPayload"], alias="knownDeviations"
    )
    comment: str | None = None

    @field_validator("vba_baseline", "csharp_expected", mode="before")
    @classmethod
    def _validate_tier(cls, value: object) -> object:
        if value is None:
            return None
        return _check_tree(value)

    @model_validator(mode="after")
    def _validate_top_level(self) -> EntryPayload:
        self.top_level_fields()
        return self

    def top_level_fields(self) -> TreePayload:
        extra = self.model_extra or {}
        return cast(TreePayload, _check_tree(extra))


class ManifestPayload(ManifestBaseModel):
    version: str = MANIFEST_VERSION
    description: str = ""
    generated_at: datetime | None = Field(default=None, alias="generatedAt")
    units: dict[str, str] = Field(default_factory=lambda: {"routing": "hours"})
    default_tolerances: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TOLERANCES), alias="defaultTolerances"
    )
    files: dict[str, EntryPayload] = Field(default_factory=dict["str", "EntryPayload"])

    @field_validator("units")
    @classmethod
    def _known_routing_unit(cls, value: dict[str, str]) -> dict[str, str]:
        unit = value.get(ROUTING_FIELD)
        if unit is not None and unit not in TIME_UNITS:
            expected = ", ".join(sorted(TIME_UNITS))
            raise ValueError(f"unsupported routing unit {unit!r}; expected one of: {expected}")
        return value

    @field_validator("default_tolerances")
    @classmethod
    def _non_negative(cls, value: dict[str, float]) -> dict[str, float]:
        negative = sorted(name for name, tolerance in value.items() if tolerance < 0)
        if negative:
            raise ValueError(f"negative tolerance for: {', '.join(negative)}")
        return value
