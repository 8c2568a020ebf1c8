"""Build and merge the gold standard manifest from legacy data.

The builder only writes the ``vbaBaseline`` tier and bootstraps
``NOT_IMPLEMENTED`` deviations. Top-level fields and ``csharpExpected`` are
owned by people and are never touched here. Numeric values are rounded per
quantity class and routing times are converted to the manifest's unit before
they are stored, so comparison never has to convert.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from goldrecon.domain.actuals import ActualFieldLookup, is_absent
from goldrecon.domain.errors import FieldCoercionError
from goldrecon.domain.fields import (
    ROUTING_FIELD,
    FieldCatalog,
    QuantityClass,
    canonical_work_center,
    routing_path,
)
from goldrecon.domain.legacy.file_names import FileNameMapper, FileNameMapping, base_name
from goldrecon.domain.legacy.parts import parse_number

from .manifest import (
    Deviation,
    DeviationStatus,
    Manifest,
    ManifestEntry,
    Tier,
    flatten_fields,
)
from .units import (
    CANONICAL_TIME_UNIT,
    DEFAULT_PRECISION,
    TIME_UNITS,
    TimeUnit,
    convert_time,
    round_quantity,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from goldrecon.domain.actuals import ActualResult
    from goldrecon.domain.legacy.parts import LegacyPart, LegacyPartIndex

    from .manifest import Scalar

log = logging.getLogger(__name__)

type PropertyDump = Mapping[str, Mapping[str, object]]

BOOTSTRAP_REASON = "Known from the legacy export; not populated by the new pipeline yet"

# property-dump work center time properties: (setup, run) property names
_PROPERTY_ROUTING: dict[str, tuple[str, str]] = {
    "N140": ("F140_S", "F140_R"),
    "N210": ("F210_S", "F210_R"),
    "N220": ("F220_S", "F220_R"),
    "N325": ("F325_S", "F325_R"),
}
_OP20_WORK_CENTER_PROPERTIES = ("OP20_WorkCenter", "OP20")
_OP20_TIME_PROPERTIES = ("OP20_S", "OP20_R")


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class BuildSettings:
    legacy_time_unit: TimeUnit = "minutes"
    property_time_unit: TimeUnit = "hours"
    precision: Mapping[QuantityClass, int] = field(
        default_factory=lambda: dict(DEFAULT_PRECISION)
    )
    excluded_keys: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True, kw_only=True)
class BuildResult:
    manifest: Manifest
    mapping: FileNameMapping
    updated_files: tuple[str, ...] = ()
    bootstrapped: tuple[tuple[str, str], ...] = ()
    ignored_properties: tuple[str, ...] = ()
    unresolved_dump_keys: tuple[str, ...] = ()


@dataclass(slots=True, kw_only=True)
class _BuildState:
    manifest: Manifest
    time_unit: str = CANONICAL_TIME_UNIT
    updated: list[str] = field(default_factory=list["str"])
    ignored_properties: set[str] = field(default_factory=set["str"])
    unresolved_dump_keys: list[str] = field(default_factory=list["str"])

    def touch(self, file_name: str) -> None:
        if file_name not in self.updated:
            self.updated.append(file_name)


@dataclass(slots=True, kw_only=True)
class BaselineManifestBuilder:
    settings: BuildSettings = field(default_factory=BuildSettings)
    catalog: FieldCatalog = field(default_factory=FieldCatalog)
    clock: Callable[[], datetime] = _utcnow

    def build(
        self,
        legacy: LegacyPartIndex,
        *,
        file_names: Sequence[str] = (),
        property_dump: PropertyDump | None = None,
        prior: Manifest | None = None,
        actual_results: Sequence[ActualResult] | None = None,
        description: str | None = None,
    ) -> BuildResult:
        """Merge legacy data into ``prior`` (or a new manifest) and return it.

        ``prior`` is copied, never mutated. ``actual_results`` enables deviation
        bootstrapping; without it no deviation is added.
        """

        manifest = prior.copy() if prior is not None else Manifest()
        if description is not None:
            manifest.description = description
        state = _BuildState(manifest=manifest, time_unit=_routing_unit(manifest))

        mapping = self._map_keys(legacy, manifest, file_names)
        for key, file_name in mapping.mapped.items():
            entry = manifest.files.setdefault(file_name, ManifestEntry())
            self._merge_legacy_part(entry, legacy.parts[key], state.time_unit)
            state.touch(file_name)

        if property_dump:
            self._merge_property_dump(state, property_dump, mapping)

        bootstrapped = (
            self._bootstrap_deviations(manifest, actual_results)
            if actual_results is not None
            else ()
        )

        manifest.generated_at = self.clock()
        log.info(
            "Baseline built: %s file(s) updated, %s unmapped, %s excluded, %s deviation(s) added",
            len(state.updated),
            len(mapping.unmapped),
            len(mapping.excluded),
            len(bootstrapped),
        )
        return BuildResult(
            manifest=manifest,
            mapping=mapping,
            updated_files=tuple(state.updated),
            bootstrapped=bootstrapped,
            ignored_properties=tuple(sorted(state.ignored_properties)),
            unresolved_dump_keys=tuple(state.unresolved_dump_keys),
        )

    def _map_keys(
        self,
        legacy: LegacyPartIndex,
        manifest: Manifest,
        file_names: Sequence[str],
    ) -> FileNameMapping:
        listing = list(file_names)
        listing.extend(name for name in manifest.files if name not in listing)
        excluded = (
            set(self.settings.excluded_keys)
            | set(legacy.top_level_assemblies())
            | set(legacy.secondary_duplicates())
        )
        if not listing:
            log.warning("No input file listing; using part keys as manifest file names")
            return FileNameMapping(
                mapped={key: key for key in legacy.keys() if key not in excluded},
                excluded=tuple(key for key in legacy.keys() if key in excluded),
            )
        mapper = FileNameMapper(file_names=listing, excluded_keys=frozenset(excluded))
        return mapper.map_keys(legacy.keys())

    def _merge_legacy_part(self, entry: ManifestEntry, part: LegacyPart, time_unit: str) -> None:
        entry.ensure_tier(Tier.VBA_BASELINE)
        for path, value in self._legacy_fields(part, time_unit).items():
            entry.set_field(Tier.VBA_BASELINE, path, value)

    def _legacy_fields(self, part: LegacyPart, time_unit: str) -> dict[str, Scalar]:
        fields: dict[str, Scalar] = {}
        if part.description:
            fields["description"] = part.description
        if part.opti_material:
            fields["optiMaterial"] = part.opti_material
        self._put_number(fields, "rawWeight", part.raw_weight)
        self._put_number(fields, "f300Length", part.f300_length)
        self._put_number(fields, "bomQty", part.bom_quantity)

        routing: dict[str, dict[str, float]] = {}
        for step in part.routing:
            times = routing.setdefault(canonical_work_center(step.work_center), {})
            for subfield, value in (("setup", step.setup), ("run", step.run)):
                if value is None:
                    continue
                converted = convert_time(value, self.settings.legacy_time_unit, time_unit)
                times[subfield] = times.get(subfield, 0.0) + converted
        for work_center, times in routing.items():
            for subfield, value in times.items():
                rounded = self._round(QuantityClass.TIME, value)
                if rounded:
                    fields[routing_path(work_center, subfield)] = rounded
        return fields

    def _put_number(self, fields: dict[str, Scalar], name: str, value: float | None) -> None:
        if value is None or value == 0:
            return
        spec = self.catalog.spec_for(name)
        quantity = spec.quantity if spec is not None else QuantityClass.LENGTH
        fields[name] = self._round(quantity, value)

    def _round(self, quantity: QuantityClass, value: float) -> float | int:
        return round_quantity(value, quantity, self.settings.precision)

    def _merge_property_dump(
        self,
        state: _BuildState,
        property_dump: PropertyDump,
        mapping: FileNameMapping,
    ) -> None:
        manifest = state.manifest
        for dump_key, properties in property_dump.items():
            file_name = _resolve_dump_key(dump_key, mapping, manifest)
            if file_name is None:
                log.warning("Property dump entry %r matches no manifest file", dump_key)
                state.unresolved_dump_keys.append(dump_key)
                continue
            entry = manifest.files.setdefault(file_name, ManifestEntry())
            fields = self._property_fields(properties, state.ignored_properties, state.time_unit)
            entry.ensure_tier(Tier.VBA_BASELINE)
            for path, value in fields.items():
                entry.set_field(Tier.VBA_BASELINE, path, value)
            state.touch(file_name)

    def _property_fields(
        self,
        properties: Mapping[str, object],
        ignored: set[str],
        time_unit: str,
    ) -> dict[str, Scalar]:
        fields: dict[str, Scalar] = {}
        routing_names = {name.casefold() for pair in _PROPERTY_ROUTING.values() for name in pair}
        routing_names.update(
            name.casefold() for name in (*_OP20_WORK_CENTER_PROPERTIES, *_OP20_TIME_PROPERTIES)
        )

        for name, raw in properties.items():
            if name.casefold() in routing_names:
                continue
            spec = self.catalog.spec_for_property(name)
            if spec is None:
                ignored.add(name)
                continue
            value = self._coerce(spec.name, spec.quantity, raw)
            if value is not None:
                fields[spec.name] = value

        folded = {name.casefold(): value for name, value in properties.items()}
        op20 = _op20_work_center(folded)
        sources = dict(_PROPERTY_ROUTING)
        if op20 is not None:
            sources[op20] = _OP20_TIME_PROPERTIES
        for work_center, (setup_name, run_name) in sources.items():
            for subfield, prop in (("setup", setup_name), ("run", run_name)):
                stored = self._coerce_time(prop, folded.get(prop.casefold()), time_unit)
                if stored:
                    fields[routing_path(work_center, subfield)] = stored
        return fields

    def _coerce(self, name: str, quantity: QuantityClass, raw: object) -> Scalar | None:
        if raw is None:
            return None
        if quantity is QuantityClass.TEXT:
            text = str(raw).strip()
            return text or None
        number = _to_number(name, raw)
        if number is None or number == 0:
            return None
        return self._round(quantity, number)

    def _coerce_time(self, name: str, raw: object, time_unit: str) -> float | int | None:
        number = _to_number(name, raw)
        if number is None:
            return None
        converted = convert_time(number, self.settings.property_time_unit, time_unit)
        return self._round(QuantityClass.TIME, converted)

    def _bootstrap_deviations(
        self,
        manifest: Manifest,
        actual_results: Sequence[ActualResult],
    ) -> tuple[tuple[str, str], ...]:
        results = {result.file_name.casefold(): result for result in actual_results}
        added: list[tuple[str, str]] = []
        for file_name, entry in manifest.files.items():
            legacy_tier = entry.tier(Tier.VBA_BASELINE)
            result = results.get(file_name.casefold())
            if not legacy_tier or result is None:
                continue
            confirmed = flatten_fields(entry.tier(Tier.CSHARP_EXPECTED) or {})
            lookup = ActualFieldLookup(result, self.catalog)
            for path in flatten_fields(legacy_tier):
                if path in confirmed or not is_absent(lookup.get(path)):
                    continue
                deviation = Deviation(reason=BOOTSTRAP_REASON, status=DeviationStatus.NOT_IMPLEMENTED)
                if entry.add_deviation(path, deviation):
                    added.append((file_name, path))
        return tuple(added)


def _routing_unit(manifest: Manifest) -> str:
    unit = manifest.units.setdefault(ROUTING_FIELD, CANONICAL_TIME_UNIT)
    if unit not in TIME_UNITS:
        raise ValueError(f"Unsupported routing time unit in manifest: {unit!r}")
    return unit


def _to_number(name: str, raw: object) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    try:
        return parse_number(name, text)
    except FieldCoercionError as exc:
        log.warning("Property dump: %s", exc)
        return None


def _op20_work_center(folded: Mapping[str, object]) -> str | None:
    for name in _OP20_WORK_CENTER_PROPERTIES:
        raw = folded.get(name.casefold())
        if raw is None:
            continue
        # "N120 - 5040" -> "N120"
        code = str(raw).split(" - ", 1)[0].strip()
        if code:
            return canonical_work_center(code)
    return None


def _resolve_dump_key(
    dump_key: str,
    mapping: FileNameMapping,
    manifest: Manifest,
) -> str | None:
    folded = dump_key.casefold()
    for key, file_name in mapping.mapped.items():
        if key.casefold() == folded:
            return file_name
    for file_name in manifest.files:
        if file_name.casefold() == folded or base_name(file_name).casefold() == folded:
            return file_name
    return None
