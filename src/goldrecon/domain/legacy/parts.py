"""Fold keyed export records into one legacy part view per part key."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from goldrecon.domain.errors import FieldCoercionError

from .keys import PartKeyResolver, RecordKind

if TYPE_CHECKING:
    from .records import ParsedExport, Record

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class RoutingStep:
    work_center: str
    op_number: int | None
    setup: float | None
    run: float | None


@dataclass(frozen=True, slots=True, kw_only=True)
class LegacyPart:
    """Everything the legacy export says about one part.

    Numeric values are ``None`` when the export did not supply them (or supplied
    something unparsable); routing times are in the legacy export's unit.
    """

    key: str
    drawing: str | None = None
    description: str | None = None
    revision: str | None = None
    item_type: int | None = None
    item_class: int | None = None
    commodity: str | None = None
    standard_lot: int | None = None
    opti_material: str | None = None
    raw_weight: float | None = None
    f300_length: float | None = None
    parent_key: str | None = None
    piece_number: str | None = None
    bom_quantity: float | None = None
    routing: tuple[RoutingStep, ...] = ()
    routing_notes: tuple[tuple[int | None, tuple[str, ...]], ...] = ()
    kinds: frozenset[RecordKind] = frozenset()


@dataclass(frozen=True, slots=True)
class RecordAnomaly:
    line_number: int
    section: str
    reason: str


@dataclass(frozen=True, slots=True)
class LegacyPartIndex:
    parts: dict[str, LegacyPart]
    anomalies: tuple[RecordAnomaly, ...] = ()

    def keys(self) -> tuple[str, ...]:
        return tuple(self.parts)

    def top_level_assemblies(self) -> tuple[str, ...]:
        """Keys that parent a BOM line but are never a BOM child themselves."""

        parents = {part.parent_key for part in self.parts.values() if part.parent_key}
        children = {key for key, part in self.parts.items() if RecordKind.BOM in part.kinds}
        return tuple(sorted(parents - children))

    def secondary_duplicates(self) -> tuple[str, ...]:
        """Item-master keys whose drawing names another collected part."""

        return tuple(
            key
            for key, part in self.parts.items()
            if part.drawing and part.drawing != key and part.drawing in self.parts
        )


@dataclass(slots=True)
class _PartAccumulator:
    key: str
    values: dict[str, object] = field(default_factory=dict["str", "object"])
    routing: list[RoutingStep] = field(default_factory=list["RoutingStep"])
    notes: dict[int | None, list[str]] = field(default_factory=dict["int | None", "list[str]"])
    kinds: set[RecordKind] = field(default_factory=set["RecordKind"])

    def set_if_present(self, name: str, value: object) -> None:
        if value is not None:
            self.values[name] = value

    def freeze(self) -> LegacyPart:
        return LegacyPart(
            key=self.key,
            routing=tuple(self.routing),
            routing_notes=tuple((op, tuple(lines)) for op, lines in self.notes.items()),
            kinds=frozenset(self.kinds),
            **self.values,  # type: ignore[arg-type]
        )


class _RecordReader:
    """Typed access to a record's values that collects coercion failures."""

    def __init__(self, record: Record, anomalies: list[RecordAnomaly]) -> None:
        self._record = record
        self._anomalies = anomalies

    def text(self, name: str) -> str | None:
        value = self._record.get(name)
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    def number(self, name: str) -> float | None:
        value = self.text(name)
        if value is None:
            return None
        try:
            return parse_number(name, value)
        except FieldCoercionError as exc:
            self._report(str(exc))
            return None

    def integer(self, name: str) -> int | None:
        number = self.number(name)
        if number is None:
            return None
        if not number.is_integer():
            self._report(f"{name}: expected a whole number, got {number}")
            return None
        return int(number)

    def _report(self, reason: str) -> None:
        log.warning("Line %s: %s", self._record.line_number, reason)
        self._anomalies.append(
            RecordAnomaly(
                line_number=self._record.line_number,
                section=self._record.section,
                reason=reason,
            )
        )


def parse_number(field_name: str, value: str) -> float:
    """Parse a legacy numeric token (``.01``, ``1.``, ``12.4348``)."""

    try:
        return float(value.strip())
    except ValueError as exc:
        raise FieldCoercionError(field_name, value) from exc


def collect_legacy_parts(
    export: ParsedExport,
    *,
    resolver: PartKeyResolver | None = None,
) -> LegacyPartIndex:
    """Group the records of ``export`` by part key."""

    effective_resolver = resolver or PartKeyResolver()
    accumulators: dict[str, _PartAccumulator] = {}
    anomalies: list[RecordAnomaly] = []

    for record in export.records:
        kind = effective_resolver.kind_of(record)
        if kind is RecordKind.UNKNOWN:
            continue
        key = effective_resolver.resolve(record)
        if key is None:
            anomalies.append(
                RecordAnomaly(
                    line_number=record.line_number,
                    section=record.section,
                    reason=f"no part key for {kind} record",
                )
            )
            log.warning(
                "Record at line %s (%s) has no part key", record.line_number, record.section
            )
            continue
        accumulator = accumulators.setdefault(key, _PartAccumulator(key=key))
        accumulator.kinds.add(kind)
        _FOLDERS[kind](accumulator, _RecordReader(record, anomalies))

    return LegacyPartIndex(
        parts={key: accumulator.freeze() for key, accumulator in accumulators.items()},
        anomalies=tuple(anomalies),
    )


def _fold_item_master(part: _PartAccumulator, reader: _RecordReader) -> None:
    part.set_if_present("drawing", reader.text("IM-DRAWING"))
    part.set_if_present("description", reader.text("IM-DESCR"))
    part.set_if_present("revision", reader.text("IM-REV"))
    part.set_if_present("item_type", reader.integer("IM-TYPE"))
    part.set_if_present("item_class", reader.integer("IM-CLASS"))
    part.set_if_present("commodity", reader.text("IM-COMMODITY"))
    part.set_if_present("standard_lot", reader.integer("IM-STD-LOT"))


def _fold_material(part: _PartAccumulator, reader: _RecordReader) -> None:
    part.set_if_present("opti_material", reader.text("PS-SUBORD-KEY"))
    part.set_if_present("raw_weight", reader.number("PS-QTY-P"))
    part.set_if_present("f300_length", reader.number("PS-DIM-1"))


def _fold_bom(part: _PartAccumulator, reader: _RecordReader) -> None:
    part.set_if_present("parent_key", reader.text("PS-PARENT-KEY"))
    part.set_if_present("piece_number", reader.text("PS-PIECE-NO"))
    part.set_if_present("bom_quantity", reader.number("PS-QTY-P"))


def _fold_routing(part: _PartAccumulator, reader: _RecordReader) -> None:
    work_center = reader.text("RT-WORKCENTER-KEY")
    if work_center is None:
        return
    part.routing.append(
        RoutingStep(
            work_center=work_center,
            op_number=reader.integer("RT-OP-NUM"),
            setup=reader.number("RT-SETUP"),
            run=reader.number("RT-RUN-STD"),
        )
    )


def _fold_routing_note(part: _PartAccumulator, reader: _RecordReader) -> None:
    text = reader.text("RN-DESCR")
    if text is None:
        return
    part.notes.setdefault(reader.integer("RN-OP-NUM"), []).append(text)


_FOLDERS = {
    RecordKind.ITEM_MASTER: _fold_item_master,
    RecordKind.MATERIAL: _fold_material,
    RecordKind.BOM: _fold_bom,
    RecordKind.ROUTING: _fold_routing,
    RecordKind.ROUTING_NOTE: _fold_routing_note,
}
