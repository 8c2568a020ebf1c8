"""Part key resolution for legacy export records.

Each record kind has an ordered tuple of candidate key fields. The product
structure section carries two sub-types (material relationship and bill of
materials) that put the part key in *different* columns, so the sub-type is
decided first, from a field only the material layout declares.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .records import SectionCode

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .records import Record


class RecordKind(StrEnum):
    ITEM_MASTER = "item_master"
    MATERIAL = "material"
    BOM = "bom"
    ROUTING = "routing"
    ROUTING_NOTE = "routing_note"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class SubTypeRule:
    """Within ``section``, records declaring ``marker_field`` are ``kind``."""

    section: str
    marker_field: str
    kind: RecordKind


DEFAULT_SECTION_KINDS: dict[str, RecordKind] = {
    SectionCode.ITEM_MASTER: RecordKind.ITEM_MASTER,
    SectionCode.PRODUCT_STRUCTURE: RecordKind.BOM,
    SectionCode.ROUTING: RecordKind.ROUTING,
    SectionCode.ROUTING_NOTES: RecordKind.ROUTING_NOTE,
}

DEFAULT_SUB_TYPE_RULES: tuple[SubTypeRule, ...] = (
    SubTypeRule(
        section=SectionCode.PRODUCT_STRUCTURE,
        marker_field="PS-DIM-1",
        kind=RecordKind.MATERIAL,
    ),
)

DEFAULT_KEY_CANDIDATES: dict[RecordKind, tuple[str, ...]] = {
    RecordKind.ITEM_MASTER: ("IM-KEY",),
    RecordKind.MATERIAL: ("PS-PARENT-KEY",),
    RecordKind.BOM: ("PS-SUBORD-KEY",),
    RecordKind.ROUTING: ("RT-ITEM-KEY",),
    RecordKind.ROUTING_NOTE: ("RN-ITEM-KEY",),
}


@dataclass(frozen=True, slots=True)
class PartKeyResolver:
    """Resolve the stable part identifier of a record."""

    section_kinds: Mapping[str, RecordKind] = field(
        default_factory=lambda: dict(DEFAULT_SECTION_KINDS)
    )
    sub_type_rules: tuple[SubTypeRule, ...] = DEFAULT_SUB_TYPE_RULES
    key_candidates: Mapping[RecordKind, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_KEY_CANDIDATES)
    )

    def kind_of(self, record: Record) -> RecordKind:
        for rule in self.sub_type_rules:
            if rule.section == record.section and record.declares(rule.marker_field):
                return rule.kind
        return self.section_kinds.get(record.section, RecordKind.UNKNOWN)

    def resolve(self, record: Record) -> str | None:
        """Return the part key of ``record`` or ``None`` when it has none."""

        for name in self.key_candidates.get(self.kind_of(record), ()):
            value = record.get(name)
            if value is not None and value.strip():
                return value.strip()
        return None
