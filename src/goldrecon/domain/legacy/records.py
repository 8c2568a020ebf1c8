"""Immutable record types produced by the legacy export parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class SectionCode(StrEnum):
    """Section codes the reconciliation subsystem understands."""

    ITEM_MASTER = "IM"
    PRODUCT_STRUCTURE = "PS"
    ROUTING = "RT"
    ROUTING_NOTES = "RN"


@dataclass(frozen=True, slots=True, kw_only=True)
class Record:
    """One data row bound to the field names of its section header.

    ``values`` may be shorter than ``field_names`` when the row supplied fewer
    tokens; the trailing fields are unset and ``get`` returns ``None`` for them.
    """

    section: str
    field_names: tuple[str, ...]
    values: tuple[str, ...]
    line_number: int

    def __post_init__(self) -> None:
        if len(self.values) > len(self.field_names):
            raise ValueError("Record cannot hold more values than declared fields")

    def declares(self, name: str) -> bool:
        return name in self.field_names

    def get(self, name: str) -> str | None:
        try:
            index = self.field_names.index(name)
        except ValueError:
            return None
        if index >= len(self.values):
            return None
        return self.values[index]

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield ``(field, value)`` pairs for the fields this row actually set."""

        yield from zip(self.field_names, self.values, strict=False)

    def as_dict(self) -> dict[str, str]:
        return dict(self.items())


@dataclass(frozen=True, slots=True, kw_only=True)
class Section:
    """A ``DECL`` block: its schema and the records that followed ``END``."""

    code: str
    field_names: tuple[str, ...]
    line_number: int
    records: tuple[Record, ...] = ()


@dataclass(frozen=True, slots=True)
class ParsedExport:
    sections: tuple[Section, ...] = field(default_factory=tuple)

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(record for section in self.sections for record in section.records)

    def sections_with_code(self, code: str) -> tuple[Section, ...]:
        return tuple(section for section in self.sections if section.code == code)

    def record_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for section in self.sections:
            counts[section.code] = counts.get(section.code, 0) + len(section.records)
        return counts
