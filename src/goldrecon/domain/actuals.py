"""Actual per-part results of a pipeline run, and field lookup over them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from .fields import (
    ROUTING_SUBFIELDS,
    FieldCatalog,
    canonical_work_center,
    is_routing_path,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

SUCCESS_STATUS: Final[str] = "success"
_NESTED_ROUTING_KEY: Final[str] = "routing"


@dataclass(frozen=True, slots=True, kw_only=True)
class ActualResult:
    """One record of the actual-results document."""

    file_name: str
    status: str | None = None
    values: dict[str, object] = field(default_factory=dict["str", "object"])

    @property
    def succeeded(self) -> bool:
        return (self.status or "").strip().casefold() == SUCCESS_STATUS


def is_absent(value: object) -> bool:
    """Absent, empty or zero: the pipeline produced nothing for the field."""

    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, int | float):
        return value == 0
    if isinstance(value, dict | list | tuple):
        return not value
    return False


class ActualFieldLookup:
    """Read manifest field paths out of one actual result."""

    def __init__(self, result: ActualResult, catalog: FieldCatalog) -> None:
        self._catalog = catalog
        self._folded = {key.casefold(): value for key, value in result.values.items()}
        self._routing = _routing_table(result.values)

    def get(self, path: str) -> object | None:
        if is_routing_path(path):
            _, work_center, subfield = path.split(".")
            return self._routing.get(canonical_work_center(work_center), {}).get(subfield)

        spec = self._catalog.spec_for(path)
        if spec is not None:
            for key in spec.actual_keys:
                value = self._folded.get(key.casefold())
                if value is not None:
                    return value
        return self._folded.get(path.casefold())


def _routing_table(values: Mapping[str, object]) -> dict[str, dict[str, object]]:
    """Collect routing actuals from a nested ``Routing`` object and flat keys.

    Flat keys look like ``N120_Setup`` or ``F115_Run``; calculator work centers
    are folded onto their ERP work center.
    """

    table: dict[str, dict[str, object]] = {}
    for key, value in values.items():
        if key.casefold() == _NESTED_ROUTING_KEY and isinstance(value, dict):
            for work_center, times in value.items():
                if not isinstance(times, dict):
                    continue
                slot = table.setdefault(canonical_work_center(str(work_center)), {})
                for subfield, time_value in times.items():
                    name = str(subfield).casefold()
                    if name in ROUTING_SUBFIELDS and time_value is not None:
                        slot[name] = time_value
            continue

        head, sep, tail = key.rpartition("_")
        subfield = tail.casefold()
        if not sep or not head or subfield not in ROUTING_SUBFIELDS or value is None:
            continue
        slot = table.setdefault(canonical_work_center(head), {})
        slot.setdefault(subfield, value)
    return table
