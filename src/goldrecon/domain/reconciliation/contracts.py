"""Result types produced by one reconciliation run.

Nothing here is persisted except through the rendered report.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

PART_STATUS_FIELD: Final[str] = "status"


class ComparisonStatus(StrEnum):
    """Per-field outcome, in precedence order (best first)."""

    MATCH = "MATCH"
    TOLERANCE = "TOLERANCE"
    NOT_IMPL = "NOT_IMPL"
    INTENTIONAL = "INTENTIONAL"
    BUG = "BUG"
    MISSING = "MISSING"
    FAIL = "FAIL"

    @property
    def covered(self) -> bool:
        return self in _COVERED

    @property
    def failing(self) -> bool:
        return self in _FAILING


_COVERED: Final[frozenset[ComparisonStatus]] = frozenset(
    {ComparisonStatus.MATCH, ComparisonStatus.TOLERANCE}
)
_FAILING: Final[frozenset[ComparisonStatus]] = frozenset(
    {ComparisonStatus.MISSING, ComparisonStatus.FAIL}
)
STATUS_ORDER: Final[tuple[ComparisonStatus, ...]] = tuple(ComparisonStatus)


@dataclass(frozen=True, slots=True, kw_only=True)
class ComparisonResult:
    file_name: str
    field: str
    status: ComparisonStatus
    expected: object = None
    actual: object = None
    note: str | None = None
    tolerance: str | None = None

    @property
    def part_level(self) -> bool:
        return self.field == PART_STATUS_FIELD


@dataclass(slots=True, kw_only=True)
class PartComparison:
    file_name: str
    results: list[ComparisonResult] = field(default_factory=list["ComparisonResult"])

    def counts(self) -> Counter[ComparisonStatus]:
        return Counter(result.status for result in self.results)

    @property
    def passing(self) -> bool:
        """Zero FAIL and zero MISSING; known and tracked gaps do not fail a part."""

        return not any(result.status.failing for result in self.results)

    @property
    def worst_status(self) -> ComparisonStatus | None:
        if not self.results:
            return None
        return max((result.status for result in self.results), key=STATUS_ORDER.index)


@dataclass(slots=True, kw_only=True)
class ComparisonReport:
    run_id: str
    compared_at: datetime
    parts: list[PartComparison] = field(default_factory=list["PartComparison"])
    unexpected_files: tuple[str, ...] = ()

    @property
    def results(self) -> list[ComparisonResult]:
        return [result for part in self.parts for result in part.results]

    def totals(self) -> dict[ComparisonStatus, int]:
        counts = Counter(result.status for result in self.results)
        return {status: counts.get(status, 0) for status in STATUS_ORDER}

    @property
    def total_fields(self) -> int:
        return sum(len(part.results) for part in self.parts)

    @property
    def coverage(self) -> float:
        """(MATCH + TOLERANCE) / all classified fields, as a fraction."""

        total = self.total_fields
        if total == 0:
            return 0.0
        covered = sum(1 for result in self.results if result.status.covered)
        return covered / total

    @property
    def has_failures(self) -> bool:
        return any(result.status.failing for result in self.results)

    def part(self, file_name: str) -> PartComparison | None:
        for part in self.parts:
            if part.file_name == file_name:
                return part
        return None
