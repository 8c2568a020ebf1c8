"""Compare one run's actual results against the gold standard manifest."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from goldrecon.domain.actuals import ActualFieldLookup, is_absent
from goldrecon.domain.errors import FieldCoercionError
from goldrecon.domain.fields import FieldCatalog
from goldrecon.domain.legacy.parts import parse_number

from .classify import ValueOutcome, classify
from .contracts import (
    PART_STATUS_FIELD,
    ComparisonReport,
    ComparisonResult,
    ComparisonStatus,
    PartComparison,
)
from .resolve import deviation_for, resolve_expectations
from .tolerance import (
    DEFAULT_MIN_ABSOLUTE,
    FALLBACK_MIN_ABSOLUTE,
    ToleranceBand,
    is_number,
    relative_difference,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from goldrecon.domain.actuals import ActualResult
    from goldrecon.domain.baseline.manifest import Manifest, ManifestEntry
    from goldrecon.domain.fields import QuantityClass

    from .resolve import Expectation

log = logging.getLogger(__name__)

SUCCESS_LABEL = "Success"
FAILED_LABEL = "Failed"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True)
class ReconciliationEngine:
    """Read-only comparison of actual results against a manifest.

    ``relative_tolerance`` replaces the manifest's relative tolerance for every
    numeric field when set. ``widen_factor`` scales the relative tolerance for
    the near-miss (TOLERANCE) band.
    """

    catalog: FieldCatalog = field(default_factory=FieldCatalog)
    widen_factor: float = 2.0
    relative_tolerance: float | None = None
    min_absolute: Mapping[QuantityClass, float] = field(
        default_factory=lambda: dict(DEFAULT_MIN_ABSOLUTE)
    )
    clock: Callable[[], datetime] = _utcnow

    def __post_init__(self) -> None:
        if self.widen_factor < 1.0:
            raise ValueError(f"Widen factor must be at least 1.0, got {self.widen_factor}")
        if self.relative_tolerance is not None and self.relative_tolerance < 0:
            raise ValueError(f"Tolerance must be non-negative, got {self.relative_tolerance}")

    def reconcile(
        self,
        manifest: Manifest,
        actual_results: Sequence[ActualResult],
        *,
        run_id: str | None = None,
    ) -> ComparisonReport:
        compared_at = self.clock()
        results = _index_results(actual_results)
        report = ComparisonReport(
            run_id=run_id or f"run-{compared_at:%Y%m%dT%H%M%SZ}",
            compared_at=compared_at,
        )

        for file_name, entry in manifest.files.items():
            result = results.pop(file_name.casefold(), None)
            part = self._compare_part(manifest, file_name, entry, result)
            log.debug(
                "%s: %s field(s), passing=%s", file_name, len(part.results), part.passing
            )
            report.parts.append(part)

        report.unexpected_files = tuple(result.file_name for result in results.values())
        if report.unexpected_files:
            log.warning(
                "%s result(s) have no manifest entry: %s",
                len(report.unexpected_files),
                ", ".join(report.unexpected_files),
            )
        log.info(
            "Compared %s part(s), %s field(s); coverage %.1f%%",
            len(report.parts),
            report.total_fields,
            report.coverage * 100,
        )
        return report

    def _compare_part(
        self,
        manifest: Manifest,
        file_name: str,
        entry: ManifestEntry,
        result: ActualResult | None,
    ) -> PartComparison:
        part = PartComparison(file_name=file_name)
        expected_status = SUCCESS_LABEL if entry.should_pass else FAILED_LABEL

        if result is None:
            part.results.append(
                ComparisonResult(
                    file_name=file_name,
                    field=PART_STATUS_FIELD,
                    status=ComparisonStatus.MISSING,
                    expected=expected_status,
                    note="No result in this run",
                )
            )
            return part

        if result.succeeded != entry.should_pass:
            part.results.append(
                ComparisonResult(
                    file_name=file_name,
                    field=PART_STATUS_FIELD,
                    status=ComparisonStatus.FAIL,
                    expected=expected_status,
                    actual=result.status,
                    note=f"Expected {expected_status.lower()}, run reported {result.status!r}",
                )
            )
            return part

        if not entry.should_pass:
            # failed as expected; field values carry no information
            return part

        lookup = ActualFieldLookup(result, self.catalog)
        for expectation in resolve_expectations(entry, self.catalog):
            part.results.append(
                self._compare_field(manifest, file_name, entry, expectation, lookup)
            )
        return part

    def _compare_field(
        self,
        manifest: Manifest,
        file_name: str,
        entry: ManifestEntry,
        expectation: Expectation,
        lookup: ActualFieldLookup,
    ) -> ComparisonResult:
        path = expectation.path
        expected = expectation.value
        actual = lookup.get(path)
        band = self._band(manifest, path)
        deviation = deviation_for(entry, path, self.catalog)

        note: str | None = None
        if is_number(expected) and isinstance(actual, str) and actual.strip():
            try:
                actual = parse_number(path, actual)
            except FieldCoercionError as exc:
                log.warning("%s: %s", file_name, exc)
                note = str(exc)

        if note is not None:
            outcome = ValueOutcome.MISMATCH
        elif band.admits(actual, expected):
            outcome = ValueOutcome.WITHIN
        elif band.widened(self.widen_factor).admits(actual, expected):
            outcome = ValueOutcome.WIDENED
        elif is_absent(actual):
            outcome = ValueOutcome.ABSENT
        else:
            outcome = ValueOutcome.MISMATCH

        status = classify(outcome, deviation.status if deviation is not None else None)
        if note is None and deviation is not None and not status.covered:
            note = deviation.reason
        if note is None and status is ComparisonStatus.FAIL:
            note = _difference_note(actual, expected, band)

        return ComparisonResult(
            file_name=file_name,
            field=path,
            status=status,
            expected=expected,
            actual=actual,
            note=note,
            tolerance=band.widened(self.widen_factor).describe()
            if status is ComparisonStatus.TOLERANCE
            else None,
        )

    def _band(self, manifest: Manifest, path: str) -> ToleranceBand:
        quantity = self.catalog.quantity_of(path)
        min_absolute = (
            self.min_absolute.get(quantity, FALLBACK_MIN_ABSOLUTE)
            if quantity is not None
            else FALLBACK_MIN_ABSOLUTE
        )
        if self.relative_tolerance is not None:
            return ToleranceBand(self.relative_tolerance, min_absolute)
        return ToleranceBand(manifest.tolerance(self.catalog.tolerance_key_of(path)), min_absolute)


def _index_results(actual_results: Sequence[ActualResult]) -> dict[str, ActualResult]:
    indexed: dict[str, ActualResult] = {}
    for result in actual_results:
        key = result.file_name.casefold()
        if key in indexed:
            log.warning("Duplicate result for %s; keeping the last one", result.file_name)
        indexed[key] = result
    return indexed


def _difference_note(actual: object, expected: object, band: ToleranceBand) -> str | None:
    if isinstance(actual, bool) or isinstance(expected, bool):
        return None
    if not isinstance(actual, int | float) or not isinstance(expected, int | float):
        return None
    difference = relative_difference(float(actual), float(expected))
    return f"Difference: {difference * 100:.2f}% (tolerance: {band.describe()})"
