"""Coverage snapshots and the trend over the most recent runs.

The trend delta is the plain difference between the first and the last row
of the window. It is a trend signal, not a statistical test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from goldrecon.domain.reconciliation.contracts import ComparisonStatus

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from goldrecon.domain.reconciliation.contracts import ComparisonReport

DEFAULT_WINDOW: Final[int] = 10


@dataclass(frozen=True, slots=True, kw_only=True)
class CoverageSnapshot:
    date: datetime
    total: int
    match: int = 0
    tolerance: int = 0
    not_impl: int = 0
    intentional: int = 0
    bug: int = 0
    missing: int = 0
    fail: int = 0

    @property
    def coverage(self) -> float:
        """Percentage of classified fields that are MATCH or TOLERANCE."""

        if self.total == 0:
            return 0.0
        return (self.match + self.tolerance) / self.total * 100

    @property
    def has_failures(self) -> bool:
        return self.fail > 0 or self.missing > 0

    @classmethod
    def from_totals(cls, date: datetime, totals: Mapping[str, int]) -> CoverageSnapshot:
        """Build a snapshot from per-status counts keyed by status name."""

        counts = {status: int(totals.get(status.value, 0)) for status in ComparisonStatus}
        return cls(
            date=date,
            total=sum(counts.values()),
            match=counts[ComparisonStatus.MATCH],
            tolerance=counts[ComparisonStatus.TOLERANCE],
            not_impl=counts[ComparisonStatus.NOT_IMPL],
            intentional=counts[ComparisonStatus.INTENTIONAL],
            bug=counts[ComparisonStatus.BUG],
            missing=counts[ComparisonStatus.MISSING],
            fail=counts[ComparisonStatus.FAIL],
        )

    @classmethod
    def from_report(cls, report: ComparisonReport) -> CoverageSnapshot:
        totals = {status.value: count for status, count in report.totals().items()}
        return cls.from_totals(report.compared_at, totals)


@dataclass(frozen=True, slots=True, kw_only=True)
class TrendDelta:
    match: int
    not_impl: int
    fail: int
    coverage: float

    @classmethod
    def between(cls, first: CoverageSnapshot, last: CoverageSnapshot) -> TrendDelta:
        return cls(
            match=last.match - first.match,
            not_impl=last.not_impl - first.not_impl,
            fail=last.fail - first.fail,
            coverage=last.coverage - first.coverage,
        )


@dataclass(frozen=True, slots=True)
class Trend:
    rows: tuple[CoverageSnapshot, ...]
    delta: TrendDelta | None
    recorded: CoverageSnapshot | None = None


def trend(
    snapshots: Sequence[CoverageSnapshot],
    window: int = DEFAULT_WINDOW,
    *,
    recorded: CoverageSnapshot | None = None,
) -> Trend:
    """Last ``window`` snapshots and the delta between the first and last shown.

    With fewer than two rows there is no delta. ``recorded`` is the snapshot
    appended by this run, if any.
    """

    if window < 1:
        raise ValueError(f"Window must be at least 1, got {window}")
    rows = tuple(snapshots[-window:])
    delta = TrendDelta.between(rows[0], rows[-1]) if len(rows) >= 2 else None
    return Trend(rows=rows, delta=delta, recorded=recorded)


def format_signed(value: float, *, decimals: int = 0) -> str:
    """``+15``, ``-4``, ``0``; ``decimals`` for percentages."""

    text = f"{value:+.{decimals}f}"
    if float(text) == 0:
        return f"{0:.{decimals}f}"
    return text


def render_trend(result: Trend) -> str:
    header = f"{'Date':<20}{'Total':>7}{'Match':>7}{'Tol':>6}{'NotImp':>8}{'Fail':>6}{'Miss':>6}{'Cov%':>8}"
    lines = ["=== COVERAGE TREND ===", header]
    for row in result.rows:
        lines.append(
            f"{row.date:%Y-%m-%d %H:%M}".ljust(20)
            + f"{row.total:>7}{row.match:>7}{row.tolerance:>6}{row.not_impl:>8}"
            + f"{row.fail:>6}{row.missing:>6}{row.coverage:>8.1f}"
        )
    if result.delta is None:
        lines.append("Not enough history for a trend (need at least two runs).")
    else:
        delta = result.delta
        lines.extend(
            [
                "",
                f"Trend over last {len(result.rows)} runs:",
                f"  MATCH:    {format_signed(delta.match)}",
                f"  NOT_IMPL: {format_signed(delta.not_impl)}",
                f"  FAIL:     {format_signed(delta.fail)}",
                f"  Coverage: {format_signed(delta.coverage, decimals=1)} pts",
            ]
        )
    return "\n".join(lines) + "\n"
