from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from goldrecon.domain.coverage import CoverageSnapshot, format_signed, render_trend, trend

START = datetime(2026, 10, 1, tzinfo=UTC)


def _snapshot(day: int, *, match: int, not_impl: int = 0, fail: int = 0) -> CoverageSnapshot:
    return CoverageSnapshot(
        date=START + timedelta(days=day),
        total=100,
        match=match,
        not_impl=not_impl,
        fail=fail,
        missing=100 - match - not_impl - fail,
    )


def test_coverage_is_a_percentage_of_all_fields() -> None:
    snapshot = CoverageSnapshot.from_totals(
        START, {"MATCH": 30, "TOLERANCE": 10, "NOT_IMPL": 40, "FAIL": 20}
    )

    assert snapshot.total == 100
    assert snapshot.coverage == 40.0
    assert CoverageSnapshot(date=START, total=0).coverage == 0.0


def test_snapshot_fails_on_fail_or_missing_fields() -> None:
    assert CoverageSnapshot.from_totals(START, {"FAIL": 1, "MATCH": 9}).has_failures
    assert CoverageSnapshot.from_totals(START, {"MISSING": 1}).has_failures
    assert not CoverageSnapshot.from_totals(START, {"MATCH": 5, "NOT_IMPL": 5}).has_failures


def test_trend_delta_between_first_and_last_row_of_window() -> None:
    history = [
        _snapshot(0, match=10, not_impl=50, fail=9),
        _snapshot(1, match=40, not_impl=30, fail=5),
        _snapshot(2, match=48, not_impl=28, fail=3),
        _snapshot(3, match=55, not_impl=26, fail=1),
    ]

    result = trend(history, window=3)

    assert [row.match for row in result.rows] == [40, 48, 55]
    assert result.delta is not None
    assert format_signed(result.delta.match) == "+15"
    assert format_signed(result.delta.not_impl) == "-4"
    assert format_signed(result.delta.fail) == "-4"
    assert result.delta.coverage == pytest.approx(15.0)


def test_single_row_has_no_delta() -> None:
    result = trend([_snapshot(0, match=10)])

    assert result.delta is None
    assert result.recorded is None
    assert "Not enough history" in render_trend(result)


def test_window_must_be_positive() -> None:
    with pytest.raises(ValueError, match="at least 1"):
        trend([], window=0)


def test_format_signed_zero_has_no_sign() -> None:
    assert format_signed(0) == "0"
    assert format_signed(-0.01, decimals=1) == "0.0"
    assert format_signed(2.345, decimals=1) == "+2.3"


def test_render_trend_lists_rows_and_deltas() -> None:
    text = render_trend(trend([_snapshot(0, match=40), _snapshot(1, match=55)]))

    assert text.startswith("=== COVERAGE TREND ===\n")
    assert "2026-10-02 00:00" in text
    assert "  MATCH:    +15" in text
    assert "  Coverage: +15.0 pts" in text
