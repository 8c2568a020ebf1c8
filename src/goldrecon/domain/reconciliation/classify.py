"""Deviation classification as one pure function.

Precedence: MATCH > TOLERANCE > NOT_IMPL > INTENTIONAL > BUG > MISSING > FAIL.
"""

from __future__ import annotations

from enum import StrEnum

from goldrecon.domain.baseline.manifest import DeviationStatus

from .contracts import ComparisonStatus


class ValueOutcome(StrEnum):
    """What the tolerance bands said about one actual value."""

    WITHIN = "within"
    WIDENED = "widened"
    ABSENT = "absent"
    MISMATCH = "mismatch"


_DOCUMENTED: dict[DeviationStatus, ComparisonStatus] = {
    DeviationStatus.INTENTIONAL: ComparisonStatus.INTENTIONAL,
    DeviationStatus.BUG: ComparisonStatus.BUG,
}


def classify(outcome: ValueOutcome, deviation: DeviationStatus | None) -> ComparisonStatus:
    if outcome is ValueOutcome.WITHIN:
        return ComparisonStatus.MATCH
    if outcome is ValueOutcome.WIDENED:
        return ComparisonStatus.TOLERANCE
    if outcome is ValueOutcome.ABSENT:
        if deviation is DeviationStatus.NOT_IMPLEMENTED:
            return ComparisonStatus.NOT_IMPL
        return ComparisonStatus.MISSING
    if deviation is not None and deviation in _DOCUMENTED:
        return _DOCUMENTED[deviation]
    return ComparisonStatus.FAIL
