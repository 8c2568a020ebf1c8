"""Tolerance comparison primitive shared by the engine and its tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from goldrecon.domain.fields import QuantityClass

# floor of the numeric band; also the whole band when the expected value is zero
DEFAULT_MIN_ABSOLUTE: Final[dict[QuantityClass, float]] = {
    QuantityClass.LENGTH: 0.001,
    QuantityClass.AREA: 0.001,
    QuantityClass.WEIGHT: 0.001,
    QuantityClass.COST: 0.005,
    QuantityClass.TIME: 0.0001,
    QuantityClass.COUNT: 0.0,
}
FALLBACK_MIN_ABSOLUTE: Final[float] = 1e-9


@dataclass(frozen=True, slots=True)
class ToleranceBand:
    relative: float
    min_absolute: float = 0.0

    def __post_init__(self) -> None:
        _check_non_negative(self.relative, self.min_absolute)

    def widened(self, factor: float) -> ToleranceBand:
        """Return the near-miss band: relative tolerance times ``factor``."""

        if factor < 1.0:
            raise ValueError(f"Widen factor must be at least 1.0, got {factor}")
        return ToleranceBand(self.relative * factor, self.min_absolute)

    def admits(self, actual: object, expected: object) -> bool:
        return compare(actual, expected, self.relative, self.min_absolute)

    def describe(self) -> str:
        return f"{self.relative * 100:.1f}%"


def within_tolerance(
    actual: float,
    expected: float,
    relative_tol: float,
    min_abs_tol: float,
) -> bool:
    """Numeric band check.

    At ``expected == 0`` the relative tolerance is meaningless, so only
    ``min_abs_tol`` applies.
    """

    _check_non_negative(relative_tol, min_abs_tol)
    difference = abs(actual - expected)
    if expected == 0:
        return difference <= min_abs_tol
    return difference <= max(abs(expected) * relative_tol, min_abs_tol)


def text_matches(actual: str, expected: str) -> bool:
    return actual.strip().casefold() == expected.strip().casefold()


def compare(actual: object, expected: object, relative_tol: float, min_abs_tol: float) -> bool:
    """Compare two values: numbers by tolerance band, everything else as text."""

    if (
        isinstance(actual, int | float)
        and isinstance(expected, int | float)
        and not isinstance(actual, bool)
        and not isinstance(expected, bool)
    ):
        return within_tolerance(float(actual), float(expected), relative_tol, min_abs_tol)
    _check_non_negative(relative_tol, min_abs_tol)
    return text_matches(as_text(actual), as_text(expected))


def is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def relative_difference(actual: float, expected: float) -> float:
    if expected == 0:
        return 0.0 if actual == 0 else float("inf")
    return abs(actual - expected) / abs(expected)


def _check_non_negative(relative_tol: float, min_abs_tol: float) -> None:
    if relative_tol < 0 or min_abs_tol < 0:
        raise ValueError(
            f"Tolerances must be non-negative (relative={relative_tol}, absolute={min_abs_tol})"
        )
