"""Unit conversion and rounding policy applied when values enter the manifest."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Literal

from goldrecon.domain.fields import QuantityClass

if TYPE_CHECKING:
    from collections.abc import Mapping

type TimeUnit = Literal["minutes", "hours"]

CANONICAL_TIME_UNIT: Final[TimeUnit] = "hours"
_MINUTES_PER_UNIT: Final[dict[str, float]] = {"minutes": 1.0, "hours": 60.0}
TIME_UNITS: Final[frozenset[str]] = frozenset(_MINUTES_PER_UNIT)

DEFAULT_PRECISION: Final[dict[QuantityClass, int]] = {
    QuantityClass.LENGTH: 4,
    QuantityClass.AREA: 3,
    QuantityClass.WEIGHT: 4,
    QuantityClass.COST: 2,
    QuantityClass.TIME: 4,
    QuantityClass.COUNT: 0,
}


def convert_time(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a duration between minutes and hours."""

    try:
        minutes = value * _MINUTES_PER_UNIT[from_unit]
        return minutes / _MINUTES_PER_UNIT[to_unit]
    except KeyError as exc:
        raise ValueError(f"Unsupported time unit: {exc.args[0]!r}") from exc


def round_quantity(
    value: float,
    quantity: QuantityClass,
    precision: Mapping[QuantityClass, int] = DEFAULT_PRECISION,
) -> float | int:
    """Round ``value`` to the fixed precision of its quantity class.

    Counts come back as ``int``; text quantities are not numeric and raise.
    """

    if quantity is QuantityClass.TEXT:
        raise ValueError("Text fields are not rounded")
    digits = precision.get(quantity, 4)
    rounded = round(value, digits)
    if quantity is QuantityClass.COUNT:
        return int(rounded)
    return rounded
