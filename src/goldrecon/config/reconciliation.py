"""Reconciliation tuning values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from .env import env_float, env_list, optional_env_var
from .errors import ConfigurationError

type TimeUnit = Literal["minutes", "hours"]

DEFAULT_WIDEN_FACTOR: Final[float] = 2.0
DEFAULT_LEGACY_TIME_UNIT: Final[TimeUnit] = "minutes"


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    widen_factor: float = DEFAULT_WIDEN_FACTOR
    legacy_time_unit: TimeUnit = DEFAULT_LEGACY_TIME_UNIT
    excluded_keys: tuple[str, ...] = ()


def get_reconciliation_config() -> ReconciliationConfig:
    widen_factor = env_float("GOLDRECON_WIDEN_FACTOR", DEFAULT_WIDEN_FACTOR)
    if widen_factor < 1.0:
        raise ConfigurationError(
            f"GOLDRECON_WIDEN_FACTOR must be at least 1.0, got {widen_factor}"
        )
    return ReconciliationConfig(
        widen_factor=widen_factor,
        legacy_time_unit=_time_unit(optional_env_var("GOLDRECON_LEGACY_TIME_UNIT")),
        excluded_keys=env_list("GOLDRECON_EXCLUDED_KEYS"),
    )


def _time_unit(raw: str | None) -> TimeUnit:
    if raw is None:
        return DEFAULT_LEGACY_TIME_UNIT
    normalized = raw.lower()
    if normalized == "minutes":
        return "minutes"
    if normalized == "hours":
        return "hours"
    raise ConfigurationError(f"GOLDRECON_LEGACY_TIME_UNIT must be minutes or hours, got {raw!r}")
