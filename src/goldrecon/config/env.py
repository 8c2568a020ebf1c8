"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def optional_env_var(name: str) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_float(name: str, default: float) -> float:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def env_list(name: str) -> tuple[str, ...]:
    """Return a comma separated environment variable as a tuple of non-blank items."""

    raw = optional_env_var(name)
    if raw is None:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())
