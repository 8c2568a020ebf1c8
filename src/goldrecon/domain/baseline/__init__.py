"""Gold standard manifest: model, unit policy and the builder that merges legacy data."""

from __future__ import annotations

from .builder import BaselineManifestBuilder, BuildResult, BuildSettings
from .manifest import (
    DEFAULT_TOLERANCES,
    MANIFEST_VERSION,
    RESERVED_ENTRY_KEYS,
    TIER_PRECEDENCE,
    Deviation,
    DeviationStatus,
    Manifest,
    ManifestEntry,
    Tier,
    flatten_fields,
)
from .units import DEFAULT_PRECISION, convert_time, round_quantity

__all__ = [
    "DEFAULT_PRECISION",
    "DEFAULT_TOLERANCES",
    "MANIFEST_VERSION",
    "RESERVED_ENTRY_KEYS",
    "TIER_PRECEDENCE",
    "BaselineManifestBuilder",
    "BuildResult",
    "BuildSettings",
    "Deviation",
    "DeviationStatus",
    "Manifest",
    "ManifestEntry",
    "Tier",
    "convert_time",
    "flatten_fields",
    "round_quantity",
]
