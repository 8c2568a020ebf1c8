"""Gold standard manifest model.

A manifest entry holds expected values in named tiers of authority. Tier order
is data (``TIER_PRECEDENCE``): the first tier that defines a field wins, and
lower tiers are kept even when shadowed. An absent tier (``None``) means the
part is untracked by that source; an empty one means tracked and confirmed
empty.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Final

type Scalar = str | int | float | bool
type FieldTree = dict[str, Scalar | FieldTree]

MANIFEST_VERSION: Final[str] = "2.0"

# entry keys that carry structure, never an expected value
RESERVED_ENTRY_KEYS: Final[frozenset[str]] = frozenset(
    {"shouldPass", "vbaBaseline", "csharpExpected", "knownDeviations", "comment"}
)

DEFAULT_TOLERANCES: Final[dict[str, float]] = {
    "thickness": 0.001,
    "mass": 0.01,
    "dimensions": 0.001,
    "cost": 0.05,
    "routing": 0.01,
    "count": 0.0,
    "default": 0.01,
}


class Tier(StrEnum):
    TOP_LEVEL = "topLevel"
    VBA_BASELINE = "vbaBaseline"
    CSHARP_EXPECTED = "csharpExpected"


TIER_PRECEDENCE: Final[tuple[Tier, ...]] = (
    Tier.CSHARP_EXPECTED,
    Tier.VBA_BASELINE,
    Tier.TOP_LEVEL,
)


class DeviationStatus(StrEnum):
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    INTENTIONAL = "INTENTIONAL"
    BUG = "BUG"


@dataclass(frozen=True, slots=True)
class Deviation:
    reason: str
    status: DeviationStatus


@dataclass(slots=True, kw_only=True)
class ManifestEntry:
    """Expectations for one tracked file."""

    should_pass: bool = True
    tiers: dict[Tier, FieldTree | None] = field(
        default_factory=lambda: {Tier.TOP_LEVEL: {}}
    )
    known_deviations: dict[str, Deviation] = field(default_factory=dict["str", "Deviation"])
    comment: str | None = None

    def __post_init__(self) -> None:
        if self.tiers.get(Tier.TOP_LEVEL) is None:
            self.tiers[Tier.TOP_LEVEL] = {}

    @property
    def expected_classification(self) -> str | None:
        value = self.top_level.get("expectedClassification")
        return str(value) if value is not None else None

    @property
    def top_level(self) -> FieldTree:
        return self.tiers[Tier.TOP_LEVEL] or {}

    def tier(self, tier: Tier) -> FieldTree | None:
        return self.tiers.get(tier)

    def has_tier(self, tier: Tier) -> bool:
        return self.tiers.get(tier) is not None

    def ensure_tier(self, tier: Tier) -> FieldTree:
        existing = self.tiers.get(tier)
        if existing is None:
            existing = {}
            self.tiers[tier] = existing
        return existing

    def set_field(self, tier: Tier, path: str, value: Scalar) -> None:
        """Set a dotted ``path`` in ``tier``, overwriting only that same field."""

        node = self.ensure_tier(tier)
        *parents, leaf = path.split(".")
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value

    def deviation_for(self, field_name: str) -> Deviation | None:
        return self.known_deviations.get(field_name)

    def add_deviation(self, field_name: str, deviation: Deviation) -> bool:
        """Record ``deviation`` unless one is already documented for the field."""

        if field_name in self.known_deviations:
            return False
        self.known_deviations[field_name] = deviation
        return True


@dataclass(slots=True, kw_only=True)
class Manifest:
    version: str = MANIFEST_VERSION
    description: str = ""
    generated_at: datetime | None = None
    units: dict[str, str] = field(default_factory=lambda: {"routing": "hours"})
    default_tolerances: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TOLERANCES)
    )
    files: dict[str, ManifestEntry] = field(default_factory=dict["str", "ManifestEntry"])

    def entry(self, file_name: str) -> ManifestEntry | None:
        return self.files.get(file_name)

    def tolerance(self, key: str | None) -> float:
        if key is not None and key in self.default_tolerances:
            return self.default_tolerances[key]
        if key is not None and key in DEFAULT_TOLERANCES:
            return DEFAULT_TOLERANCES[key]
        return self.default_tolerances.get("default", DEFAULT_TOLERANCES["default"])

    def copy(self) -> Manifest:
        return copy.deepcopy(self)


def flatten_fields(tree: FieldTree, prefix: str = "") -> dict[str, Scalar]:
    """Flatten nested field trees to dotted leaf paths."""

    flat: dict[str, Scalar] = {}
    for key, value in tree.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_fields(value, prefix=f"{path}."))
        else:
            flat[path] = value
    return flat
