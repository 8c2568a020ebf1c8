"""Expected-value resolution over manifest tiers.

Responsibilities of this stage:
- flatten every tier of an entry to canonical dotted field paths
- pick each path's expected value from the first tier (``TIER_PRECEDENCE``)
  that defines it
- find the documented deviation that applies to a path

The manifest is only read here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from goldrecon.domain.baseline.manifest import (
    RESERVED_ENTRY_KEYS,
    TIER_PRECEDENCE,
    flatten_fields,
)
from goldrecon.domain.fields import ROUTING_FIELD, canonical_work_center

if TYPE_CHECKING:
    from goldrecon.domain.baseline.manifest import Deviation, ManifestEntry, Scalar, Tier
    from goldrecon.domain.fields import FieldCatalog


@dataclass(frozen=True, slots=True)
class Expectation:
    path: str
    value: Scalar
    tier: Tier


def canonical_path(path: str, catalog: FieldCatalog) -> str:
    parts = path.split(".")
    if len(parts) > 1 and parts[0] == ROUTING_FIELD:
        parts[1] = canonical_work_center(parts[1])
        return ".".join(part.casefold() if i > 1 else part for i, part in enumerate(parts))
    return catalog.canonical_name(path)


def resolve_expectations(entry: ManifestEntry, catalog: FieldCatalog) -> list[Expectation]:
    """Return one expectation per field path.

    Tiers are walked by precedence; a path takes its value and its position
    from the first tier that defines it.
    """

    resolved: dict[str, Expectation] = {}
    for tier in TIER_PRECEDENCE:
        tree = entry.tier(tier)
        if not tree:
            continue
        for path, value in flatten_fields(tree).items():
            if path in RESERVED_ENTRY_KEYS:
                continue
            canonical = canonical_path(path, catalog)
            if canonical not in resolved:
                resolved[canonical] = Expectation(path=canonical, value=value, tier=tier)
    return list(resolved.values())


def deviation_for(entry: ManifestEntry, path: str, catalog: FieldCatalog) -> Deviation | None:
    """Most specific documented deviation for ``path``.

    ``routing.N120.setup`` falls back to ``routing.N120`` and then ``routing``.
    Field aliases (``expectedThickness_in`` for ``thickness``) are honoured.
    """

    by_canonical = {
        canonical_path(name, catalog): deviation
        for name, deviation in entry.known_deviations.items()
    }
    parts = path.split(".")
    while parts:
        candidate = ".".join(parts)
        deviation = entry.deviation_for(candidate) or by_canonical.get(candidate)
        if deviation is not None:
            return deviation
        parts.pop()
    return None
