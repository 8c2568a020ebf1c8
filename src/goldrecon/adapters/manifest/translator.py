"""Translate between manifest payloads and the domain manifest."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from goldrecon.domain.baseline.manifest import (
    Deviation,
    Manifest,
    ManifestEntry,
    Tier,
)

if TYPE_CHECKING:
    from goldrecon.domain.baseline.manifest import FieldTree

    from .schema import EntryPayload, ManifestPayload


def manifest_from_payload(payload: ManifestPayload) -> Manifest:
    return Manifest(
        version=payload.version,
        description=payload.description,
        generated_at=payload.generated_at,
        units=dict(payload.units),
        default_tolerances=dict(payload.default_tolerances),
        files={name: _entry_from_payload(entry) for name, entry in payload.files.items()},
    )


def _entry_from_payload(payload: EntryPayload) -> ManifestEntry:
    tiers: dict[Tier, FieldTree | None] = {
        Tier.TOP_LEVEL: cast("FieldTree", payload.top_level_fields()),
    }
    if payload.vba_baseline is not None:
        tiers[Tier.VBA_BASELINE] = cast("FieldTree", payload.vba_baseline)
    if payload.csharp_expected is not None:
        tiers[Tier.CSHARP_EXPECTED] = cast("FieldTree", payload.csharp_expected)
    return ManifestEntry(
        should_pass=payload.should_pass,
        tiers=tiers,
        known_deviations={
            name: Deviation(reason=deviation.reason, status=deviation.status)
            for name, deviation in payload.known_deviations.items()
        },
        comment=payload.comment,
    )


def manifest_to_document(manifest: Manifest) -> dict[str, object]:
    """JSON-ready manifest with the keys in their documented order."""

    return {
        "version": manifest.version,
        "description": manifest.description,
        "generatedAt": manifest.generated_at.isoformat() if manifest.generated_at else None,
        "units": dict(manifest.units),
        "defaultTolerances": dict(manifest.default_tolerances),
        "files": {name: _entry_to_document(entry) for name, entry in manifest.files.items()},
    }


def _entry_to_document(entry: ManifestEntry) -> dict[str, object]:
    document: dict[str, object] = {"shouldPass": entry.should_pass}
    document.update(entry.top_level)
    for tier in (Tier.VBA_BASELINE, Tier.CSHARP_EXPECTED):
        tree = entry.tier(tier)
        if tree is not None:
            document[tier.value] = tree
    if entry.known_deviations:
        document["knownDeviations"] = {
            name: {"reason": deviation.reason, "status": deviation.status.value}
            for name, deviation in entry.known_deviations.items()
        }
    if entry.comment is not None:
        document["comment"] = entry.comment
    return document
