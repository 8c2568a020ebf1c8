"""Public interface for the manifest adapter."""

from __future__ import annotations

from .schema import DeviationPayload, EntryPayload, ManifestPayload
from .store import load_manifest, save_manifest
from .translator import manifest_from_payload, manifest_to_document

__all__ = [
    "DeviationPayload",
    "EntryPayload",
    "ManifestPayload",
    "load_manifest",
    "manifest_from_payload",
    "manifest_to_document",
    "save_manifest",
]
