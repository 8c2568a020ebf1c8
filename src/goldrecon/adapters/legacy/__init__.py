"""Public interface for the legacy file adapter."""

from __future__ import annotations

from .reader import PropertyDumpPayload, read_export, read_property_dump

__all__ = [
    "PropertyDumpPayload",
    "read_export",
    "read_property_dump",
]
