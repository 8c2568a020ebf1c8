"""Public interface for the coverage history adapter."""

from __future__ import annotations

from .history import HISTORY_COLUMNS, CoverageHistory
from .report import load_report_snapshot

__all__ = [
    "HISTORY_COLUMNS",
    "CoverageHistory",
    "load_report_snapshot",
]
