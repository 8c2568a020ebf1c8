"""Reconciliation of a run's actual results against the gold standard manifest.

Layered flow:
1) resolve each expected field by tier precedence
2) compare the actual value with the tight and the widened tolerance band
3) classify the outcome against the documented deviation
4) aggregate per part and per run
"""

from __future__ import annotations

from .classify import ValueOutcome, classify
from .contracts import (
    ComparisonReport,
    ComparisonResult,
    ComparisonStatus,
    PartComparison,
)
from .engine import ReconciliationEngine
from .report import render_detailed, render_summary, report_to_dict
from .tolerance import ToleranceBand, compare, text_matches, within_tolerance

__all__ = [
    "ComparisonReport",
    "ComparisonResult",
    "ComparisonStatus",
    "PartComparison",
    "ReconciliationEngine",
    "ToleranceBand",
    "ValueOutcome",
    "classify",
    "compare",
    "render_detailed",
    "render_summary",
    "report_to_dict",
    "text_matches",
    "within_tolerance",
]
