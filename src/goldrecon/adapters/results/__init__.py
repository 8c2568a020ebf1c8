"""Public interface for the actual-results adapter."""

from __future__ import annotations

from .loader import load_results
from .schema import ResultPayload, ResultsDocument

__all__ = [
    "ResultPayload",
    "ResultsDocument",
    "load_results",
]
