"""Error taxonomy for parsing, baseline building and reconciliation.

Fatal errors (``ParseError``, ``MissingInputError``, ``ManifestFormatError``,
``HistoryFormatError``) propagate to the CLI boundary. ``FieldCoercionError``
and ``AmbiguousKeyError`` are non-fatal: callers collect them into results
instead of raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ReconciliationError(Exception):
    """Base class for goldrecon domain errors."""


class ParseError(ReconciliationError):
    """Raised when a legacy export cannot be parsed."""

    def __init__(self, message: str, *, line_number: int, path: Path | None = None) -> None:
        self.message = message
        self.line_number = line_number
        self.path = path
        location = f"{path}:{line_number}" if path is not None else f"line {line_number}"
        super().__init__(f"{location}: {message}")

    def with_path(self, path: Path) -> ParseError:
        return ParseError(self.message, line_number=self.line_number, path=path)


class MissingInputError(ReconciliationError):
    """Raised when a required input file does not exist."""

    def __init__(self, kind: str, path: Path) -> None:
        self.kind = kind
        self.path = path
        super().__init__(f"{kind} not found: {path}")


class ManifestFormatError(ReconciliationError):
    """Raised when a JSON input (manifest, results, property dump, report) is malformed."""


class HistoryFormatError(ReconciliationError):
    """Raised when the coverage history CSV is malformed."""


class FieldCoercionError(ReconciliationError, ValueError):
    """A field expected to be numeric holds a value that cannot be parsed."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field}: cannot interpret {value!r} as a number")


class AmbiguousKeyError(ReconciliationError):
    """A part key matched more than one file name by prefix."""

    def __init__(self, key: str, candidates: tuple[str, ...], chosen: str) -> None:
        self.key = key
        self.candidates = candidates
        self.chosen = chosen
        super().__init__(
            f"Part key {key!r} matches {len(candidates)} files by prefix "
            f"({', '.join(candidates)}); using {chosen!r}"
        )
