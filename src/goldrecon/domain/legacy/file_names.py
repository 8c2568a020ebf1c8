"""Map legacy part keys onto the input file names of a pipeline run.

Matching order: exact base-name match (extension stripped, case-insensitive),
then the first file in listing order whose base name has the key as a proper
prefix. Listing order is kept as given; prefix collisions are resolved to the
first candidate and reported as ``AmbiguousKeyError`` for human review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TYPE_CHECKING

from goldrecon.domain.errors import AmbiguousKeyError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileNameMapping:
    mapped: dict[str, str] = field(default_factory=dict["str", "str"])
    unmapped: tuple[str, ...] = ()
    excluded: tuple[str, ...] = ()
    ambiguous: tuple[AmbiguousKeyError, ...] = ()

    def file_for(self, key: str) -> str | None:
        return self.mapped.get(key)


def base_name(file_name: str) -> str:
    """Return ``file_name`` without directories or extension."""

    return PurePath(file_name).stem


@dataclass(frozen=True, slots=True)
class FileNameMapper:
    """Associate part keys with file names from one listing."""

    file_names: Sequence[str]
    excluded_keys: frozenset[str] = frozenset()

    def map_keys(self, keys: Iterable[str]) -> FileNameMapping:
        mapped: dict[str, str] = {}
        unmapped: list[str] = []
        excluded: list[str] = []
        ambiguous: list[AmbiguousKeyError] = []
        folded_excluded = {key.casefold() for key in self.excluded_keys}

        for key in keys:
            if key.casefold() in folded_excluded:
                excluded.append(key)
                continue
            match, collision = self._match(key)
            if collision is not None:
                log.warning("%s", collision)
                ambiguous.append(collision)
            if match is None:
                unmapped.append(key)
                continue
            mapped[key] = match

        if unmapped:
            log.warning("%s part key(s) have no input file: %s", len(unmapped), ", ".join(unmapped))
        return FileNameMapping(
            mapped=mapped,
            unmapped=tuple(unmapped),
            excluded=tuple(excluded),
            ambiguous=tuple(ambiguous),
        )

    def _match(self, key: str) -> tuple[str | None, AmbiguousKeyError | None]:
        folded_key = key.casefold()
        for file_name in self.file_names:
            if base_name(file_name).casefold() == folded_key:
                return file_name, None

        candidates = tuple(
            file_name
            for file_name in self.file_names
            if _is_proper_prefix(folded_key, base_name(file_name).casefold())
        )
        if not candidates:
            return None, None
        chosen = candidates[0]
        if len(candidates) > 1:
            return chosen, AmbiguousKeyError(key, candidates, chosen)
        return chosen, None


def _is_proper_prefix(prefix: str, value: str) -> bool:
    return len(value) > len(prefix) and value.startswith(prefix)
