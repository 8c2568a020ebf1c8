"""Coverage history table (CSV, one row per reconciliation run)."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Final

from goldrecon.common.storage import atomic_write_text
from goldrecon.domain.coverage import CoverageSnapshot
from goldrecon.domain.errors import HistoryFormatError

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)

HISTORY_COLUMNS: Final[tuple[str, ...]] = (
    "date",
    "total",
    "match",
    "tolerance",
    "not_impl",
    "intentional",
    "bug",
    "missing",
    "fail",
    "coverage",
)
_COUNT_COLUMNS: Final[tuple[str, ...]] = HISTORY_COLUMNS[2:-1]


@dataclass(slots=True)
class CoverageHistory:
    """Append-only coverage time series stored at ``path``."""

    path: Path

    def load(self) -> list[CoverageSnapshot]:
        if not self.path.is_file():
            return []
        with self.path.open(encoding="utf-8", newline="") as handle:
            reader = csv.DictReader(handle)
            fieldnames = reader.fieldnames or ()
            missing = [column for column in HISTORY_COLUMNS if column not in fieldnames]
            if missing:
                raise HistoryFormatError(
                    f"{self.path}: coverage history lacks column(s) {', '.join(missing)}"
                )
            return [self._parse_row(line_number, row) for line_number, row in enumerate(reader, 2)]

    def append(self, snapshot: CoverageSnapshot) -> list[CoverageSnapshot]:
        """Append ``snapshot`` and rewrite the file atomically; return all rows."""

        snapshots = [*self.load(), snapshot]
        atomic_write_text(self.path, _render(snapshots))
        log.info(
            "Recorded coverage %.1f%% (%s field(s)) in %s",
            snapshot.coverage,
            snapshot.total,
            self.path,
        )
        return snapshots

    def _parse_row(self, line_number: int, row: dict[str, str]) -> CoverageSnapshot:
        try:
            counts = {column: int(row[column]) for column in _COUNT_COLUMNS}
            return CoverageSnapshot(
                date=datetime.fromisoformat(row["date"]),
                total=int(row["total"]),
                **counts,
            )
        except (TypeError, ValueError) as exc:
            raise HistoryFormatError(f"{self.path}:{line_number}: bad history row ({exc})") from exc


def _render(snapshots: list[CoverageSnapshot]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HISTORY_COLUMNS)
    for snapshot in snapshots:
        writer.writerow(
            [
                snapshot.date.isoformat(timespec="seconds"),
                snapshot.total,
                snapshot.match,
                snapshot.tolerance,
                snapshot.not_impl,
                snapshot.intentional,
                snapshot.bug,
                snapshot.missing,
                snapshot.fail,
                f"{snapshot.coverage:.2f}",
            ]
        )
    return buffer.getvalue()
