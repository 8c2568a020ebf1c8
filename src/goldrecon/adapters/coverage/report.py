"""Read the JSON report written by ``compare --report`` back into a snapshot."""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from goldrecon.common.storage import read_text
from goldrecon.domain.coverage import CoverageSnapshot
from goldrecon.domain.errors import ManifestFormatError

if TYPE_CHECKING:
    from pathlib import Path


class ReportTotalsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    compared_at: datetime = Field(alias="comparedAt")
    totals: dict[str, int]


def load_report_snapshot(path: Path) -> CoverageSnapshot:
    text = read_text(path, "Comparison report")
    try:
        payload = ReportTotalsPayload.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        raise ManifestFormatError(f"{path}: invalid JSON ({exc})") from exc
    except ValidationError as exc:
        raise ManifestFormatError(f"{path}: not a comparison report\n{exc}") from exc
    return CoverageSnapshot.from_totals(payload.compared_at, payload.totals)
