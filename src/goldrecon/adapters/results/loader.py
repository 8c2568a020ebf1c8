"""Load the actual results of a pipeline run."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from goldrecon.common.storage import read_text
from goldrecon.domain.actuals import ActualResult
from goldrecon.domain.errors import ManifestFormatError

from .schema import ResultsDocument

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)


def load_results(path: Path) -> list[ActualResult]:
    text = read_text(path, "Results")
    try:
        document = ResultsDocument.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        raise ManifestFormatError(f"{path}: invalid JSON ({exc})") from exc
    except ValidationError as exc:
        raise ManifestFormatError(f"{path}: invalid results document\n{exc}") from exc

    results = [
        ActualResult(
            file_name=payload.file_name,
            status=payload.status,
            values=payload.field_values(),
        )
        for payload in document.results
    ]
    log.info("Loaded %s result(s) from %s", len(results), path)
    return results
