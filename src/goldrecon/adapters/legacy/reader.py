"""Read legacy export and property dump files."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import RootModel, ValidationError

from goldrecon.common.storage import read_text
from goldrecon.domain.errors import ManifestFormatError, ParseError
from goldrecon.domain.legacy.parser import parse_export

if TYPE_CHECKING:
    from pathlib import Path

    from goldrecon.domain.legacy.records import ParsedExport

log = logging.getLogger(__name__)


class PropertyDumpPayload(RootModel[dict[str, dict[str, object]]]):
    """Part key or file name -> property name -> value."""


def read_export(path: Path) -> ParsedExport:
    text = read_text(path, "Legacy export")
    try:
        export = parse_export(text)
    except ParseError as exc:
        raise exc.with_path(path) from exc
    log.info(
        "Parsed %s: %s section(s), %s record(s)",
        path,
        len(export.sections),
        len(export.records),
    )
    return export


def read_property_dump(path: Path) -> dict[str, dict[str, object]]:
    text = read_text(path, "Property dump")
    try:
        payload = PropertyDumpPayload.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        raise ManifestFormatError(f"{path}: invalid JSON ({exc})") from exc
    except ValidationError as exc:
        raise ManifestFormatError(f"{path}: not a property dump ({exc.error_count()} error(s))") from exc
    log.info("Read property dump %s: %s part(s)", path, len(payload.root))
    return payload.root
