"""Load and save the manifest JSON file."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from goldrecon.common.storage import atomic_write_text, read_text
from goldrecon.domain.errors import ManifestFormatError

from .schema import ManifestPayload
from .translator import manifest_from_payload, manifest_to_document

if TYPE_CHECKING:
    from pathlib import Path

    from goldrecon.domain.baseline.manifest import Manifest

log = logging.getLogger(__name__)


def load_manifest(path: Path) -> Manifest:
    text = read_text(path, "Manifest")
    try:
        payload = ManifestPayload.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        raise ManifestFormatError(f"{path}: invalid JSON ({exc})") from exc
    except ValidationError as exc:
        raise ManifestFormatError(f"{path}: invalid manifest\n{exc}") from exc
    manifest = manifest_from_payload(payload)
    log.info("Loaded manifest %s (version %s, %s file(s))", path, manifest.version, len(manifest.files))
    return manifest


def save_manifest(path: Path, manifest: Manifest) -> None:
    text = json.dumps(manifest_to_document(manifest), indent=2, ensure_ascii=False) + "\n"
    atomic_write_text(path, text)
    log.info("Saved manifest %s (%s file(s))", path, len(manifest.files))
