"""File helpers shared by the adapters."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from goldrecon.domain.errors import MissingInputError

log = logging.getLogger(__name__)


def read_text(path: Path, kind: str) -> str:
    """Return the text of ``path`` or raise ``MissingInputError`` naming ``kind``."""

    if not path.is_file():
        raise MissingInputError(kind, path)
    return path.read_text(encoding="utf-8-sig")


def atomic_write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` without ever leaving a half-written file.

    The text goes to a temporary sibling first, is flushed to disk and then
    swapped in with ``os.replace``.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    log.debug("Wrote %s", path)
