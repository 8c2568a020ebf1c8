from __future__ import annotations

from .storage import atomic_write_text, read_text

__all__ = [
    "atomic_write_text",
    "read_text",
]
