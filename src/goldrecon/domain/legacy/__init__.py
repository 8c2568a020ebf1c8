"""Legacy flat export: tokenizer, parser, part keys and file name mapping."""

from __future__ import annotations

from .file_names import FileNameMapper, FileNameMapping
from .keys import PartKeyResolver, RecordKind
from .parser import parse_export, parse_lines
from .parts import LegacyPart, LegacyPartIndex, RoutingStep, collect_legacy_parts
from .records import ParsedExport, Record, Section, SectionCode
from .tokenizer import tokenize

__all__ = [
    "FileNameMapper",
    "FileNameMapping",
    "LegacyPart",
    "LegacyPartIndex",
    "ParsedExport",
    "PartKeyResolver",
    "Record",
    "RecordKind",
    "RoutingStep",
    "Section",
    "SectionCode",
    "collect_legacy_parts",
    "parse_export",
    "parse_lines",
    "tokenize",
]
