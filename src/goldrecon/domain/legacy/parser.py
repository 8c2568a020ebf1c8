"""Parser for the legacy fixed-format ERP export (``Import.prn``).

Grammar, one line at a time (lines are stripped first):

* ``DECL(<code>) [ADD] <field> ...`` opens a section and declares its fields
* ``END`` switches the open section into data mode
* every non-blank line after ``END`` is a data row for that section
* a blank line closes the section; rows before the next ``DECL`` are ignored

The parser is pure: the same text always yields the same ``ParsedExport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from goldrecon.domain.errors import ParseError

from .records import ParsedExport, Record, Section
from .tokenizer import UnterminatedQuoteError, tokenize

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

_HEADER_PREFIX = "DECL("
_END_SENTINEL = "END"
_ADD_MARKER = "ADD"


@dataclass(slots=True)
class _OpenSection:
    code: str
    field_names: tuple[str, ...]
    line_number: int
    in_data: bool = False
    records: list[Record] = field(default_factory=list["Record"])

    def close(self) -> Section:
        return Section(
            code=self.code,
            field_names=self.field_names,
            line_number=self.line_number,
            records=tuple(self.records),
        )


def parse_export(text: str) -> ParsedExport:
    """Parse the full text of an export file."""

    return parse_lines(text.splitlines())


def parse_lines(lines: Iterable[str]) -> ParsedExport:
    """Parse export lines into sections, or raise ``ParseError``."""

    sections: list[Section] = []
    current: _OpenSection | None = None
    ignored_rows = 0

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()

        if not line:
            if current is not None:
                sections.append(current.close())
                current = None
            continue

        if line.startswith(_HEADER_PREFIX):
            if current is not None:
                sections.append(current.close())
            current = _parse_header(line, line_number)
            continue

        if line == _END_SENTINEL:
            if current is None:
                log.debug("Ignoring END without a section header at line %s", line_number)
            else:
                current.in_data = True
            continue

        if current is None or not current.in_data:
            ignored_rows += 1
            continue

        values = _tokenize_row(line, line_number)
        if not values:
            continue
        current.records.append(
            Record(
                section=current.code,
                field_names=current.field_names,
                values=tuple(values[: len(current.field_names)]),
                line_number=line_number,
            )
        )

    if current is not None:
        sections.append(current.close())

    if ignored_rows:
        log.debug("Ignored %s line(s) outside a section data block", ignored_rows)

    return ParsedExport(sections=tuple(sections))


def _parse_header(line: str, line_number: int) -> _OpenSection:
    closing = line.find(")", len(_HEADER_PREFIX))
    if closing < 0:
        raise ParseError("section header is missing ')'", line_number=line_number)
    code = line[len(_HEADER_PREFIX) : closing].strip()
    if not code:
        raise ParseError("section header has an empty section code", line_number=line_number)

    tokens = _tokenize_header(line[closing + 1 :], line_number)
    if tokens and tokens[0].upper() == _ADD_MARKER:
        tokens = tokens[1:]
    if not tokens:
        log.debug("Section %s at line %s declares no fields", code, line_number)
    return _OpenSection(code=code, field_names=tuple(tokens), line_number=line_number)


def _tokenize_header(line: str, line_number: int) -> list[str]:
    try:
        return tokenize(line)
    except UnterminatedQuoteError as exc:
        raise ParseError(str(exc), line_number=line_number) from exc


def _tokenize_row(line: str, line_number: int) -> list[str]:
    try:
        return tokenize(line)
    except UnterminatedQuoteError as exc:
        log.warning("Line %s: %s; keeping the text after it as the last value", line_number, exc)
        return tokenize(line, strict=False)
