"""Plain-text and JSON-ready renderings of a comparison report."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .contracts import STATUS_ORDER, ComparisonStatus

if TYPE_CHECKING:
    from .contracts import ComparisonReport, ComparisonResult, PartComparison

_RULE: Final[str] = "-" * 80

_STATUS_LABELS: Final[dict[ComparisonStatus, str]] = {
    ComparisonStatus.MATCH: "Match",
    ComparisonStatus.TOLERANCE: "Tolerance pass",
    ComparisonStatus.NOT_IMPL: "Not implemented",
    ComparisonStatus.INTENTIONAL: "Intentional",
    ComparisonStatus.BUG: "Known bug",
    ComparisonStatus.MISSING: "Missing",
    ComparisonStatus.FAIL: "FAIL",
}

# detailed report sections, most urgent first
_DETAIL_SECTIONS: Final[tuple[tuple[ComparisonStatus, str], ...]] = (
    (ComparisonStatus.FAIL, "FAILURES"),
    (ComparisonStatus.MISSING, "MISSING"),
    (ComparisonStatus.BUG, "KNOWN BUGS"),
    (ComparisonStatus.INTENTIONAL, "INTENTIONAL DEVIATIONS"),
    (ComparisonStatus.NOT_IMPL, "NOT IMPLEMENTED"),
    (ComparisonStatus.TOLERANCE, "TOLERANCE PASS"),
)


def _percentage(value: int, total: int) -> float:
    return value / total * 100 if total else 0.0


def format_value(value: object) -> str:
    if value is None:
        return "(none)"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def render_summary(report: ComparisonReport) -> str:
    totals = report.totals()
    total = report.total_fields
    passing = sum(1 for part in report.parts if part.passing)
    lines = [
        "=== GOLD STANDARD COMPARISON SUMMARY ===",
        f"Run ID: {report.run_id}",
        f"Compared At: {report.compared_at:%Y-%m-%d %H:%M:%S} UTC",
        "",
        f"Parts Compared: {len(report.parts)}",
        f"Total Fields: {total}",
        "",
        "Field Status Breakdown:",
    ]
    for status in STATUS_ORDER:
        label = f"{_STATUS_LABELS[status]}:"
        count = totals[status]
        lines.append(f"  {label:<18}{count:>5} ({_percentage(count, total):5.1f}%)")
    lines.extend(
        [
            "",
            f"Coverage: {report.coverage * 100:.1f}%",
            f"Parts passing: {passing}/{len(report.parts)}",
        ]
    )
    if report.unexpected_files:
        lines.append(f"Results without manifest entry: {', '.join(report.unexpected_files)}")
    lines.append(f"Overall: {'FAIL' if report.has_failures else 'PASS'}")
    return "\n".join(lines) + "\n"


def render_detailed(report: ComparisonReport) -> str:
    lines = ["=== DETAILED COMPARISON REPORT ===", ""]
    for part in sorted(report.parts, key=lambda part: part.file_name.casefold()):
        lines.extend(_render_part(part))
    return "\n".join(lines) + "\n"


def _render_part(part: PartComparison) -> list[str]:
    counts = part.counts()
    worst = part.worst_status
    breakdown = ", ".join(
        f"{counts[status]} {status.value.lower()}" for status in STATUS_ORDER if counts[status]
    )
    lines = [
        f"File: {part.file_name}",
        f"Overall Status: {worst.value if worst is not None else 'NO FIELDS'}",
        f"Fields: {len(part.results)} total" + (f" ({breakdown})" if breakdown else ""),
        "",
    ]
    for status, heading in _DETAIL_SECTIONS:
        selected = [result for result in part.results if result.status is status]
        if not selected:
            continue
        lines.append(f"  {heading}:")
        for result in selected:
            lines.extend(_render_result(result))
        lines.append("")
    lines.extend([_RULE, ""])
    return lines


def _render_result(result: ComparisonResult) -> list[str]:
    heading = f"    {result.field}"
    if result.tolerance:
        heading += f" (tolerance: {result.tolerance})"
    lines = [
        heading,
        f"      Expected: {format_value(result.expected)}",
        f"      Actual:   {format_value(result.actual)}",
    ]
    if result.note:
        lines.append(f"      Note:     {result.note}")
    return lines


def report_to_dict(report: ComparisonReport) -> dict[str, object]:
    """JSON-ready form of ``report``; read back by the coverage tracker."""

    return {
        "runId": report.run_id,
        "comparedAt": report.compared_at.isoformat(),
        "totalFields": report.total_fields,
        "totals": {status.value: count for status, count in report.totals().items()},
        "coverage": round(report.coverage, 6),
        "hasFailures": report.has_failures,
        "unexpectedFiles": list(report.unexpected_files),
        "parts": [
            {
                "fileName": part.file_name,
                "passing": part.passing,
                "fields": [_result_to_dict(result) for result in part.results],
            }
            for part in report.parts
        ],
    }


def _result_to_dict(result: ComparisonResult) -> dict[str, object]:
    data: dict[str, object] = {
        "field": result.field,
        "status": result.status.value,
        "expected": _json_value(result.expected),
        "actual": _json_value(result.actual),
    }
    if result.note:
        data["note"] = result.note
    if result.tolerance:
        data["tolerance"] = result.tolerance
    return data


def _json_value(value: object) -> object:
    if value is None or isinstance(value, str | int | float | bool):
        return value
    return str(value)
