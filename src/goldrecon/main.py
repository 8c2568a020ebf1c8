#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from goldrecon.app import build_baseline, compare_run, parse_export_file, track_coverage
from goldrecon.config import (
    ConfigurationError,
    configure_logging,
    get_reconciliation_config,
    get_storage_config,
)
from goldrecon.domain.coverage import DEFAULT_WINDOW, render_trend
from goldrecon.domain.errors import MissingInputError
from goldrecon.domain.reconciliation import render_detailed, render_summary

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from goldrecon.app import ParsedExportSummary
    from goldrecon.domain.baseline import BuildResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="goldrecon",
        description="Reconcile pipeline results against the gold standard baseline",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse = subparsers.add_parser("parse", help="Parse a legacy export and summarise it")
    parse.add_argument("export", type=Path, help="Legacy export file (Import.prn)")
    parse.add_argument("--json", action="store_true", help="Print the summary as JSON")

    build = subparsers.add_parser(
        "build-baseline",
        help="Build the gold standard manifest from legacy data",
    )
    build.add_argument("--export", type=Path, help="Legacy export file (defaults to config)")
    build.add_argument("--manifest", type=Path, help="Manifest to write (defaults to config)")
    build.add_argument("--property-dump", type=Path, help="JSON property dump from the legacy system")
    build.add_argument(
        "--results",
        type=Path,
        help="Actual results used to bootstrap NOT_IMPLEMENTED deviations",
    )
    build.add_argument("--files", type=Path, help="Directory holding the pipeline's input files")
    build.add_argument(
        "--merge",
        action="store_true",
        help="Merge into the existing manifest instead of starting a new one",
    )
    build.add_argument("--description", type=str, help="Manifest description")

    compare = subparsers.add_parser("compare", help="Compare a run against the manifest")
    compare.add_argument(
        "--tolerance",
        type=float,
        help="Relative tolerance for every numeric field (overrides the manifest)",
    )
    compare.add_argument("--manifest", type=Path, help="Manifest file (defaults to config)")
    compare.add_argument("--results", type=Path, help="Results file (defaults to config)")
    compare.add_argument("--report", type=Path, help="Write the JSON report to this path")
    compare.add_argument("--detailed", action="store_true", help="Print the per-part report")

    coverage = subparsers.add_parser("track-coverage", help="Record and show coverage history")
    coverage.add_argument("--report", type=Path, help="JSON report to append to the history")
    coverage.add_argument("--history", type=Path, help="History file (defaults to config)")
    coverage.add_argument(
        "--window",
        type=int,
        default=DEFAULT_WINDOW,
        help="Number of most recent runs to show (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _validate_args(args: argparse.Namespace) -> None:
    if args.command == "compare" and args.tolerance is not None and args.tolerance < 0:
        raise ValueError("Tolerance must be non-negative")
    if args.command == "track-coverage" and args.window < 1:
        raise ValueError("Window must be at least 1")


def _print_parse_summary(summary: ParsedExportSummary, *, as_json: bool) -> None:
    export, legacy = summary.export, summary.legacy
    if as_json:
        document = {
            "sections": export.record_counts(),
            "parts": {
                key: {
                    "description": part.description,
                    "optiMaterial": part.opti_material,
                    "routing": [
                        {
                            "workCenter": step.work_center,
                            "op": step.op_number,
                            "setup": step.setup,
                            "run": step.run,
                        }
                        for step in part.routing
                    ],
                    "notes": {str(op): list(lines) for op, lines in part.routing_notes},
                }
                for key, part in legacy.parts.items()
            },
            "anomalies": [
                {"line": anomaly.line_number, "section": anomaly.section, "reason": anomaly.reason}
                for anomaly in legacy.anomalies
            ],
        }
        print(json.dumps(document, indent=2))
        return

    print("Records per section:")
    for code, count in export.record_counts().items():
        print(f"  {code:<6}{count:>6}")
    print(f"Parts: {len(legacy.parts)}")
    for key, part in legacy.parts.items():
        centers = ", ".join(step.work_center for step in part.routing) or "-"
        print(f"  {key:<24}{part.description or '':<40}routing: {centers}")
    if legacy.anomalies:
        print(f"Anomalies: {len(legacy.anomalies)}")
        for anomaly in legacy.anomalies:
            print(f"  line {anomaly.line_number} ({anomaly.section}): {anomaly.reason}")


def _print_build_result(result: BuildResult) -> None:
    mapping = result.mapping
    print(f"Files updated: {len(result.updated_files)}")
    print(f"Keys mapped: {len(mapping.mapped)}, excluded: {len(mapping.excluded)}")
    if mapping.unmapped:
        print(f"Unmapped keys: {', '.join(mapping.unmapped)}")
    for collision in mapping.ambiguous:
        print(f"Review: {collision}")
    if result.bootstrapped:
        print(f"NOT_IMPLEMENTED deviations added: {len(result.bootstrapped)}")
    if result.ignored_properties:
        print(f"Ignored properties: {', '.join(result.ignored_properties)}")
    if result.unresolved_dump_keys:
        print(f"Property dump entries without a file: {', '.join(result.unresolved_dump_keys)}")


def _run(args: argparse.Namespace) -> int:
    storage = get_storage_config()

    if args.command == "parse":
        _print_parse_summary(parse_export_file(args.export), as_json=args.json)
        return 0

    if args.command == "build-baseline":
        result = build_baseline(
            export_path=args.export or storage.export_path(),
            manifest_path=args.manifest or storage.manifest_path(),
            property_dump_path=args.property_dump,
            results_path=args.results,
            files_dir=args.files,
            merge=args.merge,
            description=args.description,
            config=get_reconciliation_config(),
        )
        _print_build_result(result)
        return 0

    if args.command == "compare":
        report = compare_run(
            manifest_path=args.manifest or storage.manifest_path(),
            results_path=args.results or storage.results_path(),
            tolerance=args.tolerance,
            report_path=args.report,
            config=get_reconciliation_config(),
        )
        print(render_summary(report), end="")
        if args.detailed:
            print()
            print(render_detailed(report), end="")
        return 1 if report.has_failures else 0

    if args.command == "track-coverage":
        result = track_coverage(
            history_path=args.history or storage.history_path(),
            report_path=args.report,
            window=args.window,
        )
        print(render_trend(result), end="")
        return 1 if result.recorded is not None and result.recorded.has_failures else 0

    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else None)
    try:
        _validate_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        exit_code = _run(parsed_args)
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    except MissingInputError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
