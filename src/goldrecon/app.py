"""Application orchestration entry points."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from goldrecon.adapters.coverage import CoverageHistory, load_report_snapshot
from goldrecon.adapters.legacy import read_export, read_property_dump
from goldrecon.adapters.manifest import load_manifest, save_manifest
from goldrecon.adapters.results import load_results
from goldrecon.common.storage import atomic_write_text
from goldrecon.config import get_reconciliation_config
from goldrecon.domain.baseline import BaselineManifestBuilder, BuildSettings
from goldrecon.domain.coverage import DEFAULT_WINDOW, CoverageSnapshot, trend
from goldrecon.domain.errors import MissingInputError
from goldrecon.domain.legacy import collect_legacy_parts
from goldrecon.domain.reconciliation import ReconciliationEngine, report_to_dict

if TYPE_CHECKING:
    from pathlib import Path

    from goldrecon.config import ReconciliationConfig
    from goldrecon.domain.baseline import BuildResult
    from goldrecon.domain.coverage import Trend
    from goldrecon.domain.legacy import LegacyPartIndex, ParsedExport
    from goldrecon.domain.reconciliation import ComparisonReport


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParsedExportSummary:
    export: ParsedExport
    legacy: LegacyPartIndex


def parse_export_file(path: Path) -> ParsedExportSummary:
    """Parse a legacy export and fold its records into parts."""

    export = read_export(path)
    legacy = collect_legacy_parts(export)
    log.info(
        "Collected %s part(s) from %s; %s anomaly(ies)",
        len(legacy.parts),
        path,
        len(legacy.anomalies),
    )
    return ParsedExportSummary(export=export, legacy=legacy)


def list_input_files(directory: Path) -> list[str]:
    """File names in ``directory`` (not recursive), sorted by name."""

    if not directory.is_dir():
        raise MissingInputError("Input file directory", directory)
    return sorted(entry.name for entry in directory.iterdir() if entry.is_file())


def build_baseline(
    *,
    export_path: Path,
    manifest_path: Path,
    property_dump_path: Path | None = None,
    results_path: Path | None = None,
    files_dir: Path | None = None,
    merge: bool = False,
    description: str | None = None,
    config: ReconciliationConfig | None = None,
) -> BuildResult:
    """Build (or merge into) the manifest at ``manifest_path`` and save it."""

    effective_config = config or get_reconciliation_config()
    log.info(
        "Starting baseline %s: export=%s, manifest=%s, property_dump=%s, results=%s",
        "merge" if merge else "build",
        export_path,
        manifest_path,
        property_dump_path,
        results_path,
    )

    legacy = parse_export_file(export_path).legacy
    prior = load_manifest(manifest_path) if merge else None
    property_dump = read_property_dump(property_dump_path) if property_dump_path else None
    actual_results = load_results(results_path) if results_path else None
    file_names = list_input_files(files_dir) if files_dir else []

    builder = BaselineManifestBuilder(
        settings=BuildSettings(
            legacy_time_unit=effective_config.legacy_time_unit,
            excluded_keys=frozenset(effective_config.excluded_keys),
        )
    )
    result = builder.build(
        legacy,
        file_names=file_names,
        property_dump=property_dump,
        prior=prior,
        actual_results=actual_results,
        description=description,
    )
    save_manifest(manifest_path, result.manifest)
    return result


def compare_run(
    *,
    manifest_path: Path,
    results_path: Path,
    tolerance: float | None = None,
    report_path: Path | None = None,
    config: ReconciliationConfig | None = None,
) -> ComparisonReport:
    """Reconcile the results at ``results_path`` against the manifest."""

    effective_config = config or get_reconciliation_config()
    manifest = load_manifest(manifest_path)
    actual_results = load_results(results_path)
    engine = ReconciliationEngine(
        widen_factor=effective_config.widen_factor,
        relative_tolerance=tolerance,
    )
    report = engine.reconcile(manifest, actual_results)
    if report_path is not None:
        atomic_write_text(report_path, json.dumps(report_to_dict(report), indent=2) + "\n")
        log.info("Wrote comparison report %s", report_path)
    return report


def track_coverage(
    *,
    history_path: Path,
    report_path: Path | None = None,
    report: ComparisonReport | None = None,
    window: int = DEFAULT_WINDOW,
) -> Trend:
    """Optionally append one snapshot, then return the trend over ``window`` rows."""

    history = CoverageHistory(history_path)
    snapshot: CoverageSnapshot | None = None
    if report is not None:
        snapshot = CoverageSnapshot.from_report(report)
    elif report_path is not None:
        snapshot = load_report_snapshot(report_path)

    snapshots = history.append(snapshot) if snapshot is not None else history.load()
    return trend(snapshots, window, recorded=snapshot)
