from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from goldrecon.config import (
    ConfigurationError,
    configure_logging,
    get_reconciliation_config,
    get_storage_config,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


def test_storage_paths_default_to_data_dir(tmp_path: Path) -> None:
    config = get_storage_config()

    data_dir = (tmp_path / "data").resolve()
    assert config.manifest_path() == data_dir / "manifest-v2.json"
    assert config.results_path() == data_dir / "results.json"
    assert config.export_path() == data_dir / "Import.prn"
    assert config.history_path() == data_dir / "coverage-history.csv"


def test_storage_path_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GOLDRECON_MANIFEST", str(tmp_path / "elsewhere.json"))
    monkeypatch.setenv("GOLDRECON_HISTORY", "   ")

    config = get_storage_config()

    assert config.manifest_path() == tmp_path / "elsewhere.json"
    assert config.history_path() == (tmp_path / "data").resolve() / "coverage-history.csv"


@pytest.mark.skipif(os.name == "nt", reason="XDG data dir is used on POSIX only")
def test_default_data_dir_follows_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("GOLDRECON_DATA_DIR")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))

    config = get_storage_config()

    assert config.resolve_data_dir() == (tmp_path / "xdg" / "goldrecon").resolve()


def test_reconciliation_defaults() -> None:
    config = get_reconciliation_config()

    assert config.widen_factor == 2.0
    assert config.legacy_time_unit == "minutes"
    assert config.excluded_keys == ()


def test_reconciliation_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOLDRECON_WIDEN_FACTOR", "3")
    monkeypatch.setenv("GOLDRECON_LEGACY_TIME_UNIT", "Hours")
    monkeypatch.setenv("GOLDRECON_EXCLUDED_KEYS", "ASSY1, ,FIXTURE-7")

    config = get_reconciliation_config()

    assert config.widen_factor == 3.0
    assert config.legacy_time_unit == "hours"
    assert config.excluded_keys == ("ASSY1", "FIXTURE-7")


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("GOLDRECON_WIDEN_FACTOR", "wide"),
        ("GOLDRECON_WIDEN_FACTOR", "0.5"),
        ("GOLDRECON_LEGACY_TIME_UNIT", "seconds"),
    ],
)
def test_invalid_reconciliation_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        get_reconciliation_config()


@pytest.fixture
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_logging_reads_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOLDRECON_LOG_LEVEL", "warning")

    configure_logging(force=True)

    assert logging.getLogger().level == logging.WARNING


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_logging_explicit_level_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOLDRECON_LOG_LEVEL", "ERROR")

    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
