"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "goldrecon"
DEFAULT_MANIFEST_FILENAME: Final[str] = "manifest-v2.json"
DEFAULT_RESULTS_FILENAME: Final[str] = "results.json"
DEFAULT_EXPORT_FILENAME: Final[str] = "Import.prn"
DEFAULT_HISTORY_FILENAME: Final[str] = "coverage-history.csv"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    manifest_override: Path | None = None
    results_override: Path | None = None
    export_override: Path | None = None
    history_override: Path | None = None

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def manifest_path(self) -> Path:
        return self.manifest_override or self.resolve_data_dir() / DEFAULT_MANIFEST_FILENAME

    def results_path(self) -> Path:
        return self.results_override or self.resolve_data_dir() / DEFAULT_RESULTS_FILENAME

    def export_path(self) -> Path:
        return self.export_override or self.resolve_data_dir() / DEFAULT_EXPORT_FILENAME

    def history_path(self) -> Path:
        return self.history_override or self.resolve_data_dir() / DEFAULT_HISTORY_FILENAME


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def _path_from_env(name: str) -> Path | None:
    value = optional_env_var(name)
    return Path(value).expanduser() if value else None


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("GOLDRECON_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(
        data_dir=data_dir,
        manifest_override=_path_from_env("GOLDRECON_MANIFEST"),
        results_override=_path_from_env("GOLDRECON_RESULTS"),
        export_override=_path_from_env("GOLDRECON_EXPORT"),
        history_override=_path_from_env("GOLDRECON_HISTORY"),
    )
