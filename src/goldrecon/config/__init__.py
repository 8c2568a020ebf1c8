"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .logging import configure_logging
from .reconciliation import ReconciliationConfig, get_reconciliation_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "ReconciliationConfig",
    "StorageConfig",
    "configure_logging",
    "get_reconciliation_config",
    "get_storage_config",
]
