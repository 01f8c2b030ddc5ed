"""Configuration module for biasfeed."""

from biasfeed.config.factory import create_deduplicator, create_from_config, create_store
from biasfeed.config.loader import get_default_config_path, load_config
from biasfeed.config.models import (
    BiasFeedConfig,
    DedupConfig,
    LocalStorageConfig,
    LoggingConfig,
    StorageConfig,
    VercelStorageConfig,
)

__all__ = [
    "BiasFeedConfig",
    "DedupConfig",
    "LocalStorageConfig",
    "LoggingConfig",
    "StorageConfig",
    "VercelStorageConfig",
    "create_deduplicator",
    "create_from_config",
    "create_store",
    "get_default_config_path",
    "load_config",
]
