"""Factory functions to create components from configuration."""

import os
from pathlib import Path

from biasfeed.config.models import (
    BiasFeedConfig,
    DedupConfig,
    LocalStorageConfig,
    StorageConfig,
    VercelStorageConfig,
)
from biasfeed.dedup.detector import DuplicateDetector
from biasfeed.dedup.purge import Purger
from biasfeed.dedup.service import Deduplicator
from biasfeed.run_logger import RunLogger
from biasfeed.storage.base import BlobStore
from biasfeed.storage.local import LocalBlobStore
from biasfeed.storage.vercel import VercelBlobStore


def create_store(config: StorageConfig) -> BlobStore:
    """Create a blob store from config."""
    if isinstance(config, VercelStorageConfig):
        return VercelBlobStore(
            token=os.environ.get(config.token_env),
            api_url=config.api_url,
            timeout=config.timeout_seconds,
        )
    if isinstance(config, LocalStorageConfig):
        return LocalBlobStore(root=config.root)
    msg = f"Unknown storage config type: {type(config)}"
    raise ValueError(msg)


def create_deduplicator(
    config: DedupConfig,
    store: BlobStore,
    run_logger: RunLogger | None = None,
) -> Deduplicator:
    """Create a deduplicator over ``store`` from config."""
    detector = DuplicateDetector(
        threshold=config.threshold,
        length_prefilter=config.length_prefilter,
    )
    purger = Purger(store, persona_prefix=config.persona_prefix, dry_run=config.dry_run)
    return Deduplicator(
        store,
        detector,
        purger,
        global_prefix=config.global_prefix,
        max_duration_seconds=config.max_duration_seconds,
        run_logger=run_logger,
    )


def create_from_config(
    config: BiasFeedConfig,
    *,
    store: BlobStore | None = None,
    dry_run_override: bool | None = None,
    threshold_override: float | None = None,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[Deduplicator, RunLogger | None]:
    """Create a complete deduplicator from root config.

    Args:
        config: Root configuration.
        store: Use this store instead of building one from ``config.storage``.
        dry_run_override: Override the config's dedup.dry_run setting.
        threshold_override: Override the config's dedup.threshold setting.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (deduplicator, run_logger).
        run_logger is None if logging is disabled.
    """
    updates: dict[str, object] = {}
    if dry_run_override is not None:
        updates["dry_run"] = dry_run_override
    if threshold_override is not None:
        updates["threshold"] = threshold_override
    # Re-validate so overrides get the same bounds checks as the file
    dedup_config = DedupConfig.model_validate({**config.dedup.model_dump(), **updates})

    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    if store is None:
        store = create_store(config.storage)
    deduplicator = create_deduplicator(dedup_config, store, run_logger=run_logger)
    return (deduplicator, run_logger)
