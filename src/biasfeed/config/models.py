"""Pydantic configuration models for biasfeed components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

# ============================================================
# Storage Configs
# ============================================================


class VercelStorageConfig(BaseModel):
    """Configuration for VercelBlobStore."""

    type: Literal["vercel"] = "vercel"
    api_url: str = "https://blob.vercel-storage.com"
    token_env: str = "BLOB_READ_WRITE_TOKEN"
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True, "extra": "forbid"}


class LocalStorageConfig(BaseModel):
    """Configuration for LocalBlobStore."""

    type: Literal["local"] = "local"
    root: str = "data/blobs"

    model_config = {"frozen": True, "extra": "forbid"}


StorageConfig = Annotated[
    VercelStorageConfig | LocalStorageConfig,
    Field(discriminator="type"),
]


# ============================================================
# Deduplication Config
# ============================================================


class DedupConfig(BaseModel):
    """Configuration for a deduplication run."""

    threshold: float = Field(default=0.8, gt=0.0, lt=1.0)
    global_prefix: str = "news/global/"
    persona_prefix: str = "news/personas/"
    dry_run: bool = False
    length_prefilter: bool = True
    max_duration_seconds: float | None = Field(default=None, gt=0)

    model_config = {"frozen": True, "extra": "forbid"}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for JSON run logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True, "extra": "forbid"}


# ============================================================
# Root Config
# ============================================================


class BiasFeedConfig(BaseModel):
    """Root configuration for biasfeed."""

    storage: StorageConfig = Field(default_factory=LocalStorageConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True, "extra": "forbid"}
