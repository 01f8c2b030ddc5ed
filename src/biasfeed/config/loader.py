"""Read biasfeed settings from YAML."""

import os
from pathlib import Path

import yaml

from biasfeed.config.models import BiasFeedConfig

CONFIG_ENV_VAR = "BIASFEED_CONFIG"


def load_config(path: Path | str) -> BiasFeedConfig:
    """Parse and validate a YAML settings file.

    An empty file yields the defaults.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the top level of the file is not a mapping.
        pydantic.ValidationError: If a setting is out of range or unknown.
    """
    path = Path(path)
    with path.open() as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(raw).__name__}")
    return BiasFeedConfig.model_validate(raw)


def get_default_config_path() -> Path:
    """``$BIASFEED_CONFIG`` if set, else the repository's configs/default.yaml."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[3] / "configs" / "default.yaml"
