"""
Central configuration for data paths and pipeline settings.

Paths are resolved from environment variables so the same scripts run
against the dashboard's public data tree or a scratch directory:
  - HUMDATA_DATA_DIR (default: ./public/data)
  - HUMDATA_REPORT_DIR (default: <data dir>/validation)
  - HUMDATA_LOG_LEVEL (default: INFO)
  - HUMDATA_CONFIG (default: config/pipeline.yaml in the source checkout)

Settings (quality thresholds, normalization switches, report limits) live in
the YAML config file. A missing file falls back to built-in defaults. The file
is not installed with the package, so outside an editable install point
HUMDATA_CONFIG at a copy of it.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .constants import HIGH_ERROR_COUNT, LOW_QUALITY_THRESHOLD, QUALITY_THRESHOLDS, TOP_ISSUE_LIMIT
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# PATHS
# =============================================================================


def get_data_dir() -> Path:
    """
    Get the dataset directory.

    Uses HUMDATA_DATA_DIR environment variable if set, otherwise defaults
    to ./public/data relative to the working directory.
    """
    env_path = os.environ.get("HUMDATA_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.cwd() / "public" / "data"


def get_report_dir() -> Path:
    """Get the directory validation reports are written to."""
    env_path = os.environ.get("HUMDATA_REPORT_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return get_data_dir() / "validation"


def get_log_level() -> str:
    return os.environ.get("HUMDATA_LOG_LEVEL", "INFO").upper()


def get_config_path() -> Path:
    env_path = os.environ.get("HUMDATA_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path(__file__).parent.parent / "config" / "pipeline.yaml"


# =============================================================================
# SETTINGS MODELS
# =============================================================================


class QualityThresholds(BaseModel):
    """Minimum acceptable quality scores. Only `overall` decides pass/fail."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    completeness: float = Field(default=QUALITY_THRESHOLDS["completeness"], ge=0.0, le=1.0)
    consistency: float = Field(default=QUALITY_THRESHOLDS["consistency"], ge=0.0, le=1.0)
    accuracy: float = Field(default=QUALITY_THRESHOLDS["accuracy"], ge=0.0, le=1.0)
    overall: float = Field(default=QUALITY_THRESHOLDS["overall"], ge=0.0, le=1.0)


class NormalizationConfig(BaseModel):
    """Switches for the normalization service."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    strict_mode: bool = False  # coercion warnings become errors
    validate_coordinates: bool = True
    standardize_names: bool = True
    fill_missing_values: bool = True


class PipelineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    thresholds: QualityThresholds = Field(default_factory=QualityThresholds)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    low_quality_threshold: float = Field(default=LOW_QUALITY_THRESHOLD, ge=0.0, le=1.0)
    high_error_count: int = Field(default=HIGH_ERROR_COUNT, ge=0)
    top_issue_limit: int = Field(default=TOP_ISSUE_LIMIT, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_sections(cls, data):
        # An empty YAML section (`thresholds:`) parses as None
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# =============================================================================
# LOADING
# =============================================================================

# Module-level cache keyed by resolved path
_config_cache: dict[Path, PipelineConfig] = {}


def load_pipeline_config(path: Optional[Union[str, Path]] = None) -> PipelineConfig:
    """
    Load and cache pipeline settings from YAML.

    Args:
        path: Config file path (defaults to get_config_path())

    Returns:
        PipelineConfig; defaults when the file does not exist

    Raises:
        ConfigError: If the file exists but is not a valid config document
    """
    config_path = Path(path) if path is not None else get_config_path()
    if config_path in _config_cache:
        return _config_cache[config_path]

    if not config_path.exists():
        logger.warning(f"Pipeline config not found at {config_path}, using defaults")
        config = PipelineConfig()
        _config_cache[config_path] = config
        return config

    with open(config_path) as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping at the top of {config_path}, got {type(raw).__name__}")

    try:
        config = PipelineConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid pipeline config in {config_path}: {e}") from e

    _config_cache[config_path] = config
    logger.debug(f"Loaded pipeline config from {config_path}")
    return config


def clear_config_cache():
    """Clear the config cache (useful for testing)."""
    _config_cache.clear()
