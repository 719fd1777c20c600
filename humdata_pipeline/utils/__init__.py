"""Shared utilities: logging setup."""

from .logger import (
    SUCCESS,
    PipelineLogger,
    configure_global_logging,
    get_logger,
    log_success,
)

__all__ = [
    "SUCCESS",
    "PipelineLogger",
    "configure_global_logging",
    "get_logger",
    "log_success",
]
