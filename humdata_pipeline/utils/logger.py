"""
Logging infrastructure for the data quality pipeline.

Provides:
- Structured logging with timestamps
- A SUCCESS level between INFO and WARNING for validation outcomes
- File and console output
- Error tracking and per-run dataset counters for summaries
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
PHASE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | {phase} | %(filename)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S,%f"


def log_success(logger: logging.Logger, message: str, *args) -> None:
    """Log at SUCCESS level, attributing the record to the caller."""
    logger.log(SUCCESS, message, *args, stacklevel=2)


def _format_string(phase: Optional[str]) -> str:
    if phase:
        return PHASE_LOG_FORMAT.format(phase=phase)
    return LOG_FORMAT


def _format_kwargs(message: str, kwargs: dict) -> str:
    if not kwargs:
        return message
    formatted_data = " ".join(f"{k}={v}" for k, v in kwargs.items())
    return f"{message} [{formatted_data}]"


class MillisecondsFormatter(logging.Formatter):
    """Formatter that includes milliseconds and aligns log levels."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            s = ct.strftime(datefmt.replace(",%f", ""))
            return s + f",{int(record.msecs):03d}"
        elif datefmt:
            return ct.strftime(datefmt)
        else:
            return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


class PipelineLogger:
    """
    Centralized logger for pipeline scripts with structured output.

    Library modules log through `logging.getLogger(__name__)`; scripts wrap
    a PipelineLogger around their run to get a unified format and a summary
    of what was validated.
    """

    def __init__(
        self,
        name: str = "humdata_pipeline",
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        log_dir: Optional[Path] = None,
        phase: Optional[str] = None,
    ):
        """
        Initialize the pipeline logger.

        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, SUCCESS, WARNING, ERROR)
            log_file: Optional log file name
            log_dir: Directory for log files (defaults to logs/)
            phase: Optional phase label (e.g., "validate", "report")
        """
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level}")

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.phase = phase

        # Prevent propagation to root logger to avoid duplicate logs
        self.logger.propagate = False

        if self.logger.handlers:
            self.logger.handlers.clear()

        fmt_str = _format_string(phase)
        formatter = MillisecondsFormatter(fmt_str, datefmt=DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            if log_dir is None:
                log_dir = Path.cwd() / "logs"

            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / log_file

            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

            self.info(f"Logging to file: {log_path}")

        self.errors = []
        self.warnings = []

        self.datasets_passed = 0
        self.datasets_failed = 0
        self.dataset_details = []

    def debug(self, message: str, **kwargs):
        """Log debug message with optional structured data."""
        self.logger.debug(_format_kwargs(message, kwargs), stacklevel=2)

    def info(self, message: str, **kwargs):
        """Log info message with optional structured data."""
        self.logger.info(_format_kwargs(message, kwargs), stacklevel=2)

    def success(self, message: str, **kwargs):
        self.logger.log(SUCCESS, _format_kwargs(message, kwargs), stacklevel=2)

    def warning(self, message: str, **kwargs):
        """Log warning message and track for reporting."""
        message = _format_kwargs(message, kwargs)
        self.logger.warning(message, stacklevel=2)
        self.warnings.append(
            {
                "message": message,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message and track for reporting."""
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        message = _format_kwargs(message, kwargs)

        self.logger.error(message, exc_info=exception is not None, stacklevel=2)
        self.errors.append(
            {
                "message": message,
                "exception": str(exception) if exception else None,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def log_dataset_result(
        self,
        dataset_type: str,
        record_count: int,
        quality_score: float,
        meets_threshold: bool,
        source: Optional[str] = None,
    ):
        """Record and log the outcome of one dataset validation."""
        detail = {
            "dataset_type": dataset_type,
            "source": source,
            "record_count": record_count,
            "quality_score": round(quality_score, 4),
            "passed": meets_threshold,
            "timestamp": datetime.now().isoformat(),
        }
        self.dataset_details.append(detail)

        if meets_threshold:
            self.datasets_passed += 1
            self.logger.log(
                SUCCESS,
                f"Dataset passed [dataset={dataset_type} records={record_count} score={quality_score:.3f}]",
                stacklevel=2,
            )
        else:
            self.datasets_failed += 1
            message = (
                f"Dataset below threshold [dataset={dataset_type} records={record_count} score={quality_score:.3f}]"
            )
            self.logger.warning(message, stacklevel=2)
            self.warnings.append(
                {
                    "message": message,
                    "timestamp": detail["timestamp"],
                    "data": detail,
                }
            )

    def log_run_start(self, num_datasets: int):
        self.info("=" * 60)
        self.info(f"Validation run started - {num_datasets} datasets", num_datasets=num_datasets)
        self.info("=" * 60)

    def log_run_complete(self, duration_seconds: float):
        self.info("=" * 60)
        self.info(
            "Validation run completed",
            passed=self.datasets_passed,
            failed=self.datasets_failed,
            total=self.datasets_passed + self.datasets_failed,
            duration_seconds=round(duration_seconds, 2),
        )
        self.info("=" * 60)

    def get_error_summary(self) -> dict:
        """Get summary of errors and warnings for reporting."""
        return {
            "total_errors": len(self.errors),
            "total_warnings": len(self.warnings),
            "errors": self.errors,
            "warnings": self.warnings,
        }

    def generate_summary(self) -> dict:
        """
        Generate aggregate statistics for the run.

        Returns:
            dict with dataset pass/fail counts, error stats, and per-dataset details
        """
        total = self.datasets_passed + self.datasets_failed
        pass_rate = (self.datasets_passed / total * 100) if total > 0 else 0.0

        return {
            "datasets": {
                "total": total,
                "passed": self.datasets_passed,
                "failed": self.datasets_failed,
                "pass_rate_percent": round(pass_rate, 1),
                "details": self.dataset_details,
            },
            "errors": {
                "total": len(self.errors),
                "details": self.errors,
            },
            "warnings": {
                "total": len(self.warnings),
                "details": self.warnings,
            },
            "timestamp": datetime.now().isoformat(),
        }

    def clear_tracking(self):
        """Clear tracked errors, warnings, and dataset counters (useful between runs)."""
        self.errors = []
        self.warnings = []
        self.datasets_passed = 0
        self.datasets_failed = 0
        self.dataset_details = []


# ============================================================================
# Global Logger Instance
# ============================================================================

_default_logger: Optional[PipelineLogger] = None


def get_logger(
    name: str = "humdata_pipeline",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    phase: Optional[str] = None,
) -> PipelineLogger:
    """
    Get or create the default pipeline logger.

    Args:
        name: Logger name
        log_level: Logging level
        log_file: Optional log file
        phase: Optional phase label (e.g., "validate")

    Returns:
        PipelineLogger instance
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = PipelineLogger(
            name=name,
            log_level=log_level,
            log_file=log_file,
            phase=phase,
        )

    return _default_logger


def reset_logger():
    """Drop the default logger so the next get_logger() builds a fresh one."""
    global _default_logger
    _default_logger = None


# ============================================================================
# Global Logging Configuration
# ============================================================================


def configure_global_logging(log_level: str = "INFO", phase: Optional[str] = None):
    """
    Configure the root logger with the pipeline's unified format.

    Call this early in script startup so library modules that log through
    `logging.getLogger(__name__)` share the same output.

    Args:
        log_level: Logging level to apply globally
        phase: Optional phase label
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    formatter = MillisecondsFormatter(_format_string(phase), datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(sys.stdout)
    root_handler.setLevel(level)
    root_handler.setFormatter(formatter)
    root_logger.addHandler(root_handler)
