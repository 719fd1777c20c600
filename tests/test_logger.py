"""Tests for pipeline logging infrastructure."""

import logging
import re

import pytest

from humdata_pipeline.utils.logger import (
    SUCCESS,
    MillisecondsFormatter,
    PipelineLogger,
    configure_global_logging,
    get_logger,
    log_success,
    reset_logger,
)

# ─── Helpers ──────────────────────────────────────────────────────────────────

LOGGER_NAME = "humdata_pipeline.cli"


def _logger(**kwargs) -> PipelineLogger:
    return PipelineLogger(name=LOGGER_NAME, **kwargs)


class TestSuccessLevel:
    def test_level_registered(self):
        assert SUCCESS == 25
        assert logging.getLevelName(SUCCESS) == "SUCCESS"

    def test_log_success(self, caplog):
        with caplog.at_level(logging.INFO):
            log_success(logging.getLogger("humdata_pipeline.test"), "All good")
        (record,) = caplog.records
        assert record.levelname == "SUCCESS"
        assert record.getMessage() == "All good"
        assert record.filename == "test_logger.py"


class TestPipelineLogger:
    def test_structured_suffix(self, capsys):
        _logger().info("Run started", datasets=3, source="hdx")
        assert "Run started [datasets=3 source=hdx]" in capsys.readouterr().out

    def test_phase_in_format(self, capsys):
        _logger(phase="validate").info("hello")
        assert "| validate |" in capsys.readouterr().out

    def test_level_filters(self, capsys):
        log = _logger(log_level="WARNING")
        log.info("hidden")
        log.warning("shown")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            _logger(log_level="LOUD")

    def test_warnings_and_errors_tracked(self):
        log = _logger()
        log.warning("Low score", dataset="conflict")
        log.error("Could not read file", exception=OSError("boom"))
        summary = log.get_error_summary()
        assert summary["total_warnings"] == 1
        assert summary["warnings"][0]["data"] == {"dataset": "conflict"}
        assert summary["total_errors"] == 1
        assert summary["errors"][0]["exception"] == "boom"
        assert "Exception: boom" in summary["errors"][0]["message"]

    def test_dataset_results(self):
        log = _logger()
        log.log_dataset_result("casualties", 10, 0.98, True, source="tech4palestine")
        log.log_dataset_result("healthcare", 4, 0.2, False)
        summary = log.generate_summary()
        assert summary["datasets"]["total"] == 2
        assert summary["datasets"]["passed"] == 1
        assert summary["datasets"]["failed"] == 1
        assert summary["datasets"]["pass_rate_percent"] == 50.0
        assert summary["datasets"]["details"][0]["source"] == "tech4palestine"
        # A failed dataset is also a tracked warning
        assert summary["warnings"]["total"] == 1

    def test_clear_tracking(self):
        log = _logger()
        log.log_dataset_result("healthcare", 4, 0.2, False)
        log.error("bad")
        log.clear_tracking()
        summary = log.generate_summary()
        assert summary["datasets"]["total"] == 0
        assert summary["errors"]["total"] == 0
        assert summary["warnings"]["total"] == 0

    def test_file_output(self, tmp_path):
        log = _logger(log_file="run.log", log_dir=tmp_path / "logs")
        log.info("written to file")
        content = (tmp_path / "logs" / "run.log").read_text()
        assert "Logging to file" in content
        assert "written to file" in content

    def test_does_not_propagate(self):
        log = _logger()
        assert log.logger.propagate is False
        assert len(log.logger.handlers) == 1


class TestGlobalLogger:
    def test_singleton(self):
        assert get_logger() is get_logger()

    def test_reset(self):
        first = get_logger()
        reset_logger()
        assert get_logger() is not first

    def test_configure_global_logging(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_global_logging("DEBUG", phase="report")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, MillisecondsFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_configure_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            configure_global_logging("LOUD")


def test_milliseconds_formatter():
    formatter = MillisecondsFormatter("%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S,%f")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3} msg$", formatter.format(record))
