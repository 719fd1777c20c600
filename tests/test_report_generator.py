"""Tests for the cross-dataset validation report."""

import json
import logging

import pytest

from humdata_pipeline.reporting import ValidationReportBuilder, generate_validation_report
from humdata_pipeline.validators import validate_dataset

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _failing_healthcare():
    """Two records missing incident_type: score 0, two errors."""
    records = [
        {"date": "2024-01-15", "facility_name": "Al-Shifa"},
        {"date": "2024-01-16", "facility_name": "Al-Awda"},
    ]
    return validate_dataset(records, "healthcare")


def _camel_result(dataset_type: str, score: float, errors: int, completeness: float = 1.0) -> dict:
    """Result file as written by the older JavaScript fetch scripts."""
    return {
        "datasetType": dataset_type,
        "qualityScore": score,
        "completeness": completeness,
        "meetsThreshold": score >= 0.9,
        "errors": [{"field": "date", "message": "Invalid date format: x", "severity": "error", "affectedRecords": 1}]
        * errors,
        "warnings": [],
    }


def _write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


@pytest.fixture
def builder(casualty_records):
    builder = ValidationReportBuilder()
    builder.add_result("tech4palestine", validate_dataset(casualty_records, "casualties"))
    builder.add_result("goodshepherd", _failing_healthcare())
    return builder


# ─── Summary ─────────────────────────────────────────────────────────────────


class TestSummary:
    def test_totals(self, builder):
        summary = builder.build()["summary"]
        assert summary["total_datasets"] == 2
        assert summary["passed_validation"] == 1
        assert summary["failed_validation"] == 1
        assert summary["pass_rate"] == "50.0%"
        assert summary["average_quality_score"] == pytest.approx(0.5)
        assert summary["average_completeness"] == pytest.approx(0.5)
        assert summary["total_errors"] == 2
        assert summary["total_warnings"] == 0

    def test_by_source(self, builder):
        by_source = builder.build()["by_source"]
        assert by_source["goodshepherd"] == {
            "datasets": 1,
            "passed": 0,
            "failed": 1,
            "average_quality_score": 0.0,
            "total_errors": 2,
            "total_warnings": 0,
        }
        assert by_source["tech4palestine"]["passed"] == 1
        assert by_source["tech4palestine"]["average_quality_score"] == pytest.approx(1.0)

    def test_empty_report(self):
        report = ValidationReportBuilder().build()
        assert report["summary"]["total_datasets"] == 0
        assert report["summary"]["pass_rate"] == "0%"
        assert report["summary"]["average_quality_score"] == 0.0
        assert report["common_errors"] == []

    def test_camel_case_results(self):
        builder = ValidationReportBuilder()
        builder.add_result("hdx", _camel_result("conflict", 0.95, errors=1))
        summary = builder.build()["summary"]
        assert summary["passed_validation"] == 1
        assert summary["average_quality_score"] == pytest.approx(0.95)
        assert summary["total_errors"] == 1

    def test_error_count_field_preferred(self):
        builder = ValidationReportBuilder()
        builder.add_result("hdx", {"datasetType": "conflict", "qualityScore": 0.5, "errorCount": 40, "errors": []})
        assert builder.build()["summary"]["total_errors"] == 40


# ─── Quality issues ──────────────────────────────────────────────────────────


class TestQualityIssues:
    def test_failing_dataset_flagged(self, builder):
        issues = builder.build()["quality_issues"]
        assert issues["low_quality_datasets"] == 1
        assert issues["low_completeness_datasets"] == 1
        assert issues["failed_validation_datasets"] == 1
        assert issues["high_error_count_datasets"] == 0
        flagged = issues["details"]["failed_validation"][0]
        assert flagged["source"] == "goodshepherd"
        assert flagged["dataset"] == "healthcare"
        assert flagged["error_count"] == 2

    def test_sorting(self):
        builder = ValidationReportBuilder()
        builder.add_result("hdx", _camel_result("conflict", 0.8, errors=12, completeness=0.9))
        builder.add_result("hdx", _camel_result("humanitarian", 0.5, errors=15, completeness=0.6))
        details = builder.build()["quality_issues"]["details"]
        assert [d["dataset"] for d in details["low_quality"]] == ["humanitarian", "conflict"]
        assert [d["dataset"] for d in details["high_error_count"]] == ["humanitarian", "conflict"]
        assert [d["dataset"] for d in details["low_completeness"]] == ["humanitarian", "conflict"]

    def test_custom_thresholds(self):
        builder = ValidationReportBuilder(low_quality_threshold=0.5, high_error_count=20)
        builder.add_result("hdx", _camel_result("conflict", 0.8, errors=12))
        issues = builder.build()["quality_issues"]
        assert issues["low_quality_datasets"] == 0
        assert issues["high_error_count_datasets"] == 0
        assert issues["failed_validation_datasets"] == 1


# ─── Common errors and warnings ──────────────────────────────────────────────


class TestCommonIssues:
    def test_grouped_across_sources(self):
        builder = ValidationReportBuilder()
        builder.add_result("goodshepherd", _failing_healthcare())
        builder.add_result("hdx", _failing_healthcare())
        (group,) = builder.build()["common_errors"]
        assert group["field"] == "incident_type"
        assert group["message"] == "Missing required field: incident_type"
        assert group["severity"] == "error"
        assert group["affected_records"] == 4
        assert group["sources"] == ["goodshepherd", "hdx"]
        assert group["dataset_count"] == 2

    def test_dataset_level_issue_counts_once(self):
        builder = ValidationReportBuilder()
        builder.add_result("hdx", validate_dataset("not records", "conflict"))
        (group,) = builder.build()["common_errors"]
        assert group["field"] == "root"
        assert group["affected_records"] == 1

    def test_sorted_and_capped(self):
        builder = ValidationReportBuilder(top_issue_limit=2)
        errors = [
            {"field": "a", "message": "one", "affected_records": 1},
            {"field": "b", "message": "five", "affected_records": 5},
            {"field": "c", "message": "three", "affected_records": 3},
        ]
        builder.add_result("hdx", {"dataset_type": "conflict", "errors": errors})
        groups = builder.build()["common_errors"]
        assert [g["field"] for g in groups] == ["b", "c"]

    def test_warnings_grouped(self, casualty_records):
        casualty_records[0]["injured"] = 3_000_000
        builder = ValidationReportBuilder()
        builder.add_result("tech4palestine", validate_dataset(casualty_records, "casualties"))
        (group,) = builder.build()["common_warnings"]
        assert group["field"] == "injured"
        assert group["severity"] == "warning"

    def test_missing_field_and_message(self):
        builder = ValidationReportBuilder()
        builder.add_result("hdx", {"dataset_type": "conflict", "errors": [{}, {}]})
        (group,) = builder.build()["common_errors"]
        assert group["field"] is None
        assert group["affected_records"] == 2


# ─── Collection and output ───────────────────────────────────────────────────


class TestCollectFromDirectory:
    def test_collects_result_files(self, tmp_path, caplog):
        data_dir = tmp_path / "data"
        result_path = data_dir / "tech4palestine" / "casualties" / "daily_validation.json"
        _write_json(result_path, _failing_healthcare().to_dict())
        _write_json(data_dir / "hdx" / "validation.json", _camel_result("conflict", 0.95, errors=0))
        (data_dir / "hdx" / "broken_validation.json").write_text("{not json")
        _write_json(data_dir / "worldbank" / "list_validation.json", [])
        _write_json(data_dir / "validation.json", _camel_result("ignored", 0.1, errors=0))

        builder = ValidationReportBuilder()
        with caplog.at_level(logging.WARNING):
            collected = builder.collect_from_directory(data_dir)

        assert collected == 2
        assert set(builder.results) == {"tech4palestine", "hdx"}
        assert builder.results["tech4palestine"][0]["file"] == "casualties/daily_validation.json"
        assert "Skipping unreadable validation file" in caplog.text
        assert "expected a JSON object" in caplog.text

    def test_missing_directory(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert ValidationReportBuilder().collect_from_directory(tmp_path / "absent") == 0
        assert "Data directory not found" in caplog.text


class TestOutput:
    def test_generate_writes_json_and_markdown(self, tmp_path):
        data_dir = tmp_path / "data"
        _write_json(data_dir / "goodshepherd" / "healthcare_validation.json", _failing_healthcare().to_dict())
        _write_json(data_dir / "hdx" / "validation.json", _camel_result("conflict", 0.95, errors=0))
        output_dir = tmp_path / "reports"

        report = generate_validation_report(data_dir, output_dir)

        saved = json.loads((output_dir / "validation-report.json").read_text())
        assert saved["summary"] == report["summary"]
        assert saved["summary"]["total_datasets"] == 2
        assert set(saved) == {
            "generated_at",
            "summary",
            "by_source",
            "quality_issues",
            "common_errors",
            "common_warnings",
            "detailed_results",
        }
        markdown = (output_dir / "validation-report.md").read_text()
        assert markdown.startswith("# Data Validation Report")
        assert "| hdx | 1 | 1 | 0 |" in markdown
        assert "goodshepherd/healthcare: 0.0% (2 errors)" in markdown

    def test_markdown_without_issues(self, casualty_records):
        builder = ValidationReportBuilder()
        builder.add_result("tech4palestine", validate_dataset(casualty_records, "casualties"))
        markdown = builder.to_markdown()
        assert "## Datasets Below Threshold\n\nNone" in markdown
        assert "## Common Errors\n\nNone" in markdown

    def test_markdown_escapes_pipes(self):
        builder = ValidationReportBuilder()
        builder.add_result("hdx", {"dataset_type": "conflict", "errors": [{"field": "x", "message": "a|b"}]})
        assert "a\\|b" in builder.to_markdown()
