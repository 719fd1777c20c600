"""
Validation report generator for cross-dataset monitoring.

Aggregates many dataset validation results into one report including:
- Pass/fail counts and averaged quality dimensions
- Per-source statistics
- Quality issues (low quality, high error count, low completeness, failed)
- The most common errors and warnings across all datasets

Results can be added in memory (DatasetValidation objects) or collected from
`validation.json` / `*_validation.json` files under the data directory. Files
written by the older JavaScript fetch scripts use camelCase keys; both
spellings are read.
"""

import json
import logging
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from ..constants import HIGH_ERROR_COUNT, LOW_QUALITY_THRESHOLD, QUALITY_THRESHOLDS, TOP_ISSUE_LIMIT
from ..utils.logger import log_success
from ..validators.quality_scorer import DatasetValidation

logger = logging.getLogger(__name__)

# snake_case key -> camelCase key used by older result files
_CAMEL_KEYS = {
    "dataset_type": "datasetType",
    "quality_score": "qualityScore",
    "meets_threshold": "meetsThreshold",
    "error_count": "errorCount",
    "warning_count": "warningCount",
    "affected_records": "affectedRecords",
    "record_count": "recordCount",
}


def _get(result: dict, key: str, default: Any = None) -> Any:
    if key in result:
        return result[key]
    camel = _CAMEL_KEYS.get(key)
    if camel and camel in result:
        return result[camel]
    return default


def _issue_count(result: dict, count_key: str, list_key: str) -> int:
    count = _get(result, count_key)
    if count:
        return count
    issues = result.get(list_key)
    return len(issues) if isinstance(issues, list) else 0


def _dataset_label(result: dict) -> str:
    return _get(result, "dataset_type") or result.get("file") or "unknown"


class ValidationReportBuilder:
    """
    Build aggregate validation reports.
    """

    def __init__(
        self,
        low_quality_threshold: float = LOW_QUALITY_THRESHOLD,
        high_error_count: int = HIGH_ERROR_COUNT,
        top_issue_limit: int = TOP_ISSUE_LIMIT,
        completeness_threshold: float = QUALITY_THRESHOLDS["completeness"],
    ):
        """
        Initialize report builder.

        Args:
            low_quality_threshold: Quality score below which a dataset is flagged
            high_error_count: Error count above which a dataset is flagged
            top_issue_limit: How many common errors/warnings to keep
            completeness_threshold: Completeness below which a dataset is flagged
        """
        self.low_quality_threshold = low_quality_threshold
        self.high_error_count = high_error_count
        self.top_issue_limit = top_issue_limit
        self.completeness_threshold = completeness_threshold

        # source -> list of result dicts, in insertion order
        self.results: dict[str, list[dict[str, Any]]] = defaultdict(list)

    def add_result(
        self,
        source: str,
        result: Union[DatasetValidation, dict[str, Any]],
        file: Optional[str] = None,
    ):
        """
        Record one dataset validation result.

        Args:
            source: Data source the dataset came from (e.g., "hdx")
            result: DatasetValidation or its dict form
            file: Optional file label, used when the result has no dataset type
        """
        entry = result.to_dict() if isinstance(result, DatasetValidation) else dict(result)
        if file is not None:
            entry["file"] = file
        self.results[source].append(entry)

    def collect_from_directory(self, data_dir: Union[str, Path]) -> int:
        """
        Scan a data directory for validation result files.

        The first path component below `data_dir` names the source. Files that
        cannot be read as JSON objects are skipped with a warning.

        Returns:
            Number of results collected
        """
        root = Path(data_dir)
        if not root.is_dir():
            logger.warning(f"Data directory not found: {root}")
            return 0

        logger.info(f"Collecting validation results from {root}")
        collected = 0
        candidates = sorted(set(root.rglob("validation.json")) | set(root.rglob("*_validation.json")))
        for path in candidates:
            relative = path.relative_to(root)
            if len(relative.parts) < 2:
                # Report files at the top level are outputs, not inputs
                continue
            source = relative.parts[0]
            try:
                with open(path) as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable validation file {path}: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Skipping validation file {path}: expected a JSON object")
                continue
            self.add_result(source, data, file=str(Path(*relative.parts[1:])))
            collected += 1

        log_success(logger, f"Collected validation results from {collected} files")
        return collected

    # ─── Aggregation ───────────────────────────────────────────────────────

    def _all_results(self):
        for source, results in self.results.items():
            for result in results:
                yield source, result

    def generate_summary(self) -> dict[str, Any]:
        """
        Generate summary statistics across all datasets.

        Returns:
            Dictionary with overall and per-source stats
        """
        total = passed = total_errors = total_warnings = 0
        sums = {"quality_score": 0.0, "completeness": 0.0, "consistency": 0.0, "accuracy": 0.0}
        by_source: dict[str, dict[str, Any]] = {}

        for source, results in self.results.items():
            source_stats = {
                "datasets": len(results),
                "passed": 0,
                "failed": 0,
                "average_quality_score": 0.0,
                "total_errors": 0,
                "total_warnings": 0,
            }
            source_quality = 0.0

            for result in results:
                total += 1
                if _get(result, "meets_threshold"):
                    passed += 1
                    source_stats["passed"] += 1
                else:
                    source_stats["failed"] += 1

                for key in sums:
                    sums[key] += _get(result, key) or 0
                source_quality += _get(result, "quality_score") or 0

                errors = _issue_count(result, "error_count", "errors")
                warnings = _issue_count(result, "warning_count", "warnings")
                total_errors += errors
                total_warnings += warnings
                source_stats["total_errors"] += errors
                source_stats["total_warnings"] += warnings

            if results:
                source_stats["average_quality_score"] = source_quality / len(results)
            by_source[source] = source_stats

        return {
            "total_datasets": total,
            "passed_validation": passed,
            "failed_validation": total - passed,
            "pass_rate": f"{passed / total * 100:.1f}%" if total > 0 else "0%",
            "average_quality_score": sums["quality_score"] / total if total else 0.0,
            "average_completeness": sums["completeness"] / total if total else 0.0,
            "average_consistency": sums["consistency"] / total if total else 0.0,
            "average_accuracy": sums["accuracy"] / total if total else 0.0,
            "total_errors": total_errors,
            "total_warnings": total_warnings,
            "by_source": by_source,
        }

    def group_issues(self, list_key: str) -> list[dict[str, Any]]:
        """
        Group errors or warnings by "field: message" across datasets.

        Args:
            list_key: "errors" or "warnings"

        Returns:
            Groups sorted by affected records (descending), capped at top_issue_limit
        """
        fallback = "unknown error" if list_key == "errors" else "unknown warning"
        groups: dict[str, dict[str, Any]] = {}

        for source, result in self._all_results():
            issues = result.get(list_key)
            if not isinstance(issues, list):
                continue
            for issue in issues:
                if not isinstance(issue, dict):
                    continue
                field_name = issue.get("field") or "unknown"
                message = issue.get("message") or fallback
                key = f"{field_name}: {message}"
                group = groups.setdefault(
                    key,
                    {
                        "field": issue.get("field"),
                        "message": issue.get("message"),
                        "severity": issue.get("severity"),
                        "affected_records": 0,
                        "sources": [],
                        "datasets": [],
                    },
                )
                # Dataset-level issues report 0 affected records; they still count once
                group["affected_records"] += _get(issue, "affected_records") or 1
                if source not in group["sources"]:
                    group["sources"].append(source)
                dataset = f"{source}/{_dataset_label(result)}"
                if dataset not in group["datasets"]:
                    group["datasets"].append(dataset)

        for group in groups.values():
            group["dataset_count"] = len(group["datasets"])
        ranked = sorted(groups.values(), key=lambda g: g["affected_records"], reverse=True)
        return ranked[: self.top_issue_limit]

    def identify_quality_issues(self) -> dict[str, list[dict[str, Any]]]:
        issues: dict[str, list[dict[str, Any]]] = {
            "low_quality": [],
            "high_error_count": [],
            "low_completeness": [],
            "failed_validation": [],
        }

        for source, result in self._all_results():
            quality = _get(result, "quality_score") or 0
            completeness = result.get("completeness") or 0
            dataset = {
                "source": source,
                "dataset": _dataset_label(result),
                "quality_score": quality,
                "completeness": completeness,
                "error_count": _issue_count(result, "error_count", "errors"),
                "warning_count": _issue_count(result, "warning_count", "warnings"),
            }

            if quality < self.low_quality_threshold:
                issues["low_quality"].append(dataset)
            if dataset["error_count"] > self.high_error_count:
                issues["high_error_count"].append(dataset)
            if completeness < self.completeness_threshold:
                issues["low_completeness"].append(dataset)
            if not _get(result, "meets_threshold"):
                issues["failed_validation"].append(dataset)

        issues["low_quality"].sort(key=lambda d: d["quality_score"])
        issues["high_error_count"].sort(key=lambda d: d["error_count"], reverse=True)
        issues["low_completeness"].sort(key=lambda d: d["completeness"])
        return issues

    def build(self) -> dict[str, Any]:
        """
        Build the full report.

        Returns:
            JSON-ready report dictionary
        """
        summary = self.generate_summary()
        by_source = summary.pop("by_source")
        quality_issues = self.identify_quality_issues()

        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "summary": summary,
            "by_source": by_source,
            "quality_issues": {
                "low_quality_datasets": len(quality_issues["low_quality"]),
                "high_error_count_datasets": len(quality_issues["high_error_count"]),
                "low_completeness_datasets": len(quality_issues["low_completeness"]),
                "failed_validation_datasets": len(quality_issues["failed_validation"]),
                "details": quality_issues,
            },
            "common_errors": self.group_issues("errors"),
            "common_warnings": self.group_issues("warnings"),
            "detailed_results": {source: list(results) for source, results in self.results.items()},
        }

    # ─── Output ────────────────────────────────────────────────────────────

    def to_markdown(self, report: Optional[dict[str, Any]] = None) -> str:
        """
        Render a report as Markdown.

        Args:
            report: Output of build() (built fresh when omitted)
        """
        report = report or self.build()
        summary = report["summary"]

        lines = [
            "# Data Validation Report",
            "",
            f"Generated: {report['generated_at']}",
            "",
            "## Summary",
            "",
            f"- Total datasets: {summary['total_datasets']}",
            f"- Passed: {summary['passed_validation']} ({summary['pass_rate']})",
            f"- Failed: {summary['failed_validation']}",
            f"- Average quality score: {summary['average_quality_score'] * 100:.1f}%",
            f"- Average completeness: {summary['average_completeness'] * 100:.1f}%",
            f"- Average consistency: {summary['average_consistency'] * 100:.1f}%",
            f"- Average accuracy: {summary['average_accuracy'] * 100:.1f}%",
            f"- Total errors: {summary['total_errors']}",
            f"- Total warnings: {summary['total_warnings']}",
            "",
            "## By Source",
            "",
            "| Source | Datasets | Passed | Failed | Avg Quality | Errors | Warnings |",
            "|---|---|---|---|---|---|---|",
        ]

        for source, stats in report["by_source"].items():
            if stats["datasets"] == 0:
                continue
            lines.append(
                f"| {source} | {stats['datasets']} | {stats['passed']} | {stats['failed']} | "
                f"{stats['average_quality_score'] * 100:.1f}% | {stats['total_errors']} | {stats['total_warnings']} |"
            )

        failed = report["quality_issues"]["details"]["failed_validation"]
        lines.extend(["", "## Datasets Below Threshold", ""])
        if failed:
            for dataset in failed:
                lines.append(
                    f"- {dataset['source']}/{dataset['dataset']}: "
                    f"{dataset['quality_score'] * 100:.1f}% ({dataset['error_count']} errors)"
                )
        else:
            lines.append("None")

        for title, key in (("Common Errors", "common_errors"), ("Common Warnings", "common_warnings")):
            lines.extend(["", f"## {title}", ""])
            if not report[key]:
                lines.append("None")
                continue
            lines.extend(["| Field | Message | Affected Records | Sources |", "|---|---|---|---|"])
            for group in report[key]:
                message = str(group["message"]).replace("|", "\\|")
                lines.append(
                    f"| {group['field']} | {message} | {group['affected_records']} | {', '.join(group['sources'])} |"
                )

        return "\n".join(lines) + "\n"

    def save_json_report(self, filepath: Union[str, Path], report: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Save the report as a JSON file.

        Returns:
            The report that was written
        """
        report = report or self.build()
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(report, f, indent=2)
        log_success(logger, f"Validation report saved to {path}")
        return report

    def save_markdown_report(self, filepath: Union[str, Path], report: Optional[dict[str, Any]] = None):
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.to_markdown(report))
        logger.info(f"Markdown report saved to {path}")


def generate_validation_report(
    data_dir: Union[str, Path],
    output_dir: Union[str, Path],
    builder: Optional[ValidationReportBuilder] = None,
) -> dict[str, Any]:
    """
    Collect result files under data_dir and write
    validation-report.json / validation-report.md to output_dir.
    """
    builder = builder or ValidationReportBuilder()
    builder.collect_from_directory(data_dir)
    report = builder.build()

    output = Path(output_dir)
    builder.save_json_report(output / "validation-report.json", report)
    builder.save_markdown_report(output / "validation-report.md", report)

    summary = report["summary"]
    logger.info(
        f"Report summary: datasets={summary['total_datasets']}, passed={summary['passed_validation']} "
        f"({summary['pass_rate']}), errors={summary['total_errors']}, warnings={summary['total_warnings']}"
    )
    if report["quality_issues"]["failed_validation_datasets"]:
        logger.warning(f"Datasets with quality issues: {report['quality_issues']['failed_validation_datasets']}")
    return report
