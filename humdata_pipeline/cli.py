"""
Pipeline CLI - Command-line interface for validating and reporting on datasets.

Usage:
    # Validate dataset files (type inferred from metadata or path)
    python -m humdata_pipeline validate public/data/tech4palestine/casualties/daily.json

    # Force a dataset type and write <stem>_validation.json beside each file
    python -m humdata_pipeline validate data/*.json --type healthcare --write

    # Normalize a raw source payload into canonical records
    python -m humdata_pipeline normalize raw/killed-in-gaza.json --type casualties --source tech4palestine

    # Aggregate validation files into validation-report.json / .md
    python -m humdata_pipeline report public/data --output-dir public/data/validation
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import get_data_dir, get_log_level, get_report_dir, load_pipeline_config
from .exceptions import HumdataPipelineError
from .normalizers import create_normalization_service
from .reporting import ValidationReportBuilder, generate_validation_report
from .utils.logger import PipelineLogger, configure_global_logging
from .validators import DatasetValidation, QualityScorer, validate_dataset

load_dotenv()

console = Console()


# ─── File helpers ──────────────────────────────────────────────────────────


def load_dataset_file(path: Path) -> tuple[Any, dict[str, Any]]:
    """
    Read a dataset file.

    Accepts `{"metadata": {...}, "data": [...]}` or a bare list.

    Returns:
        (records, metadata)
    """
    with open(path) as f:
        payload = json.load(f)

    if isinstance(payload, dict) and "data" in payload:
        metadata = payload.get("metadata")
        return payload["data"], metadata if isinstance(metadata, dict) else {}
    return payload, {}


def infer_dataset_type(path: Path, metadata: dict[str, Any], explicit: Optional[str] = None) -> str:
    """--type wins, then metadata.dataset, then the parent directory and file name."""
    if explicit:
        return explicit
    declared = metadata.get("dataset") or metadata.get("dataset_type")
    if isinstance(declared, str) and declared.strip():
        return declared.strip()
    return f"{path.parent.name}/{path.stem}".lower()


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def display_validation_results(results: list[tuple[Path, DatasetValidation]], verbose: bool = False) -> None:
    """Display validation results in a summary panel and table."""
    console.print()

    passed = sum(1 for _, r in results if r.meets_threshold)
    summary = (
        f"Datasets validated: {len(results)}\n"
        f"Passed: {passed}\n"
        f"Below threshold: {len(results) - passed}\n"
        f"Errors: {sum(len(r.errors) for _, r in results)}\n"
        f"Warnings: {sum(len(r.warnings) for _, r in results)}"
    )
    console.print(Panel(summary, title="Validation Summary", border_style="blue"))

    if results:
        table = Table(title="Dataset Results")
        table.add_column("File", style="cyan")
        table.add_column("Schema")
        table.add_column("Records", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Completeness", justify="right")
        table.add_column("Status", justify="center")
        table.add_column("Errors", justify="right")
        table.add_column("Warnings", justify="right")

        for path, result in results:
            status = "[green]PASS[/green]" if result.meets_threshold else "[red]FAIL[/red]"
            table.add_row(
                path.name,
                result.schema,
                str(result.record_count),
                _pct(result.quality_score),
                _pct(result.completeness),
                status,
                str(len(result.errors)),
                str(len(result.warnings)),
            )

        console.print(table)

    if verbose:
        for path, result in results:
            issues = result.errors + result.warnings
            if not issues:
                continue
            console.print()
            console.print(f"[bold]{path}[/bold]")
            for issue in issues:
                colour = "yellow" if issue.severity.value == "warning" else "red"
                where = f"record {issue.record_index}" if issue.record_index is not None else "dataset"
                console.print(f"  [{colour}]{issue.severity.value}[/{colour}] {issue.field} ({where}): {issue.message}")


# ─── Commands ──────────────────────────────────────────────────────────────


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate one or more dataset files."""
    config = load_pipeline_config()
    scorer = QualityScorer(config.thresholds)
    run_logger = PipelineLogger(name="humdata_pipeline.cli", log_level=get_log_level(), phase="validate")

    paths = [Path(p) for p in args.paths]
    run_logger.log_run_start(len(paths))
    start = time.perf_counter()

    results: list[tuple[Path, DatasetValidation]] = []
    unreadable = 0
    for path in paths:
        try:
            records, metadata = load_dataset_file(path)
        except (OSError, json.JSONDecodeError) as e:
            run_logger.error(f"Could not read dataset file {path}", exception=e)
            unreadable += 1
            continue

        dataset_type = infer_dataset_type(path, metadata, args.type)
        result = validate_dataset(records, dataset_type, scorer=scorer)
        run_logger.log_dataset_result(
            dataset_type,
            result.record_count,
            result.quality_score,
            result.meets_threshold,
            source=metadata.get("source"),
        )
        results.append((path, result))

        if args.write:
            output_path = path.with_name(f"{path.stem}_validation.json")
            with open(output_path, "w") as f:
                json.dump(result.to_dict(), f, indent=2)
            run_logger.debug(f"Wrote {output_path}")

    run_logger.log_run_complete(time.perf_counter() - start)
    display_validation_results(results, verbose=args.verbose)

    if unreadable or any(not r.meets_threshold for _, r in results):
        return 1
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a raw source payload and write canonical records."""
    path = Path(args.path)
    try:
        with open(path) as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: Could not read {path}: {e}")
        return 1

    overrides = {"strict_mode": True} if args.strict else {}
    service = create_normalization_service(**overrides)
    result = service.normalize(payload, args.type, args.source)

    output_path = Path(args.output) if args.output else path.with_name(f"{path.stem}_normalized.json")
    document = {
        "metadata": {**result.metadata, "dataset": result.metadata["schema"]},
        "data": result.records,
        "warnings": result.warnings,
        "errors": result.errors,
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(document, f, indent=2)

    summary = (
        f"Source: {result.metadata['source']}\n"
        f"Dataset: {result.metadata['dataset_type']} (schema: {result.metadata['schema']})\n"
        f"Format: {result.metadata['original_format']} -> {result.metadata['normalized_format']}\n"
        f"Records: {result.metadata['record_count']}\n"
        f"Warnings: {len(result.warnings)}\n"
        f"Errors: {len(result.errors)}\n"
        f"Output: {output_path}"
    )
    border = "blue" if result.ok else "red"
    console.print(Panel(summary, title="Normalization Summary", border_style=border))

    if args.verbose:
        for message in result.errors:
            console.print(f"  [red]error[/red] {message}")
        for message in result.warnings:
            console.print(f"  [yellow]warning[/yellow] {message}")

    return 0 if result.ok else 1


def cmd_report(args: argparse.Namespace) -> int:
    """Aggregate validation files into a cross-dataset report."""
    config = load_pipeline_config()
    data_dir = Path(args.data_dir) if args.data_dir else get_data_dir()
    output_dir = Path(args.output_dir) if args.output_dir else get_report_dir()

    builder = ValidationReportBuilder(
        low_quality_threshold=config.low_quality_threshold,
        high_error_count=config.high_error_count,
        top_issue_limit=config.top_issue_limit,
        completeness_threshold=config.thresholds.completeness,
    )
    report = generate_validation_report(data_dir, output_dir, builder=builder)

    summary = report["summary"]
    text = (
        f"Datasets: {summary['total_datasets']}\n"
        f"Passed: {summary['passed_validation']} ({summary['pass_rate']})\n"
        f"Failed: {summary['failed_validation']}\n"
        f"Average quality: {_pct(summary['average_quality_score'])}\n"
        f"Errors: {summary['total_errors']}\n"
        f"Warnings: {summary['total_warnings']}\n"
        f"Output: {output_dir}"
    )
    console.print(Panel(text, title="Validation Report", border_style="blue"))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Humanitarian dataset validation and normalization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate dataset JSON files")
    validate_parser.add_argument("paths", nargs="+", help="Dataset files to validate")
    validate_parser.add_argument("--type", help="Dataset type (default: from metadata or path)")
    validate_parser.add_argument("--write", action="store_true", help="Write <stem>_validation.json beside each file")
    validate_parser.add_argument("-v", "--verbose", action="store_true", help="Show every issue")

    # normalize command
    normalize_parser = subparsers.add_parser("normalize", help="Normalize a raw source payload")
    normalize_parser.add_argument("path", help="Raw payload JSON file")
    normalize_parser.add_argument("--type", required=True, help="Dataset type (e.g., casualties)")
    normalize_parser.add_argument("--source", required=True, help="Data source (e.g., tech4palestine)")
    normalize_parser.add_argument("--output", help="Output file (default: <stem>_normalized.json)")
    normalize_parser.add_argument("--strict", action="store_true", help="Treat coercion warnings as errors")
    normalize_parser.add_argument("-v", "--verbose", action="store_true", help="Show every message")

    # report command
    report_parser = subparsers.add_parser("report", help="Aggregate validation results into a report")
    report_parser.add_argument("data_dir", nargs="?", help="Data directory (default: HUMDATA_DATA_DIR)")
    report_parser.add_argument("--output-dir", help="Report directory (default: HUMDATA_REPORT_DIR)")

    args = parser.parse_args(argv)

    configure_global_logging(get_log_level())

    try:
        if args.command == "validate":
            return cmd_validate(args)
        elif args.command == "normalize":
            return cmd_normalize(args)
        elif args.command == "report":
            return cmd_report(args)
        else:
            parser.print_help()
            return 1
    except HumdataPipelineError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
