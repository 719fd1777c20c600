"""Cross-dataset validation reporting."""

from .report_generator import ValidationReportBuilder, generate_validation_report

__all__ = ["ValidationReportBuilder", "generate_validation_report"]
