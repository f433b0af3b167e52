"""Report writers and console collaborators."""

from .console import ConsoleConfirmation, ReportDirectory
from .context import build_package_context, build_report_context
from .exceptions import ReportError, ReportTemplateError, ReportWriteError
from .writer import FileReporter, ReportRenderer, build_json_report

__all__ = [
    "ConsoleConfirmation",
    "FileReporter",
    "ReportDirectory",
    "ReportError",
    "ReportRenderer",
    "ReportTemplateError",
    "ReportWriteError",
    "build_json_report",
    "build_package_context",
    "build_report_context",
]
