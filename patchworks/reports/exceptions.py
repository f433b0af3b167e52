"""Report generation exceptions."""


class ReportError(Exception):
    """Base exception for report generation failures."""

    pass


class ReportTemplateError(ReportError):
    """Raised when the report template cannot be rendered."""

    pass


class ReportWriteError(ReportError):
    """Raised when a report file cannot be written."""

    pass
