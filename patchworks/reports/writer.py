"""Markdown and JSON report generation.

Markdown is rendered with Jinja2 from the ``patchworks.reports.templates``
package with strict undefined checking, so template mistakes fail loudly
instead of producing silently incomplete reports. The JSON report is the
Pydantic dump of the augmented candidates, tagged payloads included.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from patchworks.config.models import ReportFormat
from patchworks.domain.models import EnrichmentFindings, PackageCandidate
from patchworks.logging import get_logger
from patchworks.pipeline.collaborators import Reporter
from patchworks.utils.timestamps import format_file_stamp, format_timestamp, utc_now

from .context import build_report_context
from .exceptions import ReportTemplateError, ReportWriteError

logger = get_logger(__name__, component="reports")

REPORT_FILE_PREFIX = "patchworks-report"


class ReportRenderer:
    """Renders the Markdown report template."""

    def __init__(self, template_dir: str = "templates", template_name: str = "report.md.j2"):
        self.template_name = template_name
        self.env = Environment(
            loader=PackageLoader("patchworks.reports", template_dir),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, context: Dict) -> str:
        """Render the report.

        Raises:
            ReportTemplateError: If template rendering fails
        """
        try:
            return self.env.get_template(self.template_name).render(context)
        except TemplateError as e:
            error_msg = f"Report template rendering failed: {e}"
            logger.error(error_msg, extra={"event": "report.render.failed"}, exc_info=True)
            raise ReportTemplateError(error_msg) from e


def build_json_report(
    packages: Sequence[PackageCandidate],
    generated_at: datetime,
    enrichment: Optional[EnrichmentFindings] = None,
) -> Dict:
    return {
        "generated_at": format_timestamp(generated_at),
        "packages": [candidate.model_dump(mode="json") for candidate in packages],
        "enrichment": enrichment.model_dump(mode="json") if enrichment else None,
    }


class FileReporter(Reporter):
    """Writes ``patchworks-report-<timestamp>.md`` and ``.json`` files."""

    def __init__(
        self,
        formats: Sequence[str] = (ReportFormat.MARKDOWN.value, ReportFormat.JSON.value),
        renderer: Optional[ReportRenderer] = None,
        clock=utc_now,
    ):
        self.formats = [ReportFormat(fmt) for fmt in formats]
        self.renderer = renderer or ReportRenderer()
        self._clock = clock

    def report(
        self,
        packages: List[PackageCandidate],
        report_dir: Path,
        enrichment: Optional[EnrichmentFindings] = None,
    ) -> List[Path]:
        generated_at = self._clock()
        stem = f"{REPORT_FILE_PREFIX}-{format_file_stamp(generated_at)}"
        report_dir = Path(report_dir)
        written: List[Path] = []

        if ReportFormat.MARKDOWN in self.formats:
            context = build_report_context(list(packages), generated_at, enrichment)
            content = self.renderer.render(context)
            written.append(self._write(report_dir / f"{stem}.md", content))

        if ReportFormat.JSON in self.formats:
            document = build_json_report(packages, generated_at, enrichment)
            content = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
            written.append(self._write(report_dir / f"{stem}.json", content))

        logger.info(
            f"Wrote {len(written)} report file(s) to {report_dir}",
            extra={
                "event": "report.files.written",
                "paths": [str(path) for path in written],
                "package_count": len(packages),
            },
        )
        return written

    @staticmethod
    def _write(path: Path, content: str) -> Path:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ReportWriteError(f"Could not write report {path}: {e}") from e
        return path
