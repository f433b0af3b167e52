"""Pipeline orchestration for fetching, categorizing and reporting upgrades."""

import threading
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence
from uuid import uuid4

from patchworks.categorization.engine import NoteCategorizer
from patchworks.config.models import AppConfig
from patchworks.domain.models import (
    CategorizedNotes,
    EnrichmentFindings,
    PackageCandidate,
    SourceOutcome,
)
from patchworks.fetchers.resolver import FallbackResolver, apply_resolution, mark_unknown
from patchworks.logging import get_logger
from patchworks.logging.context import log_context
from patchworks.utils.timestamps import utc_now

from .collaborators import (
    ConfirmationPrompt,
    DependencyInstaller,
    Enricher,
    ManifestWriter,
    PackageSelector,
    ReportDirectoryProvider,
    Reporter,
)
from .exceptions import PipelineCancelledError, PipelineStageError
from .models import PackageRunStats, PipelineOptions, PipelineRunResult, PipelineRunState
from .summary import render_results_table

logger = get_logger(__name__, component="pipeline")

CONFIRMATION_QUESTION = "Proceed to parse and categorize logs?"
SKIP_REASON_NO_NOTES = "Both release notes and changelog are unavailable, skipping parsing."
MISSING_CREDENTIALS_MESSAGE = (
    "AI analysis requires API keys. Set ANTHROPIC_API_KEY, OPENAI_API_KEY or "
    "GEMINI_API_KEY, or add anthropic_api_key, openai_api_key or gemini_api_key "
    "to the 'ai' section of patchworks.yaml"
)
BILLING_TIPS = (
    "Check your API billing and quota at:",
    "  - Anthropic: https://console.anthropic.com/",
    "  - OpenAI: https://platform.openai.com/account/billing",
)


def is_quota_error(message: str) -> bool:
    return "quota" in message or "429" in message


class UpgradePipeline:
    """
    Orchestrates one review of outdated dependencies.

    Stages run in a fixed order: prepare, fetch, confirm, categorize,
    enrich, select, write, install, report. Fetch and categorize failures
    are isolated per package. Cancellation at the confirmation gate and
    any error from prepare, select, write, install or report end the run.
    """

    def __init__(
        self,
        app_config: AppConfig,
        resolver: FallbackResolver,
        categorizer: NoteCategorizer,
        directory_provider: ReportDirectoryProvider,
        confirmation: ConfirmationPrompt,
        reporter: Reporter,
        enricher: Optional[Enricher] = None,
        selector: Optional[PackageSelector] = None,
        writer: Optional[ManifestWriter] = None,
        installer: Optional[DependencyInstaller] = None,
        options: Optional[PipelineOptions] = None,
    ):
        """
        Initialize the upgrade pipeline.

        Args:
            app_config: Application configuration
            resolver: Fallback resolver over the release-data fetchers
            categorizer: Categorization engine
            directory_provider: Creates the report directory
            confirmation: Asks the operator whether to continue after fetch
            reporter: Writes the final reports
            enricher: Optional external summarizer
            selector: Chooses packages to update (required unless reports_only)
            writer: Writes the manifest (required unless reports_only)
            installer: Installs dependencies (required when install is set)
            options: Stage switches
        """
        self.app_config = app_config
        self.resolver = resolver
        self.categorizer = categorizer
        self.directory_provider = directory_provider
        self.confirmation = confirmation
        self.reporter = reporter
        self.enricher = enricher
        self.selector = selector
        self.writer = writer
        self.installer = installer
        self.options = options or PipelineOptions()
        self._lock = threading.Lock()

    @property
    def installs(self) -> bool:
        return not self.options.reports_only and self.options.install

    def run(self, candidates: Sequence[PackageCandidate]) -> PipelineRunResult:
        """
        Execute every stage for ``candidates``.

        Candidates are augmented in place and returned on the result.

        Returns:
            PipelineRunResult with aggregate metrics and per-package stats

        Raises:
            PipelineCancelledError: If the operator declines at the confirmation
                gate; its ``result`` is marked cancelled
            PipelineStageError: If a required collaborator is missing
            Exception: Errors from prepare, select, write, install and report
                propagate unchanged
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Pipeline run skipped: previous run still in progress",
                    extra={"event": "pipeline.run.skipped", "reason": "lock_held"},
                )
            return PipelineRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id):
                state = PipelineRunState(candidates=list(candidates))

                logger.info(
                    "Pipeline run started",
                    extra={
                        "event": "pipeline.run.started",
                        "package_count": len(state.candidates),
                        "reports_only": self.options.reports_only,
                        "install": self.installs,
                    },
                )

                self._check_collaborators()

                state.report_dir = self._run_fatal_stage("prepare", self.directory_provider.prepare)
                package_stats = self._fetch_all(state)
                self._confirm(state, package_stats, run_started_at)
                self._categorize_all(state, package_stats)
                state.enrichment = self._enrich(state)

                if not self.options.reports_only:
                    state.selected = list(
                        self._run_fatal_stage("select", self.selector.select, state.candidates)
                    )
                    self._run_fatal_stage("write", self.writer.write, state.selected)
                    if self.installs:
                        self._run_fatal_stage("install", self.installer.install, state.selected)

                report_paths = self._report(state)

                result = PipelineRunResult(
                    run_started_at=run_started_at,
                    run_finished_at=utc_now(),
                    package_stats=package_stats,
                    packages=state.candidates,
                    enrichment=state.enrichment,
                    report_paths=report_paths,
                )

                logger.info(
                    "Pipeline run completed",
                    extra={
                        "event": "pipeline.run.completed",
                        "duration_ms": int(result.total_duration_seconds * 1000),
                        "total_packages": result.total_packages,
                        "total_with_notes": result.total_with_notes,
                        "total_unknown": result.total_unknown,
                        "total_categorized": result.total_categorized,
                        "total_skipped": result.total_skipped,
                        "total_errors": result.total_errors,
                        "had_errors": result.had_errors,
                        "enriched": result.enrichment is not None,
                        "report_count": len(report_paths),
                    },
                )

                return result

        finally:
            self._lock.release()

    def _check_collaborators(self) -> None:
        if self.options.reports_only:
            return
        if self.selector is None:
            raise PipelineStageError(
                "select", "a PackageSelector is required unless reports_only is set"
            )
        if self.writer is None:
            raise PipelineStageError(
                "write", "a ManifestWriter is required unless reports_only is set"
            )
        if self.options.install and self.installer is None:
            raise PipelineStageError(
                "install", "a DependencyInstaller is required when install is set"
            )

    def _run_fatal_stage(self, stage: str, func, *args):
        """Run a collaborator call, logging and re-raising any failure unchanged."""
        logger.debug(f"Stage started: {stage}", extra={"event": f"pipeline.{stage}.started"})
        try:
            return func(*args)
        except Exception as e:
            logger.error(
                f"Stage '{stage}' failed: {e}",
                extra={
                    "event": f"pipeline.{stage}.failed",
                    "stage": stage,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

    def _fetch_all(self, state: PipelineRunState) -> List[PackageRunStats]:
        if not state.candidates:
            logger.info(
                "No packages to fetch",
                extra={"event": "pipeline.fetch.skipped", "reason": "no_packages"},
            )
            return []

        package_stats = []
        for candidate in state.candidates:
            package_stats.append(self._fetch_package(candidate))
            if candidate.source != SourceOutcome.UNKNOWN:
                state.fetched.append(candidate)

        logger.info(
            f"Fetched release data for {len(state.fetched)} of {len(state.candidates)} packages",
            extra={
                "event": "pipeline.fetch.completed",
                "fetched_count": len(state.fetched),
                "unknown_count": len(state.candidates) - len(state.fetched),
            },
        )
        return package_stats

    def _fetch_package(self, candidate: PackageCandidate) -> PackageRunStats:
        """
        Resolve release data for one package.

        Any unexpected error is contained here so the remaining packages
        still run; the package is marked unknown and the error recorded.
        """
        fetch_start = time.time()
        stats = PackageRunStats(package_name=candidate.package_name)

        with log_context(package=candidate.package_name):
            logger.debug(
                f"Fetching release data for {candidate.package_name}",
                extra={
                    "event": "package.fetch.started",
                    "current": candidate.metadata.current,
                    "latest": candidate.metadata.latest,
                },
            )

            try:
                resolution = self.resolver.resolve(candidate)
                apply_resolution(candidate, resolution)
                stats.entry_count = len(resolution.entries)

                if not resolution.found:
                    logger.warning(
                        f"No release data found for {candidate.package_name}; notes marked unknown",
                        extra={
                            "event": "package.fetch.unknown",
                            "attempted_sources": [s.value for s in resolution.attempted_sources],
                        },
                    )

            except Exception as e:
                mark_unknown(candidate, error=str(e))
                stats.had_errors = True
                stats.error_message = str(e)
                logger.error(
                    f"Unexpected error fetching {candidate.package_name}: {e}; "
                    "notes marked unknown",
                    extra={
                        "event": "package.fetch.error",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )

            finally:
                stats.source = candidate.source
                stats.attempted_sources = list(candidate.attempted_sources)
                stats.fetch_duration_seconds = time.time() - fetch_start
                logger.debug(
                    f"Fetch completed: {candidate.package_name}",
                    extra={
                        "event": "package.fetch.completed",
                        "source": SourceOutcome(candidate.source).value,
                        "entry_count": stats.entry_count,
                        "duration_seconds": stats.fetch_duration_seconds,
                    },
                )

        return stats

    def _confirm(
        self,
        state: PipelineRunState,
        package_stats: List[PackageRunStats],
        run_started_at: datetime,
    ) -> None:
        """Show the fetch summary and stop the run unless the operator agrees."""
        summary = render_results_table(state.candidates)
        if self.confirmation.confirm(summary, CONFIRMATION_QUESTION):
            logger.debug("Operator confirmed", extra={"event": "pipeline.confirm.accepted"})
            return

        logger.warning(
            PipelineCancelledError.DEFAULT_MESSAGE,
            extra={"event": "pipeline.confirm.declined"},
        )
        raise PipelineCancelledError(
            result=PipelineRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                package_stats=package_stats,
                packages=state.candidates,
                cancelled=True,
            )
        )

    def _categorize_all(
        self, state: PipelineRunState, package_stats: List[PackageRunStats]
    ) -> None:
        stats_by_name = {stats.package_name: stats for stats in package_stats}

        for candidate in state.candidates:
            stats = stats_by_name.get(candidate.package_name)
            with log_context(package=candidate.package_name):
                if not candidate.has_usable_notes:
                    candidate.skip_reason = SKIP_REASON_NO_NOTES
                    candidate.categorized_notes = CategorizedNotes()
                    candidate.important_terms = []
                    if stats is not None:
                        stats.skip_reason = SKIP_REASON_NO_NOTES
                    logger.info(
                        f"{candidate.package_name}: {SKIP_REASON_NO_NOTES}",
                        extra={"event": "package.categorize.skipped"},
                    )
                    continue

                try:
                    categorized = self.categorizer.categorize(
                        candidate.winning_payload, package_name=candidate.package_name
                    )
                except Exception as e:
                    candidate.categorized_notes = CategorizedNotes()
                    candidate.important_terms = []
                    if stats is not None:
                        stats.had_errors = True
                        stats.error_message = str(e)
                    logger.error(
                        f"Unexpected error categorizing {candidate.package_name}: {e}; "
                        "categories left empty",
                        extra={
                            "event": "package.categorize.error",
                            "error_type": type(e).__name__,
                            "error": str(e),
                        },
                        exc_info=True,
                    )
                    continue

                candidate.categorized_notes = categorized
                candidate.important_terms = list(categorized.important_terms)
                if stats is not None:
                    stats.categorized = True

                logger.debug(
                    f"Categorized notes for {candidate.package_name}",
                    extra={
                        "event": "package.categorize.completed",
                        "counts": {
                            key: len(fragments)
                            for key, fragments in categorized.categories.items()
                        },
                    },
                )

    def _enrich(self, state: PipelineRunState) -> Optional[EnrichmentFindings]:
        """
        Run the optional enrichment stage.

        Never raises: missing credentials, a missing enricher or a failing
        provider all degrade to no enrichment.
        """
        ai_config = self.app_config.ai
        if not (ai_config.enabled or self.options.ai_summary):
            return None

        if not state.candidates:
            logger.info(
                "No packages to analyze",
                extra={"event": "pipeline.enrich.skipped", "reason": "no_packages"},
            )
            return None

        if not ai_config.has_credentials():
            logger.warning(
                MISSING_CREDENTIALS_MESSAGE,
                extra={"event": "pipeline.enrich.skipped", "reason": "no_credentials"},
            )
            return None

        if self.enricher is None:
            logger.info(
                "AI analysis requested but no enricher is registered",
                extra={"event": "pipeline.enrich.skipped", "reason": "no_enricher"},
            )
            return None

        try:
            findings = self.enricher.analyze(state.candidates, ai_config)
        except Exception as e:
            message = str(e)
            logger.warning(
                f"AI analysis failed: {message}",
                extra={
                    "event": "pipeline.enrich.failed",
                    "error_type": type(e).__name__,
                },
            )
            if is_quota_error(message):
                for tip in BILLING_TIPS:
                    logger.warning(tip, extra={"event": "pipeline.enrich.billing_tip"})
            return None

        logger.info(
            f"Generated AI summary using {findings.provider}",
            extra={
                "event": "pipeline.enrich.completed",
                "provider": findings.provider,
                "has_breaking_changes": findings.has_breaking_changes,
                "has_security_issues": findings.has_security_issues,
            },
        )
        return findings

    def _report(self, state: PipelineRunState) -> List[Path]:
        packages = state.candidates if self.options.reports_only else state.selected
        paths = self._run_fatal_stage(
            "report", self.reporter.report, packages, state.report_dir, state.enrichment
        )
        return list(paths or [])
