"""Data models for pipeline execution tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from patchworks.domain.models import EnrichmentFindings, PackageCandidate, SourceOutcome


@dataclass
class PipelineOptions:
    """
    Switches controlling which downstream stages run.

    Attributes:
        reports_only: Skip selection, manifest writing and install
        install: Run the install stage (ignored when reports_only is set)
        ai_summary: Request enrichment even if it is disabled in config
    """

    reports_only: bool = True
    install: bool = False
    ai_summary: bool = False


@dataclass
class PipelineRunState:
    """Mutable state owned by a single pipeline run."""

    candidates: List[PackageCandidate] = field(default_factory=list)
    fetched: List[PackageCandidate] = field(default_factory=list)
    selected: List[PackageCandidate] = field(default_factory=list)
    enrichment: Optional[EnrichmentFindings] = None
    report_dir: Optional[Path] = None


@dataclass
class PackageRunStats:
    """
    Statistics for a single package within a pipeline run.

    Attributes:
        package_name: Name of the package
        source: Which source supplied the notes
        attempted_sources: Sources whose fetcher was invoked, in order
        entry_count: Number of in-range entries retained
        fetch_duration_seconds: Time spent resolving this package
        categorized: Whether the categorizer ran for this package
        skip_reason: Why categorization was skipped, if it was
        had_errors: Whether fetching or categorizing raised unexpectedly
        error_message: Optional error message from the failing stage
    """

    package_name: str
    source: SourceOutcome = SourceOutcome.UNKNOWN
    attempted_sources: List[SourceOutcome] = field(default_factory=list)
    entry_count: int = 0
    fetch_duration_seconds: float = 0.0
    categorized: bool = False
    skip_reason: Optional[str] = None
    had_errors: bool = False
    error_message: Optional[str] = None


@dataclass
class PipelineRunResult:
    """
    Aggregate results from a complete pipeline execution.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        total_duration_seconds: Total time for the entire run
        total_packages: Number of candidates processed
        total_with_notes: Packages where some source produced entries
        total_unknown: Packages where no source produced entries
        total_categorized: Packages the categorizer ran for
        total_skipped: Packages skipped for lack of usable notes
        total_errors: Packages whose fetch or categorization raised
        package_stats: Per-package execution statistics
        packages: The augmented candidates
        enrichment: Enrichment findings, if the stage succeeded
        report_paths: Files written by the reporter
        had_errors: Whether any package encountered errors
        skipped: Whether the run was skipped (lock already held)
        cancelled: Whether the operator declined at the confirmation gate
    """

    run_started_at: datetime
    run_finished_at: datetime
    total_duration_seconds: float = 0.0
    total_packages: int = 0
    total_with_notes: int = 0
    total_unknown: int = 0
    total_categorized: int = 0
    total_skipped: int = 0
    total_errors: int = 0
    package_stats: List[PackageRunStats] = field(default_factory=list)
    packages: List[PackageCandidate] = field(default_factory=list)
    enrichment: Optional[EnrichmentFindings] = None
    report_paths: List[Path] = field(default_factory=list)
    had_errors: bool = False
    skipped: bool = False
    cancelled: bool = False

    def __post_init__(self):
        """Compute aggregate statistics from package stats if not already set."""
        if self.package_stats and self.total_packages == 0:
            self.total_packages = len(self.package_stats)
            self.total_unknown = sum(
                1 for s in self.package_stats if s.source == SourceOutcome.UNKNOWN
            )
            self.total_with_notes = self.total_packages - self.total_unknown
            self.total_categorized = sum(1 for s in self.package_stats if s.categorized)
            self.total_skipped = sum(1 for s in self.package_stats if s.skip_reason)
            self.total_errors = sum(1 for s in self.package_stats if s.had_errors)
            self.had_errors = any(s.had_errors for s in self.package_stats)

        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()

    def stats_for(self, package_name: str) -> Optional[PackageRunStats]:
        for stats in self.package_stats:
            if stats.package_name == package_name:
                return stats
        return None
