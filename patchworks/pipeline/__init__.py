"""Pipeline orchestration for fetching, categorizing and reporting upgrades."""

from .collaborators import (
    ConfirmationPrompt,
    DependencyInstaller,
    Enricher,
    ManifestWriter,
    PackageSelector,
    ReportDirectoryProvider,
    Reporter,
)
from .exceptions import PipelineCancelledError, PipelineError, PipelineStageError
from .models import PackageRunStats, PipelineOptions, PipelineRunResult, PipelineRunState
from .runner import UpgradePipeline
from .summary import render_results_table

__all__ = [
    "ConfirmationPrompt",
    "DependencyInstaller",
    "Enricher",
    "ManifestWriter",
    "PackageRunStats",
    "PackageSelector",
    "PipelineCancelledError",
    "PipelineError",
    "PipelineOptions",
    "PipelineRunResult",
    "PipelineRunState",
    "PipelineStageError",
    "ReportDirectoryProvider",
    "Reporter",
    "UpgradePipeline",
    "render_results_table",
]
