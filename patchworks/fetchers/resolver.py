"""Fallback resolution across the release-data fetchers.

The chain is an ordered list of capability-gated fetchers. Each one is
tried in turn and reports a tagged attempt; the first attempt that finds
entries wins and nothing after it runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from patchworks.domain.models import (
    NoData,
    NormalizedEntry,
    NotesData,
    PackageCandidate,
    SourceOutcome,
)
from patchworks.logging import get_logger

from .base import BaseFetcher

logger = get_logger(__name__, component="resolver")


class AttemptStatus(str, Enum):
    FOUND = "found"
    EMPTY = "empty"
    NOT_APPLICABLE = "not_applicable"


@dataclass
class FetchAttempt:
    """Outcome of offering one package to one fetcher."""

    source: SourceOutcome
    status: AttemptStatus
    entries: List[NormalizedEntry] = field(default_factory=list)

    @property
    def invoked(self) -> bool:
        return self.status != AttemptStatus.NOT_APPLICABLE


@dataclass
class Resolution:
    """Result of running the fallback chain for one package."""

    outcome: SourceOutcome
    entries: List[NormalizedEntry] = field(default_factory=list)
    attempts: List[FetchAttempt] = field(default_factory=list)

    @property
    def attempted_sources(self) -> List[SourceOutcome]:
        return [attempt.source for attempt in self.attempts if attempt.invoked]

    @property
    def found(self) -> bool:
        return self.outcome != SourceOutcome.UNKNOWN


class FallbackResolver:
    """Runs fetchers in priority order until one returns entries.

    The resolver keeps no per-package state, so the same instance can be
    reused for every candidate in a run.
    """

    def __init__(self, fetchers: Sequence[BaseFetcher]):
        self.fetchers = list(fetchers)

    def resolve(self, candidate: PackageCandidate) -> Resolution:
        attempts: List[FetchAttempt] = []

        for fetcher in self.fetchers:
            if not fetcher.is_applicable(candidate):
                attempts.append(FetchAttempt(fetcher.source, AttemptStatus.NOT_APPLICABLE))
                continue

            entries = self._run_fetcher(fetcher, candidate)
            if entries:
                attempts.append(FetchAttempt(fetcher.source, AttemptStatus.FOUND, entries))
                logger.info(
                    f"{candidate.package_name}: {len(entries)} entries from {fetcher.name}",
                    extra={
                        "event": "resolve.source.found",
                        "package": candidate.package_name,
                        "source": fetcher.name,
                        "entry_count": len(entries),
                    },
                )
                return Resolution(fetcher.source, entries, attempts)

            attempts.append(FetchAttempt(fetcher.source, AttemptStatus.EMPTY))
            logger.info(
                f"{candidate.package_name}: no entries from {fetcher.name}, trying next source",
                extra={
                    "event": "resolve.source.empty",
                    "package": candidate.package_name,
                    "source": fetcher.name,
                },
            )

        return Resolution(SourceOutcome.UNKNOWN, [], attempts)

    @staticmethod
    def _run_fetcher(fetcher: BaseFetcher, candidate: PackageCandidate) -> List[NormalizedEntry]:
        # fetch() already traps its own failures; this covers broken subclasses
        try:
            return list(fetcher.fetch(candidate) or [])
        except Exception as e:
            logger.error(
                f"{fetcher.name} fetcher raised for {candidate.package_name}: {e}",
                extra={
                    "event": "resolve.source.error",
                    "package": candidate.package_name,
                    "source": fetcher.name,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return []


def apply_resolution(candidate: PackageCandidate, resolution: Resolution) -> None:
    """Write a resolution onto the candidate's payload slots.

    The winning source fills its slot and the other slot is marked as
    skipped. Without a winner both slots are marked unknown.
    """
    candidate.source = resolution.outcome
    candidate.attempted_sources = resolution.attempted_sources

    if resolution.outcome == SourceOutcome.RELEASE_NOTES:
        candidate.release_notes = NotesData(entries=resolution.entries)
        candidate.changelog = NoData.skipped()
    elif resolution.outcome in (SourceOutcome.FALLBACK_A, SourceOutcome.FALLBACK_B):
        candidate.release_notes = NoData.skipped()
        candidate.changelog = NotesData(entries=resolution.entries)
    else:
        mark_unknown(candidate)


def mark_unknown(candidate: PackageCandidate, error: Optional[str] = None) -> None:
    """Record that no source produced notes for ``candidate``."""
    candidate.source = SourceOutcome.UNKNOWN
    candidate.release_notes = NoData.unknown()
    candidate.changelog = NoData.unknown()
    if error is not None:
        candidate.fetch_error = error
