"""Unit tests for the fallback resolver."""

from unittest.mock import patch

import pytest

from patchworks.domain.models import NoData, NotesData, SourceOutcome
from patchworks.fetchers import (
    AttemptStatus,
    FallbackResolver,
    FetcherHTTPError,
    apply_resolution,
    mark_unknown,
)
from patchworks.fetchers.resolver import Resolution
from tests.helpers import StaticFetcher, make_candidate


@pytest.fixture
def release_fetcher():
    return StaticFetcher(SourceOutcome.RELEASE_NOTES, [("1.5.0", "## Fixes\n- fixed a crash")])


@pytest.fixture
def changelog_fetcher():
    return StaticFetcher(SourceOutcome.FALLBACK_A, [("2.0.0", "- Removed legacy API")])


@pytest.fixture
def commit_fetcher():
    return StaticFetcher(SourceOutcome.FALLBACK_B, [("2.0.0", "### Changelog\n- fix: typo")])


@pytest.fixture
def resolver(release_fetcher, changelog_fetcher, commit_fetcher):
    return FallbackResolver([release_fetcher, changelog_fetcher, commit_fetcher])


class TestFallbackResolver:
    """Tests for FallbackResolver.resolve."""

    def test_release_notes_win_first(self, resolver, changelog_fetcher, commit_fetcher):
        resolution = resolver.resolve(make_candidate())

        assert resolution.outcome == SourceOutcome.RELEASE_NOTES
        assert [e.version for e in resolution.entries] == ["1.5.0"]
        assert resolution.attempted_sources == [SourceOutcome.RELEASE_NOTES]
        assert changelog_fetcher.calls == []
        assert commit_fetcher.calls == []

    def test_falls_through_empty_sources(self, changelog_fetcher, commit_fetcher):
        empty = StaticFetcher(SourceOutcome.RELEASE_NOTES, [])
        resolver = FallbackResolver([empty, changelog_fetcher, commit_fetcher])

        resolution = resolver.resolve(make_candidate())

        assert resolution.outcome == SourceOutcome.FALLBACK_A
        assert [a.status for a in resolution.attempts] == [
            AttemptStatus.EMPTY,
            AttemptStatus.FOUND,
        ]
        assert commit_fetcher.calls == []

    def test_out_of_range_entries_count_as_empty(self, changelog_fetcher, commit_fetcher):
        stale = StaticFetcher(SourceOutcome.RELEASE_NOTES, [("0.9.0", "old"), ("2.1.0", "new")])
        resolver = FallbackResolver([stale, changelog_fetcher, commit_fetcher])

        assert resolver.resolve(make_candidate()).outcome == SourceOutcome.FALLBACK_A

    def test_capability_flags_gate_fetchers(self, resolver, release_fetcher, changelog_fetcher):
        candidate = make_candidate(release_notes=False, fallback_a=False)

        resolution = resolver.resolve(candidate)

        assert resolution.outcome == SourceOutcome.FALLBACK_B
        assert release_fetcher.calls == []
        assert changelog_fetcher.calls == []
        assert resolution.attempted_sources == [SourceOutcome.FALLBACK_B]
        assert resolution.attempts[0].status == AttemptStatus.NOT_APPLICABLE

    def test_no_flags_means_unknown_without_calls(
        self, resolver, release_fetcher, changelog_fetcher, commit_fetcher
    ):
        candidate = make_candidate(release_notes=False, fallback_a=False, fallback_b=False)

        resolution = resolver.resolve(candidate)

        assert resolution.outcome == SourceOutcome.UNKNOWN
        assert not resolution.found
        assert resolution.attempted_sources == []
        assert release_fetcher.calls == changelog_fetcher.calls == commit_fetcher.calls == []

    def test_failing_source_falls_back(self, changelog_fetcher, commit_fetcher):
        error = FetcherHTTPError("HTTP 500", status_code=500, url="https://api.github.com")
        failing = StaticFetcher(SourceOutcome.RELEASE_NOTES, error=error)
        resolver = FallbackResolver([failing, changelog_fetcher, commit_fetcher])

        resolution = resolver.resolve(make_candidate())

        assert resolution.outcome == SourceOutcome.FALLBACK_A
        assert failing.calls == ["example-pkg"]

    def test_unexpected_error_counts_as_empty(self, changelog_fetcher, commit_fetcher):
        broken = StaticFetcher(SourceOutcome.RELEASE_NOTES, error=KeyError("body"))
        resolver = FallbackResolver([broken, changelog_fetcher, commit_fetcher])

        assert resolver.resolve(make_candidate()).outcome == SourceOutcome.FALLBACK_A

    def test_fetch_raising_is_contained(self, resolver, release_fetcher):
        with patch.object(release_fetcher, "fetch", side_effect=RuntimeError("boom")):
            resolution = resolver.resolve(make_candidate())

        assert resolution.outcome == SourceOutcome.FALLBACK_A
        assert resolution.attempts[0].status == AttemptStatus.EMPTY

    def test_everything_empty_is_unknown(self):
        resolver = FallbackResolver(
            [StaticFetcher(source) for source in (
                SourceOutcome.RELEASE_NOTES, SourceOutcome.FALLBACK_A, SourceOutcome.FALLBACK_B
            )]
        )

        resolution = resolver.resolve(make_candidate())

        assert resolution.outcome == SourceOutcome.UNKNOWN
        assert len(resolution.attempted_sources) == 3


class TestApplyResolution:
    """Tests for writing resolutions onto candidates."""

    def test_release_notes_winner(self, resolver):
        candidate = make_candidate()

        apply_resolution(candidate, resolver.resolve(candidate))

        assert candidate.source == SourceOutcome.RELEASE_NOTES
        assert isinstance(candidate.release_notes, NotesData)
        assert candidate.changelog == NoData.skipped()
        assert candidate.has_usable_notes

    def test_fallback_winner_fills_changelog_slot(self, resolver):
        candidate = make_candidate(release_notes=False)

        apply_resolution(candidate, resolver.resolve(candidate))

        assert candidate.source == SourceOutcome.FALLBACK_A
        assert candidate.release_notes == NoData.skipped()
        assert candidate.changelog.entries[0].version == "2.0.0"
        assert candidate.attempted_sources == [SourceOutcome.FALLBACK_A]

    def test_unknown(self):
        candidate = make_candidate()

        apply_resolution(candidate, Resolution(SourceOutcome.UNKNOWN))

        assert candidate.release_notes == NoData.unknown()
        assert candidate.changelog == NoData.unknown()
        assert not candidate.has_usable_notes


class TestMarkUnknown:
    def test_records_error(self):
        candidate = make_candidate()

        mark_unknown(candidate, error="KeyError: 'body'")

        assert candidate.source == SourceOutcome.UNKNOWN
        assert candidate.fetch_error == "KeyError: 'body'"
        assert isinstance(candidate.changelog, NoData)
