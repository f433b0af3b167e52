"""In-memory fetcher and candidate builders for tests.

``StaticFetcher`` mimics a real fetcher's interface but serves a prepared
releases document (or raises a prepared error) instead of making HTTP
requests, so resolver and pipeline tests stay deterministic.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from patchworks.domain.models import PackageCandidate, PackageMetadata, SourceOutcome
from patchworks.fetchers.base import BaseFetcher
from patchworks.fetchers.models import ReleaseRecord, ReleasesDocument

_FLAGS = {
    SourceOutcome.RELEASE_NOTES: "release_notes_compatible",
    SourceOutcome.FALLBACK_A: "fallback_a_compatible",
    SourceOutcome.FALLBACK_B: "fallback_b_compatible",
}


class StaticFetcher(BaseFetcher):
    """Fetcher that returns fixed releases for every package.

    Attributes:
        releases: (version, notes) pairs served for every package
        error: Exception raised from ``_fetch_releases`` instead
        calls: Names of the packages this fetcher was asked about
    """

    def __init__(
        self,
        source: SourceOutcome,
        releases: Sequence[Tuple[str, str]] = (),
        error: Optional[Exception] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.source = source
        self.capability_flag = _FLAGS[source]
        self.releases = list(releases)
        self.error = error
        self.calls: List[str] = []

    def _fetch_releases(self, candidate: PackageCandidate) -> ReleasesDocument:
        self.calls.append(candidate.package_name)
        if self.error is not None:
            raise self.error
        return ReleasesDocument(
            releases=[
                ReleaseRecord(version=version, published_at="2024-03-01T10:00:00Z", notes=notes)
                for version, notes in self.releases
            ]
        )


def make_candidate(
    name: str = "example-pkg",
    current: str = "1.0.0",
    latest: str = "2.0.0",
    release_notes: bool = True,
    fallback_a: bool = True,
    fallback_b: bool = True,
    repository_url: Optional[str] = "https://github.com/example/example-pkg",
    fallback_url: Optional[str] = None,
    **extra: Any,
) -> PackageCandidate:
    """Build a candidate with sensible defaults."""
    metadata: Dict[str, Any] = {
        "current": current,
        "latest": latest,
        "repository_url": repository_url,
        "fallback_url": fallback_url,
        "release_notes_compatible": release_notes,
        "fallback_a_compatible": fallback_a,
        "fallback_b_compatible": fallback_b,
    }
    return PackageCandidate(
        package_name=name, metadata=PackageMetadata(**metadata), **extra
    )
