"""Release-notes fetcher backed by the GitHub releases API."""

from typing import Any, List

from patchworks.domain.models import NO_NOTES_PLACEHOLDER, PackageCandidate, SourceOutcome
from patchworks.logging import get_logger
from patchworks.utils.urls import parse_github_repository

from .base import BaseFetcher
from .exceptions import FetcherHTTPError, FetcherResponseError
from .models import ReleaseRecord, ReleasesDocument

logger = get_logger(__name__, component="fetcher")

RELEASES_PER_PAGE = 100


class ReleaseNotesFetcher(BaseFetcher):
    """Primary source: published GitHub releases.

    API Documentation: https://docs.github.com/en/rest/releases/releases

    Endpoint: GET https://api.github.com/repos/{owner}/{repo}/releases

    Response (list, newest first):
    [
      {
        "tag_name": "v2.0.0",
        "name": "2.0.0",
        "body": "## Breaking changes ...",
        "draft": false,
        "prerelease": false,
        "published_at": "2024-03-01T10:00:00Z"
      }
    ]

    Only ``repository_url`` is considered; a URL that is not a GitHub
    repository yields no entries without touching the network. One page of
    releases is requested, with no retry.
    """

    source = SourceOutcome.RELEASE_NOTES
    capability_flag = "release_notes_compatible"

    def _fetch_releases(self, candidate: PackageCandidate) -> ReleasesDocument:
        repository = parse_github_repository(candidate.metadata.repository_url)
        if repository is None:
            logger.info(
                f"No GitHub repository URL for {candidate.package_name}, skipping release notes",
                extra={
                    "event": "fetch.release_notes.unsupported_url",
                    "package": candidate.package_name,
                    "repository_url": candidate.metadata.repository_url,
                },
            )
            return ReleasesDocument()

        url = f"{repository.api_url}/releases"
        try:
            payload = self._make_request(
                url, headers=self._github_headers(), params={"per_page": RELEASES_PER_PAGE}
            )
        except FetcherHTTPError as e:
            if e.is_not_found:
                logger.warning(
                    f"No releases found for {candidate.package_name} ({repository.slug})",
                    extra={
                        "event": "fetch.release_notes.not_found",
                        "package": candidate.package_name,
                        "repository": repository.slug,
                    },
                )
                return ReleasesDocument()
            raise

        return self._parse_releases(payload, url)

    @staticmethod
    def _parse_releases(payload: Any, url: str) -> ReleasesDocument:
        if not isinstance(payload, list):
            raise FetcherResponseError(
                f"Expected a list of releases from {url}, got {type(payload).__name__}"
            )

        records: List[ReleaseRecord] = []
        for release in payload:
            if not isinstance(release, dict) or release.get("draft"):
                continue
            tag = release.get("tag_name") or release.get("name")
            if not tag:
                continue
            records.append(
                ReleaseRecord(
                    version=str(tag),
                    published_at=release.get("published_at") or release.get("created_at"),
                    notes=release.get("body") or NO_NOTES_PLACEHOLDER,
                )
            )
        return ReleasesDocument(releases=records)
