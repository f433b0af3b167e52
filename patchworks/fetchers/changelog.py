"""Changelog fetcher (fallback A): reads a changelog file from the repository."""

import re
from typing import List, Optional, Tuple

from patchworks.domain.models import PackageCandidate, SourceOutcome
from patchworks.logging import get_logger
from patchworks.utils.urls import RepositoryRef, parse_github_repository

from .base import BaseFetcher
from .exceptions import FetcherHTTPError, RepositoryURLError
from .models import ReleaseRecord, ReleasesDocument

logger = get_logger(__name__, component="fetcher")

# Probed in order; the first file that exists wins
CHANGELOG_FILE_PATHS = (
    "CHANGELOG.md",
    "HISTORY.md",
    "docs/CHANGELOG.md",
    "docs/HISTORY.md",
    "changelog.md",
    "history.md",
    "CHANGELOG.txt",
    "HISTORY.txt",
    "changelog.txt",
    "history.txt",
    "changelog/index.md",
    "history/index.md",
    "ReleaseNotes.md",
    "CHANGES.md",
)

_ATX_HEADING = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
_SETEXT_UNDERLINE = re.compile(r"^\s{0,3}([=\-~^])\1{2,}\s*$")
_VERSION_TITLE = re.compile(
    r"^\[?(?:(?:version|release)\s+)?(?:[\w@/.-]*@)?v?"
    r"(?P<version>\d+\.\d+(?:\.\d+)*(?:[-+]?[0-9A-Za-z]+(?:\.[0-9A-Za-z]+)*)?)",
    re.IGNORECASE,
)
_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})")
_UNRELEASED_TITLE = re.compile(r"^\[?unreleased\b", re.IGNORECASE)


class ChangelogFetcher(BaseFetcher):
    """Fallback A: a changelog file in the repository.

    The repository root is derived from ``fallback_url`` (or
    ``repository_url``) with sub-paths such as ``/issues`` stripped, and the
    well-known changelog locations are probed through
    ``raw.githubusercontent.com``. The file is split into one release per
    version heading, e.g.::

        ## [2.0.0] - 2024-03-01
        ### Removed
        - Dropped support for Python 3.7

        2.0.0 (2024-03-01)
        ------------------
    """

    source = SourceOutcome.FALLBACK_A
    capability_flag = "fallback_a_compatible"

    def __init__(self, *args, paths: Tuple[str, ...] = CHANGELOG_FILE_PATHS, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.paths = paths

    def _fetch_releases(self, candidate: PackageCandidate) -> ReleasesDocument:
        repository = resolve_repository(candidate)
        found = self._find_changelog(repository, candidate.package_name)
        if found is None:
            logger.info(
                f"No changelog file found for {candidate.package_name}",
                extra={
                    "event": "fetch.changelog.not_found",
                    "package": candidate.package_name,
                    "repository": repository.slug,
                },
            )
            return ReleasesDocument()

        path, content = found
        document = parse_changelog(content)
        logger.debug(
            f"Parsed {len(document)} releases from {path}",
            extra={
                "event": "fetch.changelog.parsed",
                "package": candidate.package_name,
                "path": path,
                "release_count": len(document),
            },
        )
        return document

    def _find_changelog(
        self, repository: RepositoryRef, package_name: str
    ) -> Optional[Tuple[str, str]]:
        for path in self.paths:
            try:
                content = self._make_text_request(repository.raw_file_url(path))
            except FetcherHTTPError as e:
                if e.is_not_found:
                    continue
                raise
            if content.strip():
                return path, content
        return None


def resolve_repository(candidate: PackageCandidate) -> RepositoryRef:
    """GitHub coordinates from the fallback URL, else the repository URL.

    Raises:
        RepositoryURLError: If neither URL points at a GitHub repository
    """
    metadata = candidate.metadata
    for url in (metadata.fallback_url, metadata.repository_url):
        repository = parse_github_repository(url)
        if repository is not None:
            return repository
    raise RepositoryURLError(
        f"No GitHub repository URL for {candidate.package_name} "
        f"(fallback_url={metadata.fallback_url!r}, repository_url={metadata.repository_url!r})"
    )


def parse_changelog(content: str) -> ReleasesDocument:
    """Split changelog text into releases at version headings.

    A release runs until the next version heading, a heading shallower than
    its own, or an ``Unreleased`` heading. Section headings at the same
    level stay in the body, as release-please writes patch releases::

        ### [1.5.1](https://github.com/o/r/compare/v1.5.0...v1.5.1) (2024-02-01)
        ### Bug Fixes
    """
    lines = content.splitlines()
    releases: List[ReleaseRecord] = []

    current: Optional[dict] = None
    body: List[str] = []

    def close():
        if current is not None:
            releases.append(
                ReleaseRecord(
                    version=current["version"],
                    published_at=current["published_at"],
                    notes="\n".join(body).strip(),
                )
            )

    index = 0
    while index < len(lines):
        line = lines[index]
        heading = _heading_at(lines, index)
        if heading is None:
            if current is not None:
                body.append(line)
            index += 1
            continue

        level, title, consumed = heading
        match = _VERSION_TITLE.match(title.strip())
        if match:
            close()
            date = _DATE.search(title)
            current = {
                "version": match.group("version"),
                "published_at": date.group(1) if date else None,
                "level": level,
            }
            body = []
        elif current is not None and (
            level < current["level"] or _UNRELEASED_TITLE.match(title.strip())
        ):
            close()
            current = None
            body = []
        elif current is not None:
            body.extend(lines[index:index + consumed])
        index += consumed

    close()
    return ReleasesDocument(releases=releases)


def _heading_at(lines: List[str], index: int) -> Optional[Tuple[int, str, int]]:
    """Return (level, title, lines consumed) when ``lines[index]`` starts a heading."""
    atx = _ATX_HEADING.match(lines[index])
    if atx:
        return len(atx.group(1)), atx.group(2), 1

    if index + 1 < len(lines) and lines[index].strip():
        underline = _SETEXT_UNDERLINE.match(lines[index + 1])
        if underline and _VERSION_TITLE.match(lines[index].strip()):
            level = 1 if underline.group(1) == "=" else 2
            return level, lines[index].strip(), 2
    return None
