"""Commit-log fetcher (fallback B): commits between the current and latest tags."""

import re
from typing import Any, Dict, List, Optional

from patchworks.domain.models import PackageCandidate, SourceOutcome
from patchworks.logging import get_logger
from patchworks.utils.urls import RepositoryRef
from patchworks.utils.versions import versions_equal

from .base import BaseFetcher
from .changelog import resolve_repository
from .exceptions import FetcherHTTPError, FetcherResponseError
from .models import ReleaseRecord, ReleasesDocument

logger = get_logger(__name__, component="fetcher")

TAGS_PER_PAGE = 100

_CONVENTIONAL = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?:\s*(?P<subject>\S.*)$"
)
_BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)

# Commit type -> section title, in rendering order
SECTION_TITLES = (
    ("feat", "Features"),
    ("fix", "Bug Fixes"),
    ("perf", "Performance Improvements"),
    ("revert", "Reverts"),
    ("refactor", "Code Refactoring"),
    ("docs", "Documentation"),
    ("deps", "Dependencies"),
    ("build", "Build System"),
    ("ci", "Continuous Integration"),
    ("test", "Tests"),
    ("style", "Styles"),
    ("chore", "Chores"),
)
_KNOWN_TYPES = {commit_type for commit_type, _ in SECTION_TITLES}


class CommitLogFetcher(BaseFetcher):
    """Fallback B: the commit history between two release tags.

    Endpoints:
        GET https://api.github.com/repos/{owner}/{repo}/tags
        GET https://api.github.com/repos/{owner}/{repo}/compare/{base}...{head}

    The tags matching the current and latest versions are located (``v1.0``
    matches ``1.0.0``), the commits between them are rendered as a
    conventional-commit changelog and returned as a single release at the
    latest version.
    """

    source = SourceOutcome.FALLBACK_B
    capability_flag = "fallback_b_compatible"

    def _fetch_releases(self, candidate: PackageCandidate) -> ReleasesDocument:
        repository = resolve_repository(candidate)
        metadata = candidate.metadata

        tags = self._list_tags(repository)
        base = find_tag(tags, metadata.current)
        head = find_tag(tags, metadata.latest)
        if base is None or head is None:
            logger.info(
                f"Release tags not found for {candidate.package_name}",
                extra={
                    "event": "fetch.commit_log.tags_missing",
                    "package": candidate.package_name,
                    "repository": repository.slug,
                    "current_tag": base,
                    "latest_tag": head,
                },
            )
            return ReleasesDocument()

        comparison = self._make_request(
            f"{repository.api_url}/compare/{base}...{head}", headers=self._github_headers()
        )
        commits = comparison.get("commits") if isinstance(comparison, dict) else None
        if not isinstance(commits, list):
            raise FetcherResponseError(f"Unexpected compare response for {repository.slug}")
        if not commits:
            return ReleasesDocument()

        logger.debug(
            f"Found {len(commits)} commits between {base} and {head}",
            extra={
                "event": "fetch.commit_log.compared",
                "package": candidate.package_name,
                "commit_count": len(commits),
            },
        )
        return ReleasesDocument(
            releases=[
                ReleaseRecord(
                    version=metadata.latest,
                    published_at=_commit_date(commits[-1]),
                    notes=format_commit_changelog(commits),
                )
            ]
        )

    def _list_tags(self, repository: RepositoryRef) -> List[str]:
        try:
            payload = self._make_request(
                f"{repository.api_url}/tags",
                headers=self._github_headers(),
                params={"per_page": TAGS_PER_PAGE},
            )
        except FetcherHTTPError as e:
            if e.is_not_found:
                return []
            raise
        if not isinstance(payload, list):
            raise FetcherResponseError(f"Expected a list of tags for {repository.slug}")
        return [tag["name"] for tag in payload if isinstance(tag, dict) and tag.get("name")]


def find_tag(tags: List[str], version: str) -> Optional[str]:
    """First tag whose version equals ``version``."""
    for tag in tags:
        if versions_equal(tag, version):
            return tag
    return None


def _commit_date(commit: Dict[str, Any]) -> Optional[str]:
    details = commit.get("commit") or {}
    for role in ("committer", "author"):
        date = (details.get(role) or {}).get("date")
        if date:
            return date
    return None


def _commit_link(commit: Dict[str, Any]) -> str:
    sha = str(commit.get("sha") or "")[:7]
    url = commit.get("html_url")
    if sha and url:
        return f" ([{sha}]({url}))"
    if sha:
        return f" ({sha})"
    return ""


def format_commit_changelog(commits: List[Dict[str, Any]]) -> str:
    """Render commits as a markdown changelog grouped by conventional type.

    Example output::

        ### Changelog

        #### Breaking Changes
        - **api:** drop the legacy client ([1a2b3c4](https://github.com/...))

        #### Features
        - add retry hooks ([5d6e7f8](https://github.com/...))

        ### Additional Commits
        - Merge pull request #12 ([9a8b7c6](https://github.com/...))
    """
    breaking: List[str] = []
    sections: Dict[str, List[str]] = {commit_type: [] for commit_type in _KNOWN_TYPES}
    additional: List[str] = []

    for commit in commits:
        message = str((commit.get("commit") or {}).get("message") or "").strip()
        if not message:
            continue
        title = message.splitlines()[0].strip()
        link = _commit_link(commit)

        match = _CONVENTIONAL.match(title)
        if not match or match.group("type").lower() not in _KNOWN_TYPES:
            additional.append(f"- {title}{link}")
            continue

        scope = match.group("scope")
        line = f"- {f'**{scope}:** ' if scope else ''}{match.group('subject')}{link}"
        if match.group("breaking") or _BREAKING_FOOTER.search(message):
            breaking.append(line)
        else:
            sections[match.group("type").lower()].append(line)

    parts: List[str] = []
    grouped = [("Breaking Changes", breaking)] + [
        (heading, sections[commit_type]) for commit_type, heading in SECTION_TITLES
    ]
    if any(lines for _, lines in grouped):
        parts.append("### Changelog")
        for heading, lines in grouped:
            if lines:
                parts.append(f"#### {heading}\n" + "\n".join(lines))
    if additional:
        parts.append("### Additional Commits\n" + "\n".join(additional))
    return "\n\n".join(parts)
