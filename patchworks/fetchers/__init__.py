"""Release-data fetchers and the fallback resolver."""

from .base import BaseFetcher
from .changelog import CHANGELOG_FILE_PATHS, ChangelogFetcher, parse_changelog
from .commit_log import CommitLogFetcher, format_commit_changelog
from .exceptions import (
    FetcherConfigurationError,
    FetcherError,
    FetcherHTTPError,
    FetcherResponseError,
    FetcherTimeoutError,
    RepositoryURLError,
)
from .factory import build_fetchers, build_resolver
from .release_notes import ReleaseNotesFetcher
from .resolver import (
    AttemptStatus,
    FallbackResolver,
    FetchAttempt,
    Resolution,
    apply_resolution,
    mark_unknown,
)

__all__ = [
    "AttemptStatus",
    "BaseFetcher",
    "CHANGELOG_FILE_PATHS",
    "ChangelogFetcher",
    "CommitLogFetcher",
    "FallbackResolver",
    "FetchAttempt",
    "FetcherConfigurationError",
    "FetcherError",
    "FetcherHTTPError",
    "FetcherResponseError",
    "FetcherTimeoutError",
    "ReleaseNotesFetcher",
    "RepositoryURLError",
    "Resolution",
    "apply_resolution",
    "build_fetchers",
    "build_resolver",
    "format_commit_changelog",
    "mark_unknown",
    "parse_changelog",
]
