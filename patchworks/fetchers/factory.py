"""Builds the fetcher chain and resolver from configuration."""

from typing import List, Optional

import requests

from patchworks.config.models import FetchConfig
from patchworks.logging import get_logger

from .base import BaseFetcher
from .changelog import ChangelogFetcher
from .commit_log import CommitLogFetcher
from .exceptions import FetcherConfigurationError
from .release_notes import ReleaseNotesFetcher
from .resolver import FallbackResolver

logger = get_logger(__name__, component="fetcher")

# Fixed priority: release notes, then changelog, then commit log
FETCHER_CHAIN = (ReleaseNotesFetcher, ChangelogFetcher, CommitLogFetcher)


def build_fetchers(
    fetch_config: FetchConfig,
    github_token: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> List[BaseFetcher]:
    """Instantiate the fetchers in priority order sharing one HTTP session.

    Raises:
        FetcherConfigurationError: If the settings are rejected by a fetcher
    """
    shared_session = session or requests.Session()
    fetchers = []
    for fetcher_class in FETCHER_CHAIN:
        try:
            fetchers.append(
                fetcher_class(
                    timeout=fetch_config.http_request_timeout,
                    user_agent=fetch_config.user_agent,
                    github_token=github_token,
                    session=shared_session,
                )
            )
        except FetcherConfigurationError:
            raise
        except Exception as e:
            raise FetcherConfigurationError(
                f"Failed to create {fetcher_class.__name__}: {e}"
            ) from e

    logger.debug(
        "Fetcher chain created",
        extra={
            "event": "fetch.chain.created",
            "fetchers": [fetcher.name for fetcher in fetchers],
            "authenticated": bool(github_token),
        },
    )
    return fetchers


def build_resolver(
    fetch_config: FetchConfig,
    github_token: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> FallbackResolver:
    return FallbackResolver(build_fetchers(fetch_config, github_token, session))
