"""Base fetcher class with shared functionality for all release-data sources.

This module provides the abstract base class every fetcher implements, along
with shared HTTP handling, GitHub request headers and the upgrade-range
filter that turns a source's releases document into normalized entries.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from patchworks.domain.models import NormalizedEntry, PackageCandidate, SourceOutcome
from patchworks.logging import get_logger
from patchworks.utils.timestamps import parse_iso_datetime
from patchworks.utils.versions import is_in_upgrade_range

from .exceptions import (
    FetcherConfigurationError,
    FetcherError,
    FetcherHTTPError,
    FetcherResponseError,
    FetcherTimeoutError,
)
from .models import ReleasesDocument

logger = get_logger(__name__, component="fetcher")

DEFAULT_TIMEOUT_SECONDS = 8
DEFAULT_USER_AGENT = "Patchworks/1.0"


class BaseFetcher(ABC):
    """Base class for all release-data fetchers.

    Subclasses build a ``ReleasesDocument`` for one package in
    ``_fetch_releases``. The public ``fetch`` method applies the upgrade
    range filter and guarantees that no exception reaches the caller: any
    failure is logged and reported as "no entries from this source".

    Attributes:
        source: Outcome recorded when this fetcher wins
        capability_flag: Name of the PackageMetadata flag gating this fetcher
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        github_token: Optional token for the GitHub API
    """

    source: SourceOutcome = SourceOutcome.UNKNOWN
    capability_flag: str = ""

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        github_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize fetcher with HTTP settings.

        Raises:
            FetcherConfigurationError: If timeout is outside 1..120 seconds or
                user_agent is empty
        """
        if not 1 <= timeout <= 120:
            raise FetcherConfigurationError(
                f"Timeout must be between 1 and 120 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise FetcherConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.github_token = github_token

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    @property
    def name(self) -> str:
        return self.source.value

    def is_applicable(self, candidate: PackageCandidate) -> bool:
        """Whether the candidate's capability flag enables this fetcher."""
        return bool(getattr(candidate.metadata, self.capability_flag, False))

    def fetch(self, candidate: PackageCandidate) -> List[NormalizedEntry]:
        """Fetch, filter and normalize entries for one package.

        Returns:
            Entries with ``current < version <= latest`` in source order;
            an empty list when the source has nothing or fails.
        """
        try:
            document = self._fetch_releases(candidate)
            entries = self._filter_in_range(document, candidate)
        except FetcherError as e:
            logger.warning(
                f"{self.name} unavailable for {candidate.package_name}: {e}",
                extra={
                    "event": "fetch.source.failed",
                    "package": candidate.package_name,
                    "fetcher": self.name,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return []
        except Exception as e:
            logger.error(
                f"Unexpected error in {self.name} fetcher for {candidate.package_name}: {e}",
                extra={
                    "event": "fetch.source.error",
                    "package": candidate.package_name,
                    "fetcher": self.name,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return []

        logger.debug(
            f"{self.name}: kept {len(entries)} of {len(document)} releases "
            f"for {candidate.package_name}",
            extra={
                "event": "fetch.source.filtered",
                "package": candidate.package_name,
                "fetcher": self.name,
                "total": len(document),
                "kept": len(entries),
            },
        )
        return entries

    @abstractmethod
    def _fetch_releases(self, candidate: PackageCandidate) -> ReleasesDocument:
        """Build the releases document for ``candidate``.

        May raise any ``FetcherError``; return an empty document when the
        source is reachable but has nothing for this package.
        """

    def _filter_in_range(
        self, document: ReleasesDocument, candidate: PackageCandidate
    ) -> List[NormalizedEntry]:
        current = candidate.metadata.current
        latest = candidate.metadata.latest
        entries = []
        for record in document.releases:
            if not is_in_upgrade_range(record.version, current, latest):
                continue
            entries.append(
                NormalizedEntry(
                    version=record.version,
                    published_at=parse_iso_datetime(record.published_at),
                    text=record.notes,
                )
            )
        return entries

    def _github_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers

    def _make_request(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            FetcherHTTPError: On 4xx/5xx status or connection failure
            FetcherTimeoutError: On request timeout
            FetcherResponseError: On a body that is not valid JSON
        """
        response = self._send(url, headers=headers, params=params)
        try:
            return response.json()
        except ValueError as e:
            logger.warning(
                f"Failed to parse JSON response from {url}",
                extra={"event": "fetch.http.invalid_json", "url": url},
            )
            raise FetcherResponseError(f"Failed to parse JSON response from {url}: {e}") from e

    def _make_text_request(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """GET ``url`` and return the body as text."""
        return self._send(url, headers=headers).text

    def _send(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        logger.debug(
            f"HTTP GET {url}",
            extra={"event": "fetch.http.request", "url": url, "timeout": self.timeout},
        )
        try:
            response = self._session.request(
                method="GET",
                url=url,
                headers=headers,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "fetch.http.timeout", "url": url, "timeout": self.timeout},
            )
            raise FetcherTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(
                f"Request to {url} failed: {e}",
                extra={"event": "fetch.http.error", "url": url, "error_type": type(e).__name__},
            )
            raise FetcherHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

        if response.status_code >= 400:
            self._log_http_error(response, url)
            raise FetcherHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )
        return response

    def _log_http_error(self, response: requests.Response, url: str) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        if response.status_code in (403, 429) and remaining == "0":
            logger.warning(
                "GitHub API rate limit exhausted; set GITHUB_TOKEN to raise the limit",
                extra={
                    "event": "fetch.http.rate_limited",
                    "url": url,
                    "status_code": response.status_code,
                    "reset_at": response.headers.get("X-RateLimit-Reset"),
                },
            )
            return

        # Missing files and releases are an expected outcome while probing
        level = logging.DEBUG if response.status_code == 404 else logging.WARNING
        logger.log(
            level,
            f"HTTP {response.status_code} from {url}",
            extra={"event": "fetch.http.status", "url": url, "status_code": response.status_code},
        )
