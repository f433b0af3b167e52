"""Exceptions raised inside release-data fetchers.

None of these leave ``BaseFetcher.fetch``; they are caught there, logged
and turned into an empty result for the package.
"""


class FetcherError(Exception):
    """Base class for fetcher failures."""


class FetcherHTTPError(FetcherError):
    """The remote answered with a 4xx/5xx status or the connection failed.

    ``status_code`` is 0 when no response was received.
    """

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code in (403, 429)


class FetcherTimeoutError(FetcherError):
    """The request did not finish within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class FetcherResponseError(FetcherError):
    """A response arrived but its body could not be parsed."""


class FetcherConfigurationError(FetcherError):
    """The fetcher was constructed with invalid settings."""


class RepositoryURLError(FetcherError):
    """The package's URL does not point at a supported repository host."""
