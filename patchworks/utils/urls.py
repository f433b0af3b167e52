"""Helpers for turning project URLs into GitHub repository coordinates."""

import re
from typing import NamedTuple, Optional

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"

_GITHUB_REPO = re.compile(
    r"github\.com[/:](?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?(?:[/#?]|$)",
    re.IGNORECASE,
)

# Sub-pages that point somewhere inside a repository rather than at its root
_TRAILING_SEGMENTS = re.compile(
    r"/(?:issues|bugs|pulls|wiki|releases|tags|tree|blob|commits|discussions|actions)(?:/.*)?$",
    re.IGNORECASE,
)


class RepositoryRef(NamedTuple):
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def web_url(self) -> str:
        return f"https://github.com/{self.slug}"

    @property
    def api_url(self) -> str:
        return f"{GITHUB_API_URL}/repos/{self.slug}"

    def raw_file_url(self, path: str, ref: str = "HEAD") -> str:
        return f"{GITHUB_RAW_URL}/{self.slug}/{ref}/{path.lstrip('/')}"


def strip_to_repository_root(url: Optional[str]) -> Optional[str]:
    """Remove ``git+`` prefixes, fragments, ``.git`` and sub-page segments.

    Example:
        >>> strip_to_repository_root("git+https://github.com/psf/requests.git#readme")
        'https://github.com/psf/requests'
        >>> strip_to_repository_root("https://github.com/psf/requests/issues")
        'https://github.com/psf/requests'
    """
    if not url or not url.strip():
        return None

    cleaned = url.strip()
    if cleaned.startswith("git+"):
        cleaned = cleaned[len("git+"):]
    if cleaned.startswith("git@github.com:"):
        cleaned = "https://github.com/" + cleaned[len("git@github.com:"):]
    if cleaned.startswith("git://"):
        cleaned = "https://" + cleaned[len("git://"):]

    cleaned = cleaned.split("#", 1)[0].split("?", 1)[0]
    cleaned = _TRAILING_SEGMENTS.sub("", cleaned.rstrip("/"))
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    return cleaned.rstrip("/") or None


def parse_github_repository(url: Optional[str]) -> Optional[RepositoryRef]:
    """Extract ``owner``/``repo`` from any GitHub URL, or None for other hosts."""
    root = strip_to_repository_root(url)
    if not root:
        return None
    match = _GITHUB_REPO.search(root)
    if not match:
        return None
    return RepositoryRef(owner=match.group("owner"), repo=match.group("repo"))
