"""Version parsing and the upgrade-range filter applied to fetched entries."""

import re
from typing import Optional

from packaging.version import InvalidVersion, Version

# "v1.2.3", "V1.2.3", "release-1.2.3", "@scope/pkg@1.2.3", "pkg@1.2.3"
_TAG_PREFIX = re.compile(r"^(?:.*@|release[-_]?|version[-_]?)?[vV]?(?=\d)")


def normalize_version_tag(tag: Optional[str]) -> str:
    """Strip tag decorations so the remainder can be parsed as a version.

    Example:
        >>> normalize_version_tag("v2.0.0")
        '2.0.0'
        >>> normalize_version_tag("@scope/pkg@1.4.0")
        '1.4.0'
    """
    if not tag:
        return ""
    return _TAG_PREFIX.sub("", tag.strip(), count=1)


def parse_version(value: Optional[str]) -> Optional[Version]:
    """Parse a version string, returning None when it is not a valid version."""
    normalized = normalize_version_tag(value)
    if not normalized:
        return None
    try:
        return Version(normalized)
    except InvalidVersion:
        return None


def is_valid_version(value: Optional[str]) -> bool:
    return parse_version(value) is not None


def is_in_upgrade_range(version: Optional[str], current: str, latest: str) -> bool:
    """Decide whether ``version`` lies in the interval ``(current, latest]``.

    Invalid versions, on either side, are never in range.

    Example:
        >>> is_in_upgrade_range("1.5.0", "1.0.0", "2.0.0")
        True
        >>> is_in_upgrade_range("2.1.0", "1.0.0", "2.0.0")
        False
    """
    candidate = parse_version(version)
    lower = parse_version(current)
    upper = parse_version(latest)
    if candidate is None or lower is None or upper is None:
        return False
    return lower < candidate <= upper


def versions_equal(left: Optional[str], right: Optional[str]) -> bool:
    """Compare two version strings semantically (``v1.0`` equals ``1.0.0``)."""
    a = parse_version(left)
    b = parse_version(right)
    return a is not None and b is not None and a == b


def classify_update(current: str, latest: str) -> Optional[str]:
    """Return ``major``, ``minor`` or ``patch`` for the jump between two versions."""
    old = parse_version(current)
    new = parse_version(latest)
    if old is None or new is None or new <= old:
        return None
    if new.major != old.major:
        return "major"
    if new.minor != old.minor:
        return "minor"
    return "patch"
