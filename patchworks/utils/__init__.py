"""Utility functions for versions, URLs, timestamps and text handling."""

from .text import clean_fragment, heading_text, normalize_for_matching, split_lines, truncate_text
from .timestamps import ensure_utc, format_file_stamp, format_timestamp, parse_iso_datetime, utc_now
from .urls import RepositoryRef, parse_github_repository, strip_to_repository_root
from .versions import (
    classify_update,
    is_in_upgrade_range,
    is_valid_version,
    normalize_version_tag,
    parse_version,
    versions_equal,
)

__all__ = [
    # Versions
    "classify_update",
    "is_in_upgrade_range",
    "is_valid_version",
    "normalize_version_tag",
    "parse_version",
    "versions_equal",
    # URLs
    "RepositoryRef",
    "parse_github_repository",
    "strip_to_repository_root",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "format_timestamp",
    "format_file_stamp",
    # Text
    "clean_fragment",
    "heading_text",
    "normalize_for_matching",
    "split_lines",
    "truncate_text",
]
