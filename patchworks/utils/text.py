"""Text helpers for release-note fragments."""

import re
from typing import List

_LIST_MARKER = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?:\[[ xX]\]\s+)?")
_HEADING = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
_EMPHASIS = re.compile(r"(\*\*|__)(.+?)\1")
_LINK = re.compile(r"\[([^\]]+)\]\((?:[^)]+)\)")
_HTML_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def heading_text(line: str):
    """Return the text of a markdown heading line, or None for other lines.

    Example:
        >>> heading_text("### Breaking Changes")
        'Breaking Changes'
    """
    match = _HEADING.match(line)
    if not match:
        return None
    return match.group(2).strip()


def clean_fragment(line: str) -> str:
    """Strip list markers, emphasis, link targets and HTML from one line.

    Example:
        >>> clean_fragment("- **core:** removed `Session.close` ([#12](https://x/12))")
        'core: removed `Session.close` (#12)'
    """
    text = _LIST_MARKER.sub("", line)
    text = _LINK.sub(r"\1", text)
    text = _EMPHASIS.sub(r"\2", text)
    text = _HTML_TAG.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def split_lines(text: str) -> List[str]:
    """Split on newlines (any convention) and drop blank lines."""
    if not text:
        return []
    return [line for line in text.splitlines() if line.strip()]


def normalize_for_matching(text: str) -> str:
    """Case-fold and collapse whitespace so patterns see one canonical form.

    Example:
        >>> normalize_for_matching("  Dropped   SUPPORT for Python 3.7 ")
        'dropped support for python 3.7'
    """
    return _WHITESPACE.sub(" ", text.casefold()).strip()


def truncate_text(text: str, max_length: int = 120, suffix: str = "...") -> str:
    """Shorten ``text`` to ``max_length`` characters, preferring a word break."""
    if not text or len(text) <= max_length:
        return text

    cut = max_length - len(suffix)
    if cut <= 0:
        return suffix[:max_length]

    truncated = text[:cut]
    last_space = truncated.rfind(" ")
    if last_space > cut * 0.8:
        truncated = truncated[:last_space]
    return truncated.rstrip() + suffix
