"""Release-note categorization engine.

This module turns a package's winning note payload into categorized
findings:
1. Splits each entry into fragments (one per meaningful line)
2. Tracks markdown section headings as context for the lines below them
3. Matches every fragment against the ordered category pattern table
4. Extracts references, mentions and URLs per entry
5. Collects important terms across the whole payload
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from patchworks.domain.models import (
    CategorizedNotes,
    Category,
    NoData,
    NormalizedEntry,
    NotesData,
    VersionNotes,
    empty_buckets,
)
from patchworks.logging import get_logger
from patchworks.utils.text import clean_fragment, heading_text, normalize_for_matching, split_lines

from .patterns import CATEGORY_PATTERNS, SECTION_HINTS, CategoryPattern
from .terms import DEFAULT_TERM_LIMIT, extract_important_terms

logger = get_logger(__name__, component="categorization")

Payload = Union[NotesData, NoData, Sequence[NormalizedEntry], None]

_FENCE = re.compile(r"^\s*(```|~~~)")
_RULE = re.compile(r"^\s*([-*_=])(?:\s*\1){2,}\s*$")
_REFERENCE = re.compile(r"(?:\bPR\s?#?\d+\b|(?<![\w&])#\d+\b)")
_MENTION = re.compile(r"(?<![\w.])@[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})\b")
_URL = re.compile(r"\bhttps?://[^\s()<>\]]+")


class NoteCategorizer:
    """Classifies release-note text into category buckets.

    Matching is purely textual: each fragment is case-folded and tested
    against every row of the pattern table, so one fragment can appear in
    several categories. Fragments matching nothing go to ``uncategorized``.
    Duplicate fragments from different entries are kept.

    ``categorize`` never raises; any failure yields all-empty output.
    """

    def __init__(
        self,
        patterns: Sequence[CategoryPattern] = CATEGORY_PATTERNS,
        section_hints: Sequence[CategoryPattern] = SECTION_HINTS,
        term_limit: int = DEFAULT_TERM_LIMIT,
    ):
        self.patterns = list(patterns)
        self.section_hints = list(section_hints)
        self.term_limit = term_limit

    def categorize(self, payload: Payload, package_name: Optional[str] = None) -> CategorizedNotes:
        """Categorize a payload.

        Args:
            payload: NotesData, a list of entries, or a NoData sentinel
            package_name: Used for logging only

        Returns:
            CategorizedNotes with every category key present
        """
        entries = self._entries(payload)
        if not entries:
            return CategorizedNotes()

        try:
            return self._categorize_entries(entries)
        except Exception as e:
            logger.error(
                f"Categorization failed for {package_name or 'package'}: {e}",
                extra={
                    "event": "categorize.package.error",
                    "package": package_name,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return CategorizedNotes()

    def match_categories(self, fragment: str, section: Optional[str] = None) -> List[Category]:
        """All categories a single fragment belongs to, in table order."""
        matched: List[Category] = []
        text = normalize_for_matching(fragment)
        for category, pattern in self.patterns:
            if category not in matched and pattern.search(text):
                matched.append(category)

        if section:
            hinted = self._section_categories(section)
            for category in (row[0] for row in self.patterns):
                if category in hinted and category not in matched:
                    matched.append(category)
            matched.sort(key=self._category_rank)
        return matched

    def _categorize_entries(self, entries: List[NormalizedEntry]) -> CategorizedNotes:
        aggregate = empty_buckets()
        versions: List[VersionNotes] = []
        texts: List[str] = []

        for entry in entries:
            if entry.is_placeholder:
                continue
            texts.append(entry.text)

            buckets = empty_buckets()
            for fragment, section in self._fragments(entry.text):
                categories = self.match_categories(fragment, section) or [Category.UNCATEGORIZED]
                for category in categories:
                    buckets[category.value].append(fragment)
                    aggregate[category.value].append(fragment)

            versions.append(
                VersionNotes(
                    version=entry.version,
                    published_at=entry.published_at,
                    categories=buckets,
                    references=_unique(_REFERENCE.findall(entry.text)),
                    mentions=_unique(_MENTION.findall(entry.text)),
                    urls=_unique(url.rstrip(".,;:") for url in _URL.findall(entry.text)),
                )
            )

        return CategorizedNotes(
            categories=aggregate,
            important_terms=extract_important_terms(texts, limit=self.term_limit),
            versions=versions,
        )

    @staticmethod
    def _entries(payload: Payload) -> List[NormalizedEntry]:
        if payload is None or isinstance(payload, NoData):
            return []
        if isinstance(payload, NotesData):
            return list(payload.entries)
        return [entry for entry in payload if isinstance(entry, NormalizedEntry)]

    @staticmethod
    def _fragments(text: str) -> List[Tuple[str, Optional[str]]]:
        fragments: List[Tuple[str, Optional[str]]] = []
        section: Optional[str] = None
        in_fence = False

        for line in split_lines(text):
            if _FENCE.match(line):
                in_fence = not in_fence
                continue
            if in_fence or _RULE.match(line):
                continue

            heading = heading_text(line)
            if heading is not None:
                section = clean_fragment(heading)
                continue

            fragment = clean_fragment(line)
            if fragment and any(ch.isalnum() for ch in fragment):
                fragments.append((fragment, section))
        return fragments

    def _section_categories(self, section: str) -> List[Category]:
        text = normalize_for_matching(section)
        return [category for category, pattern in self.section_hints if pattern.search(text)]

    def _category_rank(self, category: Category) -> int:
        order = [row[0] for row in self.patterns]
        return order.index(category) if category in order else len(order)


def _unique(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
