"""Release-note categorization."""

from .engine import NoteCategorizer
from .patterns import CATEGORY_PATTERNS, SECTION_HINTS
from .terms import DEFAULT_TERM_LIMIT, extract_important_terms

__all__ = [
    "CATEGORY_PATTERNS",
    "DEFAULT_TERM_LIMIT",
    "NoteCategorizer",
    "SECTION_HINTS",
    "extract_important_terms",
]
