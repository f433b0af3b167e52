"""Category pattern tables.

Patterns run against case-folded, whitespace-collapsed fragments. Every
matching row contributes its category, so one fragment may land in more
than one bucket. Row order fixes the order categories are reported in.
"""

import re
from typing import List, Pattern, Tuple

from patchworks.domain.models import Category

CategoryPattern = Tuple[Category, Pattern]


def _rows(category: Category, *expressions: str) -> List[CategoryPattern]:
    return [(category, re.compile(expression)) for expression in expressions]


CATEGORY_PATTERNS: List[CategoryPattern] = [
    *_rows(
        Category.BREAKING_CHANGE,
        r"\bbreaking[\s-]?changes?\b",
        r"\bbreak(?:s|ing)? (?:compatibility|existing|the api|backwards)",
        r"\bno longer (?:supports?|supported|works?|available|exists?|accepts?|returns?)\b",
        r"\bincompatible\b",
        r"\bnot backwards?[\s-]compatible\b",
        r"\b(?:removed?|removes|dropped|drops?|deleted?)\b(?:\s+[\w.`'-]+){0,3}?\s+`?"
        r"(?:support|apis?|methods?|functions?|class(?:es)?|options?|arguments?|parameters?"
        r"|modules?|endpoints?|flags?)\b",
        r"^(?:removed?|dropped)\b",
        r"\brenamed?\b.*\b(?:from|to)\b",
        r"\breplaced?\b.*\b(?:with|by)\b",
        r"\bdiscontinued\b",
        r"\bapi (?:break|changes?|changed)\b",
    ),
    *_rows(
        Category.SECURITY,
        r"\bcve-\d{4}-\d{4,}\b",
        r"\bghsa(?:-[0-9a-z]{4}){3}\b",
        r"\bvulnerab(?:le|ility|ilities)\b",
        r"\bsecurity\b",
        r"\bxss\b|\bcross[\s-]site scripting\b",
        r"\bcsrf\b",
        r"\binjection\b",
        r"\bexploit(?:s|able|ed)?\b",
        r"\bremote code execution\b",
        r"\b(?:denial[\s-]of[\s-]service|redos)\b",
    ),
    *_rows(
        Category.DEPRECATION,
        r"\bdeprecat(?:e|ed|es|ing|ion|ions)\b",
        r"\bwill be removed\b",
        r"\bscheduled for removal\b",
        r"\bobsolete\b",
        r"\bend[\s-]of[\s-]life\b",
    ),
    *_rows(
        Category.PERFORMANCE,
        r"\bperformance\b",
        r"\bfaster\b",
        r"\bspeed(?:s|ed)?[\s-]?up\b",
        r"\boptimi[sz](?:e|ed|es|ing|ation|ations)\b",
        r"\blatency\b",
        r"\bmemory (?:usage|leaks?|footprint|consumption)\b",
        r"\b(?:reduce[sd]?|lower(?:ed|s)?)\b.*\b(?:overhead|allocations?|memory|cpu)\b",
        r"\bmore efficient\b",
        r"\bcach(?:e|es|ed|ing)\b",
    ),
    *_rows(
        Category.MIGRATION,
        r"\bmigrat(?:e|es|ed|ing|ion|ions)\b",
        r"\bupgrade guide\b",
        r"\bupgrading (?:from|to)\b",
        r"\bcodemods?\b",
        r"\bmust (?:update|upgrade|change|migrate)\b",
        r"\brequires? (?:migration|changes to)\b",
        r"\buse [\w.`()-]+ instead\b",
    ),
]

# Section headings (``### Security``) that place every line below them in a bucket
SECTION_HINTS: List[CategoryPattern] = [
    *_rows(Category.BREAKING_CHANGE, r"\bbreaking\b", r"\bincompatib", r"^removed?\b"),
    *_rows(Category.SECURITY, r"\bsecurity\b", r"\bvulnerab", r"\bcve\b"),
    *_rows(Category.DEPRECATION, r"\bdeprecat"),
    *_rows(Category.PERFORMANCE, r"\bperformance\b", r"\boptimi[sz]", r"\bspeed\b"),
    *_rows(Category.MIGRATION, r"\bmigrat", r"\bupgrad(?:e|ing) (?:guide|notes)\b"),
]
