"""Important-term extraction for package summaries."""

import re
from collections import Counter
from typing import Dict, Iterable, List, Tuple

DEFAULT_TERM_LIMIT = 10

STOPWORDS = frozenset(
    """
    a about after all also an and any are as at be been before but by can could did do
    does for from had has have if in into is it its may more most must no not now of on
    only or other our over should so some such than that the their them then there these
    they this those to under up use used using via was we were what when where which
    while will with within would you your

    add added adds bump bumped change changed changes changelog commit commits feat fix
    fixed fixes fixing improve improved improvement internal merge merged minor new
    note notes patch pull release released releases request update updated updates
    version versions
    """.split()
)

_CODE_SPAN = re.compile(r"`([^`\n]{2,80})`")
_ADVISORY = re.compile(r"\b(CVE-\d{4}-\d{4,}|GHSA(?:-[0-9a-z]{4}){3})\b", re.IGNORECASE)
_URL = re.compile(r"https?://\S+")
_WORD = re.compile(r"[A-Za-z][A-Za-z0-9_]*(?:[.\-][A-Za-z0-9_]+)*")


def extract_important_terms(texts: Iterable[str], limit: int = DEFAULT_TERM_LIMIT) -> List[str]:
    """Pick the terms worth showing in a package summary.

    Advisory ids and inline code spans are always preferred, then words that
    occur at least twice and are not stopwords, most frequent first. The
    chosen terms are returned in the order they first appear, with their
    original spelling.

    Example:
        >>> texts = ["Removed `Client.send`. Client now streams.", "Client retries"]
        >>> extract_important_terms(texts)
        ['Client.send', 'Client']
    """
    combined = "\n".join(text for text in texts if text)
    if not combined or limit <= 0:
        return []

    first_seen: Dict[str, Tuple[int, str]] = {}

    def remember(position: int, term: str) -> str:
        key = term.casefold()
        if key not in first_seen:
            first_seen[key] = (position, term)
        return key

    preferred: List[str] = []
    for match in _ADVISORY.finditer(combined):
        preferred.append(remember(match.start(), match.group(1)))
    for match in _CODE_SPAN.finditer(combined):
        term = match.group(1).strip()
        if term:
            preferred.append(remember(match.start(), term))

    counts: Counter = Counter()
    prose = _URL.sub(lambda m: " " * len(m.group(0)), combined)
    for match in _WORD.finditer(prose):
        word = match.group(0)
        key = word.casefold()
        if len(key) < 3 or key in STOPWORDS:
            continue
        counts[key] += 1
        remember(match.start(), word)

    frequent = sorted(
        (key for key, count in counts.items() if count >= 2),
        key=lambda key: (-counts[key], first_seen[key][0]),
    )

    chosen: List[str] = []
    for key in preferred + frequent:
        if key not in chosen:
            chosen.append(key)
        if len(chosen) >= limit:
            break

    chosen.sort(key=lambda key: first_seen[key][0])
    return [first_seen[key][1] for key in chosen]
