"""Plain-text fetch summary shown at the confirmation gate."""

from typing import List, Sequence, Union

from patchworks.domain.models import (
    NoData,
    NoDataReason,
    NotesData,
    PackageCandidate,
    SourceOutcome,
)
from patchworks.utils.text import truncate_text

SUMMARY_HEADERS = (
    "Package",
    "Current -> Latest",
    "Source",
    "Release Notes",
    "Changelog",
    "Tried RN/FA/FB",
)

_ATTEMPT_ORDER = (
    SourceOutcome.RELEASE_NOTES,
    SourceOutcome.FALLBACK_A,
    SourceOutcome.FALLBACK_B,
)


def describe_payload(payload: Union[NotesData, NoData]) -> str:
    """Short label for a payload slot, e.g. ``3 entries`` or ``skipped``."""
    if isinstance(payload, NotesData):
        count = len(payload.entries)
        return f"{count} entr{'y' if count == 1 else 'ies'}"
    return NoDataReason(payload.reason).value


def _attempt_flags(candidate: PackageCandidate) -> str:
    return "/".join(
        "y" if source in candidate.attempted_sources else "n" for source in _ATTEMPT_ORDER
    )


def summary_rows(candidates: Sequence[PackageCandidate]) -> List[List[str]]:
    rows = []
    for candidate in candidates:
        rows.append(
            [
                truncate_text(candidate.package_name, 40),
                f"{candidate.metadata.current} -> {candidate.metadata.latest}",
                SourceOutcome(candidate.source).value,
                describe_payload(candidate.release_notes),
                describe_payload(candidate.changelog),
                _attempt_flags(candidate),
            ]
        )
    return rows


def render_results_table(candidates: Sequence[PackageCandidate]) -> str:
    """
    Render fetch results as an aligned text table.

    Example:
        Package  Current -> Latest  Source         ...
        -------  -----------------  -------------  ...
        requests 2.30.0 -> 2.32.3   release_notes  ...
    """
    rows = summary_rows(candidates)
    widths = [len(header) for header in SUMMARY_HEADERS]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))

    def line(cells: Sequence[str]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [line(SUMMARY_HEADERS), line(["-" * width for width in widths])]
    lines.extend(line(row) for row in rows)

    found = sum(1 for c in candidates if c.source != SourceOutcome.UNKNOWN)
    lines.append("")
    lines.append(f"{found} of {len(candidates)} packages have release data.")
    return "\n".join(lines)
