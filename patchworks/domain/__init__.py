"""Domain models shared across fetchers, categorization and the pipeline."""

from .models import (
    NO_NOTES_PLACEHOLDER,
    CategorizedNotes,
    Category,
    EnrichmentFindings,
    NoData,
    NoDataReason,
    NormalizedEntry,
    NotesData,
    PackageCandidate,
    PackageMetadata,
    SourceOutcome,
    VersionNotes,
    has_entries,
)

__all__ = [
    "NO_NOTES_PLACEHOLDER",
    "CategorizedNotes",
    "Category",
    "EnrichmentFindings",
    "NoData",
    "NoDataReason",
    "NormalizedEntry",
    "NotesData",
    "PackageCandidate",
    "PackageMetadata",
    "SourceOutcome",
    "VersionNotes",
    "has_entries",
]
