"""Core domain models for upgrade candidates and their release data.

This module defines the data structures passed between the fetchers, the
categorizer and the pipeline:
- PackageMetadata / PackageCandidate: one outdated dependency under review
- NormalizedEntry: one release-note record from any source
- NotesData / NoData: tagged payload replacing "skipped"/"unknown" strings
- CategorizedNotes: categorizer output with every category present
- EnrichmentFindings: result returned by the enrichment collaborator
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from patchworks.utils.timestamps import ensure_utc
from patchworks.utils.versions import classify_update, normalize_version_tag, parse_version

NO_NOTES_PLACEHOLDER = "No release notes available."


class SourceOutcome(str, Enum):
    """Which source supplied a package's notes."""

    RELEASE_NOTES = "release_notes"
    FALLBACK_A = "changelog"
    FALLBACK_B = "commit_log"
    UNKNOWN = "unknown"


class NoDataReason(str, Enum):
    """Why a payload slot holds no notes.

    SKIPPED: a higher-priority source already satisfied the package.
    UNKNOWN: every attempted source failed or returned nothing.
    """

    SKIPPED = "skipped"
    UNKNOWN = "unknown"


class Category(str, Enum):
    """Buckets produced by the categorizer."""

    BREAKING_CHANGE = "breaking_change"
    SECURITY = "security"
    DEPRECATION = "deprecation"
    PERFORMANCE = "performance"
    MIGRATION = "migration"
    UNCATEGORIZED = "uncategorized"


def empty_buckets() -> Dict[str, List[str]]:
    return {category.value: [] for category in Category}


class NormalizedEntry(BaseModel):
    """One upgrade-note record, whatever source it came from."""

    version: str = Field(..., description="Version documented by this entry, without a 'v' prefix")
    published_at: Optional[datetime] = None
    text: str = NO_NOTES_PLACEHOLDER

    @field_validator("version")
    @classmethod
    def normalize_version(cls, v: str) -> str:
        normalized = normalize_version_tag(v)
        if parse_version(normalized) is None:
            raise ValueError(f"Invalid version: {v!r}")
        return normalized

    @field_validator("published_at")
    @classmethod
    def published_in_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @field_validator("text", mode="before")
    @classmethod
    def placeholder_for_empty_text(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return NO_NOTES_PLACEHOLDER
        return v

    @property
    def is_placeholder(self) -> bool:
        return self.text.strip().casefold() == NO_NOTES_PLACEHOLDER.casefold()


class NotesData(BaseModel):
    """Payload slot holding real entries."""

    kind: Literal["data"] = "data"
    entries: List[NormalizedEntry] = Field(default_factory=list)


class NoData(BaseModel):
    """Payload slot holding a reason instead of entries."""

    kind: Literal["no_data"] = "no_data"
    reason: NoDataReason

    model_config = {"use_enum_values": True}

    @classmethod
    def skipped(cls) -> "NoData":
        return cls(reason=NoDataReason.SKIPPED)

    @classmethod
    def unknown(cls) -> "NoData":
        return cls(reason=NoDataReason.UNKNOWN)


NotePayload = Annotated[Union[NotesData, NoData], Field(discriminator="kind")]


def has_entries(payload: Optional[Union[NotesData, NoData]]) -> bool:
    """True when ``payload`` carries at least one entry."""
    return isinstance(payload, NotesData) and bool(payload.entries)


class VersionNotes(BaseModel):
    """Categorized view of a single entry."""

    version: str
    published_at: Optional[datetime] = None
    categories: Dict[str, List[str]] = Field(default_factory=empty_buckets)
    references: List[str] = Field(default_factory=list)
    mentions: List[str] = Field(default_factory=list)
    urls: List[str] = Field(default_factory=list)


class CategorizedNotes(BaseModel):
    """Categorizer output for one package.

    Every ``Category`` key is always present in ``categories`` so consumers
    can index any bucket without checking for it first.
    """

    categories: Dict[str, List[str]] = Field(default_factory=empty_buckets)
    important_terms: List[str] = Field(default_factory=list)
    versions: List[VersionNotes] = Field(default_factory=list)

    @field_validator("categories")
    @classmethod
    def fill_missing_categories(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        filled = empty_buckets()
        for key, fragments in v.items():
            filled[Category(key).value] = list(fragments)
        return filled

    def fragments(self, category: Union[Category, str]) -> List[str]:
        return self.categories[Category(category).value]

    def count(self, category: Union[Category, str]) -> int:
        return len(self.fragments(category))

    def has(self, category: Union[Category, str]) -> bool:
        return self.count(category) > 0

    @property
    def is_empty(self) -> bool:
        return not any(self.categories.values()) and not self.important_terms


class PackageMetadata(BaseModel):
    """Version bounds, source URLs and capability flags for one package."""

    current: str
    latest: str
    repository_url: Optional[str] = None
    fallback_url: Optional[str] = None
    release_notes_compatible: bool = False
    fallback_a_compatible: bool = False
    fallback_b_compatible: bool = False
    update_type: Optional[Literal["patch", "minor", "major"]] = None
    updating_difficulty: float = Field(0.0, ge=0)

    @field_validator("current", "latest")
    @classmethod
    def valid_version(cls, v: str) -> str:
        normalized = normalize_version_tag(v)
        if parse_version(normalized) is None:
            raise ValueError(f"Invalid version: {v!r}")
        return normalized

    @field_validator("repository_url", "fallback_url")
    @classmethod
    def blank_url_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def current_not_after_latest(self):
        if parse_version(self.current) > parse_version(self.latest):
            raise ValueError(
                f"current version {self.current} is newer than latest version {self.latest}"
            )
        if self.update_type is None:
            self.update_type = classify_update(self.current, self.latest)
        return self

    @property
    def has_any_source(self) -> bool:
        return (
            self.release_notes_compatible
            or self.fallback_a_compatible
            or self.fallback_b_compatible
        )


class PackageCandidate(BaseModel):
    """One outdated dependency, enriched in place as the pipeline runs."""

    package_name: str = Field(..., min_length=1)
    metadata: PackageMetadata
    release_notes: NotePayload = Field(default_factory=NoData.unknown)
    changelog: NotePayload = Field(default_factory=NoData.unknown)
    source: SourceOutcome = SourceOutcome.UNKNOWN
    categorized_notes: CategorizedNotes = Field(default_factory=CategorizedNotes)
    important_terms: List[str] = Field(default_factory=list)
    attempted_sources: List[SourceOutcome] = Field(default_factory=list)
    skip_reason: Optional[str] = None
    fetch_error: Optional[str] = None

    @field_validator("package_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("package_name cannot be empty or whitespace-only")
        return stripped

    @property
    def winning_payload(self) -> Union[NotesData, NoData]:
        """The payload slot the winning source wrote to."""
        if self.source == SourceOutcome.RELEASE_NOTES:
            return self.release_notes
        if self.source in (SourceOutcome.FALLBACK_A, SourceOutcome.FALLBACK_B):
            return self.changelog
        return NoData.unknown()

    @property
    def entries(self) -> List[NormalizedEntry]:
        payload = self.winning_payload
        return payload.entries if isinstance(payload, NotesData) else []

    @property
    def has_usable_notes(self) -> bool:
        return has_entries(self.release_notes) or has_entries(self.changelog)


class EnrichmentFindings(BaseModel):
    """Summary produced by the optional enrichment collaborator."""

    provider: Literal["anthropic", "openai", "gemini"]
    markdown_content: str = ""
    summary: str = ""
    has_breaking_changes: bool = False
    has_security_issues: bool = False
    package_count: int = Field(0, ge=0)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
