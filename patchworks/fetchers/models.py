"""Intermediate release documents built by fetchers before range filtering."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ReleaseRecord(BaseModel):
    """One release as described by a source, before validation.

    ``version`` may still carry tag decorations or be invalid; such records
    are dropped by the range filter.
    """

    version: str
    published_at: Optional[str] = None
    notes: Optional[str] = None


class ReleasesDocument(BaseModel):
    """Source-neutral list of releases in the order the source returned them."""

    releases: List[ReleaseRecord] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.releases)
