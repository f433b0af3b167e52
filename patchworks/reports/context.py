"""Template context for the final reports.

Builds plain dictionaries from augmented candidates so the Markdown
template and the JSON report read the same data.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from patchworks.domain.models import (
    Category,
    EnrichmentFindings,
    NoData,
    PackageCandidate,
    SourceOutcome,
)
from patchworks.utils.timestamps import format_timestamp

CATEGORY_TITLES = {
    Category.BREAKING_CHANGE.value: "Breaking Changes",
    Category.SECURITY.value: "Security",
    Category.DEPRECATION.value: "Deprecations",
    Category.PERFORMANCE.value: "Performance",
    Category.MIGRATION.value: "Migration",
    Category.UNCATEGORIZED.value: "Other Changes",
}

SOURCE_LABELS = {
    SourceOutcome.RELEASE_NOTES.value: "GitHub release notes",
    SourceOutcome.FALLBACK_A.value: "Changelog file",
    SourceOutcome.FALLBACK_B.value: "Commit log",
    SourceOutcome.UNKNOWN.value: "Unknown",
}


def _no_data_reason(candidate: PackageCandidate) -> Optional[str]:
    payload = candidate.winning_payload
    if isinstance(payload, NoData):
        return str(getattr(payload.reason, "value", payload.reason))
    return None


def build_package_context(candidate: PackageCandidate) -> Dict[str, Any]:
    """Build the template context for one package.

    Args:
        candidate: Augmented candidate after the categorize stage

    Returns:
        Dictionary with:
        - name, current, latest, update_type: Version metadata
        - source, source_label: Which source supplied the notes
        - no_data_reason: ``unknown`` or ``skipped`` when there are no notes
        - skip_reason, fetch_error: Why the package has no findings
        - sections: Non-empty category buckets as (title, fragments)
        - important_terms: Terms worth highlighting
        - versions: Per-entry references, mentions and URLs
    """
    source = SourceOutcome(candidate.source).value
    notes = candidate.categorized_notes
    sections = [
        {"key": key, "title": title, "fragments": notes.categories.get(key, [])}
        for key, title in CATEGORY_TITLES.items()
        if notes.categories.get(key)
    ]
    versions = [
        {
            "version": version.version,
            "published_at": format_timestamp(version.published_at),
            "references": version.references,
            "mentions": version.mentions,
            "urls": version.urls,
        }
        for version in notes.versions
    ]

    return {
        "name": candidate.package_name,
        "current": candidate.metadata.current,
        "latest": candidate.metadata.latest,
        "update_type": candidate.metadata.update_type or "",
        "repository_url": candidate.metadata.repository_url or "",
        "source": source,
        "source_label": SOURCE_LABELS[source],
        "no_data_reason": _no_data_reason(candidate),
        "skip_reason": candidate.skip_reason,
        "fetch_error": candidate.fetch_error,
        "sections": sections,
        "important_terms": candidate.important_terms,
        "versions": versions,
        "breaking_count": notes.count(Category.BREAKING_CHANGE),
        "security_count": notes.count(Category.SECURITY),
    }


def build_report_context(
    packages: List[PackageCandidate],
    generated_at: datetime,
    enrichment: Optional[EnrichmentFindings] = None,
) -> Dict[str, Any]:
    package_contexts = [build_package_context(candidate) for candidate in packages]
    return {
        "generated_at": format_timestamp(generated_at),
        "packages": package_contexts,
        "package_count": len(package_contexts),
        "breaking_total": sum(p["breaking_count"] for p in package_contexts),
        "security_total": sum(p["security_count"] for p in package_contexts),
        "unknown_total": sum(
            1 for p in package_contexts if p["source"] == SourceOutcome.UNKNOWN.value
        ),
        "enrichment": enrichment.model_dump(mode="json") if enrichment else None,
    }
