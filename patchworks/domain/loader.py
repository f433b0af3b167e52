"""Load the list of outdated packages produced by the discovery step."""

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import ValidationError

from patchworks.config.exceptions import ConfigurationError
from patchworks.config.loader import format_validation_errors
from patchworks.logging import get_logger

from .models import PackageCandidate

logger = get_logger(__name__, component="candidates")


def load_candidates(path: Path) -> List[PackageCandidate]:
    """
    Read candidates from a YAML or JSON file.

    The file holds either a list of candidates or a mapping with a
    ``packages`` list. Package names must be unique.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Candidate file not found: {path}",
            suggestions=["Pass the path to the file written by the outdated-package check"],
        ) from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read candidate file {path}: {e}") from e

    return parse_candidates(raw, source=str(path))


def parse_candidates(raw: Any, source: str = "<input>") -> List[PackageCandidate]:
    """Validate already-decoded candidate data."""
    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = raw.get("packages", [])
    if not isinstance(raw, list):
        raise ConfigurationError(
            f"{source} must contain a list of packages or a mapping with a 'packages' list"
        )

    candidates: List[PackageCandidate] = []
    errors: List[str] = []
    for index, item in enumerate(raw):
        try:
            candidates.append(PackageCandidate.model_validate(item))
        except ValidationError as e:
            name = item.get("package_name", f"#{index}") if isinstance(item, dict) else f"#{index}"
            errors.extend(f"{name}: {message}" for message in format_validation_errors(e))

    seen = set()
    for candidate in candidates:
        if candidate.package_name in seen:
            errors.append(f"Duplicate package_name: {candidate.package_name}")
        seen.add(candidate.package_name)

    if errors:
        raise ConfigurationError(
            f"Invalid candidate data in {source}",
            errors=errors,
            suggestions=[
                "Versions must be valid and current must not be newer than latest",
                "Each package_name may appear only once",
            ],
        )

    logger.info(
        f"Loaded {len(candidates)} candidate packages",
        extra={"event": "candidates.loaded", "count": len(candidates), "source": source},
    )
    return candidates
