"""Interfaces for the external collaborators the pipeline drives.

The pipeline owns ordering and failure policy; everything that touches the
terminal, the filesystem, a package manager or an analysis provider sits
behind one of these interfaces so it can be swapped or mocked.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from patchworks.config.models import AIConfig
from patchworks.domain.models import EnrichmentFindings, PackageCandidate


class ReportDirectoryProvider(ABC):
    """Establishes where reports are written."""

    @abstractmethod
    def prepare(self) -> Path:
        """
        Create (if needed) and return the report directory.

        Raises:
            OSError: If the directory cannot be created
        """
        pass


class ConfirmationPrompt(ABC):
    """Asks the operator a single yes/no question."""

    @abstractmethod
    def confirm(self, summary: str, question: str) -> bool:
        """
        Show ``summary`` and ask ``question``.

        Returns:
            True to proceed, False to cancel the run
        """
        pass


class Enricher(ABC):
    """Produces an external summary of categorized packages."""

    @abstractmethod
    def analyze(
        self, packages: List[PackageCandidate], ai_config: AIConfig
    ) -> EnrichmentFindings:
        pass


class PackageSelector(ABC):
    """Chooses which packages to update."""

    @abstractmethod
    def select(self, packages: List[PackageCandidate]) -> List[PackageCandidate]:
        pass


class ManifestWriter(ABC):
    """Writes the selected versions into the project manifest."""

    @abstractmethod
    def write(self, packages: List[PackageCandidate]) -> None:
        pass


class DependencyInstaller(ABC):
    """Runs the package manager for the selected packages."""

    @abstractmethod
    def install(self, packages: List[PackageCandidate]) -> None:
        pass


class Reporter(ABC):
    """Writes the final reports."""

    @abstractmethod
    def report(
        self,
        packages: List[PackageCandidate],
        report_dir: Path,
        enrichment: Optional[EnrichmentFindings] = None,
    ) -> List[Path]:
        """
        Write reports for ``packages``.

        Returns:
            Paths of the files written
        """
        pass
