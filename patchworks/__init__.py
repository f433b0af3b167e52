"""Patchworks: release-note review for outdated dependencies."""

__version__ = "1.0.0"
