"""Test helper utilities for Patchworks tests."""

from .static_fetcher import StaticFetcher, make_candidate

__all__ = ["StaticFetcher", "make_candidate"]
