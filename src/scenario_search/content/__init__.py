"""Scenario content providers."""

from .provider import ContentProvider, InMemoryContentProvider

__all__ = ["ContentProvider", "InMemoryContentProvider"]
