# src/__init__.py — v1
"""candidaterank: multi-signal candidate similarity and ranking engine."""

from candidaterank.version import __version__

__all__ = ["__version__"]
