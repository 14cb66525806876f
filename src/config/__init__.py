# src/config/__init__.py — v1
"""Typed settings."""

from candidaterank.config.settings import ConfigurationError, Settings, load_settings

__all__ = ["ConfigurationError", "Settings", "load_settings"]
