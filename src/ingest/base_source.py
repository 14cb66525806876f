# src/ingest/base_source.py — v1
"""Abstract interfaces for upstream collaborators.

Scrapers and LLM classifiers live outside this package; they are plugged
in through these interfaces. Returning None means "no data" and is never
an error for the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from candidaterank.core.models import RawProfile, SkillExtraction


class ProfileSource(ABC):
    """Fetches raw profile data from one upstream system."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Source identifier stored in Profile.sources (e.g. 'github')."""

    @abstractmethod
    def handles(self, identifier: str) -> bool:
        """Whether this source can fetch the given URL or handle."""

    @abstractmethod
    async def fetch_profile(self, identifier: str) -> RawProfile | None:
        """Fetch one profile by URL or handle; None if unavailable."""


class LocationClassifier(ABC):
    """Normalizes free-text locations to a canonical label."""

    @abstractmethod
    async def normalize_location(self, text: str) -> str | None:
        """Canonical location label, or None if unrecognized."""


class SkillClassifier(ABC):
    """Extracts structured skills from a raw profile."""

    @abstractmethod
    async def extract_skills(self, raw: RawProfile) -> SkillExtraction | None:
        """Technologies and product features the person works with."""
