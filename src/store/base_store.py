# src/store/base_store.py — v1
"""Abstract store interface.

One store holds both profile rows and attribute index entries, and answers
nearest-neighbor queries over either collection by cosine similarity.
Vector queries return only rows scoring strictly above the floor, ordered
by descending score (ties by key).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from candidaterank.core.models import (
    AttributeEntry,
    Profile,
    ProfileMatch,
    Signal,
    SimilarityMatch,
)


class BaseStore(ABC):
    """Unified interface for store backends."""

    # --- Profiles ---

    @abstractmethod
    async def get_profile(self, profile_id: str) -> Profile | None:
        """Fetch a profile by id."""

    @abstractmethod
    async def get_profiles(self, profile_ids: list[str]) -> list[Profile]:
        """Fetch several profiles, in input order, skipping unknown ids."""

    @abstractmethod
    async def find_profile_by_url(self, linkedin_url: str) -> Profile | None:
        """Fetch a profile by its normalized LinkedIn URL."""

    @abstractmethod
    async def find_profile_by_github(self, login: str) -> Profile | None:
        """Fetch a profile by GitHub login (case-insensitive)."""

    @abstractmethod
    async def find_profiles_by_company(self, company_ids: list[str]) -> list[Profile]:
        """Profiles whose company_ids intersect ``company_ids``."""

    @abstractmethod
    async def upsert_profile(self, profile: Profile) -> None:
        """Insert or replace a profile row (last writer wins)."""

    @abstractmethod
    async def list_profile_ids(self) -> list[str]:
        """All stored profile ids."""

    # --- Attribute index ---

    @abstractmethod
    async def get_attribute(self, signal: Signal, value: str) -> AttributeEntry | None:
        """Fetch the entry for a normalized value."""

    @abstractmethod
    async def insert_attribute(self, entry: AttributeEntry) -> AttributeEntry:
        """Insert an entry unless one exists for (signal, value); return the stored one."""

    @abstractmethod
    async def add_attribute_member(
        self, signal: Signal, value: str, profile_id: str
    ) -> bool:
        """Add a profile id to an entry's membership.

        Returns:
            True if the membership changed, False if already a member.

        Raises:
            KeyError: If no entry exists for (signal, value).
        """

    @abstractmethod
    async def remove_attribute_member(
        self, signal: Signal, value: str, profile_id: str
    ) -> bool:
        """Remove a profile id from an entry's membership. True if it was a member."""

    @abstractmethod
    async def count_attributes(self, signal: Signal) -> int:
        """Number of entries stored for a signal."""

    # --- Vector queries ---

    @abstractmethod
    async def query_attributes(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[SimilarityMatch]:
        """Attribute entries of a signal most similar to a vector."""

    @abstractmethod
    async def query_profile_averages(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[ProfileMatch]:
        """Profiles whose average embedding for a signal is most similar to a vector."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""
