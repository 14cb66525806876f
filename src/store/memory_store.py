# src/store/memory_store.py — v1
"""In-memory store (STORE_BACKEND=memory).

Used by tests and short-lived processes. Every method body runs without
awaiting, so each call is atomic with respect to other tasks on the loop.
"""

from __future__ import annotations

import logging

import numpy as np

from candidaterank.core.models import (
    AttributeEntry,
    Profile,
    ProfileMatch,
    Signal,
    SimilarityMatch,
)
from candidaterank.core.similarity import top_matches
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)


class MemoryStore(BaseStore):
    """Dict-backed store with brute-force cosine scans."""

    def __init__(self) -> None:
        self._profiles: dict[str, Profile] = {}
        self._attributes: dict[tuple[Signal, str], AttributeEntry] = {}

    # --- Profiles ---

    async def get_profile(self, profile_id: str) -> Profile | None:
        profile = self._profiles.get(profile_id)
        return profile.model_copy(deep=True) if profile else None

    async def get_profiles(self, profile_ids: list[str]) -> list[Profile]:
        return [
            self._profiles[pid].model_copy(deep=True)
            for pid in profile_ids
            if pid in self._profiles
        ]

    async def find_profile_by_url(self, linkedin_url: str) -> Profile | None:
        for profile in self._profiles.values():
            if profile.linkedin_url == linkedin_url:
                return profile.model_copy(deep=True)
        return None

    async def find_profile_by_github(self, login: str) -> Profile | None:
        wanted = login.lower()
        for profile in self._profiles.values():
            if profile.github_login and profile.github_login.lower() == wanted:
                return profile.model_copy(deep=True)
        return None

    async def find_profiles_by_company(self, company_ids: list[str]) -> list[Profile]:
        wanted = set(company_ids)
        return [
            p.model_copy(deep=True)
            for p in self._profiles.values()
            if wanted.intersection(p.company_ids)
        ]

    async def upsert_profile(self, profile: Profile) -> None:
        self._profiles[profile.id] = profile.model_copy(deep=True)

    async def list_profile_ids(self) -> list[str]:
        return list(self._profiles)

    # --- Attribute index ---

    async def get_attribute(self, signal: Signal, value: str) -> AttributeEntry | None:
        entry = self._attributes.get((signal, value))
        return entry.model_copy(deep=True) if entry else None

    async def insert_attribute(self, entry: AttributeEntry) -> AttributeEntry:
        key = (entry.signal, entry.value)
        if key not in self._attributes:
            members = list(dict.fromkeys(entry.member_ids))
            self._attributes[key] = entry.model_copy(update={"member_ids": members}, deep=True)
        return self._attributes[key].model_copy(deep=True)

    async def add_attribute_member(
        self, signal: Signal, value: str, profile_id: str
    ) -> bool:
        entry = self._attributes.get((signal, value))
        if entry is None:
            raise KeyError(f"No {signal.value} entry for {value!r}")
        if profile_id in entry.member_ids:
            return False
        entry.member_ids.append(profile_id)
        return True

    async def remove_attribute_member(
        self, signal: Signal, value: str, profile_id: str
    ) -> bool:
        entry = self._attributes.get((signal, value))
        if entry is None or profile_id not in entry.member_ids:
            return False
        entry.member_ids.remove(profile_id)
        return True

    async def count_attributes(self, signal: Signal) -> int:
        return sum(1 for sig, _ in self._attributes if sig == signal)

    # --- Vector queries ---

    async def query_attributes(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[SimilarityMatch]:
        entries = [e for (sig, _), e in self._attributes.items() if sig == signal]
        if not entries:
            return []
        matrix = np.asarray([e.vector for e in entries], dtype=np.float64)
        by_value = {e.value: e for e in entries}
        hits = top_matches(vector, list(by_value), matrix, floor, top_k)
        return [
            SimilarityMatch(value=value, score=score, member_ids=list(by_value[value].member_ids))
            for value, score in hits
        ]

    async def query_profile_averages(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[ProfileMatch]:
        keys: list[str] = []
        rows: list[list[float]] = []
        for pid, profile in self._profiles.items():
            avg = profile.average_embedding(signal)
            if avg is not None:
                keys.append(pid)
                rows.append(avg)
        if not rows:
            return []
        hits = top_matches(vector, keys, np.asarray(rows, dtype=np.float64), floor, top_k)
        return [ProfileMatch(profile_id=pid, score=score) for pid, score in hits]
