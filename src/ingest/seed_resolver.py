# src/ingest/seed_resolver.py — v2
"""Resolve seed identifiers to stored profiles, scraping those not yet known."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from candidaterank.calls.retry import RateLimitedCaller
from candidaterank.core.errors import CandidateRankError
from candidaterank.core.models import Profile
from candidaterank.ingest.base_source import ProfileSource
from candidaterank.ingest.identifiers import (
    IdentifierKind,
    classify_identifier,
    parse_github_login,
)
from candidaterank.ingest.ingestor import ProfileIngestor
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)


class SeedResolver:
    """Looks up seeds in the store, falling back to scrape-and-ingest.

    Seeds are resolved in batches of ``batch_size`` concurrent lookups to
    bound outbound calls. An unresolvable seed is logged and dropped.
    """

    def __init__(
        self,
        store: BaseStore,
        ingestor: ProfileIngestor,
        sources: Sequence[ProfileSource],
        caller: RateLimitedCaller,
        batch_size: int = 50,
    ) -> None:
        self._store = store
        self._ingestor = ingestor
        self._sources = list(sources)
        self._caller = caller
        self._batch_size = batch_size

    async def _lookup(self, identifier: str) -> Profile | None:
        kind, key = classify_identifier(identifier)
        if kind == IdentifierKind.LINKEDIN:
            return await self._store.find_profile_by_url(key)
        if kind == IdentifierKind.GITHUB:
            return await self._store.find_profile_by_github(key)

        profile = await self._store.get_profile(key)
        if profile is None:
            login = parse_github_login(key)
            if login:
                profile = await self._store.find_profile_by_github(login)
        return profile

    async def _scrape(self, identifier: str) -> Profile | None:
        source = next((s for s in self._sources if s.handles(identifier)), None)
        if source is None:
            logger.warning("No source can fetch seed %r", identifier)
            return None

        raw = await self._caller.execute(
            source.fetch_profile, identifier, call_name=f"{source.source_name}.fetch_profile"
        )
        if raw is None:
            logger.warning("Seed %r unavailable from %s", identifier, source.source_name)
            return None
        return await self._ingestor.ingest(raw)

    async def resolve_one(self, identifier: str) -> Profile | None:
        try:
            profile = await self._lookup(identifier)
            if profile is None:
                logger.info("Seed %r not stored; scraping", identifier)
                profile = await self._scrape(identifier)
            return profile
        except CandidateRankError as e:
            logger.warning("Failed to resolve seed %r: %s", identifier, e)
            return None

    async def resolve(self, identifiers: Sequence[str]) -> list[Profile]:
        """Resolve seeds to profiles, in input order, without duplicates.

        Identifiers naming the same LinkedIn or GitHub profile (differing
        only in case, scheme or trailing path) are resolved once.
        """
        by_key: dict[tuple[IdentifierKind, str], str] = {}
        for identifier in identifiers:
            if identifier and identifier.strip():
                by_key.setdefault(classify_identifier(identifier), identifier.strip())
        unique = list(by_key.values())
        resolved: dict[str, Profile] = {}

        for start in range(0, len(unique), self._batch_size):
            batch = unique[start : start + self._batch_size]
            profiles = await asyncio.gather(*(self.resolve_one(i) for i in batch))
            for profile in profiles:
                if profile is not None:
                    resolved.setdefault(profile.id, profile)

        logger.info("Resolved %d of %d seeds", len(resolved), len(unique))
        return list(resolved.values())
