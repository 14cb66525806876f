# src/ingest/ingestor.py — v2
"""Build and index profiles from raw upstream payloads.

Every attribute value is upserted into the attribute index and the
profile's per-signal average embeddings are recomputed from the resulting
vectors. A value that fails to embed is logged and left out; the profile
is still stored with what succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable

from candidaterank.calls.retry import RateLimitedCaller
from candidaterank.core.errors import EmbeddingError
from candidaterank.core.models import (
    EMBEDDING_SIGNALS,
    Profile,
    RawProfile,
    Signal,
)
from candidaterank.core.similarity import average_embedding
from candidaterank.index.attribute_index import AttributeIndex
from candidaterank.index.lock_pool import KeyedLockPool
from candidaterank.ingest.base_source import LocationClassifier, SkillClassifier
from candidaterank.ingest.identifiers import (
    GITHUB,
    LINKEDIN,
    normalize_linkedin_url,
)
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)

_LIST_FIELDS = ("skills", "job_titles", "companies", "company_ids", "schools", "fields_of_study")


def _distinct(values: list[str | None]) -> list[str]:
    return list(dict.fromkeys(v.strip() for v in values if v and v.strip()))


def _contributions(profile: Profile) -> dict[str, dict[str, list[str]]]:
    """List values per source; untracked rows are credited to their first source."""
    if profile.source_attributes:
        return {src: dict(values) for src, values in profile.source_attributes.items()}
    owner = profile.sources[0] if profile.sources else ""
    return {owner: {field: list(getattr(profile, field)) for field in _LIST_FIELDS}}


def _merge(existing: Profile, incoming: Profile) -> Profile:
    """Combine data already stored for a person with a fresh payload.

    The incoming source's list values replace what that source reported
    before; values from other sources are kept.
    """
    contributions = _contributions(existing)
    contributions.update(incoming.source_attributes)
    update: dict = {
        field: _distinct([v for values in contributions.values() for v in values.get(field, [])])
        for field in _LIST_FIELDS
    }
    update["source_attributes"] = contributions
    update["sources"] = _distinct([*existing.sources, *incoming.sources])
    update["name"] = incoming.name or existing.name
    update["location"] = incoming.location or existing.location
    update["linkedin_url"] = incoming.linkedin_url or existing.linkedin_url
    update["github_login"] = incoming.github_login or existing.github_login
    update["is_platform_user"] = existing.is_platform_user or incoming.is_platform_user
    for metric in ("followers", "following", "total_contributions", "total_stars"):
        update[metric] = getattr(incoming, metric) or getattr(existing, metric)
    merged = existing.model_copy(update=update)
    merged.follower_to_following_ratio = _ratio(merged.followers, merged.following)
    return merged


def _identity_key(raw: RawProfile) -> str | None:
    if raw.source == LINKEDIN and raw.url:
        return f"{LINKEDIN}:{normalize_linkedin_url(raw.url)}"
    if raw.source == GITHUB and raw.handle:
        return f"{GITHUB}:{raw.handle.lower()}"
    return None


def _ratio(followers: int, following: int) -> float:
    return followers / following if following else float(followers)


class ProfileIngestor:
    """Turns RawProfile payloads into stored, indexed profiles."""

    def __init__(
        self,
        store: BaseStore,
        index: AttributeIndex,
        caller: RateLimitedCaller,
        location_classifier: LocationClassifier | None = None,
        skill_classifier: SkillClassifier | None = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        identity_locks: KeyedLockPool | None = None,
    ) -> None:
        self._store = store
        self._index = index
        self._caller = caller
        self._location_classifier = location_classifier
        self._skill_classifier = skill_classifier
        self._id_factory = id_factory
        # Never the attribute index pool: identity locks are held while indexing.
        self._identity_locks = identity_locks or KeyedLockPool()

    async def _find_existing(self, raw: RawProfile) -> Profile | None:
        if raw.source == LINKEDIN and raw.url:
            return await self._store.find_profile_by_url(normalize_linkedin_url(raw.url))
        if raw.source == GITHUB and raw.handle:
            return await self._store.find_profile_by_github(raw.handle)
        return None

    async def _classify(self, raw: RawProfile) -> tuple[list[str], str | None]:
        """Classifier skills and normalized location; failures fall back to raw data."""
        skills: list[str] = []
        if self._skill_classifier is not None:
            extraction = await self._caller.execute(
                self._skill_classifier.extract_skills, raw, call_name="extract_skills"
            )
            if extraction is not None:
                skills = [*extraction.tech, *extraction.features]

        location = raw.location
        if raw.location and self._location_classifier is not None:
            label = await self._caller.execute(
                self._location_classifier.normalize_location,
                raw.location,
                call_name="normalize_location",
            )
            location = label or raw.location
        return skills, location

    def _build(self, raw: RawProfile, profile_id: str, skills: list[str], location: str | None) -> Profile:
        values = {
            "skills": _distinct([*raw.skills, *skills]),
            "job_titles": _distinct([p.title for p in raw.positions]),
            "companies": _distinct([p.company_name for p in raw.positions]),
            "company_ids": _distinct([p.company_id for p in raw.positions]),
            "schools": _distinct([e.school_name for e in raw.education]),
            "fields_of_study": _distinct([e.field_of_study for e in raw.education]),
        }
        return Profile(
            id=profile_id,
            name=raw.name,
            linkedin_url=normalize_linkedin_url(raw.url) if raw.source == LINKEDIN and raw.url else None,
            github_login=raw.handle.lower() if raw.source == GITHUB and raw.handle else None,
            **values,
            location=location,
            sources=[raw.source],
            source_attributes={raw.source: {k: list(v) for k, v in values.items()}},
            is_platform_user=raw.is_platform_user,
            followers=raw.followers,
            following=raw.following,
            total_contributions=raw.total_contributions,
            total_stars=raw.total_stars,
            follower_to_following_ratio=_ratio(raw.followers, raw.following),
        )

    async def ingest(self, raw: RawProfile) -> Profile:
        """Create or update the profile described by ``raw``.

        An existing profile (same LinkedIn URL or GitHub login) keeps its id;
        the list values this source reported before are replaced by the new
        payload. Ingests of one identity are serialized so a person is only
        ever created once.

        Raises:
            StoreError: If the profile cannot be persisted.
        """
        key = _identity_key(raw)
        if key is None:
            return await self._ingest_unlocked(raw)
        async with self._identity_locks.hold(key):
            return await self._ingest_unlocked(raw)

    async def _ingest_unlocked(self, raw: RawProfile) -> Profile:
        existing = await self._find_existing(raw)
        skills, location = await self._classify(raw)
        built = self._build(raw, existing.id if existing else self._id_factory(), skills, location)
        profile = _merge(existing, built) if existing else built
        logger.info(
            "Ingesting %s profile %s (%s)",
            raw.source,
            raw.handle,
            "update" if existing else "new",
        )
        return await self._index_profile(profile, existing)

    async def refresh(self, profile: Profile) -> Profile:
        """Re-index a profile whose attributes changed and store it.

        Values the profile no longer declares lose it as a member.
        """
        previous = await self._store.get_profile(profile.id)
        return await self._index_profile(profile, previous)

    async def _index_signal(self, profile: Profile, signal: Signal) -> list[list[float]]:
        values = profile.attribute_values(signal)
        results = await asyncio.gather(
            *(self._index.upsert(signal, value, profile.id) for value in values),
            return_exceptions=True,
        )
        vectors: list[list[float]] = []
        for value, result in zip(values, results):
            if isinstance(result, EmbeddingError):
                logger.warning(
                    "Skipping %s value %r for %s: %s", signal.value, value, profile.id, result
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                vectors.append(result)
        return vectors

    async def _index_profile(self, profile: Profile, previous: Profile | None) -> Profile:
        profile = profile.model_copy(deep=True)
        for signal in EMBEDDING_SIGNALS:
            vectors = await self._index_signal(profile, signal)
            average = average_embedding(vectors)
            if average is None:
                profile.average_embeddings.pop(signal, None)
            else:
                profile.average_embeddings[signal] = average

            if previous is not None:
                dropped = set(previous.attribute_values(signal)) - set(
                    profile.attribute_values(signal)
                )
                for value in sorted(dropped):
                    await self._index.remove(signal, value, profile.id)

        await self._store.upsert_profile(profile)
        return profile
