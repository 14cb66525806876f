# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a deterministic fake embedder, an in-memory store, a zero-cooldown
call wrapper and sample profiles. No external dependencies — no network.
"""

from __future__ import annotations

import asyncio
import hashlib
import math

import pytest

from candidaterank.calls.retry import CooldownState, RateLimitedCaller
from candidaterank.config.settings import Settings
from candidaterank.core.models import Profile, RawProfile, Signal
from candidaterank.embeddings.base_embedder import BaseEmbedder
from candidaterank.index.attribute_index import AttributeIndex
from candidaterank.index.lock_pool import KeyedLockPool
from candidaterank.index.vector_query import VectorSimilarityQuery
from candidaterank.ingest.base_source import ProfileSource
from candidaterank.ingest.ingestor import ProfileIngestor
from candidaterank.store.memory_store import MemoryStore

DIMS = 4


def unit(*components: float) -> list[float]:
    """Scale a vector to unit length."""
    norm = math.sqrt(sum(c * c for c in components))
    return [c / norm for c in components]


def at_similarity(sim: float) -> list[float]:
    """Vector whose cosine with [1, 0, 0, 0] is exactly ``sim``."""
    return [sim, math.sqrt(1.0 - sim * sim), 0.0, 0.0]


# Explicit vocabulary: related terms point in nearby directions.
VOCABULARY: dict[str, list[float]] = {
    "rust": unit(1.0, 0.0, 0.0, 0.0),
    "rust programming": unit(0.98, 0.2, 0.0, 0.0),
    "c++": unit(0.8, 0.6, 0.0, 0.0),
    "python": unit(0.0, 1.0, 0.0, 0.0),
    "django": unit(0.1, 0.99, 0.0, 0.0),
    "new york": unit(0.0, 0.0, 1.0, 0.0),
    "new york city": unit(0.0, 0.05, 0.999, 0.0),
    "brooklyn, new york": unit(0.0, 0.3, 0.95, 0.0),
    "san francisco": unit(0.0, 0.0, 0.0, 1.0),
    "software engineer": unit(0.6, 0.0, 0.0, 0.8),
    "backend engineer": unit(0.55, 0.1, 0.0, 0.83),
    "designer": unit(0.0, 0.0, 0.6, 0.8),
    "mit": unit(0.3, 0.3, 0.3, 0.85),
    "stanford": unit(0.85, 0.3, 0.3, 0.3),
    "computer science": unit(0.5, 0.5, 0.5, 0.5),
    "acme": unit(0.2, 0.2, 0.9, 0.3),
}


class FakeEmbedder(BaseEmbedder):
    """Deterministic embedder: vocabulary lookup with a hash fallback.

    Records every text it embeds. Texts in ``fail_on`` raise; queued
    ``errors`` are raised one per call before any vector is returned.
    """

    def __init__(
        self,
        table: dict[str, list[float]] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        self._table = dict(VOCABULARY if table is None else table)
        self._fail_on = fail_on or set()
        self.errors: list[Exception] = []
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        await asyncio.sleep(0)  # yield so concurrent callers interleave
        if self.errors:
            raise self.errors.pop(0)
        if text in self._fail_on:
            raise RuntimeError(f"embedding service rejected {text!r}")
        if text in self._table:
            return list(self._table[text])
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return unit(*(b / 255.0 - 0.5 for b in digest[:DIMS]))

    @property
    def dimensions(self) -> int:
        return DIMS

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-vocab"


# === FIXTURES: Infrastructure ===


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        store_backend="memory",
        embedding_dimensions=DIMS,
        rate_limit_cooldown_s=0,
        request_timeout_s=30,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def caller() -> RateLimitedCaller:
    return RateLimitedCaller(CooldownState(cooldown_s=0))


@pytest.fixture
def index(store, embedder, caller) -> AttributeIndex:
    return AttributeIndex(store, embedder, caller, KeyedLockPool(8))


@pytest.fixture
def vector_query(store, embedder, settings, caller) -> VectorSimilarityQuery:
    return VectorSimilarityQuery(store, embedder, settings, caller)


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_profile() -> Profile:
    """Minimal valid Profile with one value per embedding signal."""
    return Profile(
        id="p_001",
        name="Ada",
        github_login="ada",
        skills=["Rust", "Python"],
        job_titles=["Software Engineer"],
        companies=["Acme"],
        company_ids=["c_acme"],
        schools=["MIT"],
        fields_of_study=["Computer Science"],
        location="New York",
        sources=["github"],
        average_embeddings={
            Signal.SKILLS: unit(1.0, 1.0, 0.0, 0.0),
            Signal.LOCATION: VOCABULARY["new york"],
        },
    )


class FakeSource(ProfileSource):
    """In-memory profile source keyed by lower-case handle or URL."""

    def __init__(
        self,
        profiles: dict[str, RawProfile] | None = None,
        name: str = "github",
        prefix: str = "",
    ) -> None:
        self._profiles = {k.lower(): v for k, v in (profiles or {}).items()}
        self._name = name
        self._prefix = prefix
        self.fetched: list[str] = []

    @property
    def source_name(self) -> str:
        return self._name

    def handles(self, identifier: str) -> bool:
        return identifier.lower().startswith(self._prefix)

    async def fetch_profile(self, identifier: str) -> RawProfile | None:
        self.fetched.append(identifier)
        await asyncio.sleep(0)
        return self._profiles.get(identifier.lower())


def github_raw(handle: str, connections: list[str] | None = None, **kwargs) -> RawProfile:
    return RawProfile(source="github", handle=handle, connections=connections or [], **kwargs)


@pytest.fixture
def ingestor(store, index, caller) -> ProfileIngestor:
    counter = iter(range(1, 10_000))
    return ProfileIngestor(store, index, caller, id_factory=lambda: f"p{next(counter):03d}")
