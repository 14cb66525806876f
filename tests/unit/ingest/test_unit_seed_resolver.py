# tests/unit/ingest/test_unit_seed_resolver.py — v2
"""Tests for ingest/seed_resolver.py — lookup, scrape fallback and batching."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeSource, github_raw

from candidaterank.core.errors import StoreError
from candidaterank.core.models import Profile, RawProfile
from candidaterank.ingest.seed_resolver import SeedResolver


@pytest.fixture
def github():
    return FakeSource(
        {
            "https://github.com/octo": github_raw("octo", skills=["Rust"]),
            "https://github.com/cat": github_raw("cat", skills=["Python"]),
        },
        prefix="https://github.com/",
    )


class TestResolve:
    @pytest.mark.asyncio
    async def test_stored_profile_by_id(self, store, ingestor, caller, github):
        await store.upsert_profile(Profile(id="p_007", name="Bond"))
        resolver = SeedResolver(store, ingestor, [github], caller)
        result = await resolver.resolve(["p_007"])
        assert [p.name for p in result] == ["Bond"]
        assert github.fetched == []

    @pytest.mark.asyncio
    async def test_stored_profile_by_linkedin_url(self, store, ingestor, caller):
        await store.upsert_profile(Profile(id="p1", linkedin_url="jane-doe"))
        resolver = SeedResolver(store, ingestor, [], caller)
        result = await resolver.resolve(["https://www.linkedin.com/in/Jane-Doe/?trk=x"])
        assert [p.id for p in result] == ["p1"]

    @pytest.mark.asyncio
    async def test_bare_login_falls_back_to_github_lookup(self, store, ingestor, caller):
        await store.upsert_profile(Profile(id="p1", github_login="octo"))
        resolver = SeedResolver(store, ingestor, [], caller)
        assert [p.id for p in await resolver.resolve(["octo"])] == ["p1"]

    @pytest.mark.asyncio
    async def test_unknown_seed_is_scraped_and_ingested(self, store, ingestor, caller, github):
        resolver = SeedResolver(store, ingestor, [github], caller)
        result = await resolver.resolve(["https://github.com/octo"])

        assert len(result) == 1
        assert result[0].github_login == "octo"
        assert github.fetched == ["https://github.com/octo"]
        assert await store.find_profile_by_github("octo") is not None

    @pytest.mark.asyncio
    async def test_unresolvable_seeds_dropped(self, store, ingestor, caller, github):
        resolver = SeedResolver(store, ingestor, [github], caller)
        result = await resolver.resolve(
            ["https://github.com/ghost", "https://example.com/nobody", "https://github.com/cat"]
        )
        assert [p.github_login for p in result] == ["cat"]

    @pytest.mark.asyncio
    async def test_duplicates_collapsed(self, store, ingestor, caller):
        await store.upsert_profile(Profile(id="p1", github_login="octo"))
        resolver = SeedResolver(store, ingestor, [], caller)
        result = await resolver.resolve(["p1", "github.com/octo", " p1 ", ""])
        assert [p.id for p in result] == ["p1"]

    @pytest.mark.asyncio
    async def test_spellings_of_one_handle_scraped_once(self, store, ingestor, caller, github):
        resolver = SeedResolver(store, ingestor, [github], caller)
        result = await resolver.resolve(
            ["https://github.com/octo", "https://github.com/OCTO", "github.com/octo/"]
        )
        assert [p.github_login for p in result] == ["octo"]
        assert github.fetched == ["https://github.com/octo"]
        assert await store.list_profile_ids() == ["p001"]

    @pytest.mark.asyncio
    async def test_store_failure_drops_seed(self, store, ingestor, caller, monkeypatch):
        async def broken(profile_id):
            raise StoreError("disk full")

        monkeypatch.setattr(store, "get_profile", broken)
        resolver = SeedResolver(store, ingestor, [], caller)
        assert await resolver.resolve(["p1"]) == []

    @pytest.mark.asyncio
    async def test_batches_bound_concurrency(self, store, ingestor, caller):
        active = 0
        peak = 0

        class _SlowSource(FakeSource):
            async def fetch_profile(self, identifier: str) -> RawProfile | None:
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0)
                active -= 1
                return None

        resolver = SeedResolver(store, ingestor, [_SlowSource()], caller, batch_size=3)
        seeds = [f"https://github.com/u{i}" for i in range(8)]
        assert await resolver.resolve(seeds) == []
        assert peak == 3
