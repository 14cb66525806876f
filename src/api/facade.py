# src/api/facade.py — v3
"""Public API facade — single entry point for ranking requests.

Usage:
    from candidaterank.api.facade import rank
    response = await rank(RankingRequest(seeds=[...]))
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from candidaterank.api.models import (
    ConfigOverrides,
    EntryPointReport,
    RankingRequest,
    RankingResponse,
)
from candidaterank.calls.retry import RateLimitedCaller, build_caller
from candidaterank.config.settings import Settings
from candidaterank.core.errors import CandidateRankError
from candidaterank.core.models import RankedProfile
from candidaterank.embeddings.base_embedder import BaseEmbedder
from candidaterank.embeddings.embedder_factory import create_embedder
from candidaterank.index.attribute_index import AttributeIndex
from candidaterank.index.lock_pool import KeyedLockPool
from candidaterank.index.vector_query import VectorSimilarityQuery
from candidaterank.ingest.base_source import (
    LocationClassifier,
    ProfileSource,
    SkillClassifier,
)
from candidaterank.ingest.ingestor import ProfileIngestor
from candidaterank.ingest.seed_resolver import SeedResolver
from candidaterank.logging.context import (
    clear_context,
    set_entry_point_context,
    set_request_context,
)
from candidaterank.ranking.criteria import FilterCriteria
from candidaterank.ranking.filter_ranker import FilterRanker
from candidaterank.ranking.merger import merge_results
from candidaterank.ranking.seed_ranker import SeedRanker
from candidaterank.store.base_store import BaseStore
from candidaterank.store.store_factory import create_store

logger = logging.getLogger(__name__)


@dataclass
class _EntryPointOutcome:
    report: EntryPointReport
    results: list[RankedProfile]
    message: str | None = None


@dataclass
class _Engine:
    settings: Settings
    resolver: SeedResolver
    seed_ranker: SeedRanker
    filter_ranker: FilterRanker


async def rank(
    request: RankingRequest,
    settings: Settings | None = None,
    store: BaseStore | None = None,
    embedder: BaseEmbedder | None = None,
    caller: RateLimitedCaller | None = None,
    sources: Sequence[ProfileSource] = (),
    location_classifier: LocationClassifier | None = None,
    skill_classifier: SkillClassifier | None = None,
    lock_pool: KeyedLockPool | None = None,
    identity_lock_pool: KeyedLockPool | None = None,
) -> RankingResponse:
    """Rank profiles for a seed list and/or a filter.

    Never raises for missing data: unresolvable seeds, rejected signals and
    empty matches are reported in the response.

    Args:
        request: Seeds and/or filter criteria.
        settings: Global settings. Loaded from .env if None.
        store: Profile and attribute store. Built from settings if None
            and closed when the request ends.
        embedder: Embedding provider. Built from settings if None.
        caller: Rate-limited call wrapper. Pass one shared instance to
            have a single cooldown across concurrent requests.
        sources: Scrapers used for seeds missing from the store.
        location_classifier: Optional location normalizer for ingestion.
        skill_classifier: Optional skill extractor for ingestion.
        lock_pool: Attribute lock pool, shared across requests if given.
        identity_lock_pool: Profile identity lock pool, shared across
            requests if given. Must be a different pool from ``lock_pool``.

    Returns:
        RankingResponse with merged results and per-entry-point reports.
    """
    settings = _apply_overrides(settings or Settings(), request.config_overrides)
    request_id = request.request_id or _generate_request_id()
    set_request_context(request_id)

    embedder = embedder or create_embedder(settings)
    caller = caller or build_caller(settings)
    owns_store = store is None
    store = store or create_store(settings)
    engine = _build_engine(
        settings,
        store,
        embedder,
        caller,
        sources,
        location_classifier,
        skill_classifier,
        lock_pool or KeyedLockPool(settings.lock_shards),
        identity_lock_pool or KeyedLockPool(settings.lock_shards),
    )

    logger.info(
        "Ranking request: seeds=%d, filter=%s",
        len(request.seeds),
        request.filter is not None,
    )
    try:
        work = _run(request, request_id, engine)
        if settings.request_timeout_s is not None:
            return await asyncio.wait_for(work, timeout=settings.request_timeout_s)
        return await work
    except asyncio.TimeoutError:
        logger.error("Request %s timed out after %ss", request_id, settings.request_timeout_s)
        return _failure(request_id, f"Request timed out after {settings.request_timeout_s}s")
    except CandidateRankError as e:
        logger.error("Request %s failed: %s", request_id, e, exc_info=True)
        return _failure(request_id, str(e))
    finally:
        if owns_store:
            store.close()
        clear_context()


def _build_engine(
    settings: Settings,
    store: BaseStore,
    embedder: BaseEmbedder,
    caller: RateLimitedCaller,
    sources: Sequence[ProfileSource],
    location_classifier: LocationClassifier | None,
    skill_classifier: SkillClassifier | None,
    lock_pool: KeyedLockPool,
    identity_lock_pool: KeyedLockPool,
) -> _Engine:
    index = AttributeIndex(store, embedder, caller, lock_pool)
    query = VectorSimilarityQuery(store, embedder, settings, caller)
    ingestor = ProfileIngestor(
        store,
        index,
        caller,
        location_classifier=location_classifier,
        skill_classifier=skill_classifier,
        identity_locks=identity_lock_pool,
    )
    return _Engine(
        settings=settings,
        resolver=SeedResolver(
            store, ingestor, sources, caller, batch_size=settings.seed_batch_size
        ),
        seed_ranker=SeedRanker(query, settings),
        filter_ranker=FilterRanker(store, query, settings),
    )


async def _run(request: RankingRequest, request_id: str, engine: _Engine) -> RankingResponse:
    tasks = []
    if request.seeds:
        tasks.append(_rank_seeds(request, engine))
    if request.filter is not None:
        tasks.append(_rank_filter(request.filter, engine))

    if not tasks:
        return _failure(request_id, "Request has neither seeds nor filter criteria")

    outcomes: list[_EntryPointOutcome] = list(await asyncio.gather(*tasks))
    messages = [o.message for o in outcomes if o.message]

    if not any(o.report.usable for o in outcomes):
        response = _failure(request_id, "; ".join(messages) or "No usable input")
        response.entry_points = [o.report for o in outcomes]
        return response

    merged = merge_results(
        *(o.results for o in outcomes), max_results=engine.settings.max_results
    )
    logger.info("Request %s ranked %d profiles", request_id, len(merged))
    return RankingResponse(
        request_id=request_id,
        success=True,
        messages=messages,
        results=merged,
        total=len(merged),
        entry_points=[o.report for o in outcomes],
    )


async def _rank_seeds(request: RankingRequest, engine: _Engine) -> _EntryPointOutcome:
    set_entry_point_context("seeds")
    seeds = await engine.resolver.resolve(request.seeds)
    if not seeds:
        return _EntryPointOutcome(
            report=EntryPointReport(entry_point="seeds", usable=False, seeds_resolved=0),
            results=[],
            message="No seeds could be resolved",
        )

    accepted = engine.seed_ranker.accepted_signals(seeds)
    report = EntryPointReport(
        entry_point="seeds",
        usable=bool(accepted),
        accepted_signals=sorted(accepted, key=lambda s: s.value),
        seeds_resolved=len(seeds),
    )
    if not accepted:
        return _EntryPointOutcome(
            report=report, results=[], message="No signal is shared closely enough by the seeds"
        )

    results = await engine.seed_ranker.rank(seeds, weights=request.seed_weights)
    report.candidates = len(results)
    return _EntryPointOutcome(report=report, results=results)


async def _rank_filter(criteria: FilterCriteria, engine: _Engine) -> _EntryPointOutcome:
    set_entry_point_context("filter")
    weights = criteria.weights()
    report = EntryPointReport(
        entry_point="filter",
        usable=bool(weights),
        accepted_signals=sorted(weights, key=lambda s: s.value),
    )
    if not weights:
        return _EntryPointOutcome(report=report, results=[], message="Filter has no criteria")

    results = await engine.filter_ranker.rank(criteria)
    report.candidates = len(results)
    return _EntryPointOutcome(report=report, results=results)


def _failure(request_id: str, error: str) -> RankingResponse:
    return RankingResponse(request_id=request_id, success=False, error=error, messages=[error])


def _apply_overrides(settings: Settings, overrides: ConfigOverrides | None) -> Settings:
    """Apply per-request config overrides if provided."""
    if overrides is None:
        return settings
    values = overrides.model_dump(exclude_none=True)
    if not values:
        return settings
    current = settings.model_dump()
    current.update(values)
    return Settings(**current)


def _generate_request_id() -> str:
    """Generate a request ID: yyyymmdd_hhmmss_{uuid4_short}."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{ts}_{uuid.uuid4().hex[:8]}"
