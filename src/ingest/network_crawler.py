# src/ingest/network_crawler.py — v1
"""Bounded breadth-first crawl of a profile's follow network.

A FIFO worklist with a visited set replaces recursion: each handle is
fetched at most once, handles deeper than ``max_depth`` are never
enqueued, and the crawl stops after ``max_profiles`` ingested profiles.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Sequence

import networkx as nx

from candidaterank.calls.retry import RateLimitedCaller
from candidaterank.core.errors import CandidateRankError
from candidaterank.ingest.base_source import ProfileSource
from candidaterank.ingest.ingestor import ProfileIngestor

logger = logging.getLogger(__name__)


@dataclass
class CrawlResult:
    """Explored follow graph (handle -> followed handle) and ingested profiles."""

    graph: nx.DiGraph
    profile_ids: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    truncated: bool = False


class NetworkCrawler:
    """Ingests start handles and the accounts they connect to."""

    def __init__(
        self,
        source: ProfileSource,
        ingestor: ProfileIngestor,
        caller: RateLimitedCaller,
        max_depth: int = 2,
        max_profiles: int = 500,
    ) -> None:
        self._source = source
        self._ingestor = ingestor
        self._caller = caller
        self._max_depth = max_depth
        self._max_profiles = max_profiles

    async def crawl(self, start_handles: Sequence[str]) -> CrawlResult:
        result = CrawlResult(graph=nx.DiGraph())
        queue: deque[tuple[str, int]] = deque()
        visited: set[str] = set()

        for handle in start_handles:
            key = handle.strip().lower()
            if key and key not in visited:
                visited.add(key)
                queue.append((key, 0))

        while queue:
            if len(result.profile_ids) >= self._max_profiles:
                result.truncated = True
                logger.info("Crawl stopped at %d profiles", len(result.profile_ids))
                break

            handle, depth = queue.popleft()
            raw = await self._caller.execute(
                self._source.fetch_profile,
                handle,
                call_name=f"{self._source.source_name}.fetch_profile",
            )
            if raw is None:
                result.skipped.append(handle)
                continue

            try:
                profile = await self._ingestor.ingest(raw)
            except CandidateRankError as e:
                logger.warning("Failed to ingest %s: %s", handle, e)
                result.skipped.append(handle)
                continue

            result.profile_ids.append(profile.id)
            result.graph.add_node(handle, profile_id=profile.id, depth=depth)

            for connection in raw.connections:
                target = connection.strip().lower()
                if not target:
                    continue
                result.graph.add_edge(handle, target)
                if depth < self._max_depth and target not in visited:
                    visited.add(target)
                    queue.append((target, depth + 1))

        logger.info(
            "Crawled %d profiles (%d skipped, %d edges)",
            len(result.profile_ids),
            len(result.skipped),
            result.graph.number_of_edges(),
        )
        return result
