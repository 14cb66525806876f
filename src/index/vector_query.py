# src/index/vector_query.py — v1
"""Vector similarity queries over the attribute index and profile averages."""

from __future__ import annotations

import logging

from candidaterank.calls.retry import RateLimitedCaller
from candidaterank.config.settings import Settings
from candidaterank.core.models import ProfileMatch, Signal, SimilarityMatch, normalize_value
from candidaterank.embeddings.base_embedder import BaseEmbedder
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)


class VectorSimilarityQuery:
    """Cosine queries with signal-specific floors and result caps.

    An empty result means nothing scored above the floor; it is never an error.
    """

    def __init__(
        self,
        store: BaseStore,
        embedder: BaseEmbedder,
        settings: Settings,
        caller: RateLimitedCaller,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._settings = settings
        self._caller = caller

    async def query(
        self,
        signal: Signal,
        vector: list[float],
        floor: float | None = None,
        top_k: int | None = None,
    ) -> list[SimilarityMatch]:
        """Attribute values of ``signal`` scoring above ``floor``, best first."""
        floor = self._settings.floor_for(signal) if floor is None else floor
        top_k = self._settings.top_k_for(signal) if top_k is None else top_k
        matches = await self._store.query_attributes(signal, vector, floor, top_k)
        logger.debug("%s query: %d matches above %.2f", signal.value, len(matches), floor)
        return matches

    async def query_text(
        self,
        signal: Signal,
        text: str,
        floor: float | None = None,
        top_k: int | None = None,
    ) -> list[SimilarityMatch]:
        """Embed the normalized ``text`` and query with the result.

        Returns an empty list when the text cannot be embedded.
        """
        text = normalize_value(text)
        vector = await self._caller.execute(self._embedder.embed, text, call_name="embed")
        if vector is None:
            logger.warning("Could not embed %s query %r; skipping", signal.value, text)
            return []
        return await self.query(signal, vector, floor=floor, top_k=top_k)

    async def query_profiles(
        self,
        signal: Signal,
        vector: list[float],
        floor: float | None = None,
        top_k: int | None = None,
    ) -> list[ProfileMatch]:
        """Profiles whose average embedding for ``signal`` scores above ``floor``."""
        floor = self._settings.seed_similarity_floor if floor is None else floor
        top_k = self._settings.seed_top_k if top_k is None else top_k
        return await self._store.query_profile_averages(signal, vector, floor, top_k)
