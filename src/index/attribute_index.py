# src/index/attribute_index.py — v1
"""Deduplicating attribute index.

Each distinct normalized value of a signal is embedded once and stored
once; profiles declaring the value are attached to its membership list.
The lock for (signal, value) covers lookup, embedding and insert, so two
concurrent upserts of one value cannot both create an entry.
"""

from __future__ import annotations

import logging

from candidaterank.calls.retry import RateLimitedCaller
from candidaterank.core.errors import EmbeddingError
from candidaterank.core.models import AttributeEntry, Signal, normalize_value
from candidaterank.embeddings.base_embedder import BaseEmbedder
from candidaterank.index.lock_pool import KeyedLockPool
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)


class AttributeIndex:
    """Upsert and remove attribute values with per-value serialization."""

    def __init__(
        self,
        store: BaseStore,
        embedder: BaseEmbedder,
        caller: RateLimitedCaller,
        lock_pool: KeyedLockPool | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._caller = caller
        self._locks = lock_pool or KeyedLockPool()

    @staticmethod
    def _lock_key(signal: Signal, value: str) -> str:
        return f"{signal.value}:{value}"

    async def upsert(self, signal: Signal, raw_value: str, profile_id: str) -> list[float]:
        """Attach ``profile_id`` to the entry for ``raw_value``, creating it if absent.

        Args:
            signal: Signal type the value belongs to.
            raw_value: Attribute text as declared by the profile.
            profile_id: Profile declaring the value.

        Returns:
            The entry's embedding vector.

        Raises:
            ValueError: If the value is empty after normalization.
            EmbeddingError: If a new value could not be embedded. Nothing
                is stored in that case, so the upsert can be retried.
        """
        value = normalize_value(raw_value)
        if not value:
            raise ValueError("Cannot index an empty attribute value")

        async with self._locks.hold(self._lock_key(signal, value)):
            entry = await self._store.get_attribute(signal, value)
            if entry is not None:
                if await self._store.add_attribute_member(signal, value, profile_id):
                    logger.debug("Added %s to %s/%r", profile_id, signal.value, value)
                return entry.vector

            try:
                vector = await self._caller.execute_strict(
                    self._embedder.embed, value, call_name="embed"
                )
            except Exception as e:
                raise EmbeddingError(value, e) from e

            stored = await self._store.insert_attribute(
                AttributeEntry(
                    signal=signal, value=value, vector=vector, member_ids=[profile_id]
                )
            )
            logger.debug("Indexed new %s value %r", signal.value, value)
            return stored.vector

    async def remove(self, signal: Signal, raw_value: str, profile_id: str) -> bool:
        """Detach ``profile_id`` from a value's membership. The entry itself is kept."""
        value = normalize_value(raw_value)
        async with self._locks.hold(self._lock_key(signal, value)):
            return await self._store.remove_attribute_member(signal, value, profile_id)
