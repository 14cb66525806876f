# src/store/chromadb_store.py — v1
"""ChromaDB-backed store (STORE_BACKEND=chromadb).

Profiles and attribute membership stay in SQLite; every vector lives in a
ChromaDB collection and nearest-neighbor queries run there. One collection
per signal for attribute values (ids are the normalized values) and one per
signal for profile average embeddings (ids are profile ids).
Requires: pip install chromadb.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from candidaterank.core.errors import StoreError
from candidaterank.core.models import (
    EMBEDDING_SIGNALS,
    AttributeEntry,
    Profile,
    ProfileMatch,
    Signal,
    SimilarityMatch,
)
from candidaterank.store.sqlite_store import SqliteStore

logger = logging.getLogger(__name__)

# Collections compare by cosine distance; score = 1 - distance.
_COLLECTION_METADATA = {"hnsw:space": "cosine"}


def attributes_collection(signal: Signal) -> str:
    return f"attributes_{signal.value}"


def averages_collection(signal: Signal) -> str:
    return f"averages_{signal.value}"


class ChromaDBStore(SqliteStore):
    """SQLite rows plus ChromaDB vector collections."""

    def __init__(
        self,
        db_path: Path | str,
        persist_path: str | Path | None = None,
        host: str | None = None,
        port: int = 8000,
    ) -> None:
        try:
            import chromadb
        except ImportError as e:
            raise ImportError(
                "chromadb package required: pip install chromadb"
            ) from e

        super().__init__(db_path)
        if host:
            self._client = chromadb.HttpClient(host=host, port=port)
        elif persist_path:
            path = Path(persist_path).expanduser()
            path.mkdir(parents=True, exist_ok=True)
            self._client = chromadb.PersistentClient(path=str(path))
        else:
            self._client = chromadb.Client()

    @contextmanager
    def _vector_guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except Exception as e:
            raise StoreError(f"{operation} failed: {e}") from e

    def _collection(self, name: str) -> Any:
        return self._client.get_or_create_collection(
            name, metadata=_COLLECTION_METADATA, embedding_function=None
        )

    def _nearest(
        self, name: str, vector: list[float], floor: float, top_k: int
    ) -> list[tuple[str, float]]:
        """Ids scoring strictly above ``floor``, best first, ties by id."""
        col = self._collection(name)
        size = col.count()
        if size == 0 or top_k < 1:
            return []
        results = col.query(
            query_embeddings=[vector],
            n_results=min(top_k, size),
            include=["distances"],
        )
        hits: list[tuple[str, float]] = []
        if results["ids"] and results["ids"][0]:
            for i, doc_id in enumerate(results["ids"][0]):
                score = 1.0 - results["distances"][0][i]
                if score > floor:
                    hits.append((doc_id, score))
        hits.sort(key=lambda h: (-h[1], h[0]))
        return hits

    # --- Profiles ---

    async def upsert_profile(self, profile: Profile) -> None:
        with self._guard(f"upsert_profile({profile.id})"):
            self._save_profile_row(profile)
            self._conn.commit()

        with self._vector_guard(f"upsert averages of {profile.id}"):
            for signal in EMBEDDING_SIGNALS:
                col = self._collection(averages_collection(signal))
                vector = profile.average_embedding(signal)
                if vector is None:
                    col.delete(ids=[profile.id])
                else:
                    col.upsert(ids=[profile.id], embeddings=[vector])

    # --- Attribute index ---

    async def insert_attribute(self, entry: AttributeEntry) -> AttributeEntry:
        stored = await super().insert_attribute(entry)
        with self._vector_guard(f"index {entry.signal.value}/{entry.value!r}"):
            self._collection(attributes_collection(stored.signal)).upsert(
                ids=[stored.value], embeddings=[stored.vector]
            )
        return stored

    # --- Vector queries ---

    async def query_attributes(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[SimilarityMatch]:
        with self._vector_guard(f"query_attributes({signal.value})"):
            hits = self._nearest(attributes_collection(signal), vector, floor, top_k)

        matches: list[SimilarityMatch] = []
        for value, score in hits:
            entry = await self.get_attribute(signal, value)
            if entry is None:
                logger.warning("Vector for %s/%r has no attribute row", signal.value, value)
                continue
            matches.append(SimilarityMatch(value=value, score=score, member_ids=entry.member_ids))
        return matches

    async def query_profile_averages(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[ProfileMatch]:
        with self._vector_guard(f"query_profile_averages({signal.value})"):
            hits = self._nearest(averages_collection(signal), vector, floor, top_k)
        return [ProfileMatch(profile_id=pid, score=score) for pid, score in hits]
