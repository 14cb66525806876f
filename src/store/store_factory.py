# src/store/store_factory.py — v2
"""Factory for store instantiation."""

from __future__ import annotations

from candidaterank.config.settings import Settings
from candidaterank.store.base_store import BaseStore


def create_store(settings: Settings | None = None) -> BaseStore:
    """Instantiate the configured store backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseStore implementation.
    """
    backend = "memory" if settings is None else settings.store_backend

    if backend == "memory":
        from candidaterank.store.memory_store import MemoryStore
        return MemoryStore()

    if backend == "sqlite":
        from candidaterank.store.sqlite_store import SqliteStore
        if settings is None or settings.store_path is None:
            raise ValueError("STORE_PATH must be set when STORE_BACKEND=sqlite")
        return SqliteStore(db_path=settings.store_path)

    if backend == "chromadb":
        from candidaterank.store.chromadb_store import ChromaDBStore
        if settings is None or settings.store_path is None:
            raise ValueError("STORE_PATH must be set when STORE_BACKEND=chromadb")
        url = settings.vector_db_url
        if url:
            # Remote ChromaDB: parse host:port
            host = url.split("://")[-1].split(":")[0] if "://" in url else url.split(":")[0]
            port = int(url.rsplit(":", 1)[-1]) if ":" in url.rsplit("/", 1)[-1] else 8000
            return ChromaDBStore(settings.store_path, host=host, port=port)
        return ChromaDBStore(settings.store_path, persist_path=settings.vector_db_path)

    raise ValueError(f"Unsupported store backend: {backend!r}")
