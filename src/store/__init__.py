# src/store/__init__.py — v1
"""Profile and attribute-index persistence with cosine-similarity scans."""

from candidaterank.store.base_store import BaseStore
from candidaterank.store.store_factory import create_store

__all__ = ["BaseStore", "create_store"]
