# src/index/__init__.py — v1
"""Deduplicating attribute index and vector similarity queries."""

from candidaterank.index.attribute_index import AttributeIndex
from candidaterank.index.lock_pool import KeyedLockPool
from candidaterank.index.vector_query import VectorSimilarityQuery

__all__ = ["AttributeIndex", "KeyedLockPool", "VectorSimilarityQuery"]
