# src/core/similarity.py — v3
"""Cosine similarity and embedding averaging on numpy arrays."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

_EPS = 1e-10


def cosine_similarity_matrix(embeddings: np.ndarray) -> np.ndarray:
    """Compute pairwise cosine similarity matrix.

    Args:
        embeddings: 2D array of shape (n_samples, n_features).

    Returns:
        Similarity matrix of shape (n_samples, n_samples) with values in [-1, 1].

    Raises:
        ValueError: If embeddings is not a 2D array.
    """
    if embeddings.ndim != 2:
        raise ValueError(f"Expected 2D array, got {embeddings.ndim}D")
    if embeddings.shape[0] == 0:
        return np.empty((0, 0), dtype=np.float64)

    norms = np.linalg.norm(embeddings, axis=1, keepdims=True)
    norms = np.maximum(norms, _EPS)
    normalized = embeddings / norms
    return np.clip(normalized @ normalized.T, -1.0, 1.0)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 when either has zero norm."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Dimension mismatch: {va.shape} vs {vb.shape}")
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom < _EPS:
        return 0.0
    return float(np.clip(va @ vb / denom, -1.0, 1.0))


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Similarity of one query vector against every row of a matrix."""
    if matrix.ndim != 2:
        raise ValueError(f"Expected 2D array, got {matrix.ndim}D")
    if matrix.shape[0] == 0:
        return np.empty((0,), dtype=np.float64)
    q = np.asarray(query, dtype=np.float64)
    if q.shape[0] != matrix.shape[1]:
        raise ValueError(
            f"Dimension mismatch: query has {q.shape[0]}, rows have {matrix.shape[1]}"
        )
    q_norm = max(float(np.linalg.norm(q)), _EPS)
    row_norms = np.maximum(np.linalg.norm(matrix, axis=1), _EPS)
    return np.clip((matrix @ q) / (row_norms * q_norm), -1.0, 1.0)


def average_embedding(vectors: Sequence[Sequence[float]]) -> list[float] | None:
    """Unweighted mean of vectors, or None for an empty input."""
    if len(vectors) == 0:
        return None
    stacked = np.asarray(vectors, dtype=np.float64)
    if stacked.ndim != 2:
        raise ValueError("All vectors must share one dimension")
    return stacked.mean(axis=0).tolist()


def top_matches(
    query: Sequence[float],
    keys: Sequence[str],
    matrix: np.ndarray,
    floor: float,
    top_k: int,
) -> list[tuple[str, float]]:
    """Keys whose row scores strictly above ``floor``, best first, at most ``top_k``.

    Equal scores are ordered by key so results are stable across backends.
    """
    if len(keys) == 0 or top_k < 1:
        return []
    scores = cosine_similarities(query, matrix)
    hits = [(key, float(s)) for key, s in zip(keys, scores) if s > floor]
    hits.sort(key=lambda kv: (-kv[1], kv[0]))
    return hits[:top_k]
