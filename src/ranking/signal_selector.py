# src/ranking/signal_selector.py — v1
"""Variance-gated signal selection for seed-based ranking.

A signal is trusted only if the seeds agree on it: the population variance
of pairwise dissimilarity (1 - cosine) across seed averages must not exceed
the threshold. With exactly two seeds the single dissimilarity is used
directly; with one seed the variance is 0. Signals no seed has are dropped.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import numpy as np

from candidaterank.core.models import Signal
from candidaterank.core.similarity import cosine_similarity_matrix

logger = logging.getLogger(__name__)

DEFAULT_VARIANCE_THRESHOLD = 0.1

# Identical vectors can yield 1 - cos ~ 1e-16; treat as exact agreement.
_NOISE = 1e-12


def dissimilarity_variance(embeddings: Sequence[Sequence[float]]) -> float:
    """Dissimilarity variance of a set of seed embeddings for one signal."""
    if len(embeddings) < 2:
        return 0.0

    sims = cosine_similarity_matrix(np.asarray(embeddings, dtype=np.float64))
    if len(embeddings) == 2:
        value = 1.0 - float(sims[0, 1])
    else:
        upper = np.triu_indices(len(embeddings), k=1)
        value = float(np.var(1.0 - sims[upper]))

    return 0.0 if abs(value) < _NOISE else value


def select_valid_signals(
    embeddings_by_signal: Mapping[Signal, Sequence[Sequence[float]]],
    threshold: float = DEFAULT_VARIANCE_THRESHOLD,
) -> set[Signal]:
    """Signals whose seed embeddings are coherent enough to rank on.

    Args:
        embeddings_by_signal: Per-seed average embeddings for each signal.
            Seeds lacking a signal are simply absent from its list.
        threshold: Maximum accepted dissimilarity variance (inclusive).

    Returns:
        The accepted signals.
    """
    accepted: set[Signal] = set()
    variances: dict[str, float] = {}
    for signal, embeddings in embeddings_by_signal.items():
        if len(embeddings) == 0:
            continue
        variance = dissimilarity_variance(embeddings)
        variances[signal.value] = round(variance, 6)
        if variance <= threshold:
            accepted.add(signal)

    logger.info(
        "Signal variances: %s; accepted: %s",
        variances,
        sorted(s.value for s in accepted),
        extra={"data": {"variances": variances}},
    )
    return accepted
