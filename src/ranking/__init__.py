# src/ranking/__init__.py — v1
"""Signal gating, normalization, aggregation and merging of ranked results."""

from candidaterank.ranking.activeness import compute_activeness
from candidaterank.ranking.aggregator import WeightedAggregator, renormalize_weights
from candidaterank.ranking.criteria import FilterCriteria
from candidaterank.ranking.filter_ranker import FilterRanker
from candidaterank.ranking.merger import merge_results
from candidaterank.ranking.normalizer import normalize_score, population_stats
from candidaterank.ranking.seed_ranker import SeedRanker
from candidaterank.ranking.signal_selector import (
    dissimilarity_variance,
    select_valid_signals,
)

__all__ = [
    "FilterCriteria",
    "FilterRanker",
    "SeedRanker",
    "WeightedAggregator",
    "compute_activeness",
    "dissimilarity_variance",
    "merge_results",
    "normalize_score",
    "population_stats",
    "renormalize_weights",
    "select_valid_signals",
]
