# src/api/__init__.py — v1
"""Public ranking API."""

from candidaterank.api.facade import rank
from candidaterank.api.models import (
    ConfigOverrides,
    EntryPointReport,
    RankingRequest,
    RankingResponse,
)

__all__ = [
    "ConfigOverrides",
    "EntryPointReport",
    "RankingRequest",
    "RankingResponse",
    "rank",
]
