# src/api/models.py — v2
"""API-level models: RankingRequest, ConfigOverrides, RankingResponse."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from candidaterank.core.models import RankedProfile, Signal
from candidaterank.ranking.criteria import FilterCriteria


class ConfigOverrides(BaseModel):
    """Per-request overrides, a validated subset of Settings."""

    model_config = ConfigDict(extra="forbid")

    variance_threshold: float | None = None
    seed_similarity_floor: float | None = None
    seed_top_k: int | None = None
    filter_top_k: int | None = None
    max_results: int | None = None
    request_timeout_s: float | None = None


class RankingRequest(BaseModel):
    """Seeds, a filter, or both. Results of both entry points are merged."""

    model_config = ConfigDict(extra="forbid")

    request_id: str | None = None
    seeds: list[str] = Field(default_factory=list)
    filter: FilterCriteria | None = None
    seed_weights: dict[Signal, float] | None = None
    config_overrides: ConfigOverrides | None = None


class EntryPointReport(BaseModel):
    """What one entry point contributed to a response."""

    entry_point: str
    usable: bool
    candidates: int = 0
    accepted_signals: list[Signal] = Field(default_factory=list)
    seeds_resolved: int | None = None


class RankingResponse(BaseModel):
    """Return value of facade.rank().

    ``success`` is False only when no entry point had usable input, the
    request timed out, or an engine error occurred; ``error`` then says why.
    An empty result list with ``success`` True is a valid outcome.
    """

    request_id: str
    success: bool
    error: str | None = None
    messages: list[str] = Field(default_factory=list)
    results: list[RankedProfile] = Field(default_factory=list)
    total: int = 0
    entry_points: list[EntryPointReport] = Field(default_factory=list)
