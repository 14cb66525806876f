# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# === SIGNALS ===


class Signal(str, Enum):
    """One category of attribute used for similarity."""

    SKILLS = "skills"
    JOB_TITLES = "job_titles"
    COMPANIES = "companies"
    SCHOOLS = "schools"
    FIELDS_OF_STUDY = "fields_of_study"
    LOCATION = "location"
    ACTIVENESS = "activeness"
    PLATFORM_USER = "platform_user"


# Signals backed by an attribute collection and a per-profile average embedding.
EMBEDDING_SIGNALS: tuple[Signal, ...] = (
    Signal.SKILLS,
    Signal.JOB_TITLES,
    Signal.COMPANIES,
    Signal.SCHOOLS,
    Signal.FIELDS_OF_STUDY,
    Signal.LOCATION,
)


def normalize_value(text: str) -> str:
    """Case-fold, trim and collapse inner whitespace (the dedup key)."""
    return " ".join(text.split()).casefold()


# === PROFILE ===


class Profile(BaseModel):
    """A person, with raw attributes and per-signal average embeddings."""

    id: str
    name: str = ""
    linkedin_url: str | None = None
    github_login: str | None = None

    # --- Raw attributes ---
    skills: list[str] = Field(default_factory=list)
    job_titles: list[str] = Field(default_factory=list)
    companies: list[str] = Field(default_factory=list)
    company_ids: list[str] = Field(default_factory=list)
    schools: list[str] = Field(default_factory=list)
    fields_of_study: list[str] = Field(default_factory=list)
    location: str | None = None

    # --- Embeddings (unweighted mean of each distinct value's vector) ---
    average_embeddings: dict[Signal, list[float]] = Field(default_factory=dict)

    # --- Provenance ---
    sources: list[str] = Field(default_factory=list)
    # List attribute values as last reported by each source.
    source_attributes: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    is_platform_user: bool = False

    # --- Activity metrics ---
    followers: int = 0
    following: int = 0
    total_contributions: int = 0
    total_stars: int = 0
    follower_to_following_ratio: float = 0.0

    def attribute_values(self, signal: Signal) -> list[str]:
        """Distinct normalized values contributing to an embedding signal."""
        if signal == Signal.LOCATION:
            raw = [self.location] if self.location else []
        elif signal in EMBEDDING_SIGNALS:
            raw = getattr(self, signal.value)
        else:
            raise ValueError(f"Signal {signal.value!r} has no attribute values")
        seen: dict[str, None] = {}
        for value in raw:
            if value and value.strip():
                seen.setdefault(normalize_value(value), None)
        return list(seen)

    def average_embedding(self, signal: Signal) -> list[float] | None:
        return self.average_embeddings.get(signal)


# === ATTRIBUTE INDEX ===


class AttributeEntry(BaseModel):
    """One distinct normalized attribute value within one signal type."""

    signal: Signal
    value: str
    vector: list[float]
    member_ids: list[str] = Field(default_factory=list)


class SimilarityMatch(BaseModel):
    """Ephemeral result of a vector query."""

    value: str
    score: float
    member_ids: list[str] = Field(default_factory=list)


class ProfileMatch(BaseModel):
    """Ephemeral result of a query against per-profile average embeddings."""

    profile_id: str
    score: float


# === RANKING ===


class SignalMatch(BaseModel):
    """Attribution: one attribute value that made a profile match."""

    value: str
    score: float
    weight: float | None = None


class RankingCandidate(BaseModel):
    """Per-request scoring state for one profile under consideration."""

    profile_id: str
    raw_scores: dict[Signal, float] = Field(default_factory=dict)
    matches: dict[Signal, list[SignalMatch]] = Field(default_factory=dict)
    score: float = 0.0
    is_active: bool | None = None
    activeness_score: float | None = None

    def add_match(self, signal: Signal, match: SignalMatch) -> None:
        self.matches.setdefault(signal, []).append(match)


class RankedProfile(BaseModel):
    """One row of a ranked result list."""

    profile_id: str
    score: float
    attributions: dict[Signal, list[SignalMatch]] = Field(default_factory=dict)
    sources: list[str] = Field(default_factory=list)
    is_active: bool | None = None
    activeness_score: float | None = None


# === UPSTREAM PAYLOADS ===


class Position(BaseModel):
    """One job held, as reported by an upstream source."""

    title: str | None = None
    company_name: str | None = None
    company_id: str | None = None
    description: str | None = None


class Education(BaseModel):
    """One education entry, as reported by an upstream source."""

    school_name: str | None = None
    field_of_study: str | None = None


class RawProfile(BaseModel):
    """Structured profile payload returned by a scrape collaborator."""

    source: str
    handle: str
    url: str | None = None
    name: str = ""
    location: str | None = None
    skills: list[str] = Field(default_factory=list)
    positions: list[Position] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    description: str | None = None
    is_platform_user: bool = False

    followers: int = 0
    following: int = 0
    total_contributions: int = 0
    total_stars: int = 0

    connections: list[str] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)


class SkillExtraction(BaseModel):
    """Structured skill/feature extraction from a classifier."""

    tech: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    is_engineer: bool = False
