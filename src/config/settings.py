# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: embedding
provider, store backend, per-signal similarity floors, gating thresholds,
concurrency bounds, rate-limit policy and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from candidaterank.core.models import Signal


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === EMBEDDINGS ===
    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-ada-002"
    embedding_dimensions: int = 1536
    embedding_st_model: str = "all-MiniLM-L6-v2"
    openai_api_key: str = ""

    # === Store ===
    store_backend: Literal["memory", "sqlite", "chromadb"] = "sqlite"
    store_path: Path | None = Path("~/.candidaterank/store.db")
    vector_db_path: Path | None = Path("~/.candidaterank/chroma")
    vector_db_url: str = ""

    # === Similarity floors (one-off filter queries) ===
    floor_skills: float = 0.5
    floor_job_titles: float = 0.5
    floor_companies: float = 0.95
    floor_schools: float = 0.8
    floor_fields_of_study: float = 0.9
    floor_location: float = 0.9
    seed_similarity_floor: float = 0.1

    # === Top-K ===
    filter_top_k: int = 500
    skill_top_k: int = 250
    seed_top_k: int = 2000

    # === Ranking ===
    variance_threshold: float = 0.1
    activeness_threshold: float = 0.5
    max_results: int = 2000

    # === Concurrency ===
    seed_batch_size: int = 50
    lock_shards: int = 64

    # === Rate limiting ===
    rate_limit_cooldown_s: float = 180.0
    rate_limit_max_retries: int | None = None
    rate_limit_jitter_s: float = 0.0

    # === Request deadline ===
    request_timeout_s: float | None = 900.0

    # === Network crawl ===
    crawl_max_depth: int = 2
    crawl_max_profiles: int = 500

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "floor_skills",
        "floor_job_titles",
        "floor_companies",
        "floor_schools",
        "floor_fields_of_study",
        "floor_location",
        "seed_similarity_floor",
    )
    @classmethod
    def validate_floor(cls, v: float, info) -> float:  # noqa: N805
        """Similarity floors are cosine similarities."""
        if not -1.0 <= v <= 1.0:
            raise ValueError(f"{info.field_name} must be within [-1, 1]")
        return v

    @field_validator("variance_threshold", "activeness_threshold", "rate_limit_jitter_s")
    @classmethod
    def validate_non_negative(cls, v: float, info) -> float:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator(
        "filter_top_k",
        "skill_top_k",
        "seed_top_k",
        "max_results",
        "seed_batch_size",
        "lock_shards",
        "crawl_max_profiles",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("rate_limit_max_retries")
    @classmethod
    def validate_retry_cap(cls, v: int | None) -> int | None:  # noqa: N805
        if v is not None and v < 0:
            raise ValueError("rate_limit_max_retries must be >= 0 or unset")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.store_backend in ("sqlite", "chromadb") and self.store_path is None:
            errors.append(f"STORE_BACKEND={self.store_backend} requires STORE_PATH")

        if self.embedding_dimensions < 1:
            errors.append("EMBEDDING_DIMENSIONS must be >= 1")

        if self.rate_limit_cooldown_s < 0:
            errors.append("RATE_LIMIT_COOLDOWN_S must be >= 0")

        if self.request_timeout_s is not None and self.request_timeout_s <= 0:
            errors.append("REQUEST_TIMEOUT_S must be > 0 or unset")

        if self.crawl_max_depth < 0:
            errors.append("CRAWL_MAX_DEPTH must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def floor_for(self, signal: Signal) -> float:
        """Similarity floor applied to one-off queries on a signal."""
        floors = {
            Signal.SKILLS: self.floor_skills,
            Signal.JOB_TITLES: self.floor_job_titles,
            Signal.COMPANIES: self.floor_companies,
            Signal.SCHOOLS: self.floor_schools,
            Signal.FIELDS_OF_STUDY: self.floor_fields_of_study,
            Signal.LOCATION: self.floor_location,
        }
        if signal not in floors:
            raise ValueError(f"Signal {signal.value!r} has no similarity floor")
        return floors[signal]

    def top_k_for(self, signal: Signal) -> int:
        """Result cap applied to one-off queries on a signal."""
        return self.skill_top_k if signal == Signal.SKILLS else self.filter_top_k


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-request config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
