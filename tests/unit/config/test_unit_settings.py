# tests/unit/config/test_unit_settings.py — v3
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from candidaterank.config.settings import ConfigurationError, Settings, load_settings
from candidaterank.core.models import Signal


class TestSettingsDefaults:
    def test_default_floors(self):
        s = Settings(_env_file=None)
        assert s.floor_for(Signal.SKILLS) == 0.5
        assert s.floor_for(Signal.LOCATION) == 0.9
        assert s.floor_for(Signal.COMPANIES) == 0.95
        assert s.floor_for(Signal.SCHOOLS) == 0.8

    def test_default_gating(self):
        s = Settings(_env_file=None)
        assert s.variance_threshold == 0.1
        assert s.max_results == 2000

    def test_seed_pool_defaults(self):
        s = Settings(_env_file=None)
        assert s.seed_similarity_floor == 0.1
        assert s.seed_top_k == s.max_results == 2000

    def test_default_rate_limit_is_unbounded(self):
        s = Settings(_env_file=None)
        assert s.rate_limit_cooldown_s == 180.0
        assert s.rate_limit_max_retries is None

    def test_top_k_per_signal(self):
        s = Settings(_env_file=None)
        assert s.top_k_for(Signal.SKILLS) == 250
        assert s.top_k_for(Signal.LOCATION) == 500

    def test_floor_for_flag_signal_rejected(self):
        with pytest.raises(ValueError, match="no similarity floor"):
            Settings(_env_file=None).floor_for(Signal.PLATFORM_USER)


class TestSettingsValidation:
    def test_sqlite_without_path(self):
        with pytest.raises(ConfigurationError, match="STORE_PATH"):
            Settings(_env_file=None, store_backend="sqlite", store_path=None)

    def test_chromadb_without_path(self):
        with pytest.raises(ConfigurationError, match="STORE_BACKEND=chromadb requires STORE_PATH"):
            Settings(_env_file=None, store_backend="chromadb", store_path=None)

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigurationError, match="REQUEST_TIMEOUT_S"):
            Settings(_env_file=None, request_timeout_s=0)

    def test_negative_crawl_depth(self):
        with pytest.raises(ConfigurationError, match="CRAWL_MAX_DEPTH"):
            Settings(_env_file=None, crawl_max_depth=-1)

    def test_floor_out_of_range(self):
        with pytest.raises(ValidationError, match="floor_location"):
            Settings(_env_file=None, floor_location=1.5)

    def test_zero_batch_size(self):
        with pytest.raises(ValidationError, match="seed_batch_size"):
            Settings(_env_file=None, seed_batch_size=0)

    def test_negative_retry_cap(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, rate_limit_max_retries=-1)


class TestEnvLoading:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("VARIANCE_THRESHOLD", "0.2")
        monkeypatch.setenv("STORE_BACKEND", "memory")
        s = Settings(_env_file=None)
        assert s.variance_threshold == 0.2
        assert s.store_backend == "memory"

    def test_load_settings_overrides(self):
        s = load_settings(_env_file=None, max_results=10)
        assert s.max_results == 10
