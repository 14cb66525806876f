# tests/unit/core/test_unit_core_models.py — v1
"""Tests for core/models.py — domain models and value normalization."""

from __future__ import annotations

import pytest

from candidaterank.core.models import (
    EMBEDDING_SIGNALS,
    Profile,
    RankingCandidate,
    Signal,
    SignalMatch,
    normalize_value,
)


class TestNormalizeValue:
    def test_case_fold_and_trim(self):
        assert normalize_value("  Rust  ") == "rust"

    def test_inner_whitespace_collapsed(self):
        assert normalize_value("New   York\tCity") == "new york city"


class TestProfile:
    def test_attribute_values_are_distinct_and_normalized(self):
        p = Profile(id="p1", skills=["Rust", "rust ", "Go", "  "])
        assert p.attribute_values(Signal.SKILLS) == ["rust", "go"]

    def test_location_is_single_value(self):
        p = Profile(id="p1", location="New York")
        assert p.attribute_values(Signal.LOCATION) == ["new york"]
        assert Profile(id="p2").attribute_values(Signal.LOCATION) == []

    def test_non_embedding_signal_rejected(self):
        with pytest.raises(ValueError, match="activeness"):
            Profile(id="p1").attribute_values(Signal.ACTIVENESS)

    def test_average_embedding_lookup(self, sample_profile):
        assert sample_profile.average_embedding(Signal.SKILLS) is not None
        assert sample_profile.average_embedding(Signal.SCHOOLS) is None

    def test_json_round_trip_keeps_signal_keys(self, sample_profile):
        restored = Profile.model_validate_json(sample_profile.model_dump_json())
        assert set(restored.average_embeddings) == {Signal.SKILLS, Signal.LOCATION}

    def test_embedding_signals(self):
        assert Signal.ACTIVENESS not in EMBEDDING_SIGNALS
        assert len(EMBEDDING_SIGNALS) == 6


class TestRankingCandidate:
    def test_add_match_groups_by_signal(self):
        c = RankingCandidate(profile_id="p1")
        c.add_match(Signal.SKILLS, SignalMatch(value="rust", score=0.9))
        c.add_match(Signal.SKILLS, SignalMatch(value="go", score=0.7))
        assert [m.value for m in c.matches[Signal.SKILLS]] == ["rust", "go"]
