# tests/unit/ranking/test_unit_criteria.py — v1
"""Tests for ranking/criteria.py."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from candidaterank.core.models import Signal
from candidaterank.ranking.criteria import FilterCriteria


class TestFilterCriteria:
    def test_empty(self):
        criteria = FilterCriteria()
        assert criteria.is_empty()
        assert criteria.weights() == {}

    def test_blank_values_are_absent(self):
        criteria = FilterCriteria.model_validate(
            {"location": {"value": "  ", "weight": 2}, "schools": {"values": ["", " "]}}
        )
        assert criteria.is_empty()

    def test_skills_weight_is_sum(self):
        criteria = FilterCriteria.model_validate(
            {"skills": [{"skill": "Rust", "weight": 2}, {"skill": "Python", "weight": 0.5}]}
        )
        assert criteria.skill_weights() == {"rust": 2.0, "python": 0.5}
        assert criteria.weights() == {Signal.SKILLS: 2.5}

    def test_all_criteria(self):
        criteria = FilterCriteria.model_validate(
            {
                "location": {"value": "NEW YORK"},
                "job_title": {"value": "Engineer", "weight": 0.5},
                "companies": {"company_ids": ["c1", "c1"], "names": ["Acme"]},
                "schools": {"values": ["MIT", "MIT"]},
                "fields_of_study": {"values": ["CS"]},
                "platform_user": {"value": True, "weight": 0.1},
                "active_contributor": {"value": False},
            }
        )
        assert criteria.location_value() == "NEW YORK"
        assert criteria.company_ids() == ["c1"]
        assert criteria.school_values() == ["MIT"]
        assert criteria.wants_platform_users() is True
        assert criteria.wants_active_contributors() is False
        assert set(criteria.weights()) == {
            Signal.LOCATION,
            Signal.JOB_TITLES,
            Signal.COMPANIES,
            Signal.SCHOOLS,
            Signal.FIELDS_OF_STUDY,
            Signal.PLATFORM_USER,
        }

    def test_flag_only_has_no_attribute_criteria(self):
        criteria = FilterCriteria.model_validate({"active_contributor": {"value": True}})
        assert not criteria.is_empty()
        assert not criteria.has_attribute_criteria()

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            FilterCriteria.model_validate({"location": {"value": "x", "weight": -1}})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            FilterCriteria.model_validate({"salary": {"value": "100k"}})

    def test_empty_skill_rejected(self):
        with pytest.raises(ValidationError):
            FilterCriteria.model_validate({"skills": [{"skill": " "}]})
