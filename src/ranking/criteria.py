# src/ranking/criteria.py — v1
"""Declarative filter criteria.

A fixed structure of named, optional weighted criteria. A criterion takes
part in ranking only when it carries a value; its weight is then
renormalized against the other present criteria.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from candidaterank.core.models import Signal, normalize_value


class _Criterion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weight: float = Field(default=1.0, ge=0)


class WeightedSkill(_Criterion):
    skill: str

    @field_validator("skill")
    @classmethod
    def validate_skill(cls, v: str) -> str:  # noqa: N805
        if not v.strip():
            raise ValueError("skill must not be empty")
        return v


class ValueCriterion(_Criterion):
    """One free-text value (location, job title)."""

    value: str = ""


class ValuesCriterion(_Criterion):
    """Several free-text values sharing one weight (schools, fields of study)."""

    values: list[str] = Field(default_factory=list)


class CompanyCriterion(_Criterion):
    """Direct employees by company id, plus companies similar to the given names."""

    company_ids: list[str] = Field(default_factory=list)
    names: list[str] = Field(default_factory=list)


class FlagCriterion(_Criterion):
    value: bool = False


class FilterCriteria(BaseModel):
    """Weighted criteria for ranking without seed profiles."""

    model_config = ConfigDict(extra="forbid")

    skills: list[WeightedSkill] = Field(default_factory=list)
    location: ValueCriterion | None = None
    job_title: ValueCriterion | None = None
    companies: CompanyCriterion | None = None
    schools: ValuesCriterion | None = None
    fields_of_study: ValuesCriterion | None = None
    platform_user: FlagCriterion | None = None
    active_contributor: FlagCriterion | None = None

    def skill_weights(self) -> dict[str, float]:
        """Normalized skill text -> weight. Repeated skills keep the last weight."""
        return {normalize_value(s.skill): s.weight for s in self.skills}

    def location_value(self) -> str | None:
        return _text(self.location)

    def job_title_value(self) -> str | None:
        return _text(self.job_title)

    def school_values(self) -> list[str]:
        return _texts(self.schools)

    def field_of_study_values(self) -> list[str]:
        return _texts(self.fields_of_study)

    def company_ids(self) -> list[str]:
        return list(dict.fromkeys(self.companies.company_ids)) if self.companies else []

    def company_names(self) -> list[str]:
        if self.companies is None:
            return []
        return [n for n in self.companies.names if n.strip()]

    def wants_platform_users(self) -> bool:
        return bool(self.platform_user and self.platform_user.value)

    def wants_active_contributors(self) -> bool:
        return bool(self.active_contributor and self.active_contributor.value)

    def has_attribute_criteria(self) -> bool:
        """True if any criterion is answered by a vector query or company lookup."""
        return bool(
            self.skill_weights()
            or self.location_value()
            or self.job_title_value()
            or self.school_values()
            or self.field_of_study_values()
            or self.company_ids()
            or self.company_names()
        )

    def is_empty(self) -> bool:
        return not self.weights()

    def weights(self) -> dict[Signal, float]:
        """Raw weight of every present criterion. Skills weigh the sum of skill weights."""
        weights: dict[Signal, float] = {}
        skill_total = sum(self.skill_weights().values())
        if self.skills:
            weights[Signal.SKILLS] = skill_total
        if self.location_value():
            weights[Signal.LOCATION] = self.location.weight  # type: ignore[union-attr]
        if self.job_title_value():
            weights[Signal.JOB_TITLES] = self.job_title.weight  # type: ignore[union-attr]
        if self.company_ids() or self.company_names():
            weights[Signal.COMPANIES] = self.companies.weight  # type: ignore[union-attr]
        if self.school_values():
            weights[Signal.SCHOOLS] = self.schools.weight  # type: ignore[union-attr]
        if self.field_of_study_values():
            weights[Signal.FIELDS_OF_STUDY] = self.fields_of_study.weight  # type: ignore[union-attr]
        if self.wants_platform_users():
            weights[Signal.PLATFORM_USER] = self.platform_user.weight  # type: ignore[union-attr]
        if self.wants_active_contributors():
            weights[Signal.ACTIVENESS] = self.active_contributor.weight  # type: ignore[union-attr]
        return weights


def _text(criterion: ValueCriterion | None) -> str | None:
    if criterion is None or not criterion.value.strip():
        return None
    return criterion.value


def _texts(criterion: ValuesCriterion | None) -> list[str]:
    if criterion is None:
        return []
    return list(dict.fromkeys(v for v in criterion.values if v.strip()))
