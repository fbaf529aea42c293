from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import EducationLevel, normalize_skills, parse_education_level


class CandidateProfile(BaseModel):
    """Structured candidate record consumed by the scorers.

    ``skills`` has no default: a record without it is malformed and is
    quarantined by the batch evaluator instead of scoring as an empty profile.
    """

    candidate_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    skills: tuple[str, ...]
    years_of_experience: float = Field(default=0.0, ge=0)
    education_level: EducationLevel = EducationLevel.NONE
    location: str | None = None
    salary_expectation: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("candidate_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return " ".join(value.split()) if isinstance(value, str) else value

    @field_validator("skills", mode="before")
    @classmethod
    def _normalize_skills(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            raise ValueError("skills field is required")
        return normalize_skills(value)

    @field_validator("education_level", mode="before")
    @classmethod
    def _parse_education(cls, value: Any) -> EducationLevel:
        return parse_education_level(value) or EducationLevel.NONE

    @field_validator("location", mode="before")
    @classmethod
    def _blank_location(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
