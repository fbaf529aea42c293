from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import EducationLevel, normalize_skills, parse_education_level


class ExperienceLevel(BaseModel):
    """Accepted years-of-experience band. ``max`` is advisory only."""

    min: int = Field(default=0, ge=0, le=50)
    max: int = Field(default=10, ge=0, le=50)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "ExperienceLevel":
        if self.min > self.max:
            raise ValueError("Minimum experience cannot be greater than maximum experience")
        return self


class SalaryRange(BaseModel):
    """Offered salary band."""

    min: int | None = Field(default=None, ge=0)
    max: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "SalaryRange":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("Minimum salary cannot be greater than maximum salary")
        return self


class JobRequirement(BaseModel):
    """Immutable job requirement a run is evaluated against."""

    job_id: str | None = None
    title: str = Field(min_length=1)
    description: str = ""
    required_skills: tuple[str, ...]
    preferred_skills: tuple[str, ...] = ()
    experience_level: ExperienceLevel = Field(default_factory=ExperienceLevel)
    education_level: EducationLevel | None = None
    location: str | None = None
    salary_range: SalaryRange | None = None
    job_category: str = "custom"
    priority: int = Field(default=1, ge=1, le=5)

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("required_skills", "preferred_skills", mode="before")
    @classmethod
    def _normalize_skills(cls, value: Any) -> tuple[str, ...]:
        return normalize_skills(value)

    @field_validator("required_skills")
    @classmethod
    def _require_skills(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("At least one required skill must be specified")
        return value

    @field_validator("education_level", mode="before")
    @classmethod
    def _parse_education(cls, value: Any) -> EducationLevel | None:
        return parse_education_level(value)

    @field_validator("location", mode="before")
    @classmethod
    def _blank_location(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
