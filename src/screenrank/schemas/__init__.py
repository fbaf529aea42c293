"""Pydantic schema definitions for job and candidate records."""

from __future__ import annotations

from .candidate import CandidateProfile
from .common import EducationLevel, normalize_skills, parse_education_level
from .config import AppConfig, CoreConfig, EvaluatorConfig, load_config
from .job import ExperienceLevel, JobRequirement, SalaryRange

__all__ = [
    "AppConfig",
    "CoreConfig",
    "EvaluatorConfig",
    "load_config",
    "CandidateProfile",
    "EducationLevel",
    "ExperienceLevel",
    "JobRequirement",
    "SalaryRange",
    "normalize_skills",
    "parse_education_level",
]
