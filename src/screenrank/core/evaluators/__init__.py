"""Criterion scorers used by the composite scorer."""

from .education import EducationEvaluator
from .experience import ExperienceEvaluator
from .location import LocationEvaluator
from .skills import SkillsEvaluator

__all__ = [
    "SkillsEvaluator",
    "ExperienceEvaluator",
    "EducationEvaluator",
    "LocationEvaluator",
]
