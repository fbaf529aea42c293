"""Core screening engine components."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..schemas import CandidateProfile, JobRequirement

# NOTE: keep imports explicit for export clarity.
from .batch import BatchEvaluator, BatchOutcome, CandidateFailure, ScoredCandidate
from .evaluators import (
    EducationEvaluator,
    ExperienceEvaluator,
    LocationEvaluator,
    SkillsEvaluator,
)
from .ranking import RankedResults, Ranker, RunStatistics, ScoreDistribution
from .run import FailureKind, ProcessingStatus, RunResult, ScreeningRun
from .scoring import CandidateResult, CompositeScorer, EvaluationResult


@runtime_checkable
class Evaluator(Protocol):
    """Criterion scorer contract."""

    method: str

    def evaluate(self, candidate: CandidateProfile, job: JobRequirement) -> dict[str, Any]:
        """Return ``{"method", "scores", "metadata"}`` for one candidate."""


__all__ = [
    "Evaluator",
    "BatchEvaluator",
    "BatchOutcome",
    "CandidateFailure",
    "CandidateResult",
    "CompositeScorer",
    "EvaluationResult",
    "FailureKind",
    "ProcessingStatus",
    "RankedResults",
    "Ranker",
    "RunResult",
    "RunStatistics",
    "ScoreDistribution",
    "ScoredCandidate",
    "ScreeningRun",
    "SkillsEvaluator",
    "ExperienceEvaluator",
    "EducationEvaluator",
    "LocationEvaluator",
]
