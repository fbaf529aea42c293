"""Composite scoring of a single candidate against a job requirement."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..schemas import CandidateProfile, JobRequirement


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    The value is first rounded to 6 decimals so float noise such as
    ``51.49999999999999`` does not flip the result.
    """
    return int(math.floor(round(value, 6) + 0.5))


@dataclass(slots=True)
class EvaluationResult:
    """Normalized evaluator output."""

    method: str
    scores: dict[str, float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class CandidateResult:
    """Scored candidate. ``overall_rank`` stays ``None`` until ranking."""

    resume_id: str
    candidate_name: str
    match_score: int
    skills_match: int
    experience_match: bool
    education_match: bool
    overall_rank: int | None = None
    matched_skills: tuple[str, ...] = ()
    missing_skills: tuple[str, ...] = ()
    experience_years: float = 0.0
    education_level: str = "none"
    sub_scores: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    reasons: tuple[str, ...] = ()


class CompositeScorer:
    """Combine criterion sub-scores into a 0-100 match score."""

    DEFAULT_WEIGHTS: dict[str, float] = {
        "skills": 0.60,
        "experience": 0.25,
        "education": 0.15,
    }

    DEFAULT_LOCATION_BONUS_CAP: float = 5.0

    def __init__(
        self,
        evaluators: Iterable[Any],
        *,
        score_weights: dict[str, float] | None = None,
        location_bonus_cap: float | None = None,
    ) -> None:
        self._evaluators = list(evaluators)
        self._score_weights = {**self.DEFAULT_WEIGHTS, **(score_weights or {})}
        negative = [metric for metric, weight in self._score_weights.items() if weight < 0]
        if negative:
            raise ValueError(f"Score weights must be non-negative: {negative}")
        self._location_bonus_cap = (
            self.DEFAULT_LOCATION_BONUS_CAP if location_bonus_cap is None else location_bonus_cap
        )

    @property
    def location_bonus_cap(self) -> float:
        return self._location_bonus_cap

    def evaluate(
        self,
        *,
        candidate: CandidateProfile,
        job: JobRequirement,
        location_bonus_cap: float | None = None,
    ) -> CandidateResult:
        evaluations: list[EvaluationResult] = []
        aggregated_scores: dict[str, float] = {}

        for evaluator in self._evaluators:
            normalized = self._normalize_evaluation_result(evaluator.evaluate(candidate, job))
            evaluations.append(normalized)
            for key, value in normalized.scores.items():
                aggregated_scores[key] = aggregated_scores.get(key, 0.0) + value

        cap = self._location_bonus_cap if location_bonus_cap is None else location_bonus_cap
        base_score = round_half_up(self._compute_weighted_score(aggregated_scores))
        bonus = round_half_up(min(aggregated_scores.get("location_bonus", 0.0), max(cap, 0.0)))
        match_score = min(max(base_score + bonus, 0), 100)

        metadata = self._merge_metadata(evaluations)

        return CandidateResult(
            resume_id=candidate.candidate_id,
            candidate_name=candidate.name,
            match_score=match_score,
            skills_match=round_half_up(aggregated_scores.get("skills", 0.0)),
            experience_match=bool(metadata.get("experience_match", False)),
            education_match=bool(metadata.get("education_match", False)),
            matched_skills=tuple(metadata.get("matched_skills", ())),
            missing_skills=tuple(metadata.get("missing_skills", ())),
            experience_years=float(candidate.years_of_experience),
            education_level=candidate.education_level.value,
            sub_scores=MappingProxyType(dict(aggregated_scores)),
            reasons=tuple(metadata.get("reasons", ())),
        )

    @staticmethod
    def _normalize_evaluation_result(payload: dict[str, Any]) -> EvaluationResult:
        method = payload.get("method")
        scores = payload.get("scores") or {}
        metadata = payload.get("metadata") or {}
        if method is None:
            raise ValueError("Evaluator result must include 'method'.")
        if not isinstance(scores, dict):
            raise ValueError("Evaluator result 'scores' must be a mapping.")
        normalized_scores = {k: float(v) for k, v in scores.items()}
        for key, value in normalized_scores.items():
            if math.isnan(value) or math.isinf(value):
                raise ValueError(f"Evaluator {method!r} produced non-finite score for {key!r}.")
        return EvaluationResult(
            method=str(method),
            scores=normalized_scores,
            metadata=dict(metadata),
        )

    def _compute_weighted_score(self, scores: dict[str, float]) -> float:
        return sum(
            scores.get(metric, 0.0) * weight
            for metric, weight in self._score_weights.items()
        )

    @staticmethod
    def _merge_metadata(evaluations: list[EvaluationResult]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        reasons: list[str] = []
        for evaluation in evaluations:
            for key, value in evaluation.metadata.items():
                if key == "reasons":
                    reasons.extend(str(item) for item in value)
                else:
                    merged.setdefault(key, value)
        merged["reasons"] = reasons
        return merged
