from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from screenrank.container import create_container
from screenrank.core import CompositeScorer
from screenrank.core.scoring import round_half_up
from screenrank.schemas import CandidateProfile, JobRequirement


@dataclass
class StubEvaluatorResult:
    method: str
    scores: dict[str, float]
    metadata: dict[str, Any] | None = None


class StubEvaluator:
    def __init__(self, result: StubEvaluatorResult):
        self._result = result
        self.calls: list[tuple[CandidateProfile, JobRequirement]] = []

    @property
    def method(self) -> str:
        return self._result.method

    def evaluate(self, candidate: CandidateProfile, job: JobRequirement) -> dict[str, Any]:
        self.calls.append((candidate, job))
        payload: dict[str, Any] = {
            "method": self._result.method,
            "scores": self._result.scores,
        }
        if self._result.metadata is not None:
            payload["metadata"] = self._result.metadata
        return payload


def build_candidate(**kwargs: Any) -> CandidateProfile:
    defaults: dict[str, Any] = {
        "candidate_id": "C-001",
        "name": "Test Candidate",
        "skills": ["python", "sql", "aws"],
        "years_of_experience": 3,
    }
    defaults.update(kwargs)
    return CandidateProfile(**defaults)


def build_job(**kwargs: Any) -> JobRequirement:
    defaults: dict[str, Any] = {
        "job_id": "JD-001",
        "title": "Backend Engineer",
        "required_skills": ["python", "sql"],
        "experience_level": {"min": 2, "max": 5},
    }
    defaults.update(kwargs)
    return JobRequirement(**defaults)


def default_scorer() -> CompositeScorer:
    return create_container().composite_scorer()


def test_full_match_scores_100():
    result = default_scorer().evaluate(candidate=build_candidate(), job=build_job())

    assert result.match_score == 100
    assert result.skills_match == 100
    assert result.experience_match is True
    assert result.education_match is True
    assert result.overall_rank is None


def test_partial_match_uses_weighted_half_up_rounding():
    candidate = build_candidate(skills=["python"], years_of_experience=1)

    result = default_scorer().evaluate(candidate=candidate, job=build_job())

    assert result.skills_match == 40
    assert result.sub_scores["experience"] == pytest.approx(50.0)
    assert result.match_score == 52
    assert result.experience_match is False
    assert result.missing_skills == ("sql",)


def test_sub_scores_are_read_only():
    result = default_scorer().evaluate(candidate=build_candidate(), job=build_job())

    with pytest.raises(TypeError):
        result.sub_scores["skills"] = 0.0  # type: ignore[index]
    assert result.sub_scores["skills"] == pytest.approx(100.0)


def test_location_bonus_is_capped_at_100():
    candidate = build_candidate(location="Austin")

    result = default_scorer().evaluate(candidate=candidate, job=build_job(location="austin"))

    assert result.match_score == 100


def test_location_bonus_respects_cap_override():
    candidate = build_candidate(skills=["python"], years_of_experience=1, location="Austin")
    job = build_job(location="Austin")
    scorer = default_scorer()

    default_bonus = scorer.evaluate(candidate=candidate, job=job)
    capped = scorer.evaluate(candidate=candidate, job=job, location_bonus_cap=2)
    disabled = scorer.evaluate(candidate=candidate, job=job, location_bonus_cap=0)

    assert default_bonus.match_score == 57
    assert capped.match_score == 54
    assert disabled.match_score == 52


def test_custom_weights_merge_with_defaults():
    evaluator = StubEvaluator(
        StubEvaluatorResult(
            method="stub",
            scores={"skills": 50.0, "experience": 100.0, "education": 100.0},
            metadata={"experience_match": True, "education_match": True, "reasons": ["stub"]},
        )
    )
    scorer = CompositeScorer(evaluators=[evaluator], score_weights={"skills": 0.5, "experience": 0.35})

    result = scorer.evaluate(candidate=build_candidate(), job=build_job())

    assert evaluator.calls
    assert result.match_score == round_half_up(0.5 * 50 + 0.35 * 100 + 0.15 * 100)
    assert result.reasons == ("stub",)


def test_negative_weights_are_rejected():
    with pytest.raises(ValueError):
        CompositeScorer(evaluators=[], score_weights={"skills": -0.1})


def test_evaluator_payload_without_method_is_rejected():
    class Broken:
        method = "broken"

        def evaluate(self, candidate, job):
            return {"scores": {"skills": 1.0}}

    scorer = CompositeScorer(evaluators=[Broken()])

    with pytest.raises(ValueError):
        scorer.evaluate(candidate=build_candidate(), job=build_job())


def test_scoring_is_deterministic():
    scorer = default_scorer()
    candidate = build_candidate(skills=["python", "go"], years_of_experience=1.5, education_level="master")
    job = build_job(preferred_skills=["go", "rust"], education_level="bachelor")

    first = scorer.evaluate(candidate=candidate, job=job)
    second = scorer.evaluate(candidate=candidate, job=job)

    assert first == second
    assert 0 <= first.match_score <= 100


@pytest.mark.parametrize(
    ("value", "expected"),
    [(51.5, 52), (51.49999999999999, 52), (51.4, 51), (0.5, 1), (99.5, 100)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
