from __future__ import annotations

from typing import Any

import pytest

from screenrank.core.evaluators import SkillsEvaluator
from screenrank.core.evaluators.skills import SkillsConfig
from screenrank.schemas import CandidateProfile, JobRequirement


def build_candidate(skills: list[str], **kwargs: Any) -> CandidateProfile:
    return CandidateProfile(candidate_id="C-100", name="Ada Lovelace", skills=skills, **kwargs)


def build_job(required: list[str], preferred: list[str] | None = None) -> JobRequirement:
    return JobRequirement(
        title="Data Engineer",
        required_skills=required,
        preferred_skills=preferred or [],
    )


def test_full_required_match_without_preferred_scores_100():
    evaluator = SkillsEvaluator()

    result = evaluator.evaluate(build_candidate(["Python", "SQL", "AWS"]), build_job(["python", "sql"]))

    assert result["method"] == "skills"
    assert result["scores"]["skills"] == pytest.approx(100.0)
    assert result["metadata"]["matched_skills"] == ["python", "sql"]
    assert result["metadata"]["missing_skills"] == []


def test_partial_required_match_scales_required_component():
    evaluator = SkillsEvaluator()

    result = evaluator.evaluate(build_candidate(["python"]), build_job(["python", "sql"]))

    assert result["metadata"]["required_hit_ratio"] == pytest.approx(0.5)
    assert result["scores"]["skills"] == pytest.approx(40.0)
    assert result["metadata"]["missing_skills"] == ["sql"]
    assert result["metadata"]["preferred_hit_ratio"] == pytest.approx(0.0)


def test_preferred_skills_add_up_to_twenty_points():
    evaluator = SkillsEvaluator()
    job = build_job(["python"], preferred=["docker", "kubernetes"])

    result = evaluator.evaluate(build_candidate(["python", "docker"]), job)

    assert result["scores"]["skills"] == pytest.approx(90.0)
    assert result["metadata"]["matched_preferred_skills"] == ["docker"]


def test_matched_preferred_skills_count_with_partial_required_coverage():
    evaluator = SkillsEvaluator()
    job = build_job(["python", "sql"], preferred=["aws"])

    result = evaluator.evaluate(build_candidate(["python", "aws"]), job)

    assert result["metadata"]["required_hit_ratio"] == pytest.approx(0.5)
    assert result["metadata"]["preferred_hit_ratio"] == pytest.approx(1.0)
    assert result["scores"]["skills"] == pytest.approx(60.0)


def test_custom_weights_apply_to_both_components():
    evaluator = SkillsEvaluator(config=SkillsConfig(required_weight=0.5, preferred_weight=0.5))
    job = build_job(["python", "sql"], preferred=["docker", "aws"])

    result = evaluator.evaluate(build_candidate(["python", "docker"]), job)

    assert result["scores"]["skills"] == pytest.approx(50.0)


def test_matching_is_case_insensitive_and_exact():
    evaluator = SkillsEvaluator()

    result = evaluator.evaluate(build_candidate(["  PostgreSQL "]), build_job(["postgres"]))

    assert result["metadata"]["matched_skills"] == []
    assert result["scores"]["skills"] == pytest.approx(0.0)


def test_near_misses_are_reported_without_changing_score():
    evaluator = SkillsEvaluator()

    result = evaluator.evaluate(build_candidate(["javascript"]), build_job(["java script"]))

    assert result["scores"]["skills"] == pytest.approx(0.0)
    assert result["metadata"]["near_misses"] == {"java script": "javascript"}
