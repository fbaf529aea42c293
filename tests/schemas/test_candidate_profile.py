from __future__ import annotations

import pytest
from pydantic import ValidationError

from screenrank.schemas import CandidateProfile, EducationLevel


def test_candidate_profile_defaults():
    profile = CandidateProfile(candidate_id="C-001", name="Ann", skills=[])

    assert profile.skills == ()
    assert profile.years_of_experience == 0.0
    assert profile.education_level is EducationLevel.NONE
    assert profile.location is None
    assert profile.salary_expectation is None


def test_candidate_skills_are_normalized():
    profile = CandidateProfile(
        candidate_id="C-002",
        name="  Ann   Lee ",
        skills=[" Python", "python", "Machine  Learning", ""],
    )

    assert profile.skills == ("python", "machine learning")
    assert profile.name == "Ann Lee"


def test_candidate_profile_requires_skills_field():
    with pytest.raises(ValidationError):
        CandidateProfile(candidate_id="C-003", name="Ann")  # type: ignore[call-arg]


@pytest.mark.parametrize(
    "payload",
    [
        {"candidate_id": "C-004", "name": "Ann", "skills": [], "years_of_experience": -1},
        {"candidate_id": "", "name": "Ann", "skills": []},
        {"candidate_id": "C-005", "name": "Ann", "skills": [42]},
        {"candidate_id": "C-006", "name": "Ann", "skills": [], "education_level": "wizardry"},
    ],
)
def test_candidate_profile_rejects_malformed_records(payload):
    with pytest.raises(ValidationError):
        CandidateProfile.model_validate(payload)


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("PhD", EducationLevel.PHD),
        ("Master's", EducationLevel.MASTER),
        ("High School", EducationLevel.HIGHSCHOOL),
        ("", EducationLevel.NONE),
        (None, EducationLevel.NONE),
    ],
)
def test_candidate_education_aliases(label, expected):
    profile = CandidateProfile(candidate_id="C-007", name="Ann", skills=[], education_level=label)

    assert profile.education_level is expected


def test_candidate_numeric_identifier_is_coerced():
    profile = CandidateProfile.model_validate({"candidate_id": 17, "name": "Ann", "skills": "python, sql"})

    assert profile.candidate_id == "17"
    assert profile.skills == ("python", "sql")
