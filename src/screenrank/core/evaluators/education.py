"""Education level evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import CandidateProfile, EducationLevel, JobRequirement


class EducationEvaluator:
    """Pass/fail comparison of education rank."""

    method = "education"

    def evaluate(self, candidate: CandidateProfile, job: JobRequirement) -> dict[str, Any]:
        required = job.education_level
        actual = candidate.education_level

        if required is None or required is EducationLevel.NONE:
            passes = True
            reason = "Education: no requirement"
        else:
            passes = actual.rank >= required.rank
            verdict = "meets" if passes else "below"
            reason = f"Education: {actual.value} ({verdict} required {required.value})"

        return {
            "method": self.method,
            "scores": {"education": 100.0 if passes else 0.0},
            "metadata": {
                "education_match": passes,
                "required_level": required.value if required else None,
                "candidate_level": actual.value,
                "reasons": [reason],
            },
        }
