"""Years-of-experience evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import CandidateProfile, JobRequirement


class ExperienceEvaluator:
    """Score candidate experience against the job's band.

    Falling short of ``min`` scales the score linearly. Exceeding ``max`` is
    never penalized.
    """

    method = "experience"

    def evaluate(self, candidate: CandidateProfile, job: JobRequirement) -> dict[str, Any]:
        years = float(candidate.years_of_experience)
        minimum = job.experience_level.min
        maximum = job.experience_level.max

        if minimum == 0 or years >= minimum:
            score = 100.0
        else:
            score = 100.0 * years / minimum

        if years < minimum:
            status = "below_minimum"
            reason = f"Experience: {years:g} years ({minimum - years:g} below minimum of {minimum})"
        elif years > maximum:
            status = "above_maximum"
            reason = f"Experience: {years:g} years (above maximum of {maximum})"
        else:
            status = "within_range"
            reason = f"Experience: {years:g} years (within {minimum}-{maximum})"

        return {
            "method": self.method,
            "scores": {"experience": score},
            "metadata": {
                "experience_match": years >= minimum,
                "years": years,
                "required_range": {"min": minimum, "max": maximum},
                "status": status,
                "reasons": [reason],
            },
        }
