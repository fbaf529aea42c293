"""Advisory location and salary fit evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import CandidateProfile, JobRequirement
from ...schemas.common import normalize_token


@dataclass
class LocationConfig:
    """Bonus awarded for a matching location."""

    match_bonus: float = 5.0


class LocationEvaluator:
    """Award a small bonus for a matching location and report salary fit.

    Neither check gates a candidate; absent data contributes nothing.
    """

    method = "location"

    def __init__(self, *, config: LocationConfig | None = None) -> None:
        self._config = config or LocationConfig()

    def evaluate(self, candidate: CandidateProfile, job: JobRequirement) -> dict[str, Any]:
        location_match = bool(
            job.location
            and candidate.location
            and normalize_token(job.location) == normalize_token(candidate.location)
        )
        bonus = max(self._config.match_bonus, 0.0) if location_match else 0.0
        salary_status = self._salary_status(candidate, job)

        reasons: list[str] = []
        if location_match:
            reasons.append(f"Location: {candidate.location} matches")
        if salary_status not in {"not_specified", "insufficient_candidate_data"}:
            reasons.append(f"Salary: {salary_status.replace('_', ' ')}")

        return {
            "method": self.method,
            "scores": {"location_bonus": bonus},
            "metadata": {
                "location_match": location_match,
                "job_location": job.location,
                "candidate_location": candidate.location,
                "salary_status": salary_status,
                "reasons": reasons,
            },
        }

    @staticmethod
    def _salary_status(candidate: CandidateProfile, job: JobRequirement) -> str:
        salary_range = job.salary_range
        if salary_range is None or (salary_range.min is None and salary_range.max is None):
            return "not_specified"

        expected = candidate.salary_expectation
        if expected is None:
            return "insufficient_candidate_data"
        if salary_range.max is not None and expected > salary_range.max:
            return "above_range"
        if salary_range.min is not None and expected < salary_range.min:
            return "below_range"
        return "within_range"
