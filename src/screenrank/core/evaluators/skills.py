"""Required/preferred skill coverage evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from rapidfuzz import fuzz

from ...schemas import CandidateProfile, JobRequirement


@dataclass
class SkillsConfig:
    """Weights and thresholds for skill coverage scoring."""

    required_weight: float = 0.8
    preferred_weight: float = 0.2
    near_miss_similarity: float = 85.0


class SkillsEvaluator:
    """Score exact skill overlap between candidate and job.

    Matching is exact on normalized tokens. Fuzzy similarity only feeds the
    ``near_misses`` metadata and never changes the score.
    """

    method = "skills"

    def __init__(self, *, config: SkillsConfig | None = None) -> None:
        self._config = config or SkillsConfig()

    def evaluate(self, candidate: CandidateProfile, job: JobRequirement) -> dict[str, Any]:
        candidate_skills = set(candidate.skills)

        matched_required = [skill for skill in job.required_skills if skill in candidate_skills]
        missing_required = [skill for skill in job.required_skills if skill not in candidate_skills]
        matched_preferred = [skill for skill in job.preferred_skills if skill in candidate_skills]

        required_ratio = self._hit_ratio(job.required_skills, matched_required)
        if job.preferred_skills:
            preferred_ratio = len(matched_preferred) / len(job.preferred_skills)
        else:
            # nothing preferred: the bonus only goes to full required coverage
            preferred_ratio = 1.0 if required_ratio >= 1.0 else 0.0

        score = (
            self._config.required_weight * required_ratio
            + self._config.preferred_weight * preferred_ratio
        )
        score = min(max(score * 100.0, 0.0), 100.0)

        reasons = [
            f"Required skills: {len(matched_required)}/{len(job.required_skills)} matched"
        ]
        if job.preferred_skills:
            reasons.append(
                f"Preferred skills: {len(matched_preferred)}/{len(job.preferred_skills)} matched"
            )

        return {
            "method": self.method,
            "scores": {"skills": score},
            "metadata": {
                "required_hit_ratio": required_ratio,
                "preferred_hit_ratio": preferred_ratio,
                "matched_skills": matched_required,
                "missing_skills": missing_required,
                "matched_preferred_skills": matched_preferred,
                "near_misses": self._near_misses(missing_required, candidate.skills),
                "reasons": reasons,
            },
        }

    @staticmethod
    def _hit_ratio(wanted: Sequence[str], hits: Sequence[str]) -> float:
        if not wanted:
            return 1.0
        return len(hits) / len(wanted)

    def _near_misses(
        self,
        missing: Sequence[str],
        candidate_skills: Sequence[str],
    ) -> dict[str, str]:
        suggestions: dict[str, str] = {}
        for skill in missing:
            best_score = 0.0
            best_match: str | None = None
            for owned in candidate_skills:
                similarity = fuzz.ratio(skill, owned)
                if similarity > best_score:
                    best_score, best_match = similarity, owned
            if best_match is not None and best_score >= self._config.near_miss_similarity:
                suggestions[skill] = best_match
        return suggestions
