"""Deterministic ranking and run-level statistics."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Iterable

from .batch import ScoredCandidate
from .scoring import CandidateResult, round_half_up


@dataclass(slots=True, frozen=True)
class ScoreDistribution:
    """Count of results per score band."""

    excellent: int = 0
    good: int = 0
    average: int = 0
    poor: int = 0


@dataclass(slots=True, frozen=True)
class RunStatistics:
    """Aggregate statistics over the successfully scored candidates."""

    total_candidates: int = 0
    qualified_candidates: int = 0
    average_score: int = 0
    top_score: int = 0
    failed_candidates: int = 0
    qualification_rate: int = 0
    score_distribution: ScoreDistribution = field(default_factory=ScoreDistribution)


@dataclass(slots=True, frozen=True)
class RankedResults:
    """Final ordered results of a run plus statistics."""

    results: dict[str, CandidateResult]
    statistics: RunStatistics


class Ranker:
    """Sort scored candidates, assign ranks, and aggregate statistics.

    Ordering is ``match_score`` descending, then ``candidate_name``
    case-insensitively, then input position, so the output never depends on
    worker completion order.
    """

    DEFAULT_QUALIFYING_THRESHOLD = 60

    def __init__(self, *, qualifying_threshold: float | None = None) -> None:
        self._qualifying_threshold = (
            self.DEFAULT_QUALIFYING_THRESHOLD
            if qualifying_threshold is None
            else qualifying_threshold
        )

    @property
    def qualifying_threshold(self) -> float:
        return self._qualifying_threshold

    def rank(
        self,
        scored: Iterable[ScoredCandidate],
        *,
        failed_candidates: int = 0,
        qualifying_threshold: float | None = None,
    ) -> RankedResults:
        ordered = sorted(
            scored,
            key=lambda item: (
                -item.result.match_score,
                item.result.candidate_name.casefold(),
                item.position,
            ),
        )
        results: dict[str, CandidateResult] = {}
        for rank, item in enumerate(ordered, start=1):
            results[item.result.resume_id] = dataclasses.replace(item.result, overall_rank=rank)

        threshold = self._qualifying_threshold if qualifying_threshold is None else qualifying_threshold
        statistics = self.compute_statistics(
            [result.match_score for result in results.values()],
            qualifying_threshold=threshold,
            failed_candidates=failed_candidates,
        )
        return RankedResults(results=results, statistics=statistics)

    @staticmethod
    def compute_statistics(
        scores: list[int],
        *,
        qualifying_threshold: float,
        failed_candidates: int = 0,
    ) -> RunStatistics:
        total = len(scores)
        if total == 0:
            return RunStatistics(failed_candidates=failed_candidates)

        qualified = sum(1 for score in scores if score >= qualifying_threshold)
        distribution = ScoreDistribution(
            excellent=sum(1 for score in scores if score >= 80),
            good=sum(1 for score in scores if 60 <= score < 80),
            average=sum(1 for score in scores if 40 <= score < 60),
            poor=sum(1 for score in scores if score < 40),
        )
        return RunStatistics(
            total_candidates=total,
            qualified_candidates=qualified,
            average_score=round_half_up(sum(scores) / total),
            top_score=max(scores),
            failed_candidates=failed_candidates,
            qualification_rate=round_half_up(qualified * 100 / total),
            score_distribution=distribution,
        )
