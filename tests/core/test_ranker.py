from __future__ import annotations

import random

import pytest

from screenrank.core import Ranker, ScoredCandidate
from screenrank.core.scoring import CandidateResult


def scored(position: int, resume_id: str, name: str, score: int) -> ScoredCandidate:
    return ScoredCandidate(
        position=position,
        result=CandidateResult(
            resume_id=resume_id,
            candidate_name=name,
            match_score=score,
            skills_match=score,
            experience_match=True,
            education_match=True,
        ),
    )


def test_ranks_by_score_then_name_then_position():
    items = [
        scored(0, "C-1", "bob", 70),
        scored(1, "C-2", "Alice", 70),
        scored(2, "C-3", "Zed", 90),
        scored(3, "C-4", "alice", 70),
    ]

    ranked = Ranker().rank(items)

    assert list(ranked.results) == ["C-3", "C-2", "C-4", "C-1"]
    assert [result.overall_rank for result in ranked.results.values()] == [1, 2, 3, 4]


def test_ranking_is_independent_of_input_completion_order():
    items = [scored(idx, f"C-{idx}", f"Name {idx % 3}", 50 + (idx % 4) * 10) for idx in range(12)]
    shuffled = items[:]
    random.Random(7).shuffle(shuffled)

    assert list(Ranker().rank(items).results) == list(Ranker().rank(shuffled).results)


def test_statistics_follow_invariants():
    items = [
        scored(0, "C-1", "A", 100),
        scored(1, "C-2", "B", 59),
        scored(2, "C-3", "C", 60),
        scored(3, "C-4", "D", 30),
    ]

    statistics = Ranker().rank(items, failed_candidates=2).statistics

    assert statistics.total_candidates == 4
    assert statistics.qualified_candidates == 2
    assert statistics.average_score == 62
    assert statistics.top_score == 100
    assert statistics.failed_candidates == 2
    assert statistics.qualification_rate == 50
    assert statistics.score_distribution.excellent == 1
    assert statistics.score_distribution.good == 1
    assert statistics.score_distribution.average == 1
    assert statistics.score_distribution.poor == 1


def test_average_rounds_half_up():
    items = [scored(0, "C-1", "A", 51), scored(1, "C-2", "B", 52)]

    assert Ranker().rank(items).statistics.average_score == 52


@pytest.mark.parametrize(("threshold", "expected"), [(50, 2), (80, 1), (101, 0)])
def test_qualifying_threshold_only_affects_qualified_count(threshold, expected):
    items = [scored(0, "C-1", "A", 90), scored(1, "C-2", "B", 55)]

    ranked = Ranker(qualifying_threshold=60).rank(items, qualifying_threshold=threshold)

    assert ranked.statistics.qualified_candidates == expected
    assert [result.overall_rank for result in ranked.results.values()] == [1, 2]


def test_empty_input_produces_zero_statistics():
    ranked = Ranker().rank([])

    assert ranked.results == {}
    assert ranked.statistics.total_candidates == 0
    assert ranked.statistics.qualified_candidates == 0
    assert ranked.statistics.average_score == 0
    assert ranked.statistics.top_score == 0
