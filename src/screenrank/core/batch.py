"""Parallel per-candidate evaluation with isolated failures."""

from __future__ import annotations

import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import structlog
from pydantic import ValidationError

from ..errors import CandidateScoringError
from ..schemas import CandidateProfile, JobRequirement
from .scoring import CandidateResult, CompositeScorer


def default_concurrency_limit() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(slots=True, frozen=True)
class CandidateFailure:
    """A candidate that could not be scored, with its input position."""

    candidate_id: str
    position: int
    reason: str


@dataclass(slots=True, frozen=True)
class ScoredCandidate:
    """Worker output: an unranked result tagged with its input position."""

    position: int
    result: CandidateResult


@dataclass(slots=True)
class BatchOutcome:
    """Joined outcome of a batch. Only produced once every worker finished."""

    successes: list[ScoredCandidate] = field(default_factory=list)
    failures: list[CandidateFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        return len(self.successes) + len(self.failures)


class BatchEvaluator:
    """Fan the composite scorer out over a candidate pool.

    At most ``concurrency_limit`` evaluations are in flight. Workers never touch
    shared state; the calling thread collects their results at the join.
    """

    def __init__(
        self,
        scorer: CompositeScorer,
        *,
        concurrency_limit: int | None = None,
    ) -> None:
        self._scorer = scorer
        self._concurrency_limit = concurrency_limit or default_concurrency_limit()
        self._logger = structlog.get_logger(__name__)

    @property
    def concurrency_limit(self) -> int:
        return self._concurrency_limit

    def evaluate(
        self,
        job: JobRequirement,
        candidates: Iterable[CandidateProfile | Mapping[str, Any]],
        *,
        cancel_event: threading.Event | None = None,
        concurrency_limit: int | None = None,
        location_bonus_cap: float | None = None,
    ) -> BatchOutcome:
        records = list(candidates)
        if not records:
            return BatchOutcome()

        limit = max(1, concurrency_limit or self._concurrency_limit)
        scored: list[ScoredCandidate] = []
        failures: list[CandidateFailure] = []
        pending = iter(enumerate(records))
        in_flight: dict[Future[ScoredCandidate], tuple[int, str]] = {}

        def cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        with ThreadPoolExecutor(
            max_workers=min(limit, len(records)),
            thread_name_prefix="screenrank-worker",
        ) as executor:
            while True:
                while len(in_flight) < limit and not cancelled():
                    try:
                        position, record = next(pending)
                    except StopIteration:
                        break
                    future = executor.submit(
                        self._score_one, job, position, record, location_bonus_cap
                    )
                    in_flight[future] = (position, candidate_identifier(record, position))

                if not in_flight:
                    break

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    position, identifier = in_flight.pop(future)
                    try:
                        scored.append(future.result())
                    except CandidateScoringError as exc:
                        failures.append(CandidateFailure(identifier, position, exc.reason))
                        self._logger.warning(
                            "batch.candidate_failed",
                            candidate_id=identifier,
                            position=position,
                            reason=exc.reason,
                        )

        successes, duplicates = self._split_duplicates(scored)
        failures.extend(duplicates)
        failures.sort(key=lambda item: item.position)

        outcome = BatchOutcome(successes=successes, failures=failures, cancelled=cancelled())
        self._logger.info(
            "batch.completed",
            total=len(records),
            attempted=outcome.attempted,
            succeeded=len(outcome.successes),
            failed=len(outcome.failures),
            cancelled=outcome.cancelled,
        )
        return outcome

    def _score_one(
        self,
        job: JobRequirement,
        position: int,
        record: CandidateProfile | Mapping[str, Any],
        location_bonus_cap: float | None,
    ) -> ScoredCandidate:
        identifier = candidate_identifier(record, position)
        try:
            profile = coerce_candidate(record)
            result = self._scorer.evaluate(
                candidate=profile,
                job=job,
                location_bonus_cap=location_bonus_cap,
            )
        except ValidationError as exc:
            raise CandidateScoringError(identifier, describe_validation_error(exc)) from exc
        except CandidateScoringError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CandidateScoringError(identifier, f"{type(exc).__name__}: {exc}") from exc
        return ScoredCandidate(position=position, result=result)

    @staticmethod
    def _split_duplicates(
        scored: list[ScoredCandidate],
    ) -> tuple[list[ScoredCandidate], list[CandidateFailure]]:
        # first occurrence in input order wins, independent of completion order
        kept: dict[str, ScoredCandidate] = {}
        duplicates: list[CandidateFailure] = []
        for item in sorted(scored, key=lambda entry: entry.position):
            resume_id = item.result.resume_id
            if resume_id in kept:
                duplicates.append(
                    CandidateFailure(
                        resume_id,
                        item.position,
                        f"duplicate candidate_id (first seen at position {kept[resume_id].position})",
                    )
                )
                continue
            kept[resume_id] = item
        return list(kept.values()), duplicates


def coerce_candidate(record: CandidateProfile | Mapping[str, Any]) -> CandidateProfile:
    """Validate a loose record into a ``CandidateProfile``."""
    if isinstance(record, CandidateProfile):
        return record
    if not isinstance(record, Mapping):
        raise TypeError(f"unsupported candidate record type {type(record).__name__}")
    return CandidateProfile.model_validate(dict(record))


def candidate_identifier(record: Any, position: int) -> str:
    if isinstance(record, CandidateProfile):
        return record.candidate_id
    if isinstance(record, Mapping):
        value = record.get("candidate_id")
        if value is not None and str(value).strip():
            return str(value).strip()
    return f"#{position}"


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "record"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)
