"""Screening run lifecycle state machine."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Mapping, Sequence, Union

import pendulum
import structlog

from ..errors import InvalidTransitionError
from ..schemas import CandidateProfile, JobRequirement
from .batch import CandidateFailure
from .ranking import RankedResults, RunStatistics
from .scoring import CandidateResult


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureKind(str, Enum):
    ALL_CANDIDATES_FAILED = "all_candidates_failed"
    EVALUATOR_ERROR = "evaluator_error"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class Pending:
    status: ClassVar[ProcessingStatus] = ProcessingStatus.PENDING


@dataclass(slots=True, frozen=True)
class Processing:
    started_at: pendulum.DateTime
    status: ClassVar[ProcessingStatus] = ProcessingStatus.PROCESSING


@dataclass(slots=True, frozen=True)
class Completed:
    results: dict[str, CandidateResult]
    statistics: RunStatistics
    failures: tuple[CandidateFailure, ...]
    finished_at: pendulum.DateTime
    status: ClassVar[ProcessingStatus] = ProcessingStatus.COMPLETED


@dataclass(slots=True, frozen=True)
class Failed:
    reason: str
    kind: FailureKind
    failures: tuple[CandidateFailure, ...]
    finished_at: pendulum.DateTime
    status: ClassVar[ProcessingStatus] = ProcessingStatus.FAILED


RunState = Union[Pending, Processing, Completed, Failed]


@dataclass(slots=True, frozen=True)
class RunResult:
    """Caller-facing snapshot of a run.

    ``results`` and ``statistics`` are only set once the run completed;
    ``failures`` once it is terminal.
    """

    run_id: str
    processing_status: ProcessingStatus
    created_at: pendulum.DateTime
    updated_at: pendulum.DateTime
    results: dict[str, CandidateResult] | None = None
    statistics: RunStatistics | None = None
    failures: tuple[CandidateFailure, ...] | None = None
    failure_reason: str | None = None
    failure_kind: FailureKind | None = None
    job_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.processing_status in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)

    def top_candidates(self, limit: int = 10) -> list[CandidateResult]:
        if not self.results:
            return []
        return list(self.results.values())[: max(limit, 0)]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "run_id": self.run_id,
            "job_id": self.job_id,
            "processing_status": self.processing_status.value,
            "created_at": self.created_at.to_iso8601_string(),
            "updated_at": self.updated_at.to_iso8601_string(),
            "results": None,
            "statistics": None,
            "failures": None,
            "failure_reason": self.failure_reason,
            "failure_kind": self.failure_kind.value if self.failure_kind else None,
            "metadata": dict(self.metadata),
        }
        if self.results is not None:
            payload["results"] = [_result_to_dict(result) for result in self.results.values()]
        if self.statistics is not None:
            payload["statistics"] = _statistics_to_dict(self.statistics)
        if self.failures is not None:
            payload["failures"] = [
                {"candidate_id": item.candidate_id, "position": item.position, "reason": item.reason}
                for item in self.failures
            ]
        return payload


class ScreeningRun:
    """One execution of a job requirement against a candidate pool.

    The run is the single writer of its results: state changes happen under
    the run lock, and a terminal state is only ever replaced by ``reset``.
    """

    _TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
        ProcessingStatus.PENDING: frozenset({ProcessingStatus.PROCESSING, ProcessingStatus.FAILED}),
        ProcessingStatus.PROCESSING: frozenset({ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}),
        ProcessingStatus.COMPLETED: frozenset({ProcessingStatus.PENDING}),
        ProcessingStatus.FAILED: frozenset({ProcessingStatus.PENDING}),
    }

    def __init__(
        self,
        run_id: str,
        job: JobRequirement,
        candidates: Sequence[CandidateProfile | Mapping[str, Any]],
        *,
        options: Any = None,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._run_id = run_id
        self._job = job
        self._candidates = tuple(candidates)
        self._options = options
        self._now = now_provider or (lambda: pendulum.now("UTC"))
        self._lock = threading.RLock()
        self._state: RunState = Pending()
        self._generation = 0
        self._cancel_event = threading.Event()
        self._cancel_reason: str | None = None
        self._metadata: dict[str, Any] = {}
        self._created_at = self._now()
        self._updated_at = self._created_at
        self._logger = structlog.get_logger(__name__).bind(run_id=run_id)

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def job(self) -> JobRequirement:
        return self._job

    @property
    def candidates(self) -> tuple[CandidateProfile | Mapping[str, Any], ...]:
        return self._candidates

    @property
    def options(self) -> Any:
        return self._options

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def status(self) -> ProcessingStatus:
        return self.state.status

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def cancel_event(self) -> threading.Event:
        with self._lock:
            return self._cancel_event

    @property
    def cancel_reason(self) -> str | None:
        with self._lock:
            return self._cancel_reason

    def annotate(self, **values: Any) -> None:
        """Attach caller-visible metadata to the current generation."""
        with self._lock:
            self._metadata.update(values)

    def start(self, *, generation: int | None = None) -> None:
        with self._lock:
            self._check_generation(generation, ProcessingStatus.PROCESSING)
            self._transition(Processing(started_at=self._now()))

    def complete(
        self,
        ranked: RankedResults,
        failures: Sequence[CandidateFailure] = (),
        *,
        generation: int | None = None,
    ) -> bool:
        """Store ranked results, or fail the run if a cancel already landed.

        Returns ``True`` when the run ended ``completed``.
        """
        with self._lock:
            self._check_generation(generation, ProcessingStatus.COMPLETED)
            if self._cancel_event.is_set():
                # cancelled after the batch joined but before results landed
                self.fail(
                    self._cancel_reason or "cancelled by request",
                    FailureKind.CANCELLED,
                    failures,
                    generation=generation,
                )
                return False
            self._transition(
                Completed(
                    results=dict(ranked.results),
                    statistics=ranked.statistics,
                    failures=tuple(failures),
                    finished_at=self._now(),
                )
            )
            return True

    def fail(
        self,
        reason: str,
        kind: FailureKind,
        failures: Sequence[CandidateFailure] = (),
        *,
        generation: int | None = None,
    ) -> None:
        with self._lock:
            self._check_generation(generation, ProcessingStatus.FAILED)
            self._transition(
                Failed(
                    reason=reason,
                    kind=kind,
                    failures=tuple(failures),
                    finished_at=self._now(),
                )
            )

    def request_cancel(self, reason: str = "cancelled by request") -> bool:
        """Cancel a pending or processing run.

        A pending run fails immediately. A processing run is flagged; its
        executor stops scheduling candidates and records the failure.
        Returns ``False`` when the run is already terminal.
        """
        with self._lock:
            status = self._state.status
            if status is ProcessingStatus.PENDING:
                self._cancel_reason = reason
                self._cancel_event.set()
                self.fail(reason, FailureKind.CANCELLED)
                return True
            if status is ProcessingStatus.PROCESSING:
                self._cancel_reason = reason
                self._cancel_event.set()
                self._logger.info("run.cancel_requested", reason=reason)
                return True
            return False

    def reset(self) -> bool:
        """Discard terminal results and return to ``pending``.

        Returns ``False`` (no-op) when the run is pending or processing.
        """
        with self._lock:
            if self._state.status in (ProcessingStatus.PENDING, ProcessingStatus.PROCESSING):
                return False
            self._generation += 1
            self._cancel_event = threading.Event()
            self._cancel_reason = None
            self._metadata = {}
            self._transition(Pending())
            return True

    def snapshot(self) -> RunResult:
        with self._lock:
            state = self._state
            base = {
                "run_id": self._run_id,
                "processing_status": state.status,
                "created_at": self._created_at,
                "updated_at": self._updated_at,
                "job_id": self._job.job_id,
                "metadata": {
                    **self._metadata,
                    "generation": self._generation,
                    "candidate_count": len(self._candidates),
                },
            }
        if isinstance(state, Completed):
            return RunResult(
                **base,
                results=dict(state.results),
                statistics=state.statistics,
                failures=state.failures,
            )
        if isinstance(state, Failed):
            return RunResult(
                **base,
                failures=state.failures,
                failure_reason=state.reason,
                failure_kind=state.kind,
            )
        return RunResult(**base)

    def _check_generation(self, generation: int | None, target: ProcessingStatus) -> None:
        if generation is not None and generation != self._generation:
            raise InvalidTransitionError(
                f"{self._state.status.value} (generation {self._generation}, caller {generation})",
                target.value,
            )

    def _transition(self, new_state: RunState) -> None:
        current = self._state.status
        if new_state.status not in self._TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, new_state.status.value)
        self._state = new_state
        self._updated_at = self._now()
        self._logger.info(
            "run.transition",
            from_status=current.value,
            to_status=new_state.status.value,
            generation=self._generation,
        )


def _result_to_dict(result: CandidateResult) -> dict[str, Any]:
    return {
        "resume_id": result.resume_id,
        "candidate_name": result.candidate_name,
        "match_score": result.match_score,
        "skills_match": result.skills_match,
        "experience_match": result.experience_match,
        "education_match": result.education_match,
        "overall_rank": result.overall_rank,
        "matched_skills": list(result.matched_skills),
        "missing_skills": list(result.missing_skills),
        "experience_years": result.experience_years,
        "education_level": result.education_level,
        "sub_scores": dict(result.sub_scores),
        "reasons": list(result.reasons),
    }


def _statistics_to_dict(statistics: RunStatistics) -> dict[str, Any]:
    distribution = statistics.score_distribution
    return {
        "total_candidates": statistics.total_candidates,
        "qualified_candidates": statistics.qualified_candidates,
        "average_score": statistics.average_score,
        "top_score": statistics.top_score,
        "failed_candidates": statistics.failed_candidates,
        "qualification_rate": statistics.qualification_rate,
        "score_distribution": {
            "excellent": distribution.excellent,
            "good": distribution.good,
            "average": distribution.average,
            "poor": distribution.poor,
        },
    }
