"""Run orchestration: start, poll, wait, cancel and re-run screening runs."""

from __future__ import annotations

import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

import pendulum
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.batch import BatchEvaluator, BatchOutcome, CandidateFailure, describe_validation_error
from .core.ranking import Ranker
from .core.run import FailureKind, ProcessingStatus, RunResult, ScreeningRun
from .errors import (
    CancellationError,
    EngineClosedError,
    InvalidTransitionError,
    JobValidationError,
    RunFailure,
    RunNotFoundError,
)
from .schemas import CandidateProfile, JobRequirement


class RunOptions(BaseModel):
    """Per-run overrides of the engine defaults."""

    qualifying_threshold: float | None = Field(default=None, ge=0, le=100)
    concurrency_limit: int | None = Field(default=None, ge=1)
    location_bonus_cap: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


@dataclass(slots=True, frozen=True)
class RunHandle:
    """Opaque reference to a run owned by a ``ScreeningEngine``."""

    run_id: str


class ScreeningEngine:
    """Entry point for screening runs.

    ``start_run`` validates the job synchronously and schedules evaluation on
    a background executor. Errors raised while a run executes are captured in
    the run's terminal state and only surface through ``get_run_result``.
    """

    def __init__(
        self,
        *,
        batch_evaluator: BatchEvaluator,
        ranker: Ranker,
        run_workers: int | None = 2,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._batch = batch_evaluator
        self._ranker = ranker
        self._now_provider = now_provider
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, run_workers or 2),
            thread_name_prefix="screenrank-run",
        )
        self._runs: dict[str, ScreeningRun] = {}
        self._futures: dict[str, Future[None]] = {}
        self._lock = threading.Lock()
        self._closed = False
        self._logger = structlog.get_logger(__name__)

    def __enter__(self) -> "ScreeningEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)

    def start_run(
        self,
        job: JobRequirement | Mapping[str, Any],
        candidates: Iterable[CandidateProfile | Mapping[str, Any]],
        options: RunOptions | Mapping[str, Any] | None = None,
    ) -> RunHandle:
        requirement = validate_job(job)
        run_options = self._coerce_options(options)
        run = ScreeningRun(
            self._id_factory(),
            requirement,
            list(candidates),
            options=run_options,
            now_provider=self._now_provider,
        )
        handle = RunHandle(run.run_id)

        with self._lock:
            self._ensure_open()
            if run.run_id in self._runs:
                raise ValueError(f"Duplicate run id generated: {run.run_id!r}")
            self._runs[run.run_id] = run
            if run.candidates:
                self._futures[run.run_id] = self._executor.submit(
                    self._execute, run, run.generation
                )

        self._logger.info(
            "run.created",
            run_id=run.run_id,
            job_id=requirement.job_id,
            candidate_count=len(run.candidates),
        )

        if not run.candidates:
            # an empty pool completes synchronously
            self._execute(run, run.generation)
            completed: Future[None] = Future()
            completed.set_result(None)
            with self._lock:
                self._futures[run.run_id] = completed
        return handle

    def get_run_result(self, handle: RunHandle | str) -> RunResult:
        return self._get_run(handle).snapshot()

    def wait(self, handle: RunHandle | str, timeout: float | None = None) -> RunResult:
        """Block until the run is terminal and return its result.

        Raises ``concurrent.futures.TimeoutError`` when ``timeout`` elapses.
        """
        run = self._get_run(handle)
        with self._lock:
            future = self._futures.get(run.run_id)
        if future is not None:
            future.result(timeout=timeout)
        return run.snapshot()

    def cancel_run(self, handle: RunHandle | str, reason: str = "cancelled by request") -> bool:
        run = self._get_run(handle)
        cancelled = run.request_cancel(reason)
        if cancelled:
            self._logger.info("run.cancelled", run_id=run.run_id, reason=reason)
        return cancelled

    def cancel_runs_for_job(self, job_id: str, reason: str = "job requirement deleted") -> list[str]:
        """Cancel every non-terminal run evaluating ``job_id``."""
        with self._lock:
            runs = [run for run in self._runs.values() if run.job.job_id == job_id]
        return [run.run_id for run in runs if run.request_cancel(reason)]

    def rerun(self, handle: RunHandle | str) -> RunHandle:
        """Re-evaluate a terminal run from scratch.

        Pending or processing runs are left untouched, so repeated calls are
        harmless.
        """
        run = self._get_run(handle)
        with self._lock:
            self._ensure_open()
            reset = run.reset()
            if reset and run.candidates:
                self._futures[run.run_id] = self._executor.submit(
                    self._execute, run, run.generation
                )
        if not reset:
            self._logger.info("run.rerun_ignored", run_id=run.run_id, status=run.status.value)
            return RunHandle(run.run_id)

        self._logger.info("run.rerun", run_id=run.run_id, generation=run.generation)
        if not run.candidates:
            self._execute(run, run.generation)
        return RunHandle(run.run_id)

    def forget(self, handle: RunHandle | str) -> RunResult:
        """Release a terminal run and return its final result.

        Raises ``InvalidTransitionError`` while the run is pending or
        processing.
        """
        run = self._get_run(handle)
        result = run.snapshot()
        if not result.is_terminal:
            raise InvalidTransitionError(result.processing_status.value, "forgotten")
        with self._lock:
            self._runs.pop(run.run_id, None)
            self._futures.pop(run.run_id, None)
        self._logger.info("run.forgotten", run_id=run.run_id)
        return result

    def runs(self) -> list[RunHandle]:
        with self._lock:
            return [RunHandle(run_id) for run_id in self._runs]

    def shutdown(self, *, wait: bool = True, cancel_pending: bool = False) -> None:
        with self._lock:
            self._closed = True
            runs = list(self._runs.values())
        if cancel_pending:
            for run in runs:
                run.request_cancel("engine shutdown")
        self._executor.shutdown(wait=wait)

    def _ensure_open(self) -> None:
        if self._closed:
            raise EngineClosedError("Screening engine has been shut down")

    def _execute(self, run: ScreeningRun, generation: int) -> None:
        try:
            run.start(generation=generation)
        except InvalidTransitionError as exc:
            self._logger.info("run.skipped", run_id=run.run_id, reason=str(exc))
            return

        options: RunOptions = run.options or RunOptions()
        started = time.perf_counter()
        outcome = BatchOutcome()
        try:
            if run.cancel_event.is_set():
                raise CancellationError(run.cancel_reason or "cancelled by request")

            outcome = self._batch.evaluate(
                run.job,
                run.candidates,
                cancel_event=run.cancel_event,
                concurrency_limit=options.concurrency_limit,
                location_bonus_cap=options.location_bonus_cap,
            )
            if outcome.cancelled:
                raise CancellationError(run.cancel_reason or "cancelled by request")
            if not outcome.successes and outcome.failures:
                raise RunFailure(
                    f"All {len(outcome.failures)} candidates failed scoring"
                )

            ranked = self._ranker.rank(
                outcome.successes,
                failed_candidates=len(outcome.failures),
                qualifying_threshold=options.qualifying_threshold,
            )
            run.annotate(processing_time_ms=_elapsed_ms(started))
            if not run.complete(ranked, outcome.failures, generation=generation):
                self._logger.warning(
                    "run.failed",
                    run_id=run.run_id,
                    reason=run.cancel_reason,
                    kind=FailureKind.CANCELLED.value,
                )
                return
            self._logger.info(
                "run.completed",
                run_id=run.run_id,
                total_candidates=ranked.statistics.total_candidates,
                failed_candidates=ranked.statistics.failed_candidates,
                top_score=ranked.statistics.top_score,
            )
        except CancellationError as exc:
            self._finish_failed(run, generation, exc.reason, FailureKind.CANCELLED, outcome.failures, started)
        except RunFailure as exc:
            self._finish_failed(
                run, generation, exc.reason, FailureKind.ALL_CANDIDATES_FAILED, outcome.failures, started
            )
        except Exception as exc:  # noqa: BLE001
            self._logger.exception("run.evaluator_error", run_id=run.run_id)
            self._finish_failed(
                run,
                generation,
                f"{type(exc).__name__}: {exc}",
                FailureKind.EVALUATOR_ERROR,
                outcome.failures,
                started,
            )

    def _finish_failed(
        self,
        run: ScreeningRun,
        generation: int,
        reason: str,
        kind: FailureKind,
        failures: list[CandidateFailure],
        started: float,
    ) -> None:
        run.annotate(processing_time_ms=_elapsed_ms(started))
        run.fail(reason, kind, failures, generation=generation)
        self._logger.warning("run.failed", run_id=run.run_id, reason=reason, kind=kind.value)

    def _get_run(self, handle: RunHandle | str) -> ScreeningRun:
        run_id = handle.run_id if isinstance(handle, RunHandle) else handle
        with self._lock:
            try:
                return self._runs[run_id]
            except KeyError as exc:
                raise RunNotFoundError(run_id) from exc

    @staticmethod
    def _coerce_options(options: RunOptions | Mapping[str, Any] | None) -> RunOptions:
        if options is None:
            return RunOptions()
        if isinstance(options, RunOptions):
            return options
        return RunOptions.model_validate(dict(options))


def validate_job(job: JobRequirement | Mapping[str, Any]) -> JobRequirement:
    """Validate a job requirement, raising ``JobValidationError`` on failure."""
    payload = job.model_dump() if isinstance(job, JobRequirement) else job
    if not isinstance(payload, Mapping):
        raise JobValidationError(f"Job requirement must be a mapping, got {type(job).__name__}")
    try:
        return JobRequirement.model_validate(dict(payload))
    except ValidationError as exc:
        raise JobValidationError(
            f"Invalid job requirement: {describe_validation_error(exc)}",
            errors=exc.errors(include_url=False),
        ) from exc


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = ["RunHandle", "RunOptions", "ScreeningEngine", "validate_job", "ProcessingStatus"]
