"""Exception hierarchy for the screening engine."""

from __future__ import annotations

from typing import Any


class ScreeningError(Exception):
    """Base class for all screening engine errors."""


class JobValidationError(ScreeningError, ValueError):
    """Raised when a job requirement violates its invariants.

    Raised synchronously from ``ScreeningEngine.start_run``; no run is created.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class CandidateScoringError(ScreeningError):
    """A single candidate could not be validated or scored."""

    def __init__(self, candidate_id: str, reason: str):
        super().__init__(f"{candidate_id}: {reason}")
        self.candidate_id = candidate_id
        self.reason = reason


class RunFailure(ScreeningError):
    """A run could not produce any results."""

    kind = "run_failure"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class CancellationError(RunFailure):
    """A run was cancelled while pending or processing."""

    kind = "cancelled"


class InvalidTransitionError(ScreeningError):
    """Raised when a run is asked to move to a state it cannot reach."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot transition run from {current!r} to {target!r}")
        self.current = current
        self.target = target


class EngineClosedError(ScreeningError, RuntimeError):
    """Raised when a run is started on an engine that has been shut down."""


class RunNotFoundError(ScreeningError, KeyError):
    """Raised when a run handle is unknown to the engine."""

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Unknown run: {self.args[0]!r}"


__all__ = [
    "ScreeningError",
    "JobValidationError",
    "CandidateScoringError",
    "RunFailure",
    "CancellationError",
    "InvalidTransitionError",
    "RunNotFoundError",
    "EngineClosedError",
]
