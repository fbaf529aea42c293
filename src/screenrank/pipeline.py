"""File-based screening pipeline: load inputs, run the engine, write results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pendulum
import structlog

from . import __version__
from .core.batch import CandidateFailure
from .core.run import RunResult
from .engine import RunOptions, ScreeningEngine, validate_job
from .errors import JobValidationError
from .schemas import JobRequirement


class CandidateLoadError(ValueError):
    """Raised when candidate loading encounters unreadable lines."""

    def __init__(self, errors: list[str], partial: list[dict[str, Any]]):
        super().__init__("Candidate loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Candidate loading failed: {self.errors}"


class CandidateLoader:
    """Read raw candidate records from a JSONL file.

    Records are not validated here; the batch evaluator validates each one so
    a malformed profile becomes a per-candidate failure.
    """

    def load(self, path: Path) -> list[dict[str, Any]]:
        candidates: list[dict[str, Any]] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected a JSON object")
                    continue
                candidates.append(record.get("payload", record))
        if errors:
            raise CandidateLoadError(errors, candidates)
        return candidates


class JobLoader:
    """Load and validate a job requirement document."""

    def load(self, path: Path) -> JobRequirement:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise JobValidationError(f"Invalid job JSON: {exc}") from exc
        return validate_job(data)


class OutputWriter:
    """Persist run results."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class ScreeningPipeline:
    """End-to-end file pipeline around a ``ScreeningEngine``."""

    def __init__(
        self,
        *,
        engine: ScreeningEngine,
        candidate_loader: CandidateLoader | None = None,
        job_loader: JobLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._candidates = candidate_loader or CandidateLoader()
        self._jobs = job_loader or JobLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        candidates_path: Path,
        job_path: Path,
        output_path: Path,
        options: RunOptions | None = None,
        audit_logger: AuditLogger | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        job = self._jobs.load(job_path)
        load_errors: list[str] = []
        try:
            candidates = self._candidates.load(candidates_path)
        except CandidateLoadError as exc:
            candidates = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("candidates.partial_load", errors=exc.errors)

        handle = self._engine.start_run(job, candidates, options)
        result = self._engine.wait(handle, timeout=timeout)

        if audit_logger:
            for entry in self._audit_records(result):
                audit_logger.append(entry)

        metadata = {
            "job_id": job.job_id,
            "job_title": job.title,
            "candidate_count": len(candidates),
            "load_errors": load_errors,
            "timestamp": pendulum.now("UTC").to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(output_path, {"metadata": metadata, "run": result.to_dict()})

        self._logger.info(
            "pipeline.finished",
            run_id=result.run_id,
            processing_status=result.processing_status.value,
            output=str(output_path),
        )
        return result

    @staticmethod
    def _audit_records(result: RunResult) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for candidate in (result.results or {}).values():
            records.append(
                {
                    "run_id": result.run_id,
                    "job_id": result.job_id,
                    "candidate_id": candidate.resume_id,
                    "match_score": candidate.match_score,
                    "overall_rank": candidate.overall_rank,
                    "sub_scores": dict(candidate.sub_scores),
                    "status": "scored",
                }
            )
        failures: tuple[CandidateFailure, ...] = result.failures or ()
        for failure in failures:
            records.append(
                {
                    "run_id": result.run_id,
                    "job_id": result.job_id,
                    "candidate_id": failure.candidate_id,
                    "reason": failure.reason,
                    "status": "failed",
                }
            )
        return records
