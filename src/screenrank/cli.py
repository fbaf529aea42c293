"""Typer CLI entrypoint for the screening engine."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .config import load_settings
from .container import create_container
from .core.run import ProcessingStatus
from .engine import RunOptions
from .errors import JobValidationError
from .logging import configure_logging
from .pipeline import AuditLogger

app = typer.Typer(help="Candidate screening and ranking CLI.")


@app.command()
def run(
    candidates: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."),
    job: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Job requirement JSON path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    qualifying_threshold: Optional[float] = typer.Option(None, min=0, max=100, help="Score counted as qualified."),
    concurrency: Optional[int] = typer.Option(None, min=1, help="Maximum candidates evaluated in parallel."),
) -> None:
    """Score and rank candidates against a job requirement."""
    try:
        settings = load_settings(config).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc

    configure_logging(log_level)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None
    options = RunOptions(qualifying_threshold=qualifying_threshold, concurrency_limit=concurrency)

    try:
        result = pipeline.run(
            candidates_path=candidates,
            job_path=job,
            output_path=output,
            options=options,
            audit_logger=audit_logger,
        )
    except JobValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    finally:
        container.engine().shutdown()

    if result.processing_status is ProcessingStatus.FAILED:
        typer.echo(f"Run {result.run_id} failed: {result.failure_reason}", err=True)
        raise typer.Exit(code=1)

    statistics = result.statistics
    typer.echo(
        f"Ranked {statistics.total_candidates} candidates "
        f"({statistics.failed_candidates} failed). Results saved to {output}."
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
