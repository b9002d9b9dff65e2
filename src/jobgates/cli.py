"""Typer CLI entrypoint for gate screening."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml

from .container import GateContainer, create_container
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import load_config

app = typer.Typer(help="Job questionnaire gate screening CLI.")

_CONFIG_OPTION = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")
_LOG_LEVEL_OPTION = typer.Option("INFO", help="Log level for structured logging.")


def _build_container(config: Path | None, log_level: str) -> GateContainer:
    settings: dict[str, Any] = {}
    if config:
        with config.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise typer.BadParameter("Config file must be a YAML object", param_name="config")
        settings = load_config(loaded).to_settings()

    configure_logging(log_level)
    return create_container(settings=settings)


@app.command()
def screen(
    questionnaire: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Questionnaire (or job) JSON path."),
    answers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidate answers JSON path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    config: Optional[Path] = _CONFIG_OPTION,
    log_level: str = _LOG_LEVEL_OPTION,
) -> None:
    """Evaluate a candidate's answers against a questionnaire's gate rules."""
    container = _build_container(config, log_level)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    result = pipeline.screen(
        questionnaire_path=questionnaire,
        answers_path=answers,
        output_path=output,
        audit_logger=audit_logger,
    )
    typer.echo(f"Screening {result['status']}. Results saved to {output}.")


@app.command("filter-jobs")
def filter_jobs(
    jobs: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Job catalog JSON path."),
    answers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidate answers JSON path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    config: Optional[Path] = _CONFIG_OPTION,
    log_level: str = _LOG_LEVEL_OPTION,
) -> None:
    """List open jobs whose gate rules the answers satisfy."""
    container = _build_container(config, log_level)
    matched = container.pipeline().filter_jobs(
        jobs_path=jobs,
        answers_path=answers,
        output_path=output,
    )
    typer.echo(f"Matched {len(matched)} jobs. Results saved to {output}.")


@app.command("similar-jobs")
def similar_jobs(
    jobs: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Job catalog JSON path."),
    answers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Saved candidate answers JSON path."),
    job_id: str = typer.Option(..., help="Job the candidate just applied to."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    applied: Optional[list[str]] = typer.Option(None, help="Job already applied to (repeatable)."),
    limit: int = typer.Option(3, help="Maximum suggestions (capped at 10)."),
    config: Optional[Path] = _CONFIG_OPTION,
    log_level: str = _LOG_LEVEL_OPTION,
) -> None:
    """Suggest other open jobs the saved answers qualify for."""
    container = _build_container(config, log_level)
    suggestions = container.pipeline().similar_jobs(
        jobs_path=jobs,
        answers_path=answers,
        output_path=output,
        exclude_job_id=job_id,
        applied_job_ids=applied or [],
        limit=limit,
    )
    typer.echo(f"Suggested {len(suggestions)} jobs. Results saved to {output}.")


@app.command("filter-questions")
def filter_questions(
    jobs: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Job catalog JSON path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    config: Optional[Path] = _CONFIG_OPTION,
    log_level: str = _LOG_LEVEL_OPTION,
) -> None:
    """Collect the gate questions asked by open jobs."""
    container = _build_container(config, log_level)
    questions = container.pipeline().filter_questions(jobs_path=jobs, output_path=output)
    typer.echo(f"Collected {len(questions)} questions. Results saved to {output}.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
