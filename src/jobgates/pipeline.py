"""File-based screening and job filtering pipeline."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import pendulum
import structlog
from pydantic import ValidationError

from .core import ApplicationScreener, JobFilter
from .schemas import JobPosting, Questionnaire
from . import __version__

_PRIVATE_JOB_FIELDS = ("recruiterEmailTo", "recruiterEmailCc", "questionnaire")


class JobCatalogLoadError(ValueError):
    """Raised when some job records in a catalog are invalid."""

    def __init__(self, errors: list[str], partial: list[JobPosting]):
        super().__init__("Job catalog loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Job catalog loading failed: {self.errors}"


def _read_json(path: Path, what: str) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid {what} JSON in {path}: {exc}") from exc


class QuestionnaireLoader:
    """Load a questionnaire document, or the one embedded in a job."""

    def load(self, path: Path) -> Questionnaire:
        data = _read_json(path, "questionnaire")
        if isinstance(data, dict) and "questionnaire" in data:
            data = data["questionnaire"] or {}
        return Questionnaire.model_validate(data)


class AnswersLoader:
    """Load a flat question key to answer mapping."""

    def load(self, path: Path) -> dict[str, Any]:
        data = _read_json(path, "answers")
        if isinstance(data, dict) and isinstance(data.get("answers"), dict):
            data = data["answers"]
        if not isinstance(data, dict):
            raise ValueError(f"Answers in {path} must be a JSON object")
        return data


class JobCatalogLoader:
    """Load job postings from a JSON array."""

    def load(self, path: Path) -> list[JobPosting]:
        data = _read_json(path, "jobs")
        if isinstance(data, dict):
            data = data.get("jobs", [])
        if not isinstance(data, list):
            raise ValueError(f"Jobs in {path} must be a JSON array")

        jobs: list[JobPosting] = []
        errors: list[str] = []
        for idx, record in enumerate(data):
            try:
                jobs.append(JobPosting.model_validate(record))
            except ValidationError as exc:
                errors.append(f"record {idx}: {exc}")
        if errors:
            raise JobCatalogLoadError(errors, jobs)
        return jobs


class OutputWriter:
    """Persist pipeline results."""

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


class GatePipeline:
    """Run screening and job filtering over JSON files."""

    def __init__(
        self,
        *,
        screener: ApplicationScreener,
        job_filter: JobFilter,
        questionnaire_loader: QuestionnaireLoader | None = None,
        answers_loader: AnswersLoader | None = None,
        job_loader: JobCatalogLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._screener = screener
        self._filter = job_filter
        self._questionnaires = questionnaire_loader or QuestionnaireLoader()
        self._answers = answers_loader or AnswersLoader()
        self._jobs = job_loader or JobCatalogLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def screen(
        self,
        *,
        questionnaire_path: Path,
        answers_path: Path,
        output_path: Path,
        audit_logger: AuditLogger | None = None,
    ) -> dict[str, Any]:
        questionnaire = self._questionnaires.load(questionnaire_path)
        answers = self._answers.load(answers_path)
        outcome = self._screener.screen(questionnaire, answers)
        result = outcome.to_dict()

        if audit_logger:
            audit_logger.append(
                {
                    "questionnaire": str(questionnaire_path),
                    "timestamp": pendulum.now("UTC").to_iso8601_string(),
                    **result,
                }
            )

        self._writer.write(
            output_path,
            {"metadata": self._metadata(), "result": result},
        )
        return result

    def filter_jobs(
        self,
        *,
        jobs_path: Path,
        answers_path: Path,
        output_path: Path,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        jobs, errors = self._load_jobs(jobs_path)
        answers = self._answers.load(answers_path)
        matched = self._filter.filter_jobs(jobs, answers, now=now)
        rendered = [_public_job(job) for job in matched]
        self._writer.write(
            output_path,
            {"metadata": self._metadata(errors=errors), "jobs": rendered},
        )
        return rendered

    def similar_jobs(
        self,
        *,
        jobs_path: Path,
        answers_path: Path,
        output_path: Path,
        exclude_job_id: str,
        applied_job_ids: list[str] | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        jobs, errors = self._load_jobs(jobs_path)
        saved_answers = self._answers.load(answers_path)
        suggestions = self._filter.similar_jobs(
            jobs,
            saved_answers,
            exclude_job_id=exclude_job_id,
            applied_job_ids=applied_job_ids or (),
            limit=limit,
            now=now,
        )
        rendered = [_public_job(job) for job in suggestions]
        self._writer.write(
            output_path,
            {"metadata": self._metadata(errors=errors), "jobs": rendered},
        )
        return rendered

    def filter_questions(
        self,
        *,
        jobs_path: Path,
        output_path: Path,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        jobs, errors = self._load_jobs(jobs_path)
        questions = [
            question.to_public()
            for question in self._filter.filter_questions(jobs, now=now)
        ]
        self._writer.write(
            output_path,
            {"metadata": self._metadata(errors=errors), "questions": questions},
        )
        return questions

    def _load_jobs(self, path: Path) -> tuple[list[JobPosting], list[str]]:
        try:
            return self._jobs.load(path), []
        except JobCatalogLoadError as exc:
            self._logger.warning("jobs.partial_load", errors=exc.errors)
            return exc.partial, exc.errors

    @staticmethod
    def _metadata(errors: list[str] | None = None) -> dict[str, Any]:
        return {
            "errors": errors or [],
            "timestamp": pendulum.now("UTC").to_iso8601_string(),
            "app_version": __version__,
        }


def _public_job(job: JobPosting) -> dict[str, Any]:
    payload = job.model_dump(mode="json", by_alias=True)
    for name in _PRIVATE_JOB_FIELDS:
        payload.pop(name, None)
    return payload
