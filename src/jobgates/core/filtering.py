"""Job browsing filtered by gate rules ("jobs you qualify for")."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

import pendulum
import structlog

from ..schemas import JobPosting, Question
from .gates import GateEvaluator

_BOOLEAN_STRINGS = {"true": True, "false": False}

DEFAULT_SIMILAR_LIMIT = 3
MAX_SIMILAR_LIMIT = 10


def normalize_filter_answers(answers: Mapping[str, Any]) -> dict[str, Any]:
    """Turn form-encoded ``"true"``/``"false"`` answers into booleans."""
    normalized: dict[str, Any] = {}
    for key, value in answers.items():
        if isinstance(value, str) and value in _BOOLEAN_STRINGS:
            value = _BOOLEAN_STRINGS[value]
        normalized[key] = value
    return normalized


class JobFilter:
    """Select open jobs whose gates a candidate passes."""

    def __init__(
        self,
        evaluator: GateEvaluator | None = None,
        *,
        coerce_boolean_strings: bool = True,
    ) -> None:
        self._evaluator = evaluator or GateEvaluator()
        self._coerce_boolean_strings = coerce_boolean_strings
        self._logger = structlog.get_logger(__name__)

    def filter_jobs(
        self,
        jobs: Iterable[JobPosting],
        answers: Mapping[str, Any],
        *,
        now: datetime | None = None,
    ) -> list[JobPosting]:
        """Return open jobs the answers qualify for, newest first."""
        if self._coerce_boolean_strings:
            answers = normalize_filter_answers(answers)

        open_jobs = newest_first(self._open_jobs(jobs, now))
        matched = [job for job in open_jobs if self._qualifies(job, answers)]

        self._logger.info("filter.jobs", considered=len(open_jobs), matched=len(matched))
        return matched

    def similar_jobs(
        self,
        jobs: Iterable[JobPosting],
        saved_answers: Mapping[str, Any],
        *,
        exclude_job_id: str,
        applied_job_ids: Iterable[str] = (),
        limit: int | None = DEFAULT_SIMILAR_LIMIT,
        now: datetime | None = None,
    ) -> list[JobPosting]:
        """Suggest other open jobs after an application.

        Saved profile answers are evaluated as stored; the job just applied
        to and jobs already applied to are left out. ``limit`` falls back to
        the default when missing or not positive and is capped at
        ``MAX_SIMILAR_LIMIT``.
        """
        if not limit or limit < 1:
            limit = DEFAULT_SIMILAR_LIMIT
        limit = min(limit, MAX_SIMILAR_LIMIT)
        applied = set(applied_job_ids)

        candidates = newest_first(
            job for job in self._open_jobs(jobs, now) if job.job_id != exclude_job_id
        )
        suggestions = [
            job
            for job in candidates
            if job.job_id not in applied and self._qualifies(job, saved_answers)
        ][:limit]

        self._logger.info(
            "filter.similar_jobs",
            exclude_job_id=exclude_job_id,
            considered=len(candidates),
            suggested=len(suggestions),
        )
        return suggestions

    def filter_questions(
        self,
        jobs: Iterable[JobPosting],
        *,
        now: datetime | None = None,
    ) -> list[Question]:
        """Collect the gate questions asked across all open jobs."""
        reference = now or pendulum.now("UTC")
        by_key: dict[str, Question] = {}
        for job in jobs:
            if job.questionnaire is None or not job.is_open(reference):
                continue
            gate_keys = job.questionnaire.gate_keys()
            for question in job.questionnaire.ordered_questions():
                if question.key in gate_keys and question.key not in by_key:
                    by_key[question.key] = question

        return sorted(by_key.values(), key=lambda question: question.order_index)

    def _open_jobs(self, jobs: Iterable[JobPosting], now: datetime | None) -> list[JobPosting]:
        reference = now or pendulum.now("UTC")
        return [job for job in jobs if job.is_open(reference)]

    def _qualifies(self, job: JobPosting, answers: Mapping[str, Any]) -> bool:
        rules = job.gate_rules()
        return not rules or self._evaluator.evaluate(rules, answers).passed


def newest_first(jobs: Iterable[JobPosting]) -> list[JobPosting]:
    """Order jobs by creation time, newest first; undated jobs go last.

    The sort is stable, so ties keep their input order.
    """
    return sorted(
        jobs,
        key=lambda job: (
            job.created_at is None,
            -job.created_at.timestamp() if job.created_at is not None else 0.0,
        ),
    )
