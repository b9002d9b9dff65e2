"""Pydantic schema definitions for questionnaires and job postings."""

from __future__ import annotations

from .job import JobPosting, JobStatus
from .questionnaire import (
    GateRule,
    Operator,
    Question,
    Questionnaire,
    QuestionType,
    parse_json_literal,
    serialize_rule_value,
)

__all__ = [
    "GateRule",
    "JobPosting",
    "JobStatus",
    "Operator",
    "Question",
    "QuestionType",
    "Questionnaire",
    "parse_json_literal",
    "serialize_rule_value",
]
