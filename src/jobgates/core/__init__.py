"""Core gate evaluation and screening components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .filtering import JobFilter, newest_first, normalize_filter_answers
from .gates import EvaluationResult, FailedRule, GateEvaluator, evaluate_gates
from .screening import (
    ApplicationScreener,
    OneClickOutcome,
    ScreeningOutcome,
    merge_answers,
    missing_gate_keys,
)

__all__ = [
    "ApplicationScreener",
    "EvaluationResult",
    "FailedRule",
    "GateEvaluator",
    "JobFilter",
    "OneClickOutcome",
    "ScreeningOutcome",
    "evaluate_gates",
    "merge_answers",
    "missing_gate_keys",
    "newest_first",
    "normalize_filter_answers",
]
