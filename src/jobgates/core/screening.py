"""Application screening flows built on the gate evaluator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping

import structlog

from ..schemas import GateRule, Question, Questionnaire
from .gates import EvaluationResult, GateEvaluator

SessionStatus = Literal["PASSED", "FAILED"]
OneClickDecision = Literal["APPROVED", "REJECTED", "NEEDS_ANSWERS"]


@dataclass(slots=True)
class ScreeningOutcome:
    """Session status derived from one gate evaluation."""

    status: SessionStatus
    evaluation: EvaluationResult

    @property
    def passed(self) -> bool:
        return self.status == "PASSED"

    def to_dict(self) -> dict[str, Any]:
        payload = self.evaluation.to_dict()
        payload["status"] = self.status
        return payload


@dataclass(slots=True)
class OneClickOutcome:
    """Result of a one-click application attempt."""

    decision: OneClickDecision
    answers: dict[str, Any]
    evaluation: EvaluationResult | None = None
    questions: list[Question] = field(default_factory=list)
    prefill: dict[str, Any] = field(default_factory=dict)
    answers_to_save: dict[str, Any] = field(default_factory=dict)

    @property
    def failed_rules(self) -> list[str]:
        if self.evaluation is None:
            return []
        return list(self.evaluation.failed_rules)


def merge_answers(
    saved: Mapping[str, Any] | None,
    provided: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Overlay freshly provided answers on the candidate's saved ones."""
    merged: dict[str, Any] = dict(saved or {})
    merged.update(provided or {})
    return merged


def missing_gate_keys(
    rules: Iterable[GateRule],
    answers: Mapping[str, Any],
    *,
    treat_empty_string_as_missing: bool = True,
) -> list[str]:
    """Return gate question keys that still lack an answer, first-seen order."""
    missing: list[str] = []
    for rule in rules:
        key = rule.question_key
        if key in missing:
            continue
        value = answers.get(key)
        if value is None or (treat_empty_string_as_missing and value == ""):
            missing.append(key)
    return missing


class ApplicationScreener:
    """Route applications according to their gate evaluation."""

    def __init__(
        self,
        evaluator: GateEvaluator | None = None,
        *,
        treat_empty_string_as_missing: bool = True,
    ) -> None:
        self._evaluator = evaluator or GateEvaluator()
        self._treat_empty_string_as_missing = treat_empty_string_as_missing
        self._logger = structlog.get_logger(__name__)

    def screen(
        self,
        questionnaire: Questionnaire | None,
        answers: Mapping[str, Any],
    ) -> ScreeningOutcome:
        rules = questionnaire.ordered_rules() if questionnaire else []
        evaluation = self._evaluator.evaluate(rules, answers)
        status: SessionStatus = "PASSED" if evaluation.passed else "FAILED"
        self._logger.info(
            "screening.evaluated",
            status=status,
            rule_count=len(rules),
            failed_rules=evaluation.failed_rules,
        )
        return ScreeningOutcome(status=status, evaluation=evaluation)

    def one_click(
        self,
        questionnaire: Questionnaire | None,
        saved_answers: Mapping[str, Any] | None = None,
        provided_answers: Mapping[str, Any] | None = None,
    ) -> OneClickOutcome:
        """Decide a one-click application using saved profile answers.

        Provided answers take precedence over saved ones. When the candidate
        supplied nothing and some gate answers are still missing, the outcome
        asks for exactly those questions instead of evaluating.
        """
        answers = merge_answers(saved_answers, provided_answers)
        rules = questionnaire.ordered_rules() if questionnaire else []
        if not rules:
            return OneClickOutcome(decision="APPROVED", answers=answers)

        if provided_answers:
            outcome = self._decide(rules, answers)
            if outcome.decision == "APPROVED":
                outcome.answers_to_save = dict(provided_answers)
            return outcome

        missing = missing_gate_keys(
            rules,
            answers,
            treat_empty_string_as_missing=self._treat_empty_string_as_missing,
        )
        if missing:
            saved = saved_answers or {}
            questions = [
                question.model_copy(update={"required": True})
                for question in questionnaire.ordered_questions()
                if question.key in missing
            ]
            prefill = {
                question.key: saved[question.key]
                for question in questions
                if question.key in saved
            }
            self._logger.info("screening.needs_answers", missing=missing)
            return OneClickOutcome(
                decision="NEEDS_ANSWERS",
                answers=answers,
                questions=questions,
                prefill=prefill,
            )

        return self._decide(rules, answers)

    def _decide(self, rules: list[GateRule], answers: dict[str, Any]) -> OneClickOutcome:
        evaluation = self._evaluator.evaluate(rules, answers)
        decision: OneClickDecision = "APPROVED" if evaluation.passed else "REJECTED"
        self._logger.info(
            "screening.one_click",
            decision=decision,
            failed_rules=evaluation.failed_rules,
        )
        return OneClickOutcome(decision=decision, answers=answers, evaluation=evaluation)
