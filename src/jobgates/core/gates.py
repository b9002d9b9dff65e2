"""Gate rule evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

import structlog

from ..schemas import GateRule, Operator, parse_json_literal
from .values import (
    MISSING,
    ArrayValue,
    Value,
    contains,
    strict_equals,
    to_number,
    to_value,
)

OperatorCheck = Callable[[Value, Value], bool]


@dataclass(slots=True)
class FailedRule:
    """Diagnostic record for a rule the answers did not satisfy."""

    question_key: str
    operator: str
    expected_value: Any
    actual_value: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionKey": self.question_key,
            "operator": self.operator,
            "expectedValue": self.expected_value,
            "actualValue": None if self.actual_value is MISSING else self.actual_value,
        }


@dataclass(slots=True)
class EvaluationResult:
    """Outcome of evaluating every gate rule against one answer set."""

    passed: bool
    failed_rules: list[str] = field(default_factory=list)
    failed_rule_details: list[FailedRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "failedRules": list(self.failed_rules),
            "failedRuleDetails": [detail.to_dict() for detail in self.failed_rule_details],
        }


def _eq(answer: Value, expected: Value) -> bool:
    return strict_equals(answer, expected)


def _gte(answer: Value, expected: Value) -> bool:
    # NaN compares false against everything
    return to_number(answer) >= to_number(expected)


def _includes_any(answer: Value, expected: Value) -> bool:
    if not isinstance(answer, ArrayValue):
        return False
    if isinstance(expected, ArrayValue):
        return any(contains(answer, item) for item in expected.items)
    return contains(answer, expected)


def _includes_all(answer: Value, expected: Value) -> bool:
    if not isinstance(answer, ArrayValue) or not isinstance(expected, ArrayValue):
        return False
    return all(contains(answer, item) for item in expected.items)


def _in(answer: Value, expected: Value) -> bool:
    if not isinstance(expected, ArrayValue):
        return False
    return contains(expected, answer)


OPERATORS: dict[str, OperatorCheck] = {
    Operator.EQ.value: _eq,
    Operator.GTE.value: _gte,
    Operator.INCLUDES_ANY.value: _includes_any,
    Operator.INCLUDES_ALL.value: _includes_all,
    Operator.IN.value: _in,
}


class GateEvaluator:
    """Decide whether a candidate's answers satisfy a job's gate rules.

    Evaluation is a single pass over the rules in the order given. Malformed
    rule values, unknown operators and missing answers all turn into failed
    rules; nothing here raises for bad data.
    """

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def evaluate(
        self,
        rules: Iterable[GateRule],
        answers: Mapping[str, Any],
    ) -> EvaluationResult:
        failed_rules: list[str] = []
        details: list[FailedRule] = []

        for rule in rules:
            answer = answers.get(rule.question_key, MISSING)
            try:
                expected = parse_json_literal(rule.value_json)
            except (ValueError, RecursionError):
                self._logger.warning(
                    "gate_rule.malformed_value",
                    question_key=rule.question_key,
                    operator=rule.operator,
                    value_json=rule.value_json,
                )
                failed_rules.append(rule.question_key)
                details.append(
                    FailedRule(rule.question_key, rule.operator, rule.value_json, answer)
                )
                continue

            if self._check(rule, answer, expected):
                continue
            failed_rules.append(rule.question_key)
            details.append(FailedRule(rule.question_key, rule.operator, expected, answer))

        return EvaluationResult(
            passed=not failed_rules,
            failed_rules=failed_rules,
            failed_rule_details=details,
        )

    def _check(self, rule: GateRule, answer: Any, expected: Any) -> bool:
        check = OPERATORS.get(rule.operator)
        if check is None:
            self._logger.warning(
                "gate_rule.unknown_operator",
                question_key=rule.question_key,
                operator=rule.operator,
            )
            return False
        try:
            return check(to_value(answer), to_value(expected))
        except RecursionError:
            self._logger.warning(
                "gate_rule.nesting_too_deep",
                question_key=rule.question_key,
                operator=rule.operator,
            )
            return False


_DEFAULT_EVALUATOR = GateEvaluator()


def evaluate_gates(
    rules: Iterable[GateRule],
    answers: Mapping[str, Any],
) -> EvaluationResult:
    """Evaluate ``rules`` against ``answers`` with a shared stateless evaluator."""
    return _DEFAULT_EVALUATOR.evaluate(rules, answers)


__all__ = [
    "EvaluationResult",
    "FailedRule",
    "GateEvaluator",
    "OPERATORS",
    "evaluate_gates",
]
