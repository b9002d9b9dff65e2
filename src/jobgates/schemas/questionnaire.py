"""Questionnaire, question and gate rule schemas."""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionType(str, Enum):
    BOOLEAN = "BOOLEAN"
    SINGLE_SELECT = "SINGLE_SELECT"
    MULTI_SELECT = "MULTI_SELECT"
    NUMBER = "NUMBER"
    COUNTRY = "COUNTRY"
    TEXT = "TEXT"


class Operator(str, Enum):
    """Comparison applied between an answer and a rule's expected value."""

    EQ = "EQ"
    GTE = "GTE"
    INCLUDES_ANY = "INCLUDES_ANY"
    INCLUDES_ALL = "INCLUDES_ALL"
    IN = "IN"


class Question(BaseModel):
    """Typed questionnaire question."""

    key: str
    label: str = ""
    type: QuestionType = QuestionType.TEXT
    options: list[str] | None = Field(default=None, alias="optionsJson")
    required: bool = False
    order_index: int = Field(default=0, alias="orderIndex")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("options", mode="before")
    @classmethod
    def _decode_options(cls, value: Any) -> Any:
        if isinstance(value, str):
            return json.loads(value)
        return value

    def to_public(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "type": self.type.value,
            "options": self.options,
            "required": self.required,
            "orderIndex": self.order_index,
        }


class GateRule(BaseModel):
    """Single eligibility constraint on one question's answer.

    ``operator`` is kept as a plain string so that rules carrying an operator
    this version does not know still load; they fail at evaluation time.
    """

    question_key: str = Field(alias="questionKey")
    operator: str
    value_json: str = Field(alias="valueJson")
    order_index: int = Field(default=0, alias="orderIndex")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("operator", mode="before")
    @classmethod
    def _operator_name(cls, value: Any) -> Any:
        if isinstance(value, Operator):
            return value.value
        return value

    @classmethod
    def from_authored(
        cls,
        question_key: str,
        operator: Operator | str,
        value: Any,
        order_index: int = 0,
    ) -> "GateRule":
        """Build a rule from a value entered in the job posting form."""
        return cls(
            question_key=question_key,
            operator=operator,
            value_json=serialize_rule_value(value),
            order_index=order_index,
        )


class Questionnaire(BaseModel):
    """Versioned set of questions plus the gate rules applied to them."""

    version: int = 1
    questions: list[Question] = Field(default_factory=list)
    gate_rules: list[GateRule] = Field(default_factory=list, alias="gateRules")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def ordered_rules(self) -> list[GateRule]:
        return sorted(self.gate_rules, key=lambda rule: rule.order_index)

    def ordered_questions(self) -> list[Question]:
        return sorted(self.questions, key=lambda question: question.order_index)

    def gate_keys(self) -> set[str]:
        return {rule.question_key for rule in self.gate_rules}


def serialize_rule_value(value: Any) -> str:
    """Serialize a recruiter-entered rule value to its stored JSON literal.

    Strings that already hold JSON (``'["a","b"]'``, ``'5'``) are stored as
    the literal they spell; any other string is stored as a JSON string.
    Output is compact and non-finite floats are stored as ``null``.
    """
    if isinstance(value, str):
        value = _decode_or_keep(value)
    return json.dumps(_finite(value), ensure_ascii=False, separators=(",", ":"))


def parse_json_literal(text: str) -> Any:
    """Parse strict JSON; the NaN and Infinity extensions are rejected.

    Integers too long for ``int()`` are read as floats, which overflow to
    infinity like any other out-of-range number.
    """
    return json.loads(text, parse_constant=_reject_constant, parse_int=_parse_int)


def _parse_int(token: str) -> int | float:
    try:
        return int(token)
    except ValueError:
        return float(token)


def _finite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (list, tuple)):
        return [_finite(item) for item in value]
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    return value


def _decode_or_keep(text: str) -> Any:
    try:
        return parse_json_literal(text)
    except (ValueError, RecursionError):
        return text


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {token}")
