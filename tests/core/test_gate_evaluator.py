from __future__ import annotations

import pytest

from jobgates.core import FailedRule, GateEvaluator, evaluate_gates
from jobgates.core.values import MISSING
from jobgates.schemas import GateRule


def rule(key: str, operator: str, value_json: str, order_index: int = 0) -> GateRule:
    return GateRule(
        question_key=key,
        operator=operator,
        value_json=value_json,
        order_index=order_index,
    )


@pytest.mark.parametrize(
    ("operator", "value_json", "answer", "expected"),
    [
        ("EQ", '"5"', "5", True),
        ("EQ", '"5"', 5, False),
        ("EQ", "5", 5, True),
        ("EQ", "5", 5.0, True),
        ("EQ", "true", True, True),
        ("EQ", "1", True, False),
        ("EQ", "null", None, True),
        ("EQ", '["a"]', ["a"], False),
        ("GTE", '"3"', "4", True),
        ("GTE", "3", 3, True),
        ("GTE", "3", "abc", False),
        ("GTE", "5", "", False),
        ("GTE", "0", None, True),
        ("GTE", "1", True, True),
        ("GTE", "2", ["7"], True),
        ("GTE", "2", [7, 8], False),
        ("GTE", '"abc"', 10, False),
        ("INCLUDES_ANY", '["a","b"]', ["b", "c"], True),
        ("INCLUDES_ANY", '["a","b"]', ["x", "y"], False),
        ("INCLUDES_ANY", '"b"', ["b", "c"], True),
        ("INCLUDES_ANY", '"b"', "b", False),
        ("INCLUDES_ANY", "[]", ["a"], False),
        ("INCLUDES_ANY", "[1]", ["1"], False),
        ("INCLUDES_ALL", '["a","b"]', ["a", "b", "c"], True),
        ("INCLUDES_ALL", '["a","b"]', ["a"], False),
        ("INCLUDES_ALL", "[]", ["a"], True),
        ("INCLUDES_ALL", "[]", "a", False),
        ("INCLUDES_ALL", '"a"', ["a"], False),
        ("IN", '["x","y"]', "x", True),
        ("IN", '["x","y"]', "z", False),
        ("IN", '"x"', "x", False),
        ("IN", "[1, 2]", 2, True),
        ("IN", "[1, 2]", "2", False),
        ("IN", '[["x"]]', ["x"], False),
    ],
)
def test_operator_semantics(operator: str, value_json: str, answer: object, expected: bool):
    result = evaluate_gates([rule("k", operator, value_json)], {"k": answer})

    assert result.passed is expected


@pytest.mark.parametrize(
    ("operator", "value_json"),
    [
        ("EQ", "null"),
        ("GTE", "0"),
        ("INCLUDES_ANY", '["a"]'),
        ("INCLUDES_ALL", "[]"),
        ("IN", "[null]"),
    ],
)
def test_missing_answer_fails_every_operator(operator: str, value_json: str):
    result = evaluate_gates([rule("k", operator, value_json)], {})

    assert result.passed is False
    assert result.failed_rule_details[0].actual_value is MISSING


def test_unknown_operator_fails_closed():
    result = evaluate_gates([rule("k", "LTE", "10")], {"k": 1})

    assert result.passed is False
    assert result.failed_rules == ["k"]
    assert result.failed_rule_details[0].operator == "LTE"


def test_malformed_value_records_raw_string_and_continues():
    rules = [
        rule("broken", "EQ", "not-json"),
        rule("ok", "EQ", '"yes"'),
        rule("nan", "GTE", "NaN"),
    ]

    result = evaluate_gates(rules, {"broken": "not-json", "ok": "yes", "nan": 1})

    assert result.failed_rules == ["broken", "nan"]
    assert result.failed_rule_details[0] == FailedRule("broken", "EQ", "not-json", "not-json")
    assert result.failed_rule_details[1].expected_value == "NaN"


def test_failed_rules_follow_rule_order():
    rules = [
        rule("r1", "EQ", '"a"'),
        rule("r2", "EQ", '"b"'),
        rule("r3", "GTE", "10"),
    ]

    result = evaluate_gates(rules, {"r1": "x", "r2": "b", "r3": 2})

    assert result.failed_rules == ["r1", "r3"]
    assert [d.question_key for d in result.failed_rule_details] == ["r1", "r3"]
    assert result.failed_rule_details[1].expected_value == 10
    assert result.failed_rule_details[1].actual_value == 2


def test_duplicate_keys_produce_one_entry_per_failing_rule():
    rules = [
        rule("years", "GTE", "3"),
        rule("years", "GTE", "5"),
    ]

    result = evaluate_gates(rules, {"years": 1})

    assert result.failed_rules == ["years", "years"]


def test_pass_flag_matches_failure_lists():
    evaluator = GateEvaluator()
    passing = evaluator.evaluate([rule("k", "IN", '["x"]')], {"k": "x"})
    failing = evaluator.evaluate([rule("k", "IN", '["x"]')], {"k": "y"})

    assert passing.passed and passing.failed_rules == [] and passing.failed_rule_details == []
    assert not failing.passed
    assert len(failing.failed_rules) == len(failing.failed_rule_details) == 1


def test_no_rules_passes():
    assert evaluate_gates([], {"anything": 1}).passed is True


def test_evaluation_is_idempotent():
    rules = [rule("a", "INCLUDES_ALL", '["x","y"]'), rule("b", "EQ", "bad json")]
    answers = {"a": ["x"], "b": 1}

    first = evaluate_gates(rules, answers)
    second = evaluate_gates(rules, answers)

    assert first == second
    assert answers == {"a": ["x"], "b": 1}


def test_to_dict_renders_wire_shape():
    result = evaluate_gates([rule("skills", "INCLUDES_ANY", '["python"]')], {})

    assert result.to_dict() == {
        "passed": False,
        "failedRules": ["skills"],
        "failedRuleDetails": [
            {
                "questionKey": "skills",
                "operator": "INCLUDES_ANY",
                "expectedValue": ["python"],
                "actualValue": None,
            }
        ],
    }


def test_deeply_nested_rule_value_is_treated_as_malformed():
    value_json = "[" * 100_000 + "]" * 100_000
    rules = [rule("deep", "IN", value_json), rule("ok", "EQ", '"yes"')]

    result = evaluate_gates(rules, {"deep": "x", "ok": "yes"})

    assert result.failed_rules == ["deep"]
    assert result.failed_rule_details[0].expected_value == value_json


def test_deeply_nested_answer_fails_closed():
    nested: list = []
    for _ in range(100_000):
        nested = [nested]

    result = evaluate_gates([rule("skills", "INCLUDES_ANY", '["a"]')], {"skills": nested})

    assert result.passed is False
    assert result.failed_rules == ["skills"]
    assert result.failed_rule_details[0].actual_value is nested


def test_integer_literal_beyond_int_digit_limit_is_infinite():
    value_json = "1" * 5000

    assert evaluate_gates([rule("k", "GTE", value_json)], {"k": "Infinity"}).passed is True
    assert evaluate_gates([rule("k", "GTE", value_json)], {"k": 10**20}).passed is False
