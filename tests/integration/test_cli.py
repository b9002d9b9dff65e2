from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from jobgates.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


QUESTIONNAIRE = {
    "version": 1,
    "questions": [
        {"key": "years", "label": "Years of ETRM experience", "type": "NUMBER", "orderIndex": 0},
        {
            "key": "packages",
            "label": "ETRM packages",
            "type": "MULTI_SELECT",
            "optionsJson": '["Endur","Allegro","RightAngle"]',
            "orderIndex": 1,
        },
    ],
    "gateRules": [
        {"questionKey": "years", "operator": "GTE", "valueJson": "3", "orderIndex": 0},
        {"questionKey": "packages", "operator": "INCLUDES_ANY", "valueJson": '["Endur"]', "orderIndex": 1},
    ],
}


def test_screen_writes_result_and_audit_log(tmp_path: Path, runner: CliRunner) -> None:
    questionnaire_path = tmp_path / "questionnaire.json"
    answers_path = tmp_path / "answers.json"
    output_path = tmp_path / "out" / "result.json"
    audit_path = tmp_path / "audit.jsonl"
    write_json(questionnaire_path, {"id": "J1", "questionnaire": QUESTIONNAIRE})
    write_json(answers_path, {"answers": {"years": "2", "packages": ["Allegro"]}})

    result = runner.invoke(
        app,
        [
            "screen",
            "--questionnaire",
            str(questionnaire_path),
            "--answers",
            str(answers_path),
            "--output",
            str(output_path),
            "--audit-log",
            str(audit_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "FAILED" in result.output

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["result"]["status"] == "FAILED"
    assert rendered["result"]["failedRules"] == ["years", "packages"]
    assert rendered["result"]["failedRuleDetails"][0]["actualValue"] == "2"
    assert rendered["metadata"]["app_version"]

    audit_lines = audit_path.read_text(encoding="utf-8").splitlines()
    assert len(audit_lines) == 1
    assert json.loads(audit_lines[0])["failedRules"] == ["years", "packages"]


def test_filter_jobs_and_questions(tmp_path: Path, runner: CliRunner) -> None:
    jobs_path = tmp_path / "jobs.json"
    answers_path = tmp_path / "answers.json"
    jobs_output = tmp_path / "jobs_out.json"
    questions_output = tmp_path / "questions_out.json"
    config_path = tmp_path / "config.yaml"

    jobs = [
        {
            "id": "J1",
            "slug": "endur-analyst",
            "title": "Endur Analyst",
            "expiresAt": "2999-01-01T00:00:00Z",
            "recruiterEmailTo": "hiring@example.com",
            "questionnaire": QUESTIONNAIRE,
        },
        {
            "id": "J2",
            "slug": "open-role",
            "title": "Open Role",
            "expiresAt": "2999-01-01T00:00:00Z",
        },
        {
            "id": "J3",
            "slug": "old-role",
            "title": "Old Role",
            "expiresAt": "2000-01-01T00:00:00Z",
        },
        {"id": "broken"},
    ]
    write_json(jobs_path, jobs)
    write_json(answers_path, {"years": 5, "packages": ["Endur", "Allegro"]})
    config_path.write_text("filtering:\n  coerce_boolean_strings: true\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "filter-jobs",
            "--jobs",
            str(jobs_path),
            "--answers",
            str(answers_path),
            "--output",
            str(jobs_output),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code == 0, result.output
    rendered = json.loads(jobs_output.read_text(encoding="utf-8"))
    assert [job["id"] for job in rendered["jobs"]] == ["J1", "J2"]
    assert "recruiterEmailTo" not in rendered["jobs"][0]
    assert "questionnaire" not in rendered["jobs"][0]
    assert len(rendered["metadata"]["errors"]) == 1

    result = runner.invoke(
        app,
        ["filter-questions", "--jobs", str(jobs_path), "--output", str(questions_output)],
    )

    assert result.exit_code == 0, result.output
    questions = json.loads(questions_output.read_text(encoding="utf-8"))["questions"]
    assert [q["key"] for q in questions] == ["years", "packages"]
    assert questions[1]["options"] == ["Endur", "Allegro", "RightAngle"]


def test_similar_jobs_suggests_newest_qualifying_jobs(tmp_path: Path, runner: CliRunner) -> None:
    jobs_path = tmp_path / "jobs.json"
    answers_path = tmp_path / "saved.json"
    output_path = tmp_path / "similar.json"

    jobs = [
        {
            "id": f"J{idx}",
            "slug": f"role-{idx}",
            "title": f"Role {idx}",
            "expiresAt": "2999-01-01T00:00:00Z",
            "createdAt": f"2026-01-{idx + 10}T00:00:00Z",
        }
        for idx in range(6)
    ]
    jobs[5]["questionnaire"] = QUESTIONNAIRE
    write_json(jobs_path, {"jobs": jobs})
    write_json(answers_path, {"years": 1, "packages": ["Endur"]})

    result = runner.invoke(
        app,
        [
            "similar-jobs",
            "--jobs",
            str(jobs_path),
            "--answers",
            str(answers_path),
            "--job-id",
            "J4",
            "--applied",
            "J3",
            "--limit",
            "2",
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Suggested 2 jobs" in result.output
    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert [job["id"] for job in rendered["jobs"]] == ["J2", "J1"]
    assert rendered["jobs"][0]["createdAt"].startswith("2026-01-12")


def test_config_must_be_mapping(tmp_path: Path, runner: CliRunner) -> None:
    jobs_path = tmp_path / "jobs.json"
    config_path = tmp_path / "config.yaml"
    write_json(jobs_path, [])
    config_path.write_text("- not\n- a mapping\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "filter-questions",
            "--jobs",
            str(jobs_path),
            "--output",
            str(tmp_path / "out.json"),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code != 0
