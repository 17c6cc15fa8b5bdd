#!/usr/bin/env python3
"""
Tests for the ALSFRS-R questionnaire and scoring engine.
"""

import pytest

from playbook.errors import AnswerValidationError
from playbook.questionnaire_engine import (
    calculate_domain_scores,
    calculate_total_score,
    get_answer,
    score_trend,
    unanswered_questions,
    validate_answers,
)
from playbook.questionnaire_specs import (
    ALSFRS_R_QUESTIONS,
    DOMAIN_QUESTIONS,
    QUESTION_KEYS,
    get_question,
    get_questions_by_domain,
)


def test_questionnaire_shape():
    """Twelve questions, each with five options scored 4 down to 0."""
    assert len(ALSFRS_R_QUESTIONS) == 12
    assert len(set(QUESTION_KEYS)) == 12
    for question in ALSFRS_R_QUESTIONS:
        assert [o["value"] for o in question["options"]] == [4, 3, 2, 1, 0]

    assert DOMAIN_QUESTIONS["bulbar"] == ("speech", "salivation", "swallowing")
    assert len(DOMAIN_QUESTIONS["motor"]) == 6
    assert DOMAIN_QUESTIONS["respiratory"] == ("dyspnea", "orthopnea", "respiratory_insufficiency")


def test_question_lookup():
    assert get_question("walking")["domain"] == "motor"
    assert get_question("unknown") is None
    assert [q["id"] for q in get_questions_by_domain("respiratory")] == list(DOMAIN_QUESTIONS["respiratory"])
    with pytest.raises(ValueError):
        get_questions_by_domain("cognitive")


def test_all_normal_scores_full_marks(normal_answers):
    scores = calculate_domain_scores(normal_answers)
    assert scores == {
        "bulbar": {"score": 12, "max": 12},
        "motor": {"score": 24, "max": 24},
        "respiratory": {"score": 12, "max": 12},
        "total": {"score": 48, "max": 48},
    }


def test_total_is_sum_of_domains(make_answers):
    answers = make_answers(speech=2, walking=0, climbing_stairs=1, orthopnea=3)
    scores = calculate_domain_scores(answers)
    assert scores["bulbar"]["score"] == 10
    assert scores["motor"]["score"] == 17
    assert scores["respiratory"]["score"] == 11
    assert scores["total"]["score"] == 38
    assert calculate_total_score(answers) == 38


def test_missing_answers_count_as_zero():
    scores = calculate_domain_scores({"speech": 3, "dyspnea": 2})
    assert scores["bulbar"]["score"] == 3
    assert scores["motor"]["score"] == 0
    assert scores["respiratory"]["score"] == 2
    assert scores["total"]["score"] == 5
    assert get_answer({}, "speech") == 0
    assert calculate_domain_scores({})["total"] == {"score": 0, "max": 48}


def test_scores_stay_in_range(make_answers):
    worst = {key: 0 for key in QUESTION_KEYS}
    assert calculate_total_score(worst) == 0
    for key in QUESTION_KEYS:
        total = calculate_domain_scores(make_answers(**{key: 0}))["total"]["score"]
        assert total == 44


def test_validate_answers_accepts_complete_set(normal_answers):
    validate_answers(normal_answers)
    validate_answers({"speech": 1}, require_complete=False)


def test_validate_answers_rejects_bad_input(normal_answers):
    with pytest.raises(AnswerValidationError) as exc:
        validate_answers({**normal_answers, "mood": 2})
    assert exc.value.keys == ["mood"]

    with pytest.raises(AnswerValidationError) as exc:
        validate_answers({**normal_answers, "speech": 5})
    assert exc.value.keys == ["speech"]

    with pytest.raises(AnswerValidationError):
        validate_answers({**normal_answers, "walking": -1})

    with pytest.raises(AnswerValidationError):
        validate_answers({**normal_answers, "walking": 2.5})

    with pytest.raises(AnswerValidationError):
        validate_answers({**normal_answers, "walking": True})


def test_validate_answers_reports_unanswered():
    with pytest.raises(AnswerValidationError) as exc:
        validate_answers({"speech": 4})
    assert "speech" not in exc.value.keys
    assert len(exc.value.keys) == 11
    assert unanswered_questions({"speech": 4}) == exc.value.keys


def test_score_trend():
    assert score_trend([]) == 0
    assert score_trend([{"total_score": 40}]) == 0
    # newest first
    assert score_trend([{"total_score": 38}, {"total_score": 42}, {"total_score": 48}]) == -4
    assert score_trend([{"total_score": 30}, {"total_score": 29}]) == 1
