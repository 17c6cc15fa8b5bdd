"""
Questionnaire Scoring Engine for the MND Playbook

This module sums ALSFRS-R answers into the bulbar, motor and respiratory
domain scores and the overall total. Scoring is pure: no validation, no I/O.
Validation of collected answers is a separate step (`validate_answers`)
that the collection flow runs before anything is scored or stored.
"""

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .errors import AnswerValidationError
from .questionnaire_specs import (
    DOMAIN_MAXIMA,
    DOMAIN_QUESTIONS,
    DOMAINS,
    MAX_ITEM_SCORE,
    MIN_ITEM_SCORE,
    QUESTION_KEYS,
)

AnswerSet = Mapping[str, int]


def get_answer(answers: AnswerSet, key: str) -> int:
    """Get an answer value; an unanswered question counts as 0."""
    return answers.get(key, 0)


def sum_answers(answers: AnswerSet, keys: Iterable[str]) -> int:
    return sum(get_answer(answers, key) for key in keys)


def calculate_domain_scores(answers: AnswerSet) -> Dict[str, Dict[str, int]]:
    """
    Calculate domain sub-scores and the total.

    Args:
        answers: question id -> score (0-4). Missing keys contribute 0.

    Returns:
        {"bulbar": {"score", "max"}, "motor": ..., "respiratory": ..., "total": ...}
    """
    scores = {
        domain: {"score": sum_answers(answers, DOMAIN_QUESTIONS[domain]), "max": DOMAIN_MAXIMA[domain]}
        for domain in DOMAINS
    }
    scores["total"] = {
        "score": sum(scores[domain]["score"] for domain in DOMAINS),
        "max": DOMAIN_MAXIMA["total"],
    }
    return scores


def calculate_total_score(answers: AnswerSet) -> int:
    """Calculate the 0-48 total that is stored with an assessment."""
    return sum_answers(answers, QUESTION_KEYS)


def validate_answers(answers: Mapping[str, Any], require_complete: bool = True) -> None:
    """
    Check a collected answer set before it is scored or stored.

    Raises:
        AnswerValidationError: unknown question ids, non-integer or
        out-of-range scores, or (when require_complete) unanswered questions.
    """
    unknown = sorted(key for key in answers if key not in QUESTION_KEYS)
    if unknown:
        raise AnswerValidationError(f"Unknown question ids: {', '.join(unknown)}", unknown)

    bad_type = [key for key, value in answers.items()
                if isinstance(value, bool) or not isinstance(value, int)]
    if bad_type:
        raise AnswerValidationError(f"Scores must be whole numbers: {', '.join(bad_type)}", bad_type)

    out_of_range = [key for key, value in answers.items()
                    if not MIN_ITEM_SCORE <= value <= MAX_ITEM_SCORE]
    if out_of_range:
        raise AnswerValidationError(
            f"Scores must be between {MIN_ITEM_SCORE} and {MAX_ITEM_SCORE}: {', '.join(out_of_range)}",
            out_of_range,
        )

    if require_complete:
        missing = unanswered_questions(answers)
        if missing:
            raise AnswerValidationError(f"Unanswered questions: {', '.join(missing)}", missing)


def score_trend(assessments: Sequence[Mapping[str, Any]]) -> int:
    """
    Change in total score between the two most recent assessments.

    `assessments` must be ordered newest first. Negative means decline.
    """
    if len(assessments) < 2:
        return 0
    return assessments[0]["total_score"] - assessments[1]["total_score"]


def unanswered_questions(answers: AnswerSet) -> List[str]:
    return [key for key in QUESTION_KEYS if key not in answers]
