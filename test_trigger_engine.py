#!/usr/bin/env python3
"""
Tests for the stage trigger engine: rule matching, per-stage dedup,
urgent-first ordering and the rule table check.
"""

import logging

import pytest

from playbook.errors import RuleConfigurationError
from playbook.questionnaire_specs import QUESTION_KEYS
from playbook.trigger_engine import (
    TRIGGER_RULES,
    AlertLevel,
    analyze_triggers,
    compare,
    get_alert_priority,
    top_triggers,
    validate_trigger_rules,
)


def stages(triggers):
    return [(t.stage_id, t.alert_level.value) for t in triggers]


def rule(stage, level, message="Check in with your care team.", **clauses):
    base = {"stage": stage, "alert_level": level, "message": message, "triggered_by": ["walking"]}
    base.update(clauses)
    return base


def test_all_normal_triggers_nothing(normal_answers):
    assert analyze_triggers(normal_answers) == []


def test_no_walking_is_urgent(make_answers):
    triggers = analyze_triggers(make_answers(walking=0, climbing_stairs=0))
    assert stages(triggers) == [("L4", "urgent"), ("L2", "recommended")]
    assert triggers[0].message.startswith("You've indicated no walking ability")
    assert triggers[0].triggered_by == ["walking"]


def test_speech_and_writing_loss_gives_single_urgent_b3(make_answers):
    triggers = analyze_triggers(make_answers(speech=2, handwriting=0))
    assert stages(triggers) == [("B2", "urgent"), ("B3", "urgent")]
    b3 = [t for t in triggers if t.stage_id == "B3"]
    assert len(b3) == 1
    assert b3[0].triggered_by == ["speech", "handwriting"]


def test_low_total_suggests_palliative_stage():
    answers = {key: 0 for key in QUESTION_KEYS}
    answers.update(speech=4, salivation=4, swallowing=4, handwriting=3)
    assert sum(answers.values()) == 15

    triggers = analyze_triggers(answers)
    assert stages(triggers) == [
        ("L4", "urgent"),
        ("L2", "recommended"),
        ("C3", "recommended"),
        ("L3", "suggested"),
        ("C4", "suggested"),
    ]
    c4 = triggers[-1]
    assert c4.triggered_by == ["total_score"]
    assert c4.message.startswith("Function significantly affected")
    # C3 keeps its first matching rule among equal levels
    assert triggers[2].triggered_by == ["dressing"]


def test_total_of_sixteen_does_not_reach_c4():
    answers = {key: 0 for key in QUESTION_KEYS}
    answers.update(speech=4, salivation=4, swallowing=4, handwriting=3, respiratory_insufficiency=1)
    triggered = [t.stage_id for t in analyze_triggers(answers)]
    assert "C3" in triggered
    assert "C4" not in triggered


def test_early_changes(make_answers):
    assert stages(analyze_triggers(make_answers(speech=3))) == [("B2", "recommended"), ("B1", "info")]
    # the redundant any-clause never changes the outcome
    assert stages(analyze_triggers(make_answers(walking=3, climbing_stairs=3))) == [
        ("L2", "recommended"), ("L1", "info"),
    ]
    assert stages(analyze_triggers(make_answers(walking=3))) == [("L1", "info")]


def test_higher_priority_overwrites_in_place(make_answers):
    rules = [
        rule("L1", "info", "first", when={"walking": "<=3"}),
        rule("B1", "suggested", "b1", when={"speech": "<=3"}),
        rule("L1", "urgent", "worse", when={"walking": "<=2"}),
        rule("L1", "recommended", "lower", when={"walking": "<=1"}),
        rule("B1", "suggested", "equal", when={"speech": "<=3"}),
    ]
    triggers = analyze_triggers(make_answers(walking=1, speech=3), rules=rules)
    assert stages(triggers) == [("L1", "urgent"), ("B1", "suggested")]
    assert triggers[0].message == "worse"
    assert triggers[1].message == "b1"


def test_equal_priority_keeps_first_match_order(make_answers):
    rules = [
        rule("C2", "info", when={"dyspnea": 3}),
        rule("L1", "info", when={"walking": 3}),
        rule("B1", "suggested", when={"speech": 3}),
    ]
    triggers = analyze_triggers(make_answers(dyspnea=3, walking=3, speech=3), rules=rules)
    assert [t.stage_id for t in triggers] == ["B1", "C2", "L1"]


def test_evaluation_is_deterministic_and_pure(make_answers):
    answers = make_answers(speech=1, swallowing=1, dyspnea=2, dressing=1)
    snapshot = dict(answers)
    first = analyze_triggers(answers)
    assert analyze_triggers(answers) == first
    assert answers == snapshot
    assert len({t.stage_id for t in first}) == len(first)
    priorities = [t.priority for t in first]
    assert priorities == sorted(priorities, reverse=True)


def test_unanswered_questions_are_flagged(caplog):
    with caplog.at_level(logging.WARNING, logger="playbook.trigger_engine"):
        triggers = analyze_triggers({"speech": 4})
    l4 = [t for t in triggers if t.stage_id == "L4"][0]
    assert l4.alert_level == AlertLevel.URGENT
    assert l4.defaulted_keys == ["walking"]
    assert "unanswered questions read as 0" in caplog.text


def test_skip_policy_ignores_unanswered_questions(make_answers):
    triggers = analyze_triggers({"walking": 0}, missing="skip")
    assert stages(triggers) == [("L4", "urgent")]
    assert triggers[0].defaulted_keys == []

    # the total only counts once every question is answered
    assert analyze_triggers({"speech": 4, "dyspnea": 4}, missing="skip") == []

    complete = make_answers(speech=2, handwriting=0, swallowing=1)
    assert analyze_triggers(complete, missing="skip") == analyze_triggers(complete)

    with pytest.raises(ValueError):
        analyze_triggers({}, missing="worst")


def test_change_rules_need_a_previous_answer_set(make_answers):
    rules = [{
        "stage": "B2",
        "when_change": {"speech": "<=-2"},
        "alert_level": "urgent",
        "message": "Speech has changed quickly since your last check-in.",
        "triggered_by": ["speech"],
    }]
    validate_trigger_rules(rules)
    current = make_answers(speech=2)
    assert analyze_triggers(current, rules=rules) == []
    assert analyze_triggers(current, make_answers(speech=3), rules=rules) == []
    assert stages(analyze_triggers(current, make_answers(speech=4), rules=rules)) == [("B2", "urgent")]


def test_top_triggers():
    triggers = analyze_triggers({key: 0 for key in QUESTION_KEYS})
    assert len(triggers) > 4
    assert top_triggers(triggers) == triggers[:4]
    assert top_triggers(triggers, 2) == triggers[:2]
    assert top_triggers(triggers, 0) == []
    with pytest.raises(ValueError):
        top_triggers(triggers, -1)


def test_comparisons_and_priorities():
    assert compare(2, ["<=2", ">0"])
    assert not compare(0, ["<=2", ">0"])
    assert compare(3, "=3")
    assert compare(3, 3)
    assert not compare(3, "<3")
    assert get_alert_priority("urgent") == 4
    assert get_alert_priority("info") == 1
    assert get_alert_priority("critical") == 0


def test_shipped_rules_are_valid():
    assert len(TRIGGER_RULES) == 29
    validate_trigger_rules(TRIGGER_RULES)


@pytest.mark.parametrize("bad_rule", [
    rule("X1", "info", when={"walking": 3}),
    rule("L1", "critical", when={"walking": 3}),
    rule("L1", "info", message="", when={"walking": 3}),
    rule("L1", "info"),
    rule("L1", "info", when={"mood": 3}),
    rule("L1", "info", when={"walking": ">>2"}),
    rule("L1", "info", when={"walking": []}),
    rule("L1", "info", when_change={"total_score": "<0"}),
    {**rule("L1", "info", when={"walking": 3}), "triggered_by": ["mood"]},
    {**rule("L1", "info", when={"walking": 3}), "triggered_by": []},
    {key: value for key, value in rule("L1", "info", when={"walking": 3}).items() if key != "triggered_by"},
    rule("L1", "info", when_any=[]),
])
def test_invalid_rules_are_rejected(bad_rule):
    with pytest.raises(RuleConfigurationError):
        validate_trigger_rules([bad_rule])
