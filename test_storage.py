#!/usr/bin/env python3
"""
Tests for the SQLAlchemy-backed assessment store.
"""

from datetime import datetime, timedelta, timezone

import pytest

from playbook.errors import AssessmentNotFoundError
from playbook.state import AppState
from playbook.storage import to_utc


def test_add_and_get_assessment(store, make_answers):
    answers = make_answers(speech=3, walking=2)
    saved = store.add_assessment(answers, notes="Tired this week", assessed_at=datetime(2026, 1, 5, 9, 30))

    assert saved["answers"] == answers
    assert saved["total_score"] == 45
    assert saved["notes"] == "Tired this week"
    assert saved["date"] == "2026-01-05T09:30:00"
    assert store.get_assessment(saved["id"]) == saved


def test_history_is_newest_first(store, make_answers):
    store.add_assessment(make_answers(), assessed_at=datetime(2026, 1, 1))
    store.add_assessment(make_answers(walking=1), assessed_at=datetime(2026, 3, 1))
    store.add_assessment(make_answers(walking=3), assessed_at=datetime(2026, 2, 1))

    history = store.list_assessments()
    assert [a["total_score"] for a in history] == [45, 47, 48]
    assert store.list_assessments(limit=1) == history[:1]


def test_notes_can_change(store, normal_answers):
    saved = store.add_assessment(normal_answers)
    assert saved["notes"] is None
    assert store.update_notes(saved["id"], "Physio visit")["notes"] == "Physio visit"
    assert store.update_notes(saved["id"], "")["notes"] is None


def test_missing_assessment(store, normal_answers):
    with pytest.raises(AssessmentNotFoundError):
        store.get_assessment(99)
    with pytest.raises(AssessmentNotFoundError):
        store.update_notes(99, "x")

    saved = store.add_assessment(normal_answers)
    store.delete_assessment(saved["id"])
    assert store.list_assessments() == []
    with pytest.raises(AssessmentNotFoundError):
        store.delete_assessment(saved["id"])


def test_stage_notes(store):
    store.upsert_stage_note("B2", "Start voice banking")
    store.upsert_stage_note("B2", "Voice banking started")
    store.upsert_stage_note("C1", "PEG clinic in May")
    assert store.get_stage_notes() == {"B2": "Voice banking started", "C1": "PEG clinic in May"}

    store.upsert_stage_note("C1", " ")
    assert store.get_stage_notes() == {"B2": "Voice banking started"}


def test_state_snapshot(store, state, normal_answers):
    assert store.load_state() is None
    state.set_active_pathway("lower-limb")
    state.set_latest_score(normal_answers, "2026-02-01T08:00:00")
    store.save_state(state.to_dict())
    state.set_current_stage("L1")
    store.save_state(state.to_dict())

    assert AppState.from_dict(store.load_state()) == state
    assert store.load_state("other") is None


def test_dates_are_kept_in_utc(store, normal_answers):
    aware = datetime(2026, 1, 5, 10, 30, tzinfo=timezone(timedelta(hours=1)))
    saved = store.add_assessment(normal_answers, assessed_at=aware)
    assert saved["date"] == "2026-01-05T09:30:00"
    assert to_utc(datetime(2026, 1, 5, 9, 30)) == datetime(2026, 1, 5, 9, 30)


def test_history_before_a_date(store, make_answers):
    store.add_assessment(make_answers(), assessed_at=datetime(2026, 1, 1))
    store.add_assessment(make_answers(walking=1), assessed_at=datetime(2026, 3, 1))

    earlier = store.list_assessments(limit=1, before=datetime(2026, 2, 1))
    assert [a["total_score"] for a in earlier] == [48]
    assert store.list_assessments(before=datetime(2026, 1, 1)) == []
    plus_two = timezone(timedelta(hours=2))
    assert [a["total_score"] for a in store.list_assessments(before=datetime(2026, 3, 1, 1, 0, tzinfo=plus_two))] == [48]
    assert [a["total_score"] for a in store.list_assessments(before=datetime(2026, 3, 1, 3, 0, tzinfo=plus_two))] == [45, 48]
