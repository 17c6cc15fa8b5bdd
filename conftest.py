import os

import pytest

from playbook.questionnaire_specs import QUESTION_KEYS
from playbook.state import AppState
from playbook.storage import AssessmentStore


@pytest.fixture
def normal_answers() -> dict:
    """
    Every question at 4 (normal function).
    """
    return {key: 4 for key in QUESTION_KEYS}


@pytest.fixture
def make_answers(normal_answers):
    """Build a full answer set from the normal baseline plus overrides."""
    def _make(**overrides):
        answers = dict(normal_answers)
        answers.update(overrides)
        return answers
    return _make


@pytest.fixture
def store(tmp_path) -> AssessmentStore:
    """A fresh SQLite store in a temporary directory."""
    store = AssessmentStore(f"sqlite:///{os.path.join(str(tmp_path), 'playbook.db')}")
    store.init_db()
    return store


@pytest.fixture
def state() -> AppState:
    return AppState()
