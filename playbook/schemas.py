"""Request and response models for the playbook API."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, StrictInt, field_validator

from .errors import AnswerValidationError
from .questionnaire_engine import validate_answers


class AnswerSetRequest(BaseModel):
    """Answers collected so far; every question may still be open."""
    answers: Dict[str, StrictInt]
    previous_answers: Optional[Dict[str, StrictInt]] = None

    @field_validator("answers", "previous_answers")
    @classmethod
    def check_answers(cls, value):
        if value is None:
            return value
        try:
            validate_answers(value, require_complete=False)
        except AnswerValidationError as exc:
            raise ValueError(str(exc)) from exc
        return value


class AssessmentRequest(BaseModel):
    """A finished questionnaire: all twelve questions answered."""
    answers: Dict[str, StrictInt]
    notes: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("answers")
    @classmethod
    def check_answers(cls, value):
        try:
            validate_answers(value, require_complete=True)
        except AnswerValidationError as exc:
            raise ValueError(str(exc)) from exc
        return value


class NotesUpdate(BaseModel):
    notes: Optional[str] = None


class StageSelection(BaseModel):
    stage_id: Optional[str] = None


class PathwaySelection(BaseModel):
    pathway: str


class StageNoteUpdate(BaseModel):
    content: str = ""


class ScorePart(BaseModel):
    score: int
    max: int


class DomainScores(BaseModel):
    bulbar: ScorePart
    motor: ScorePart
    respiratory: ScorePart
    total: ScorePart


class StageTriggerOut(BaseModel):
    stage_id: str
    stage_name: Optional[str] = None
    alert_level: str
    message: str
    triggered_by: List[str]
    defaulted_keys: List[str] = Field(default_factory=list)


class Assessment(BaseModel):
    id: int
    date: str
    answers: Dict[str, int]
    total_score: int
    notes: Optional[str] = None


class AssessmentResult(BaseModel):
    assessment: Assessment
    scores: DomainScores
    triggers: List[StageTriggerOut]


class Progress(BaseModel):
    latest: Optional[Assessment] = None
    previous: Optional[Assessment] = None
    trend: int = 0
    count: int = 0


class AppStateOut(BaseModel):
    current_stage_id: Optional[str] = None
    active_pathway: str = "all"
    stage_notes: Dict[str, str] = Field(default_factory=dict)
    latest_score: Optional[Dict[str, Any]] = None
