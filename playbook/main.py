import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from .config import APP
from .errors import AssessmentNotFoundError
from .questionnaire_engine import calculate_domain_scores, score_trend
from .questionnaire_specs import ALSFRS_R_QUESTIONS
from .schemas import (
    AnswerSetRequest,
    AppStateOut,
    Assessment,
    AssessmentRequest,
    AssessmentResult,
    DomainScores,
    NotesUpdate,
    PathwaySelection,
    Progress,
    StageNoteUpdate,
    StageSelection,
    StageTriggerOut,
)
from .stage_specs import get_stage_by_id, get_stages_by_pathway, get_stages_grouped_by_pathway
from .state import AppState
from .storage import AssessmentStore, to_utc
from .trigger_engine import (
    MISSING_AS_ZERO,
    TRIGGER_RULES,
    StageTrigger,
    analyze_triggers,
    top_triggers,
    validate_trigger_rules,
)

logging.basicConfig(
    level=APP["log_level"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Refuse to start with a broken rule table
validate_trigger_rules(TRIGGER_RULES)

app = FastAPI(title=APP["title"])

_store: Optional[AssessmentStore] = None
_state: Optional[AppState] = None


def get_store() -> AssessmentStore:
    global _store
    if _store is None:
        _store = AssessmentStore()
        _store.init_db()
    return _store


def get_state(store: AssessmentStore = Depends(get_store)) -> AppState:
    global _state
    if _state is None:
        _state = AppState.from_dict(store.load_state())
    return _state


def _trigger_out(trigger: StageTrigger) -> StageTriggerOut:
    stage = get_stage_by_id(trigger.stage_id)
    return StageTriggerOut(stage_name=stage["name"] if stage else None, **trigger.to_dict())


@app.get("/")
def read_root():
    return {"message": f"Hello, {APP['title']}!", "disclaimer": APP["disclaimer"]}


@app.get("/questions")
def list_questions():
    return ALSFRS_R_QUESTIONS


@app.get("/stages")
def list_stages(pathway: str = "all"):
    try:
        return get_stages_by_pathway(pathway)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@app.get("/roadmap")
def read_roadmap(pathway: Optional[str] = None, state: AppState = Depends(get_state)):
    """Stages grouped by pathway; defaults to the user's active pathway filter."""
    try:
        return get_stages_grouped_by_pathway(pathway or state.active_pathway)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@app.get("/stages/{stage_id}")
def read_stage(stage_id: str, store: AssessmentStore = Depends(get_store)):
    stage = get_stage_by_id(stage_id)
    if stage is None:
        raise HTTPException(status_code=404, detail=f"Unknown stage: {stage_id}")
    return {**stage, "note": store.get_stage_notes().get(stage_id)}


@app.post("/score", response_model=DomainScores)
def score_answers(request: AnswerSetRequest):
    return calculate_domain_scores(request.answers)


@app.post("/triggers", response_model=List[StageTriggerOut])
def evaluate_triggers(
    request: AnswerSetRequest,
    limit: Optional[int] = Query(None, ge=0),
    missing: str = Query(MISSING_AS_ZERO, pattern="^(zero|skip)$"),
):
    """
    Stage suggestions for a (possibly partial) answer set.
    Use missing=skip for live previews so unanswered questions never trigger.
    """
    triggers = analyze_triggers(request.answers, request.previous_answers, missing=missing)
    if limit is not None:
        triggers = top_triggers(triggers, limit)
    return [_trigger_out(t) for t in triggers]


@app.post("/assessments", response_model=AssessmentResult, status_code=201)
def create_assessment(
    request: AssessmentRequest,
    store: AssessmentStore = Depends(get_store),
    state: AppState = Depends(get_state),
):
    assessed_at = to_utc(request.date)
    earlier = store.list_assessments(limit=1, before=assessed_at)
    previous = earlier[0]["answers"] if earlier else None

    assessment = store.add_assessment(request.answers, notes=request.notes, assessed_at=assessed_at)
    triggers = analyze_triggers(assessment["answers"], previous)

    # A backdated entry joins the history but does not replace the latest score
    if store.list_assessments(limit=1)[0]["id"] == assessment["id"]:
        state.set_latest_score(assessment["answers"], assessment["date"])
        store.save_state(state.to_dict())
    else:
        logger.info("Assessment %s is older than the latest; latest score unchanged", assessment["id"])

    return {
        "assessment": assessment,
        "scores": calculate_domain_scores(assessment["answers"]),
        "triggers": [_trigger_out(t) for t in top_triggers(triggers)],
    }


@app.get("/assessments", response_model=List[Assessment])
def list_assessments(store: AssessmentStore = Depends(get_store)):
    return store.list_assessments()


@app.get("/assessments/{assessment_id}", response_model=Assessment)
def read_assessment(assessment_id: int, store: AssessmentStore = Depends(get_store)):
    try:
        return store.get_assessment(assessment_id)
    except AssessmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.patch("/assessments/{assessment_id}/notes", response_model=Assessment)
def update_assessment_notes(assessment_id: int, request: NotesUpdate,
                            store: AssessmentStore = Depends(get_store)):
    try:
        return store.update_notes(assessment_id, request.notes)
    except AssessmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.delete("/assessments/{assessment_id}", status_code=204)
def delete_assessment(assessment_id: int, store: AssessmentStore = Depends(get_store),
                      state: AppState = Depends(get_state)):
    try:
        store.delete_assessment(assessment_id)
    except AssessmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    history = store.list_assessments(limit=1)
    if history:
        state.set_latest_score(history[0]["answers"], history[0]["date"])
    else:
        state.latest_score = None
    store.save_state(state.to_dict())


@app.get("/progress", response_model=Progress)
def read_progress(store: AssessmentStore = Depends(get_store)):
    history = store.list_assessments()
    return {
        "latest": history[0] if history else None,
        "previous": history[1] if len(history) > 1 else None,
        "trend": score_trend(history),
        "count": len(history),
    }


@app.get("/state", response_model=AppStateOut)
def read_state(state: AppState = Depends(get_state)):
    return state.to_dict()


@app.put("/state/stage", response_model=AppStateOut)
def select_stage(request: StageSelection, store: AssessmentStore = Depends(get_store),
                 state: AppState = Depends(get_state)):
    try:
        state.set_current_stage(request.stage_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    store.save_state(state.to_dict())
    return state.to_dict()


@app.put("/state/pathway", response_model=AppStateOut)
def select_pathway(request: PathwaySelection, store: AssessmentStore = Depends(get_store),
                   state: AppState = Depends(get_state)):
    try:
        state.set_active_pathway(request.pathway)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    store.save_state(state.to_dict())
    return state.to_dict()


@app.put("/state/notes/{stage_id}", response_model=AppStateOut)
def write_stage_note(stage_id: str, request: StageNoteUpdate,
                     store: AssessmentStore = Depends(get_store),
                     state: AppState = Depends(get_state)):
    try:
        state.set_stage_note(stage_id, request.content)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    store.upsert_stage_note(stage_id, request.content)
    store.save_state(state.to_dict())
    return state.to_dict()
