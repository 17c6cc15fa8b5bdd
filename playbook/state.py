"""
Application state owned by the HTTP shell.

Holds the user's chosen stage, the pathway filter, per-stage notes and the
latest assessment score. Scoring and trigger evaluation never read or write
it; the shell passes answers in and stores results here.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .questionnaire_engine import calculate_domain_scores
from .stage_specs import PATHWAY_FILTERS, STAGE_IDS


@dataclass
class AppState:
    current_stage_id: Optional[str] = None
    active_pathway: str = "all"
    stage_notes: Dict[str, str] = field(default_factory=dict)
    latest_score: Optional[Dict[str, Any]] = None

    def set_current_stage(self, stage_id: Optional[str]) -> None:
        if stage_id is not None and stage_id not in STAGE_IDS:
            raise ValueError(f"Unknown stage: {stage_id!r}")
        self.current_stage_id = stage_id

    def set_active_pathway(self, pathway: str) -> None:
        if pathway not in PATHWAY_FILTERS:
            raise ValueError(f"Unknown pathway: {pathway!r}")
        self.active_pathway = pathway

    def set_stage_note(self, stage_id: str, note: str) -> None:
        """Store a note for a stage; blank text removes it."""
        if stage_id not in STAGE_IDS:
            raise ValueError(f"Unknown stage: {stage_id!r}")
        if note.strip():
            self.stage_notes[stage_id] = note
        else:
            self.stage_notes.pop(stage_id, None)

    def set_latest_score(self, answers: Mapping[str, int], assessed_at: Optional[str] = None) -> Dict[str, Any]:
        scores = calculate_domain_scores(answers)
        self.latest_score = {
            "total": scores["total"]["score"],
            "bulbar": scores["bulbar"]["score"],
            "motor": scores["motor"]["score"],
            "respiratory": scores["respiratory"]["score"],
            "answers": dict(answers),
            "date": assessed_at or datetime.now().isoformat(),
        }
        return self.latest_score

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AppState":
        """Rebuild from a snapshot; unknown or invalid values fall back to defaults."""
        state = cls()
        if not data:
            return state
        if data.get("current_stage_id") in STAGE_IDS:
            state.current_stage_id = data["current_stage_id"]
        if data.get("active_pathway") in PATHWAY_FILTERS:
            state.active_pathway = data["active_pathway"]
        state.stage_notes = {
            stage_id: note for stage_id, note in (data.get("stage_notes") or {}).items()
            if stage_id in STAGE_IDS
        }
        state.latest_score = data.get("latest_score")
        return state
