# storage.py
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import (
    create_engine, MetaData, Table, Column,
    Integer, String, DateTime, Text
)
from sqlalchemy.sql import select, insert, update, delete

from .config import STORAGE
from .errors import AssessmentNotFoundError
from .questionnaire_engine import calculate_total_score

logger = logging.getLogger(__name__)

metadata = MetaData()

assessments = Table(
    "assessments", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date", DateTime, nullable=False, index=True),
    Column("answers_json", Text, nullable=False),
    Column("total_score", Integer, nullable=False),
    Column("notes", Text, nullable=True),
)

stage_notes = Table(
    "stage_notes", metadata,
    Column("stage_id", String(8), primary_key=True),
    Column("content", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

# Flat key-value table for the application state snapshot
app_state = Table(
    "app_state", metadata,
    Column("key", String(80), primary_key=True),
    Column("value_json", Text, nullable=False),
)


def to_utc(value: Optional[datetime]) -> datetime:
    """Naive UTC for the date column; naive input is taken to be UTC already."""
    if value is None:
        value = datetime.now(timezone.utc)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _assessment_row(row) -> Dict[str, Any]:
    d = dict(row._mapping)
    return {
        "id": d["id"],
        "date": d["date"].isoformat(),
        "answers": json.loads(d["answers_json"]),
        "total_score": d["total_score"],
        "notes": d["notes"],
    }


class AssessmentStore:
    """Keyed record store for assessments, stage notes and app state."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or STORAGE["database_url"]
        if self.database_url.startswith("sqlite"):
            self.engine = create_engine(self.database_url, connect_args={"check_same_thread": False})
        else:
            self.engine = create_engine(self.database_url, pool_pre_ping=True)

    def init_db(self) -> None:
        metadata.create_all(self.engine)
        logger.info("Storage ready at %s", self.engine.url.render_as_string(hide_password=True))

    # -------------------------
    # Assessments
    # -------------------------
    def add_assessment(self, answers: Mapping[str, int], notes: Optional[str] = None,
                       assessed_at: Optional[datetime] = None) -> Dict[str, Any]:
        """Store a questionnaire submission. Only its notes can change afterwards."""
        with self.engine.begin() as conn:
            result = conn.execute(insert(assessments).values(
                date=to_utc(assessed_at),
                answers_json=json.dumps(dict(answers), sort_keys=True),
                total_score=calculate_total_score(answers),
                notes=notes or None,
            ))
            assessment_id = result.inserted_primary_key[0]
        logger.info("Stored assessment %s", assessment_id)
        return self.get_assessment(assessment_id)

    def get_assessment(self, assessment_id: int) -> Dict[str, Any]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(assessments).where(assessments.c.id == assessment_id)
            ).fetchone()
        if not row:
            raise AssessmentNotFoundError(assessment_id)
        return _assessment_row(row)

    def list_assessments(self, limit: Optional[int] = None,
                         before: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Assessments, newest first. `before` keeps only those dated strictly earlier."""
        query = select(assessments).order_by(assessments.c.date.desc(), assessments.c.id.desc())
        if before is not None:
            query = query.where(assessments.c.date < to_utc(before))
        if limit is not None:
            query = query.limit(limit)
        with self.engine.begin() as conn:
            rows = conn.execute(query).fetchall()
        return [_assessment_row(r) for r in rows]

    def update_notes(self, assessment_id: int, notes: Optional[str]) -> Dict[str, Any]:
        with self.engine.begin() as conn:
            result = conn.execute(
                update(assessments).where(assessments.c.id == assessment_id).values(notes=notes or None)
            )
        if result.rowcount == 0:
            raise AssessmentNotFoundError(assessment_id)
        return self.get_assessment(assessment_id)

    def delete_assessment(self, assessment_id: int) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(delete(assessments).where(assessments.c.id == assessment_id))
        if result.rowcount == 0:
            raise AssessmentNotFoundError(assessment_id)

    # -------------------------
    # Stage notes
    # -------------------------
    def upsert_stage_note(self, stage_id: str, content: str) -> None:
        now = datetime.now()
        with self.engine.begin() as conn:
            exists = conn.execute(
                select(stage_notes.c.stage_id).where(stage_notes.c.stage_id == stage_id)
            ).fetchone()
            if not content.strip():
                conn.execute(delete(stage_notes).where(stage_notes.c.stage_id == stage_id))
            elif exists:
                conn.execute(
                    update(stage_notes).where(stage_notes.c.stage_id == stage_id)
                    .values(content=content, updated_at=now)
                )
            else:
                conn.execute(insert(stage_notes).values(
                    stage_id=stage_id, content=content, created_at=now, updated_at=now
                ))

    def get_stage_notes(self) -> Dict[str, str]:
        with self.engine.begin() as conn:
            rows = conn.execute(select(stage_notes.c.stage_id, stage_notes.c.content)).fetchall()
        return {r[0]: r[1] for r in rows}

    # -------------------------
    # App state snapshot
    # -------------------------
    def save_state(self, state: Mapping[str, Any], key: str = "app") -> None:
        value_json = json.dumps(dict(state))
        with self.engine.begin() as conn:
            exists = conn.execute(select(app_state.c.key).where(app_state.c.key == key)).fetchone()
            if exists:
                conn.execute(update(app_state).where(app_state.c.key == key).values(value_json=value_json))
            else:
                conn.execute(insert(app_state).values(key=key, value_json=value_json))

    def load_state(self, key: str = "app") -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(select(app_state.c.value_json).where(app_state.c.key == key)).fetchone()
        if not row:
            return None
        return json.loads(row[0])
