# modules/repo.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Float, Integer, Text, TIMESTAMP, UniqueConstraint, select
from sqlalchemy.dialects.postgresql import UUID as PGUUID, JSONB
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON as SQLJSON

from .db import Base, engine, session_scope
from .progress import ProgressEntry

log = logging.getLogger(__name__)

UUID_TYPE = PGUUID(as_uuid=False) if engine.dialect.name != "sqlite" else Text
JSON_TYPE = JSONB if engine.dialect.name != "sqlite" else SQLJSON


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# MODELS
# Snapshots are insert-only: a new assessment or plan is a new row.
# -----------------------------------------------------------------------------
class AssessmentSnapshot(Base):
    __tablename__ = "assessments"

    id: Mapped[str] = mapped_column(UUID_TYPE, primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    dominant: Mapped[str] = mapped_column(Text, nullable=False)
    classification: Mapped[dict] = mapped_column(JSON_TYPE, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)


class PlanSnapshot(Base):
    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(UUID_TYPE, primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    assessment_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    plan: Mapped[dict] = mapped_column(JSON_TYPE, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)


class ProgressRecord(Base):
    __tablename__ = "progress_entries"

    id: Mapped[str] = mapped_column(UUID_TYPE, primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    energy_level: Mapped[int] = mapped_column(Integer, nullable=False)
    sleep_quality: Mapped[int] = mapped_column(Integer, nullable=False)
    stress_level: Mapped[int] = mapped_column(Integer, nullable=False)
    digestive_health: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    recorded_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)


class MealCompletion(Base):
    __tablename__ = "meal_completions"
    __table_args__ = (UniqueConstraint("plan_id", "slot_key", name="uq_meal_completion_slot"),)

    id: Mapped[str] = mapped_column(UUID_TYPE, primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    plan_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    slot_key: Mapped[str] = mapped_column(Text, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value.to_dict() if hasattr(value, "to_dict") else dict(value)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# -----------------------------------------------------------------------------
# ASSESSMENTS
# -----------------------------------------------------------------------------
def save_classification(user_id: str, classification: Any) -> str:
    """Store a complete classification snapshot and return its id."""
    if not user_id:
        raise ValueError("user_id is required.")
    payload = _as_dict(classification)

    with session_scope() as s:
        obj = AssessmentSnapshot(
            user_id=user_id,
            dominant=payload["dominant"],
            classification=payload,
        )
        s.add(obj)
        s.flush()
        log.info("repo.assessment.saved user_id=%s id=%s", user_id, obj.id)
        return obj.id


def get_latest_classification(user_id: str) -> Optional[Dict[str, Any]]:
    """Most recent classification snapshot of a user, or ``None``."""
    stmt = (
        select(AssessmentSnapshot)
        .where(AssessmentSnapshot.user_id == user_id)
        .order_by(AssessmentSnapshot.created_at.desc())
        .limit(1)
    )
    with session_scope() as s:
        obj = s.scalars(stmt).first()
        if not obj:
            return None
        return {
            "id": obj.id,
            "user_id": obj.user_id,
            "classification": obj.classification,
            "created_at": _iso(obj.created_at),
        }


# -----------------------------------------------------------------------------
# PLANS
# -----------------------------------------------------------------------------
def save_plan(user_id: str, plan: Any, assessment_id: Optional[str] = None) -> str:
    """Store a complete plan snapshot and return its id."""
    if not user_id:
        raise ValueError("user_id is required.")
    payload = _as_dict(plan)

    with session_scope() as s:
        obj = PlanSnapshot(
            user_id=user_id,
            assessment_id=assessment_id,
            category=payload["category"],
            plan=payload,
        )
        s.add(obj)
        s.flush()
        log.info("repo.plan.saved user_id=%s id=%s", user_id, obj.id)
        return obj.id


def get_latest_plan(user_id: str) -> Optional[Dict[str, Any]]:
    """Most recent plan snapshot of a user, or ``None``."""
    stmt = (
        select(PlanSnapshot)
        .where(PlanSnapshot.user_id == user_id)
        .order_by(PlanSnapshot.created_at.desc())
        .limit(1)
    )
    with session_scope() as s:
        obj = s.scalars(stmt).first()
        if not obj:
            return None
        return {
            "id": obj.id,
            "user_id": obj.user_id,
            "assessment_id": obj.assessment_id,
            "plan": obj.plan,
            "created_at": _iso(obj.created_at),
        }


# -----------------------------------------------------------------------------
# PROGRESS (append-only)
# -----------------------------------------------------------------------------
def append_progress_entry(user_id: str, entry: ProgressEntry) -> str:
    if not user_id:
        raise ValueError("user_id is required.")
    with session_scope() as s:
        obj = ProgressRecord(
            user_id=user_id,
            weight=entry.weight,
            energy_level=entry.energy_level,
            sleep_quality=entry.sleep_quality,
            stress_level=entry.stress_level,
            digestive_health=entry.digestive_health,
            notes=entry.notes,
            recorded_at=entry.recorded_at,
        )
        s.add(obj)
        s.flush()
        return obj.id


def list_progress_entries(user_id: str) -> List[ProgressEntry]:
    """Entries of a user, newest first."""
    stmt = (
        select(ProgressRecord)
        .where(ProgressRecord.user_id == user_id)
        .order_by(ProgressRecord.recorded_at.desc())
    )
    with session_scope() as s:
        return [
            ProgressEntry(
                weight=row.weight,
                energy_level=row.energy_level,
                sleep_quality=row.sleep_quality,
                stress_level=row.stress_level,
                digestive_health=row.digestive_health,
                notes=row.notes,
                recorded_at=row.recorded_at,
            )
            for row in s.scalars(stmt)
        ]


def _completion_exists(plan_id: str, slot_key: str) -> bool:
    stmt = select(MealCompletion.id).where(
        MealCompletion.plan_id == plan_id,
        MealCompletion.slot_key == slot_key,
    )
    with session_scope() as s:
        return s.scalars(stmt).first() is not None


def record_meal_completion(user_id: str, plan_id: str, slot_key: str) -> bool:
    """Mark a meal slot done. Returns ``False`` when it already was."""
    if _completion_exists(plan_id, slot_key):
        return False
    try:
        with session_scope() as s:
            s.add(MealCompletion(user_id=user_id, plan_id=plan_id, slot_key=slot_key))
    except IntegrityError:
        # A concurrent request stored the same slot first.
        log.info("repo.meal.duplicate plan_id=%s slot=%s", plan_id, slot_key)
        return False
    return True


def list_completed_meals(plan_id: str) -> List[str]:
    stmt = (
        select(MealCompletion.slot_key)
        .where(MealCompletion.plan_id == plan_id)
        .order_by(MealCompletion.completed_at)
    )
    with session_scope() as s:
        return list(s.scalars(stmt))
