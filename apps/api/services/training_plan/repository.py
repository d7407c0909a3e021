"""
SQLAlchemy-backed collaborators for the plan engine.

- SqlActivityHistory: Activity rows -> ActivityRecord
- SqlRaceCalendar: Race date lookup
- SqlPlanStore: TrainingPlan / PlannedWorkout persistence

Each week of workouts is committed on its own, so a failure part-way
through generation leaves the earlier weeks in place.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from models import Activity, PlannedWorkout, Race, TrainingPlan

from .base import (
    ActivityHistoryProvider,
    GeneratedPlan,
    GeneratedWorkout,
    PlanStore,
    RaceCalendar,
)
from .constants import Difficulty, Goal, IntensityLevel, LoadProgression, Phase, WorkoutType
from .fitness_estimator import ActivityRecord
from .periodization import TrainingBlock

logger = logging.getLogger(__name__)

# Fields the optimizer (or any caller) may change after generation
UPDATABLE_WORKOUT_FIELDS = {
    "target_pace_min_per_km",
    "target_distance_km",
    "target_duration_minutes",
    "intensity",
    "notes",
    "description",
    "details",
    "completed",
    "completed_activity_id",
}


def activity_to_record(activity: Activity) -> ActivityRecord:
    return ActivityRecord(
        activity_date=activity.activity_date,
        distance_km=activity.distance_km or 0.0,
        duration_minutes=activity.duration_minutes,
        avg_heart_rate=activity.avg_heart_rate,
        perceived_effort=activity.perceived_effort,
        is_race=bool(activity.is_race),
        id=str(activity.id),
    )


def block_to_json(block: TrainingBlock) -> Dict[str, Any]:
    data = block.to_dict()
    data["first_week"] = block.first_week
    return data


def block_from_json(data: Dict[str, Any]) -> TrainingBlock:
    return TrainingBlock(
        phase=Phase(data["phase"]),
        start_date=date.fromisoformat(data["start_date"]),
        end_date=date.fromisoformat(data["end_date"]),
        week_count=data["weeks"],
        load_progression=LoadProgression(data["load_progression"]),
        primary_focus=list(data.get("primary_focus", [])),
        secondary_focus=list(data.get("secondary_focus", [])),
        first_week=data.get("first_week", 1),
    )


class SqlActivityHistory(ActivityHistoryProvider):

    def __init__(self, db: Session):
        self.db = db

    def get_activities(self, athlete_id: UUID, since: Optional[date] = None) -> List[ActivityRecord]:
        query = self.db.query(Activity).filter(Activity.athlete_id == athlete_id)
        if since is not None:
            query = query.filter(Activity.activity_date >= since)
        return [activity_to_record(a) for a in query.order_by(Activity.activity_date.asc()).all()]


class SqlRaceCalendar(RaceCalendar):

    def __init__(self, db: Session):
        self.db = db

    def get_race_date(self, race_id: UUID) -> Optional[date]:
        race = self.db.query(Race).filter(Race.id == race_id).first()
        return race.race_date if race else None


class SqlPlanStore(PlanStore):

    def __init__(self, db: Session):
        self.db = db

    def create_plan(self, plan: GeneratedPlan) -> UUID:
        row = TrainingPlan(
            athlete_id=plan.athlete_id,
            name=plan.name,
            description=plan.description,
            goal=plan.goal.value,
            difficulty=plan.difficulty.value,
            target_race_id=plan.target_race_id,
            plan_start_date=plan.start_date,
            plan_end_date=plan.end_date,
            total_weeks=plan.total_weeks,
            blocks=[block_to_json(b) for b in plan.blocks],
            baseline_vdot=plan.baseline_capacity_index,
            weekly_volume_start_km=plan.weekly_volume_start_km,
            weekly_volume_target_km=plan.weekly_volume_target_km,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return row.id

    def add_workouts(self, plan_id: UUID, week_number: int, workouts: List[GeneratedWorkout]) -> None:
        plan = self.db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
        if plan is None:
            raise NotFoundError("Training plan", str(plan_id))

        rows = [
            PlannedWorkout(
                plan_id=plan_id,
                athlete_id=plan.athlete_id,
                scheduled_date=w.scheduled_date,
                week_number=week_number,
                day_of_week=w.day_of_week,
                workout_type=w.workout_type.value,
                archetype=w.archetype,
                title=w.title,
                description=w.description,
                intensity=w.intensity.value,
                phase=w.phase.value,
                target_duration_minutes=w.target_duration_minutes,
                target_distance_km=w.target_distance_km,
                target_pace_min_per_km=w.target_pace_min_per_km,
                details=w.details,
                notes=w.notes,
            )
            for w in workouts
        ]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except Exception as e:
            logger.error(f"Rolling back week {week_number} of plan {plan_id}: {e}")
            self.db.rollback()
            raise

        for workout, row in zip(workouts, rows):
            workout.id = row.id

    def get_plan(self, plan_id: UUID) -> Optional[GeneratedPlan]:
        row = self.db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
        if row is None:
            return None

        workouts = (
            self.db.query(PlannedWorkout)
            .filter(PlannedWorkout.plan_id == plan_id)
            .order_by(PlannedWorkout.week_number, PlannedWorkout.day_of_week)
            .all()
        )
        return GeneratedPlan(
            id=row.id,
            athlete_id=row.athlete_id,
            name=row.name,
            description=row.description or "",
            goal=Goal(row.goal),
            start_date=row.plan_start_date,
            end_date=row.plan_end_date,
            total_weeks=row.total_weeks,
            difficulty=Difficulty(row.difficulty),
            weekly_volume_start_km=row.weekly_volume_start_km or 0.0,
            weekly_volume_target_km=row.weekly_volume_target_km or 0.0,
            baseline_capacity_index=row.baseline_vdot or 0.0,
            blocks=[block_from_json(b) for b in row.blocks or []],
            workouts=[self._to_workout(w) for w in workouts],
            target_race_id=row.target_race_id,
        )

    def update_workout(self, workout_id: UUID, changes: Dict[str, Any]) -> None:
        row = self.db.query(PlannedWorkout).filter(PlannedWorkout.id == workout_id).first()
        if row is None:
            raise NotFoundError("Planned workout", str(workout_id))

        for key, value in changes.items():
            if key not in UPDATABLE_WORKOUT_FIELDS:
                raise ValidationError(f"Field '{key}' cannot be updated", field=key)
            setattr(row, key, value.value if isinstance(value, Enum) else value)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        # Reload so completed_activity follows a changed completed_activity_id
        self.db.refresh(row)

    @staticmethod
    def _to_workout(row: PlannedWorkout) -> GeneratedWorkout:
        return GeneratedWorkout(
            id=row.id,
            week_number=row.week_number,
            day_of_week=row.day_of_week,
            scheduled_date=row.scheduled_date,
            phase=Phase(row.phase),
            workout_type=WorkoutType(row.workout_type),
            archetype=row.archetype,
            title=row.title,
            description=row.description or "",
            intensity=IntensityLevel(row.intensity),
            target_distance_km=row.target_distance_km,
            target_duration_minutes=row.target_duration_minutes,
            target_pace_min_per_km=row.target_pace_min_per_km,
            details=dict(row.details or {}),
            notes=row.notes,
            is_completed=bool(row.completed),
            completed_activity=activity_to_record(row.completed_activity) if row.completed_activity else None,
        )
