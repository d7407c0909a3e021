"""
Plan records and collaborator interfaces.

The engine reads activity history and race dates, and writes plans,
through these interfaces only. Any storage (the SQLAlchemy
implementations in repository.py, a fake in tests) can back them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from .constants import Difficulty, Goal, IntensityLevel, Phase, WorkoutType
from .fitness_estimator import ActivityRecord
from .periodization import TrainingBlock


@dataclass
class GeneratedWorkout:
    """A single workout in a generated plan."""
    week_number: int
    day_of_week: int  # 0=Monday, 6=Sunday
    scheduled_date: date
    phase: Phase
    workout_type: WorkoutType
    archetype: str
    title: str
    description: str
    intensity: IntensityLevel
    target_distance_km: Optional[float]
    target_duration_minutes: Optional[float]
    target_pace_min_per_km: Optional[float]
    details: Dict[str, Any] = field(default_factory=dict)
    notes: Optional[str] = None

    # Execution tracking (owned by the collaborator that records runs)
    id: Optional[UUID] = None
    is_completed: bool = False
    completed_activity: Optional[ActivityRecord] = None

    @property
    def estimated_tss(self) -> float:
        return float(self.details.get("tss", 0.0))


@dataclass
class GeneratedPlan:
    """Complete generated training plan."""
    athlete_id: UUID
    name: str
    description: str
    goal: Goal
    start_date: date
    end_date: date
    total_weeks: int
    difficulty: Difficulty
    weekly_volume_start_km: float
    weekly_volume_target_km: float
    baseline_capacity_index: float
    blocks: List[TrainingBlock] = field(default_factory=list)
    workouts: List[GeneratedWorkout] = field(default_factory=list)
    target_race_id: Optional[UUID] = None
    id: Optional[UUID] = None

    def get_week(self, week_number: int) -> List[GeneratedWorkout]:
        """Get all workouts for a specific week."""
        return [w for w in self.workouts if w.week_number == week_number]

    @property
    def weeks(self) -> List[int]:
        return sorted({w.week_number for w in self.workouts})

    @property
    def weekly_loads(self) -> List[float]:
        return [sum(w.estimated_tss for w in self.get_week(week)) for week in range(1, self.total_weeks + 1)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": str(self.id) if self.id else None,
            "athlete_id": str(self.athlete_id),
            "name": self.name,
            "description": self.description,
            "goal": self.goal.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_weeks": self.total_weeks,
            "difficulty": self.difficulty.value,
            "weekly_volume_start_km": self.weekly_volume_start_km,
            "weekly_volume_target_km": self.weekly_volume_target_km,
            "blocks": [b.to_dict() for b in self.blocks],
            "workouts": [
                {
                    "week": w.week_number,
                    "day": w.day_of_week,
                    "date": w.scheduled_date.isoformat(),
                    "phase": w.phase.value,
                    "type": w.workout_type.value,
                    "title": w.title,
                    "intensity": w.intensity.value,
                    "distance_km": w.target_distance_km,
                    "duration_minutes": w.target_duration_minutes,
                    "completed": w.is_completed,
                }
                for w in self.workouts
            ],
        }


class ActivityHistoryProvider(ABC):
    """Source of an athlete's past activities."""

    @abstractmethod
    def get_activities(self, athlete_id: UUID, since: Optional[date] = None) -> List[ActivityRecord]:
        """Activities on or after `since`, oldest first."""


class RaceCalendar(ABC):
    """Lookup for target race dates."""

    @abstractmethod
    def get_race_date(self, race_id: UUID) -> Optional[date]:
        ...


class PlanStore(ABC):
    """Persistence collaborator for plans and their workouts."""

    @abstractmethod
    def create_plan(self, plan: GeneratedPlan) -> UUID:
        """Write the plan header. Returns the new plan id."""

    @abstractmethod
    def add_workouts(self, plan_id: UUID, week_number: int, workouts: List[GeneratedWorkout]) -> None:
        """Write one week of workouts."""

    @abstractmethod
    def get_plan(self, plan_id: UUID) -> Optional[GeneratedPlan]:
        """Plan with its workouts ordered by (week, day), or None."""

    @abstractmethod
    def update_workout(self, workout_id: UUID, changes: Dict[str, Any]) -> None:
        """Apply field changes to one planned workout."""
