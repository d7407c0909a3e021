"""
Plan Optimizer

Re-tunes the upcoming part of an existing plan from a fresh fitness
estimate. Completed workouts are never touched.

- Advanced athletes (capacity index > 50): quality sessions get a 5%
  faster target pace and are marked hard.
- Elevated fatigue (injury risk >= 0.6 or recovery score < 40): every
  non-recovery session is downgraded to moderate with a note.

Both rules skip workouts they have already adjusted, so optimizing
twice with the same estimate is a no-op.
"""

import logging
from typing import Any, Dict, List, Tuple
from uuid import UUID

from core.exceptions import NotFoundError

from .base import GeneratedPlan, GeneratedWorkout, PlanStore
from .constants import (
    ADVANCED_CAPACITY_INDEX,
    FATIGUE_INJURY_RISK,
    FATIGUE_NOTE,
    FATIGUE_RECOVERY_SCORE,
    OPTIMIZED_PACE_FACTOR,
    PACE_OPTIMIZED_KEY,
    QUALITY_WORKOUT_TYPES,
    IntensityLevel,
    WorkoutType,
)
from .fitness_estimator import FitnessProfile

logger = logging.getLogger(__name__)


def is_fatigued(profile: FitnessProfile) -> bool:
    return profile.injury_risk >= FATIGUE_INJURY_RISK or profile.recovery_score < FATIGUE_RECOVERY_SCORE


class PlanOptimizer:

    def adjustments(self, workout: GeneratedWorkout, profile: FitnessProfile) -> Dict[str, Any]:
        """
        Field changes for one upcoming workout (empty when none apply).

        Each rule applies to a workout at most once: the pace speed-up is
        recorded in details and the fatigue note marks a downgrade, so
        re-optimizing with the same profile changes nothing.
        """
        changes: Dict[str, Any] = {}

        if (
            profile.aerobic_capacity_index > ADVANCED_CAPACITY_INDEX
            and workout.workout_type in QUALITY_WORKOUT_TYPES
            and not workout.details.get(PACE_OPTIMIZED_KEY)
        ):
            if workout.target_pace_min_per_km:
                changes["target_pace_min_per_km"] = round(workout.target_pace_min_per_km * OPTIMIZED_PACE_FACTOR, 2)
            changes["intensity"] = IntensityLevel.HARD
            changes["details"] = {**workout.details, PACE_OPTIMIZED_KEY: True}

        if (
            is_fatigued(profile)
            and workout.workout_type != WorkoutType.RECOVERY
            and FATIGUE_NOTE not in (workout.notes or "")
        ):
            changes["intensity"] = IntensityLevel.MODERATE
            changes["notes"] = f"{workout.notes}\n\n{FATIGUE_NOTE}" if workout.notes else FATIGUE_NOTE

        return changes

    def plan_changes(self, plan: GeneratedPlan, profile: FitnessProfile) -> List[Tuple[GeneratedWorkout, Dict[str, Any]]]:
        changes = []
        for workout in plan.workouts:
            if workout.is_completed:
                continue
            workout_changes = self.adjustments(workout, profile)
            if workout_changes:
                changes.append((workout, workout_changes))
        return changes

    def optimize(self, store: PlanStore, plan_id: UUID, athlete_id: UUID, profile: FitnessProfile) -> GeneratedPlan:
        """
        Apply adjustments to the stored plan and return it re-read.

        Raises:
            NotFoundError: plan missing or owned by another athlete
        """
        plan = store.get_plan(plan_id)
        if plan is None or plan.athlete_id != athlete_id:
            raise NotFoundError("Training plan", str(plan_id))

        changes = self.plan_changes(plan, profile)
        for workout, workout_changes in changes:
            store.update_workout(workout.id, workout_changes)

        logger.info(
            f"Optimized plan {plan_id}: {len(changes)} upcoming workouts adjusted "
            f"(VDOT {profile.aerobic_capacity_index:.1f}, fatigued={is_fatigued(profile)})"
        )
        return store.get_plan(plan_id)
