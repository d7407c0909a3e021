"""
Plan Assembler

Main orchestrator for plan generation. Coordinates the fitness
estimate, periodization, weekly load and microcycle expansion to produce
a complete dated plan, then hands it to the plan store.

Usage:
    assembler = PlanAssembler()

    # Pure: no persistence
    plan = assembler.build_plan(
        athlete_id=athlete_id,
        goal="first_10k",
        start_date=date(2026, 1, 5),
        end_date=date(2026, 4, 27),
        profile=profile,
    )

    # Build and persist (one header write, then one write per week)
    plan = assembler.generate_plan(..., store=store)
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence, Union
from uuid import UUID

from core.exceptions import PlanGenerationFailed, ValidationError
from core.logging import plan_context

from .base import GeneratedPlan, GeneratedWorkout, PlanStore
from .constants import (
    DAY_NAMES,
    GOAL_ADAPTATION_TARGETS,
    Goal,
    TARGET_ADJUSTMENT_RANGE,
    TARGET_WEEKLY_KM,
)
from .fitness_estimator import FitnessProfile, clamp
from .load_calculator import AdaptiveLoadCalculator
from .microcycle import MicrocycleGenerator, ScheduledWorkout
from .periodization import PeriodizationPlanner, TrainingBlock, resolve_goal
from .workout_text import (
    describe_workout,
    intensity_for,
    segment_paces,
    workout_metadata,
    workout_totals,
)

logger = logging.getLogger(__name__)


def plan_weeks(start_date: date, end_date: date) -> int:
    """Whole weeks between start and end (at least one)."""
    if end_date <= start_date:
        raise ValidationError("end_date must be after start_date", field="end_date")
    return max(1, (end_date - start_date).days // 7)


def scheduled_date_for(start_date: date, week_number: int, day_of_week: int) -> date:
    """First date on or after the week's start that falls on day_of_week."""
    week_start = start_date + timedelta(weeks=week_number - 1)
    return week_start + timedelta(days=(day_of_week - week_start.weekday()) % 7)


def calculate_target_volume(goal: Goal, profile: FitnessProfile) -> float:
    """Goal base target scaled by current volume, within 0.7x-1.5x."""
    base = TARGET_WEEKLY_KM.get(goal, TARGET_WEEKLY_KM[Goal.GENERAL_FITNESS])
    multiplier = clamp(profile.current_weekly_volume_km / base, *TARGET_ADJUSTMENT_RANGE)
    return float(round(base * multiplier))


def describe_plan(goal: Goal, blocks: Sequence[TrainingBlock]) -> str:
    layout = ", ".join(f"{b.week_count}wk {b.phase.value}" for b in blocks)
    return (
        f"Adaptive {goal.value.replace('_', ' ')} training plan with {layout}. "
        "Personalized using VDOT, critical speed, and recovery-guided load. "
        f"Focus: {', '.join(GOAL_ADAPTATION_TARGETS.get(goal, []))}."
    )


class PlanAssembler:
    """
    Produce plans from a fitness profile.

    Stateless; components can be swapped for tests.
    """

    def __init__(
        self,
        planner: Optional[PeriodizationPlanner] = None,
        load_calculator: Optional[AdaptiveLoadCalculator] = None,
        microcycles: Optional[MicrocycleGenerator] = None,
    ):
        self.planner = planner or PeriodizationPlanner()
        self.load_calculator = load_calculator or AdaptiveLoadCalculator()
        self.microcycles = microcycles or MicrocycleGenerator()

    def build_plan(
        self,
        athlete_id: UUID,
        goal: Union[str, Goal],
        start_date: date,
        end_date: date,
        profile: FitnessProfile,
        available_days: Optional[Sequence[int]] = None,
        cross_training: bool = False,
        name: Optional[str] = None,
        description: Optional[str] = None,
        target_race_id: Optional[UUID] = None,
    ) -> GeneratedPlan:
        """Build the full plan in memory."""
        goal = resolve_goal(goal)
        total_weeks = plan_weeks(start_date, end_date)
        blocks = self.planner.build_blocks(goal, total_weeks, start_date, profile)

        plan = GeneratedPlan(
            athlete_id=athlete_id,
            name=name or f"{goal.value.replace('_', ' ').title()} Plan",
            description=description or describe_plan(goal, blocks),
            goal=goal,
            start_date=start_date,
            end_date=blocks[-1].end_date,
            total_weeks=total_weeks,
            difficulty=profile.difficulty,
            weekly_volume_start_km=round(profile.current_weekly_volume_km, 1),
            weekly_volume_target_km=calculate_target_volume(goal, profile),
            baseline_capacity_index=round(profile.aerobic_capacity_index, 1),
            blocks=blocks,
            target_race_id=target_race_id,
        )

        for block, weekly in self.load_calculator.weekly_loads(blocks, profile, total_weeks):
            cycle = self.microcycles.generate(
                block.phase, weekly.target_load, profile, available_days, cross_training=cross_training,
            )
            for scheduled in cycle.workouts:
                plan.workouts.append(
                    self._build_workout(plan, block, weekly.week_number, scheduled, profile)
                )

        return plan

    def generate_plan(
        self,
        store: PlanStore,
        athlete_id: UUID,
        goal: Union[str, Goal],
        start_date: date,
        end_date: date,
        profile: FitnessProfile,
        available_days: Optional[Sequence[int]] = None,
        cross_training: bool = False,
        name: Optional[str] = None,
        description: Optional[str] = None,
        target_race_id: Optional[UUID] = None,
    ) -> GeneratedPlan:
        """
        Build the plan and persist it: one header write, then one write
        per week. A failed write stops generation; weeks already written
        are not rolled back.

        Raises:
            PlanGenerationFailed: carrying how many weeks were written
        """
        plan = self.build_plan(
            athlete_id, goal, start_date, end_date, profile,
            available_days=available_days,
            cross_training=cross_training,
            name=name,
            description=description,
            target_race_id=target_race_id,
        )
        logger.info(
            f"Generating {plan.goal.value} plan for athlete {athlete_id}: "
            f"{plan.total_weeks} weeks, {len(plan.workouts)} workouts"
        )

        try:
            plan.id = store.create_plan(plan)
        except Exception as e:
            logger.error(
                f"Failed to create plan header for athlete {athlete_id}: {e}",
                extra=plan_context(athlete_id=athlete_id),
            )
            raise PlanGenerationFailed(None, 0, str(e)) from e

        weeks_completed = 0
        for week_number in range(1, plan.total_weeks + 1):
            workouts = plan.get_week(week_number)
            if not workouts:
                weeks_completed += 1
                continue
            try:
                store.add_workouts(plan.id, week_number, workouts)
            except Exception as e:
                logger.error(
                    f"Failed to write week {week_number} of plan {plan.id}: {e}",
                    extra=plan_context(plan_id=plan.id, athlete_id=athlete_id, week=week_number),
                )
                raise PlanGenerationFailed(plan.id, weeks_completed, str(e)) from e
            weeks_completed += 1

        logger.info(
            f"Plan {plan.id} written ({weeks_completed} weeks)",
            extra=plan_context(plan_id=plan.id, athlete_id=athlete_id),
        )
        return plan

    def _build_workout(
        self,
        plan: GeneratedPlan,
        block: TrainingBlock,
        week_number: int,
        scheduled: ScheduledWorkout,
        profile: FitnessProfile,
    ) -> GeneratedWorkout:
        archetype = scheduled.archetype
        paces = segment_paces(archetype, profile.zone_paces)
        totals = workout_totals(archetype, profile.zone_paces)

        details = workout_metadata(archetype, paces)
        details["phase_week"] = week_number - block.first_week + 1
        details["key_session"] = scheduled.is_key_session
        details["day_name"] = DAY_NAMES[scheduled.day_of_week]

        return GeneratedWorkout(
            week_number=week_number,
            day_of_week=scheduled.day_of_week,
            scheduled_date=scheduled_date_for(plan.start_date, week_number, scheduled.day_of_week),
            phase=block.phase,
            workout_type=archetype.workout_type,
            archetype=archetype.key.value,
            title=archetype.title,
            description=describe_workout(archetype, paces),
            intensity=intensity_for(archetype),
            target_distance_km=totals.distance_km if archetype.is_running else None,
            target_duration_minutes=totals.duration_minutes,
            target_pace_min_per_km=totals.avg_pace_min_per_km,
            details=details,
        )
