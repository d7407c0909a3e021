"""
Microcycle Generator

Expands one week's target load into concrete workouts:

1. Split the load 80/20 into easy and hard budgets (polarized).
2. Place the phase's key sessions against the hard budget, greedily,
   until the budget is spent or the key sessions run out.
3. Fill the easy budget with aerobic runs (recovery jogs once less than
   30 TSS remains) until under 20 TSS or out of days.
4. Hard sessions prefer Tue/Thu/Sat; easy ones take the first free day.

The day assignment is greedy and order-dependent, not optimal.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .constants import (
    Phase,
    ALL_DAYS,
    EASY_FILL_FLOOR_TSS,
    EASY_LOAD_SHARE,
    HARD_DAY_PREFERENCE,
    HARD_LOAD_SHARE,
)
from .fitness_estimator import FitnessProfile
from .workout_catalog import WorkoutArchetype, key_workouts_for_phase, select_easy_workout

logger = logging.getLogger(__name__)


@dataclass
class ScheduledWorkout:
    archetype: WorkoutArchetype
    day_of_week: int           # 0=Monday, 6=Sunday
    load: float
    is_key_session: bool


@dataclass
class Microcycle:
    phase: Phase
    total_load: float
    easy_budget: float
    hard_budget: float
    workouts: List[ScheduledWorkout] = field(default_factory=list)

    @property
    def pattern(self) -> str:
        return f"{self.phase.value}_microcycle"

    @property
    def recovery_ratio(self) -> float:
        return self.easy_budget / self.total_load if self.total_load > 0 else 0.0

    @property
    def planned_load(self) -> float:
        return sum(w.load for w in self.workouts)


def select_training_day(used_days: Sequence[int], available_days: Sequence[int], hard: bool) -> Optional[int]:
    """Pick a free day, or None when the week is full."""
    free_days = [d for d in available_days if d not in used_days]
    if not free_days:
        return None
    if hard:
        preferred = [d for d in HARD_DAY_PREFERENCE if d in free_days]
        if preferred:
            return preferred[0]
    return free_days[0]


class MicrocycleGenerator:

    def generate(
        self,
        phase: Phase,
        weekly_load: float,
        profile: Optional[FitnessProfile] = None,
        available_days: Optional[Sequence[int]] = None,
        cross_training: bool = False,
    ) -> Microcycle:
        """
        Build one week.

        Args:
            phase: Phase of the block the week belongs to
            weekly_load: Target TSS for the week
            profile: Athlete profile (reserved for per-athlete selection)
            available_days: Days the athlete can train, 0=Monday
            cross_training: Allow easy cross-training in the easy fill
        """
        days = list(dict.fromkeys(available_days)) if available_days else list(ALL_DAYS)
        weekly_load = max(0.0, weekly_load)
        easy_budget = weekly_load * EASY_LOAD_SHARE
        hard_budget = weekly_load * HARD_LOAD_SHARE

        cycle = Microcycle(
            phase=Phase(phase),
            total_load=weekly_load,
            easy_budget=easy_budget,
            hard_budget=hard_budget,
        )
        used: List[int] = []

        remaining_hard = hard_budget
        for archetype in key_workouts_for_phase(cycle.phase):
            if remaining_hard <= 0:
                break
            day = select_training_day(used, days, hard=True)
            if day is None:
                break
            used.append(day)
            cycle.workouts.append(ScheduledWorkout(archetype, day, archetype.estimated_tss, True))
            remaining_hard -= archetype.estimated_tss

        remaining_easy = easy_budget
        while remaining_easy > EASY_FILL_FLOOR_TSS:
            day = select_training_day(used, days, hard=False)
            if day is None:
                break
            archetype = select_easy_workout(remaining_easy, cross_training)
            used.append(day)
            cycle.workouts.append(ScheduledWorkout(archetype, day, archetype.estimated_tss, False))
            remaining_easy -= archetype.estimated_tss

        cycle.workouts.sort(key=lambda w: w.day_of_week)
        logger.debug(
            "%s: %d workouts, %.0f of %.0f TSS placed",
            cycle.pattern, len(cycle.workouts), cycle.planned_load, weekly_load,
        )
        return cycle
