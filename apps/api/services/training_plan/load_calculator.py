"""
Adaptive Load Calculator

Target weekly training load (TSS units) for one week of a plan:

    base      = current weekly km * 60
    block     = linear:     1 + progress * 0.3
                undulating: 1 + sin(progress * pi) * 0.3
    plan      = 0.8 + (week / total_weeks) * 0.4
    recovery  = 0.6 every 4th global week, else 1.0
    taper     = 1 - progress * 0.5 inside a taper block, else 1.0

    load = base * block * plan * recovery * taper

where `progress` is week_in_block / block.week_count (week_in_block is
0-indexed). A zero-volume athlete gets zero load; there is no floor.
"""

import math
from dataclasses import dataclass

from .constants import (
    LoadProgression,
    Phase,
    BLOCK_PROGRESSION_GAIN,
    PLAN_PROGRESSION_FLOOR,
    PLAN_PROGRESSION_GAIN,
    RECOVERY_WEEK_INTERVAL,
    RECOVERY_WEEK_MULTIPLIER,
    TAPER_DECAY,
    TSS_PER_WEEKLY_KM,
)
from .fitness_estimator import FitnessProfile
from .periodization import TrainingBlock


@dataclass(frozen=True)
class WeeklyLoad:
    """Target load for one week and the multipliers that produced it."""
    week_number: int
    phase: Phase
    week_in_block: int
    base_load: float
    block_multiplier: float
    plan_multiplier: float
    recovery_multiplier: float
    taper_multiplier: float

    @property
    def is_recovery_week(self) -> bool:
        return self.recovery_multiplier < 1.0

    @property
    def target_load(self) -> float:
        load = (
            self.base_load
            * self.block_multiplier
            * self.plan_multiplier
            * self.recovery_multiplier
            * self.taper_multiplier
        )
        return max(0.0, load)


class AdaptiveLoadCalculator:
    """Stateless weekly load model."""

    def calculate(
        self,
        week_number: int,
        block: TrainingBlock,
        week_in_block: int,
        profile: FitnessProfile,
        total_weeks: int,
    ) -> WeeklyLoad:
        """
        Args:
            week_number: Global week, 1-indexed
            block: Block the week belongs to
            week_in_block: 0-indexed position inside the block
            profile: Athlete fitness profile
            total_weeks: Plan length in weeks
        """
        base_load = max(0.0, profile.current_weekly_volume_km) * TSS_PER_WEEKLY_KM
        block_progress = week_in_block / block.week_count if block.week_count > 0 else 0.0

        return WeeklyLoad(
            week_number=week_number,
            phase=block.phase,
            week_in_block=week_in_block,
            base_load=base_load,
            block_multiplier=self.block_multiplier(block.load_progression, block_progress),
            plan_multiplier=self.plan_multiplier(week_number, total_weeks),
            recovery_multiplier=self.recovery_multiplier(week_number),
            taper_multiplier=self.taper_multiplier(block.phase, block_progress),
        )

    def weekly_loads(self, blocks, profile: FitnessProfile, total_weeks: int):
        """Yield a WeeklyLoad for every week of the plan, in order."""
        week_number = 1
        for block in blocks:
            for week_in_block in range(block.week_count):
                yield block, self.calculate(week_number, block, week_in_block, profile, total_weeks)
                week_number += 1

    @staticmethod
    def block_multiplier(progression: LoadProgression, block_progress: float) -> float:
        if progression == LoadProgression.UNDULATING:
            return 1 + math.sin(block_progress * math.pi) * BLOCK_PROGRESSION_GAIN
        return 1 + block_progress * BLOCK_PROGRESSION_GAIN

    @staticmethod
    def plan_multiplier(week_number: int, total_weeks: int) -> float:
        plan_progress = week_number / total_weeks if total_weeks > 0 else 1.0
        return PLAN_PROGRESSION_FLOOR + plan_progress * PLAN_PROGRESSION_GAIN

    @staticmethod
    def recovery_multiplier(week_number: int) -> float:
        if week_number % RECOVERY_WEEK_INTERVAL == 0:
            return RECOVERY_WEEK_MULTIPLIER
        return 1.0

    @staticmethod
    def taper_multiplier(phase: Phase, block_progress: float) -> float:
        if phase == Phase.TAPER:
            return 1 - block_progress * TAPER_DECAY
        return 1.0
