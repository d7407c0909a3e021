"""
Periodization Planner

Splits a training horizon into ordered blocks (base -> build -> peak ->
taper) based on:
- Goal category
- Plan duration
- Athlete training age

Usage:
    planner = PeriodizationPlanner()
    blocks = planner.build_blocks(
        goal="first_10k",
        total_weeks=16,
        start_date=date(2026, 1, 5),
        profile=profile,
    )
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Union

from .constants import (
    Goal,
    LoadProgression,
    Phase,
    PHASE_DISTRIBUTIONS,
    PHASE_PRIMARY_FOCUS,
    PHASE_SECONDARY_FOCUS,
    PHASE_SEQUENCE,
    NOVICE_BASE_SHIFT,
    NOVICE_TRAINING_AGE_YEARS,
)
from .fitness_estimator import FitnessProfile

logger = logging.getLogger(__name__)


@dataclass
class TrainingBlock:
    """A contiguous run of weeks sharing one phase."""
    phase: Phase
    start_date: date
    end_date: date             # Exclusive: first day after the block
    week_count: int
    load_progression: LoadProgression
    primary_focus: List[str] = field(default_factory=list)
    secondary_focus: List[str] = field(default_factory=list)
    first_week: int = 1        # Global, 1-indexed

    @property
    def focus_areas(self) -> List[str]:
        return self.primary_focus + self.secondary_focus

    @property
    def weeks(self) -> List[int]:
        return list(range(self.first_week, self.first_week + self.week_count))

    def to_dict(self) -> Dict:
        return {
            "phase": self.phase.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "weeks": self.week_count,
            "load_progression": self.load_progression.value,
            "primary_focus": self.primary_focus,
            "secondary_focus": self.secondary_focus,
        }


def resolve_goal(goal: Union[str, Goal]) -> Goal:
    """Parse a goal category, falling back to general fitness."""
    if isinstance(goal, Goal):
        return goal
    try:
        return Goal(str(goal).strip().lower().replace("-", "_"))
    except ValueError:
        logger.warning("Unknown goal %r; using general fitness distribution", goal)
        return Goal.GENERAL_FITNESS


def round_half_up(value: float) -> int:
    return int(value + 0.5)


class PeriodizationPlanner:
    """
    Build the phase layout for a plan.

    Stateless; safe to share.
    """

    def phase_distribution(self, goal: Goal, profile: Optional[FitnessProfile] = None) -> Dict[Phase, float]:
        """Fraction of the plan per phase, adjusted for novice athletes."""
        base, build, peak, taper = PHASE_DISTRIBUTIONS.get(goal, PHASE_DISTRIBUTIONS[Goal.GENERAL_FITNESS])
        ratios = {Phase.BASE: base, Phase.BUILD: build, Phase.PEAK: peak, Phase.TAPER: taper}

        if profile is not None and profile.training_age_years < NOVICE_TRAINING_AGE_YEARS:
            shift = min(NOVICE_BASE_SHIFT, ratios[Phase.PEAK])
            ratios[Phase.BASE] += shift
            ratios[Phase.PEAK] -= shift

        return ratios

    def allocate_weeks(self, ratios: Dict[Phase, float], total_weeks: int) -> Dict[Phase, int]:
        """
        Convert ratios to whole weeks that sum exactly to total_weeks.

        Rounding drift is absorbed by the largest block (earliest phase
        wins ties).
        """
        weeks = {phase: round_half_up(total_weeks * ratios[phase]) for phase in PHASE_SEQUENCE}

        drift = total_weeks - sum(weeks.values())
        while drift != 0:
            largest = max(PHASE_SEQUENCE, key=lambda p: weeks[p])
            step = 1 if drift > 0 else -1
            weeks[largest] += step
            drift -= step

        logger.debug("Allocated %d weeks: %s", total_weeks, {p.value: w for p, w in weeks.items()})
        return weeks

    def build_blocks(
        self,
        goal: Union[str, Goal],
        total_weeks: int,
        start_date: date,
        profile: Optional[FitnessProfile] = None,
    ) -> List[TrainingBlock]:
        """
        Lay out contiguous blocks starting at start_date.

        Phases that round to zero weeks are omitted.
        """
        goal = resolve_goal(goal)
        total_weeks = max(1, int(total_weeks))
        weeks = self.allocate_weeks(self.phase_distribution(goal, profile), total_weeks)

        blocks: List[TrainingBlock] = []
        current = start_date
        next_week = 1
        for phase in PHASE_SEQUENCE:
            count = weeks[phase]
            if count <= 0:
                continue
            end = current + timedelta(weeks=count)
            blocks.append(TrainingBlock(
                phase=phase,
                start_date=current,
                end_date=end,
                week_count=count,
                load_progression=self.load_progression(phase),
                primary_focus=list(PHASE_PRIMARY_FOCUS[phase]),
                secondary_focus=list(PHASE_SECONDARY_FOCUS[phase]),
                first_week=next_week,
            ))
            current = end
            next_week += count

        return blocks

    @staticmethod
    def load_progression(phase: Phase) -> LoadProgression:
        if phase in (Phase.BUILD, Phase.PEAK):
            return LoadProgression.UNDULATING
        return LoadProgression.LINEAR
