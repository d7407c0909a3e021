# Adaptive Training Plan Engine
#
# Builds periodized, load-managed training plans from an athlete's
# activity history.
#
# Architecture:
# - FitnessEstimator: VDOT, critical speed, load/ACWR, weekly patterns
# - PaceZoneCalculator: pace bands per effort zone
# - PeriodizationPlanner: base/build/peak/taper blocks
# - AdaptiveLoadCalculator: weekly TSS curve with recovery and taper
# - MicrocycleGenerator: 80/20 week layout over available days
# - PlanAssembler: dated plan, persisted week by week
# - PlanOptimizer / InsightsEngine: post-generation passes
#
# SQLAlchemy collaborators live in .repository (not imported here so the
# engine stays usable without a database).

from .constants import Goal, Phase, WorkoutType, ZoneName, Difficulty, IntensityLevel, LoadProgression
from .fitness_estimator import ActivityRecord, FitnessEstimator, FitnessProfile, calculate_tss
from .pace_zones import PaceRange, PaceZoneCalculator, TRAINING_ZONES
from .workout_catalog import Archetype, WorkoutArchetype, WORKOUT_CATALOG
from .periodization import PeriodizationPlanner, TrainingBlock
from .load_calculator import AdaptiveLoadCalculator, WeeklyLoad
from .microcycle import MicrocycleGenerator, Microcycle, ScheduledWorkout
from .base import (
    ActivityHistoryProvider,
    GeneratedPlan,
    GeneratedWorkout,
    PlanStore,
    RaceCalendar,
)
from .assembler import PlanAssembler
from .optimizer import PlanOptimizer
from .insights import InsightsEngine, InsightsReport
from .service import TrainingPlanService

__all__ = [
    # Estimation
    'ActivityRecord',
    'FitnessEstimator',
    'FitnessProfile',
    'calculate_tss',
    'PaceRange',
    'PaceZoneCalculator',
    'TRAINING_ZONES',

    # Plan structure
    'Archetype',
    'WorkoutArchetype',
    'WORKOUT_CATALOG',
    'PeriodizationPlanner',
    'TrainingBlock',
    'AdaptiveLoadCalculator',
    'WeeklyLoad',
    'MicrocycleGenerator',
    'Microcycle',
    'ScheduledWorkout',

    # Plans and collaborators
    'GeneratedPlan',
    'GeneratedWorkout',
    'ActivityHistoryProvider',
    'PlanStore',
    'RaceCalendar',

    # Entry points
    'PlanAssembler',
    'PlanOptimizer',
    'InsightsEngine',
    'InsightsReport',
    'TrainingPlanService',

    # Constants
    'Goal',
    'Phase',
    'WorkoutType',
    'ZoneName',
    'Difficulty',
    'IntensityLevel',
    'LoadProgression',
]
