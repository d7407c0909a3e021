"""
Constants for adaptive plan generation.

These are the fixed tables and defaults the estimation and scheduling
models are built on. They are part of the model contract: changing a
value here changes every plan the engine produces.
"""

from enum import Enum
from typing import Dict, List, Tuple


class Goal(str, Enum):
    """Goal categories a plan can be built for."""
    FIRST_5K = "first_5k"
    IMPROVE_5K = "improve_5k"
    FIRST_10K = "first_10k"
    HALF_MARATHON = "half_marathon"
    MARATHON = "marathon"
    ULTRA = "ultra"
    GENERAL_FITNESS = "general_fitness"


class Phase(str, Enum):
    """Training phases."""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"
    RECOVERY = "recovery"


class LoadProgression(str, Enum):
    """How load evolves across the weeks of a block."""
    LINEAR = "linear"
    UNDULATING = "undulating"


class WorkoutType(str, Enum):
    RECOVERY = "recovery"
    EASY = "easy"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    HILL_REPEATS = "hill_repeats"
    FARTLEK = "fartlek"
    PROGRESSION = "progression"
    RACE_PACE = "race_pace"
    TIME_TRIAL = "time_trial"
    CROSS_TRAINING = "cross_training"


class ZoneName(str, Enum):
    """Effort zones, slowest to fastest."""
    RECOVERY = "recovery"
    EASY = "easy"
    STEADY = "steady"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    NEUROMUSCULAR = "neuromuscular"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class IntensityLevel(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    MAX = "max"


# Phase order a plan is laid out in
PHASE_SEQUENCE: List[Phase] = [Phase.BASE, Phase.BUILD, Phase.PEAK, Phase.TAPER]


# =============================================================================
# FITNESS ESTIMATION DEFAULTS
# =============================================================================

DEFAULT_CAPACITY_INDEX = 35.0        # Beginner VDOT when no usable run exists
CAPACITY_INDEX_RANGE = (20.0, 85.0)

DEFAULT_CRITICAL_SPEED_KMH = 10.0
CRITICAL_SPEED_RANGE_KMH = (4.0, 30.0)

DEFAULT_RUNNING_ECONOMY = 200.0
RUNNING_ECONOMY_RANGE = (0.0, 400.0)

# Used for a brand-new athlete with nothing in the lookback window
DEFAULT_WEEKLY_VOLUME_KM = 20.0
DEFAULT_MAX_WEEKLY_VOLUME_KM = 30.0
DEFAULT_CONSISTENCY_SCORE = 0.0
DEFAULT_OPTIMAL_DAYS = [0, 2, 4, 5]  # Mon, Wed, Fri, Sat

# Heart-rate reserve is computed against a population max HR.
# Known simplification: it is not personalized.
ASSUMED_MAX_HR = 190
ASSUMED_RESTING_HR = 60
DEFAULT_INTENSITY = 0.7              # HR-less activities are treated as moderate

HIGH_EFFORT_RPE = 9                  # Race-like effort for VDOT estimation
TIME_TRIAL_RPE = 8                   # Hard enough to anchor critical speed
MODERATE_EFFORT_RPE = 6              # Ceiling for running economy samples
MIN_EFFORT_DISTANCE_KM = 3.0
MIN_ECONOMY_DURATION_MIN = 20.0

ACUTE_WINDOW_DAYS = 7
CHRONIC_WINDOW_DAYS = 28

# ACWR step function, evaluated top to bottom: (predicate, risk)
INJURY_RISK_HIGH = 0.8               # ratio > 1.5
INJURY_RISK_MODERATE = 0.6           # ratio > 1.3
INJURY_RISK_UNDERTRAINED = 0.4       # ratio < 0.8
INJURY_RISK_LOW = 0.2

RECOVERY_SCORE_RANGE = (0.0, 100.0)
DEFAULT_EFFORT_FOR_RECOVERY = 5


# =============================================================================
# PERIODIZATION
# =============================================================================

# Fraction of the plan spent in each phase: (base, build, peak, taper)
PHASE_DISTRIBUTIONS: Dict[Goal, Tuple[float, float, float, float]] = {
    Goal.FIRST_5K: (0.40, 0.30, 0.20, 0.10),
    Goal.IMPROVE_5K: (0.25, 0.35, 0.30, 0.10),
    Goal.FIRST_10K: (0.35, 0.35, 0.20, 0.10),
    Goal.HALF_MARATHON: (0.30, 0.35, 0.25, 0.10),
    Goal.MARATHON: (0.30, 0.30, 0.30, 0.10),
    Goal.ULTRA: (0.35, 0.30, 0.25, 0.10),
    Goal.GENERAL_FITNESS: (0.40, 0.40, 0.15, 0.05),
}

# Athletes with less than a year of training move peak time into base
NOVICE_TRAINING_AGE_YEARS = 1.0
NOVICE_BASE_SHIFT = 0.1

PHASE_PRIMARY_FOCUS: Dict[Phase, List[str]] = {
    Phase.BASE: ["Aerobic capacity", "Running economy", "Injury prevention"],
    Phase.BUILD: ["Lactate threshold", "VO2max development", "Race pace familiarity"],
    Phase.PEAK: ["Neuromuscular power", "Race simulation", "Mental preparation"],
    Phase.TAPER: ["Recovery", "Maintenance", "Race readiness"],
    Phase.RECOVERY: ["Recovery", "Tissue repair", "Aerobic maintenance"],
}

PHASE_SECONDARY_FOCUS: Dict[Phase, List[str]] = {
    Phase.BASE: ["Strength building", "Form improvement", "Flexibility"],
    Phase.BUILD: ["Speed endurance", "Pacing strategies", "Nutrition practice"],
    Phase.PEAK: ["Tapering skills", "Race logistics", "Confidence building"],
    Phase.TAPER: ["Sleep optimization", "Carb loading", "Mental visualization"],
    Phase.RECOVERY: [],
}

GOAL_ADAPTATION_TARGETS: Dict[Goal, List[str]] = {
    Goal.FIRST_5K: ["aerobic base", "running form", "injury prevention"],
    Goal.IMPROVE_5K: ["vo2max", "lactate threshold", "running economy"],
    Goal.FIRST_10K: ["aerobic capacity", "muscular endurance", "pacing"],
    Goal.HALF_MARATHON: ["lactate threshold", "glycogen storage", "mental toughness"],
    Goal.MARATHON: ["aerobic efficiency", "fat oxidation", "mental resilience"],
    Goal.ULTRA: ["durability", "fat oxidation", "fueling tolerance"],
    Goal.GENERAL_FITNESS: ["overall endurance", "metabolic flexibility", "consistency"],
}


# =============================================================================
# WEEKLY LOAD
# =============================================================================

TSS_PER_WEEKLY_KM = 60.0             # Crude km -> TSS proxy
BLOCK_PROGRESSION_GAIN = 0.3
PLAN_PROGRESSION_FLOOR = 0.8
PLAN_PROGRESSION_GAIN = 0.4
RECOVERY_WEEK_INTERVAL = 4
RECOVERY_WEEK_MULTIPLIER = 0.6
TAPER_DECAY = 0.5


# =============================================================================
# MICROCYCLE
# =============================================================================

EASY_LOAD_SHARE = 0.8
HARD_LOAD_SHARE = 0.2
ALL_DAYS = [0, 1, 2, 3, 4, 5, 6]
HARD_DAY_PREFERENCE = [1, 3, 5]      # Tue, Thu, Sat
RECOVERY_RUN_THRESHOLD_TSS = 30.0    # Below this remaining easy budget, prescribe recovery
EASY_FILL_FLOOR_TSS = 20.0           # Stop filling once the easy budget drops below this

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


# =============================================================================
# PLAN HEADER
# =============================================================================

# Weekly km a goal is built toward before personal adjustment
TARGET_WEEKLY_KM: Dict[Goal, float] = {
    Goal.FIRST_5K: 25,
    Goal.IMPROVE_5K: 35,
    Goal.FIRST_10K: 40,
    Goal.HALF_MARATHON: 50,
    Goal.MARATHON: 65,
    Goal.ULTRA: 80,
    Goal.GENERAL_FITNESS: 30,
}
TARGET_ADJUSTMENT_RANGE = (0.7, 1.5)


# =============================================================================
# COACHING TEXT
# =============================================================================

COACHING_CUES: Dict[WorkoutType, List[str]] = {
    WorkoutType.RECOVERY: ["Focus on relaxed form", "Breathe easily", "Land softly"],
    WorkoutType.EASY: ["Conversational pace", "Nasal breathing if possible", "Relaxed shoulders"],
    WorkoutType.TEMPO: ["Controlled discomfort", "Strong and smooth", "Maintain rhythm"],
    WorkoutType.THRESHOLD: ["Comfortably hard", "Focus on efficiency", "Stay relaxed"],
    WorkoutType.VO2MAX: ["Fast but controlled", "Quick turnover", "Drive with arms"],
    WorkoutType.HILL_REPEATS: ["Power from glutes", "High knees", "Strong arm drive"],
    WorkoutType.RACE_PACE: ["Lock into goal rhythm", "Even splits", "Rehearse race fueling"],
    WorkoutType.TIME_TRIAL: ["Start controlled", "Build through the middle", "Empty the tank late"],
    WorkoutType.CROSS_TRAINING: ["Keep it aerobic", "Low impact", "Stay loose"],
}

NUTRITION_LOW_TSS = 50
NUTRITION_MID_TSS = 100

# Workout types that count as quality sessions when re-tuning a plan
QUALITY_WORKOUT_TYPES = {
    WorkoutType.TEMPO,
    WorkoutType.THRESHOLD,
    WorkoutType.VO2MAX,
    WorkoutType.PROGRESSION,
    WorkoutType.FARTLEK,
    WorkoutType.HILL_REPEATS,
    WorkoutType.RACE_PACE,
    WorkoutType.TIME_TRIAL,
}

ADVANCED_CAPACITY_INDEX = 50.0
FATIGUE_INJURY_RISK = 0.6
FATIGUE_RECOVERY_SCORE = 40.0
OPTIMIZED_PACE_FACTOR = 0.95
FATIGUE_NOTE = "Reduced intensity due to accumulated fatigue"
PACE_OPTIMIZED_KEY = "pace_optimized"  # details flag set once the quality pace is sharpened


# =============================================================================
# INSIGHTS
# =============================================================================

ADHERENCE_EXCELLENT = 0.8
ADHERENCE_GOOD = 0.6
HARD_SESSION_RPE = 8
EASY_FOLLOW_UP_RPE = 5
TREND_SLOPE_THRESHOLD = 0.05
ESTIMATED_HEART_RATE = 150           # Assumed HR for completed workouts with no linked activity
ESTIMATED_DURATION_MIN = 30

GENERAL_RECOMMENDATIONS = [
    "Focus on consistent training to maximize adaptations",
    "Ensure adequate recovery between hard sessions",
    "Monitor heart rate variability for fatigue signs",
    "Adjust pace targets based on current fitness",
]
