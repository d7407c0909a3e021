"""
Workout Catalog

Static registry of parametrized workout archetypes. Each archetype is a
list of segments (duration, intensity, zone) plus the load it puts on
the athlete and the recovery it needs.

The catalog and the phase -> key workout table are read-only at runtime
and safe to share between concurrent generation runs.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .constants import Phase, WorkoutType, ZoneName, RECOVERY_RUN_THRESHOLD_TSS


class Archetype(str, Enum):
    RECOVERY_JOG = "recovery_jog"
    AEROBIC_BASE = "aerobic_base"
    LACTATE_THRESHOLD = "lactate_threshold"
    VO2MAX_INTERVALS = "vo2max_intervals"
    TEMPO_PROGRESSION = "tempo_progression"
    HILL_REPEATS = "hill_repeats"
    FARTLEK = "fartlek"
    RACE_PACE = "race_pace"
    TIME_TRIAL = "time_trial"
    EASY_SHAKEOUT = "easy_shakeout"
    EASY_CROSS_TRAINING = "easy_cross_training"


@dataclass(frozen=True)
class Segment:
    duration_minutes: float
    intensity_percent: int
    zone: ZoneName
    description: str
    cadence_target: Optional[int] = None
    heart_rate_target: Optional[Tuple[int, int]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["zone"] = self.zone.value
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class WorkoutArchetype:
    key: Archetype
    title: str
    workout_type: WorkoutType
    primary_zone: ZoneName
    segments: Tuple[Segment, ...]
    adaptation_target: str
    estimated_tss: float
    recovery_hours: int
    is_running: bool = True

    @property
    def duration_minutes(self) -> float:
        return sum(s.duration_minutes for s in self.segments)


def _repeat(times: int, *segments: Segment) -> Tuple[Segment, ...]:
    return tuple(segments) * times


def _warmup(minutes: float, description: str = "Warm-up") -> Segment:
    return Segment(minutes, 65, ZoneName.EASY, description)


def _cooldown(minutes: float) -> Segment:
    return Segment(minutes, 60, ZoneName.RECOVERY, "Cool-down")


_ARCHETYPES = [
    WorkoutArchetype(
        key=Archetype.RECOVERY_JOG,
        title="Recovery Jog",
        workout_type=WorkoutType.RECOVERY,
        primary_zone=ZoneName.RECOVERY,
        segments=(Segment(30, 50, ZoneName.RECOVERY, "Very easy jog"),),
        adaptation_target="Active recovery and blood flow",
        estimated_tss=20,
        recovery_hours=8,
    ),
    WorkoutArchetype(
        key=Archetype.AEROBIC_BASE,
        title="Aerobic Base Run",
        workout_type=WorkoutType.EASY,
        primary_zone=ZoneName.EASY,
        segments=(Segment(60, 65, ZoneName.EASY, "Conversational pace"),),
        adaptation_target="Aerobic base and fat oxidation",
        estimated_tss=50,
        recovery_hours=12,
    ),
    WorkoutArchetype(
        key=Archetype.LACTATE_THRESHOLD,
        title="Threshold Intervals",
        workout_type=WorkoutType.THRESHOLD,
        primary_zone=ZoneName.THRESHOLD,
        segments=(
            _warmup(10),
            Segment(20, 88, ZoneName.THRESHOLD, "Threshold pace"),
            Segment(5, 60, ZoneName.RECOVERY, "Recovery"),
            Segment(20, 88, ZoneName.THRESHOLD, "Threshold pace"),
            _cooldown(10),
        ),
        adaptation_target="Lactate buffering and threshold improvement",
        estimated_tss=90,
        recovery_hours=36,
    ),
    WorkoutArchetype(
        key=Archetype.VO2MAX_INTERVALS,
        title="VO2max Intervals",
        workout_type=WorkoutType.VO2MAX,
        primary_zone=ZoneName.VO2MAX,
        segments=(
            _warmup(15),
            *_repeat(
                4,
                Segment(3, 95, ZoneName.VO2MAX, "3-min @ VO2max"),
                Segment(3, 50, ZoneName.RECOVERY, "Recovery jog"),
            )[:-1],
            _cooldown(10),
        ),
        adaptation_target="VO2max improvement and aerobic power",
        estimated_tss=110,
        recovery_hours=48,
    ),
    WorkoutArchetype(
        key=Archetype.TEMPO_PROGRESSION,
        title="Tempo Progression",
        workout_type=WorkoutType.PROGRESSION,
        primary_zone=ZoneName.TEMPO,
        segments=(
            _warmup(10, "Easy start"),
            Segment(10, 75, ZoneName.STEADY, "Build to steady"),
            Segment(10, 82, ZoneName.TEMPO, "Tempo pace"),
            Segment(10, 87, ZoneName.THRESHOLD, "Push to threshold"),
            _cooldown(5),
        ),
        adaptation_target="Pace awareness and lactate clearance",
        estimated_tss=75,
        recovery_hours=24,
    ),
    WorkoutArchetype(
        key=Archetype.HILL_REPEATS,
        title="Hill Repeats",
        workout_type=WorkoutType.HILL_REPEATS,
        primary_zone=ZoneName.VO2MAX,
        segments=(
            _warmup(15, "Warm-up on flat"),
            *_repeat(
                6,
                Segment(2, 90, ZoneName.VO2MAX, "Hill repeat (6-8% grade)", cadence_target=170),
                Segment(3, 50, ZoneName.RECOVERY, "Jog down recovery"),
            ),
            _cooldown(10),
        ),
        adaptation_target="Power development and running economy",
        estimated_tss=95,
        recovery_hours=36,
    ),
    WorkoutArchetype(
        key=Archetype.FARTLEK,
        title="Fartlek",
        workout_type=WorkoutType.FARTLEK,
        primary_zone=ZoneName.TEMPO,
        segments=(
            _warmup(10),
            Segment(1, 90, ZoneName.VO2MAX, "Fast surge"),
            Segment(2, 70, ZoneName.STEADY, "Float recovery"),
            Segment(2, 85, ZoneName.TEMPO, "Tempo surge"),
            Segment(2, 70, ZoneName.STEADY, "Float recovery"),
            Segment(30, 75, ZoneName.STEADY, "Steady cruise"),
            _cooldown(10),
        ),
        adaptation_target="Multi-pace adaptation and mental toughness",
        estimated_tss=85,
        recovery_hours=30,
    ),
    WorkoutArchetype(
        key=Archetype.RACE_PACE,
        title="Race Pace Rehearsal",
        workout_type=WorkoutType.RACE_PACE,
        primary_zone=ZoneName.TEMPO,
        segments=(
            _warmup(15),
            *_repeat(
                3,
                Segment(10, 84, ZoneName.TEMPO, "Goal race pace"),
                Segment(3, 55, ZoneName.RECOVERY, "Easy float"),
            )[:-1],
            _cooldown(10),
        ),
        adaptation_target="Race rhythm and pacing confidence",
        estimated_tss=85,
        recovery_hours=30,
    ),
    WorkoutArchetype(
        key=Archetype.TIME_TRIAL,
        title="Time Trial",
        workout_type=WorkoutType.TIME_TRIAL,
        primary_zone=ZoneName.THRESHOLD,
        segments=(
            _warmup(15),
            Segment(3, 90, ZoneName.VO2MAX, "Strides to open up"),
            Segment(20, 92, ZoneName.THRESHOLD, "Time trial effort"),
            _cooldown(10),
        ),
        adaptation_target="Fitness check and race-day execution",
        estimated_tss=100,
        recovery_hours=48,
    ),
    WorkoutArchetype(
        key=Archetype.EASY_SHAKEOUT,
        title="Easy Shakeout",
        workout_type=WorkoutType.EASY,
        primary_zone=ZoneName.EASY,
        segments=(
            Segment(20, 60, ZoneName.EASY, "Relaxed shakeout"),
            Segment(2, 85, ZoneName.TEMPO, "4 x 20s strides"),
        ),
        adaptation_target="Stay loose while freshening up",
        estimated_tss=25,
        recovery_hours=6,
    ),
    WorkoutArchetype(
        key=Archetype.EASY_CROSS_TRAINING,
        title="Easy Cross-Training",
        workout_type=WorkoutType.CROSS_TRAINING,
        primary_zone=ZoneName.RECOVERY,
        segments=(Segment(40, 55, ZoneName.RECOVERY, "Low-impact cross-training (bike, swim, elliptical)"),),
        adaptation_target="Aerobic maintenance without impact",
        estimated_tss=30,
        recovery_hours=8,
        is_running=False,
    ),
]

WORKOUT_CATALOG: Mapping[Archetype, WorkoutArchetype] = MappingProxyType(
    {a.key: a for a in _ARCHETYPES}
)

# Key ("hard") sessions per phase, in placement order
PHASE_KEY_WORKOUTS: Mapping[Phase, Tuple[Archetype, ...]] = MappingProxyType({
    Phase.BASE: (Archetype.AEROBIC_BASE, Archetype.TEMPO_PROGRESSION, Archetype.HILL_REPEATS),
    Phase.BUILD: (Archetype.LACTATE_THRESHOLD, Archetype.VO2MAX_INTERVALS, Archetype.TEMPO_PROGRESSION),
    Phase.PEAK: (Archetype.VO2MAX_INTERVALS, Archetype.RACE_PACE, Archetype.TIME_TRIAL),
    Phase.TAPER: (Archetype.RACE_PACE, Archetype.RECOVERY_JOG, Archetype.EASY_SHAKEOUT),
    Phase.RECOVERY: (Archetype.RECOVERY_JOG, Archetype.EASY_CROSS_TRAINING),
})


def get_archetype(key: Archetype) -> WorkoutArchetype:
    return WORKOUT_CATALOG[Archetype(key)]


def key_workouts_for_phase(phase: Phase) -> List[WorkoutArchetype]:
    return [WORKOUT_CATALOG[k] for k in PHASE_KEY_WORKOUTS.get(Phase(phase), PHASE_KEY_WORKOUTS[Phase.BASE])]


def select_easy_workout(remaining_load: float, cross_training: bool = False) -> WorkoutArchetype:
    """
    Recovery jog once little easy budget is left, otherwise an aerobic run.

    Athletes who cross-train get an easy non-running session in place of
    the recovery jog.
    """
    if remaining_load < RECOVERY_RUN_THRESHOLD_TSS:
        if cross_training:
            return WORKOUT_CATALOG[Archetype.EASY_CROSS_TRAINING]
        return WORKOUT_CATALOG[Archetype.RECOVERY_JOG]
    return WORKOUT_CATALOG[Archetype.AEROBIC_BASE]
