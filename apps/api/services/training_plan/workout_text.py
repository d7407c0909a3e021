"""
Workout prescription details: per-segment paces, totals, coaching text
and the metadata payload stored with each planned workout.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .constants import (
    COACHING_CUES,
    NUTRITION_LOW_TSS,
    NUTRITION_MID_TSS,
    IntensityLevel,
    WorkoutType,
)
from .pace_zones import PaceRange, TRAINING_ZONES, format_pace, resolve_pace_range
from .workout_catalog import WorkoutArchetype


@dataclass(frozen=True)
class WorkoutTotals:
    distance_km: float
    duration_minutes: float
    avg_pace_min_per_km: Optional[float]


def segment_paces(archetype: WorkoutArchetype, zone_paces: Mapping[str, PaceRange]) -> Dict[str, PaceRange]:
    """Pace band for each zone the workout touches."""
    return {s.zone.value: resolve_pace_range(zone_paces, s.zone) for s in archetype.segments}


def workout_totals(archetype: WorkoutArchetype, zone_paces: Mapping[str, PaceRange]) -> WorkoutTotals:
    """
    Distance is the sum of each segment's duration over its zone mid-pace.

    Non-running archetypes carry duration only.
    """
    duration = archetype.duration_minutes
    if not archetype.is_running:
        return WorkoutTotals(0.0, duration, None)

    distance = sum(
        s.duration_minutes / resolve_pace_range(zone_paces, s.zone).mid
        for s in archetype.segments
    )
    avg_pace = duration / distance if distance > 0 else None
    return WorkoutTotals(round(distance, 2), duration, round(avg_pace, 2) if avg_pace else None)


def describe_workout(archetype: WorkoutArchetype, paces: Mapping[str, PaceRange]) -> str:
    """Human-readable coaching description, one line per segment."""
    lines = [archetype.adaptation_target, "", "Workout Structure:"]
    for segment in archetype.segments:
        line = f"• {segment.duration_minutes:g}min {segment.description}"
        pace = paces.get(segment.zone.value)
        if pace and archetype.is_running:
            line += f" @ {format_pace(pace.min)}-{format_pace(pace.max)}/km"
        if segment.cadence_target:
            line += f" ({segment.cadence_target} spm)"
        if segment.heart_rate_target:
            low, high = segment.heart_rate_target
            line += f" (HR: {low}-{high})"
        lines.append(line)
    return "\n".join(lines) + "\n"


def intensity_for(archetype: WorkoutArchetype) -> IntensityLevel:
    rpe = TRAINING_ZONES[archetype.primary_zone].rpe
    if rpe <= 2:
        return IntensityLevel.EASY
    if rpe <= 4:
        return IntensityLevel.MODERATE
    if rpe <= 6:
        return IntensityLevel.HARD
    return IntensityLevel.MAX


def coaching_cues(workout_type: WorkoutType) -> List[str]:
    return list(COACHING_CUES.get(workout_type, COACHING_CUES[WorkoutType.EASY]))


def nutrition_guidance(estimated_tss: float) -> str:
    if estimated_tss < NUTRITION_LOW_TSS:
        return "Water only needed"
    if estimated_tss < NUTRITION_MID_TSS:
        return "Consider sports drink for workouts over 60min"
    return "Fuel with 30-60g carbs/hour; practice race nutrition"


def workout_metadata(archetype: WorkoutArchetype, paces: Mapping[str, PaceRange]) -> Dict[str, Any]:
    return {
        "archetype": archetype.key.value,
        "segments": [s.to_dict() for s in archetype.segments],
        "adaptation_target": archetype.adaptation_target,
        "tss": archetype.estimated_tss,
        "recovery_hours": archetype.recovery_hours,
        "pace_ranges": {zone: pace.to_dict() for zone, pace in paces.items()},
        "coaching_cues": coaching_cues(archetype.workout_type),
        "nutrition_guidance": nutrition_guidance(archetype.estimated_tss),
    }
