"""
Pace Zone Calculator

Maps an aerobic capacity index (VDOT-like) to pace bands for each
effort zone.

The easy pace is anchored with a linear approximation and every other
band is a fixed offset from it, so the bands are contiguous and ordered
fastest to slowest:

    vo2max < threshold < tempo < steady < easy < recovery

Supported capacity index range is 20-85. Inputs outside it are clamped
before the anchor is computed, which keeps every pace positive.

Usage:
    zones = PaceZoneCalculator().calculate(48.5)
    zones[ZoneName.THRESHOLD].pace_range.min
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .constants import ZoneName, CAPACITY_INDEX_RANGE


@dataclass(frozen=True)
class PaceRange:
    """Pace band in minutes per km. `min` is the faster bound."""
    min: float
    max: float

    @property
    def mid(self) -> float:
        return (self.min + self.max) / 2

    def to_dict(self) -> Dict[str, float]:
        return {"min": round(self.min, 2), "max": round(self.max, 2)}


@dataclass(frozen=True)
class HeartRateRange:
    """Heart rate band as percent of max HR."""
    min: int
    max: int


@dataclass(frozen=True)
class Zone:
    """Static effort zone definition."""
    name: ZoneName
    label: str
    rpe: int
    heart_rate_range: Optional[HeartRateRange] = None
    pace_range: Optional[PaceRange] = None


TRAINING_ZONES: Mapping[ZoneName, Zone] = MappingProxyType({
    ZoneName.RECOVERY: Zone(ZoneName.RECOVERY, "Recovery", 1, HeartRateRange(50, 60)),
    ZoneName.EASY: Zone(ZoneName.EASY, "Easy", 2, HeartRateRange(60, 70)),
    ZoneName.STEADY: Zone(ZoneName.STEADY, "Steady", 3, HeartRateRange(70, 80)),
    ZoneName.TEMPO: Zone(ZoneName.TEMPO, "Tempo", 4, HeartRateRange(80, 87)),
    ZoneName.THRESHOLD: Zone(ZoneName.THRESHOLD, "Threshold", 5, HeartRateRange(87, 92)),
    ZoneName.VO2MAX: Zone(ZoneName.VO2MAX, "VO2 Max", 6, HeartRateRange(92, 97)),
    ZoneName.NEUROMUSCULAR: Zone(ZoneName.NEUROMUSCULAR, "Neuromuscular", 7, HeartRateRange(97, 100)),
})

# (offset of faster bound, offset of slower bound) from the easy anchor, min/km
ZONE_PACE_OFFSETS: Mapping[ZoneName, Tuple[float, float]] = MappingProxyType({
    ZoneName.RECOVERY: (1.0, 2.0),
    ZoneName.EASY: (0.0, 1.0),
    ZoneName.STEADY: (-0.5, 0.0),
    ZoneName.TEMPO: (-1.0, -0.5),
    ZoneName.THRESHOLD: (-1.3, -1.0),
    ZoneName.VO2MAX: (-1.7, -1.3),
})

# Zones that carry no pace band borrow one from a neighbour
BORROWED_PACE_ZONES: Mapping[ZoneName, ZoneName] = MappingProxyType({
    ZoneName.NEUROMUSCULAR: ZoneName.VO2MAX,
})

FALLBACK_PACE_RANGE = PaceRange(6.0, 7.0)


class PaceZoneCalculator:
    """Derive per-zone pace bands from an aerobic capacity index."""

    ANCHOR_EASY_PACE = 10.5      # min/km at index 30
    ANCHOR_INDEX = 30.0
    PACE_PER_INDEX_POINT = 0.1

    def easy_pace(self, capacity_index: float) -> float:
        low, high = CAPACITY_INDEX_RANGE
        index = min(high, max(low, capacity_index))
        return self.ANCHOR_EASY_PACE - (index - self.ANCHOR_INDEX) * self.PACE_PER_INDEX_POINT

    def calculate(self, capacity_index: float) -> Dict[ZoneName, Zone]:
        """
        Build the zone table for an athlete.

        Returns:
            Zone entries (with pace ranges) for every zone that has a
            pace band, keyed by ZoneName.
        """
        easy = self.easy_pace(capacity_index)
        zones = {}
        for name, (fast_offset, slow_offset) in ZONE_PACE_OFFSETS.items():
            static = TRAINING_ZONES[name]
            zones[name] = Zone(
                name=name,
                label=static.label,
                rpe=static.rpe,
                heart_rate_range=static.heart_rate_range,
                pace_range=PaceRange(round(easy + fast_offset, 2), round(easy + slow_offset, 2)),
            )
        return zones

    def pace_ranges(self, capacity_index: float) -> Dict[str, PaceRange]:
        """Zone name -> pace range, the shape stored on a FitnessProfile."""
        return {
            name.value: zone.pace_range
            for name, zone in self.calculate(capacity_index).items()
        }


def resolve_pace_range(zone_paces: Mapping[str, PaceRange], zone: ZoneName) -> PaceRange:
    """Pace band for a segment's zone, borrowing or falling back when absent."""
    key = BORROWED_PACE_ZONES.get(zone, zone).value
    return zone_paces.get(key) or FALLBACK_PACE_RANGE


def format_pace(pace: float) -> str:
    """Format decimal minutes as m:ss."""
    minutes = int(pace)
    seconds = int(round((pace - minutes) * 60))
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d}"
