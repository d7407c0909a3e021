"""
Fitness Estimator

Derives an athlete's physiological fitness state from their activity
history:
- Aerobic capacity index (VDOT) from the fastest race-like effort
- Critical speed from a two-point hyperbolic distance/time model
- Running economy from moderate, heart-rate-tagged runs
- Acute/chronic training load (EWMA of per-activity TSS) and ACWR
- Injury risk as a step function of ACWR
- Weekly volume, consistency, training age and a recovery score

Every metric is a pure function of the activity list. Missing or thin
history never raises: each metric has a documented default so a plan
can still be built for a brand-new athlete.

Known simplifications:
- Heart-rate reserve uses a population max HR of 190 and resting HR 60.
- Running economy is on a different scale than its default (200).
"""

import logging
import math
import statistics
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from .constants import (
    ACUTE_WINDOW_DAYS,
    ASSUMED_MAX_HR,
    ASSUMED_RESTING_HR,
    CAPACITY_INDEX_RANGE,
    CHRONIC_WINDOW_DAYS,
    CRITICAL_SPEED_RANGE_KMH,
    DEFAULT_CAPACITY_INDEX,
    DEFAULT_CONSISTENCY_SCORE,
    DEFAULT_CRITICAL_SPEED_KMH,
    DEFAULT_EFFORT_FOR_RECOVERY,
    DEFAULT_INTENSITY,
    DEFAULT_MAX_WEEKLY_VOLUME_KM,
    DEFAULT_OPTIMAL_DAYS,
    DEFAULT_RUNNING_ECONOMY,
    DEFAULT_WEEKLY_VOLUME_KM,
    HIGH_EFFORT_RPE,
    INJURY_RISK_HIGH,
    INJURY_RISK_LOW,
    INJURY_RISK_MODERATE,
    INJURY_RISK_UNDERTRAINED,
    MIN_ECONOMY_DURATION_MIN,
    MIN_EFFORT_DISTANCE_KM,
    MODERATE_EFFORT_RPE,
    RECOVERY_SCORE_RANGE,
    RUNNING_ECONOMY_RANGE,
    TIME_TRIAL_RPE,
    Difficulty,
)
from .pace_zones import PaceRange, PaceZoneCalculator

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ActivityRecord:
    """A single historical activity, as supplied by the history provider."""
    activity_date: date
    distance_km: float
    duration_minutes: float
    avg_heart_rate: Optional[float] = None
    perceived_effort: Optional[int] = None  # 1-10
    is_race: bool = False
    id: Optional[str] = None

    @property
    def pace_min_per_km(self) -> Optional[float]:
        if self.distance_km <= 0:
            return None
        return self.duration_minutes / self.distance_km

    @property
    def is_high_effort(self) -> bool:
        return self.is_race or (self.perceived_effort or 0) >= HIGH_EFFORT_RPE


@dataclass
class LoadPoint:
    """Training load state after one activity."""
    activity_date: date
    tss: float
    acute_load: float
    chronic_load: float
    ratio: float


@dataclass
class TrainingLoadSummary:
    acute_load: float
    chronic_load: float
    ratio: float
    trend: str  # "increasing" | "decreasing" | "stable"
    history: List[LoadPoint] = field(default_factory=list)


@dataclass
class WeeklyPattern:
    avg_weekly_km: float
    max_weekly_km: float
    consistency_score: float
    optimal_days: List[int]
    weeks_observed: int


@dataclass
class FitnessProfile:
    """Derived fitness state. Recomputed for every generation run."""
    aerobic_capacity_index: float
    critical_speed_kmh: float
    running_economy: float
    current_weekly_volume_km: float
    max_weekly_volume_km: float
    consistency_score: float          # 0-1
    training_age_years: float
    injury_risk: float                # 0-1
    recovery_score: float             # 0-100
    zone_paces: Dict[str, PaceRange]
    acute_load: float = 0.0
    chronic_load: float = 0.0
    acute_chronic_ratio: float = 1.0
    load_trend: str = "stable"
    optimal_training_days: List[int] = field(default_factory=lambda: list(DEFAULT_OPTIMAL_DAYS))

    @property
    def difficulty(self) -> Difficulty:
        if self.training_age_years < 1 or self.consistency_score < 0.5:
            return Difficulty.BEGINNER
        if self.training_age_years < 3 or self.consistency_score < 0.8:
            return Difficulty.INTERMEDIATE
        return Difficulty.ADVANCED

    def to_dict(self) -> Dict:
        return {
            "aerobic_capacity_index": round(self.aerobic_capacity_index, 1),
            "critical_speed_kmh": round(self.critical_speed_kmh, 2),
            "running_economy": round(self.running_economy, 2),
            "current_weekly_volume_km": round(self.current_weekly_volume_km, 1),
            "max_weekly_volume_km": round(self.max_weekly_volume_km, 1),
            "consistency_score": round(self.consistency_score, 2),
            "training_age_years": round(self.training_age_years, 2),
            "injury_risk": self.injury_risk,
            "recovery_score": round(self.recovery_score, 1),
            "acute_chronic_ratio": round(self.acute_chronic_ratio, 2),
            "load_trend": self.load_trend,
            "zone_paces": {k: v.to_dict() for k, v in self.zone_paces.items()},
        }


# =============================================================================
# PER-ACTIVITY AND RACE-PERFORMANCE FORMULAS
# =============================================================================

def heart_rate_reserve_fraction(avg_heart_rate: float) -> float:
    """Fraction of heart-rate reserve, floored at 0."""
    reserve = (avg_heart_rate - ASSUMED_RESTING_HR) / (ASSUMED_MAX_HR - ASSUMED_RESTING_HR)
    return max(0.0, reserve)


def calculate_tss(duration_minutes: float, avg_heart_rate: Optional[float] = None) -> float:
    """
    Training Stress Score for one activity.

    TSS = duration_min * intensity^2 * 100 / 60, where intensity is the
    heart-rate reserve fraction, or a moderate default when HR is missing.
    """
    if avg_heart_rate:
        intensity = heart_rate_reserve_fraction(avg_heart_rate)
    else:
        intensity = DEFAULT_INTENSITY
    return max(0.0, duration_minutes) * intensity ** 2 * 100 / 60


def vdot_from_performance(distance_km: float, duration_minutes: float) -> Optional[float]:
    """
    Daniels' race-performance formula.

    Velocity is in m/min and time in minutes:
        VO2   = -4.6 + 0.182258*v + 0.000104*v^2
        %max  = 0.8 + 0.1894393*e^(-0.012778*t) + 0.2989558*e^(-0.1932605*t)
        VDOT  = VO2 / %max

    Returns None when the performance is unusable (zero distance or time).
    """
    if distance_km <= 0 or duration_minutes <= 0:
        return None

    t = duration_minutes
    v = distance_km * 1000 / t

    vo2 = -4.6 + 0.182258 * v + 0.000104 * v ** 2
    pct_max = 0.8 + 0.1894393 * math.exp(-0.012778 * t) + 0.2989558 * math.exp(-0.1932605 * t)

    if pct_max <= 0:
        return None
    return vo2 / pct_max


# =============================================================================
# ESTIMATOR
# =============================================================================

class FitnessEstimator:
    """
    Estimate a FitnessProfile from activity history.

    Stateless: all inputs are passed explicitly. No database access; the
    caller is responsible for reading the history.
    """

    def __init__(
        self,
        lookback_days: int = 90,
        recovery_window_days: int = 30,
        zone_calculator: Optional[PaceZoneCalculator] = None,
    ):
        self.lookback_days = lookback_days
        self.recovery_window_days = recovery_window_days
        self.zone_calculator = zone_calculator or PaceZoneCalculator()

    def estimate(self, activities: Iterable[ActivityRecord], as_of: date) -> FitnessProfile:
        """
        Build the complete profile.

        Args:
            activities: Athlete history, any order
            as_of: Reference date (usually the plan start date)
        """
        history = sorted(
            (a for a in activities if a.activity_date <= as_of),
            key=lambda a: a.activity_date,
        )
        window_start = as_of - timedelta(days=self.lookback_days)
        recent = [a for a in history if a.activity_date >= window_start]

        vdot = self.estimate_aerobic_capacity(recent)
        load = self.calculate_training_load(recent)
        weekly = self.analyze_weekly_patterns(recent, as_of)

        profile = FitnessProfile(
            aerobic_capacity_index=vdot,
            critical_speed_kmh=self.estimate_critical_speed(recent),
            running_economy=self.estimate_running_economy(recent),
            current_weekly_volume_km=weekly.avg_weekly_km,
            max_weekly_volume_km=weekly.max_weekly_km,
            consistency_score=weekly.consistency_score,
            training_age_years=self.estimate_training_age(history, as_of),
            injury_risk=self.assess_injury_risk(load.ratio),
            recovery_score=self.estimate_recovery_score(recent, as_of),
            zone_paces=self.zone_calculator.pace_ranges(vdot),
            acute_load=load.acute_load,
            chronic_load=load.chronic_load,
            acute_chronic_ratio=load.ratio,
            load_trend=load.trend,
            optimal_training_days=weekly.optimal_days,
        )
        logger.debug(
            "Estimated fitness from %d activities: VDOT %.1f, %.1f km/week, ACWR %.2f",
            len(recent), profile.aerobic_capacity_index,
            profile.current_weekly_volume_km, profile.acute_chronic_ratio,
        )
        return profile

    # ------------------------------------------------------------------
    # Aerobic capacity
    # ------------------------------------------------------------------

    def estimate_aerobic_capacity(self, activities: Sequence[ActivityRecord]) -> float:
        """
        VDOT from the fastest race-like effort.

        Falls back to the fastest of the three quickest runs of 3 km or
        more, then to the beginner default.
        """
        efforts = [
            a for a in activities
            if a.is_high_effort and a.distance_km > 0 and a.duration_minutes > 0
        ]
        if not efforts:
            efforts = sorted(
                (a for a in activities
                 if a.distance_km >= MIN_EFFORT_DISTANCE_KM and a.duration_minutes > 0),
                key=lambda a: a.pace_min_per_km,
            )[:3]

        if not efforts:
            logger.debug("No usable performance; using default capacity index")
            return DEFAULT_CAPACITY_INDEX

        fastest = min(efforts, key=lambda a: a.pace_min_per_km)
        vdot = vdot_from_performance(fastest.distance_km, fastest.duration_minutes)
        if vdot is None:
            return DEFAULT_CAPACITY_INDEX
        return clamp(vdot, *CAPACITY_INDEX_RANGE)

    # ------------------------------------------------------------------
    # Critical speed
    # ------------------------------------------------------------------

    def estimate_critical_speed(self, activities: Sequence[ActivityRecord]) -> float:
        """
        Two-point hyperbolic model: cs = (d2 - d1) / (t2 - t1), in km/h.

        Uses the shortest and longest qualifying time trials.
        """
        trials = sorted(
            (
                a for a in activities
                if a.distance_km >= MIN_EFFORT_DISTANCE_KM
                and (a.is_race or (a.perceived_effort or 0) >= TIME_TRIAL_RPE)
            ),
            key=lambda a: a.distance_km,
        )
        if len(trials) < 2:
            return DEFAULT_CRITICAL_SPEED_KMH

        shortest, longest = trials[0], trials[-1]
        d1, t1 = shortest.distance_km * 1000, shortest.duration_minutes * 60
        d2, t2 = longest.distance_km * 1000, longest.duration_minutes * 60

        if d2 <= d1 or t2 <= t1:
            logger.debug("Degenerate time-trial pair; using default critical speed")
            return DEFAULT_CRITICAL_SPEED_KMH

        cs = (d2 - d1) / (t2 - t1)
        return clamp(cs * 3.6, *CRITICAL_SPEED_RANGE_KMH)

    # ------------------------------------------------------------------
    # Running economy
    # ------------------------------------------------------------------

    def estimate_running_economy(self, activities: Sequence[ActivityRecord]) -> float:
        """Mean oxygen cost per km over moderate runs with heart rate."""
        economies = []
        for a in activities:
            if not a.avg_heart_rate or a.perceived_effort is None:
                continue
            if a.perceived_effort > MODERATE_EFFORT_RPE:
                continue
            if a.duration_minutes <= MIN_ECONOMY_DURATION_MIN or a.distance_km <= 0:
                continue
            pace = a.pace_min_per_km
            vo2 = heart_rate_reserve_fraction(a.avg_heart_rate) * 50
            economies.append(vo2 / (60 / pace))

        if not economies:
            return DEFAULT_RUNNING_ECONOMY
        return clamp(statistics.mean(economies), *RUNNING_ECONOMY_RANGE)

    # ------------------------------------------------------------------
    # Training load
    # ------------------------------------------------------------------

    def calculate_training_load(self, activities: Sequence[ActivityRecord]) -> TrainingLoadSummary:
        """
        Dual EWMA of per-activity TSS (7-day acute, 28-day chronic).

        ACWR is acute / chronic, defined as 1.0 while chronic load is zero.
        """
        acute_decay = math.exp(-1 / ACUTE_WINDOW_DAYS)
        chronic_decay = math.exp(-1 / CHRONIC_WINDOW_DAYS)
        acute = chronic = 0.0
        history: List[LoadPoint] = []

        for a in sorted(activities, key=lambda x: x.activity_date):
            tss = calculate_tss(a.duration_minutes, a.avg_heart_rate)
            acute = acute * acute_decay + tss * (1 - acute_decay)
            chronic = chronic * chronic_decay + tss * (1 - chronic_decay)
            ratio = acute / chronic if chronic > 0 else 1.0
            history.append(LoadPoint(a.activity_date, tss, acute, chronic, ratio))

        ratio = history[-1].ratio if history else 1.0
        return TrainingLoadSummary(
            acute_load=acute,
            chronic_load=chronic,
            ratio=ratio,
            trend=self._load_trend(history),
            history=history,
        )

    @staticmethod
    def _load_trend(history: Sequence[LoadPoint]) -> str:
        if len(history) < 2:
            return "stable"
        recent = history[-7:]
        previous = history[-14:-7]
        if not previous:
            return "stable"

        recent_avg = statistics.mean(p.tss for p in recent)
        previous_avg = statistics.mean(p.tss for p in previous)
        if previous_avg <= 0:
            return "stable"

        change = (recent_avg - previous_avg) / previous_avg
        if change > 0.1:
            return "increasing"
        if change < -0.1:
            return "decreasing"
        return "stable"

    @staticmethod
    def assess_injury_risk(acwr: float) -> float:
        if acwr > 1.5:
            return INJURY_RISK_HIGH
        if acwr > 1.3:
            return INJURY_RISK_MODERATE
        if acwr < 0.8:
            return INJURY_RISK_UNDERTRAINED
        return INJURY_RISK_LOW

    # ------------------------------------------------------------------
    # Weekly patterns, training age, recovery
    # ------------------------------------------------------------------

    def analyze_weekly_patterns(self, activities: Sequence[ActivityRecord], as_of: date) -> WeeklyPattern:
        """
        Bucket the window into 7-day blocks counted back from `as_of`.

        The observed span runs from the oldest bucket to the current one,
        so an athlete with 12 weeks of history is averaged over 12 weeks.
        """
        if not activities:
            return WeeklyPattern(
                avg_weekly_km=DEFAULT_WEEKLY_VOLUME_KM,
                max_weekly_km=DEFAULT_MAX_WEEKLY_VOLUME_KM,
                consistency_score=DEFAULT_CONSISTENCY_SCORE,
                optimal_days=list(DEFAULT_OPTIMAL_DAYS),
                weeks_observed=0,
            )

        buckets: Dict[int, float] = {}
        for a in activities:
            index = (as_of - a.activity_date).days // 7
            buckets[index] = buckets.get(index, 0.0) + max(0.0, a.distance_km)

        weeks = max(buckets) + 1
        volumes = [buckets.get(i, 0.0) for i in range(weeks)]
        mean_volume = statistics.mean(volumes)

        active_ratio = sum(1 for v in volumes if v > 0) / weeks
        if mean_volume > 0 and weeks > 1:
            cv = statistics.pstdev(volumes) / mean_volume
        else:
            cv = 0.0
        consistency = clamp(active_ratio - 0.5 * cv, 0.0, 1.0)

        day_counts = Counter(a.activity_date.weekday() for a in activities)
        optimal_days = sorted(day for day, _ in day_counts.most_common(4))

        return WeeklyPattern(
            avg_weekly_km=mean_volume,
            max_weekly_km=max(volumes),
            consistency_score=consistency,
            optimal_days=optimal_days,
            weeks_observed=weeks,
        )

    @staticmethod
    def estimate_training_age(history: Sequence[ActivityRecord], as_of: date) -> float:
        if not history:
            return 0.0
        oldest = min(a.activity_date for a in history)
        return max(0.0, (as_of - oldest).days / 365)

    def estimate_recovery_score(self, activities: Sequence[ActivityRecord], as_of: date) -> float:
        """
        Recovery proxy: frequent or hard recent running lowers the score.

        score = 100 - runs_per_day * 10 - avg_effort * 5, clamped to 0-100.
        """
        window_start = as_of - timedelta(days=self.recovery_window_days)
        recent = [a for a in activities if a.activity_date >= window_start]

        frequency = len(recent) / self.recovery_window_days
        if recent:
            avg_effort = statistics.mean(
                a.perceived_effort if a.perceived_effort is not None else DEFAULT_EFFORT_FOR_RECOVERY
                for a in recent
            )
        else:
            avg_effort = 0.0

        return clamp(100 - frequency * 10 - avg_effort * 5, *RECOVERY_SCORE_RANGE)
