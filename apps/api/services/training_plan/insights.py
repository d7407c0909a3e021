"""
Training Insights

Read-side analytics over an assembled plan and the activities logged
since it started:
- Adherence: completed / planned workouts
- Load progression: weekly TSS of completed workouts
- Recovery pattern: spacing after hard sessions (RPE >= 8)
- Performance trend: least-squares slope of weekly average pace

Pure functions of their inputs; the plan's completion state may have
been changed by the execution-tracking collaborator at any time.
"""

import logging
import statistics
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .base import GeneratedPlan, GeneratedWorkout
from .constants import (
    ADHERENCE_EXCELLENT,
    ADHERENCE_GOOD,
    EASY_FOLLOW_UP_RPE,
    ESTIMATED_DURATION_MIN,
    ESTIMATED_HEART_RATE,
    GENERAL_RECOMMENDATIONS,
    HARD_SESSION_RPE,
    TREND_SLOPE_THRESHOLD,
)
from .fitness_estimator import ActivityRecord, calculate_tss

logger = logging.getLogger(__name__)


@dataclass
class AdherenceInsight:
    completion_rate: int      # Percent
    completed: int
    total: int
    status: str               # "excellent" | "good" | "needs improvement"
    recommendation: str


@dataclass
class WeeklyLoadPoint:
    week: int
    load: float


@dataclass
class RecoveryInsight:
    status: str               # "good" | "needs improvement"
    good_recoveries: int
    poor_recoveries: int
    hard_session_recovery: float
    recommendation: str


@dataclass
class PerformanceTrend:
    trend: str                # "improving" | "declining" | "stable" | "insufficient data"
    slope: Optional[float] = None
    pace_improvement: Optional[float] = None
    weekly_paces: List[Tuple[int, float]] = field(default_factory=list)
    recommendation: Optional[str] = None


@dataclass
class InsightsReport:
    adherence: AdherenceInsight
    load_progression: List[WeeklyLoadPoint]
    recovery: RecoveryInsight
    performance: PerformanceTrend
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "adherence": {
                "completion_rate": self.adherence.completion_rate,
                "status": self.adherence.status,
                "recommendation": self.adherence.recommendation,
            },
            "load_progression": [{"week": p.week, "load": round(p.load, 1)} for p in self.load_progression],
            "recovery": {
                "status": self.recovery.status,
                "hard_session_recovery": round(self.recovery.hard_session_recovery, 2),
                "recommendation": self.recovery.recommendation,
            },
            "performance": {
                "trend": self.performance.trend,
                "pace_improvement": self.performance.pace_improvement,
                "weekly_paces": [
                    {"week": week, "avg_pace": round(pace, 2)} for week, pace in self.performance.weekly_paces
                ],
                "recommendation": self.performance.recommendation,
            },
            "recommendations": self.recommendations,
        }


def linear_regression_slope(points: Sequence[Tuple[float, float]]) -> Optional[float]:
    """Ordinary least-squares slope, or None when undefined."""
    n = len(points)
    if n < 2:
        return None
    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_x2 = sum(x * x for x, _ in points)
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return None
    return (n * sum_xy - sum_x * sum_y) / denominator


class InsightsEngine:

    def analyze(self, plan: GeneratedPlan, activities: Sequence[ActivityRecord]) -> InsightsReport:
        """
        Args:
            plan: Plan with current completion state
            activities: Athlete activities (any order); only those on or
                after the plan start are considered
        """
        since_start = sorted(
            (a for a in activities if a.activity_date >= plan.start_date),
            key=lambda a: a.activity_date,
        )

        adherence = self.adherence(plan.workouts)
        recovery = self.recovery_pattern(since_start)
        performance = self.performance_trend(since_start, plan.start_date)

        recommendations = [adherence.recommendation, recovery.recommendation]
        if performance.recommendation:
            recommendations.append(performance.recommendation)
        recommendations.extend(GENERAL_RECOMMENDATIONS)

        logger.debug(
            f"Insights for plan {plan.id}: adherence {adherence.completion_rate}%, "
            f"recovery {recovery.status}, trend {performance.trend}"
        )
        return InsightsReport(
            adherence=adherence,
            load_progression=self.load_progression(plan.workouts),
            recovery=recovery,
            performance=performance,
            recommendations=recommendations,
        )

    # ------------------------------------------------------------------

    @staticmethod
    def adherence(workouts: Sequence[GeneratedWorkout]) -> AdherenceInsight:
        total = len(workouts)
        completed = sum(1 for w in workouts if w.is_completed)
        rate = completed / total if total > 0 else 0.0

        if rate >= ADHERENCE_EXCELLENT:
            status = "excellent"
        elif rate >= ADHERENCE_GOOD:
            status = "good"
        else:
            status = "needs improvement"

        if rate < ADHERENCE_EXCELLENT:
            recommendation = "Try to complete at least 80% of workouts for optimal progress"
        else:
            recommendation = "Great consistency! Keep it up"

        return AdherenceInsight(
            completion_rate=int(rate * 100 + 0.5),
            completed=completed,
            total=total,
            status=status,
            recommendation=recommendation,
        )

    @staticmethod
    def load_progression(workouts: Sequence[GeneratedWorkout]) -> List[WeeklyLoadPoint]:
        """
        Weekly TSS over completed workouts.

        Uses the linked activity when present, otherwise the planned
        duration at a moderate heart rate.
        """
        weekly: Dict[int, float] = {}
        for workout in workouts:
            if not workout.is_completed:
                continue
            activity = workout.completed_activity
            if activity is not None:
                tss = calculate_tss(activity.duration_minutes, activity.avg_heart_rate)
            else:
                tss = calculate_tss(workout.target_duration_minutes or ESTIMATED_DURATION_MIN, ESTIMATED_HEART_RATE)
            weekly[workout.week_number] = weekly.get(workout.week_number, 0.0) + tss

        return [WeeklyLoadPoint(week, load) for week, load in sorted(weekly.items())]

    @staticmethod
    def recovery_pattern(activities: Sequence[ActivityRecord]) -> RecoveryInsight:
        """
        After each hard session, recovery is good when the next activity
        is at least 2 days later, or the next day but easy (RPE <= 5).
        """
        good = poor = 0
        for previous, current in zip(activities, activities[1:]):
            if (previous.perceived_effort or 0) < HARD_SESSION_RPE:
                continue
            days_between = (current.activity_date - previous.activity_date).days
            easy_follow_up = (
                current.perceived_effort is not None and current.perceived_effort <= EASY_FOLLOW_UP_RPE
            )
            if days_between >= 2 or (days_between == 1 and easy_follow_up):
                good += 1
            else:
                poor += 1

        hard_sessions = good + poor
        if poor > good:
            status = "needs improvement"
            recommendation = "Allow at least 48 hours between hard sessions"
        else:
            status = "good"
            recommendation = "Good recovery patterns detected"

        return RecoveryInsight(
            status=status,
            good_recoveries=good,
            poor_recoveries=poor,
            hard_session_recovery=good / hard_sessions if hard_sessions else 0.0,
            recommendation=recommendation,
        )

    def performance_trend(self, activities: Sequence[ActivityRecord], start_date: date) -> PerformanceTrend:
        """Weekly average pace since start_date, regressed on week index."""
        paces_by_week: Dict[int, List[float]] = {}
        for activity in activities:
            pace = activity.pace_min_per_km
            if pace is None:
                continue
            week = (activity.activity_date - start_date).days // 7
            paces_by_week.setdefault(week, []).append(pace)

        weekly_paces = [(week, statistics.mean(paces)) for week, paces in sorted(paces_by_week.items())]
        return self.trend_from_weekly_paces(weekly_paces)

    @staticmethod
    def trend_from_weekly_paces(weekly_paces: Sequence[Tuple[int, float]]) -> PerformanceTrend:
        slope = linear_regression_slope(weekly_paces)
        if slope is None:
            return PerformanceTrend(trend="insufficient data", weekly_paces=list(weekly_paces))

        if slope < -TREND_SLOPE_THRESHOLD:
            trend = "improving"
            recommendation = "Great progress! Your pace is improving consistently"
        elif slope > TREND_SLOPE_THRESHOLD:
            trend = "declining"
            recommendation = "Consider adding more easy runs and ensuring adequate recovery"
        else:
            trend = "stable"
            recommendation = "Maintain current training load and focus on consistency"

        return PerformanceTrend(
            trend=trend,
            slope=slope,
            pace_improvement=round(abs(slope) * 100, 2),
            weekly_paces=list(weekly_paces),
            recommendation=recommendation,
        )
