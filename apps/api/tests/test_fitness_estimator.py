"""
Tests for FitnessEstimator

Covers:
  1. Per-activity TSS and heart-rate reserve
  2. VDOT from race performances, fallbacks and clamping
  3. Critical speed and running economy
  4. Acute/chronic load, ACWR and injury risk
  5. Weekly patterns, training age, recovery score
  6. Empty / thin history defaults
"""

import pytest
from datetime import date, timedelta

from services.training_plan.constants import Difficulty
from services.training_plan.fitness_estimator import (
    ActivityRecord,
    FitnessEstimator,
    calculate_tss,
    heart_rate_reserve_fraction,
    vdot_from_performance,
)
from tests.plan_scenario_helpers import build_weekly_history


@pytest.fixture
def estimator():
    return FitnessEstimator()


def _run(as_of, days_ago, km, minutes, rpe=None, hr=None, is_race=False):
    return ActivityRecord(
        activity_date=as_of - timedelta(days=days_ago),
        distance_km=km,
        duration_minutes=minutes,
        avg_heart_rate=hr,
        perceived_effort=rpe,
        is_race=is_race,
    )


class TestPerActivityFormulas:

    def test_tss_without_heart_rate_uses_moderate_intensity(self):
        # 60 min * 0.7^2 * 100 / 60
        assert calculate_tss(60) == pytest.approx(49.0)

    def test_tss_at_max_heart_rate(self):
        assert calculate_tss(60, 190) == pytest.approx(100.0)

    def test_heart_rate_below_resting_is_floored(self):
        assert heart_rate_reserve_fraction(50) == 0.0
        assert calculate_tss(60, 50) == 0.0

    def test_vdot_for_20_minute_5k(self):
        assert vdot_from_performance(5.0, 20.0) == pytest.approx(49.8, abs=0.2)

    def test_vdot_unusable_performance(self):
        assert vdot_from_performance(0, 20) is None
        assert vdot_from_performance(5, 0) is None


class TestAerobicCapacity:

    def test_empty_history_returns_beginner_default(self, estimator):
        assert estimator.estimate_aerobic_capacity([]) == 35.0

    def test_race_effort_preferred_over_easy_runs(self, estimator, as_of):
        history = build_weekly_history(as_of, weeks=4) + [_run(as_of, 2, 5.0, 20.0, is_race=True)]
        assert estimator.estimate_aerobic_capacity(history) == pytest.approx(49.8, abs=0.2)

    def test_falls_back_to_fastest_long_run(self, estimator, as_of):
        history = [
            _run(as_of, 3, 10.0, 60.0, rpe=5),
            _run(as_of, 5, 8.0, 40.0, rpe=6),
            _run(as_of, 7, 2.0, 8.0, rpe=5),  # Too short to count
        ]
        expected = vdot_from_performance(8.0, 40.0)
        assert estimator.estimate_aerobic_capacity(history) == pytest.approx(expected)

    def test_zero_distance_effort_skips_to_default(self, estimator, as_of):
        history = [_run(as_of, 1, 0.0, 30.0, rpe=9)]
        assert estimator.estimate_aerobic_capacity(history) == 35.0

    def test_result_is_clamped(self, estimator, as_of):
        history = [_run(as_of, 1, 5.0, 8.0, is_race=True)]
        assert estimator.estimate_aerobic_capacity(history) == 85.0


class TestCriticalSpeedAndEconomy:

    def test_two_time_trials(self, estimator, as_of):
        history = [
            _run(as_of, 10, 5.0, 20.0, rpe=9),
            _run(as_of, 3, 10.0, 42.0, rpe=9),
        ]
        # 5000 m over 1320 s
        assert estimator.estimate_critical_speed(history) == pytest.approx(5000 / 1320 * 3.6)

    def test_single_trial_uses_default(self, estimator, as_of):
        assert estimator.estimate_critical_speed([_run(as_of, 3, 10.0, 42.0, rpe=9)]) == 10.0

    def test_degenerate_pair_uses_default(self, estimator, as_of):
        history = [
            _run(as_of, 10, 5.0, 20.0, rpe=9),
            _run(as_of, 3, 5.0, 21.0, rpe=9),
        ]
        assert estimator.estimate_critical_speed(history) == 10.0

    def test_running_economy_from_moderate_runs(self, estimator, as_of):
        # HRR 0.5 -> vo2 25; pace 6 min/km -> 10 km/h
        history = [_run(as_of, 3, 10.0, 60.0, rpe=5, hr=125)]
        assert estimator.estimate_running_economy(history) == pytest.approx(2.5)

    def test_running_economy_ignores_hard_or_short_runs(self, estimator, as_of):
        history = [
            _run(as_of, 3, 10.0, 60.0, rpe=8, hr=170),
            _run(as_of, 4, 3.0, 18.0, rpe=4, hr=120),
            _run(as_of, 5, 10.0, 60.0, rpe=4),
        ]
        assert estimator.estimate_running_economy(history) == 200.0


class TestTrainingLoad:

    def test_no_activities_defines_ratio_as_one(self, estimator):
        summary = estimator.calculate_training_load([])
        assert summary.ratio == 1.0
        assert summary.trend == "stable"

    def test_ramping_history_has_high_ratio(self, estimator, steady_history):
        summary = estimator.calculate_training_load(steady_history)
        assert summary.acute_load > summary.chronic_load > 0
        assert len(summary.history) == len(steady_history)

    def test_steady_history_trend_is_stable(self, estimator, steady_history):
        assert estimator.calculate_training_load(steady_history).trend == "stable"

    def test_trend_increasing(self, estimator, as_of):
        history = [_run(as_of, 30 - i, 5.0, 30.0) for i in range(7)]
        history += [_run(as_of, 20 - i, 10.0, 60.0) for i in range(7)]
        assert estimator.calculate_training_load(history).trend == "increasing"

    @pytest.mark.parametrize("ratio,risk", [
        (1.6, 0.8),
        (1.4, 0.6),
        (1.0, 0.2),
        (0.7, 0.4),
        (1.5, 0.6),
        (0.8, 0.2),
    ])
    def test_injury_risk_step_function(self, ratio, risk):
        assert FitnessEstimator.assess_injury_risk(ratio) == risk


class TestWeeklyPatterns:

    def test_steady_history(self, estimator, steady_history, as_of):
        pattern = estimator.analyze_weekly_patterns(steady_history, as_of)
        assert pattern.weeks_observed == 12
        assert pattern.avg_weekly_km == pytest.approx(30.0)
        assert pattern.max_weekly_km == pytest.approx(30.0)
        assert pattern.consistency_score == pytest.approx(1.0)
        # Runs 1, 3 and 5 days before a Monday
        assert pattern.optimal_days == [2, 4, 6]

    def test_irregular_history_consistency_in_range(self, estimator, as_of):
        history = [
            _run(as_of, 1, 40.0, 240.0),
            _run(as_of, 50, 2.0, 12.0),
        ]
        pattern = estimator.analyze_weekly_patterns(history, as_of)
        assert 0.0 <= pattern.consistency_score < 0.5

    def test_empty_history_defaults(self, estimator, as_of):
        pattern = estimator.analyze_weekly_patterns([], as_of)
        assert pattern.avg_weekly_km == 20.0
        assert pattern.max_weekly_km == 30.0
        assert pattern.consistency_score == 0.0
        assert pattern.optimal_days == [0, 2, 4, 5]


class TestEstimate:

    def test_empty_history_profile(self, estimator, as_of):
        profile = estimator.estimate([], as_of)
        assert profile.aerobic_capacity_index == 35.0
        assert profile.critical_speed_kmh == 10.0
        assert profile.running_economy == 200.0
        assert profile.current_weekly_volume_km == 20.0
        assert profile.training_age_years == 0.0
        assert profile.acute_chronic_ratio == 1.0
        assert profile.injury_risk == 0.2
        assert profile.recovery_score == 100.0
        assert profile.difficulty == Difficulty.BEGINNER
        assert {"recovery", "easy", "steady", "tempo", "threshold", "vo2max"} <= set(profile.zone_paces)

    def test_single_activity_does_not_raise(self, estimator, as_of):
        profile = estimator.estimate([_run(as_of, 1, 5.0, 30.0)], as_of)
        assert 0.0 <= profile.injury_risk <= 1.0
        assert 0.0 <= profile.consistency_score <= 1.0

    def test_steady_history_profile(self, estimator, steady_history, as_of):
        profile = estimator.estimate(steady_history, as_of)
        assert profile.current_weekly_volume_km == pytest.approx(30.0)
        assert profile.training_age_years == pytest.approx(82 / 365)
        # 13 runs in the last 30 days at RPE 5
        assert profile.recovery_score == pytest.approx(100 - 13 / 30 * 10 - 25)
        assert 20.0 <= profile.aerobic_capacity_index <= 85.0

    def test_lookback_excludes_old_volume_but_not_training_age(self, estimator, steady_history, as_of):
        history = steady_history + [_run(as_of, 400, 50.0, 300.0)]
        profile = estimator.estimate(history, as_of)
        assert profile.current_weekly_volume_km == pytest.approx(30.0)
        assert profile.training_age_years == pytest.approx(400 / 365)

    def test_future_activities_ignored(self, estimator, steady_history, as_of):
        history = steady_history + [_run(as_of, -5, 30.0, 150.0)]
        profile = estimator.estimate(history, as_of)
        assert profile.current_weekly_volume_km == pytest.approx(30.0)

    def test_frequent_hard_running_lowers_recovery(self, estimator, as_of):
        history = [_run(as_of, d, 5.0, 25.0, rpe=9) for d in range(30)]
        assert estimator.estimate_recovery_score(history, as_of) == pytest.approx(100 - 10 - 45)

    def test_to_dict(self, estimator, steady_history, as_of):
        data = estimator.estimate(steady_history, as_of).to_dict()
        assert data["current_weekly_volume_km"] == 30.0
        assert "zone_paces" in data
