"""
Tests for PlanAssembler and the TrainingPlanService generate entry point.

Covers:
  1. Week counting and workout dating
  2. Goal volume targets
  3. End-to-end first_10k scenario from 12 weeks of history
  4. Horizon resolution (end date, race date, default)
  5. Persistence order and PlanGenerationFailed
"""

import logging
import pytest
from datetime import date, timedelta
from uuid import uuid4

from core.exceptions import PlanGenerationFailed, ValidationError
from services.training_plan.assembler import (
    PlanAssembler,
    calculate_target_volume,
    plan_weeks,
    scheduled_date_for,
)
from services.training_plan.constants import Difficulty, Goal, Phase
from services.training_plan.microcycle import MicrocycleGenerator
from services.training_plan.service import TrainingPlanService
from tests.plan_scenario_helpers import (
    InMemoryHistory,
    InMemoryPlanStore,
    InMemoryRaceCalendar,
    build_weekly_history,
    make_profile,
)


@pytest.fixture
def store():
    return InMemoryPlanStore()


@pytest.fixture
def service(steady_history, store):
    return TrainingPlanService(history=InMemoryHistory(steady_history), store=store)


class TestDating:

    def test_plan_weeks(self):
        start = date(2026, 1, 5)
        assert plan_weeks(start, start + timedelta(days=112)) == 16
        assert plan_weeks(start, start + timedelta(days=115)) == 16
        assert plan_weeks(start, start + timedelta(days=3)) == 1

    def test_end_not_after_start_is_rejected(self):
        start = date(2026, 1, 5)
        with pytest.raises(ValidationError) as exc:
            plan_weeks(start, start)
        assert exc.value.field == "end_date"

    def test_scheduled_date_from_monday_start(self):
        start = date(2026, 1, 5)  # Monday
        assert scheduled_date_for(start, 1, 0) == start
        assert scheduled_date_for(start, 2, 3) == date(2026, 1, 15)

    def test_scheduled_date_from_midweek_start(self):
        start = date(2026, 1, 7)  # Wednesday
        assert scheduled_date_for(start, 1, 2) == start
        assert scheduled_date_for(start, 1, 0) == date(2026, 1, 12)
        assert scheduled_date_for(start, 1, 0).weekday() == 0


class TestTargetVolume:

    @pytest.mark.parametrize("current,expected", [
        (30.0, 30.0),   # 0.75 of 40
        (100.0, 60.0),  # capped at 1.5x
        (10.0, 28.0),   # floored at 0.7x
        (40.0, 40.0),
    ])
    def test_first_10k(self, current, expected):
        profile = make_profile(current_weekly_volume_km=current)
        assert calculate_target_volume(Goal.FIRST_10K, profile) == expected


class TestBuildPlan:

    def test_pure_build_has_no_ids(self, athlete_id):
        start = date(2026, 1, 5)
        plan = PlanAssembler().build_plan(
            athlete_id, "marathon", start, start + timedelta(weeks=18), make_profile(),
        )
        assert plan.id is None
        assert plan.total_weeks == 18
        assert plan.weeks == list(range(1, 19))
        assert plan.difficulty == Difficulty.INTERMEDIATE
        assert plan.name == "Marathon Plan"
        assert "wk base" in plan.description
        assert plan.description.endswith("Focus: aerobic efficiency, fat oxidation, mental resilience.")

    def test_workouts_carry_prescription(self, athlete_id):
        start = date(2026, 1, 5)
        plan = PlanAssembler().build_plan(athlete_id, Goal.HALF_MARATHON, start, start + timedelta(weeks=12), make_profile())
        for workout in plan.workouts:
            assert workout.scheduled_date.weekday() == workout.day_of_week
            assert workout.description
            assert {"segments", "tss", "recovery_hours", "coaching_cues", "nutrition_guidance"} <= set(workout.details)
            assert workout.details["day_name"]
            assert workout.target_duration_minutes > 0

    def test_availability_is_respected(self, athlete_id):
        start = date(2026, 1, 5)
        plan = PlanAssembler().build_plan(
            athlete_id, Goal.FIRST_5K, start, start + timedelta(weeks=8), make_profile(),
            available_days=[1, 3, 6],
        )
        assert {w.day_of_week for w in plan.workouts} <= {1, 3, 6}

    def test_phase_week_counts_within_block(self, athlete_id):
        start = date(2026, 1, 5)
        plan = PlanAssembler().build_plan(athlete_id, Goal.FIRST_10K, start, start + timedelta(weeks=16), make_profile())
        build = next(b for b in plan.blocks if b.phase == Phase.BUILD)
        first_build_week = plan.get_week(build.first_week)
        assert all(w.details["phase_week"] == 1 for w in first_build_week)
        assert all(w.phase == Phase.BUILD for w in first_build_week)


class TestEndToEnd:

    def test_first_10k_from_steady_history(self, service, store, athlete_id, as_of):
        plan = service.generate_plan(
            athlete_id, "first_10k", as_of, end_date=as_of + timedelta(weeks=16), as_of=as_of,
        )

        assert [b.phase for b in plan.blocks] == [Phase.BASE, Phase.BUILD, Phase.PEAK, Phase.TAPER]
        assert sum(b.week_count for b in plan.blocks) == 16
        assert plan.weekly_volume_start_km == 30.0
        assert 40 * 0.7 <= plan.weekly_volume_target_km <= 40 * 1.5
        assert plan.weekly_volume_target_km == 30.0
        assert plan.difficulty == Difficulty.BEGINNER

        assert plan.id in store.plans
        assert store.written_weeks == list(range(1, 17))
        stored = store.get_plan(plan.id)
        assert len(stored.workouts) == len(plan.workouts)
        assert all(as_of <= w.scheduled_date < plan.end_date for w in stored.workouts)

    def test_long_history_counts_toward_training_age(self, store, athlete_id, as_of):
        # Two years of running; only the last 90 days feed volume and load
        history = build_weekly_history(as_of, weeks=104)
        service = TrainingPlanService(history=InMemoryHistory(history), store=store)

        profile = service.estimate_fitness(athlete_id, as_of)
        plan = service.generate_plan(
            athlete_id, "first_10k", as_of, end_date=as_of + timedelta(weeks=16), as_of=as_of,
        )

        assert profile.training_age_years == pytest.approx(726 / 365)
        assert profile.current_weekly_volume_km == 30.0
        assert plan.difficulty == Difficulty.INTERMEDIATE
        assert [b.week_count for b in plan.blocks] == [5, 6, 3, 2]

    def test_new_athlete_gets_beginner_plan(self, store, athlete_id, as_of):
        service = TrainingPlanService(history=InMemoryHistory([]), store=store)
        plan = service.generate_plan(athlete_id, "first_5k", as_of, as_of=as_of)
        assert plan.baseline_capacity_index == 35.0
        assert plan.weekly_volume_start_km == 20.0
        assert plan.difficulty == Difficulty.BEGINNER

    def test_unknown_goal_uses_general_fitness(self, service, athlete_id, as_of):
        plan = service.generate_plan(athlete_id, "parkour", as_of, as_of=as_of)
        assert plan.goal == Goal.GENERAL_FITNESS


class TestHorizon:

    def test_default_is_twelve_weeks(self, service, athlete_id, as_of):
        plan = service.generate_plan(athlete_id, "half_marathon", as_of, as_of=as_of)
        assert plan.total_weeks == 12

    def test_race_date_sets_the_horizon(self, steady_history, store, athlete_id, as_of):
        race_id = uuid4()
        races = InMemoryRaceCalendar({race_id: as_of + timedelta(weeks=10)})
        service = TrainingPlanService(InMemoryHistory(steady_history), store, races=races)
        plan = service.generate_plan(athlete_id, "first_10k", as_of, target_race_id=race_id, as_of=as_of)
        assert plan.total_weeks == 10
        assert plan.target_race_id == race_id

    def test_explicit_end_date_wins_over_race(self, steady_history, store, athlete_id, as_of):
        race_id = uuid4()
        races = InMemoryRaceCalendar({race_id: as_of + timedelta(weeks=10)})
        service = TrainingPlanService(InMemoryHistory(steady_history), store, races=races)
        plan = service.generate_plan(
            athlete_id, "first_10k", as_of,
            end_date=as_of + timedelta(weeks=14), target_race_id=race_id, as_of=as_of,
        )
        assert plan.total_weeks == 14

    def test_unknown_race_falls_back_to_default(self, steady_history, store, athlete_id, as_of):
        service = TrainingPlanService(InMemoryHistory(steady_history), store, races=InMemoryRaceCalendar())
        plan = service.generate_plan(athlete_id, "first_10k", as_of, target_race_id=uuid4(), as_of=as_of)
        assert plan.total_weeks == 12


class TestRequestValidation:

    def test_end_before_start(self, service, athlete_id, as_of):
        with pytest.raises(ValidationError):
            service.generate_plan(athlete_id, "first_10k", as_of, end_date=as_of - timedelta(days=1))

    def test_bad_training_day(self, service, athlete_id, as_of):
        with pytest.raises(ValidationError) as exc:
            service.generate_plan(athlete_id, "first_10k", as_of, preferences={"available_days": [7]})
        assert exc.value.field == "preferences.available_days"

    def test_preferences_limit_days(self, service, athlete_id, as_of):
        plan = service.generate_plan(
            athlete_id, "first_10k", as_of, preferences={"available_days": [0, 2, 4, 4]}, as_of=as_of,
        )
        assert {w.day_of_week for w in plan.workouts} <= {0, 2, 4}

    @pytest.mark.parametrize("preferences,expected", [
        (None, False),
        ({"cross_training": True}, True),
    ])
    def test_cross_training_preference_reaches_weeks(
        self, steady_history, store, athlete_id, as_of, preferences, expected,
    ):
        seen = []

        class RecordingGenerator(MicrocycleGenerator):
            def generate(self, *args, cross_training=False, **kwargs):
                seen.append(cross_training)
                return super().generate(*args, cross_training=cross_training, **kwargs)

        service = TrainingPlanService(
            InMemoryHistory(steady_history), store,
            assembler=PlanAssembler(microcycles=RecordingGenerator()),
        )
        plan = service.generate_plan(athlete_id, "first_10k", as_of, preferences=preferences, as_of=as_of)

        assert len(seen) == plan.total_weeks
        assert set(seen) == {expected}


class TestPersistenceFailure:

    def test_week_failure_reports_completed_weeks(self, steady_history, athlete_id, as_of):
        store = InMemoryPlanStore(fail_on_week=3)
        service = TrainingPlanService(InMemoryHistory(steady_history), store)

        with pytest.raises(PlanGenerationFailed) as exc:
            service.generate_plan(athlete_id, "first_10k", as_of, end_date=as_of + timedelta(weeks=16), as_of=as_of)

        assert exc.value.weeks_completed == 2
        assert exc.value.plan_id in store.plans
        assert exc.value.error_code == "PLAN_GENERATION_FAILED"
        assert isinstance(exc.value.__cause__, RuntimeError)
        # Weeks written before the failure stay in place
        assert store.written_weeks == [1, 2]
        assert {w.week_number for w in store.plans[exc.value.plan_id].workouts} == {1, 2}

    def test_header_failure(self, steady_history, athlete_id, as_of):
        store = InMemoryPlanStore(fail_on_create=True)
        service = TrainingPlanService(InMemoryHistory(steady_history), store)

        with pytest.raises(PlanGenerationFailed) as exc:
            service.generate_plan(athlete_id, "first_10k", as_of, as_of=as_of)

        assert exc.value.plan_id is None
        assert exc.value.weeks_completed == 0

    def test_failure_is_logged_with_plan_context(self, steady_history, athlete_id, as_of, caplog):
        store = InMemoryPlanStore(fail_on_week=2)
        service = TrainingPlanService(InMemoryHistory(steady_history), store)

        with caplog.at_level(logging.ERROR, logger="services.training_plan.assembler"):
            with pytest.raises(PlanGenerationFailed):
                service.generate_plan(athlete_id, "first_10k", as_of, as_of=as_of)

        record = caplog.records[-1]
        assert record.extra_fields["week"] == 2
        assert record.extra_fields["athlete_id"] == athlete_id
