"""
Training Plan Service

Entry points for the surrounding application. Wires the collaborators
(activity history, race calendar, plan store) to the pure engine.

Usage:
    from core.database import get_db_sync
    from services.training_plan import TrainingPlanService
    from services.training_plan.repository import SqlActivityHistory, SqlPlanStore, SqlRaceCalendar

    db = get_db_sync()
    service = TrainingPlanService(
        history=SqlActivityHistory(db),
        store=SqlPlanStore(db),
        races=SqlRaceCalendar(db),
    )
    plan = service.generate_plan(athlete_id, "half_marathon", date(2026, 1, 5))
    report = service.compute_insights(plan, athlete_id)
    plan = service.optimize_plan(plan.id, athlete_id)
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from core.config import Settings, settings as default_settings
from core.exceptions import NotFoundError, ValidationError
from schemas import PlanRequest, TrainingPreferences

from .assembler import PlanAssembler
from .base import ActivityHistoryProvider, GeneratedPlan, PlanStore, RaceCalendar
from .fitness_estimator import FitnessEstimator, FitnessProfile
from .insights import InsightsEngine, InsightsReport
from .optimizer import PlanOptimizer

logger = logging.getLogger(__name__)


class TrainingPlanService:

    def __init__(
        self,
        history: ActivityHistoryProvider,
        store: PlanStore,
        races: Optional[RaceCalendar] = None,
        settings: Settings = default_settings,
        assembler: Optional[PlanAssembler] = None,
    ):
        self.history = history
        self.store = store
        self.races = races
        self.settings = settings
        self.estimator = FitnessEstimator(
            lookback_days=settings.HISTORY_LOOKBACK_DAYS,
            recovery_window_days=settings.RECOVERY_WINDOW_DAYS,
        )
        self.assembler = assembler or PlanAssembler()
        self.optimizer = PlanOptimizer()
        self.insights = InsightsEngine()

    def generate_plan(
        self,
        athlete_id: UUID,
        goal: str,
        start_date: date,
        end_date: Optional[date] = None,
        target_race_id: Optional[UUID] = None,
        preferences: Optional[Union[TrainingPreferences, Dict[str, Any]]] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> GeneratedPlan:
        """
        Estimate fitness, build the plan and persist it.

        Args:
            as_of: Date the fitness estimate is taken at (default: today)

        Raises:
            ValidationError: bad request parameters
            PlanGenerationFailed: the store failed part-way
        """
        try:
            request = PlanRequest(
                athlete_id=athlete_id,
                goal=goal,
                start_date=start_date,
                end_date=end_date,
                target_race_id=target_race_id,
                preferences=preferences or TrainingPreferences(),
                name=name,
                description=description,
            )
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise ValidationError(error["msg"], field=field) from e

        horizon_end = self.resolve_end_date(request)
        profile = self.estimate_fitness(request.athlete_id, as_of or date.today())

        return self.assembler.generate_plan(
            self.store,
            request.athlete_id,
            request.goal,
            request.start_date,
            horizon_end,
            profile,
            available_days=request.preferences.available_days,
            cross_training=request.preferences.cross_training,
            name=request.name,
            description=request.description,
            target_race_id=request.target_race_id,
        )

    def compute_insights(self, plan: GeneratedPlan, athlete_id: UUID) -> InsightsReport:
        if plan.athlete_id != athlete_id:
            raise NotFoundError("Training plan", str(plan.id))
        activities = self.history.get_activities(athlete_id, since=plan.start_date)
        return self.insights.analyze(plan, activities)

    def optimize_plan(self, plan_id: UUID, athlete_id: UUID, as_of: Optional[date] = None) -> GeneratedPlan:
        """
        Re-estimate fitness and adjust the plan's upcoming workouts.

        Raises:
            NotFoundError: no such plan for this athlete
        """
        profile = self.estimate_fitness(athlete_id, as_of or date.today())
        return self.optimizer.optimize(self.store, plan_id, athlete_id, profile)

    # ------------------------------------------------------------------

    def estimate_fitness(self, athlete_id: UUID, as_of: date) -> FitnessProfile:
        # Full history: training age spans all of it, the estimator applies the lookback window
        activities = self.history.get_activities(athlete_id)
        return self.estimator.estimate(activities, as_of)

    def resolve_end_date(self, request: PlanRequest) -> date:
        """Explicit end date, then target race date, then the default horizon."""
        if request.end_date is not None:
            return request.end_date

        if request.target_race_id is not None and self.races is not None:
            race_date = self.races.get_race_date(request.target_race_id)
            if race_date is not None:
                if race_date <= request.start_date:
                    raise ValidationError("Target race must be after start_date", field="target_race_id")
                return race_date
            logger.warning(f"Race {request.target_race_id} not found; using default plan length")

        return request.start_date + timedelta(weeks=self.settings.DEFAULT_PLAN_WEEKS)
