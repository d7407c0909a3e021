"""
Custom exception classes.

Provides a consistent error structure for callers of the plan engine.
"""
from typing import Optional
from uuid import UUID


class TrainingPlanError(Exception):
    """Base exception with consistent structure."""

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code


class NotFoundError(TrainingPlanError):
    """Resource not found."""

    def __init__(self, resource: str, identifier):
        super().__init__(
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND"
        )
        self.resource = resource
        self.identifier = identifier


class ValidationError(TrainingPlanError):
    """Validation error."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(detail=detail, error_code=error_code)
        self.field = field


class PlanGenerationFailed(TrainingPlanError):
    """
    Persisting a generated plan failed part-way through.

    Weeks written before the failure are left in place; the caller
    decides whether to delete the partial plan.
    """

    def __init__(self, plan_id: Optional[UUID], weeks_completed: int, detail: str):
        super().__init__(
            detail=f"Plan generation failed after {weeks_completed} week(s): {detail}",
            error_code="PLAN_GENERATION_FAILED"
        )
        self.plan_id = plan_id
        self.weeks_completed = weeks_completed
