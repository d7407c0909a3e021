from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date
from uuid import UUID
from typing import Optional, List


class TrainingPreferences(BaseModel):
    """Athlete scheduling preferences for a generated plan."""
    available_days: List[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6])  # 0=Monday
    cross_training: bool = False  # Easy cross-training may replace short recovery jogs

    @field_validator("available_days")
    @classmethod
    def _check_days(cls, days: List[int]) -> List[int]:
        if not days:
            raise ValueError("at least one training day is required")
        for day in days:
            if not 0 <= day <= 6:
                raise ValueError(f"day of week must be 0-6, got {day}")
        # Keep caller order, drop repeats
        return list(dict.fromkeys(days))


class PlanRequest(BaseModel):
    """Input for plan generation."""
    athlete_id: UUID
    goal: str
    start_date: date
    name: Optional[str] = None
    description: Optional[str] = None
    end_date: Optional[date] = None
    target_race_id: Optional[UUID] = None
    preferences: TrainingPreferences = Field(default_factory=TrainingPreferences)

    @model_validator(mode="after")
    def _check_dates(self) -> "PlanRequest":
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self

