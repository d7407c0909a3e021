from sqlalchemy import Column, Integer, Boolean, Float, Date, DateTime, ForeignKey, Text, Index, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid


class Athlete(Base):
    __tablename__ = "athlete"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    display_name = Column(Text, nullable=True)

    activities = relationship("Activity", back_populates="athlete")
    training_plans = relationship("TrainingPlan", back_populates="athlete")


class Activity(Base):
    """
    A completed activity as logged by the athlete.

    Read-only input for fitness estimation; linked from PlannedWorkout
    once a planned session has been executed.
    """
    __tablename__ = "activity"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False)  # Index in __table_args__
    activity_date = Column(Date, nullable=False)
    distance_km = Column(Float, nullable=False, default=0.0)
    duration_minutes = Column(Float, nullable=False)
    avg_heart_rate = Column(Float, nullable=True)
    perceived_effort = Column(Integer, nullable=True)  # RPE 1-10
    is_race = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    athlete = relationship("Athlete", back_populates="activities")

    __table_args__ = (
        Index("ix_activity_athlete_id", "athlete_id"),
        Index("ix_activity_athlete_date", "athlete_id", "activity_date"),
    )


class Race(Base):
    """A target race on the athlete's calendar."""
    __tablename__ = "race"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False)
    name = Column(Text, nullable=False)  # e.g., "Spring 10K"
    race_date = Column(Date, nullable=False)
    distance_km = Column(Float, nullable=True)

    __table_args__ = (
        Index("ix_race_athlete_id", "athlete_id"),
    )


class TrainingPlan(Base):
    """
    Generated training plan for an athlete.

    Periodized into blocks (base, build, peak, taper, recovery). The block
    layout is stored as JSON; workouts live in planned_workout.
    """
    __tablename__ = "training_plan"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False)  # Index in __table_args__
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Plan metadata
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    goal = Column(Text, nullable=False)  # 'first_5k', 'first_10k', 'half_marathon', 'marathon', ...
    status = Column(Text, default="active", nullable=False)  # 'active', 'completed', 'cancelled'
    difficulty = Column(Text, nullable=False)  # 'beginner', 'intermediate', 'advanced'
    target_race_id = Column(Uuid, ForeignKey("race.id"), nullable=True)

    # Plan structure
    plan_start_date = Column(Date, nullable=False)
    plan_end_date = Column(Date, nullable=False)
    total_weeks = Column(Integer, nullable=False)
    # Format: [{"phase": "base", "start_date": "2026-01-05", "end_date": ..., "weeks": 6, ...}, ...]
    blocks = Column(JSON, nullable=True)

    # Fitness baseline (at plan creation)
    baseline_vdot = Column(Float, nullable=True)
    weekly_volume_start_km = Column(Float, nullable=True)
    weekly_volume_target_km = Column(Float, nullable=True)

    athlete = relationship("Athlete", back_populates="training_plans")
    workouts = relationship(
        "PlannedWorkout",
        back_populates="plan",
        order_by="[PlannedWorkout.week_number, PlannedWorkout.day_of_week]",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_training_plan_athlete_id", "athlete_id"),
        Index("ix_training_plan_status", "status"),
    )


class PlannedWorkout(Base):
    """
    A single planned workout within a training plan.

    Represents what the athlete SHOULD do on a given day. Completion is
    recorded by linking the executed Activity.
    """
    __tablename__ = "planned_workout"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("training_plan.id"), nullable=False)  # Index in __table_args__
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False)

    # Scheduling
    scheduled_date = Column(Date, nullable=False)
    week_number = Column(Integer, nullable=False)  # Week 1, 2, 3... of the plan
    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday

    # Workout definition
    workout_type = Column(Text, nullable=False)  # 'recovery', 'easy', 'threshold', 'vo2max', 'tempo', ...
    archetype = Column(Text, nullable=False)  # e.g., 'lactate_threshold', 'hill_repeats'
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    intensity = Column(Text, nullable=False)  # 'easy', 'moderate', 'hard'
    phase = Column(Text, nullable=False)  # 'base', 'build', 'peak', 'taper', 'recovery'

    # Target metrics
    target_duration_minutes = Column(Float, nullable=True)
    target_distance_km = Column(Float, nullable=True)
    target_pace_min_per_km = Column(Float, nullable=True)

    # Segments, zone paces, coaching cues, nutrition guidance, TSS
    details = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)

    # Execution tracking
    completed = Column(Boolean, default=False, nullable=False)
    completed_activity_id = Column(Uuid, ForeignKey("activity.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    plan = relationship("TrainingPlan", back_populates="workouts")
    completed_activity = relationship("Activity")

    __table_args__ = (
        Index("ix_planned_workout_plan_id", "plan_id"),
        Index("ix_planned_workout_plan_week", "plan_id", "week_number"),
    )
