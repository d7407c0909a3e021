"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the plan engine and
its persistence collaborator.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database Configuration
    DATABASE_URL: str = Field(default="sqlite:///./training_plans.db")
    DB_ECHO: bool = Field(default=False)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")

    # Plan generation
    # How far back the activity history is read for fitness estimation.
    HISTORY_LOOKBACK_DAYS: int = Field(default=90, ge=7)
    # Window used for the recovery score (runs/day and average effort).
    RECOVERY_WINDOW_DAYS: int = Field(default=30, ge=1)
    # Plan horizon when neither an end date nor a race date is known.
    DEFAULT_PLAN_WEEKS: int = Field(default=12, ge=1)


# Global settings instance
settings = Settings()
