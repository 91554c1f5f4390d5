import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_AUTH_SECRET = "liftcoach-dev-secret-change-me"


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is only meant for local development. Set DATABASE_URL to a
    PostgreSQL connection string for deployed environments.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "liftcoach.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    auth_secret_key: str = Field(default=DEV_AUTH_SECRET, validation_alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field(default="HS256", validation_alias="AUTH_ALGORITHM")
    auth_token_expire_days: int = Field(default=30, validation_alias="AUTH_TOKEN_EXPIRE_DAYS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON", description="Write the log file as JSON lines")

    # Workout session defaults
    default_rest_seconds: int = Field(
        default=120,
        validation_alias="DEFAULT_REST_SECONDS",
        description="Rest between sets when the program does not specify one",
    )
    default_target_sets: int = Field(default=3, validation_alias="DEFAULT_TARGET_SETS")
    default_target_reps: int = Field(default=10, validation_alias="DEFAULT_TARGET_REPS")
    tip_debounce_seconds: float = Field(
        default=0.6,
        validation_alias="TIP_DEBOUNCE_SECONDS",
        description="Quiet period before a coaching tip refresh is sent",
    )

    session_idle_ttl_seconds: int = Field(
        default=4 * 60 * 60,
        validation_alias="SESSION_IDLE_TTL_SECONDS",
        description="Running sessions untouched for this long are dropped from memory",
    )

    # Program generation
    generator_exercise_limit: int = Field(
        default=200,
        validation_alias="GENERATOR_EXERCISE_LIMIT",
        description="Number of top-rated exercises offered to the workout generator",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("auth_secret_key")
    @classmethod
    def validate_auth_secret_key(cls, value: str) -> str:
        if not value:
            logger.warning("AUTH_SECRET_KEY is empty. Falling back to the development secret.")
            return DEV_AUTH_SECRET
        if value == DEV_AUTH_SECRET:
            logger.warning("AUTH_SECRET_KEY is not set. Using the development secret, do not deploy like this.")
        return value

    @field_validator("default_rest_seconds", "default_target_sets", "default_target_reps")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Workout defaults must be positive integers")
        return value


settings = Settings()
