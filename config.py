# config.py
"""Application configuration via Pydantic Settings v2.
Values are read from environment variables and the optional .env file."""
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Bot configuration.
    Defaults reproduce the fixed constants the bot was originally deployed with."""

    # --- Telegram ---
    TELEGRAM_BOT_TOKEN: str = ""
    ADMIN_ID: int = 7612857358
    REQUIRED_CHANNEL: str = "@whiz_t"

    # --- Rate limiting ---
    RATE_LIMIT_COUNT: int = 3
    RATE_LIMIT_WINDOW_SEC: float = 300.0
    SWEEP_INTERVAL_SEC: float = 60.0

    # --- Progress animation ---
    PROGRESS_STEP: int = 10
    PROGRESS_INTERVAL_SEC: float = 0.5

    # --- Application Settings ---
    APP_NAME: str = "relaybot"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = Field(default="logs")
    SHUTDOWN_TIMEOUT: float = 10.0
    STARTUP_DELAY_SEC: float = 0.0

    @property
    def LOG_PATH(self) -> Path:
        return Path(self.LOG_DIR)

    # --- Validation ---
    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("REQUIRED_CHANNEL")
    @classmethod
    def validate_required_channel(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("REQUIRED_CHANNEL must not be empty")
        # numeric chat ids are passed through, public handles get the "@" prefix
        if v.lstrip("-").isdigit() or v.startswith("@"):
            return v
        return f"@{v}"

    @field_validator("RATE_LIMIT_COUNT", "PROGRESS_STEP")
    @classmethod
    def validate_positive_ints(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("PROGRESS_STEP")
    @classmethod
    def validate_progress_step(cls, v: int) -> int:
        if v > 100:
            raise ValueError("PROGRESS_STEP must be <= 100")
        return v

    @field_validator(
        "RATE_LIMIT_WINDOW_SEC",
        "SWEEP_INTERVAL_SEC",
        "PROGRESS_INTERVAL_SEC",
        "SHUTDOWN_TIMEOUT",
    )
    @classmethod
    def validate_positive_numbers(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timing parameters must be positive")
        return v

    # --- Pydantic configuration ---
    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Load fresh settings from the environment and .env."""
    return Settings()


settings = get_settings()
