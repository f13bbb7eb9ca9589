"""
Application configuration settings.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "SAT Prep API"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API
    API_PREFIX: str = "/api"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Security
    # IMPORTANT: This MUST be set in .env file - no default for security
    JWT_SECRET_KEY: str = Field(..., description="JWT signing secret key (required)")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # Upstream question content source
    OPENSAT_API_URL: str = "https://pinesat.com/api/questions"
    CONTENT_SOURCE_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    # Fetch the question bank during startup; a failed fetch aborts startup
    QUESTION_BANK_PRELOAD: bool = True
    QUESTION_DEFAULT_LIMIT: int = 10
    QUESTION_MAX_LIMIT: int = 200
    # Fixed seed makes filtered question order reproducible (tests, demos)
    QUESTION_SHUFFLE_SEED: Optional[int] = None

    # Identity provider
    GOOGLE_USERINFO_URL: str = "https://www.googleapis.com/oauth2/v3/userinfo"
    IDENTITY_PROVIDER_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    # Database
    # Create tables on startup (local development without migrations)
    DB_AUTO_CREATE: bool = False

    # Sentry Error Tracking
    SENTRY_DSN: str = Field(
        default="",
        description="Sentry DSN for error tracking (leave empty to disable)",
    )
    SENTRY_TRACES_SAMPLE_RATE: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Sentry traces sample rate (0.0-1.0, 0.1 = 10% of transactions)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_question_limits(self) -> Self:
        """Validate that the default question limit fits under the maximum."""
        if not 1 <= self.QUESTION_DEFAULT_LIMIT <= self.QUESTION_MAX_LIMIT:
            raise ValueError(
                "QUESTION_DEFAULT_LIMIT must be between 1 and QUESTION_MAX_LIMIT, "
                f"got {self.QUESTION_DEFAULT_LIMIT} (max {self.QUESTION_MAX_LIMIT})"
            )
        return self


# mypy doesn't understand that pydantic_settings loads required fields from env vars
settings = Settings()  # type: ignore[call-arg]
